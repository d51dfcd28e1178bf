from interview_analysis.models.encoding_strategies import DEFAULT_STRATEGIES, codec_for_mime, strategies_for
from interview_analysis.models.interview_domains import (
    get_all_domains,
    get_domain_by_id,
    get_domains_by_category,
    search_domains,
)
from interview_analysis.models.vocabulary import (
    DOMAIN_KEYWORD_BOOST,
    DOMAIN_PHRASE_BOOST,
    GENERIC_TECH_TERMS,
    apply_corrections,
    build_phrase_boosts,
)
from interview_analysis.schemas.data_models import AudioEncoding


# --- Vocabulary biasing ---

def test_domain_boosts_include_keywords_and_extra_phrases():
    boosts = {b.phrase: b.boost for b in build_phrase_boosts("data-science-ml")}

    for keyword in get_domain_by_id("data-science-ml").keywords:
        assert boosts[keyword] == DOMAIN_KEYWORD_BOOST
    assert boosts["scikit-learn"] == DOMAIN_PHRASE_BOOST


def test_domain_boosts_have_no_duplicates():
    phrases = [b.phrase.lower() for b in build_phrase_boosts("software-engineering-backend")]

    assert len(phrases) == len(set(phrases))


def test_unknown_domain_uses_generic_terms():
    assert [b.phrase for b in build_phrase_boosts("underwater-basket-weaving")] == GENERIC_TECH_TERMS
    assert [b.phrase for b in build_phrase_boosts(None)] == GENERIC_TECH_TERMS


# --- Corrections ---

def test_general_corrections_are_case_insensitive():
    assert apply_corrections("We deployed on Cooper Netties with Java Script") == \
        "We deployed on Kubernetes with JavaScript"


def test_corrections_respect_word_boundaries():
    assert apply_corrections("the rapid pie torchbearer") == "the rapid pie torchbearer"


def test_domain_corrections_only_for_their_domain():
    text = "I trained it with psychic learn"

    assert apply_corrections(text, "data-science-ml") == "I trained it with scikit-learn"
    assert apply_corrections(text, "devops-sre") == text


def test_corrections_on_empty_text():
    assert apply_corrections("") == ""


# --- Strategy table ---

def test_default_strategy_order():
    assert [(s.codec, s.sample_rate_hertz) for s in DEFAULT_STRATEGIES] == [
        (AudioEncoding.WEBM_OPUS, 48000),
        (AudioEncoding.OGG_OPUS, 48000),
        (AudioEncoding.WEBM_OPUS, 16000),
    ]


def test_browser_recording_uses_default_table():
    assert strategies_for("audio/webm;codecs=opus") == DEFAULT_STRATEGIES
    assert strategies_for(None) == DEFAULT_STRATEGIES


def test_known_container_puts_native_codec_first():
    strategies = strategies_for("audio/wav")

    assert strategies[0].codec is AudioEncoding.LINEAR16
    assert strategies[0].sample_rate_hertz is None
    assert strategies[1:] == DEFAULT_STRATEGIES
    assert codec_for_mime("audio/x-flac") is AudioEncoding.FLAC


# --- Domain catalog ---

def test_domain_lookup():
    domain = get_domain_by_id("software-engineering-frontend")

    assert domain.name == "Software Engineering - Frontend"
    assert "React" in domain.keywords
    assert get_domain_by_id("nope") is None
    assert get_domain_by_id(None) is None


def test_domain_ids_are_unique():
    ids = [d.id for d in get_all_domains()]

    assert len(ids) == len(set(ids))


def test_domain_search_and_category():
    assert any(d.id == "devops-sre" for d in search_domains("kubernetes"))
    assert get_domains_by_category("technical")
    assert get_domains_by_category("astrology") == []
