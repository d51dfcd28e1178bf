"""
Encoding strategies tried, in order, for each transcription backend
"""
from typing import Optional, Tuple

from interview_analysis.schemas.data_models import AudioEncoding, EncodingStrategy

# Browser recordings arrive as WebM/Opus at 48kHz
DEFAULT_STRATEGIES: Tuple[EncodingStrategy, ...] = (
    EncodingStrategy(AudioEncoding.WEBM_OPUS, 48000, "WebM Opus at native 48kHz"),
    EncodingStrategy(AudioEncoding.OGG_OPUS, 48000, "Ogg Opus at 48kHz"),
    EncodingStrategy(AudioEncoding.WEBM_OPUS, 16000, "WebM Opus at reduced 16kHz"),
)

_MIME_CODECS = {
    "audio/wav": AudioEncoding.LINEAR16,
    "audio/x-wav": AudioEncoding.LINEAR16,
    "audio/wave": AudioEncoding.LINEAR16,
    "audio/flac": AudioEncoding.FLAC,
    "audio/x-flac": AudioEncoding.FLAC,
    "audio/mpeg": AudioEncoding.MP3,
    "audio/mp3": AudioEncoding.MP3,
    "audio/ogg": AudioEncoding.OGG_OPUS,
}


def codec_for_mime(mime_type: Optional[str]) -> Optional[AudioEncoding]:
    if not mime_type:
        return None
    base = mime_type.split(";")[0].strip().lower()
    return _MIME_CODECS.get(base)


def strategies_for(mime_type: Optional[str] = None) -> Tuple[EncodingStrategy, ...]:
    """
    Return the strategy table for a payload.

    A recognized container MIME puts its native codec first; the sample rate
    is left to the backend (read from the file header). The default table
    follows unchanged.
    """
    codec = codec_for_mime(mime_type)
    if codec is None:
        return DEFAULT_STRATEGIES

    native = EncodingStrategy(codec, None, f"{codec.value} from {mime_type} header")
    return (native,) + DEFAULT_STRATEGIES
