"""
Vocabulary biasing and post-hoc transcript corrections
"""
import re
from typing import Dict, List, Optional, Pattern, Tuple

from interview_analysis.models.interview_domains import get_domain_by_id
from interview_analysis.schemas.data_models import PhraseBoost

DOMAIN_KEYWORD_BOOST = 15.0
DOMAIN_PHRASE_BOOST = 12.0
GENERIC_PHRASE_BOOST = 10.0

GENERIC_TECH_TERMS = [
    "API", "database", "algorithm", "framework", "deployment", "scalability",
    "architecture", "debugging", "testing", "version control", "Git", "cloud",
    "stakeholder", "requirements", "agile",
]

# Terms the recognizer tends to miss in each domain, beyond the catalog keywords
DOMAIN_PHRASES: Dict[str, List[str]] = {
    "software-engineering-frontend": ["DOM", "virtual DOM", "webpack", "Vite", "flexbox", "hooks", "Redux"],
    "software-engineering-backend": ["Django", "FastAPI", "Express", "Redis", "Kafka", "ORM", "idempotent"],
    "software-engineering-fullstack": ["Next.js", "Express", "MongoDB", "REST API", "JWT"],
    "data-science-ml": ["scikit-learn", "pandas", "NumPy", "gradient descent", "overfitting", "XGBoost"],
    "devops-sre": ["Helm", "Prometheus", "Grafana", "Ansible", "Jenkins", "SLO", "SLA"],
    "cloud-architecture": ["EC2", "S3", "Lambda", "VPC", "IAM", "load balancer"],
    "cybersecurity": ["XSS", "SQL injection", "CSRF", "SIEM", "zero trust", "Nmap"],
    "mobile-development": ["SwiftUI", "Jetpack Compose", "Xcode", "Gradle"],
    "database-engineering": ["indexing", "sharding", "normalization", "ACID", "Redis"],
    "network-administration": ["VLAN", "OSPF", "BGP", "DNS", "DHCP", "subnet"],
    "systems-administration": ["Bash", "cron", "systemd", "Group Policy"],
    "database-administration": ["replication", "failover", "T-SQL", "PL/SQL"],
    "qa-testing": ["Cypress", "JUnit", "pytest", "regression testing", "test plan"],
    "product-management": ["OKR", "KPI", "MVP", "A/B testing", "product-market fit"],
    "ui-ux-design": ["Sketch", "Adobe XD", "user journey", "design system", "usability testing"],
}

# Phonetic confusions seen across all domains; longer phrases first
GENERAL_CORRECTIONS: List[Tuple[str, str]] = [
    ("java script", "JavaScript"),
    ("type script", "TypeScript"),
    ("react js", "React.js"),
    ("node js", "Node.js"),
    ("next js", "Next.js"),
    ("vue js", "Vue.js"),
    ("my sequel", "MySQL"),
    ("no sequel", "NoSQL"),
    ("postgre sequel", "PostgreSQL"),
    ("post gres", "Postgres"),
    ("sequel server", "SQL Server"),
    ("get hub", "GitHub"),
    ("git hub", "GitHub"),
    ("dev ops", "DevOps"),
    ("c i c d", "CI/CD"),
    ("a p i", "API"),
    ("rest api", "REST API"),
    ("graph q l", "GraphQL"),
    ("graph ql", "GraphQL"),
    ("mongo db", "MongoDB"),
    ("cooper netties", "Kubernetes"),
    ("cuber netties", "Kubernetes"),
    ("pie torch", "PyTorch"),
    ("tensor flow", "TensorFlow"),
]

DOMAIN_CORRECTIONS: Dict[str, List[Tuple[str, str]]] = {
    "data-science-ml": [
        ("psychic learn", "scikit-learn"),
        ("sci kit learn", "scikit-learn"),
        ("num pie", "NumPy"),
        ("pandas data frame", "pandas DataFrame"),
        ("x g boost", "XGBoost"),
    ],
    "devops-sre": [
        ("terra form", "Terraform"),
        ("prometheus", "Prometheus"),
        ("graph ana", "Grafana"),
        ("docker file", "Dockerfile"),
    ],
    "cybersecurity": [
        ("oh wasp", "OWASP"),
        ("cross site scripting", "cross-site scripting"),
        ("n map", "Nmap"),
    ],
    "mobile-development": [
        ("swift ui", "SwiftUI"),
        ("react native", "React Native"),
        ("flutter", "Flutter"),
    ],
    "cloud-architecture": [
        ("aws lambda", "AWS Lambda"),
        ("azure", "Azure"),
        ("g c p", "GCP"),
    ],
    "network-administration": [
        ("tcp ip", "TCP/IP"),
        ("v lan", "VLAN"),
    ],
    "ui-ux-design": [
        ("fig ma", "Figma"),
        ("ui ux", "UI/UX"),
    ],
}


def _compile(table: List[Tuple[str, str]]) -> List[Tuple[Pattern, str]]:
    ordered = sorted(table, key=lambda pair: len(pair[0]), reverse=True)
    return [
        (re.compile(r"\b" + re.escape(wrong) + r"\b", re.IGNORECASE), right)
        for wrong, right in ordered
    ]


_GENERAL_PATTERNS = _compile(GENERAL_CORRECTIONS)
_DOMAIN_PATTERNS = {domain_id: _compile(table) for domain_id, table in DOMAIN_CORRECTIONS.items()}


def build_phrase_boosts(domain_id: Optional[str] = None) -> Tuple[PhraseBoost, ...]:
    """
    Phrase hints for the recognizer.

    Known domain: catalog keywords plus the domain's extra phrases.
    Unknown or missing domain: the generic technical list.
    """
    domain = get_domain_by_id(domain_id)
    if domain is None:
        return tuple(PhraseBoost(term, GENERIC_PHRASE_BOOST) for term in GENERIC_TECH_TERMS)

    boosts = []
    seen = set()
    for term in domain.keywords:
        if term.lower() not in seen:
            seen.add(term.lower())
            boosts.append(PhraseBoost(term, DOMAIN_KEYWORD_BOOST))
    for term in DOMAIN_PHRASES.get(domain.id, []):
        if term.lower() not in seen:
            seen.add(term.lower())
            boosts.append(PhraseBoost(term, DOMAIN_PHRASE_BOOST))
    return tuple(boosts)


def apply_corrections(text: str, domain_id: Optional[str] = None) -> str:
    """Apply the general then the domain-specific find/replace table"""
    if not text:
        return text

    corrected = text
    for pattern, replacement in _GENERAL_PATTERNS:
        corrected = pattern.sub(replacement, corrected)
    for pattern, replacement in _DOMAIN_PATTERNS.get(domain_id or "", []):
        corrected = pattern.sub(replacement, corrected)
    return corrected
