"""
Interview domain catalog used for prompts and vocabulary biasing
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class InterviewDomain:
    id: str
    name: str
    category: str
    description: str
    keywords: List[str] = field(default_factory=list)
    levels: List[str] = field(default_factory=list)


_STANDARD_LEVELS = ["Junior", "Mid-Level", "Senior", "Lead"]

INTERVIEW_DOMAINS: Dict[str, List[InterviewDomain]] = {
    "technical": [
        InterviewDomain(
            id="software-engineering-frontend",
            name="Software Engineering - Frontend",
            category="Technical",
            description="Frontend development with React, Vue, Angular, etc.",
            keywords=["HTML", "CSS", "JavaScript", "React", "Vue", "Angular", "TypeScript", "UI/UX",
                      "Responsive Design"],
            levels=_STANDARD_LEVELS,
        ),
        InterviewDomain(
            id="software-engineering-backend",
            name="Software Engineering - Backend",
            category="Technical",
            description="Backend development with Node.js, Python, Java, etc.",
            keywords=["Node.js", "Python", "Java", "API", "Database", "Microservices", "REST", "GraphQL"],
            levels=_STANDARD_LEVELS,
        ),
        InterviewDomain(
            id="software-engineering-fullstack",
            name="Software Engineering - Full-Stack",
            category="Technical",
            description="Full-stack development across frontend and backend",
            keywords=["MERN", "MEAN", "Full-Stack", "JavaScript", "TypeScript", "Database", "API"],
            levels=["Mid-Level", "Senior", "Lead"],
        ),
        InterviewDomain(
            id="data-science-ml",
            name="Data Science & Machine Learning",
            category="Technical",
            description="Data analysis, ML models, and AI applications",
            keywords=["Python", "Machine Learning", "Deep Learning", "TensorFlow", "PyTorch", "Data Analysis",
                      "Statistics"],
            levels=_STANDARD_LEVELS,
        ),
        InterviewDomain(
            id="devops-sre",
            name="DevOps & Site Reliability Engineering",
            category="Technical",
            description="Infrastructure, automation, and reliability",
            keywords=["Docker", "Kubernetes", "CI/CD", "AWS", "Terraform", "Monitoring", "Linux"],
            levels=_STANDARD_LEVELS,
        ),
        InterviewDomain(
            id="cloud-architecture",
            name="Cloud Architecture",
            category="Technical",
            description="Designing and implementing cloud solutions",
            keywords=["AWS", "Azure", "GCP", "Cloud Architecture", "Serverless", "Cloud Security"],
            levels=["Mid-Level", "Senior", "Lead", "Architect"],
        ),
        InterviewDomain(
            id="cybersecurity",
            name="Cybersecurity & Ethical Hacking",
            category="Technical",
            description="Security testing, penetration testing, and defense",
            keywords=["Security", "Penetration Testing", "Cryptography", "Network Security", "OWASP"],
            levels=_STANDARD_LEVELS,
        ),
        InterviewDomain(
            id="mobile-development",
            name="Mobile Development",
            category="Technical",
            description="iOS, Android, and cross-platform mobile apps",
            keywords=["iOS", "Android", "React Native", "Flutter", "Mobile", "Swift", "Kotlin"],
            levels=_STANDARD_LEVELS,
        ),
        InterviewDomain(
            id="database-engineering",
            name="Database Engineering",
            category="Technical",
            description="Database design, optimization, and administration",
            keywords=["SQL", "NoSQL", "PostgreSQL", "MongoDB", "Database Design", "Query Optimization"],
            levels=_STANDARD_LEVELS,
        ),
    ],
    "it_infrastructure": [
        InterviewDomain(
            id="it-support",
            name="IT Support & Help Desk",
            category="IT & Infrastructure",
            description="Technical support and troubleshooting",
            keywords=["Help Desk", "Troubleshooting", "Customer Service", "Windows", "Support"],
            levels=["Entry-Level", "Level 1", "Level 2", "Level 3"],
        ),
        InterviewDomain(
            id="network-administration",
            name="Network Administration",
            category="IT & Infrastructure",
            description="Network management and configuration",
            keywords=["Networking", "Cisco", "TCP/IP", "Routing", "Switching", "Firewall"],
            levels=_STANDARD_LEVELS,
        ),
        InterviewDomain(
            id="systems-administration",
            name="Systems Administration",
            category="IT & Infrastructure",
            description="Server and system management",
            keywords=["Linux", "Windows Server", "System Administration", "Active Directory", "PowerShell"],
            levels=_STANDARD_LEVELS,
        ),
        InterviewDomain(
            id="database-administration",
            name="Database Administration",
            category="IT & Infrastructure",
            description="Database management and maintenance",
            keywords=["DBA", "SQL Server", "Oracle", "MySQL", "Database", "Backup"],
            levels=_STANDARD_LEVELS,
        ),
        InterviewDomain(
            id="it-project-management",
            name="IT Project Management",
            category="IT & Infrastructure",
            description="Managing IT projects and teams",
            keywords=["Project Management", "Agile", "Scrum", "JIRA", "Leadership"],
            levels=["Junior PM", "PM", "Senior PM", "Program Manager"],
        ),
        InterviewDomain(
            id="business-analysis",
            name="Business Analysis",
            category="IT & Infrastructure",
            description="Requirements gathering and business processes",
            keywords=["Business Analysis", "Requirements", "Process Improvement", "Documentation"],
            levels=["Junior BA", "BA", "Senior BA", "Lead BA"],
        ),
        InterviewDomain(
            id="qa-testing",
            name="Quality Assurance & Testing",
            category="IT & Infrastructure",
            description="Software testing and quality assurance",
            keywords=["QA", "Testing", "Automation", "Selenium", "Test Cases", "Bug Tracking"],
            levels=["Junior QA", "QA Engineer", "Senior QA", "QA Lead"],
        ),
    ],
    "business": [
        InterviewDomain(
            id="product-management",
            name="Product Management",
            category="Business & Management",
            description="Product strategy and roadmap planning",
            keywords=["Product Management", "Product Strategy", "Roadmap", "User Research", "Analytics"],
            levels=["Associate PM", "PM", "Senior PM", "Director"],
        ),
        InterviewDomain(
            id="ui-ux-design",
            name="UI/UX Design",
            category="Business & Management",
            description="User interface and experience design",
            keywords=["UI Design", "UX Design", "Figma", "User Research", "Prototyping", "Wireframing"],
            levels=["Junior Designer", "Designer", "Senior Designer", "Lead Designer"],
        ),
    ],
}


def get_all_domains() -> List[InterviewDomain]:
    domains = []
    for category_domains in INTERVIEW_DOMAINS.values():
        domains.extend(category_domains)
    return domains


def get_domain_by_id(domain_id: Optional[str]) -> Optional[InterviewDomain]:
    if not domain_id:
        return None
    for domain in get_all_domains():
        if domain.id == domain_id:
            return domain
    return None


def get_domains_by_category(category: str) -> List[InterviewDomain]:
    return INTERVIEW_DOMAINS.get(category, [])


def search_domains(keyword: str) -> List[InterviewDomain]:
    """Case-insensitive match on name, description or any keyword"""
    needle = keyword.lower()
    return [
        domain for domain in get_all_domains()
        if needle in domain.name.lower()
        or needle in domain.description.lower()
        or any(needle in k.lower() for k in domain.keywords)
    ]
