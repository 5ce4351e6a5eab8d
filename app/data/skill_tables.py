"""Static keyword tables used by the matching engine.

All tables are read-only (``MappingProxyType`` of tuples) and are built once per
process through :func:`load_skill_tables`; callers receive the same
:class:`SkillTables` instance and never mutate it.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping


# framework / library -> languages and domains it implies
_FRAMEWORK_LANGUAGES: dict[str, tuple[str, ...]] = {
    # JavaScript front-end
    "react": ("javascript", "typescript", "js", "jsx", "tsx", "frontend", "ui"),
    "react.js": ("javascript", "typescript", "js", "jsx", "tsx", "react"),
    "angular": ("javascript", "typescript", "js", "ts", "frontend", "ui"),
    "vue": ("javascript", "typescript", "js", "frontend", "ui"),
    "vue.js": ("javascript", "typescript", "js", "vue"),
    "svelte": ("javascript", "typescript", "js", "frontend"),
    "nextjs": ("javascript", "typescript", "react", "js", "jsx", "tsx", "ssr"),
    "next.js": ("javascript", "typescript", "react", "nextjs"),
    "gatsby": ("javascript", "typescript", "react", "js", "jsx", "tsx"),
    "nuxt": ("javascript", "typescript", "vue", "ssr"),
    "ember": ("javascript", "typescript", "frontend"),
    # JVM
    "spring": ("java", "kotlin", "backend", "api"),
    "spring boot": ("java", "kotlin", "spring", "backend", "api"),
    "springboot": ("java", "kotlin", "spring", "backend"),
    "spring mvc": ("java", "kotlin", "spring", "web"),
    "hibernate": ("java", "kotlin", "orm", "database"),
    "jpa": ("java", "kotlin", "orm", "database", "hibernate"),
    "junit": ("java", "kotlin", "testing"),
    "mockito": ("java", "kotlin", "testing"),
    "maven": ("java", "build", "dependency"),
    "gradle": ("java", "kotlin", "build", "dependency"),
    # Node
    "express": ("javascript", "typescript", "node", "nodejs", "node.js", "backend", "api"),
    "express.js": ("javascript", "typescript", "node", "express", "backend"),
    "nestjs": ("javascript", "typescript", "node", "nodejs", "node.js", "backend"),
    "nest.js": ("typescript", "node", "nestjs", "backend"),
    "koa": ("javascript", "typescript", "node", "backend"),
    "fastify": ("javascript", "typescript", "node", "backend"),
    "hapi": ("javascript", "node", "backend"),
    # Python
    "django": ("python", "backend", "web", "orm"),
    "flask": ("python", "backend", "web", "api"),
    "fastapi": ("python", "backend", "api", "async"),
    "pyramid": ("python", "backend", "web"),
    "tornado": ("python", "backend", "async"),
    "pytest": ("python", "testing"),
    "sqlalchemy": ("python", "orm", "database"),
    # PHP
    "laravel": ("php", "backend", "web", "mvc"),
    "symfony": ("php", "backend", "web"),
    "codeigniter": ("php", "backend", "web"),
    "yii": ("php", "backend", "web"),
    # Ruby
    "rails": ("ruby", "backend", "web", "mvc"),
    "ruby on rails": ("ruby", "rails", "backend"),
    "sinatra": ("ruby", "backend", "web"),
    # .NET
    "asp.net": ("c#", "csharp", ".net", "dotnet", "backend", "web"),
    "asp.net core": ("c#", "csharp", ".net", "dotnet", "backend"),
    "aspnet": ("c#", "csharp", ".net", "dotnet", "backend", "web"),
    "dotnet": ("c#", "csharp", ".net", "f#", "vb.net"),
    ".net": ("c#", "csharp", "dotnet", "backend"),
    "xamarin": ("c#", "csharp", ".net", "dotnet", "mobile"),
    "blazor": ("c#", "csharp", ".net", "frontend"),
    "entity framework": ("c#", "csharp", ".net", "orm", "database"),
    # Mobile
    "react native": ("javascript", "typescript", "react", "js", "jsx", "tsx", "mobile"),
    "flutter": ("dart", "mobile", "cross-platform"),
    "android": ("java", "kotlin", "mobile"),
    "ios": ("swift", "objective-c", "mobile"),
    "ionic": ("javascript", "typescript", "angular", "mobile"),
    "cordova": ("javascript", "html", "css", "mobile"),
    "phonegap": ("javascript", "html", "mobile"),
    # Data / ML
    "tensorflow": ("python", "java", "javascript", "ml", "ai"),
    "pytorch": ("python", "ml", "ai", "deep learning"),
    "keras": ("python", "tensorflow", "ml", "ai"),
    "scikit-learn": ("python", "ml", "data science"),
    "pandas": ("python", "data analysis", "data science"),
    "numpy": ("python", "data science", "numerical"),
    # Databases
    "mongodb": ("nosql", "database", "json"),
    "mysql": ("sql", "database", "relational"),
    "postgresql": ("sql", "database", "relational"),
    "redis": ("nosql", "cache", "database"),
    "cassandra": ("nosql", "database", "distributed"),
    "elasticsearch": ("search", "nosql", "database"),
    # Cloud / DevOps
    "aws": ("cloud", "devops", "infrastructure"),
    "azure": ("cloud", "devops", "infrastructure", "microsoft"),
    "gcp": ("cloud", "devops", "infrastructure", "google"),
    "docker": ("containerization", "devops", "deployment"),
    "kubernetes": ("container orchestration", "devops", "docker", "k8s"),
    "jenkins": ("ci/cd", "devops", "automation"),
    "terraform": ("infrastructure as code", "devops", "cloud"),
    # Testing
    "jest": ("javascript", "typescript", "testing", "react"),
    "mocha": ("javascript", "typescript", "testing"),
    "chai": ("javascript", "typescript", "testing"),
    "cypress": ("javascript", "typescript", "testing", "e2e"),
    "selenium": ("testing", "automation", "e2e"),
    # State management
    "redux": ("javascript", "typescript", "react", "state management"),
    "mobx": ("javascript", "typescript", "react", "state management"),
    "vuex": ("javascript", "vue", "state management"),
    "ngrx": ("typescript", "angular", "state management"),
    # Build tools
    "webpack": ("javascript", "build", "bundler"),
    "vite": ("javascript", "typescript", "build", "bundler"),
    "parcel": ("javascript", "build", "bundler"),
    "rollup": ("javascript", "build", "bundler"),
}

# Technology keywords looked for in GitHub URLs and project metadata.
GITHUB_TECH_KEYWORDS: tuple[str, ...] = (
    "java", "spring", "react", "angular", "vue", "javascript", "typescript",
    "python", "django", "flask", "node", "express", "php", "laravel", "ruby",
    "rails", "c#", ".net", "go", "rust", "kotlin", "swift", "android", "ios",
    "mobile", "web", "frontend", "backend", "fullstack", "database", "sql",
    "nosql", "mongodb", "postgresql", "mysql", "oracle", "aws", "azure", "gcp",
    "cloud", "docker", "kubernetes", "devops", "cicd",
)

# host substring -> (what the host suggests, skills it hints at)
PORTFOLIO_HOST_HINTS: tuple[tuple[tuple[str, ...], str, tuple[str, ...]], ...] = (
    (("github.io",), "GitHub Pages hosting suggests familiarity with Git and static web deployment.", ("Git", "HTML", "CSS")),
    (("netlify",), "Netlify hosting suggests experience with modern deployment pipelines.", ("JAMstack", "CI/CD")),
    (("vercel",), "Vercel hosting suggests experience with Next.js or React.", ("Next.js", "React")),
    (("heroku",), "Heroku hosting suggests familiarity with cloud application deployment.", ("Cloud", "Deployment")),
    (
        ("wix", "squarespace", "wordpress"),
        "The portfolio is built with a website builder, which says little about coding skills.",
        (),
    ),
)

# keyword in the portfolio URL -> skills it hints at
PORTFOLIO_URL_KEYWORDS: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (("react", "jsx"), ("React", "JavaScript")),
    (("angular",), ("Angular", "TypeScript")),
    (("vue",), ("Vue.js", "JavaScript")),
    (("node",), ("Node.js", "JavaScript")),
    (("java",), ("Java",)),
    (("spring",), ("Spring", "Java")),
    (("python",), ("Python",)),
)

# keyword in certification name / issuer -> skill domains it validates
_CERTIFICATION_SKILLS: dict[str, tuple[str, ...]] = {
    "aws": ("AWS", "Cloud", "DevOps", "Amazon Web Services", "S3", "EC2", "Lambda"),
    "azure": ("Azure", "Cloud", "Microsoft", "DevOps"),
    "google cloud": ("GCP", "Cloud", "Google Cloud", "DevOps"),
    "java": ("Java", "Spring", "J2EE", "JVM", "Backend"),
    "oracle": ("Java", "Oracle", "SQL", "Database"),
    "spring": ("Spring", "Spring Boot", "Java", "Backend"),
    "microsoft": (".NET", "C#", "Azure", "SQL Server"),
    "scrum": ("Agile", "Scrum", "Project Management"),
    "agile": ("Agile", "Scrum", "Project Management"),
    "pmp": ("Project Management", "Leadership"),
    "security": ("Cybersecurity", "Security", "InfoSec", "Network Security"),
    "comptia": ("IT", "Security", "Networking"),
    "cisco": ("Networking", "CCNA", "Network Security"),
    "salesforce": ("Salesforce", "CRM", "Cloud"),
    "react": ("React", "JavaScript", "Frontend", "Web Development"),
    "angular": ("Angular", "JavaScript", "TypeScript", "Frontend"),
    "vue": ("Vue.js", "JavaScript", "Frontend"),
    "javascript": ("JavaScript", "Frontend", "Web Development"),
    "python": ("Python", "Data Science", "Backend"),
    "machine learning": ("Machine Learning", "AI", "Data Science", "Python"),
    "data science": ("Data Science", "Machine Learning", "Statistics", "Python", "R"),
    "docker": ("Docker", "Containers", "DevOps", "Kubernetes"),
    "kubernetes": ("Kubernetes", "Containers", "DevOps", "Docker"),
}

# keywords in a missing job skill -> certification worth recommending
CERTIFICATION_RECOMMENDATIONS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("java",), "Oracle Certified Professional Java SE Developer"),
    (("aws", "cloud"), "AWS Certified Developer Associate"),
    (("spring",), "Spring Professional Certification"),
    (("react", "frontend"), "Meta React Developer Certification"),
    (("python",), "Python Institute PCEP or PCAP Certification"),
    (("data", "analytics"), "Google Data Analytics Professional Certificate"),
    (("agile", "scrum"), "Professional Scrum Master (PSM) Certification"),
)

# keyword in a job title / description -> skills the role exercises
_ROLE_SKILLS: dict[str, tuple[str, ...]] = {
    "developer": ("Programming", "Software Development", "Coding", "Debugging"),
    "software": ("Programming", "Software Development", "Coding", "Debugging"),
    "engineer": ("Engineering", "Problem Solving", "Technical Design"),
    "frontend": ("HTML", "CSS", "JavaScript", "UI/UX", "React", "Angular", "Vue"),
    "backend": ("Server-side", "API", "Database", "Java", "Python", "PHP", "Node.js"),
    "fullstack": ("Frontend", "Backend", "Full-stack", "End-to-end"),
    "web": ("Web Development", "HTML", "CSS", "JavaScript", "Web Applications"),
    "mobile": ("Mobile Development", "iOS", "Android", "React Native", "Flutter"),
    "data": ("Data Analysis", "Data Science", "SQL", "Statistics", "Analytics"),
    "devops": ("CI/CD", "Docker", "Kubernetes", "Cloud", "Infrastructure"),
    "qa": ("Testing", "Quality Assurance", "Test Automation"),
    "test": ("Testing", "Quality Assurance", "Test Automation"),
    "project": ("Project Management", "Leadership", "Coordination", "Planning"),
    "manager": ("Management", "Leadership", "Team Lead", "Supervision"),
    "design": ("UI/UX Design", "User Experience", "Graphic Design"),
    "analyst": ("Analysis", "Requirements", "Business Analysis"),
    "security": ("Cybersecurity", "Information Security", "Security Analysis"),
    "cloud": ("AWS", "Azure", "GCP", "Cloud Computing", "Cloud Architecture"),
    "database": ("SQL", "NoSQL", "Database Design", "Data Modeling"),
    "ai": ("Artificial Intelligence", "Machine Learning", "Deep Learning"),
    "machine learning": ("ML", "AI", "Data Science", "Algorithms"),
}

PASSION_WORDS: tuple[str, ...] = (
    "passionate", "love", "enjoy", "excited", "enthusiastic", "dedicated",
    "committed", "motivated", "eager", "interested", "fascinated",
)


@dataclass(frozen=True)
class SkillTables:
    framework_languages: Mapping[str, tuple[str, ...]]
    github_tech_keywords: tuple[str, ...]
    portfolio_host_hints: tuple[tuple[tuple[str, ...], str, tuple[str, ...]], ...]
    portfolio_url_keywords: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...]
    certification_skills: Mapping[str, tuple[str, ...]]
    certification_recommendations: tuple[tuple[tuple[str, ...], str], ...]
    role_skills: Mapping[str, tuple[str, ...]]
    passion_words: tuple[str, ...]


@lru_cache
def load_skill_tables() -> SkillTables:
    return SkillTables(
        framework_languages=MappingProxyType(dict(_FRAMEWORK_LANGUAGES)),
        github_tech_keywords=GITHUB_TECH_KEYWORDS,
        portfolio_host_hints=PORTFOLIO_HOST_HINTS,
        portfolio_url_keywords=PORTFOLIO_URL_KEYWORDS,
        certification_skills=MappingProxyType(dict(_CERTIFICATION_SKILLS)),
        certification_recommendations=CERTIFICATION_RECOMMENDATIONS,
        role_skills=MappingProxyType(dict(_ROLE_SKILLS)),
        passion_words=PASSION_WORDS,
    )
