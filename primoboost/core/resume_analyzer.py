"""
Resume Analyzer for PrimoBoost

Extracts the signals the interview room personalizes on (skills, years of
experience, seniority, domains and projects) from resume text and stores
them as a ``user_resumes`` record.
"""

import logging
import re
from pathlib import Path

from primoboost.config.settings import get_settings
from primoboost.models.resume import ExperienceLevel, ParsedResume, ResumeProject, UserResume
from primoboost.storage.database import Database

logger = logging.getLogger(__name__)

RESUMES_TABLE = "user_resumes"

ALLOWED_EXTENSIONS = {".txt", ".md", ".pdf", ".docx"}

SKILL_CATALOGUE = [
    "Python", "Java", "JavaScript", "TypeScript", "C++", "C#", "Go", "Rust", "Kotlin", "Swift",
    "SQL", "PostgreSQL", "MySQL", "MongoDB", "Redis",
    "React", "Angular", "Vue", "Node.js", "Express", "Django", "Flask", "FastAPI", "Spring",
    "AWS", "Azure", "GCP", "Docker", "Kubernetes", "Terraform", "Git", "Linux",
    "Machine Learning", "Deep Learning", "TensorFlow", "PyTorch", "Pandas", "NumPy",
    "Spark", "Kafka", "GraphQL", "REST",
]

DOMAIN_KEYWORDS = {
    "Frontend": ["react", "angular", "vue", "css", "html", "frontend"],
    "Backend": ["api", "django", "flask", "fastapi", "spring", "node.js", "backend", "microservice"],
    "Data Science": ["machine learning", "pandas", "numpy", "tensorflow", "pytorch", "data science"],
    "DevOps": ["docker", "kubernetes", "terraform", "ci/cd", "devops", "jenkins"],
    "Cloud": ["aws", "azure", "gcp", "cloud"],
    "Mobile": ["android", "ios", "kotlin", "swift", "flutter", "react native"],
}

_YEARS_PATTERN = re.compile(r"(\d{1,2})\+?\s*(?:years?|yrs?)", re.IGNORECASE)
_PROJECTS_HEADING = re.compile(r"^\s*#*\s*projects?\s*:?\s*$", re.IGNORECASE)
_SECTION_HEADING = re.compile(
    r"^\s*#*\s*(experience|work experience|education|skills|certifications|achievements|summary)\s*:?\s*$",
    re.IGNORECASE,
)


class ResumeValidationError(ValueError):
    """The uploaded file is not an acceptable resume."""
    pass


def experience_level_for_years(years: int) -> ExperienceLevel:
    if years < 1:
        return ExperienceLevel.ENTRY
    if years < 3:
        return ExperienceLevel.JUNIOR
    if years < 6:
        return ExperienceLevel.MID
    if years < 10:
        return ExperienceLevel.SENIOR
    if years < 15:
        return ExperienceLevel.LEAD
    return ExperienceLevel.EXECUTIVE


def detect_skills(text: str) -> list[str]:
    found = []
    for skill in SKILL_CATALOGUE:
        # Word boundaries do not work for names ending in symbols (C++, C#)
        pattern = rf"(?<![\w.]){re.escape(skill)}(?![\w+#])"
        if re.search(pattern, text, re.IGNORECASE):
            found.append(skill)
    return found


def detect_years(text: str) -> int:
    """Largest "N years" mention, 0 when there is none."""
    return max((int(m) for m in _YEARS_PATTERN.findall(text)), default=0)


def detect_domains(text: str) -> list[str]:
    lowered = text.lower()
    return [
        domain for domain, keywords in DOMAIN_KEYWORDS.items()
        if any(keyword in lowered for keyword in keywords)
    ]


def detect_projects(text: str) -> list[ResumeProject]:
    """Entries listed under a "Projects" heading."""
    projects = []
    in_projects = False
    for line in text.splitlines():
        if _PROJECTS_HEADING.match(line):
            in_projects = True
            continue
        if not in_projects:
            continue
        if _SECTION_HEADING.match(line):
            break

        entry = line.strip().lstrip("-*• ").strip()
        if not entry:
            continue
        name, _, description = entry.partition(":")
        if not description:
            name, _, description = entry.partition(" - ")
        projects.append(ResumeProject(name=name.strip(), description=description.strip() or None))
    return projects


class ResumeAnalyzer:
    """Rule-based resume analysis."""

    def __init__(self, database: Database):
        self.database = database
        self.settings = get_settings()

    def validate_upload(self, file_name: str, size: int) -> None:
        """
        Raises:
            ResumeValidationError: If the file is too large or of the wrong type
        """
        max_bytes = self.settings.max_resume_bytes
        if size > max_bytes:
            raise ResumeValidationError(f"File size must be less than {max_bytes // (1024 * 1024)}MB")
        if Path(file_name).suffix.lower() not in ALLOWED_EXTENSIONS:
            raise ResumeValidationError(
                f"Unsupported file type. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
            )

    async def analyze(self, user_id: str, text: str, file_name: str | None = None) -> UserResume:
        """Analyze resume text and store the resulting record."""
        if not text.strip():
            raise ResumeValidationError("Resume text is empty")

        years = detect_years(text)
        parsed = ParsedResume(projects=detect_projects(text))
        row = await self.database.insert(RESUMES_TABLE, {
            "user_id": user_id,
            "file_name": file_name,
            "raw_text": text,
            "skills_detected": detect_skills(text),
            "experience_level": experience_level_for_years(years).value,
            "years_of_experience": years,
            "domains": detect_domains(text),
            "parsed_data": parsed.model_dump(),
            "analysis_status": "completed",
        })

        resume = UserResume(**row)
        logger.info(
            f"Analyzed resume {resume.id}: {len(resume.skills_detected)} skills, "
            f"{years} years, level {resume.experience_level.value}"
        )
        return resume

    async def get_resume(self, resume_id: str) -> UserResume | None:
        row = await self.database.get(RESUMES_TABLE, resume_id)
        return UserResume(**row) if row else None
