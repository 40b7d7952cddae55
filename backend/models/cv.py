"""CV data model: the canonical representation of a résumé.

Attributes are snake_case in Python and camelCase on the wire, which is the
shape stored by the persistence backend and embedded in Gemini prompts.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads either spelling and dumps camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class CVTemplateType(str, Enum):
    ATS = "ATS"
    MODERN = "MODERN"
    CLASSIC = "CLASSIC"
    HARVARD = "HARVARD"
    CUSTOM = "CUSTOM"


class FormalityLevel(str, Enum):
    VERY_FORMAL = "VERY_FORMAL"
    PROFESSIONAL = "PROFESSIONAL"
    CREATIVE = "CREATIVE"


SkillType = Literal["Technical", "Soft"]
LanguageLevel = Literal["Básico", "Intermedio", "Avanzado", "Nativo"]

# Proportional indicator shown next to each language
LANGUAGE_LEVEL_PERCENT: dict[str, int] = {
    "Nativo": 100,
    "Avanzado": 85,
    "Intermedio": 60,
    "Básico": 30,
}

PRESENT_LABEL = "Presente"


class DesignOverride(CamelModel):
    """Per-CV color/font override set from the personal section."""
    primary_color: str | None = None
    font_family: str | None = None


class PersonalData(CamelModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    city: str = ""
    country: str = ""
    linkedin: str = ""
    website: str = ""
    profile_summary: str = ""
    photo_url: str | None = None
    design: DesignOverride | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Experience(CamelModel):
    id: str
    role: str = ""
    company: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    current: bool = False
    description: str = ""
    achievements: list[str] | None = None

    @property
    def display_end_date(self) -> str:
        # A current role always reads as "present", whatever end date was typed
        return PRESENT_LABEL if self.current else self.end_date


class Education(CamelModel):
    id: str
    degree: str = ""
    institution: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str | None = None


class Skill(CamelModel):
    id: str
    name: str = ""
    type: SkillType = "Technical"


class Language(CamelModel):
    id: str
    name: str = ""
    level: LanguageLevel = "Básico"

    @property
    def proficiency_percent(self) -> int:
        return LANGUAGE_LEVEL_PERCENT[self.level]


class Certification(CamelModel):
    id: str
    name: str = ""
    issuer: str = ""
    date: str = ""


class Project(CamelModel):
    id: str
    name: str = ""
    description: str = ""
    link: str | None = None


class TemplateStyles(CamelModel):
    primary_color: str = "#6366f1"
    background_color: str = "#ffffff"
    font_family: str = "Inter, sans-serif"
    body_color: str = "#334155"
    title_color: str = "#0f172a"


class TemplateLayout(CamelModel):
    type: Literal["single", "sidebar-left", "sidebar-right"] = "sidebar-left"
    sidebar_width: str | None = None
    sidebar_sections: list[str] = ["personal", "skills", "languages", "certifications"]
    main_sections: list[str] = ["profile", "experience", "education", "projects"]


class TemplateConfig(CamelModel):
    """Layout and styling for a CUSTOM template."""
    id: str
    name: str = "Custom"
    author: str = ""
    is_public: bool = False
    styles: TemplateStyles = TemplateStyles()
    layout: TemplateLayout = TemplateLayout()


class PartialCV(CamelModel):
    """Sections extracted from an uploaded document, used to seed a new CV."""
    personal: PersonalData = PersonalData()
    experience: list[Experience] = []
    education: list[Education] = []
    skills: list[Skill] = []
    languages: list[Language] = []
    certifications: list[Certification] = []
    projects: list[Project] = []


class CVData(PartialCV):
    id: str = ""
    title: str = ""
    last_modified: str = ""
    template_type: CVTemplateType = CVTemplateType.ATS
    formality: FormalityLevel = FormalityLevel.PROFESSIONAL
    language: str = "Español (Perú)"
    custom_template: TemplateConfig | None = None


SECTIONS = (
    "personal",
    "experience",
    "education",
    "skills",
    "languages",
    "certifications",
    "projects",
)

SECTION_ITEM_MODELS: dict[str, type[CamelModel]] = {
    "experience": Experience,
    "education": Education,
    "skills": Skill,
    "languages": Language,
    "certifications": Certification,
    "projects": Project,
}

LIST_SECTIONS = tuple(SECTION_ITEM_MODELS)

DEFAULT_CV_TITLE = "Nuevo Currículum"


def new_item_id() -> str:
    return uuid.uuid4().hex


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_cv_skeleton() -> CVData:
    """Empty CV with default template, formality and language."""
    return CVData()


def build_cv(initial: PartialCV | None = None, title: str | None = None) -> CVData:
    """Merge (possibly imported) partial data onto the default skeleton.

    Personal data is merged field by field so anything the import left out
    keeps its skeleton default. The id is left empty for the store to assign.
    """
    cv = new_cv_skeleton()
    cv.title = title or DEFAULT_CV_TITLE
    cv.last_modified = utc_now_iso()
    if initial is None:
        return cv

    cv.personal = PersonalData.model_validate(
        {**cv.personal.model_dump(), **initial.personal.model_dump(exclude_unset=True)}
    )
    for section in LIST_SECTIONS:
        setattr(cv, section, list(getattr(initial, section)))
    return cv
