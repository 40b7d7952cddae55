"""AI actions: model-proposed mutations against one CV section.

An action is a closed tagged union keyed by ``section``. Each variant's
``data`` is a partial version of that section's item, so unknown fields and
out-of-range enum values are rejected before anything is merged.
"""

import logging
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from models.cv import CamelModel, DesignOverride, LanguageLevel, SkillType

logger = logging.getLogger(__name__)

ActionType = Literal["create", "update", "delete"]


class _Patch(CamelModel):
    model_config = ConfigDict(extra="forbid")

    def changes(self) -> dict[str, Any]:
        """Only the fields the caller actually sent with a value; null means unchanged."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class PersonalPatch(_Patch):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    city: str | None = None
    country: str | None = None
    linkedin: str | None = None
    website: str | None = None
    profile_summary: str | None = None
    photo_url: str | None = None
    design: DesignOverride | None = None


class _ItemPatch(_Patch):
    id: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_int_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class ExperiencePatch(_ItemPatch):
    role: str | None = None
    company: str | None = None
    location: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    current: bool | None = None
    description: str | None = None
    achievements: list[str] | None = None


class EducationPatch(_ItemPatch):
    degree: str | None = None
    institution: str | None = None
    location: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    description: str | None = None


class SkillPatch(_ItemPatch):
    name: str | None = None
    type: SkillType | None = None


class LanguagePatch(_ItemPatch):
    name: str | None = None
    level: LanguageLevel | None = None


class CertificationPatch(_ItemPatch):
    name: str | None = None
    issuer: str | None = None
    date: str | None = None


class ProjectPatch(_ItemPatch):
    name: str | None = None
    description: str | None = None
    link: str | None = None


SECTION_PATCH_MODELS: dict[str, type[_Patch]] = {
    "personal": PersonalPatch,
    "experience": ExperiencePatch,
    "education": EducationPatch,
    "skills": SkillPatch,
    "languages": LanguagePatch,
    "certifications": CertificationPatch,
    "projects": ProjectPatch,
}


class _ActionBase(BaseModel):
    type: ActionType
    id: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_int_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class PersonalAction(_ActionBase):
    section: Literal["personal"]
    data: PersonalPatch | None = None


class ExperienceAction(_ActionBase):
    section: Literal["experience"]
    data: ExperiencePatch | None = None


class EducationAction(_ActionBase):
    section: Literal["education"]
    data: EducationPatch | None = None


class SkillAction(_ActionBase):
    section: Literal["skills"]
    data: SkillPatch | None = None


class LanguageAction(_ActionBase):
    section: Literal["languages"]
    data: LanguagePatch | None = None


class CertificationAction(_ActionBase):
    section: Literal["certifications"]
    data: CertificationPatch | None = None


class ProjectAction(_ActionBase):
    section: Literal["projects"]
    data: ProjectPatch | None = None


AnyAction = Union[
    PersonalAction,
    ExperienceAction,
    EducationAction,
    SkillAction,
    LanguageAction,
    CertificationAction,
    ProjectAction,
]
AIAction = Annotated[AnyAction, Field(discriminator="section")]

_action_adapter: TypeAdapter[AnyAction] = TypeAdapter(AIAction)


def parse_action(raw: Any) -> AnyAction | None:
    """Validate a raw action dict. Returns None when it cannot be applied."""
    if isinstance(raw, _ActionBase):
        return raw
    try:
        return _action_adapter.validate_python(raw)
    except ValidationError as e:
        logger.warning("Rejected AI action %r: %s", raw, e.errors(include_url=False))
        return None


class AIActionResponse(BaseModel):
    """Normalized assistant reply: user-facing text plus an optional raw action."""
    message: str
    action: dict[str, Any] | None = None
