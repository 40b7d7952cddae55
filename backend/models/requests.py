from pydantic import Field

from config import settings
from models.cv import CamelModel, CVTemplateType, FormalityLevel, TemplateConfig


class ChatRequest(CamelModel):
    message: str = Field(..., max_length=settings.max_message_length, description="User message for the assistant")


class CreateCVRequest(CamelModel):
    title: str | None = Field(None, max_length=200)


class CVSettingsUpdate(CamelModel):
    """Top-level CV fields edited outside the sections."""
    title: str | None = Field(None, max_length=200)
    template_type: CVTemplateType | None = None
    formality: FormalityLevel | None = None
    language: str | None = None
    custom_template: TemplateConfig | None = None


class OptimizeSummaryRequest(CamelModel):
    text: str | None = Field(None, max_length=5000, description="Defaults to the CV profile summary")
    role_goal: str | None = Field(None, max_length=200, description="Defaults to the latest experience role")
    context: str = "resumen profesional"
    max_lines: int = Field(4, ge=1, le=20)


class AnalyzeJobRequest(CamelModel):
    job_description: str = Field(..., max_length=10000, description="Job description text")
