from typing import Any

from pydantic import BaseModel

from models.cv import CVData


class HealthResponse(BaseModel):
    status: str = "ok"
    gemini_configured: bool = False


class ChatResponse(BaseModel):
    message: str
    action: dict[str, Any] | None = None
    applied: bool = False
    cv: CVData


class TextResponse(BaseModel):
    text: str
