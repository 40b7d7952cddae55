"""Google Gemini API wrapper with error handling.

Chat-style helpers never raise: failures become a fixed assistant message.
Document parsing is the exception and lets GeminiError propagate, because a
failed import must be reported rather than silently producing an empty CV.
"""

import json
import logging

from google import genai
from google.genai import types

from config import settings
from models.cv import CVData
from services import prompt_builder

logger = logging.getLogger(__name__)

CHAT_FALLBACK_MESSAGE = "Error al conectar con el asistente."
CHAT_EMPTY_MESSAGE = "No pude procesar tu solicitud."
JOB_ANALYSIS_FALLBACK_MESSAGE = "Error al analizar la vacante."
JOB_ANALYSIS_EMPTY_MESSAGE = "No se detectaron mejoras inmediatas."

_client: genai.Client | None = None


class GeminiError(Exception):
    """The generative backend could not produce a usable reply."""


class EmptyReplyError(GeminiError):
    """The call succeeded but the reply carried no text."""


def get_client() -> genai.Client | None:
    global _client
    if not settings.gemini_api_key:
        logger.warning("No GEMINI_API_KEY set - Gemini features disabled")
        return None
    if _client is None:
        _client = genai.Client(api_key=settings.gemini_api_key)
    return _client


async def generate_text(
    contents: str | list,
    system_instruction: str,
    model: str | None = None,
    json_output: bool = False,
    temperature: float | None = None,
) -> str:
    """Send one request to Gemini and return the reply text.

    Raises GeminiError when the client is not configured, the call fails, or
    the reply carries no text.
    """
    client = get_client()
    if client is None:
        raise GeminiError("Gemini client not configured")

    config = types.GenerateContentConfig(
        system_instruction=system_instruction,
        temperature=settings.chat_temperature if temperature is None else temperature,
        response_mime_type="application/json" if json_output else None,
    )
    try:
        response = await client.aio.models.generate_content(
            model=model or settings.fast_model,
            contents=contents,
            config=config,
        )
    except Exception as e:
        raise GeminiError(f"Gemini API error: {e}") from e

    text = (response.text or "").strip()
    if not text:
        raise EmptyReplyError("Gemini returned an empty reply")
    return text


async def chat_with_ai(message: str, cv: CVData) -> str:
    """Ask the assistant about ``cv``. Returns raw reply text, never raises."""
    try:
        return await generate_text(
            prompt_builder.build_chat_prompt(message, cv),
            prompt_builder.CHAT_SYSTEM_PROMPT,
            model=settings.chat_model,
        )
    except EmptyReplyError:
        return CHAT_EMPTY_MESSAGE
    except GeminiError as e:
        logger.error("Chat request failed: %s", e)
        return CHAT_FALLBACK_MESSAGE


async def parse_cv_document(data: bytes, mime_type: str) -> dict:
    """Extract CV sections from a document. Raises GeminiError on any failure."""
    contents = [
        types.Part.from_bytes(data=data, mime_type=mime_type),
        types.Part.from_text(text=prompt_builder.IMPORT_USER_INSTRUCTION),
    ]
    text = await generate_text(
        contents,
        prompt_builder.IMPORT_SYSTEM_PROMPT,
        model=settings.fast_model,
        json_output=True,
        temperature=settings.import_temperature,
    )
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise GeminiError(f"Failed to parse Gemini response as JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise GeminiError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


async def optimize_summary(
    text: str,
    role_goal: str,
    context: str = "resumen profesional",
    max_lines: int = 4,
) -> str:
    """Rewrite a summary or description for a target role; input on failure."""
    try:
        return await generate_text(
            prompt_builder.build_optimize_prompt(text, role_goal, context, max_lines),
            prompt_builder.OPTIMIZE_SYSTEM_PROMPT,
        )
    except GeminiError as e:
        logger.error("Gemini optimization error: %s", e)
        return text


async def analyze_job_description(job_description: str, cv: CVData) -> str:
    try:
        return await generate_text(
            prompt_builder.build_job_analysis_prompt(job_description, cv),
            prompt_builder.OPTIMIZE_SYSTEM_PROMPT,
        )
    except EmptyReplyError:
        return JOB_ANALYSIS_EMPTY_MESSAGE
    except GeminiError as e:
        logger.error("Job analysis failed: %s", e)
        return JOB_ANALYSIS_FALLBACK_MESSAGE
