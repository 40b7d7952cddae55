"""Document import: uploaded CV file -> PartialCV via Gemini.

Unlike chat, every failure here raises DocumentImportError so the caller can
tell the user the import failed instead of creating an empty CV.
"""

import base64
import binascii
import logging
from typing import Any

from pydantic import ValidationError

from models.cv import LIST_SECTIONS, PartialCV, new_item_id
from services import gemini_client
from services.gemini_client import GeminiError

logger = logging.getLogger(__name__)

ACCEPTED_MIME_TYPES = frozenset({
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
})

EXTENSION_MIME_TYPES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


class DocumentImportError(Exception):
    """The document could not be turned into CV data."""


def encode_document(content: bytes) -> str:
    """Base64 text for transport."""
    return base64.b64encode(content).decode("ascii")


def guess_mime_type(filename: str | None, declared: str | None) -> str | None:
    """Declared media type if accepted, else one inferred from the extension."""
    if declared in ACCEPTED_MIME_TYPES:
        return declared
    if filename:
        for ext, mime in EXTENSION_MIME_TYPES.items():
            if filename.lower().endswith(ext):
                return mime
    return declared


def _decode(data_b64: str) -> bytes:
    # Tolerate data-URL prefixes ("data:application/pdf;base64,....")
    if data_b64.startswith("data:") and "," in data_b64:
        data_b64 = data_b64.split(",", 1)[1]
    try:
        return base64.b64decode(data_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DocumentImportError("Document is not valid base64") from e


def _ensure_item_ids(items: Any, section: str) -> list:
    """Give every dict item a non-empty id unique within its section."""
    if not isinstance(items, list):
        raise DocumentImportError(f"Section {section!r} is not a list")
    seen: set[str] = set()
    shaped = []
    for item in items:
        if not isinstance(item, dict):
            raise DocumentImportError(f"Item in {section!r} is not an object")
        item_id = item.get("id")
        if isinstance(item_id, int):
            item_id = str(item_id)
        if not isinstance(item_id, str) or not item_id.strip() or item_id in seen:
            item_id = new_item_id()
        seen.add(item_id)
        fields = {k: v for k, v in item.items() if v is not None}
        shaped.append({**fields, "id": item_id})
    return shaped


def shape_partial_cv(raw: dict[str, Any]) -> PartialCV:
    """Validate model output into a PartialCV; absent fields default to empty."""
    shaped: dict[str, Any] = {}
    personal = raw.get("personal")
    if personal is not None:
        if not isinstance(personal, dict):
            raise DocumentImportError("Section 'personal' is not an object")
        # Model output sometimes carries nulls for missing strings
        shaped["personal"] = {k: v for k, v in personal.items() if v is not None}
    for section in LIST_SECTIONS:
        items = raw.get(section)
        if items is not None:
            shaped[section] = _ensure_item_ids(items, section)

    try:
        return PartialCV.model_validate(shaped)
    except ValidationError as e:
        raise DocumentImportError(f"Extracted data does not match the CV shape: {e}") from e


async def import_document(data_b64: str, mime_type: str) -> PartialCV:
    """Extract a PartialCV from a base64-encoded PDF/DOC/DOCX document."""
    if mime_type not in ACCEPTED_MIME_TYPES:
        raise DocumentImportError(f"Unsupported document type: {mime_type}")
    content = _decode(data_b64)
    if not content:
        raise DocumentImportError("Document is empty")

    try:
        raw = await gemini_client.parse_cv_document(content, mime_type)
    except GeminiError as e:
        logger.error("Error parsing CV document: %s", e)
        raise DocumentImportError(str(e)) from e

    partial = shape_partial_cv(raw)
    logger.info(
        "Imported CV: %d experience, %d education, %d skills",
        len(partial.experience), len(partial.education), len(partial.skills),
    )
    return partial
