"""Turn raw assistant text into a message plus an optional action.

The model is told to answer either with a bare JSON envelope
(``{"message": ..., "action": ...}``) or with plain advisory text, but it
sometimes wraps the JSON in a code fence or in explanatory prose. Extraction
tries a strict parse of the whole reply first, then falls back to the
first-``{`` / last-``}`` boundary heuristic.

Known limitation of the heuristic: any stray brace outside the envelope
(a second object, or a ``}`` in trailing prose) widens the candidate past the
envelope, the parse fails and the whole reply is treated as advisory text.
Braces inside JSON string values are fine as long as the envelope is the
outermost object.
"""

import json
import logging
import re
from typing import Any

from models.actions import AIActionResponse

logger = logging.getLogger(__name__)

ACTION_FALLBACK_MESSAGE = "Acción realizada."

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def strip_code_fence(text: str) -> str:
    """Interior of the first fenced block, or ``text`` when there is none."""
    match = _FENCE_RE.search(text)
    return match.group(1).strip() if match else text


def find_json_candidate(text: str) -> str | None:
    """Substring from the first ``{`` to the last ``}``, if both exist in order."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or start >= end:
        return None
    return text[start:end + 1]


def strict_json_object(text: str) -> dict[str, Any] | None:
    """Parse ``text`` as a JSON object, or None."""
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _is_envelope(obj: dict[str, Any] | None) -> bool:
    return obj is not None and ("message" in obj or "action" in obj)


def _find_envelope(text: str) -> dict[str, Any] | None:
    parsed = strict_json_object(text.strip())
    if _is_envelope(parsed):
        return parsed

    candidate = find_json_candidate(strip_code_fence(text))
    if candidate is None:
        return None
    parsed = strict_json_object(candidate)
    return parsed if _is_envelope(parsed) else None


def extract_response(text: str) -> AIActionResponse:
    """Normalize a raw reply. Never raises; anything unusable is advisory text."""
    envelope = _find_envelope(text)
    if envelope is None:
        return AIActionResponse(message=text)

    message = envelope.get("message")
    if not isinstance(message, str) or not message.strip():
        message = ACTION_FALLBACK_MESSAGE

    action = envelope.get("action")
    if action is not None and not isinstance(action, dict):
        logger.warning("Discarding non-object action in reply: %r", action)
        action = None

    return AIActionResponse(message=message, action=action)
