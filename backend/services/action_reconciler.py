"""Apply an extracted AI action to CV state.

Uses the same primitives as manual edits (services.cv_mutations). Anything
that cannot be applied cleanly is a logged no-op: unknown sections, invalid
payloads, personal creates and ids that do not exist in the CV. A
hallucinated id must never touch an unrelated item.

The returned CV is not timestamped or persisted; callers route it through
the workspace update path like any manual edit.
"""

import logging
from typing import Any

from pydantic import ValidationError

from models.actions import AnyAction, PersonalAction, parse_action
from models.cv import CVData, new_item_id
from services import cv_mutations

logger = logging.getLogger(__name__)


def apply_action(cv: CVData, action: AnyAction | dict[str, Any] | None) -> CVData:
    """Return the CV after ``action``; the same object when nothing changed."""
    parsed = parse_action(action) if action is not None else None
    if parsed is None:
        return cv

    logger.info("Applying AI action %s on %s (id=%s)", parsed.type, parsed.section, parsed.id)
    try:
        if parsed.type == "create":
            return _create(cv, parsed)
        if parsed.type == "update":
            return _update(cv, parsed)
        return _delete(cv, parsed)
    except ValidationError as e:
        logger.warning("AI action produced an invalid %s item: %s", parsed.section, e)
        return cv


def _unique_id(cv: CVData, section: str, requested: str | None) -> str:
    taken = {item.id for item in getattr(cv, section)}
    if requested and requested not in taken:
        return requested
    item_id = new_item_id()
    while item_id in taken:
        item_id = new_item_id()
    return item_id


def _create(cv: CVData, action: AnyAction) -> CVData:
    if isinstance(action, PersonalAction):
        logger.warning("Ignoring create on personal section (singleton)")
        return cv
    if action.data is None:
        logger.warning("Ignoring create on %s without data", action.section)
        return cv

    fields = action.data.changes()
    item_id = _unique_id(cv, action.section, fields.pop("id", None))
    item = cv_mutations.new_item(action.section, fields, item_id)
    return cv_mutations.add_item(cv, action.section, item)


def _update(cv: CVData, action: AnyAction) -> CVData:
    if action.data is None:
        logger.warning("Ignoring update on %s without data", action.section)
        return cv
    changes = action.data.changes()
    changes.pop("id", None)
    if not changes:
        logger.info("Ignoring update on %s with no changes", action.section)
        return cv
    if isinstance(action, PersonalAction):
        return cv_mutations.update_personal(cv, changes)

    if not action.id:
        logger.warning("Ignoring update on %s without id", action.section)
        return cv
    if cv_mutations.find_item(cv, action.section, action.id) is None:
        logger.info("No %s item with id %s; update skipped", action.section, action.id)
        return cv
    return cv_mutations.update_item(cv, action.section, action.id, changes)


def _delete(cv: CVData, action: AnyAction) -> CVData:
    if isinstance(action, PersonalAction):
        logger.warning("Ignoring delete on personal section (singleton)")
        return cv
    if not action.id:
        logger.warning("Ignoring delete on %s without id", action.section)
        return cv
    if cv_mutations.find_item(cv, action.section, action.id) is None:
        logger.info("No %s item with id %s; delete skipped", action.section, action.id)
        return cv
    return cv_mutations.remove_item(cv, action.section, action.id)
