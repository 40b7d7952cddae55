"""Mutation primitives shared by manual edits and AI actions.

Every function returns a new CVData and leaves its input untouched, so a
caller can always roll back by re-applying the snapshot it started from.
"""

from typing import Any

from models.cv import LIST_SECTIONS, SECTION_ITEM_MODELS, CamelModel, CVData, PersonalData, utc_now_iso


class UnknownSectionError(ValueError):
    """Raised when a list-section name is not one of the six known sections."""


def _check_list_section(section: str) -> None:
    if section not in LIST_SECTIONS:
        raise UnknownSectionError(f"Unknown section: {section}")


def _merge(model: CamelModel, fields: dict[str, Any]) -> CamelModel:
    # Re-validate so nested values (e.g. personal.design) come back as models
    return type(model).model_validate({**model.model_dump(), **fields})


def touch(cv: CVData) -> CVData:
    """Copy of ``cv`` with ``last_modified`` set to now."""
    return cv.model_copy(update={"last_modified": utc_now_iso()})


def update_personal(cv: CVData, fields: dict[str, Any]) -> CVData:
    personal: PersonalData = _merge(cv.personal, fields)
    return cv.model_copy(update={"personal": personal})


def add_item(cv: CVData, section: str, item: CamelModel) -> CVData:
    _check_list_section(section)
    items = [*getattr(cv, section), item]
    return cv.model_copy(update={section: items})


def find_item(cv: CVData, section: str, item_id: str) -> CamelModel | None:
    _check_list_section(section)
    for item in getattr(cv, section):
        if item.id == item_id:
            return item
    return None


def update_item(cv: CVData, section: str, item_id: str, fields: dict[str, Any]) -> CVData:
    """Shallow-merge ``fields`` into the item with ``item_id``.

    The item keeps its id and position. Without a match the section is
    returned unchanged.
    """
    _check_list_section(section)
    fields = {k: v for k, v in fields.items() if k != "id"}
    items = [
        _merge(item, fields) if item.id == item_id else item
        for item in getattr(cv, section)
    ]
    return cv.model_copy(update={section: items})


def remove_item(cv: CVData, section: str, item_id: str) -> CVData:
    _check_list_section(section)
    items = [item for item in getattr(cv, section) if item.id != item_id]
    return cv.model_copy(update={section: items})


def new_item(section: str, fields: dict[str, Any], item_id: str) -> CamelModel:
    """Build a complete item for ``section``; missing fields take defaults."""
    _check_list_section(section)
    model = SECTION_ITEM_MODELS[section]
    return model.model_validate({**fields, "id": item_id})
