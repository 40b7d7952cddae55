"""Shared dependencies for API routes."""

from fastapi import Depends, Header

from services import workspace
from services.workspace import CVWorkspace

DEFAULT_OWNER_ID = "local"


def get_owner_id(x_owner_id: str | None = Header(None, max_length=128)) -> str:
    # Authentication is handled upstream; the owner arrives as a header
    return x_owner_id or DEFAULT_OWNER_ID


def get_workspace(owner_id: str = Depends(get_owner_id)) -> CVWorkspace:
    return workspace.get_workspace(owner_id)
