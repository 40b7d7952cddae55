"""Persistence collaborator for CVs.

The hosted database is external; ``CVStore`` is the interface the workspace
depends on and ``InMemoryCVStore`` is the process-local implementation used by
default and in tests.
"""

import logging
import uuid
from typing import Protocol

from models.cv import CVData

logger = logging.getLogger(__name__)


class CVNotFoundError(KeyError):
    """No CV with the given id."""


class CVStore(Protocol):
    async def list(self, owner_id: str) -> list[CVData]: ...

    async def get(self, cv_id: str) -> CVData: ...

    async def create(self, owner_id: str, cv: CVData) -> CVData: ...

    async def update(self, cv_id: str, cv: CVData) -> None: ...

    async def delete(self, cv_id: str) -> None: ...


class InMemoryCVStore:
    """Dict-backed store. Copies on the way in and out, like a real database."""

    def __init__(self) -> None:
        self._cvs: dict[str, CVData] = {}
        self._owners: dict[str, str] = {}

    async def list(self, owner_id: str) -> list[CVData]:
        return [
            cv.model_copy(deep=True)
            for cv_id, cv in self._cvs.items()
            if self._owners[cv_id] == owner_id
        ]

    async def get(self, cv_id: str) -> CVData:
        if cv_id not in self._cvs:
            raise CVNotFoundError(cv_id)
        return self._cvs[cv_id].model_copy(deep=True)

    async def create(self, owner_id: str, cv: CVData) -> CVData:
        cv_id = uuid.uuid4().hex[:9]
        while cv_id in self._cvs:
            cv_id = uuid.uuid4().hex[:9]
        stored = cv.model_copy(deep=True, update={"id": cv_id})
        self._cvs[cv_id] = stored
        self._owners[cv_id] = owner_id
        logger.info("Created CV %s for owner %s", cv_id, owner_id)
        return stored.model_copy(deep=True)

    async def update(self, cv_id: str, cv: CVData) -> None:
        if cv_id not in self._cvs:
            raise CVNotFoundError(cv_id)
        # The id is fixed at creation
        self._cvs[cv_id] = cv.model_copy(deep=True, update={"id": cv_id})

    async def delete(self, cv_id: str) -> None:
        if cv_id not in self._cvs:
            raise CVNotFoundError(cv_id)
        del self._cvs[cv_id]
        del self._owners[cv_id]
