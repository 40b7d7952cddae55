"""Per-owner CV workspace: the only place CV state is mutated.

The workspace keeps an in-memory list of the owner's CVs and writes through
to the store. Every change, manual or AI-driven, goes through ``update`` so it
is timestamped and persisted the same way. Updates are optimistic: the new
state is applied locally first and the previous snapshot is restored if the
store rejects it.
"""

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass

from config import settings
from models.actions import AIActionResponse
from models.cv import CVData, PartialCV, build_cv
from services import action_reconciler, document_import, gemini_client, response_extractor
from services.cv_mutations import touch
from services.cv_store import CVNotFoundError, CVStore, InMemoryCVStore

logger = logging.getLogger(__name__)


@dataclass
class ChatResult:
    reply: AIActionResponse
    cv: CVData
    applied: bool


class CVWorkspace:
    def __init__(self, store: CVStore, owner_id: str) -> None:
        self.store = store
        self.owner_id = owner_id
        self._cvs: dict[str, CVData] = {}
        self._loaded = False
        # Mutations apply one at a time, in the order they were issued
        self._lock = asyncio.Lock()
        # Held across the model call so chats apply in the order they were issued
        self._chat_lock = asyncio.Lock()

    async def load(self) -> None:
        if self._loaded:
            return
        cvs = await self.store.list(self.owner_id)
        self._cvs = {cv.id: cv for cv in cvs}
        self._loaded = True
        logger.info("Loaded %d CVs for owner %s", len(cvs), self.owner_id)

    async def list(self) -> list[CVData]:
        await self.load()
        return sorted(self._cvs.values(), key=lambda cv: cv.last_modified, reverse=True)

    async def get(self, cv_id: str) -> CVData:
        await self.load()
        if cv_id not in self._cvs:
            raise CVNotFoundError(cv_id)
        return self._cvs[cv_id]

    async def create(self, initial: PartialCV | None = None, title: str | None = None) -> CVData:
        await self.load()
        async with self._lock:
            created = await self.store.create(self.owner_id, build_cv(initial, title))
            self._cvs[created.id] = created
        return created

    async def update(self, cv: CVData) -> CVData:
        """Stamp, apply locally, persist; restore the previous state on failure."""
        async with self._lock:
            return await self._update(cv)

    async def _update(self, cv: CVData) -> CVData:
        await self.load()
        previous = self._cvs.get(cv.id)
        if previous is None:
            raise CVNotFoundError(cv.id)

        stamped = touch(cv)
        self._cvs[cv.id] = stamped
        try:
            await self.store.update(cv.id, stamped)
        except Exception:
            logger.error("Persisting CV %s failed; restoring previous state", cv.id)
            self._cvs[cv.id] = previous
            raise
        return stamped

    async def delete(self, cv_id: str) -> None:
        await self.load()
        async with self._lock:
            previous = self._cvs.pop(cv_id, None)
            if previous is None:
                raise CVNotFoundError(cv_id)
            try:
                await self.store.delete(cv_id)
            except Exception:
                logger.error("Deleting CV %s failed; restoring it", cv_id)
                self._cvs[cv_id] = previous
                raise

    async def chat(self, cv_id: str, message: str) -> ChatResult:
        """Send ``message`` to the assistant and apply any action it returns.

        Chats run one at a time in the order they were issued, each seeing the
        CV as left by the previous one. Manual edits are not held up by the
        model call; the action is reconciled against whatever state is current
        when the reply arrives.

        Raises ValueError for a blank message; callers must not dispatch one.
        Raises CVNotFoundError if the CV is gone before or after the model call.
        """
        if not message.strip():
            raise ValueError("Message is empty")

        async with self._chat_lock:
            cv = await self.get(cv_id)
            raw = await gemini_client.chat_with_ai(message.strip(), cv)
            reply = response_extractor.extract_response(raw)
            if reply.action is None:
                return ChatResult(reply=reply, cv=cv, applied=False)

            async with self._lock:
                current = await self.get(cv_id)
                updated = action_reconciler.apply_action(current, reply.action)
                if updated is current:
                    return ChatResult(reply=reply, cv=current, applied=False)
                saved = await self._update(updated)
        return ChatResult(reply=reply, cv=saved, applied=True)

    async def import_cv(self, data_b64: str, mime_type: str, title: str | None = None) -> CVData:
        partial = await document_import.import_document(data_b64, mime_type)
        return await self.create(partial, title)


_store: CVStore = InMemoryCVStore()
_workspaces: OrderedDict[str, CVWorkspace] = OrderedDict()


def get_workspace(owner_id: str) -> CVWorkspace:
    """Workspace for ``owner_id`` bound to the process-wide store.

    At most ``settings.max_workspaces`` are cached; the least recently used
    one is dropped and reloads from the store on its next request.
    """
    if owner_id in _workspaces:
        _workspaces.move_to_end(owner_id)
        return _workspaces[owner_id]
    workspace = CVWorkspace(_store, owner_id)
    _workspaces[owner_id] = workspace
    while len(_workspaces) > settings.max_workspaces:
        evicted, _ = _workspaces.popitem(last=False)
        logger.info("Evicted cached workspace for owner %s", evicted)
    return workspace


def reset(store: CVStore | None = None) -> None:
    """Drop cached workspaces and swap the store. Useful for testing."""
    global _store
    _store = store or InMemoryCVStore()
    _workspaces.clear()
