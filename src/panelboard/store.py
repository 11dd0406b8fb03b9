"""PanelStore: in-memory panel list, current selection, loading and error state."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from .client import PanelApiClient
from .errors import RemoteError
from .types import Panel, PanelDraft, PanelPage

logger = logging.getLogger(__name__)

# Lock key shared by creates: they have no id yet but must not race each other.
_CREATE_KEY = "__create__"


def describe_error(exc: BaseException, fallback: str) -> str:
    """Human-readable message for a failed call: remote message, else exception text, else fallback."""
    if isinstance(exc, RemoteError) and exc.remote_message:
        return exc.remote_message
    return str(exc) or fallback


class PanelStore:
    """
    Single source of truth for what the UI shows. Owned explicitly and passed
    to whatever needs it. Fields are only mutated from the event loop.

    Failures set ``error`` and re-raise so an awaiting caller can react too.
    Mutations on the same panel id are serialized; creates share one key.
    """

    def __init__(self, api: PanelApiClient) -> None:
        self._api = api
        self.panels: list[Panel] = []
        self.current: Panel | None = None
        self.total: int = 0
        self.loading: bool = False
        self.error: str | None = None
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @property
    def api(self) -> PanelApiClient:
        return self._api

    def find(self, panel_id: str) -> Panel | None:
        for panel in self.panels:
            if panel.id == panel_id:
                return panel
        return None

    @asynccontextmanager
    async def _operation(self, fallback: str) -> AsyncIterator[None]:
        self.loading = True
        self.error = None
        try:
            yield
        except Exception as e:
            self.error = describe_error(e, fallback)
            logger.warning("%s: %s", fallback, self.error)
            raise
        finally:
            self.loading = False

    @asynccontextmanager
    async def _serialized(self, key: str) -> AsyncIterator[None]:
        """Hold the lock for ``key``; the entry is dropped once nobody holds or awaits it."""
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    async def refresh(self) -> PanelPage:
        """Reload the full panel list."""
        async with self._operation("Failed to fetch panels"):
            page = await self._api.list_panels()
            self.panels = list(page.panels)
            self.total = page.total
            logger.debug("Loaded %d panels (total %d)", len(self.panels), self.total)
            return page

    async def load(self, panel_id: str) -> Panel | None:
        """Fetch one panel and make it the current selection."""
        async with self._operation("Failed to fetch panel"):
            panel = await self._api.get_panel(panel_id)
            self.current = panel
            return panel

    async def create(self, draft: PanelDraft) -> Panel | None:
        """Create a panel; appended to the list on success."""
        async with self._serialized(_CREATE_KEY):
            async with self._operation("Failed to create panel"):
                panel = await self._api.create_panel(draft)
                if panel is not None:
                    self.panels = [*self.panels, panel]
                    self.total += 1
                return panel

    async def update(self, panel_id: str, draft: PanelDraft) -> Panel | None:
        """Update a panel; replaces the list entry and the selection when ids match."""
        async with self._serialized(panel_id):
            async with self._operation("Failed to update panel"):
                panel = await self._api.update_panel(panel_id, draft)
                if panel is not None:
                    self.panels = [panel if p.id == panel_id else p for p in self.panels]
                    if self.current is not None and self.current.id == panel_id:
                        self.current = panel
                return panel

    async def delete(self, panel_id: str) -> str:
        """Delete a panel; removes it from the list and clears a matching selection."""
        async with self._serialized(panel_id):
            async with self._operation("Failed to delete panel"):
                message = await self._api.delete_panel(panel_id)
                before = len(self.panels)
                self.panels = [p for p in self.panels if p.id != panel_id]
                if len(self.panels) < before:
                    self.total = max(0, self.total - 1)
                if self.current is not None and self.current.id == panel_id:
                    self.current = None
                return message

    def clear_error(self) -> None:
        self.error = None

    def clear_selection(self) -> None:
        self.current = None
