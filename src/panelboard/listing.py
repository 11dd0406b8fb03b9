"""PanelListController: list screen model with an explicit focus hook and delete action."""

import logging
from dataclasses import dataclass

from .errors import PanelboardError
from .store import PanelStore
from .types import format_amperage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PanelRow:
    """One list entry as displayed: identity, place, brand, state label and install year."""

    id: str
    name: str
    location: str
    brand: str
    state_label: str
    amperage: str
    year_installed: int


class PanelListController:
    """Drives the panel list. Refresh logic stays in the store; this only calls it."""

    def __init__(self, store: PanelStore) -> None:
        self._store = store

    async def on_focus(self) -> bool:
        """Lifecycle hook for when the list becomes visible; reloads from the API."""
        try:
            await self._store.refresh()
        except PanelboardError as e:
            logger.warning("Panel list refresh failed: %s", e)
            return False
        return True

    def rows(self) -> list[PanelRow]:
        return [
            PanelRow(
                id=p.id,
                name=p.name,
                location=p.location,
                brand=p.brand,
                state_label=p.state.label,
                amperage=format_amperage(p.amperage_capacity),
                year_installed=p.year_installed,
            )
            for p in self._store.panels
        ]

    def edit_target(self, panel_id: str) -> str:
        """Id to open in the edit form; KeyError if it is not in the list."""
        if self._store.find(panel_id) is None:
            raise KeyError(panel_id)
        return panel_id

    async def delete(self, panel_id: str) -> str | None:
        """Delete a panel; returns the server message, or None on failure (see store.error)."""
        try:
            return await self._store.delete(panel_id)
        except PanelboardError as e:
            logger.warning("Delete of panel %s failed: %s", panel_id, e)
            return None
