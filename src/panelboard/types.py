"""Core data model: panel state enum, Panel entity, drafts and list page."""

from dataclasses import dataclass, field, fields
from datetime import date
from enum import Enum
from typing import Any


class PanelState(str, Enum):
    """Operating state of an electrical panel; values are the wire strings."""

    OPERATIVE = "operative"
    MAINTENANCE = "maintenance"
    OUT_OF_SERVICE = "out_of_service"

    @property
    def label(self) -> str:
        """Human-readable label shown in forms and lists."""
        return _STATE_LABELS[self]

    @classmethod
    def from_label(cls, label: str) -> "PanelState":
        """Map a display label (e.g. 'OUT OF SERVICE') back to the state."""
        key = label.strip().upper()
        for state, text in _STATE_LABELS.items():
            if text == key:
                return state
        raise ValueError(f"Unknown panel state label: {label!r}")


_STATE_LABELS: dict[PanelState, str] = {
    PanelState.OPERATIVE: "OPERATIVE",
    PanelState.MAINTENANCE: "MAINTENANCE",
    PanelState.OUT_OF_SERVICE: "OUT OF SERVICE",
}

STATE_LABELS: tuple[str, ...] = tuple(_STATE_LABELS.values())

# Domain fields in wire order; id is assigned by the API and never sent.
PANEL_FIELDS: tuple[str, ...] = (
    "name",
    "location",
    "brand",
    "amperage_capacity",
    "state",
    "year_manufactured",
    "year_installed",
)


@dataclass(frozen=True)
class Panel:
    """An electrical panel as stored by the remote API."""

    id: str
    name: str
    location: str
    brand: str
    amperage_capacity: float
    state: PanelState
    year_manufactured: int
    year_installed: int


@dataclass(frozen=True)
class PanelDraft:
    """
    Typed panel data for create/update calls. None means "absent": a create
    needs every field, an update sends only the fields that are set.
    """

    name: str | None = None
    location: str | None = None
    brand: str | None = None
    amperage_capacity: float | None = None
    state: PanelState | None = None
    year_manufactured: int | None = None
    year_installed: int | None = None

    def present(self) -> dict[str, Any]:
        """Return only the fields that are set, in wire order."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


def _current_year_text() -> str:
    return str(date.today().year)


@dataclass
class FormDraft:
    """Raw, unvalidated form contents; numbers are text and state is a display label."""

    name: str = ""
    location: str = ""
    brand: str = ""
    amperage_capacity: str = ""
    state: str = PanelState.OPERATIVE.label
    year_manufactured: str = field(default_factory=_current_year_text)
    year_installed: str = field(default_factory=_current_year_text)

    @classmethod
    def from_panel(cls, panel: Panel) -> "FormDraft":
        """Project a stored panel into editable form text."""
        return cls(
            name=panel.name,
            location=panel.location,
            brand=panel.brand,
            amperage_capacity=format_amperage(panel.amperage_capacity),
            state=panel.state.label,
            year_manufactured=str(panel.year_manufactured),
            year_installed=str(panel.year_installed),
        )


def format_amperage(value: float) -> str:
    """Render amperage without a trailing '.0' for whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class PanelPage:
    """Result of listing panels: the panels plus the total reported by the API."""

    panels: list[Panel]
    total: int
