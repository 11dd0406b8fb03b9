"""
Upsert workflow: form validation, create-vs-update decision and reconciliation
of the result into the PanelStore.
"""

import logging
import math
import re
from dataclasses import dataclass, field, fields
from datetime import date
from enum import Enum
from typing import Any, Protocol

from .errors import FormNotReadyError, PanelboardError, ReadOnlyFieldError, RemoteError
from .store import PanelStore
from .types import FormDraft, Panel, PanelDraft, PanelState

logger = logging.getLogger(__name__)

MIN_YEAR = 1900

# Identity-defining fields; read-only once a panel exists.
LOCKED_IN_EDIT: frozenset[str] = frozenset({"name", "brand", "amperage_capacity"})

FORM_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(FormDraft))


class WorkflowMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


class Navigator(Protocol):
    """Navigation hooks the workflow calls after a successful submit."""

    def go_back(self) -> None: ...

    def show_list(self) -> None: ...


@dataclass
class SubmitResult:
    """Outcome of UpsertWorkflow.submit()."""

    ok: bool
    message: str = ""
    panel: Panel | None = None
    field_errors: dict[str, str] = field(default_factory=dict)


# ASCII decimal text only; int() and float() alone also take "1_000" and "1e3".
_YEAR_RE = re.compile(r"[0-9]+")
_AMPERAGE_RE = re.compile(r"[0-9]+(?:\.[0-9]*)?|\.[0-9]+")


def _parse_year(text: str, current_year: int) -> int | None:
    year = _safe_int(text)
    if year is not None and MIN_YEAR <= year <= current_year:
        return year
    return None


def _parse_amperage(text: str) -> float | None:
    text = text.strip()
    if not _AMPERAGE_RE.fullmatch(text):
        return None
    value = float(text)
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def validate_form(form: FormDraft, current_year: int | None = None) -> dict[str, str] | None:
    """
    Check a form draft. Returns a field -> message map, or None when valid.

    "dates" is a single slot covering both years; the installed-before-manufactured
    check overrides an individual year error.
    """
    year_now = current_year if current_year is not None else date.today().year
    errors: dict[str, str] = {}

    if not form.name.strip():
        errors["name"] = "Name is required"
    if not form.brand.strip():
        errors["brand"] = "Brand is required"
    if not form.location.strip():
        errors["location"] = "Location is required"

    if _parse_amperage(form.amperage_capacity) is None:
        errors["amperage_capacity"] = "Amperage capacity must be a number greater than 0"

    try:
        PanelState.from_label(form.state)
    except ValueError:
        errors["state"] = f"Unknown state: {form.state!r}"

    manufactured = _parse_year(form.year_manufactured, year_now)
    installed = _parse_year(form.year_installed, year_now)
    if manufactured is None or installed is None:
        errors["dates"] = f"Years must be between {MIN_YEAR} and {year_now}"
    # Out-of-range years that still parse take part; this check owns the slot.
    raw_manufactured = _safe_int(form.year_manufactured)
    raw_installed = _safe_int(form.year_installed)
    if raw_manufactured is not None and raw_installed is not None and raw_installed < raw_manufactured:
        errors["dates"] = "Installation year cannot be before manufacture year"

    return errors or None


def _safe_int(text: str) -> int | None:
    text = text.strip()
    if not _YEAR_RE.fullmatch(text):
        return None
    return int(text)


def form_to_draft(form: FormDraft) -> PanelDraft:
    """Convert a validated form into typed panel data. Call validate_form first."""
    return PanelDraft(
        name=form.name.strip(),
        location=form.location.strip(),
        brand=form.brand.strip(),
        amperage_capacity=float(form.amperage_capacity.strip()),
        state=PanelState.from_label(form.state),
        year_manufactured=int(form.year_manufactured.strip()),
        year_installed=int(form.year_installed.strip()),
    )


def changed_fields(original: Panel, draft: PanelDraft, exclude: frozenset[str] = frozenset()) -> PanelDraft:
    """Sparse draft holding only the fields of ``draft`` that differ from ``original``."""
    changes: dict[str, Any] = {}
    for name, value in draft.present().items():
        if name in exclude:
            continue
        if getattr(original, name) != value:
            changes[name] = value
    return PanelDraft(**changes)


def describe_failure(exc: BaseException, store_error: str | None, fallback: str) -> str:
    """
    Message to show for a failed submit. A structured ``detail`` from the API
    wins: a list of {loc, msg} items becomes one "field: msg" line per item.
    """
    detail = exc.detail if isinstance(exc, RemoteError) else None
    if isinstance(detail, list) and detail:
        lines = []
        for item in detail:
            if not isinstance(item, dict):
                lines.append(str(item))
                continue
            loc = item.get("loc")
            name = loc[-1] if isinstance(loc, (list, tuple)) and len(loc) > 1 else "Field"
            lines.append(f"{name}: {item.get('msg', '')}")
        return "\n".join(lines)
    if isinstance(detail, str) and detail:
        return detail
    return store_error or fallback


class UpsertWorkflow:
    """
    Create or edit one panel through a text form.

    CREATE starts from an empty draft. EDIT loads the panel through the store
    first; the form is not usable until it arrives. Validation runs before any
    network call, and only one submit may be in flight at a time.
    """

    def __init__(
        self,
        store: PanelStore,
        navigator: Navigator | None = None,
        lock_identity_fields: bool = True,
        current_year: int | None = None,
    ) -> None:
        self._store = store
        self._navigator = navigator
        self._lock_identity_fields = lock_identity_fields
        self._current_year = current_year
        self.mode = WorkflowMode.CREATE
        self.panel_id: str | None = None
        self.form = FormDraft()
        self.field_errors: dict[str, str] = {}
        self.is_loading = False
        self.form_ready = True
        self.submitting = False
        self._original: Panel | None = None
        self._closed = False

    @property
    def store(self) -> PanelStore:
        return self._store

    @property
    def is_edit(self) -> bool:
        return self.mode == WorkflowMode.EDIT

    @property
    def locked_fields(self) -> frozenset[str]:
        if self.is_edit and self._lock_identity_fields:
            return LOCKED_IN_EDIT
        return frozenset()

    def start_create(self) -> None:
        """Reset to an empty form for a new panel."""
        self.mode = WorkflowMode.CREATE
        self.panel_id = None
        self._original = None
        self.form = FormDraft()
        self.field_errors = {}
        self.is_loading = False
        self.form_ready = True
        self._store.clear_error()
        self._store.clear_selection()

    async def start_edit(self, panel_id: str) -> Panel | None:
        """Enter edit mode and load the panel; the form is populated when it arrives."""
        self.mode = WorkflowMode.EDIT
        self.panel_id = panel_id
        self._original = None
        self.field_errors = {}
        self.is_loading = True
        self.form_ready = False
        try:
            panel = await self._store.load(panel_id)
        except PanelboardError as e:
            logger.warning("Could not load panel %s: %s", panel_id, e)
            if not self._closed:
                self.is_loading = False
            return None

        if self._closed or self.panel_id != panel_id:
            logger.debug("Dropping late load of panel %s", panel_id)
            return panel

        self.is_loading = False
        if panel is None:
            self._store.error = self._store.error or f"Panel {panel_id} not found"
            return None
        self._original = panel
        self.form = FormDraft.from_panel(panel)
        self.form_ready = True
        return panel

    def set_field(self, name: str, value: str) -> None:
        """Edit one form field, honouring the edit-mode lock."""
        if name not in FORM_FIELDS:
            raise KeyError(name)
        if not self.form_ready:
            raise FormNotReadyError("Panel is still loading")
        if name in self.locked_fields:
            raise ReadOnlyFieldError(name)
        setattr(self.form, name, value)
        self.field_errors.pop("dates" if name.startswith("year_") else name, None)

    def validate(self) -> dict[str, str] | None:
        errors = validate_form(self.form, self._current_year)
        self.field_errors = dict(errors) if errors else {}
        return errors

    async def submit(self) -> SubmitResult:
        """Validate, then create or update. Never raises for validation or API failures."""
        if not self.form_ready:
            return SubmitResult(ok=False, message="Panel is still loading")
        if self.submitting:
            return SubmitResult(ok=False, message="Submission already in progress")

        errors = self.validate()
        if errors:
            logger.debug("Form validation failed: %s", errors)
            return SubmitResult(ok=False, message="Please fix the highlighted fields", field_errors=dict(errors))

        draft = form_to_draft(self.form)
        self.submitting = True
        try:
            if self.is_edit:
                return await self._submit_update(draft)
            return await self._submit_create(draft)
        finally:
            self.submitting = False

    async def _submit_update(self, draft: PanelDraft) -> SubmitResult:
        if self.panel_id is None or self._original is None:
            raise FormNotReadyError("No panel loaded for editing")
        changes = changed_fields(self._original, draft, exclude=self.locked_fields)
        if not changes.present():
            return SubmitResult(ok=True, message="No changes to save", panel=self._original)
        try:
            panel = await self._store.update(self.panel_id, changes)
        except PanelboardError as e:
            return SubmitResult(ok=False, message=describe_failure(e, self._store.error, "Failed to update panel"))
        if panel is None:
            return SubmitResult(ok=False, message="Failed to update panel")

        if self._closed:
            return SubmitResult(ok=True, message="Panel updated successfully", panel=panel)
        self._original = panel
        self.form = FormDraft.from_panel(panel)
        if self._navigator is not None:
            self._navigator.go_back()
        return SubmitResult(ok=True, message="Panel updated successfully", panel=panel)

    async def _submit_create(self, draft: PanelDraft) -> SubmitResult:
        try:
            panel = await self._store.create(draft)
        except PanelboardError as e:
            return SubmitResult(ok=False, message=describe_failure(e, self._store.error, "Failed to create panel"))
        if panel is None:
            return SubmitResult(ok=False, message="Failed to create panel")

        if self._closed:
            return SubmitResult(ok=True, message="Panel created successfully", panel=panel)
        self.form = FormDraft()
        self.field_errors = {}
        self._store.clear_selection()
        if self._navigator is not None:
            self._navigator.show_list()
        return SubmitResult(ok=True, message="Panel created successfully", panel=panel)

    def close(self) -> None:
        """Detach from the screen; responses that arrive later are ignored."""
        self._closed = True
