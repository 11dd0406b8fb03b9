"""PanelAssembler: wire resource <-> Panel conversion and request payload building."""

import logging
from typing import Any, Protocol

from .errors import WireFormatError
from .types import PANEL_FIELDS, Panel, PanelDraft, PanelState

logger = logging.getLogger(__name__)

_STRING_FIELDS = ("id", "name", "location", "brand")
_YEAR_FIELDS = ("year_manufactured", "year_installed")


class ResponseLike(Protocol):
    """Anything shaped like an httpx.Response: a status code and a JSON body."""

    status_code: int

    def json(self) -> Any: ...


def decode_body(response: ResponseLike) -> Any:
    """Parsed JSON body; a body that is not JSON raises WireFormatError."""
    try:
        return response.json()
    except ValueError as e:
        raise WireFormatError(f"Response body is not valid JSON (status {response.status_code})") from e


def _require(resource: dict[str, Any], key: str) -> Any:
    if key not in resource:
        raise WireFormatError(f"Panel resource missing field {key!r}", field=key)
    return resource[key]


def _parse_resource(resource: Any) -> Panel:
    """Validate one wire resource and build the Panel; raise WireFormatError on bad shape."""
    if not isinstance(resource, dict):
        raise WireFormatError(f"Panel resource must be an object, got {type(resource).__name__}")

    values: dict[str, Any] = {}
    for key in _STRING_FIELDS:
        value = _require(resource, key)
        if not isinstance(value, str):
            raise WireFormatError(f"Field {key!r} must be a string, got {value!r}", field=key)
        values[key] = value

    amperage = _require(resource, "amperage_capacity")
    # bool is an int subclass; JSON true/false is not a number here
    if isinstance(amperage, bool) or not isinstance(amperage, (int, float)):
        raise WireFormatError(f"Field 'amperage_capacity' must be a number, got {amperage!r}", field="amperage_capacity")
    values["amperage_capacity"] = float(amperage)

    for key in _YEAR_FIELDS:
        year = _require(resource, key)
        if isinstance(year, bool) or not isinstance(year, int):
            raise WireFormatError(f"Field {key!r} must be an integer, got {year!r}", field=key)
        values[key] = year

    state_raw = _require(resource, "state")
    try:
        values["state"] = PanelState(state_raw)
    except ValueError:
        raise WireFormatError(f"Unknown panel state {state_raw!r}", field="state") from None

    return Panel(**values)


class PanelAssembler:
    """Transforms API responses into Panel entities and drafts into request payloads."""

    @staticmethod
    def to_entity(resource: Any) -> Panel:
        """Convert a single wire resource into a Panel."""
        return _parse_resource(resource)

    @classmethod
    def to_entity_list(cls, response: ResponseLike) -> list[Panel]:
        """Convert a list response; any status other than 200 yields an empty list."""
        if response.status_code != 200:
            logger.debug("List response status %s, returning no panels", response.status_code)
            return []
        body = decode_body(response)
        if not isinstance(body, dict):
            raise WireFormatError("Panel list response must be an object")
        resources = body.get("panels") or []
        if not isinstance(resources, list):
            raise WireFormatError("Field 'panels' must be a list", field="panels")
        return [cls.to_entity(resource) for resource in resources]

    @classmethod
    def to_entity_or_none(cls, response: ResponseLike) -> Panel | None:
        """Convert a single-resource response; None unless status is 200 or 201."""
        if response.status_code not in (200, 201):
            logger.debug("Resource response status %s, returning None", response.status_code)
            return None
        return cls.to_entity(decode_body(response))

    @staticmethod
    def to_create_payload(draft: PanelDraft) -> dict[str, Any]:
        """Full creation payload; every domain field is required."""
        present = draft.present()
        missing = [name for name in PANEL_FIELDS if name not in present]
        if missing:
            raise ValueError(f"Create payload missing fields: {', '.join(missing)}")
        return _to_wire(present)

    @staticmethod
    def to_update_payload(draft: PanelDraft) -> dict[str, Any]:
        """Sparse update payload: only the fields set on the draft, never nulls."""
        return _to_wire(draft.present())


def _to_wire(values: dict[str, Any]) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for name in PANEL_FIELDS:
        if name not in values:
            continue
        value = values[name]
        payload[name] = value.value if isinstance(value, PanelState) else value
    return payload
