"""Shared fixtures: panel and wire resource builders, mocked API client."""

from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from panelboard.types import Panel, PanelState


def make_resource(**overrides: Any) -> dict[str, Any]:
    resource: dict[str, Any] = {
        "id": "p1",
        "name": "Main",
        "location": "Bsmt",
        "brand": "Acme",
        "amperage_capacity": 100,
        "state": "operative",
        "year_manufactured": 2019,
        "year_installed": 2020,
    }
    resource.update(overrides)
    return resource


def make_panel(**overrides: Any) -> Panel:
    values: dict[str, Any] = {
        "id": "p1",
        "name": "Main",
        "location": "Bsmt",
        "brand": "Acme",
        "amperage_capacity": 100.0,
        "state": PanelState.OPERATIVE,
        "year_manufactured": 2019,
        "year_installed": 2020,
    }
    values.update(overrides)
    return Panel(**values)


@pytest.fixture
def panel_factory() -> Callable[..., Panel]:
    return make_panel


@pytest.fixture
def mock_api() -> MagicMock:
    """PanelApiClient stand-in with coroutine methods."""
    api = MagicMock()
    api.list_panels = AsyncMock()
    api.get_panel = AsyncMock()
    api.create_panel = AsyncMock()
    api.update_panel = AsyncMock()
    api.delete_panel = AsyncMock()
    return api
