"""Tests for PanelApiClient request dispatch and error mapping (httpx MockTransport)."""

import json
from typing import Callable

import httpx
import pytest

from conftest import make_resource
from panelboard.client import PanelApiClient
from panelboard.config import ClientConfig
from panelboard.errors import NetworkError, RemoteError, WireFormatError
from panelboard.types import PanelDraft, PanelState

CONFIG = ClientConfig(api_url="https://panels.test/api", timeout_seconds=2.0)


def client_for(handler: Callable[[httpx.Request], httpx.Response]) -> PanelApiClient:
    return PanelApiClient(CONFIG, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_list_panels_uses_response_total() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"panels": [make_resource(id="a"), make_resource(id="b")], "total": 12})

    async with client_for(handler) as api:
        page = await api.list_panels()
    assert [p.id for p in page.panels] == ["a", "b"]
    assert page.total == 12
    assert seen[0].method == "GET"
    assert seen[0].url.path == "/api/panels"


@pytest.mark.asyncio
async def test_list_panels_total_falls_back_to_length() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"panels": [make_resource(id="a")]})

    async with client_for(handler) as api:
        page = await api.list_panels()
    assert page.total == 1


@pytest.mark.asyncio
async def test_get_panel() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/panels/p1"
        return httpx.Response(200, json=make_resource())

    async with client_for(handler) as api:
        panel = await api.get_panel("p1")
    assert panel is not None
    assert panel.name == "Main"


@pytest.mark.asyncio
async def test_create_panel_posts_full_payload() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        body = json.loads(request.content)
        bodies.append(body)
        return httpx.Response(201, json={**body, "id": "new-1"})

    draft = PanelDraft(
        name="Main",
        location="Bsmt",
        brand="Acme",
        amperage_capacity=100,
        state=PanelState.OPERATIVE,
        year_manufactured=2019,
        year_installed=2020,
    )
    async with client_for(handler) as api:
        panel = await api.create_panel(draft)
    assert panel is not None
    assert panel.id == "new-1"
    assert bodies[0] == {
        "name": "Main",
        "location": "Bsmt",
        "brand": "Acme",
        "amperage_capacity": 100,
        "state": "operative",
        "year_manufactured": 2019,
        "year_installed": 2020,
    }


@pytest.mark.asyncio
async def test_create_panel_unexpected_success_status_is_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(202, json={"queued": True})

    draft = PanelDraft(
        name="Main",
        location="Bsmt",
        brand="Acme",
        amperage_capacity=100,
        state=PanelState.OPERATIVE,
        year_manufactured=2019,
        year_installed=2020,
    )
    async with client_for(handler) as api:
        assert await api.create_panel(draft) is None


@pytest.mark.asyncio
async def test_update_panel_puts_sparse_payload() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "PUT"
        assert request.url.path == "/api/panels/p1"
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json=make_resource(location="Roof"))

    async with client_for(handler) as api:
        panel = await api.update_panel("p1", PanelDraft(location="Roof"))
    assert bodies == [{"location": "Roof"}]
    assert panel is not None
    assert panel.location == "Roof"


@pytest.mark.asyncio
async def test_delete_panel_returns_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "DELETE"
        return httpx.Response(200, json={"message": "Panel deleted"})

    async with client_for(handler) as api:
        assert await api.delete_panel("p1") == "Panel deleted"


@pytest.mark.asyncio
async def test_delete_panel_empty_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(204)

    async with client_for(handler) as api:
        assert await api.delete_panel("p1") == ""


@pytest.mark.asyncio
async def test_error_status_raises_remote_error_with_detail() -> None:
    detail = [{"loc": ["body", "amperage_capacity"], "msg": "must be > 0"}]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"detail": detail})

    async with client_for(handler) as api:
        with pytest.raises(RemoteError) as excinfo:
            await api.update_panel("p1", PanelDraft(amperage_capacity=-1))
    assert excinfo.value.status_code == 422
    assert excinfo.value.detail == detail
    assert excinfo.value.remote_message is None


@pytest.mark.asyncio
async def test_error_status_keeps_remote_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Panel not found"})

    async with client_for(handler) as api:
        with pytest.raises(RemoteError, match="Panel not found") as excinfo:
            await api.get_panel("missing")
    assert excinfo.value.remote_message == "Panel not found"


@pytest.mark.asyncio
async def test_error_status_with_non_json_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>bad gateway</html>")

    async with client_for(handler) as api:
        with pytest.raises(RemoteError, match="502"):
            await api.list_panels()


@pytest.mark.asyncio
async def test_transport_failure_raises_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with client_for(handler) as api:
        with pytest.raises(NetworkError) as excinfo:
            await api.list_panels()
    assert isinstance(excinfo.value.cause, httpx.ConnectError)


@pytest.mark.asyncio
async def test_timeout_raises_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    async with client_for(handler) as api:
        with pytest.raises(NetworkError, match="timed out"):
            await api.get_panel("p1")


@pytest.mark.asyncio
async def test_malformed_resource_raises_wire_format_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"id": "p1", "name": "Main"})

    async with client_for(handler) as api:
        with pytest.raises(WireFormatError):
            await api.get_panel("p1")


@pytest.mark.asyncio
async def test_every_call_round_trips() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(200, json=make_resource())

    async with client_for(handler) as api:
        await api.get_panel("p1")
        await api.get_panel("p1")
    assert calls == ["/api/panels/p1", "/api/panels/p1"]


@pytest.mark.asyncio
async def test_success_status_with_non_json_body_raises_wire_format_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            return httpx.Response(201, text="created")
        return httpx.Response(200, text="<html>proxy login</html>")

    async with client_for(handler) as api:
        with pytest.raises(WireFormatError, match="not valid JSON"):
            await api.list_panels()
        with pytest.raises(WireFormatError, match="not valid JSON"):
            await api.get_panel("p1")
        with pytest.raises(WireFormatError, match="not valid JSON"):
            await api.create_panel(
                PanelDraft(
                    name="Main",
                    location="Bsmt",
                    brand="Acme",
                    amperage_capacity=100,
                    state=PanelState.OPERATIVE,
                    year_manufactured=2019,
                    year_installed=2020,
                )
            )
