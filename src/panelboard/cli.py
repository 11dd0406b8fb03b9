#!/usr/bin/env python3
"""Command-line front-end for panelboard using Typer."""

import asyncio
import json
import logging
from dataclasses import asdict
from typing import Any, Coroutine, Optional, TypeVar

import typer
from typing_extensions import Annotated

from . import __version__  # type: ignore
from .client import PanelApiClient
from .config import API_URL_ENV, DEFAULT_TIMEOUT_SECONDS, TIMEOUT_ENV, ClientConfig
from .errors import ConfigError, NetworkError, PanelboardError, RemoteError, WireFormatError
from .listing import PanelListController, PanelRow
from .store import PanelStore
from .types import STATE_LABELS, Panel
from .workflow import SubmitResult, UpsertWorkflow

app = typer.Typer(
    name="panelboard",
    help="Manage electrical panel records on a remote panel API.",
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ============================================================================
# Shared options and helpers
# ============================================================================

ApiUrlOption = Annotated[
    Optional[str],
    typer.Option("--api-url", "-u", help="Panel API base URL", envvar=API_URL_ENV),
]
TimeoutOption = Annotated[
    float,
    typer.Option("--timeout", "-t", help="Request timeout in seconds", envvar=TIMEOUT_ENV),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable debug logging"),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Output as JSON"),
]
StateOption = Annotated[
    Optional[str],
    typer.Option("--state", "-s", help=f"Panel state: {', '.join(STATE_LABELS)}"),
]
ManufacturedOption = Annotated[
    Optional[str],
    typer.Option("--manufactured", help="Year the panel was manufactured"),
]
InstalledOption = Annotated[
    Optional[str],
    typer.Option("--installed", help="Year the panel was installed"),
]


class CliNavigator:
    """Records where a successful submit would take the user."""

    def __init__(self) -> None:
        self.destination: str | None = None

    def go_back(self) -> None:
        self.destination = "back"

    def show_list(self) -> None:
        self.destination = "list"


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbose flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if not verbose else "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def create_client(api_url: Optional[str], timeout: float) -> PanelApiClient:
    """Create and return a PanelApiClient instance."""
    if not api_url:
        typer.echo(f"Error: --api-url (or {API_URL_ENV}) is required for this command", err=True)
        raise typer.Exit(2)
    try:
        config = ClientConfig(api_url=api_url, timeout_seconds=timeout)
    except ConfigError as e:
        typer.echo(f"Error: Invalid configuration: {e}", err=True)
        raise typer.Exit(2)
    return PanelApiClient(config)


def panel_to_dict(panel: Panel) -> dict[str, Any]:
    """JSON-friendly view of a panel, state as its wire value."""
    data = asdict(panel)
    data["state"] = panel.state.value
    return data


def format_row(row: PanelRow) -> str:
    """One-line text rendering of a list row."""
    return f"{row.id}  {row.name} | {row.location} | {row.brand} | {row.amperage} A | {row.state_label} | {row.year_installed}"


def format_panel(panel: Panel) -> list[str]:
    return [
        f"Id:            {panel.id}",
        f"Name:          {panel.name}",
        f"Location:      {panel.location}",
        f"Brand:         {panel.brand}",
        f"Amperage:      {panel.amperage_capacity}",
        f"State:         {panel.state.label}",
        f"Manufactured:  {panel.year_manufactured}",
        f"Installed:     {panel.year_installed}",
    ]


def run_async(coro: Coroutine[Any, Any, T], verbose: bool) -> T:
    """Run a command coroutine and map library errors to exit codes."""
    try:
        return asyncio.run(coro)
    except typer.Exit:
        raise
    except (NetworkError, RemoteError, WireFormatError) as e:
        typer.echo(f"Error: API error: {e}", err=True)
        raise typer.Exit(3)
    except PanelboardError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)
    except Exception as e:
        typer.echo(f"Error: Unexpected error: {e}", err=True)
        if verbose:
            import traceback
            traceback.print_exc()
        raise typer.Exit(4)


def report_submit(result: SubmitResult, json_output: bool) -> None:
    """Print a submit outcome and exit non-zero when it failed."""
    if result.ok:
        if json_output:
            out: dict[str, Any] = {"message": result.message}
            if result.panel is not None:
                out["panel"] = panel_to_dict(result.panel)
            typer.echo(json.dumps(out, indent=2))
        else:
            suffix = f" (id {result.panel.id})" if result.panel is not None else ""
            typer.echo(f"OK: {result.message}{suffix}")
        return
    if result.field_errors:
        for name, msg in result.field_errors.items():
            typer.echo(f"Error: {name}: {msg}", err=True)
        raise typer.Exit(2)
    typer.echo(f"Error: {result.message}", err=True)
    raise typer.Exit(3)


# ============================================================================
# Commands
# ============================================================================

@app.command(name="list")
def list_panels(
    api_url: ApiUrlOption = None,
    timeout: TimeoutOption = DEFAULT_TIMEOUT_SECONDS,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    List all panels.

    Shows one line per panel, or a JSON document with --json.
    """
    setup_logging(verbose)
    client = create_client(api_url, timeout)

    async def _run() -> tuple[PanelStore, list[PanelRow]]:
        async with client:
            store = PanelStore(client)
            await store.refresh()
            return store, PanelListController(store).rows()

    store, rows = run_async(_run(), verbose)
    if json_output:
        typer.echo(json.dumps({"panels": [panel_to_dict(p) for p in store.panels], "total": store.total}, indent=2))
        return
    if not rows:
        typer.echo("No panels.")
        return
    for row in rows:
        typer.echo(format_row(row))
    typer.echo(f"Total: {store.total}")


@app.command()
def show(
    panel_id: Annotated[str, typer.Argument(help="Panel id")],
    api_url: ApiUrlOption = None,
    timeout: TimeoutOption = DEFAULT_TIMEOUT_SECONDS,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """Show a single panel."""
    setup_logging(verbose)
    client = create_client(api_url, timeout)

    async def _run() -> Optional[Panel]:
        async with client:
            return await PanelStore(client).load(panel_id)

    panel = run_async(_run(), verbose)
    if panel is None:
        typer.echo(f"Error: Panel not found: {panel_id}", err=True)
        raise typer.Exit(3)
    if json_output:
        typer.echo(json.dumps(panel_to_dict(panel), indent=2))
    else:
        for line in format_panel(panel):
            typer.echo(line)


@app.command()
def create(
    name: Annotated[str, typer.Option("--name", "-n", help="Panel name")] = "",
    location: Annotated[str, typer.Option("--location", "-l", help="Physical location")] = "",
    brand: Annotated[str, typer.Option("--brand", "-b", help="Manufacturer brand")] = "",
    amperage: Annotated[str, typer.Option("--amperage", "-a", help="Amperage capacity (> 0)")] = "",
    state: StateOption = None,
    manufactured: ManufacturedOption = None,
    installed: InstalledOption = None,
    api_url: ApiUrlOption = None,
    timeout: TimeoutOption = DEFAULT_TIMEOUT_SECONDS,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    Create a panel.

    The form is validated locally before anything is sent. Years default to
    the current year and the state to OPERATIVE.
    """
    setup_logging(verbose)
    client = create_client(api_url, timeout)

    async def _run() -> SubmitResult:
        async with client:
            workflow = UpsertWorkflow(PanelStore(client), navigator=CliNavigator())
            workflow.start_create()
            values = {"name": name, "location": location, "brand": brand, "amperage_capacity": amperage}
            values.update(
                {
                    k: v
                    for k, v in (("state", state), ("year_manufactured", manufactured), ("year_installed", installed))
                    if v is not None
                }
            )
            for field_name, value in values.items():
                workflow.set_field(field_name, value)
            return await workflow.submit()

    report_submit(run_async(_run(), verbose), json_output)


@app.command()
def edit(
    panel_id: Annotated[str, typer.Argument(help="Panel id")],
    location: Annotated[Optional[str], typer.Option("--location", "-l", help="Physical location")] = None,
    state: StateOption = None,
    manufactured: ManufacturedOption = None,
    installed: InstalledOption = None,
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="Panel name (needs --unlock-identity)")] = None,
    brand: Annotated[Optional[str], typer.Option("--brand", "-b", help="Brand (needs --unlock-identity)")] = None,
    amperage: Annotated[Optional[str], typer.Option("--amperage", "-a", help="Amperage (needs --unlock-identity)")] = None,
    unlock_identity: Annotated[
        bool,
        typer.Option("--unlock-identity", help="Allow changing name, brand and amperage"),
    ] = False,
    api_url: ApiUrlOption = None,
    timeout: TimeoutOption = DEFAULT_TIMEOUT_SECONDS,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    Update a panel.

    Only the fields that change are sent. Name, brand and amperage are
    read-only unless --unlock-identity is given.
    """
    setup_logging(verbose)
    client = create_client(api_url, timeout)

    async def _run() -> SubmitResult:
        async with client:
            store = PanelStore(client)
            workflow = UpsertWorkflow(store, navigator=CliNavigator(), lock_identity_fields=not unlock_identity)
            await workflow.start_edit(panel_id)
            if not workflow.form_ready:
                return SubmitResult(ok=False, message=store.error or f"Could not load panel {panel_id}")
            changes = {
                "location": location,
                "state": state,
                "year_manufactured": manufactured,
                "year_installed": installed,
                "name": name,
                "brand": brand,
                "amperage_capacity": amperage,
            }
            for field_name, value in changes.items():
                if value is not None:
                    workflow.set_field(field_name, value)
            return await workflow.submit()

    report_submit(run_async(_run(), verbose), json_output)


@app.command()
def delete(
    panel_id: Annotated[str, typer.Argument(help="Panel id")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation")] = False,
    api_url: ApiUrlOption = None,
    timeout: TimeoutOption = DEFAULT_TIMEOUT_SECONDS,
    verbose: VerboseOption = False,
) -> None:
    """Delete a panel."""
    setup_logging(verbose)
    client = create_client(api_url, timeout)

    if not yes:
        typer.confirm(f"Delete panel {panel_id}?", abort=True)

    async def _run() -> str:
        async with client:
            return await PanelStore(client).delete(panel_id)

    message = run_async(_run(), verbose)
    typer.echo(f"OK: {message or 'Panel deleted'}")


@app.command()
def info(
    api_url: ApiUrlOption = None,
    timeout: TimeoutOption = DEFAULT_TIMEOUT_SECONDS,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    Show package version and, when an API URL is set, test connectivity.
    """
    setup_logging(verbose)

    info_data: dict[str, Any] = {
        "version": __version__,
        "api_url": api_url,
    }

    if api_url:
        client = create_client(api_url, timeout)

        async def _probe() -> int:
            async with client:
                page = await client.list_panels()
                return page.total

        try:
            total = asyncio.run(_probe())
            info_data["connectivity"] = {"status": "connected", "panels": total}
        except (NetworkError, RemoteError) as e:
            info_data["connectivity"] = {"status": "failed", "error": str(e)}
        except Exception as e:
            info_data["connectivity"] = {"status": "error", "error": str(e)}

    if json_output:
        typer.echo(json.dumps(info_data, indent=2))
    else:
        typer.echo(f"panelboard version: {info_data['version']}")
        typer.echo(f"API URL: {api_url or '(not set)'}")
        if "connectivity" in info_data:
            status = info_data["connectivity"]["status"]
            if status == "connected":
                typer.echo(f"Connectivity: OK ({info_data['connectivity']['panels']} panels)")
            elif status == "failed":
                typer.echo(f"Connectivity: FAILED ({info_data['connectivity']['error']})")
            else:
                typer.echo(f"Connectivity: ERROR - {info_data['connectivity'].get('error', 'unknown')}")


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"panelboard {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version and exit"),
    ] = None,
) -> None:
    """panelboard - manage electrical panel records on a remote API."""
    pass


if __name__ == "__main__":
    app()
