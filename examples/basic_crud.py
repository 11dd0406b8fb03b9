#!/usr/bin/env python3
"""Example: list panels, create one through the validated form, then edit and delete it."""

import asyncio
import sys

from panelboard import ClientConfig, PanelApiClient, PanelListController, PanelStore, UpsertWorkflow
from panelboard.errors import NetworkError, RemoteError


class PrintNavigator:
    def go_back(self) -> None:
        print("-> back")

    def show_list(self) -> None:
        print("-> panel list")


async def main() -> None:
    config = ClientConfig(api_url="http://localhost:8000")  # change to your API

    async with PanelApiClient(config) as api:
        store = PanelStore(api)
        listing = PanelListController(store)

        if not await listing.on_focus():
            print(f"Could not load panels: {store.error}", file=sys.stderr)
            sys.exit(1)
        for row in listing.rows():
            print(f"{row.id}: {row.name} ({row.state_label})")

        workflow = UpsertWorkflow(store, navigator=PrintNavigator())
        workflow.start_create()
        for name, value in {
            "name": "Main Distribution",
            "location": "Building A - Basement",
            "brand": "Siemens",
            "amperage_capacity": "200",
            "year_manufactured": "2019",
            "year_installed": "2021",
        }.items():
            workflow.set_field(name, value)

        result = await workflow.submit()
        print(result.message, result.field_errors or "")
        if not result.ok or result.panel is None:
            sys.exit(1)

        # Only the changed field is sent
        await workflow.start_edit(result.panel.id)
        workflow.set_field("state", "MAINTENANCE")
        print((await workflow.submit()).message)

        try:
            print(await store.delete(result.panel.id))
        except (NetworkError, RemoteError) as e:
            print(f"Delete failed: {e}", file=sys.stderr)
            sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
