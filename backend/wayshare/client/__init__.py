"""
WayShare Client - Entity Stores
================================

Async httpx-backed stores that keep client-side state for one entity type
in sync with the REST API.

    async with httpx.AsyncClient(base_url="http://localhost:8080") as http:
        rides = EntityStore(http, "rides")
        await rides.fetch_page(sort_field="startTime", sort_direction="desc")
"""

from wayshare.client.store import Alert, EntityStore, SortState

__all__ = ["Alert", "EntityStore", "SortState"]
