"""
WayShare Client - Entity Store
===============================

What:  Client-side cache for one entity type, kept consistent with the REST
       API after every call.
How:   Wraps an httpx.AsyncClient. Reads replace the cached list wholesale
       (or append, for infinite scroll); every successful mutation re-fetches
       the current view so no stale entry survives it.
Who:   Scripts, admin tools and integration tests talking to a running
       backend; tests drive it over httpx.MockTransport or ASGITransport.

State per store:
    entities        ordered list of transfer objects (plain dicts, camelCase)
    entity          the record last fetched / created / updated
    loading         a read is in flight
    updating        a mutation is in flight
    update_success  the last mutation succeeded
    error_message   message of the last failed call, None after a success
    total_items     X-Total-Count of the last list read
    sort_state      active SortState
    page, links     current page index and the parsed Link header
    last_alert      Alert decoded from the last response's alert headers

Calls are issued one at a time; the store is not meant to be shared by
concurrent tasks.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import unquote

import httpx

from wayshare.config import settings
from wayshare.pagination import ASC, DESC, SortOrder, parse_link_header
from wayshare.routes.headers import alert_header_name, error_header_name, params_header_name

logger = logging.getLogger(__name__)

MERGE_PATCH_JSON = "application/merge-patch+json"


@dataclass(frozen=True)
class SortState:
    """Column + direction of the list view; toggled by header clicks."""

    field: str = "id"
    direction: str = ASC

    @classmethod
    def from_query(cls, query: str, default: Optional["SortState"] = None) -> "SortState":
        """
        Initial sort state from a page's query string, e.g. "?sort=startTime,desc".

        A missing or malformed sort parameter leaves `default` in place.
        """
        default = default or cls()
        value = httpx.QueryParams(query.lstrip("?")).get("sort")
        if not value:
            return default
        try:
            order = SortOrder.parse(value)
        except ValueError:
            logger.debug("Ignoring malformed sort parameter %r", value)
            return default
        return cls(field=order.field, direction=order.direction)

    def toggle(self, field: str) -> "SortState":
        """Same field flips the direction; a different field starts ascending."""
        if field == self.field:
            return SortState(field, DESC if self.direction == ASC else ASC)
        return SortState(field, ASC)

    def to_param(self) -> str:
        return f"{self.field},{self.direction}"

    def to_query(self) -> str:
        return f"sort={self.to_param()}"


@dataclass(frozen=True)
class Alert:
    """A decoded X-<app>-alert / X-<app>-error header pair."""

    key: str
    param: Optional[str] = None
    is_error: bool = False


class EntityStore:
    """
    Store for one entity type.

    Args:
        client:           httpx.AsyncClient whose base_url points at the backend
        path:             plural REST segment, e.g. "rides" or "ride-requests"
        paginated:        send page/size and support fetch_next_page()
        page_size:        default page size for paginated reads
        default_sort:     sort state used until the caller picks another
        application_name: scope of the alert headers (defaults to settings)
        on_alert:         called with every Alert decoded from a response
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        path: str,
        paginated: bool = False,
        page_size: Optional[int] = None,
        default_sort: Optional[SortState] = None,
        application_name: Optional[str] = None,
        on_alert: Optional[Callable[[Alert], None]] = None,
    ):
        self.client = client
        self.url = f"/api/{path}"
        self.paginated = paginated
        self.page_size = page_size or settings.default_page_size
        self.sort_state = default_sort or SortState()
        self.application_name = application_name or settings.application_name
        self.on_alert = on_alert

        self.entities: List[Dict[str, Any]] = []
        self.entity: Optional[Dict[str, Any]] = None
        self.loading = False
        self.updating = False
        self.update_success = False
        self.error_message: Optional[str] = None
        self.total_items = 0
        self.page = 0
        self.links: Dict[str, int] = {}
        self.last_alert: Optional[Alert] = None

    # ── Reads ─────────────────────────────────────────────────────────────

    async def fetch_page(
        self,
        page: Optional[int] = None,
        size: Optional[int] = None,
        sort_field: Optional[str] = None,
        sort_direction: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """GET the collection and replace the cached list with the response."""
        if sort_field:
            self.sort_state = SortState(sort_field, sort_direction or ASC)
        if page is not None:
            self.page = page
        if size:
            self.page_size = size

        response = await self._read("GET", self.url, params=self._list_params())
        self.entities = list(response.json())
        self._read_list_headers(response)
        return self.entities

    async def fetch_next_page(self) -> List[Dict[str, Any]]:
        """
        Infinite scroll: append the next page to the cached list.

        Loads page 0 when nothing has been fetched yet; does nothing once the
        Link header no longer advertises a next page.
        """
        if not self.links:
            return await self.fetch_page(page=0)
        if "next" not in self.links:
            return self.entities

        self.page = self.links["next"]
        response = await self._read("GET", self.url, params=self._list_params())
        self.entities = self.entities + list(response.json())
        self._read_list_headers(response)
        return self.entities

    async def fetch_one(self, record_id: int) -> Dict[str, Any]:
        response = await self._read("GET", f"{self.url}/{record_id}")
        self.entity = response.json()
        return self.entity

    def sort_by(self, field: str) -> SortState:
        """Header click: toggle the sort state and restart from the first page."""
        self.sort_state = self.sort_state.toggle(field)
        self.page = 0
        return self.sort_state

    def reset(self) -> None:
        """Forget every cached record and paging position."""
        self.entities = []
        self.entity = None
        self.total_items = 0
        self.page = 0
        self.links = {}
        self.update_success = False
        self.error_message = None

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._write("POST", self.url, json=payload)
        self.entity = response.json()
        await self._refresh()
        return self.entity

    async def update(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._write("PUT", f"{self.url}/{payload.get('id')}", json=payload)
        self.entity = response.json()
        await self._refresh()
        return self.entity

    async def partial_update(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._write(
            "PATCH",
            f"{self.url}/{payload.get('id')}",
            json=payload,
            headers={"Content-Type": MERGE_PATCH_JSON},
        )
        self.entity = response.json()
        await self._refresh()
        return self.entity

    async def delete(self, record_id: int) -> None:
        await self._write("DELETE", f"{self.url}/{record_id}")
        self.entity = None
        await self._refresh()

    # ── Internals ─────────────────────────────────────────────────────────

    def _list_params(self) -> List[tuple]:
        params = [("sort", self.sort_state.to_param())]
        if self.paginated:
            params += [("page", str(self.page)), ("size", str(self.page_size))]
        return params

    def _read_list_headers(self, response: httpx.Response) -> None:
        total = response.headers.get("X-Total-Count")
        self.total_items = int(total) if total is not None else len(self.entities)
        self.links = parse_link_header(response.headers.get("Link"))

    async def _refresh(self) -> None:
        """Re-read the current view after a successful mutation."""
        if self.paginated:
            self.links = {}
            await self.fetch_page(page=0)
        else:
            await self.fetch_page()

    async def _read(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        self.loading = True
        self.error_message = None
        try:
            return await self._send(method, url, **kwargs)
        finally:
            self.loading = False

    async def _write(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        self.updating = True
        self.update_success = False
        self.error_message = None
        try:
            response = await self._send(method, url, **kwargs)
        finally:
            self.updating = False
        self.update_success = True
        return response

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self.client.request(method, url, **kwargs)
            self._capture_alert(response)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self.error_message = _describe_failure(e.response)
            logger.warning("%s %s failed: %s", method, url, self.error_message)
            raise
        except httpx.HTTPError as e:
            self.error_message = str(e) or type(e).__name__
            logger.warning("%s %s failed: %s", method, url, self.error_message)
            raise
        return response

    def _capture_alert(self, response: httpx.Response) -> None:
        params = response.headers.get(params_header_name(self.application_name))
        param = unquote(params) if params is not None else None

        alert_key = response.headers.get(alert_header_name(self.application_name))
        error_key = response.headers.get(error_header_name(self.application_name))
        if alert_key:
            alert = Alert(key=alert_key, param=param)
        elif error_key:
            alert = Alert(key=error_key, param=param, is_error=True)
        else:
            return

        self.last_alert = alert
        if self.on_alert is not None:
            self.on_alert(alert)


def _describe_failure(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"{response.status_code} {response.reason_phrase}".strip()
