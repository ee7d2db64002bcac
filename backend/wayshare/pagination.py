"""
WayShare Backend - Sorting and Pagination
==========================================

What:  Value objects for sort/page requests, the Page result, and the
       X-Total-Count / Link headers emitted by paginated collections.
Who:   Parsed by the entity routes, consumed by CrudService.find_all(),
       read back by the client store.

Query Parameter Conventions:
    sort=<field>,<asc|desc>    Repeatable; field names are the camelCase wire
                               names. Direction defaults to asc.
    page=<n>                   Zero-based page index (paginated entities only)
    size=<n>                   Page size, 1..MAX_PAGE_SIZE

    Example: GET /api/notifications?page=2&size=20&sort=timestamp,desc

Link Header (RFC 5988, used by infinite-scroll clients):
    <http://host/api/notifications?page=3&size=20&sort=timestamp,desc>; rel="next",
    <http://host/api/notifications?page=1&size=20&sort=timestamp,desc>; rel="prev",
    <http://host/api/notifications?page=7&size=20&sort=timestamp,desc>; rel="last",
    <http://host/api/notifications?page=0&size=20&sort=timestamp,desc>; rel="first"
"""

import math
import re
from dataclasses import dataclass, field
from typing import Dict, Generic, Iterable, List, Optional, Tuple, TypeVar

from starlette.datastructures import URL, QueryParams

ASC = "asc"
DESC = "desc"
DIRECTIONS = (ASC, DESC)

T = TypeVar("T")

_LINK_PATTERN = re.compile(r'<([^>]*)>\s*;\s*rel="([^"]+)"')


@dataclass(frozen=True)
class SortOrder:
    """One `field,direction` term of a sort parameter (field is the wire name)."""

    field: str
    direction: str = ASC

    @classmethod
    def parse(cls, value: str) -> "SortOrder":
        """
        Parse "startTime,desc" / "startTime".

        Raises:
            ValueError: empty field, or a direction other than asc/desc.
        """
        parts = [p.strip() for p in value.split(",")]
        name = parts[0]
        if not name:
            raise ValueError(f"Sort parameter '{value}' has no field name")
        direction = parts[1].lower() if len(parts) > 1 and parts[1] else ASC
        if direction not in DIRECTIONS or len(parts) > 2:
            raise ValueError(f"Sort parameter '{value}' must look like 'field,asc' or 'field,desc'")
        return cls(field=name, direction=direction)

    def to_param(self) -> str:
        return f"{self.field},{self.direction}"


@dataclass(frozen=True)
class PageRequest:
    """
    What a caller asked for: an optional page window plus sort orders.

    page/size left as None mean "the whole ordered collection".
    """

    page: Optional[int] = None
    size: Optional[int] = None
    sort: Tuple[SortOrder, ...] = ()

    @property
    def is_paged(self) -> bool:
        return self.page is not None and self.size is not None

    @property
    def offset(self) -> int:
        return (self.page or 0) * (self.size or 0)


@dataclass
class Page(Generic[T]):
    """An ordered slice of a collection together with the collection's total size."""

    items: List[T]
    total: int
    request: PageRequest = field(default_factory=PageRequest)

    @property
    def total_pages(self) -> int:
        if not self.request.is_paged:
            return 1
        return max(1, math.ceil(self.total / self.request.size))


def parse_sort(values: Optional[Iterable[str]]) -> Tuple[SortOrder, ...]:
    """Parse every ?sort= value; raises ValueError on the first malformed one."""
    return tuple(SortOrder.parse(v) for v in (values or ()) if v)


def build_link_header(url: URL, page: Page) -> str:
    """
    Build the RFC 5988 Link header for a paginated response.

    Query parameters of the incoming URL other than page/size are preserved,
    so the sort order travels with every link.
    """
    size = page.request.size
    current = page.request.page
    last = page.total_pages - 1

    def link(target: int, rel: str) -> str:
        target_url = url.include_query_params(page=target, size=size)
        return f'<{target_url}>; rel="{rel}"'

    links = []
    if current < last:
        links.append(link(current + 1, "next"))
    if current > 0:
        links.append(link(current - 1, "prev"))
    links.append(link(last, "last"))
    links.append(link(0, "first"))
    return ",".join(links)


def parse_link_header(header: Optional[str]) -> Dict[str, int]:
    """
    Inverse of build_link_header: map each rel to its page index.

    Links without a parseable page parameter are skipped.
    """
    result: Dict[str, int] = {}
    if not header:
        return result
    for target, rel in _LINK_PATTERN.findall(header):
        page_value = QueryParams(URL(target).query).get("page")
        if page_value is not None and page_value.isdigit():
            result[rel] = int(page_value)
    return result


def pagination_headers(url: URL, page: Page) -> Dict[str, str]:
    """X-Total-Count, plus Link when the request was paged."""
    headers = {"X-Total-Count": str(page.total)}
    if page.request.is_paged:
        headers["Link"] = build_link_header(url, page)
    return headers
