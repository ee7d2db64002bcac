"""
WayShare Backend - Sorting and Pagination Unit Tests
=====================================================

What we test:
    ✅ sort parameter parsing (default direction, case, malformed input)
    ✅ page arithmetic (offset, total pages)
    ✅ Link header generation and parsing
    ✅ X-Total-Count on paged and unpaged results
"""

import pytest
from starlette.datastructures import URL

from wayshare.pagination import (
    ASC,
    DESC,
    Page,
    PageRequest,
    SortOrder,
    build_link_header,
    pagination_headers,
    parse_link_header,
    parse_sort,
)


class TestSortOrder:

    def test_field_and_direction(self):
        assert SortOrder.parse("startTime,desc") == SortOrder("startTime", DESC)

    def test_direction_defaults_to_asc(self):
        assert SortOrder.parse("startTime") == SortOrder("startTime", ASC)

    def test_direction_is_case_insensitive(self):
        assert SortOrder.parse("id,DESC").direction == DESC

    @pytest.mark.parametrize("value", [",asc", "id,sideways", "id,asc,extra"])
    def test_malformed_values_raise(self, value):
        with pytest.raises(ValueError):
            SortOrder.parse(value)

    def test_parse_sort_skips_empty_values(self):
        assert parse_sort(["id,desc", ""]) == (SortOrder("id", DESC),)
        assert parse_sort(None) == ()


class TestPageRequest:

    def test_unpaged_by_default(self):
        request = PageRequest()
        assert not request.is_paged
        assert request.offset == 0

    def test_offset(self):
        assert PageRequest(page=3, size=20).offset == 60

    @pytest.mark.parametrize("total,expected", [(0, 1), (20, 1), (21, 2), (45, 3)])
    def test_total_pages(self, total, expected):
        page = Page(items=[], total=total, request=PageRequest(page=0, size=20))
        assert page.total_pages == expected


class TestLinkHeader:

    URL = URL("http://test/api/notifications?page=1&size=10&sort=timestamp,desc")

    def test_middle_page_has_every_rel(self):
        page = Page(items=[], total=35, request=PageRequest(page=1, size=10))
        links = parse_link_header(build_link_header(self.URL, page))
        assert links == {"next": 2, "prev": 0, "last": 3, "first": 0}

    def test_first_page_has_no_prev(self):
        page = Page(items=[], total=35, request=PageRequest(page=0, size=10))
        links = parse_link_header(build_link_header(self.URL, page))
        assert "prev" not in links
        assert links["next"] == 1

    def test_last_page_has_no_next(self):
        page = Page(items=[], total=35, request=PageRequest(page=3, size=10))
        links = parse_link_header(build_link_header(self.URL, page))
        assert "next" not in links
        assert links["last"] == 3

    def test_links_keep_the_sort_order(self):
        page = Page(items=[], total=35, request=PageRequest(page=1, size=10))
        header = build_link_header(self.URL, page)
        assert header.count("sort=timestamp") == 4

    def test_parse_handwritten_header(self):
        header = (
            '<http://t/api/notifications?page=1&size=2>; rel="next",'
            '<http://t/api/notifications?size=2&page=4>; rel="last"'
        )
        assert parse_link_header(header) == {"next": 1, "last": 4}

    def test_parse_ignores_garbage(self):
        assert parse_link_header(None) == {}
        assert parse_link_header('<http://test/api/x>; rel="next"') == {}


class TestPaginationHeaders:

    def test_unpaged_result_has_count_only(self):
        page = Page(items=[1, 2, 3], total=3)
        headers = pagination_headers(URL("http://test/api/rides"), page)
        assert headers == {"X-Total-Count": "3"}

    def test_paged_result_has_link(self):
        page = Page(items=[1], total=41, request=PageRequest(page=0, size=20))
        headers = pagination_headers(URL("http://test/api/ride-requests"), page)
        assert headers["X-Total-Count"] == "41"
        assert 'rel="last"' in headers["Link"]
