from __future__ import annotations

import pytest

from gitnest.pagination import Pagination, parse_page


def test_total_pages_rounds_up() -> None:
    assert Pagination(total=101, page_size=50, current=1).total_pages == 3
    assert Pagination(total=0, page_size=50, current=1).total_pages == 1


def test_current_page_is_clamped() -> None:
    pager = Pagination(total=120, page_size=50, current=9)
    assert pager.current_page == 3
    assert pager.has_previous
    assert not pager.has_next


def test_window_of_links_around_current_page() -> None:
    assert Pagination(total=1000, page_size=10, current=1).pages() == [1, 2, 3, 4, 5]
    assert Pagination(total=1000, page_size=10, current=50).pages() == [48, 49, 50, 51, 52]
    assert Pagination(total=1000, page_size=10, current=100).pages() == [96, 97, 98, 99, 100]
    assert Pagination(total=30, page_size=10, current=2).pages() == [1, 2, 3]


def test_query_keeps_other_params() -> None:
    pager = Pagination(total=100, page_size=10, current=1, params={"q": "x", "page": "7"})
    assert pager.query(2) == "?q=x&page=2"


@pytest.mark.parametrize(("raw", "expected"), [(None, 1), ("3", 3), ("0", 1), ("-2", 1), ("abc", 1)])
def test_parse_page(raw: str | None, expected: int) -> None:
    assert parse_page(raw) == expected
