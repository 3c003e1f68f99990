from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlencode


@dataclass(frozen=True)
class Pagination:
    total: int
    page_size: int
    current: int
    num_links: int = 5
    params: dict[str, str] = field(default_factory=dict)

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0 or self.total <= 0:
            return 1
        return (self.total + self.page_size - 1) // self.page_size

    @property
    def current_page(self) -> int:
        return min(max(self.current, 1), self.total_pages)

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def previous(self) -> int:
        return max(self.current_page - 1, 1)

    @property
    def next(self) -> int:
        return min(self.current_page + 1, self.total_pages)

    def pages(self) -> list[int]:
        """A window of at most ``num_links`` page numbers around the current page."""
        total_pages = self.total_pages
        if total_pages <= self.num_links:
            return list(range(1, total_pages + 1))

        half = self.num_links // 2
        start = max(self.current_page - half, 1)
        end = start + self.num_links - 1
        if end > total_pages:
            end = total_pages
            start = end - self.num_links + 1
        return list(range(start, end + 1))

    def query(self, page: int) -> str:
        params = {key: value for key, value in sorted(self.params.items()) if key != "page"}
        params["page"] = str(page)
        return "?" + urlencode(params)


def parse_page(raw: str | int | None) -> int:
    try:
        page = int(raw) if raw is not None else 1
    except ValueError:
        return 1
    return page if page > 0 else 1
