"""Cursor pagination under a hard page budget.

The paginator is a small state machine::

    FETCHING -> HAS_MORE -> FETCHING -> ... -> EXHAUSTED
        \\                                \\
         +-> FAILED                         +-> FAILED

``EXHAUSTED`` is reached either when the source reports no further page or
when ``max_pages`` requests have been issued. In the second case
``truncated`` is set.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class PageState(Enum):
    FETCHING = "fetching"
    HAS_MORE = "has_more"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


@dataclass(frozen=True)
class Page:
    nodes: list[dict[str, Any]]
    has_next_page: bool
    end_cursor: str | None


class CursorPaginator:
    def __init__(self, fetch_page: Callable[[str | None], Page], max_pages: int) -> None:
        if max_pages < 1:
            raise ValueError(f"max_pages must be at least 1, got {max_pages}")
        self._fetch_page = fetch_page
        self.max_pages = max_pages
        self.state = PageState.HAS_MORE
        self.cursor: str | None = None
        self.pages_fetched = 0
        self.truncated = False

    @property
    def done(self) -> bool:
        return self.state in (PageState.EXHAUSTED, PageState.FAILED)

    def advance(self) -> Page:
        """Issue exactly one request and move to the next state."""
        if self.done:
            raise RuntimeError(f"Paginator is {self.state.value}; no further pages can be fetched.")

        self.state = PageState.FETCHING
        try:
            page = self._fetch_page(self.cursor)
        except Exception:
            self.state = PageState.FAILED
            raise
        self.pages_fetched += 1
        logger.debug("Fetched page %d (%d nodes)", self.pages_fetched, len(page.nodes))

        if not page.has_next_page or not page.end_cursor:
            self.state = PageState.EXHAUSTED
        elif self.pages_fetched >= self.max_pages:
            self.state = PageState.EXHAUSTED
            self.truncated = True
            logger.debug("Page ceiling of %d reached; more pages were available", self.max_pages)
        else:
            self.state = PageState.HAS_MORE
            self.cursor = page.end_cursor
        return page

    def __iter__(self) -> Iterator[Page]:
        while not self.done:
            yield self.advance()
