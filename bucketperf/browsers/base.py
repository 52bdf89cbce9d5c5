"""Abstract base class for isolated page-loading sessions."""

from __future__ import annotations

import abc


class PopulationTimeout(Exception):
    """The results table did not reach the expected row count in time."""

    def __init__(self, expected_rows: int, timeout: float):
        self.expected_rows = expected_rows
        self.timeout = timeout
        super().__init__(f"Results table did not reach {expected_rows} rows within {timeout:g}s")


class PageSession(abc.ABC):
    """One isolated execution context used by a single batch unit.

    A session is opened, loads one page, waits for the results table to
    fill, scrapes it and is closed.  Sessions never share state.
    """

    @property
    @abc.abstractmethod
    def slug(self) -> str:
        """Short identifier (e.g. 'chrome')."""

    @abc.abstractmethod
    async def open(self) -> None:
        """Start the underlying browser."""

    @abc.abstractmethod
    async def load(self, url: str) -> None:
        """Navigate to *url*, returning once the DOM is ready."""

    @abc.abstractmethod
    async def wait_for_rows(self, count: int, timeout: float) -> None:
        """Block until at least *count* result rows are rendered.

        Raises :class:`PopulationTimeout` if *timeout* seconds elapse first.
        """

    @abc.abstractmethod
    async def scrape_rows(self) -> list[list[str]]:
        """Return the cell texts of every rendered result row."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Tear the browser down.  Must be safe to call after a failed open."""
