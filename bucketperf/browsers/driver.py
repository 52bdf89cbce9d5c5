"""Selenium WebDriver sessions.

WebDriver calls block, so each session runs them on its own single-thread
executor.  A run never waits on another run's worker, and the event loop
stays free while drivers block.
"""

from __future__ import annotations

import abc
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Callable, Optional, TypeVar

from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from bucketperf.browsers.base import PageSession, PopulationTimeout
from bucketperf.config import ROW_SELECTOR

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SeleniumSession(PageSession):
    """Shared WebDriver plumbing; subclasses only build the driver."""

    def __init__(self, headless: bool = True) -> None:
        self.headless = headless
        self._driver: Optional[WebDriver] = None
        self._executor: Optional[ThreadPoolExecutor] = None

    @abc.abstractmethod
    def _build_driver(self) -> WebDriver:
        """Create and return a new WebDriver (runs in the session's worker thread)."""

    @property
    def driver(self) -> WebDriver:
        if self._driver is None:
            raise RuntimeError(f"{self.slug} session is not open")
        return self._driver

    async def _call(self, fn: Callable[..., T], *args) -> T:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix=f"bucketperf-{self.slug}",
            )
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, partial(fn, *args))

    async def open(self) -> None:
        self._driver = await self._call(self._build_driver)

    async def load(self, url: str) -> None:
        await self._call(self.driver.get, url)

    async def wait_for_rows(self, count: int, timeout: float) -> None:
        selector = f"{ROW_SELECTOR}:nth-child({count})"
        locator = (By.CSS_SELECTOR, selector)
        driver = self.driver

        def _wait() -> None:
            WebDriverWait(driver, timeout).until(EC.visibility_of_element_located(locator))

        try:
            await self._call(_wait)
        except TimeoutException as exc:
            raise PopulationTimeout(count, timeout) from exc

    async def scrape_rows(self) -> list[list[str]]:
        driver = self.driver

        def _scrape() -> list[list[str]]:
            rows = driver.find_elements(By.CSS_SELECTOR, ROW_SELECTOR)
            return [
                [cell.text.strip() for cell in row.find_elements(By.TAG_NAME, "td")]
                for row in rows
            ]

        return await self._call(_scrape)

    async def close(self) -> None:
        driver, self._driver = self._driver, None
        try:
            if driver is not None:
                await self._call(driver.quit)
        except WebDriverException as exc:
            logger.debug("Error closing %s session: %s", self.slug, exc)
        finally:
            if self._executor is not None:
                self._executor.shutdown(wait=False)
                self._executor = None
