"""Headless Chrome session."""

from __future__ import annotations

from selenium import webdriver
from selenium.webdriver.remote.webdriver import WebDriver

from bucketperf.browsers.driver import SeleniumSession


class ChromeSession(SeleniumSession):
    """Chrome via chromedriver, returning control at DOMContentLoaded."""

    @property
    def slug(self) -> str:
        return "chrome"

    def _build_driver(self) -> WebDriver:
        options = webdriver.ChromeOptions()
        if self.headless:
            options.add_argument("--headless=new")
        options.add_argument("--no-sandbox")
        options.add_argument("--disable-dev-shm-usage")
        options.page_load_strategy = "eager"
        return webdriver.Chrome(options=options)
