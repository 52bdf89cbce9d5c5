"""Headless Firefox session."""

from __future__ import annotations

from selenium import webdriver
from selenium.webdriver.remote.webdriver import WebDriver

from bucketperf.browsers.driver import SeleniumSession


class FirefoxSession(SeleniumSession):

    @property
    def slug(self) -> str:
        return "firefox"

    def _build_driver(self) -> WebDriver:
        options = webdriver.FirefoxOptions()
        if self.headless:
            options.add_argument("-headless")
        options.page_load_strategy = "eager"
        return webdriver.Firefox(options=options)
