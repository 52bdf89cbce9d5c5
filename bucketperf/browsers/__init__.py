"""Browser session registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bucketperf.browsers.base import PageSession

_BROWSER_MAP: dict[str, type[PageSession]] | None = None


def _load_browsers() -> dict[str, type[PageSession]]:
    from bucketperf.browsers.chrome import ChromeSession
    from bucketperf.browsers.firefox import FirefoxSession

    return {
        "chrome": ChromeSession,
        "firefox": FirefoxSession,
    }


def get_browser_map() -> dict[str, type[PageSession]]:
    """Return the mapping of slug → session class, loading lazily."""
    global _BROWSER_MAP
    if _BROWSER_MAP is None:
        _BROWSER_MAP = _load_browsers()
    return _BROWSER_MAP


def get_browser(slug: str, headless: bool = True) -> PageSession:
    """Instantiate a fresh, unopened session by slug."""
    bmap = get_browser_map()
    if slug not in bmap:
        raise ValueError(f"Unknown browser: {slug!r}. Available: {list(bmap)}")
    return bmap[slug](headless=headless)


def list_browsers() -> list[str]:
    """Return sorted list of available browser slugs."""
    return sorted(get_browser_map())
