"""Tests for the shared browser manager."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from listing_scraper import config
from listing_scraper.browser import BrowserManager


def _make_browser(connected: bool = True):
    browser = MagicMock()
    browser.is_connected.return_value = connected
    browser.close = AsyncMock()
    return browser


def _make_launcher(*browsers):
    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(side_effect=list(browsers))
    playwright.stop = AsyncMock()
    launcher = MagicMock()
    launcher.return_value.start = AsyncMock(return_value=playwright)
    return launcher, playwright


class TestBrowserManager:
    """Tests for BrowserManager."""

    @pytest.mark.asyncio
    async def test_lazy_launch_and_reuse(self) -> None:
        browser = _make_browser()
        launcher, playwright = _make_launcher(browser)
        manager = BrowserManager(launcher=launcher)

        assert manager.is_connected() is None
        assert launcher.call_count == 0

        first = await manager.get_browser()
        second = await manager.get_browser()

        assert first is second is browser
        playwright.chromium.launch.assert_awaited_once_with(
            headless=not config.HEADFUL, args=config.BROWSER_ARGS
        )
        assert manager.is_connected() is True

    @pytest.mark.asyncio
    async def test_relaunch_when_disconnected(self) -> None:
        dead = _make_browser()
        fresh = _make_browser()
        launcher, playwright = _make_launcher(dead, fresh)
        manager = BrowserManager(launcher=launcher)

        assert await manager.get_browser() is dead
        dead.is_connected.return_value = False

        assert await manager.get_browser() is fresh
        assert playwright.chromium.launch.await_count == 2
        # Driver is started once and reused
        assert launcher.return_value.start.await_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_first_use_launches_once(self) -> None:
        browser = _make_browser()
        launcher, playwright = _make_launcher(browser, _make_browser())
        manager = BrowserManager(launcher=launcher)

        results = await asyncio.gather(*(manager.get_browser() for _ in range(5)))

        assert all(b is browser for b in results)
        playwright.chromium.launch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_once(self) -> None:
        browser = _make_browser()
        launcher, playwright = _make_launcher(browser)
        manager = BrowserManager(launcher=launcher)
        await manager.get_browser()

        await manager.close()
        await manager.close()

        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
        assert manager.is_connected() is None

    @pytest.mark.asyncio
    async def test_close_errors_are_swallowed(self) -> None:
        browser = _make_browser()
        browser.close.side_effect = RuntimeError("already gone")
        launcher, playwright = _make_launcher(browser)
        manager = BrowserManager(launcher=launcher)
        await manager.get_browser()

        await manager.close()

        playwright.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_without_launch(self) -> None:
        launcher, _ = _make_launcher()
        manager = BrowserManager(launcher=launcher)
        await manager.close()
        assert launcher.call_count == 0
