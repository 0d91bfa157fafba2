"""Tests for the human-behavior simulation."""

from unittest.mock import AsyncMock, MagicMock, call, patch

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from listing_scraper.behavior import CONTENT_SELECTOR, simulate_human_behavior


@pytest.fixture
def mock_page():
    page = MagicMock()
    page.mouse.move = AsyncMock()
    page.evaluate = AsyncMock()
    page.wait_for_selector = AsyncMock()
    return page


@pytest.fixture
def mock_sleep():
    with patch("listing_scraper.behavior.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


class TestSimulateHumanBehavior:
    """Tests for simulate_human_behavior."""

    @pytest.mark.asyncio
    async def test_choreography(self, mock_page, mock_sleep) -> None:
        """Test mouse path, scrolls and selector wait happen in order."""
        await simulate_human_behavior(mock_page, content_timeout_ms=1234)

        assert mock_page.mouse.move.await_args_list == [call(100, 100), call(300, 200), call(500, 400)]
        scripts = [c.args[0] for c in mock_page.evaluate.await_args_list]
        assert "window.scrollTo(0, 200)" in scripts[0]
        assert "window.scrollTo(0, 0)" in scripts[1]
        mock_page.wait_for_selector.assert_awaited_once_with(CONTENT_SELECTOR, timeout=1234)

    @pytest.mark.asyncio
    async def test_delays_are_bounded(self, mock_page, mock_sleep) -> None:
        """Test the reading delay is 3-6s and the fixed pauses follow."""
        await simulate_human_behavior(mock_page)

        delays = [c.args[0] for c in mock_sleep.await_args_list]
        assert 3 <= delays[0] <= 6
        assert delays[1:] == [0.5, 0.3, 0.2, 1.0, 1.5, 3.0]

    @pytest.mark.asyncio
    async def test_selector_timeout_tolerated(self, mock_page, mock_sleep) -> None:
        """Test a missing listing selector does not abort the simulation."""
        mock_page.wait_for_selector.side_effect = PlaywrightTimeoutError("Timeout 20000ms exceeded")

        await simulate_human_behavior(mock_page)

        # Final settle delay still runs
        assert mock_sleep.await_args_list[-1] == call(3.0)

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self, mock_page, mock_sleep) -> None:
        mock_page.wait_for_selector.side_effect = RuntimeError("Target page closed")

        with pytest.raises(RuntimeError):
            await simulate_human_behavior(mock_page)
