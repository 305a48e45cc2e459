import asyncio
import threading
import time
from unittest.mock import MagicMock

import pytest
from selenium.common.exceptions import TimeoutException, WebDriverException

from app.features.crawler.services import page_scripts
from app.features.crawler.services.crawler_service import AccessibilityCrawler, crawl_page
from app.features.crawler.services.session_manager import BrowserSessionManager
from app.platform.config import Settings
from app.platform.exceptions import NavigationError
from tests.factories import make_driver, make_session


def browser_driver(status=200, responses=None):
    """Mock driver that tracks tabs the way Chrome does: one home window plus opened tabs."""
    scripted = {
        page_scripts.NETWORK_IDLE_SCRIPT: True,
        page_scripts.NAVIGATION_STATUS_SCRIPT: status,
    }
    scripted.update(responses or {})
    driver = make_driver(scripted)
    driver.current_window_handle = "home"
    opened = iter(f"tab-{n}" for n in range(1, 100))

    def new_window(kind):
        driver.current_window_handle = next(opened)

    driver.switch_to.new_window.side_effect = new_window
    return driver


def manager_for(driver, **overrides):
    config = Settings(**{"NAVIGATION_TIMEOUT_SECONDS": 5, **overrides})
    factory = MagicMock(return_value=driver)
    return BrowserSessionManager(config, driver_factory=factory), factory


class TestBrowserSessionManager:
    def test_open_session_navigates_in_new_tab(self):
        driver = browser_driver()
        manager, factory = manager_for(driver)

        session = manager.open_session("https://example.com")

        driver.get.assert_called_once_with("https://example.com")
        driver.set_page_load_timeout.assert_called_once_with(5)
        assert session.window_handle == "tab-1"
        assert session.status == 200
        assert session.page_load_time_ms >= 0
        assert manager.is_running

    def test_browser_is_reused_across_sessions(self):
        driver = browser_driver()
        manager, factory = manager_for(driver)

        with manager.session("https://example.com/a"):
            pass
        with manager.session("https://example.com/b") as second:
            assert second.window_handle == "tab-2"

        factory.assert_called_once()
        driver.quit.assert_not_called()

    def test_close_session_closes_tab_and_returns_home(self):
        driver = browser_driver()
        manager, _ = manager_for(driver)

        with manager.session("https://example.com") as session:
            pass

        assert session.closed is True
        driver.close.assert_called_once()
        driver.switch_to.window.assert_any_call("tab-1")
        assert driver.switch_to.window.call_args_list[-1].args == ("home",)

    def test_session_closed_when_body_raises(self):
        driver = browser_driver()
        manager, _ = manager_for(driver)

        with pytest.raises(RuntimeError):
            with manager.session("https://example.com"):
                raise RuntimeError("extraction blew up")

        driver.close.assert_called_once()

    def test_timeout_raises_navigation_error_and_closes_tab(self):
        driver = browser_driver()
        driver.get.side_effect = TimeoutException("timed out")
        manager, _ = manager_for(driver)

        with pytest.raises(NavigationError) as exc_info:
            manager.open_session("https://slow.example.com")

        assert exc_info.value.timed_out is True
        assert exc_info.value.status is None
        driver.close.assert_called_once()

    @pytest.mark.parametrize("status", [404, 500, 503])
    def test_error_status_raises_navigation_error(self, status):
        driver = browser_driver(status=status)
        manager, _ = manager_for(driver)

        with pytest.raises(NavigationError) as exc_info:
            manager.open_session("https://example.com/missing")

        assert exc_info.value.status == status
        assert str(status) in str(exc_info.value)
        driver.close.assert_called_once()

    def test_unknown_status_is_accepted(self):
        driver = browser_driver(status=0)
        manager, _ = manager_for(driver)

        session = manager.open_session("https://example.com")

        assert session.status is None

    def test_driver_error_raises_navigation_error(self):
        driver = browser_driver()
        driver.get.side_effect = WebDriverException("net::ERR_NAME_NOT_RESOLVED")
        manager, _ = manager_for(driver)

        with pytest.raises(NavigationError) as exc_info:
            manager.open_session("https://nowhere.invalid")

        assert "ERR_NAME_NOT_RESOLVED" in exc_info.value.reason
        assert exc_info.value.timed_out is False

    def test_unsettled_network_times_out(self):
        driver = browser_driver(responses={page_scripts.NETWORK_IDLE_SCRIPT: False})
        manager, _ = manager_for(driver, NAVIGATION_TIMEOUT_SECONDS=1)

        with pytest.raises(NavigationError) as exc_info:
            manager.open_session("https://busy.example.com")

        assert exc_info.value.timed_out is True
        driver.close.assert_called_once()

    def test_idle_check_enlarges_resource_timing_buffer(self):
        script = page_scripts.NETWORK_IDLE_SCRIPT

        assert "setResourceTimingBufferSize(5000)" in script
        assert script.index("setResourceTimingBufferSize") < script.index("getEntriesByType('resource')")

    def test_lost_driver_connection_raises_navigation_error(self):
        driver = browser_driver()
        driver.get.side_effect = ConnectionRefusedError(111, "Connection refused")
        manager, _ = manager_for(driver)

        with pytest.raises(NavigationError) as exc_info:
            manager.open_session("https://example.com")

        assert "Connection refused" in exc_info.value.reason
        assert isinstance(exc_info.value.__cause__, ConnectionRefusedError)
        driver.close.assert_called_once()

    def test_unreachable_driver_on_new_tab_raises_navigation_error(self):
        driver = browser_driver()
        driver.switch_to.new_window.side_effect = ConnectionRefusedError(111, "Connection refused")
        manager, _ = manager_for(driver)

        with pytest.raises(NavigationError):
            manager.open_session("https://example.com")

        driver.get.assert_not_called()

    def test_browser_launch_failure_raises_navigation_error(self):
        config = Settings(NAVIGATION_TIMEOUT_SECONDS=5)
        factory = MagicMock(side_effect=OSError("chrome binary not found"))
        manager = BrowserSessionManager(config, driver_factory=factory)

        with pytest.raises(NavigationError) as exc_info:
            manager.open_session("https://example.com")

        assert "chrome binary not found" in exc_info.value.reason
        assert not manager.is_running

    def test_close_quits_browser_once(self):
        driver = browser_driver()
        manager, _ = manager_for(driver)
        manager.open_session("https://example.com")

        manager.close()
        manager.close()

        driver.quit.assert_called_once()
        assert not manager.is_running

    def test_build_driver_options(self, monkeypatch):
        captured = {}

        def fake_chrome(options=None, service=None):
            captured["args"] = options.arguments
            return MagicMock()

        monkeypatch.setattr(
            "app.features.crawler.services.session_manager.webdriver.Chrome", fake_chrome
        )

        BrowserSessionManager.build_driver(Settings(VIEWPORT_WIDTH=1920, VIEWPORT_HEIGHT=1080))

        assert "--window-size=1920,1080" in captured["args"]
        assert any(arg.startswith("--user-agent=Mozilla/5.0") for arg in captured["args"])
        assert "--headless=new" in captured["args"]


class TestCrawlPage:
    @pytest.mark.asyncio
    async def test_timeout_produces_no_document_and_releases_browser(self):
        driver = browser_driver()
        driver.get.side_effect = TimeoutException("timed out")
        manager, _ = manager_for(driver)

        with pytest.raises(NavigationError):
            await crawl_page("https://slow.example.com", manager)

        driver.close.assert_called_once()
        driver.quit.assert_called_once()
        assert not manager.is_running

    @pytest.mark.asyncio
    async def test_successful_crawl_tears_everything_down(self):
        driver = browser_driver(responses={
            page_scripts.FORMS_SCRIPT: {"controls": [], "forms": []},
            page_scripts.METADATA_SCRIPT: {"title": "Example"},
        })
        manager, _ = manager_for(driver)

        document = await crawl_page("https://example.com", manager)

        assert document.page_metadata.title == "Example"
        driver.close.assert_called_once()
        driver.quit.assert_called_once()

    @pytest.mark.asyncio
    async def test_crawler_reuses_browser_between_requests(self):
        driver = browser_driver()
        manager, factory = manager_for(driver)

        async with AccessibilityCrawler(manager) as crawler:
            await crawler.extract_page_data("https://example.com/a")
            await crawler.extract_page_data("https://example.com/b")

        factory.assert_called_once()
        assert driver.close.call_count == 2
        driver.quit.assert_called_once()


class SlowOpeningManager:
    """Session manager whose navigation blocks, recording how many opens overlap."""

    def __init__(self, delay=0.3):
        self.delay = delay
        self.active = 0
        self.max_active = 0
        self.events = []
        self._guard = threading.Lock()

    def open_session(self, url):
        with self._guard:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        time.sleep(self.delay)
        with self._guard:
            self.active -= 1
            self.events.append(("open", url))
        return make_session(url=url)

    def close_session(self, session):
        with self._guard:
            self.events.append(("close", session.url))

    def close(self):
        pass


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancelled_open_holds_browser_until_its_tab_is_closed(self):
        manager = SlowOpeningManager()
        crawler = AccessibilityCrawler(manager)

        first = asyncio.ensure_future(crawler.extract_page_data("https://example.com/a"))
        await asyncio.sleep(0.05)
        first.cancel()
        second = asyncio.ensure_future(crawler.extract_page_data("https://example.com/b"))

        with pytest.raises(asyncio.CancelledError):
            await first
        document = await second

        assert manager.max_active == 1
        assert manager.events == [
            ("open", "https://example.com/a"),
            ("close", "https://example.com/a"),
            ("open", "https://example.com/b"),
            ("close", "https://example.com/b"),
        ]
        assert document.url == "https://example.com/b"

    @pytest.mark.asyncio
    async def test_cancelled_failed_open_releases_lock(self):
        manager = SlowOpeningManager()
        manager.open_session = MagicMock(side_effect=NavigationError("https://example.com/a", status=404))
        crawler = AccessibilityCrawler(manager)

        first = asyncio.ensure_future(crawler.extract_page_data("https://example.com/a"))
        await asyncio.sleep(0)
        first.cancel()

        with pytest.raises((asyncio.CancelledError, NavigationError)):
            await first
        assert not crawler._lock.locked()
