import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.support.ui import WebDriverWait

from app.features.crawler.services.page_scripts import (
    NAVIGATION_STATUS_SCRIPT,
    NETWORK_IDLE_SCRIPT,
)
from app.platform.config import Settings, settings as default_settings
from app.platform.exceptions import NavigationError
from app.platform.logger import get_logger

logger = get_logger(__name__)


class PageSession:
    """
    One navigated browser tab, owned by a single extraction request.

    Extractors only ever read from it through :meth:`evaluate` and
    :meth:`page_source`; the tab is never re-navigated once handed out.
    """

    def __init__(
        self,
        driver: webdriver.Chrome,
        window_handle: str,
        url: str,
        page_load_time_ms: int,
        status: Optional[int] = None,
    ):
        self.driver = driver
        self.window_handle = window_handle
        self.url = url
        self.page_load_time_ms = page_load_time_ms
        self.status = status
        self.closed = False

    def evaluate(self, script: str, *args: Any) -> Any:
        return self.driver.execute_script(script, *args)

    def page_source(self) -> str:
        return self.driver.page_source or ""

    def __repr__(self) -> str:
        return f"PageSession(url={self.url!r}, status={self.status}, closed={self.closed})"


class BrowserSessionManager:
    """
    Owns the headless Chrome process and hands out one tab per request.

    The driver is launched lazily on the first session and reused for the
    sessions that follow until :meth:`close` is called. Selenium drives one
    focused tab at a time, so sessions on the same manager must not overlap.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        driver_factory: Optional[Callable[[Settings], webdriver.Chrome]] = None,
    ):
        self.config = config or default_settings
        self._driver_factory = driver_factory or BrowserSessionManager.build_driver
        self._driver: Optional[webdriver.Chrome] = None
        self._home_handle: Optional[str] = None

    @staticmethod
    def build_driver(config: Settings) -> webdriver.Chrome:
        chrome_options = Options()
        if config.BROWSER_HEADLESS:
            chrome_options.add_argument("--headless=new")
        chrome_options.add_argument("--no-sandbox")
        chrome_options.add_argument("--disable-dev-shm-usage")
        chrome_options.add_argument("--disable-gpu")
        chrome_options.add_argument("--no-first-run")
        chrome_options.add_argument("--disable-blink-features=AutomationControlled")
        chrome_options.add_argument(f"--window-size={config.VIEWPORT_WIDTH},{config.VIEWPORT_HEIGHT}")
        chrome_options.add_argument(f"--user-agent={config.USER_AGENT}")

        if config.CHROMEDRIVER_PATH:
            driver_service = Service(executable_path=config.CHROMEDRIVER_PATH)
            return webdriver.Chrome(service=driver_service, options=chrome_options)
        return webdriver.Chrome(options=chrome_options)

    @property
    def is_running(self) -> bool:
        return self._driver is not None

    def _ensure_driver(self) -> webdriver.Chrome:
        if self._driver is None:
            logger.info("Launching headless browser")
            driver = self._driver_factory(self.config)
            try:
                driver.set_page_load_timeout(self.config.NAVIGATION_TIMEOUT_SECONDS)
                self._home_handle = driver.current_window_handle
            except WebDriverException:
                driver.quit()
                raise
            self._driver = driver
        return self._driver

    def open_session(self, url: str) -> PageSession:
        """
        Open a fresh tab and navigate it to ``url``.

        Raises:
            NavigationError: on timeout, a non-2xx response, or any browser
                error during navigation. The tab is closed before raising.
        """
        try:
            driver = self._ensure_driver()
        except WebDriverException as e:
            raise NavigationError(url, reason=f"Browser failed to start: {e.msg or e}") from e
        except Exception as e:
            raise NavigationError(url, reason=f"Browser failed to start: {e!r}") from e

        try:
            driver.switch_to.new_window("tab")
            handle = driver.current_window_handle
        except WebDriverException as e:
            raise NavigationError(url, reason=f"Could not open a browser tab: {e.msg or e}") from e
        except Exception as e:
            # chromedriver unreachable: urllib3 errors are not WebDriverExceptions
            raise NavigationError(url, reason=f"Could not open a browser tab: {e!r}") from e

        start_time = time.monotonic()

        try:
            driver.get(url)
            self._wait_for_network_idle(driver, start_time)
            status = self._navigation_status(driver)
        except TimeoutException as e:
            self._close_tab(handle)
            raise NavigationError(url, timed_out=True) from e
        except WebDriverException as e:
            self._close_tab(handle)
            raise NavigationError(url, reason=e.msg or str(e)) from e
        except Exception as e:
            self._close_tab(handle)
            raise NavigationError(url, reason=f"Browser connection failed: {e!r}") from e

        page_load_time_ms = int((time.monotonic() - start_time) * 1000)

        if status and not 200 <= status < 300:
            self._close_tab(handle)
            raise NavigationError(url, status=status)

        logger.info(f"Loaded {url} (status={status or 'unknown'}) in {page_load_time_ms}ms")
        return PageSession(driver, handle, url, page_load_time_ms, status or None)

    def close_session(self, session: PageSession) -> None:
        if session.closed:
            return
        session.closed = True
        self._close_tab(session.window_handle)

    @contextmanager
    def session(self, url: str) -> Iterator[PageSession]:
        page = self.open_session(url)
        try:
            yield page
        finally:
            self.close_session(page)

    def close(self) -> None:
        """Quit the browser process. Safe to call more than once."""
        driver, self._driver = self._driver, None
        self._home_handle = None
        if driver is None:
            return
        try:
            driver.quit()
            logger.info("Browser closed")
        except WebDriverException as e:
            logger.warning(f"Error while quitting browser: {e}")

    def __enter__(self) -> "BrowserSessionManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _wait_for_network_idle(self, driver: webdriver.Chrome, start_time: float) -> None:
        """Block until the network settles; raises TimeoutException once the navigation timeout is spent."""
        remaining = self.config.NAVIGATION_TIMEOUT_SECONDS - (time.monotonic() - start_time)
        if remaining <= 0:
            raise TimeoutException("Navigation timeout elapsed before network settled")
        WebDriverWait(driver, remaining, poll_frequency=0.25).until(
            lambda d: d.execute_script(NETWORK_IDLE_SCRIPT, self.config.NETWORK_IDLE_MS) is True,
            message=f"Network did not settle within {remaining:.1f}s",
        )

    @staticmethod
    def _navigation_status(driver: webdriver.Chrome) -> int:
        status = driver.execute_script(NAVIGATION_STATUS_SCRIPT)
        try:
            return int(status or 0)
        except (TypeError, ValueError):
            return 0

    def _close_tab(self, handle: str) -> None:
        driver = self._driver
        if driver is None:
            return
        try:
            driver.switch_to.window(handle)
            driver.close()
            if self._home_handle:
                driver.switch_to.window(self._home_handle)
        except WebDriverException as e:
            logger.warning(f"Error while closing tab: {e}")
