"""
Deadline-bounded Playwright session with request interception.

A session is created per extraction call and torn down before the call
returns. While it is open, every subresource request the page makes goes
through a RequestInterceptor that applies the session's ResourceBlockPolicy.
Playwright dispatches route handlers from its own event loop while the main
sequence is blocked in goto()/wait_for(), so interception never waits on the
navigation it is serving.
"""

from contextlib import contextmanager
from typing import Any, Callable, Optional
import logging

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from ..config import BrowserConfig
from ..errors import ExtractionFailed, PageLoadTimeout, SessionCreationFailed
from .deadline import Deadline
from .policy import Decision, ResourceBlockPolicy

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--no-sandbox",
    "--disable-setuid-sandbox",
]

HIDE_WEBDRIVER = "Object.defineProperty(navigator, 'webdriver', {get: () => undefined});"

ROUTE_PATTERN = "**/*"


class RequestInterceptor:
    """Allows or aborts each routed request according to a block policy."""

    def __init__(self, policy: ResourceBlockPolicy):
        self.policy = policy
        self.allowed = 0
        self.blocked = 0
        self._context = None

    def install(self, context):
        context.route(ROUTE_PATTERN, self.handle)
        self._context = context

    def uninstall(self):
        if self._context is None:
            return
        try:
            self._context.unroute(ROUTE_PATTERN, self.handle)
        except PlaywrightError as e:
            logger.debug("Failed to remove request interceptor: %s", e)
        self._context = None

    def handle(self, route):
        request = route.request
        decision = self.policy.classify(request.resource_type)
        try:
            if decision is Decision.DENY:
                route.abort("blockedbyclient")
                self.blocked += 1
            else:
                route.continue_()
                self.allowed += 1
        except PlaywrightError as e:
            # the page may already be gone during teardown
            logger.warning("Failed to %s request %s: %s", decision.value, request.url, e)


class BrowserSession:
    """One browser context bound to a local or remote Chromium.

    All primitives share one Deadline, started when the session is created.
    Use it as a context manager so the browser is released on every exit path.
    """

    def __init__(
        self,
        config: BrowserConfig,
        policy: ResourceBlockPolicy,
        timeout: Optional[float] = None,
        driver_factory: Callable[[], Any] = sync_playwright,
    ):
        self.config = config
        self.deadline = Deadline(timeout if timeout is not None else config.timeout_seconds)
        self.interceptor = RequestInterceptor(policy)
        self.page = None
        self.closed = False
        self._driver_factory = driver_factory
        self._playwright = None
        self._browser = None
        self._context = None

    def __enter__(self) -> "BrowserSession":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self) -> "BrowserSession":
        try:
            self._playwright = self._driver_factory().start()
            chromium = self._playwright.chromium
            endpoint = self.config.remote_endpoint
            if endpoint:
                logger.info("Connecting to remote Chrome at %s", endpoint)
                self._browser = chromium.connect_over_cdp(endpoint, timeout=self.deadline.remaining_ms())
                self._context = self._browser.new_context()
            else:
                logger.info("Launching local Chromium (headless=%s)", self.config.headless)
                self._browser = chromium.launch(
                    headless=self.config.headless,
                    args=LAUNCH_ARGS,
                    timeout=self.deadline.remaining_ms(),
                )
                self._context = self._browser.new_context(
                    user_agent=USER_AGENT,
                    viewport={"width": 1920, "height": 1080},
                    locale="en-US",
                )
                self._context.add_init_script(HIDE_WEBDRIVER)
            self.interceptor.install(self._context)
            self.page = self._context.new_page()
        except PageLoadTimeout:
            self.close()
            raise
        except PlaywrightTimeoutError as e:
            self.close()
            raise PageLoadTimeout() from e
        except (PlaywrightError, OSError) as e:
            self.close()
            raise SessionCreationFailed(e) from e
        return self

    def close(self):
        if self.closed:
            return
        self.closed = True
        self.interceptor.uninstall()
        for name, resource in (("context", self._context), ("browser", self._browser)):
            if resource is None:
                continue
            try:
                resource.close()
            except PlaywrightError as e:
                logger.debug("Failed to close %s: %s", name, e)
        if self._playwright is not None:
            try:
                self._playwright.stop()
            except PlaywrightError as e:
                logger.debug("Failed to stop playwright: %s", e)
        logger.debug(
            "Session closed: %d requests allowed, %d blocked",
            self.interceptor.allowed, self.interceptor.blocked,
        )
        self.page = self._context = self._browser = self._playwright = None

    @contextmanager
    def _step(self, what: str):
        if self.page is None:
            raise ExtractionFailed(RuntimeError(f"session is not open ({what})"))
        try:
            yield
        except PlaywrightTimeoutError as e:
            logger.debug("Timed out on %s", what)
            raise PageLoadTimeout() from e
        except PlaywrightError as e:
            if self.deadline.expired:
                raise PageLoadTimeout() from e
            raise ExtractionFailed(e) from e

    def _first(self, selector: str):
        return self.page.locator(selector.strip()).first

    def navigate(self, url: str):
        with self._step(f"navigate {url}"):
            timeout = self.deadline.remaining_ms()
            self.page.goto(url, wait_until="load", timeout=timeout)

    def wait_visible(self, selector: str):
        with self._step(f"wait for {selector}"):
            timeout = self.deadline.remaining_ms()
            self._first(selector).wait_for(state="visible", timeout=timeout)

    def click(self, selector: str):
        with self._step(f"click {selector}"):
            timeout = self.deadline.remaining_ms()
            self._first(selector).click(timeout=timeout)

    def read_text(self, selector: str) -> str:
        with self._step(f"read {selector}"):
            timeout = self.deadline.remaining_ms()
            return self._first(selector).inner_text(timeout=timeout).strip()

    def read_attribute(self, selector: str, name: str) -> str:
        with self._step(f"read @{name} of {selector}"):
            timeout = self.deadline.remaining_ms()
            value = self._first(selector).get_attribute(name, timeout=timeout)
        if value is None:
            raise ExtractionFailed(LookupError(f"{selector} has no {name!r} attribute"))
        return value

    def evaluate(self, script: str) -> Any:
        # evaluate() takes no timeout; only the entry check is bounded
        with self._step("evaluate"):
            self.deadline.remaining_ms()
            return self.page.evaluate(script)
