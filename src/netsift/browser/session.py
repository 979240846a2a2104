"""Playwright browser session that records network traffic.

Every request the page issues is appended to a CaptureStore as it happens,
and its response is attached once it arrives. The query engine reads the
store; this module only feeds it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, ClassVar

from netsift.capture.store import CapturedRequest, CapturedResponse, CaptureStore
from netsift.config import get_body_timeout, get_headless_mode

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, Page, Playwright, Request, Response

logger = logging.getLogger(__name__)


def get_resource_type(request: Request) -> str | None:
    """Read a request's resource type, None when it is unavailable.

    Classification based on it is best effort: some request kinds do not
    expose a type and are treated as unknown.
    """
    try:
        return request.resource_type
    except Exception as e:
        logger.debug(f"Resource type unavailable for {request.url}: {e}")
        return None


def get_post_data(request: Request) -> str | None:
    """Read a request's POST body as text, None when there is none.

    Binary bodies are not valid UTF-8; they are decoded with replacement
    characters so the exchange is still captured.
    """
    try:
        return request.post_data
    except UnicodeDecodeError:
        logger.debug(f"Binary POST body for {request.url}, decoding with replacement")
        buffer = request.post_data_buffer
        return buffer.decode("utf-8", errors="replace") if buffer is not None else None
    except Exception as e:
        logger.debug(f"POST body unavailable for {request.url}: {e}")
        return None


def capture_request(request: Request) -> CapturedRequest:
    """Convert a Playwright request into a CapturedRequest."""
    return CapturedRequest(
        method=request.method,
        url=request.url,
        headers=dict(request.headers),
        post_data=get_post_data(request),
        resource_type=get_resource_type(request),
    )


def capture_response(response: Response, body_timeout: float | None = None) -> CapturedResponse:
    """Convert a Playwright response into a CapturedResponse with a lazy body."""
    return CapturedResponse(
        status=response.status,
        status_text=response.status_text,
        headers=dict(response.headers),
        body_loader=response.text,
        body_timeout=body_timeout,
    )


class CaptureSession:
    """Browser page with network capture.

    Attributes:
        store: Captured exchanges in the order the page issued them
    """

    def __init__(self, headless: bool | None = None, body_timeout: float | None = None) -> None:
        """Initialize capture session.

        Args:
            headless: Run the browser headless (default from NETSIFT_HEADLESS)
            body_timeout: Per-body read timeout (default from NETSIFT_BODY_TIMEOUT)
        """
        self.store = CaptureStore()
        self.headless = get_headless_mode() if headless is None else headless
        self.body_timeout = get_body_timeout() if body_timeout is None else body_timeout
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    @property
    def is_started(self) -> bool:
        return self._page is not None

    def _on_request(self, request: Request) -> None:
        self.store.add(capture_request(request), source=request)

    def _on_response(self, response: Response) -> None:
        if not self.store.attach_response(response.request, capture_response(response, self.body_timeout)):
            logger.debug(f"Response without captured request: {response.url}")

    def attach(self, page: Page) -> Page:
        """Start recording the network traffic of ``page``."""
        page.on("request", self._on_request)
        page.on("response", self._on_response)
        self._page = page
        return page

    async def start(self) -> Page:
        """Launch the browser and open a recording page.

        Returns:
            Playwright Page instance for interaction
        """
        from playwright.async_api import async_playwright

        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self.headless)
        self._context = await self._browser.new_context()
        page = await self._context.new_page()
        logger.info(f"Capture session started (headless={self.headless})")
        return self.attach(page)

    async def close(self) -> None:
        """Close the browser. Captured exchanges are kept until cleared."""
        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        self._context = None
        self._page = None

    def _require_page(self) -> Page:
        if not self._page:
            raise RuntimeError("Session not started")
        return self._page

    async def navigate(self, url: str) -> str:
        """Navigate to specified URL.

        Args:
            url: Target URL to navigate to

        Returns:
            Navigation result with page title

        Raises:
            RuntimeError: If session not started
        """
        page = self._require_page()
        await page.goto(url, wait_until="domcontentloaded")
        title = await page.title()
        return f"Navigated to {url}, title: {title}"

    async def get_page_content(self) -> str:
        """Get current page HTML content.

        Raises:
            RuntimeError: If session not started
        """
        return await self._require_page().content()

    def get_status(self) -> dict[str, Any]:
        """Summarize the session for status reporting."""
        completed = sum(1 for exchange in self.store.snapshot() if exchange.response is not None)
        return {
            "active": self.is_started,
            "url": self._page.url if self._page else None,
            "captured_requests": len(self.store),
            "completed_responses": completed,
        }


class CaptureSessionManager:
    """Singleton manager for sharing one CaptureSession across MCP tools."""

    _instance: ClassVar[CaptureSession | None] = None
    _lock: ClassVar[asyncio.Lock | None] = None

    @classmethod
    def _get_lock(cls) -> asyncio.Lock:
        if cls._lock is None:
            cls._lock = asyncio.Lock()
        return cls._lock

    @classmethod
    async def get_or_create(cls) -> CaptureSession:
        """Get the active session, starting a browser if there is none."""
        async with cls._get_lock():
            if cls._instance is None:
                session = CaptureSession()
                await session.start()
                cls._instance = session
            return cls._instance

    @classmethod
    def get_active_session(cls) -> CaptureSession | None:
        """Get the active session without starting one."""
        return cls._instance

    @classmethod
    async def close(cls) -> None:
        """Close active session if exists."""
        async with cls._get_lock():
            if cls._instance:
                await cls._instance.close()
                cls._instance = None

    @classmethod
    def get_status(cls) -> dict[str, Any]:
        """Get current session status.

        Returns:
            Status dict with active flag and capture counts
        """
        if cls._instance is None:
            return {"active": False}
        return cls._instance.get_status()
