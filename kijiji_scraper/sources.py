"""
Collaborators around the capture core: page sources, file writer and notifier.
"""
import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

from playwright.async_api import async_playwright, Error as PlaywrightError

from .document import ListingDocument
from .errors import SideFileWriteFailed, SnapshotCaptureFailed

logger = logging.getLogger(__name__)


STORAGE_STATE_FILE_DEFAULT = "storage_state.json"
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)


class HtmlFileSource:
    """A listing saved to disk, with an optional PNG captured alongside it."""

    def __init__(self, html_path: str, url: str, image_path: Optional[str] = None):
        self.html_path = html_path
        self.url = url
        self.image_path = image_path

    async def capture_listing(self) -> ListingDocument:
        html = Path(self.html_path).read_text(encoding="utf-8")
        return ListingDocument.from_html(html, url=self.url)

    async def capture_image(self) -> Optional[bytes]:
        if not self.image_path:
            return None
        try:
            return Path(self.image_path).read_bytes()
        except OSError as e:
            raise SnapshotCaptureFailed(f"Cannot read {self.image_path}: {e}") from e


class PlaywrightSource:
    """
    A live listing page opened in Chromium.

    Use as an async context manager; the browser is closed on exit.
    """

    def __init__(self, url: str, headless: bool = True, storage_state_path: Optional[str] = None,
                 timeout_ms: int = 45_000):
        self.url = url
        self.headless = headless
        self.storage_state_path = storage_state_path
        self.timeout_ms = timeout_ms
        self._pw = None
        self._browser = None
        self._context = None
        self.page = None

    async def __aenter__(self) -> "PlaywrightSource":
        launch_args = ["--disable-blink-features=AutomationControlled"]
        if self.headless:
            launch_args += ["--disable-dev-shm-usage", "--no-sandbox", "--disable-gpu"]

        self._pw = await async_playwright().start()
        self._browser = await self._pw.chromium.launch(headless=self.headless, args=launch_args)
        logger.info(f">>> Headless mode: {self.headless}")

        ctx_kwargs = {}
        if self.storage_state_path and os.path.exists(self.storage_state_path):
            ctx_kwargs["storage_state"] = self.storage_state_path
            logger.info(f">>> Using existing storage state: {self.storage_state_path}")

        self._context = await self._browser.new_context(
            **ctx_kwargs,
            viewport={"width": 1280, "height": 900},
            user_agent=USER_AGENT,
            locale="en-CA",
        )
        self._context.set_default_navigation_timeout(self.timeout_ms)
        self.page = await self._context.new_page()
        logger.info(f">>> Opening listing: {self.url}")
        await self.page.goto(self.url, wait_until="domcontentloaded")
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self._context is not None:
            await self._context.close()
        if self._browser is not None:
            await self._browser.close()
        if self._pw is not None:
            await self._pw.stop()

    async def capture_listing(self) -> ListingDocument:
        html = await self.page.content()
        return ListingDocument.from_html(html, url=self.page.url)

    async def capture_image(self) -> Optional[bytes]:
        try:
            return await self.page.screenshot(type="png")
        except PlaywrightError as e:
            raise SnapshotCaptureFailed(f"Screenshot failed: {e}") from e


class FileDownloader:
    """Writes side files, replacing any existing file at the same path."""

    async def download(self, blob: bytes, path: str):
        await asyncio.to_thread(self._write, blob, path)

    @staticmethod
    def _write(blob: bytes, path: str):
        try:
            target = Path(path)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(blob)
        except OSError as e:
            raise SideFileWriteFailed(path, e) from e


class LogNotifier:
    """User-visible status messages, sent to the log."""

    def __init__(self, logger_: Optional[logging.Logger] = None):
        self.logger = logger_ or logging.getLogger("kijiji_scraper")

    def notify(self, title: str, message: str):
        self.logger.info(f"[{title}] {message}")
