"""Bounded pool of Playwright browser contexts.

One browser is launched lazily and shared; each render gets its own fresh
context, acquired through `RenderPool.context()` and closed on every exit
path (success, failure, timeout or cancellation).
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright
from rich.console import Console

from event_scraper import config

console = Console()


class PoolExhaustedError(RuntimeError):
    """Raised by a fail-fast pool when every render context is in use."""


class RenderPool:
    """At most `size` concurrent render contexts on one shared browser."""

    def __init__(
        self,
        size: int = config.RENDER_POOL_SIZE,
        policy: str = config.POOL_POLICY,
        headless: bool = config.HEADLESS,
    ):
        if policy not in ("queue", "fail_fast"):
            raise ValueError(f"Unknown pool policy: {policy}")
        self.size = max(1, size)
        self.policy = policy
        self.headless = headless
        self._slots = asyncio.Semaphore(self.size)
        self._in_use = 0
        self._launch_lock = asyncio.Lock()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    @property
    def in_use(self) -> int:
        return self._in_use

    async def _ensure_browser(self) -> Browser:
        async with self._launch_lock:
            if self._browser is None or not self._browser.is_connected():
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                console.print("[dim]Launching headless Chromium for rendering[/dim]")
                self._browser = await self._playwright.chromium.launch(
                    headless=self.headless,
                    args=["--disable-blink-features=AutomationControlled"],
                )
            return self._browser

    @asynccontextmanager
    async def context(self) -> AsyncIterator[BrowserContext]:
        """Acquire a fresh browser context; always released."""
        if self.policy == "fail_fast" and self._in_use >= self.size:
            raise PoolExhaustedError(f"all {self.size} render contexts are busy")

        async with self._slots:
            self._in_use += 1
            context: Optional[BrowserContext] = None
            try:
                browser = await self._ensure_browser()
                context = await browser.new_context(
                    user_agent=config.USER_AGENT,
                    locale=config.LOCALE,
                    viewport={"width": 1366, "height": 900},
                    extra_http_headers={"Accept-Language": config.ACCEPT_LANGUAGE},
                )
                yield context
            finally:
                self._in_use -= 1
                if context is not None:
                    await context.close()

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def __aenter__(self) -> "RenderPool":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()
