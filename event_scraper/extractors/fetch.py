"""Single-attempt page fetcher with two renderers.

1. PlaywrightRenderer: headless Chromium from a bounded RenderPool, for
   JS-heavy ticketing pages (the default)
2. StaticRenderer: plain httpx GET, for static pages and for tests

Both follow redirects, reject non-HTML responses and map every failure to a
typed FetchError. There are no retries: one attempt per call.
"""

import asyncio
from typing import Optional, Protocol
from urllib.parse import urljoin, urlparse

import httpx
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from rich.console import Console

from event_scraper import config
from event_scraper.errors import FetchError
from event_scraper.extractors.render_pool import PoolExhaustedError, RenderPool
from event_scraper.validators import is_valid_url

console = Console()

HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")

# Redirect targets of bot-protection walls; landing there means the event page is unreachable
ANTI_BOT_DOMAINS = (
    "queue-it.net",
    "queue-it.com",
    "datadome.co",
    "imperva.com",
    "perimeterx.net",
    "kasada.io",
)

# Cookie consent button selectors (common patterns, pt-BR first)
COOKIE_SELECTORS = [
    # Reject/Decline buttons (preferred)
    'button:has-text("Rejeitar")',
    'button:has-text("Recusar")',
    'button:has-text("Reject All")',
    'button:has-text("Decline")',
    '#onetrust-reject-all-handler',
    '.cc-deny',

    # Accept buttons (fallback)
    'button:has-text("Aceitar")',
    'button:has-text("Aceito")',
    'button:has-text("Entendi")',
    'button:has-text("Accept All")',
    'button:has-text("Accept")',
    '#onetrust-accept-btn-handler',
    '.cc-accept',

    # Close buttons
    '[aria-label="Fechar"]',
    '[aria-label="Close"]',
    '.cookie-banner-close',
]


class FetchResult:
    """Result of a fetch: rendered HTML or a typed error."""
    def __init__(
        self,
        html: Optional[str] = None,
        final_url: Optional[str] = None,
        method: str = "static",
        http_status: Optional[int] = None,
        content_type: Optional[str] = None,
        error: Optional[FetchError] = None,
    ):
        self.html = html
        self.final_url = final_url
        self.method = method  # "playwright" or "static"
        self.http_status = http_status
        self.content_type = content_type
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None and self.html is not None

    @classmethod
    def failed(cls, error: FetchError, method: str, http_status: Optional[int] = None) -> "FetchResult":
        return cls(method=method, http_status=http_status, error=error)


class Renderer(Protocol):
    method: str

    async def render(self, url: str, timeout: float) -> FetchResult:
        ...


def is_anti_bot_url(url: Optional[str]) -> bool:
    host = (urlparse(url or "").hostname or "").lower()
    return any(host == domain or host.endswith("." + domain) for domain in ANTI_BOT_DOMAINS)


def is_html_content_type(content_type: Optional[str]) -> bool:
    # Servers that omit the header are given the benefit of the doubt
    if not content_type:
        return True
    mime = content_type.split(";", 1)[0].strip().lower()
    return mime in HTML_CONTENT_TYPES


def check_response(
    final_url: Optional[str],
    status: Optional[int],
    content_type: Optional[str],
) -> Optional[FetchError]:
    """Map a completed response to a FetchError, or None if it is usable."""
    if is_anti_bot_url(final_url):
        host = urlparse(final_url).hostname
        return FetchError.unreachable(f"redirecionado para proteção anti-bot ({host})")
    if status is not None and status >= 400:
        return FetchError.http_status(status)
    if not is_html_content_type(content_type):
        return FetchError.non_html(content_type)
    return None


async def dismiss_cookie_banner(page) -> bool:
    """Try to dismiss cookie consent banners."""
    for selector in COOKIE_SELECTORS:
        try:
            button = page.locator(selector).first
            if await button.is_visible(timeout=500):
                await button.click(timeout=2000)
                await page.wait_for_timeout(500)  # Wait for banner to close
                return True
        except PlaywrightError:
            continue
    return False


class PlaywrightRenderer:
    """Render with headless Chromium, one pooled context per call."""

    method = "playwright"

    def __init__(self, pool: RenderPool, settle_timeout_ms: int = config.SETTLE_TIMEOUT_MS):
        self.pool = pool
        self.settle_timeout_ms = settle_timeout_ms

    async def render(self, url: str, timeout: float) -> FetchResult:
        try:
            async with self.pool.context() as context:
                page = await context.new_page()
                return await self._render_page(page, url, timeout)
        except PoolExhaustedError:
            console.print("[yellow]Render pool exhausted, rejecting request[/yellow]")
            return FetchResult.failed(FetchError.pool_exhausted(), self.method)
        except PlaywrightError as e:
            # Browser launch, new_page, settle or content() failures
            return self._failed(e, url)

    def _failed(self, e: PlaywrightError, url: str) -> FetchResult:
        if isinstance(e, PlaywrightTimeoutError):
            return FetchResult.failed(FetchError.timeout(url), self.method)
        message = str(e).splitlines()[0] if str(e) else type(e).__name__
        # Chromium turns PDFs and other attachments into downloads
        if "Download is starting" in message:
            return FetchResult.failed(FetchError.non_html(None), self.method)
        return FetchResult.failed(FetchError.unreachable(message), self.method)

    async def _render_page(self, page, url: str, timeout: float) -> FetchResult:
        try:
            response = await page.goto(url, wait_until="domcontentloaded", timeout=timeout * 1000)
        except PlaywrightError as e:
            return self._failed(e, url)

        if response is None:
            return FetchResult.failed(FetchError.unreachable("sem resposta do servidor"), self.method)

        status = response.status
        content_type = response.headers.get("content-type")
        error = check_response(page.url, status, content_type)
        if error is not None:
            return FetchResult.failed(error, self.method, http_status=status)

        # Let client-side rendering settle; slow trackers must not fail the page
        try:
            await page.wait_for_load_state("networkidle", timeout=self.settle_timeout_ms)
        except PlaywrightTimeoutError:
            console.print("[dim]Network never went idle, using current DOM[/dim]")

        await dismiss_cookie_banner(page)

        # Late client-side redirect (e.g. JS-driven waiting room)
        if is_anti_bot_url(page.url):
            return FetchResult.failed(check_response(page.url, status, content_type), self.method, status)

        html = await page.content()
        return FetchResult(
            html=html,
            final_url=page.url,
            method=self.method,
            http_status=status,
            content_type=content_type,
        )


class StaticRenderer:
    """Plain HTTP GET; redirects are followed hop by hop to spot anti-bot walls."""

    method = "static"

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None, max_redirects: int = 10):
        self.transport = transport
        self.max_redirects = max_redirects

    async def render(self, url: str, timeout: float) -> FetchResult:
        headers = {
            "User-Agent": config.USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": config.ACCEPT_LANGUAGE,
        }
        current = url
        try:
            async with httpx.AsyncClient(
                timeout=timeout,
                follow_redirects=False,
                headers=headers,
                transport=self.transport,
            ) as client:
                for _ in range(self.max_redirects + 1):
                    response = await client.get(current)
                    location = response.headers.get("location")
                    if not (response.is_redirect and location):
                        break
                    current = urljoin(current, location)
                    if is_anti_bot_url(current):
                        return FetchResult.failed(check_response(current, None, None), self.method)
                else:
                    return FetchResult.failed(FetchError.unreachable("redirecionamentos em excesso"), self.method)
        except httpx.TimeoutException:
            return FetchResult.failed(FetchError.timeout(url), self.method)
        except httpx.HTTPError as e:
            return FetchResult.failed(FetchError.unreachable(type(e).__name__), self.method)

        content_type = response.headers.get("content-type")
        error = check_response(current, response.status_code, content_type)
        if error is not None:
            return FetchResult.failed(error, self.method, http_status=response.status_code)

        return FetchResult(
            html=response.text,
            final_url=str(response.url),
            method=self.method,
            http_status=response.status_code,
            content_type=content_type,
        )


async def fetch_page(url: str, renderer: Renderer, timeout: float = config.FETCH_BUDGET_SECONDS) -> FetchResult:
    """Fetch and render one URL within `timeout` seconds. Exactly one attempt."""
    if not is_valid_url(url):
        return FetchResult.failed(FetchError.invalid_url(url), renderer.method)

    console.print(f"[cyan]Fetching ({renderer.method}): {url[:80]}[/cyan]")
    try:
        result = await asyncio.wait_for(renderer.render(url, timeout), timeout=timeout)
    except asyncio.TimeoutError:
        result = FetchResult.failed(FetchError.timeout(url), renderer.method)
    except Exception as e:
        console.print(f"[red]Renderer crashed for {url[:60]}: {type(e).__name__}: {e}[/red]")
        result = FetchResult.failed(FetchError.unreachable(type(e).__name__), renderer.method)

    if result.error is not None:
        console.print(f"[red]Fetch failed ({result.error.kind.value}): {result.error.message}[/red]")
    return result
