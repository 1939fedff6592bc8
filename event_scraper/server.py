"""HTTP boundary: POST /api/agent/scrape.

Request body: {"url": "..."}
Response body: {"success": true, "data": {...}, "meta": {...}}
            or {"success": false, "error": "...", "kind": "..."}

One RenderPool is shared by every request so concurrent scrapes stay bounded.
"""

import asyncio
import json
from typing import Awaitable, Callable, Optional

from aiohttp import web
from rich.console import Console

from event_scraper import config
from event_scraper.errors import ExtractionError, FetchErrorKind
from event_scraper.extractors.pipeline import build_renderer, scrape_event
from event_scraper.extractors.render_pool import RenderPool
from event_scraper.models import ScrapeResult
from event_scraper.validators import is_valid_url

console = Console()

ScrapeFn = Callable[[str], Awaitable[ScrapeResult]]

# Response status per failure kind
ERROR_STATUS = {
    FetchErrorKind.INVALID_URL: 400,
    FetchErrorKind.UNREACHABLE: 502,
    FetchErrorKind.TIMEOUT: 504,
    FetchErrorKind.HTTP_STATUS: 502,
    FetchErrorKind.NON_HTML_CONTENT: 422,
    FetchErrorKind.POOL_EXHAUSTED: 503,
}


def _bad_request(message: str) -> web.Response:
    return web.json_response({"success": False, "error": message}, status=400)


def status_for(result: ScrapeResult) -> int:
    if result.ok:
        return 200
    if isinstance(result.error, ExtractionError):
        return 422
    return ERROR_STATUS.get(result.error.kind, 502)


async def create_app(scrape: Optional[ScrapeFn] = None, renderer_kind: str = config.RENDERER) -> web.Application:
    app = web.Application()
    pool: Optional[RenderPool] = None

    if scrape is None:
        if renderer_kind == "playwright":
            pool = RenderPool()
        renderer = build_renderer(renderer_kind, pool)

        async def scrape(url: str) -> ScrapeResult:
            return await scrape_event(url, renderer=renderer)

    async def handle_scrape(request: web.Request) -> web.Response:
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return _bad_request("Corpo da requisição deve ser JSON")

        url = body.get("url") if isinstance(body, dict) else None
        if not url or not isinstance(url, str):
            return _bad_request('Campo "url" é obrigatório')
        url = url.strip()
        if not is_valid_url(url):
            return _bad_request(f"URL inválida: {url}")

        result = await scrape(url)
        return web.json_response(result.to_response(), status=status_for(result))

    async def close_pool(app: web.Application) -> None:
        if pool is not None:
            await pool.close()

    app.router.add_post("/api/agent/scrape", handle_scrape)
    app.on_cleanup.append(close_pool)
    return app


async def _run_server(host: str, port: int, app: web.Application) -> web.AppRunner:
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host=host, port=port)
    await site.start()
    return runner


async def serve(host: str = config.HOST, port: int = config.PORT, renderer_kind: str = config.RENDERER) -> None:
    """Run the HTTP boundary until cancelled."""
    app = await create_app(renderer_kind=renderer_kind)
    runner = await _run_server(host, port, app)
    console.print(f"[green]Listening on http://{host}:{port}/api/agent/scrape[/green] (renderer: {renderer_kind})")
    stop = asyncio.Event()
    try:
        await stop.wait()
    finally:
        await runner.cleanup()
