"""Runtime settings, read from the environment (see .env.example)."""

import os


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# Whole invocation (fetch + render + extraction + normalization), capped at 60s
MAX_DEADLINE_SECONDS = 60.0
DEADLINE_SECONDS = min(_env_float("SCRAPER_DEADLINE_SECONDS", 60.0), MAX_DEADLINE_SECONDS)

# Fetch/render sub-budget, leaves headroom for parsing
FETCH_BUDGET_SECONDS = min(_env_float("SCRAPER_FETCH_BUDGET_SECONDS", 45.0), DEADLINE_SECONDS)

# Extra settle time after navigation (network idle wait), in ms
SETTLE_TIMEOUT_MS = _env_int("SCRAPER_SETTLE_TIMEOUT_MS", 5000)

# Render pool
RENDER_POOL_SIZE = max(1, _env_int("SCRAPER_RENDER_POOL_SIZE", 2))
POOL_POLICY = os.environ.get("SCRAPER_POOL_POLICY", "queue")  # "queue" or "fail_fast"
HEADLESS = _env_bool("SCRAPER_HEADLESS", True)
RENDERER = os.environ.get("SCRAPER_RENDERER", "playwright")  # "playwright" or "static"

# HTTP boundary
HOST = os.environ.get("SCRAPER_HOST", "127.0.0.1")
PORT = _env_int("SCRAPER_PORT", 8080)

# Visible text cap fed to the heuristics
MAX_TEXT_LENGTH = 15_000

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
ACCEPT_LANGUAGE = "pt-BR,pt;q=0.9,en-US;q=0.8,en;q=0.7"
LOCALE = "pt-BR"
