"""Category and topic taxonomy.

Categories are the 7 fixed event kinds; topics are the 18 marketing themes
the site filters by. Both are resolved from free text by keyword overlap.
Terms are stored accent-folded and matched on word boundaries.
"""

import re
from types import MappingProxyType
from typing import Iterable, Optional

from event_scraper.normalizers.location import fold

CATEGORIES = (
    "CONFERENCIA", "WORKSHOP", "MEETUP", "WEBINAR", "CURSO", "PALESTRA", "HACKATHON",
)
DEFAULT_CATEGORY = "CONFERENCIA"

# Category → keywords. Dict order breaks ties.
CATEGORY_KEYWORDS: MappingProxyType = MappingProxyType({
    "CONFERENCIA": (
        "conferencia", "congresso", "summit", "conference", "forum", "festival",
        "expo", "simposio", "convencao", "feira",
    ),
    "WORKSHOP": ("workshop", "oficina", "hands-on", "hands on", "mao na massa"),
    "MEETUP": ("meetup", "meet-up", "encontro", "networking", "happy hour", "after work"),
    "WEBINAR": ("webinar", "webinario", "live", "transmissao ao vivo", "online ao vivo"),
    "CURSO": (
        "curso", "treinamento", "imersao", "formacao", "aula", "masterclass",
        "bootcamp", "mba", "capacitacao",
    ),
    "PALESTRA": ("palestra", "talk", "keynote", "painel", "bate-papo"),
    "HACKATHON": ("hackathon", "hackaton", "maratona de programacao", "game jam", "datathon"),
})

# Topic slug → keywords
TOPIC_KEYWORDS: MappingProxyType = MappingProxyType({
    "growth": ("growth", "growth hacking", "aquisicao de clientes", "retencao", "funil", "plg"),
    "branding": ("branding", "marca", "brand", "posicionamento de marca"),
    "midia-paga": (
        "midia paga", "trafego pago", "google ads", "meta ads", "facebook ads",
        "anuncios", "paid media",
    ),
    "seo": ("seo", "search engine", "otimizacao para buscadores", "busca organica"),
    "conteudo": (
        "conteudo", "content marketing", "marketing de conteudo", "copywriting",
        "storytelling", "redacao",
    ),
    "dados-e-analytics": (
        "analytics", "dados", "data-driven", "data driven", "google analytics",
        "business intelligence", "metricas", "dashboards",
    ),
    "crm": ("crm", "relacionamento com o cliente", "salesforce", "hubspot", "automacao de marketing"),
    "inteligencia-artificial": (
        "inteligencia artificial", "ia", "ai", "chatgpt", "machine learning",
        "ia generativa", "genai", "llm",
    ),
    "social-media": (
        "social media", "redes sociais", "instagram", "tiktok", "linkedin",
        "influenciadores", "creators", "creator economy",
    ),
    "produto": ("produto", "product", "product marketing", "pmm", "gestao de produto"),
    "email-marketing": ("email marketing", "e-mail marketing", "newsletter", "email"),
    "inbound-marketing": ("inbound", "inbound marketing", "geracao de leads", "lead generation"),
    "performance": ("performance", "conversao", "roi", "cro", "marketing de performance"),
    "ux-e-design": ("ux", "ui", "design", "experiencia do usuario", "user experience"),
    "ecommerce": ("ecommerce", "e-commerce", "varejo", "marketplace", "loja virtual", "retail"),
    "video-e-streaming": ("video", "streaming", "youtube", "podcast", "audiovisual"),
    "comunidade": ("comunidade", "community", "embaixadores"),
    "lideranca-em-marketing": (
        "lideranca", "cmo", "gestao de marketing", "lideres de marketing", "leadership",
    ),
})
TOPIC_SLUGS = frozenset(TOPIC_KEYWORDS)

# Topics need at least this many distinct term hits, and at most MAX_TOPICS are kept
MIN_TOPIC_HITS = 1
MAX_TOPICS = 5


def _compile(table: MappingProxyType) -> MappingProxyType:
    return MappingProxyType({
        key: tuple(re.compile(rf"(?<![\w-]){re.escape(term)}(?![\w-])") for term in terms)
        for key, terms in table.items()
    })


_CATEGORY_PATTERNS = _compile(CATEGORY_KEYWORDS)
_TOPIC_PATTERNS = _compile(TOPIC_KEYWORDS)


def _hits(patterns: tuple, folded_text: str) -> int:
    """Number of distinct terms present in the text."""
    return sum(1 for pattern in patterns if pattern.search(folded_text))


def score_categories(text: str) -> dict[str, int]:
    folded = fold(text)
    return {cat: _hits(patterns, folded) for cat, patterns in _CATEGORY_PATTERNS.items()}


def best_category(text: str) -> Optional[str]:
    """Category with the highest term overlap, or None if nothing matches."""
    if not text:
        return None
    scores = score_categories(text)
    best = max(CATEGORIES, key=lambda cat: scores[cat])  # max keeps the first on ties
    return best if scores[best] > 0 else None


def resolve_category(raw: Optional[str]) -> Optional[str]:
    """Map a raw category value (enum name, label or free text) to one of CATEGORIES."""
    if not raw:
        return None
    folded = fold(raw)
    as_enum = re.sub(r"[^a-z]", "", folded).upper()
    if as_enum in CATEGORIES:
        return as_enum
    # Plural labels ("Workshops", "Conferências")
    if as_enum.endswith("S") and as_enum[:-1] in CATEGORIES:
        return as_enum[:-1]
    return best_category(raw)


def match_topics(text: str, limit: int = MAX_TOPICS) -> list[str]:
    """Topic slugs found in text, most hits first, capped at limit."""
    if not text:
        return []
    folded = fold(text)
    scored = [
        (slug, _hits(patterns, folded))
        for slug, patterns in _TOPIC_PATTERNS.items()
    ]
    ranked = sorted(
        (item for item in scored if item[1] >= MIN_TOPIC_HITS),
        key=lambda item: item[1],
        reverse=True,
    )
    return [slug for slug, _ in ranked[:limit]]


def normalize_topics(raw_topics: Iterable[str], limit: int = MAX_TOPICS) -> list[str]:
    """Map raw topic values to slugs, deduplicated, first occurrence order kept."""
    topics: list[str] = []
    for raw in raw_topics:
        raw = raw.strip()
        if not raw:
            continue
        candidates = [raw] if raw in TOPIC_SLUGS else match_topics(raw, limit)
        for slug in candidates:
            if slug not in topics:
                topics.append(slug)
    return topics[:limit]
