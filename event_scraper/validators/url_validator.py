"""URL well-formedness checks and domain helpers."""

import ipaddress
import re
from typing import Optional
from urllib.parse import urljoin, urlparse

# Two-label public suffixes seen on event pages
MULTI_LABEL_SUFFIXES = frozenset({
    "com.br", "org.br", "net.br", "gov.br", "edu.br", "art.br", "blog.br", "eco.br",
    "co.uk", "org.uk", "com.au", "com.ar", "com.mx", "co.jp", "com.pt", "co.nz",
})


def _is_ip(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def is_valid_url(url: Optional[str]) -> bool:
    """Absolute http(s) URL with a plausible host."""
    if not url or not isinstance(url, str) or re.search(r"\s", url.strip()):
        return False
    try:
        parsed = urlparse(url.strip())
        parsed.port  # Raises ValueError on a malformed port
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https"):
        return False
    host = parsed.hostname or ""
    if not host:
        return False
    return host == "localhost" or "." in host or _is_ip(host)


def absolutize(url: Optional[str], base: str) -> Optional[str]:
    """Resolve a possibly relative link against the page URL; None if not http(s)."""
    if not url:
        return None
    resolved = urljoin(base, url.strip())
    return resolved if is_valid_url(resolved) else None


def registrable_domain(url: str) -> Optional[str]:
    """'https://www.sympla.com.br/evento/x' → 'sympla.com.br'."""
    host = (urlparse(url).hostname or "").lower()
    if not host:
        return None
    if _is_ip(host) or host == "localhost":
        return host
    labels = [label for label in host.split(".") if label]
    if len(labels) <= 2:
        return ".".join(labels)
    if ".".join(labels[-2:]) in MULTI_LABEL_SUFFIXES:
        return ".".join(labels[-3:])
    return ".".join(labels[-2:])


def organizer_from_domain(url: str) -> Optional[str]:
    """Title-cased name of the registrable domain ('rd-station.com' → 'Rd Station')."""
    domain = registrable_domain(url)
    if not domain or _is_ip(domain):
        return None
    label = domain.split(".")[0]
    words = [w for w in re.split(r"[-_]+", label) if w]
    return " ".join(w.capitalize() for w in words) or None
