"""URL normalisation utilities: canonical form, domain comparison, resolution."""

from typing import Optional
from urllib.parse import unquote_plus, urljoin, urlsplit

# Query parameters that only carry campaign / referral tracking
TRACKING_PARAMS = frozenset(
    {
        "utm_source",
        "utm_medium",
        "utm_campaign",
        "utm_term",
        "utm_content",
        "ref",
        "fbclid",
        "gclid",
    }
)

_DEFAULT_PORTS = {"http": 80, "https": 443}


def _origin(scheme: str, hostname: str, port: Optional[int]) -> str:
    host = f"[{hostname}]" if ":" in hostname else hostname
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        host = f"{host}:{port}"
    return f"{scheme}://{host}"


def _strip_tracking(query: str) -> str:
    """Drop tracking parameters, keeping the rest verbatim and in order."""
    kept = []
    for pair in query.split("&"):
        if not pair:
            continue
        name = unquote_plus(pair.split("=", 1)[0])
        if name not in TRACKING_PARAMS:
            kept.append(pair)
    return "&".join(kept)


def normalize_url(raw: str) -> str:
    """Return the canonical form of *raw* used for visited-set comparisons.

    The fragment and any trailing slashes on the path are removed, tracking
    parameters are stripped, and the URL is rebuilt as
    ``origin + path + remaining-query``.  Remaining parameters keep their
    original relative order.  Input that cannot be parsed as an absolute URL
    is returned unchanged.
    """
    try:
        parsed = urlsplit(raw.strip())
        scheme = parsed.scheme.lower()
        hostname = parsed.hostname
        port = parsed.port
    except (ValueError, AttributeError):
        return raw

    if not scheme or not hostname:
        return raw

    path = parsed.path.rstrip("/")
    query = _strip_tracking(parsed.query)
    return _origin(scheme, hostname, port) + path + (f"?{query}" if query else "")


def _bare_host(url: str) -> str:
    hostname = urlsplit(url).hostname
    if not hostname:
        raise ValueError(f"URL has no hostname: {url!r}")
    return hostname[4:] if hostname.startswith("www.") else hostname


def is_same_domain(base: str, candidate: str) -> bool:
    """Return True when both URLs share a hostname, ignoring a ``www.`` prefix."""
    try:
        return _bare_host(base) == _bare_host(candidate)
    except (ValueError, AttributeError):
        return False


def ensure_absolute(href: str, page_url: str) -> str:
    """Resolve *href* against *page_url*; return *href* untouched on failure."""
    try:
        return urljoin(page_url, href)
    except ValueError:
        return href
