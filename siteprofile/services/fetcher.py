"""Shared HTTP request policy: identifying User-Agent, validated redirects, size cap."""

import asyncio
import ipaddress
import socket
from typing import NamedTuple
from urllib.parse import urljoin, urlparse

import httpx

USER_AGENT = "Mozilla/5.0 (compatible; PitchDeckBot/1.0; +https://pitchdeck.app)"
MAX_CONTENT_SIZE = 10 * 1024 * 1024  # 10 MB
MAX_REDIRECTS = 3
ALLOWED_SCHEMES = {"http", "https"}


class UnsupportedContentType(RuntimeError):
    """Raised when a page response is not ``text/html``."""


# Everything a single fetch may raise; callers skip the item on any of these
FETCH_ERRORS = (ValueError, httpx.HTTPError, RuntimeError, asyncio.TimeoutError)


class FetchedPage(NamedTuple):
    url: str  # final URL after redirects
    html: str
    status_code: int


def new_client() -> httpx.AsyncClient:
    """Return an AsyncClient carrying the crawler's identifying headers.

    Redirects are disabled on the client; :func:`_get` follows them by hand.
    """
    return httpx.AsyncClient(headers={"User-Agent": USER_AGENT}, follow_redirects=False)


async def _is_private_address(hostname: str) -> bool:
    """Return True if *hostname* resolves to a private, loopback, or link-local address."""
    loop = asyncio.get_running_loop()
    try:
        infos = await loop.getaddrinfo(hostname, None)
    except socket.gaierror:
        return False

    for info in infos:
        raw_ip = info[4][0]
        # Strip IPv6 zone IDs (e.g. "::1%eth0" → "::1")
        raw_ip = raw_ip.split("%")[0]
        try:
            addr = ipaddress.ip_address(raw_ip)
        except ValueError:
            continue
        if addr.is_private or addr.is_loopback or addr.is_link_local or addr.is_reserved:
            return True
    return False


async def _validate_url(url: str) -> None:
    """Raise ValueError if *url* fails SSRF / scheme validation."""
    try:
        httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise ValueError(f"Malformed URL: {exc}") from exc

    parsed = urlparse(url)

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise ValueError(f"Scheme '{parsed.scheme}' is not allowed. Use http or https.")

    hostname = parsed.hostname
    if not hostname:
        raise ValueError("URL must have a valid hostname.")

    if await _is_private_address(hostname):
        raise ValueError("Requests to private/internal addresses are not allowed.")


async def _get(
    client: httpx.AsyncClient,
    url: str,
    timeout: float,
    *,
    html_only: bool,
) -> FetchedPage:
    """GET *url*, following at most ``MAX_REDIRECTS`` validated redirects."""
    await _validate_url(url)

    current_url = url
    for _ in range(MAX_REDIRECTS + 1):
        async with client.stream("GET", current_url, timeout=timeout) as response:
            if response.is_redirect:
                location = response.headers.get("location", "")
                next_url = urljoin(current_url, location)
                await _validate_url(next_url)
                current_url = next_url
                continue

            if not response.is_success:
                raise httpx.HTTPStatusError(
                    f"Unexpected status {response.status_code} for {current_url}",
                    request=response.request,
                    response=response,
                )

            content_type = response.headers.get("content-type", "")
            if html_only and "text/html" not in content_type.lower():
                raise UnsupportedContentType(
                    f"Expected text/html, got '{content_type or 'none'}'."
                )

            content_length = response.headers.get("content-length")
            declared = content_length and content_length.isdigit()
            if declared and int(content_length) > MAX_CONTENT_SIZE:
                raise RuntimeError("Response body exceeds the maximum allowed size.")

            chunks = []
            total = 0
            async for chunk in response.aiter_bytes():
                total += len(chunk)
                if total > MAX_CONTENT_SIZE:
                    raise RuntimeError("Response body exceeds the maximum allowed size.")
                chunks.append(chunk)

            encoding = response.encoding or "utf-8"
            body = b"".join(chunks).decode(encoding, errors="replace")
            return FetchedPage(url=current_url, html=body, status_code=response.status_code)

    raise httpx.TooManyRedirects(f"Exceeded {MAX_REDIRECTS} redirects for {url}")


async def fetch_page(client: httpx.AsyncClient, url: str, timeout: float) -> FetchedPage:
    """Fetch an HTML page.

    Only 2xx responses with a ``text/html`` content type are accepted.

    Raises:
        ValueError: if the URL (or a redirect target) fails SSRF / scheme validation.
        httpx.HTTPError: on network errors, non-2xx statuses, or too many redirects.
        UnsupportedContentType: if the response is not HTML.
        RuntimeError: if the response body exceeds MAX_CONTENT_SIZE.
    """
    return await _get(client, url, timeout, html_only=True)


async def fetch_text(client: httpx.AsyncClient, url: str, timeout: float) -> str:
    """Fetch any textual resource (sitemap, stylesheet) and return its body.

    Raises the same errors as :func:`fetch_page`, minus the content-type check.
    """
    page = await _get(client, url, timeout, html_only=False)
    return page.html
