"""Sitemap-based seed discovery for the crawler."""

import asyncio
import logging
from typing import List
from urllib.parse import urlsplit
from xml.etree import ElementTree

import httpx

from siteprofile.services.fetcher import FETCH_ERRORS, fetch_text

logger = logging.getLogger(__name__)

SITEMAP_TIMEOUT = 5  # seconds
SITEMAP_MAX_URLS = 20


def parse_sitemap(xml_text: str, limit: int = SITEMAP_MAX_URLS) -> List[str]:
    """Return up to *limit* ``<loc>`` values from a sitemap or sitemap-index XML.

    Values are taken verbatim (stripped only); entries of a sitemap index are
    returned as-is rather than followed.
    """
    urls: List[str] = []
    try:
        root = ElementTree.fromstring(xml_text)
    except ElementTree.ParseError as exc:
        logger.debug("Failed to parse sitemap XML: %s", exc)
        return urls

    ns = root.tag.split("}")[0] + "}" if root.tag.startswith("{") else ""
    for elem in root.iter(f"{ns}loc"):
        if elem.text and elem.text.strip():
            urls.append(elem.text.strip())
        if len(urls) >= limit:
            break
    return urls


async def fetch_sitemap_urls(client: httpx.AsyncClient, start_url: str) -> List[str]:
    """Fetch ``{origin}/sitemap.xml`` once and return its ``<loc>`` entries.

    Best effort: any failure (network, status, timeout, parse) yields an empty
    list so the crawl falls back to pure link discovery.
    """
    try:
        parsed = urlsplit(start_url)
        sitemap_url = f"{parsed.scheme}://{parsed.netloc}/sitemap.xml"
        xml_text = await asyncio.wait_for(
            fetch_text(client, sitemap_url, SITEMAP_TIMEOUT), SITEMAP_TIMEOUT
        )
    except FETCH_ERRORS as exc:
        logger.debug("Sitemap unavailable for %s – %s", start_url, exc)
        return []

    urls = parse_sitemap(xml_text)
    logger.debug("Sitemap for %s listed %d URLs", start_url, len(urls))
    return urls
