"""Domain crawler: bounded, batch-concurrent BFS over pages on the seed URL's domain."""

import asyncio
import logging
import time
from collections import deque
from typing import Deque, List, NamedTuple, Optional, Set, Tuple

import httpx
from bs4 import BeautifulSoup

from siteprofile.models.options import ExtractionOptions
from siteprofile.services.fetcher import FETCH_ERRORS, fetch_page, new_client
from siteprofile.services.normalizer import ensure_absolute, is_same_domain, normalize_url
from siteprofile.services.sitemap import fetch_sitemap_urls

logger = logging.getLogger(__name__)

# Link targets that never lead to another page
_SKIP_HREF_PREFIXES = ("#", "javascript:", "mailto:", "tel:")

QueueEntry = Tuple[str, int]


class PageRecord(NamedTuple):
    url: str
    html: str
    title: str
    status_code: int


def _page_title(soup: BeautifulSoup) -> str:
    title_tag = soup.find("title")
    return title_tag.get_text(strip=True) if title_tag else ""


def discover_links(soup: BeautifulSoup, page_url: str, start_url: str) -> List[str]:
    """Return normalised same-domain links found in *soup*, in document order.

    ``#fragment``, ``javascript:``, ``mailto:`` and ``tel:`` targets are
    ignored; hrefs are resolved against *page_url*.
    """
    links: List[str] = []
    for a in soup.find_all("a", href=True):
        href = str(a["href"]).strip()
        if not href or href.lower().startswith(_SKIP_HREF_PREFIXES):
            continue
        candidate = normalize_url(ensure_absolute(href, page_url))
        if is_same_domain(start_url, candidate):
            links.append(candidate)
    return links


def _next_batch(queue: Deque[QueueEntry], visited: Set[str], size: int) -> List[QueueEntry]:
    """Pop up to *size* unvisited entries, marking each visited on the way out."""
    batch: List[QueueEntry] = []
    while queue and len(batch) < size:
        url, depth = queue.popleft()
        if url in visited:
            continue
        visited.add(url)
        batch.append((url, depth))
    return batch


async def _visit(
    client: httpx.AsyncClient,
    entry: QueueEntry,
    start_url: str,
    options: ExtractionOptions,
) -> Optional[Tuple[PageRecord, List[str]]]:
    """Fetch one queued page; return its record and outgoing links, or None."""
    url, depth = entry
    timeout = options.timeout_seconds
    try:
        fetched = await asyncio.wait_for(fetch_page(client, url, timeout), timeout)
    except FETCH_ERRORS as exc:
        logger.debug("Crawler: skipping %s – %s", url, exc)
        return None

    soup = BeautifulSoup(fetched.html, "lxml")
    record = PageRecord(
        url=url,
        html=fetched.html,
        title=_page_title(soup),
        status_code=fetched.status_code,
    )
    links = discover_links(soup, fetched.url, start_url) if depth < options.max_depth else []
    return record, links


async def crawl(
    start_url: str,
    options: Optional[ExtractionOptions] = None,
    *,
    deadline: Optional[float] = None,
) -> List[PageRecord]:
    """Crawl pages on the same domain as *start_url* using batched BFS.

    Up to ``options.concurrency`` pages are fetched in parallel; the next batch
    is only dequeued once the whole batch has finished.  Entries from the
    site's ``sitemap.xml`` are queued at depth 1 ahead of discovered links.

    The crawl is bounded by ``max_pages`` recorded pages and ``max_depth``
    link hops.  *deadline*, an absolute :func:`time.monotonic` value, is
    checked between batches.

    Failed, timed-out, non-2xx and non-HTML pages are skipped; an unreachable
    site therefore yields an empty list rather than an exception.

    Returns:
        A list of :class:`PageRecord` named-tuples, one per accepted page.
    """
    options = options or ExtractionOptions()
    seed = normalize_url(start_url)

    visited: Set[str] = set()
    queue: Deque[QueueEntry] = deque([(seed, 0)])
    results: List[PageRecord] = []

    async with new_client() as client:
        if options.max_depth >= 1:
            for loc in await fetch_sitemap_urls(client, seed):
                candidate = normalize_url(loc)
                if candidate not in visited and is_same_domain(seed, candidate):
                    queue.append((candidate, 1))

        while queue and len(results) < options.max_pages:
            if deadline is not None and time.monotonic() >= deadline:
                logger.info("Crawler: deadline reached for %s after %d pages", seed, len(results))
                break

            allowance = min(options.concurrency, options.max_pages - len(results))
            batch = _next_batch(queue, visited, allowance)
            if not batch:
                continue

            outcomes = await asyncio.gather(
                *(_visit(client, entry, seed, options) for entry in batch)
            )
            for (_url, depth), outcome in zip(batch, outcomes):
                if outcome is None:
                    continue
                record, links = outcome
                results.append(record)
                for link in links:
                    if link not in visited:
                        queue.append((link, depth + 1))

    logger.info(
        "Crawler: collected %d pages from %s (%d URLs visited)",
        len(results),
        seed,
        len(visited),
    )
    return results
