"""Acquisition orchestration: crawl, extract, rank and assemble for one site."""

import logging
from typing import Optional

from siteprofile.models.acquisition import SiteAcquisition
from siteprofile.models.options import ExtractionOptions
from siteprofile.services.branding import merge_snippets, rank_branding
from siteprofile.services.crawler import crawl
from siteprofile.services.documents import build_content_markdown, build_styles_markdown
from siteprofile.services.extractor import extract_content
from siteprofile.services.styles import collect_site_styles

logger = logging.getLogger(__name__)


async def acquire_site(
    start_url: str,
    options: Optional[ExtractionOptions] = None,
    *,
    deadline: Optional[float] = None,
) -> SiteAcquisition:
    """Turn *start_url* into a content document and a branding profile.

    Steps:
    1. Crawl the site within *options* bounds (and *deadline*, if given).
    2. Extract a :class:`ContentDocument` per page.
    3. Collect and scan every page's CSS, then rank the branding profile.
    4. Render both Markdown reports.

    When the crawl returns no pages the result has ``outcome="no_content"``
    and empty artifacts; nothing is raised.
    """
    options = options or ExtractionOptions()
    records = await crawl(start_url, options, deadline=deadline)

    if not records:
        logger.warning("Pipeline: no pages acquired from %s", start_url)
        return SiteAcquisition(outcome="no_content", start_url=start_url)

    pages = [(record.url, record.html) for record in records]
    documents = [extract_content(url, html) for url, html in pages]

    signals = await collect_site_styles(pages)
    branding = rank_branding(signals)
    snippets = merge_snippets(signals)

    logger.info(
        "Pipeline: acquired %d pages from %s (primary %s, heading font %s)",
        len(records),
        start_url,
        branding.colors.primary,
        branding.fonts.heading,
    )

    return SiteAcquisition(
        outcome="acquired",
        start_url=start_url,
        pages=[url for url, _ in pages],
        documents=documents,
        branding=branding,
        snippets=snippets,
        content_markdown=build_content_markdown(start_url, pages),
        styles_markdown=build_styles_markdown(start_url, branding, snippets),
    )
