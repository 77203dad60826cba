import logging

from fastapi import APIRouter, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from siteprofile.models.acquire_request import AcquireRequest
from siteprofile.models.acquire_response import AcquireResponse
from siteprofile.services.pipeline import acquire_site

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()

NO_CONTENT_DETAIL = (
    "Could not fetch any pages from the provided URL. "
    "The site may be blocking automated requests."
)


@router.post(
    "/acquire",
    response_model=AcquireResponse,
    summary="Crawl a site and extract its content and branding",
    description=(
        "Starting from *url*, crawls same-domain pages (sitemap first, then "
        "links) within the requested bounds and returns a structured content "
        "document per page, an aggregated branding profile, and both "
        "Markdown reports."
    ),
)
@limiter.limit("5/minute")
async def acquire_endpoint(request: Request, body: AcquireRequest) -> AcquireResponse:
    """Acquire content and branding for *url*."""
    url = str(body.url)
    logger.info(
        "Acquire request received",
        extra={"url": url, "max_pages": body.max_pages, "max_depth": body.max_depth},
    )

    result = await acquire_site(url, body.to_options())
    if result.outcome == "no_content":
        logger.warning("No content acquired from %s", url)
        raise HTTPException(status_code=502, detail=NO_CONTENT_DETAIL)

    return AcquireResponse(
        start_url=result.start_url,
        pages_crawled=len(result.pages),
        pages=result.pages,
        documents=result.documents,
        branding=result.branding,
        snippets=result.snippets,
        content_markdown=result.content_markdown,
        styles_markdown=result.styles_markdown,
    )
