from pydantic import BaseModel, Field, HttpUrl

from siteprofile.models.options import ExtractionOptions


class AcquireRequest(BaseModel):
    url: HttpUrl
    max_pages: int = Field(
        default=8,
        ge=1,
        le=20,
        description="Maximum number of pages to crawl (1–20).",
    )
    max_depth: int = Field(
        default=2,
        ge=0,
        le=3,
        description="Maximum link depth from the seed URL (0–3).",
    )
    timeout_ms: int = Field(
        default=6000,
        ge=1000,
        le=30_000,
        description="Per-page fetch timeout in milliseconds (1 000–30 000).",
    )
    concurrency: int = Field(
        default=3,
        ge=1,
        le=5,
        description="Pages fetched in parallel per batch (1–5).",
    )

    def to_options(self) -> ExtractionOptions:
        return ExtractionOptions(
            max_pages=self.max_pages,
            max_depth=self.max_depth,
            timeout_ms=self.timeout_ms,
            concurrency=self.concurrency,
        )
