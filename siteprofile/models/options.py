from pydantic import BaseModel, ConfigDict, Field


class ExtractionOptions(BaseModel):
    """Bounds for a single crawl run."""

    model_config = ConfigDict(frozen=True)

    max_pages: int = Field(default=8, gt=0, description="Maximum number of pages to record.")
    max_depth: int = Field(default=2, ge=0, description="Maximum link depth from the seed URL.")
    timeout_ms: int = Field(default=6000, gt=0, description="Per-page fetch budget in milliseconds.")
    concurrency: int = Field(default=3, gt=0, description="Fetches dispatched per batch.")

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000
