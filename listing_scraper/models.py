"""Data models for the listing scraper."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

# Upper bound of distinct fields the extractor can ever report
MAX_FIELD_COUNT = 22

DEFAULT_BUSINESS_NAME = "Business Opportunity"


def confidence_for(field_count: int) -> float:
    """Share of the fixed field maximum that was populated, capped at 1.0."""
    return min(field_count / MAX_FIELD_COUNT, 1.0)


class ScrapeRequest(BaseModel):
    """Inbound /scrape body. Fields stay optional so the handler can report what is missing."""

    model_config = ConfigDict(frozen=True)

    url: str | None = Field(None, description="Listing URL on the target site")
    dealId: str | None = Field(None, description="Opaque deal identifier owned by the caller")


class ExtractedListing(BaseModel):
    """One listing as read off the page. Absent fields are left as None."""

    model_config = ConfigDict(frozen=True)

    business_name: str = DEFAULT_BUSINESS_NAME
    location: str | None = None
    asking_price: float | None = None
    cash_flow: float | None = None
    gross_revenue: float | None = None
    ebitda: float | None = None
    business_description: str | None = None
    rent: float | None = None
    established: int | None = None
    employees: int | None = None
    building_sf: int | None = None
    inventory: float | None = None
    franchise: str | None = None
    reason_for_selling: str | None = None

    fields_extracted: tuple[str, ...] = ()
    parsing_confidence: float = Field(0.0, ge=0.0, le=1.0)

    @classmethod
    def from_fields(cls, values: dict, fields_extracted: list[str]) -> "ExtractedListing":
        return cls(
            **values,
            fields_extracted=tuple(fields_extracted),
            parsing_confidence=confidence_for(len(fields_extracted)),
        )


class ScrapedListing(ExtractedListing):
    """Extracted listing plus where and when it came from."""

    source_type: str
    source_url: str
    parsed_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @classmethod
    def with_source(cls, listing: ExtractedListing, source_type: str, source_url: str) -> "ScrapedListing":
        return cls(**listing.model_dump(), source_type=source_type, source_url=source_url)


class ScrapeResponse(BaseModel):
    success: bool = True
    data: ScrapedListing
    fields_extracted: tuple[str, ...]
    parsing_confidence: float


class ClassifyRequest(BaseModel):
    description: str | None = None


class IndustryClassification(BaseModel):
    industry: str = "Other"
    confidence: float = 0.1


class HealthStatus(BaseModel):
    status: str = "healthy"
    browser: bool | None = None
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
