from pydantic import BaseModel, ConfigDict, Field, StrictInt

from auction_site.core.constraints import DomainConstraints


class SiteCreate(BaseModel):
    """Site creation schema"""

    name: str = Field(
        ...,
        min_length=DomainConstraints.MIN_SITE_NAME,
        max_length=DomainConstraints.MAX_SITE_NAME,
    )
    timezone: StrictInt = Field(
        ..., ge=DomainConstraints.MIN_TIMEZONE, le=DomainConstraints.MAX_TIMEZONE
    )
    session_expiration_seconds: StrictInt = Field(..., ge=0)
    minimum_bid_increment: float = Field(..., ge=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "vintage-cameras",
                "timezone": 1,
                "session_expiration_seconds": 3600,
                "minimum_bid_increment": 0.5,
            }
        }
    )


class SiteName(BaseModel):
    name: str = Field(
        ...,
        min_length=DomainConstraints.MIN_SITE_NAME,
        max_length=DomainConstraints.MAX_SITE_NAME,
    )


class SiteInfo(BaseModel):
    """Site configuration as seen by callers"""

    name: str
    timezone: int
    session_expiration_seconds: int
    minimum_bid_increment: float

    model_config = ConfigDict(from_attributes=True, frozen=True)
