from pydantic import BaseModel, ConfigDict, Field

from auction_site.core.constraints import DomainConstraints


class UserCredentials(BaseModel):
    """Username/password pair used by registration and login"""

    username: str = Field(
        ...,
        min_length=DomainConstraints.MIN_USERNAME,
        max_length=DomainConstraints.MAX_USERNAME,
    )
    password: str = Field(..., min_length=DomainConstraints.MIN_PASSWORD)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "alice",
                "password": "correct-horse",
            }
        }
    )


class UserInfo(BaseModel):
    """User response schema"""

    id: int
    site_id: int
    username: str

    model_config = ConfigDict(from_attributes=True, frozen=True)
