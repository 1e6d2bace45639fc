# models/listing_request.py
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SourceMode(str, Enum):
    """Which upstream channel a listing request should use."""

    AUTO = "auto"      # vendor API when a key is configured, otherwise HTML
    HTML = "html"      # server-rendered search page
    API = "api"        # vendor JSON API, Atom feed as fallback


class ListingRequest(BaseModel):
    """
    Parameters of one ``/finn`` request.

    ``org_id`` stays ``None`` when the caller omitted it (the service then
    uses the configured default); an explicitly empty value is rejected by
    the service with a 400.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"example": {"orgId": "4008599", "source": "auto"}},
    )

    org_id: Optional[str] = Field(
        default=None,
        alias="orgId",
        description="Dealer organisation identifier on the listings site",
    )
    source: SourceMode = Field(
        default=SourceMode.AUTO,
        description="Upstream channel to fetch from",
    )

    @field_validator("org_id", mode="before")
    @classmethod
    def _strip(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str):
            return v.strip()
        return v
