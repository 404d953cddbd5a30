"""Pydantic schemas for probe requests."""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field


class ProbeRequest(BaseModel):
    """Schema for a manual probe of one target.

    Fields are optional here so that missing values reach the service and
    are reported as validation failures in the usual result envelope.
    """
    name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("name", "apiName"),
        description="Target name"
    )
    url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("url", "apiUrl"),
        description="Target URL"
    )


class BulkProbeRequest(BaseModel):
    """Schema for probing several targets at once."""
    targets: Optional[List[ProbeRequest]] = Field(
        default=None,
        validation_alias=AliasChoices("targets", "apis")
    )
