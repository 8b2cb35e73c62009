"""Registry metadata models.

Metadata records the publication history of a package. A package that has
never been published has no record; ``RegistryMetadata.default_for``
builds the empty record used in that case, which is never persisted.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .location import Location


class Owner(BaseModel):
    """Key allowed to perform authenticated operations on a package."""

    keytype: str
    public: str
    id: str | None = None


class PublishedInfo(BaseModel):
    """Record of a published version."""

    model_config = ConfigDict(populate_by_name=True)

    ref: str
    hash: str | None = None
    bytes: int | None = None
    published_time: datetime = Field(alias="publishedTime")
    compilers: list[str] | None = None


class UnpublishedInfo(BaseModel):
    """Record of a version that was published and later withdrawn."""

    model_config = ConfigDict(populate_by_name=True)

    ref: str
    reason: str
    published_time: datetime = Field(alias="publishedTime")
    unpublished_time: datetime = Field(alias="unpublishedTime")


class RegistryMetadata(BaseModel):
    """Registry-side record for a package."""

    model_config = ConfigDict(populate_by_name=True)

    location: Location
    owners: list[Owner] | None = None
    published: dict[str, PublishedInfo] = Field(default_factory=dict)
    unpublished: dict[str, UnpublishedInfo] = Field(default_factory=dict)

    @classmethod
    def default_for(cls, location: Location) -> "RegistryMetadata":
        """Empty metadata for a package the registry has never seen."""
        return cls(location=location)
