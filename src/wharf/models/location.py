"""Package source locations as understood by the registry."""

from pydantic import BaseModel, ConfigDict, Field


class GitHubLocation(BaseModel):
    """Package hosted in a GitHub repository."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    owner: str = Field(alias="githubOwner")
    repo: str = Field(alias="githubRepo")
    subdir: str | None = None


class GitLocation(BaseModel):
    """Package hosted in an arbitrary git repository."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(alias="gitUrl")
    subdir: str | None = None


Location = GitHubLocation | GitLocation


def location_to_json(location: Location) -> dict:
    """Return the wire form of a location."""
    return location.model_dump(mode="json", by_alias=True, exclude_none=True)


def print_location(location: Location) -> str:
    """Render a location the way it appears on the wire."""
    return location.model_dump_json(by_alias=True, exclude_none=True)
