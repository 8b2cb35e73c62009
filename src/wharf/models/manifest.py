"""Publish candidate model.

The candidate is assembled once from workspace configuration and is
immutable for the rest of the run.
"""

from pydantic import BaseModel, ConfigDict, Field

from .location import Location


class PublishCandidate(BaseModel):
    """Manifest for the package version about to be published."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Package name")
    location: Location = Field(description="Where the registry fetches sources from")
    version: str = Field(description="Version being published")
    description: str | None = Field(default=None, description="Short package description")
    license: str = Field(description="SPDX license expression")
    dependencies: dict[str, str] = Field(
        default_factory=dict, description="Declared dependency ranges"
    )
    compiler: str = Field(description="Compiler version the package was built with")

    @property
    def ref(self) -> str:
        """Git tag the registry will fetch."""
        return expected_tag(self.version)


def expected_tag(version: str) -> str:
    """Tag name for a version."""
    return f"v{version}"
