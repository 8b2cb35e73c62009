"""Version-control state observed during validation."""

from pydantic import BaseModel, ConfigDict, Field


class TreeStatus(BaseModel):
    """Result of ``git status --porcelain``."""

    model_config = ConfigDict(frozen=True)

    clean: bool
    dirty_paths: list[str] = Field(default_factory=list)
    raw: str = Field(default="", description="Porcelain output as printed by git")


class GitState(BaseModel):
    """Snapshot of the repository taken once per run.

    Read-only during validation; the only mutation afterwards is pushing
    ``expected_tag``.
    """

    clean: bool
    dirty_paths: list[str] = Field(default_factory=list)
    checked_out_tag: str | None = None
    expected_tag: str | None = None
    tags: list[str] = Field(default_factory=list)
