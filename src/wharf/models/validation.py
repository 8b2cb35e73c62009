"""Validation error model."""

from pydantic import BaseModel, ConfigDict, Field


class ValidationError(BaseModel):
    """A single accumulated publish problem.

    Errors are kept in detection order and reported together; two errors
    with the same text are still two errors.
    """

    model_config = ConfigDict(frozen=True)

    message: str = Field(description="Formatted, possibly multi-line message")

    @classmethod
    def of(cls, *paragraphs: str) -> "ValidationError":
        """Join non-empty paragraphs, one per line, into one message."""
        return cls(message="\n".join(p for p in paragraphs if p))


def indent(lines: list[str] | str, prefix: str = "  ") -> str:
    """Indent each line of text, used for lists inside error messages."""
    if isinstance(lines, str):
        lines = lines.splitlines()
    return "\n".join(f"{prefix}{line}" for line in lines)


def bullets(items: list[str]) -> str:
    """Render items as an indented dash list."""
    return indent([f"- {item}" for item in items])
