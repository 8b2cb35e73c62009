"""Registry job models.

A publish request is processed asynchronously by the registry. Each poll
returns the log lines added since the cursor, so lines concatenated in
arrival order form the full job log.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class LogLevel(str, Enum):
    """Severity of a registry job log line, as named on the wire."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"

    @classmethod
    def _missing_(cls, value: object) -> "LogLevel | None":
        # The registry may echo the query-string casing ("Info", "Warn")
        if isinstance(value, str):
            return cls.__members__.get(value.upper())
        return None

    @property
    def query_value(self) -> str:
        """Capitalised form used in the ``level`` query parameter."""
        return self.value.capitalize()


class LogLine(BaseModel):
    """One line of job output."""

    timestamp: datetime
    level: LogLevel
    message: str


class JobStatus(BaseModel):
    """Body of ``GET /jobs/{jobId}``."""

    model_config = ConfigDict(populate_by_name=True)

    logs: list[LogLine] = Field(default_factory=list)
    finished_at: datetime | None = Field(default=None, alias="finishedAt")
    success: bool | None = None


class PublishJob(BaseModel):
    """Registry job created by a publish submission."""

    job_id: str
    logs: list[LogLine] = Field(default_factory=list)
    finished_at: datetime | None = None
    success: bool | None = None

    @property
    def done(self) -> bool:
        return self.finished_at is not None


def format_timestamp(value: datetime) -> str:
    """Render a cursor timestamp in the registry's ISO-8601 form.

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    timespec = "milliseconds" if value.microsecond % 1000 == 0 else "microseconds"
    return value.isoformat(timespec=timespec).replace("+00:00", "Z")
