"""Tracking of asynchronous registry jobs.

The poller has two states. While POLLING it fetches the log lines newer
than its cursor, emits them, and sleeps before the next poll; once a
response carries ``finishedAt`` it moves to DONE and stops. The cursor is
the timestamp of the last line seen and only ever moves forward, so the
lines emitted across polls are the job log in order, each exactly once.
"""

import logging
import time
from collections.abc import Callable
from datetime import datetime
from enum import Enum

from ..constants import JOB_POLL_INTERVAL
from ..errors import JobTimeoutError
from ..models.job import LogLevel, LogLine, PublishJob
from ..services.registry import RegistryClient

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class PollState(str, Enum):
    POLLING = "polling"
    DONE = "done"


class JobPoller:
    """Follow a registry job until it finishes."""

    def __init__(
        self,
        client: RegistryClient,
        job_id: str,
        *,
        level: LogLevel = LogLevel.INFO,
        interval: float = JOB_POLL_INTERVAL,
        max_polls: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
        emit: Callable[[LogLine], None] | None = None,
    ) -> None:
        self.client = client
        self.level = level
        self.interval = interval
        self.max_polls = max_polls
        self.sleep = sleep
        self.emit = emit or emit_log_line
        self.state = PollState.POLLING
        self.job = PublishJob(job_id=job_id)

    def go(self, cursor: datetime | None = None) -> PublishJob:
        """Poll from ``cursor`` until the job finishes.

        Raises:
            RegistryError: If a poll fails; polling is not resumed
            JobTimeoutError: If ``max_polls`` is set and exceeded
        """
        polls = 0
        while self.state is PollState.POLLING:
            if self.max_polls and polls >= self.max_polls:
                raise JobTimeoutError(
                    f"Job {self.job.job_id} did not finish after {polls} polls. "
                    "It may still complete on the registry."
                )
            status = self.client.get_job(self.job.job_id, since=cursor, level=self.level)
            polls += 1
            for line in status.logs:
                self.emit(line)
            self.job.logs.extend(status.logs)
            if status.logs:
                cursor = status.logs[-1].timestamp

            if status.finished_at is not None:
                self.job.finished_at = status.finished_at
                self.job.success = bool(status.success)
                self.state = PollState.DONE
            else:
                self.sleep(self.interval)
        return self.job


def emit_log_line(line: LogLine) -> None:
    """Log a registry job line at its declared level."""
    logger.log(_LOG_LEVELS[line.level], "%s", line.message)
