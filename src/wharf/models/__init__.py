"""Pydantic data models for the publish pipeline.

- Publish manifest and source locations (PublishCandidate, Location)
- Registry metadata (RegistryMetadata, PublishedInfo, UnpublishedInfo)
- Registry jobs and their logs (PublishJob, LogLine, LogLevel)
- Repository state (GitState, TreeStatus)
- Accumulated validation errors (ValidationError)
"""

from .git import GitState, TreeStatus
from .job import JobStatus, LogLevel, LogLine, PublishJob, format_timestamp
from .location import GitHubLocation, GitLocation, Location, location_to_json, print_location
from .manifest import PublishCandidate, expected_tag
from .metadata import Owner, PublishedInfo, RegistryMetadata, UnpublishedInfo
from .validation import ValidationError, bullets, indent

__all__ = [
    "GitHubLocation",
    "GitLocation",
    "GitState",
    "JobStatus",
    "Location",
    "LogLevel",
    "LogLine",
    "Owner",
    "PublishCandidate",
    "PublishJob",
    "PublishedInfo",
    "RegistryMetadata",
    "TreeStatus",
    "UnpublishedInfo",
    "ValidationError",
    "bullets",
    "expected_tag",
    "format_timestamp",
    "indent",
    "location_to_json",
    "print_location",
]
