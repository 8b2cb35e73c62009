"""Core publish logic for wharf.

- validation: ordered pre-publish checks and error accumulation
- import_graph: declared vs. imported dependency checks
- manifest: publish candidate assembly and source checks
- metadata: registry metadata lookup and history checks
- submit: publish request
- poller: registry job tracking
- publish: end-to-end pipeline
"""

from .import_graph import ImportViolation, ViolationKind, check_dependency_graph, check_imports
from .manifest import assemble_candidate, is_metadata_package, validate_source_modules
from .metadata import check_history, check_location, fetch_metadata
from .poller import JobPoller, PollState
from .publish import PublishOutcome, publish, rebuild_with_plan
from .submit import publish_payload, submit
from .validation import PublishContext, ValidationResult, check_git, validate

__all__ = [
    "ImportViolation",
    "JobPoller",
    "PollState",
    "PublishContext",
    "PublishOutcome",
    "ValidationResult",
    "ViolationKind",
    "assemble_candidate",
    "check_dependency_graph",
    "check_git",
    "check_history",
    "check_imports",
    "check_location",
    "fetch_metadata",
    "is_metadata_package",
    "publish",
    "publish_payload",
    "rebuild_with_plan",
    "submit",
    "validate",
    "validate_source_modules",
]
