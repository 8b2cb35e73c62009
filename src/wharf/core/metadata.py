"""Registry metadata lookup and publication-history checks."""

import json
import logging

from ..models.location import Location, print_location
from ..models.manifest import PublishCandidate
from ..models.metadata import PublishedInfo, RegistryMetadata, UnpublishedInfo
from ..models.validation import ValidationError, indent
from ..services.registry import RegistryClient

logger = logging.getLogger(__name__)


def fetch_metadata(
    client: RegistryClient, name: str, location: Location | None
) -> RegistryMetadata | None:
    """Return the registry's record for ``name``, or a fresh default.

    A package with no record is being published for the first time; the
    default takes its location from the manifest and is not persisted.
    Without a location there is nothing to build a default from, so None
    is returned instead.
    """
    metadata = client.get_metadata(name)
    if metadata is None:
        logger.info("No registry metadata for '%s', this is a first publish.", name)
        return RegistryMetadata.default_for(location) if location is not None else None
    return metadata


def published_info(metadata: RegistryMetadata, version: str) -> PublishedInfo | None:
    return metadata.published.get(version)


def unpublished_info(metadata: RegistryMetadata, version: str) -> UnpublishedInfo | None:
    return metadata.unpublished.get(version)


def _history(info: PublishedInfo | UnpublishedInfo) -> str:
    return indent(json.dumps(info.model_dump(mode="json", by_alias=True), indent=2))


def check_location(
    candidate: PublishCandidate, metadata: RegistryMetadata
) -> list[ValidationError]:
    if candidate.location == metadata.location:
        return []
    return [
        ValidationError.of(
            "The location in your config does not match the one the registry has for "
            f"'{candidate.name}':",
            f"  config:   {print_location(candidate.location)}",
            f"  registry: {print_location(metadata.location)}",
        )
    ]


def check_history(name: str, version: str, metadata: RegistryMetadata) -> list[ValidationError]:
    """Reject versions that were already published or unpublished."""
    errors = []
    published = published_info(metadata, version)
    if published is not None:
        errors.append(
            ValidationError.of(
                f"Version {version} of '{name}' has already been published:",
                _history(published),
                "Bump the version in [package.publish] and try again.",
            )
        )
    unpublished = unpublished_info(metadata, version)
    if unpublished is not None:
        errors.append(
            ValidationError.of(
                f"Version {version} of '{name}' was published and then unpublished, "
                "so it cannot be reused:",
                _history(unpublished),
                "Bump the version in [package.publish] and try again.",
            )
        )
    return errors
