"""Submission of a validated package to the registry."""

import logging

from ..errors import SubmissionError
from ..models.location import location_to_json
from ..models.manifest import PublishCandidate
from ..services.registry import RegistryClient

logger = logging.getLogger(__name__)


def publish_payload(candidate: PublishCandidate, resolutions: dict[str, str]) -> dict:
    """Body of ``POST /publish``."""
    return {
        "name": candidate.name,
        "location": location_to_json(candidate.location),
        "ref": candidate.ref,
        "compiler": candidate.compiler,
        "resolutions": resolutions,
    }


def submit(
    client: RegistryClient, candidate: PublishCandidate, resolutions: dict[str, str]
) -> str:
    """Submit the package and return the registry job id.

    A non-200 answer is a rejection of the package, not a transient
    fault, so it is reported verbatim rather than retried.

    Raises:
        SubmissionError: If the registry rejects the request or the body is unusable
        RegistryError: If the registry cannot be reached
    """
    logger.info("Submitting %s@%s to the registry...", candidate.name, candidate.version)
    response = client.publish(publish_payload(candidate, resolutions))
    if response.status_code != 200:
        raise SubmissionError(response.status_code, response.text)
    try:
        job_id = response.json()["jobId"]
    except (ValueError, KeyError, TypeError):
        raise SubmissionError(response.status_code, response.text) from None
    if not isinstance(job_id, str) or not job_id:
        raise SubmissionError(response.status_code, response.text)
    logger.info("Registry accepted the submission, job %s", job_id)
    return job_id
