"""
Review use case — run the admitter over an AdmissionReview file.

Reads a request (JSON or YAML), picks a Lookup Gateway (fixture file or
kubectl), and returns the response the webhook would send.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import ValidationError

from restore_admission.adapters.base import ClusterLookups
from restore_admission.adapters.kubectl import KubectlCluster
from restore_admission.adapters.memory import FixtureError, InMemoryCluster
from restore_admission.core.admitter import RestoreAdmitter
from restore_admission.core.config.loader import AdmissionConfig
from restore_admission.core.models.admission import AdmissionResponse, AdmissionReview

logger = logging.getLogger(__name__)


class ReviewInputError(Exception):
    """Raised when the request file or cluster fixture is unusable."""


@dataclass
class ReviewResult:
    """Outcome of reviewing one request file."""

    review: AdmissionReview
    response: AdmissionResponse

    @property
    def outcome(self) -> str:
        if self.response.allowed:
            return "allowed"
        return "error" if self.response.errored else "denied"

    @property
    def exit_code(self) -> int:
        return {"allowed": 0, "denied": 1, "error": 2}[self.outcome]

    def to_dict(self) -> dict:
        """The AdmissionReview the webhook would answer with."""
        return AdmissionReview.for_response(self.response).to_wire()


def load_review(path: Path) -> AdmissionReview:
    """Read an AdmissionReview (JSON is valid YAML)."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ReviewInputError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ReviewInputError(f"Invalid request document {path}: {e}") from e

    if not isinstance(data, dict):
        raise ReviewInputError(f"Expected an AdmissionReview mapping in {path}")

    try:
        review = AdmissionReview.model_validate(data)
    except ValidationError as e:
        raise ReviewInputError(f"Invalid AdmissionReview in {path}: {e}") from e

    if review.request is None:
        raise ReviewInputError(f"AdmissionReview in {path} has no request")
    return review


def build_lookups(
    config: AdmissionConfig,
    cluster_fixture: Path | None = None,
    use_kubectl: bool = False,
) -> ClusterLookups:
    """Fixture file, kubectl, or an empty cluster."""
    if cluster_fixture is not None and use_kubectl:
        raise ReviewInputError("Choose either a cluster fixture or kubectl, not both")

    if use_kubectl:
        return KubectlCluster(
            context=config.kubectl.context,
            kubeconfig=config.kubectl.kubeconfig,
        ).lookups()

    if cluster_fixture is not None:
        try:
            return InMemoryCluster.from_yaml(cluster_fixture).lookups()
        except FixtureError as e:
            raise ReviewInputError(str(e)) from e

    logger.debug("No cluster given, reviewing against an empty cluster")
    return InMemoryCluster().lookups()


def review_file(
    request_path: Path,
    config: AdmissionConfig,
    lookups: ClusterLookups,
) -> ReviewResult:
    """Review one request file.

    Raises:
        ReviewInputError: If the request file cannot be used.
    """
    review = load_review(request_path)
    assert review.request is not None  # guaranteed by load_review

    admitter = RestoreAdmitter(
        lookups,
        restore_enabled=config.snapshot_enabled,
        review_timeout=config.timeout,
    )
    response = admitter.review(review.request)
    return ReviewResult(review=review, response=response)
