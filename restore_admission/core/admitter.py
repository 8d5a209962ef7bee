"""
Restore admitter — validating admission for VirtualMachineRestores.

Flow per call:
    1. Check the request is for virtualmachinerestores and, on CREATE,
       that the Snapshot feature gate is on
    2. Decode the candidate (and, on UPDATE, the previous) object
    3. CREATE → target, source consistency, snapshot state, conflicts
       UPDATE → spec immutability
    4. Allow iff no causes were found

Two failure channels never mix. Findings about the submitted object are
StatusCauses and accumulate into a denial. Infrastructure problems raise
AdmissionError and abort the call with no decision.

The admitter keeps no per-call state; one instance serves concurrent
calls.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any, assert_never

from pydantic import ValidationError

from restore_admission.adapters.base import ClusterLookups
from restore_admission.core.context import ReviewContext
from restore_admission.core.errors import (
    AdmissionError,
    DecodeError,
    FeatureGateDisabled,
    UnexpectedOperation,
    UnexpectedResource,
)
from restore_admission.core.models.admission import (
    AdmissionRequest,
    AdmissionResponse,
    Operation,
    StatusCause,
)
from restore_admission.core.models.restore import (
    RESTORE_GROUP,
    RESTORE_RESOURCE,
    VirtualMachineRestore,
)
from restore_admission.core.validators.conflicts import find_conflicts
from restore_admission.core.validators.immutability import validate_update
from restore_admission.core.validators.snapshot import validate_snapshot
from restore_admission.core.validators.source import validate_source
from restore_admission.core.validators.target import (
    UnsupportedTarget,
    VirtualMachineTarget,
    validate_target,
)

logger = logging.getLogger(__name__)


def decode_restore(raw: Any, what: str = "object") -> VirtualMachineRestore:
    """Decode a raw admission object (mapping, JSON str or bytes).

    Raises:
        DecodeError: If the payload is missing, not JSON, or not a
            VirtualMachineRestore.
    """
    if raw is None:
        raise DecodeError(f"missing {what}")

    data = raw
    if isinstance(raw, (bytes, bytearray, str)):
        try:
            data = json.loads(raw)
        except (UnicodeDecodeError, ValueError) as e:
            raise DecodeError(f"cannot decode {what}: {e}") from e

    if not isinstance(data, dict):
        raise DecodeError(f"cannot decode {what}: expected a JSON object, got {type(data).__name__}")

    try:
        return VirtualMachineRestore.model_validate(data)
    except ValidationError as e:
        raise DecodeError(f"cannot decode {what}: {e}") from e


class RestoreAdmitter:
    """Decides whether a VirtualMachineRestore create/update is admitted.

    Args:
        lookups: Read ports onto the cluster.
        restore_enabled: Feature-gate query for snapshot/restore.
        review_timeout: Default per-call deadline in seconds (None = none),
            used when ``review`` is called without a context.
    """

    def __init__(
        self,
        lookups: ClusterLookups,
        restore_enabled: Callable[[], bool],
        review_timeout: float | None = None,
    ):
        self._lookups = lookups
        self._restore_enabled = restore_enabled
        self._review_timeout = review_timeout

    # ── Entry points ────────────────────────────────────────────

    def review(self, request: AdmissionRequest, ctx: ReviewContext | None = None) -> AdmissionResponse:
        """Render the admission response for a request. Never raises
        AdmissionError; aborts become error responses."""
        if ctx is None:
            ctx = ReviewContext(timeout=self._review_timeout)

        try:
            causes = self.admit(request, ctx)
        except AdmissionError as e:
            logger.warning("Admission aborted for %s/%s: %s", request.namespace, request.name, e)
            return AdmissionResponse.error(str(e), uid=request.uid)

        if causes:
            logger.info(
                "Denied %s %s/%s with %d cause(s)",
                request.operation, request.namespace, request.name, len(causes),
            )
            return AdmissionResponse.deny(causes, uid=request.uid)

        logger.info("Admitted %s %s/%s", request.operation, request.namespace, request.name)
        return AdmissionResponse.allow(uid=request.uid)

    def admit(self, request: AdmissionRequest, ctx: ReviewContext) -> list[StatusCause]:
        """Validate a request and return its causes (empty = allow).

        Raises:
            AdmissionError: When the call must abort without a decision.
        """
        resource = request.resource
        if resource.group != RESTORE_GROUP or resource.resource != RESTORE_RESOURCE:
            raise UnexpectedResource(
                f"unexpected resource {resource.group}/{resource.version}/{resource.resource}"
            )

        if request.operation == Operation.CREATE and not self._restore_enabled():
            raise FeatureGateDisabled("Snapshot/Restore feature gate not enabled")

        restore = decode_restore(request.object)

        if request.operation == Operation.CREATE:
            return self._admit_create(ctx, request.namespace or restore.metadata.namespace, restore)
        if request.operation == Operation.UPDATE:
            previous = decode_restore(request.old_object, what="oldObject")
            return validate_update(previous.spec, restore.spec)
        raise UnexpectedOperation(f"unexpected operation {request.operation}")

    # ── CREATE ──────────────────────────────────────────────────

    def _admit_create(
        self,
        ctx: ReviewContext,
        namespace: str,
        restore: VirtualMachineRestore,
    ) -> list[StatusCause]:
        lookups = self._lookups
        spec = restore.spec

        check = validate_target(ctx, lookups.virtual_machines, lookups.instances, namespace, spec)
        target = check.target

        if isinstance(target, UnsupportedTarget):
            # Nothing else can be judged against an unresolvable target
            return check.causes
        if not isinstance(target, VirtualMachineTarget):
            assert_never(target)

        causes = list(check.causes)
        causes += validate_source(
            ctx, lookups.snapshots, lookups.virtual_machines, lookups.snapshot_contents,
            namespace, spec,
        )
        causes += validate_snapshot(
            ctx, lookups.snapshots, namespace, spec.virtual_machine_snapshot_name,
            check.resolution.uid, check.resolution.vm_exists,
        )
        causes += find_conflicts(ctx, lookups.restores, namespace, spec.target)
        return causes
