"""
Source consistency — refuse cross-VM restores the storage can't follow.

A snapshot may be restored onto a VM other than the one it was taken
from, unless the frozen source VM uses backend storage: that volume
belongs to exactly one VM.
"""

from __future__ import annotations

import logging

from restore_admission.adapters.base import SnapshotContentLookup, SnapshotLookup, VirtualMachineLookup
from restore_admission.core.context import ReviewContext
from restore_admission.core.errors import LookupFault
from restore_admission.core.models.admission import StatusCause
from restore_admission.core.models.restore import RestoreSpec

logger = logging.getLogger(__name__)

SPEC_FIELD = "spec"


def validate_source(
    ctx: ReviewContext,
    snapshots: SnapshotLookup,
    vms: VirtualMachineLookup,
    contents: SnapshotContentLookup,
    namespace: str,
    spec: RestoreSpec,
) -> list[StatusCause]:
    """Check that restoring onto a different VM is structurally safe.

    A missing snapshot yields no causes here; the snapshot-state check
    reports it.

    Raises:
        LookupFault: On read failures, or when the snapshot's content
            reference or frozen source is missing.
    """
    ctx.check()
    snapshot = snapshots.get_snapshot(ctx, namespace, spec.virtual_machine_snapshot_name).unwrap()
    if snapshot is None:
        return []

    ctx.check()
    target = vms.get_virtual_machine(ctx, namespace, spec.target.name).unwrap()

    target_uid = target.uid if target is not None else None
    source_uid = snapshot.source_uid
    different = target_uid is None or (source_uid is not None and source_uid != target_uid)
    if not different:
        return []

    content_name = snapshot.content_name
    if not content_name:
        raise LookupFault(
            f"snapshot content name is missing in VirtualMachineSnapshot "
            f"{namespace}/{snapshot.metadata.name} status"
        )

    ctx.check()
    lookup = contents.get_snapshot_content(ctx, namespace, content_name)
    if lookup.missing:
        raise LookupFault(f"VirtualMachineSnapshotContent {namespace}/{content_name} not found")
    content = lookup.unwrap()

    source_vm = content.spec.source.virtual_machine if content is not None else None
    if source_vm is None:
        raise LookupFault(f"unexpected snapshot source in {namespace}/{content_name}")

    if source_vm.requires_backend_storage():
        logger.debug("Snapshot %s uses backend storage; cross-VM restore refused", snapshot.metadata.name)
        return [StatusCause.invalid(
            "Restore to a different VM not supported when using backend storage",
            SPEC_FIELD,
        )]
    return []
