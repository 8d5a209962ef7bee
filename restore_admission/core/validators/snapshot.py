"""
Snapshot state — the referenced snapshot must exist, be usable, and be
compatible with the target VM.
"""

from __future__ import annotations

from restore_admission.adapters.base import SnapshotLookup
from restore_admission.core.context import ReviewContext
from restore_admission.core.models.admission import StatusCause

SNAPSHOT_FIELD = "spec.virtualMachineSnapshotName"


def validate_snapshot(
    ctx: ReviewContext,
    snapshots: SnapshotLookup,
    namespace: str,
    name: str,
    target_uid: str | None,
    target_vm_exists: bool,
    field: str = SNAPSHOT_FIELD,
) -> list[StatusCause]:
    """Failed and not-ready are reported independently.

    A cross-VM restore (known target uid differs from the snapshot's
    source uid) is only allowed while the target VM does not exist.
    """
    ctx.check()
    snapshot = snapshots.get_snapshot(ctx, namespace, name).unwrap()
    if snapshot is None:
        return [StatusCause.not_found(f'VirtualMachineSnapshot "{name}" does not exist', field)]

    causes: list[StatusCause] = []

    if snapshot.failed:
        causes.append(StatusCause.invalid(
            f'VirtualMachineSnapshot "{name}" has failed and is invalid to use', field,
        ))

    if not snapshot.ready:
        causes.append(StatusCause.invalid(
            f'VirtualMachineSnapshot "{name}" is not ready to use', field,
        ))

    source_uid = snapshot.source_uid
    different = target_uid is not None and source_uid is not None and target_uid != source_uid
    if different and target_vm_exists:
        causes.append(StatusCause.invalid(
            "when snapshot source and restore target VMs are different, "
            "target VM must not exist",
            field,
        ))

    return causes
