"""
Conflict scan — one in-progress restore per target per namespace.

Best effort: two requests racing for the same target can both pass
before either is stored. The restore controller is authoritative.
Snapshot names are deliberately not compared.
"""

from __future__ import annotations

from restore_admission.adapters.base import RestoreIndex
from restore_admission.core.context import ReviewContext
from restore_admission.core.models.admission import StatusCause
from restore_admission.core.models.restore import TargetRef

TARGET_FIELD = "spec.target"


def find_conflicts(
    ctx: ReviewContext,
    restores: RestoreIndex,
    namespace: str,
    target: TargetRef,
) -> list[StatusCause]:
    """One cause per incomplete restore with a value-equal target."""
    ctx.check()
    return [
        StatusCause.invalid(f'VirtualMachineRestore "{existing.name}" in progress', TARGET_FIELD)
        for existing in restores.list_restores(ctx, namespace)
        if existing.target == target and existing.in_progress
    ]
