"""
Update immutability — after creation only ``status`` may change.
"""

from __future__ import annotations

from restore_admission.core.models.admission import StatusCause
from restore_admission.core.models.restore import RestoreSpec

SPEC_FIELD = "spec"


def validate_update(previous: RestoreSpec, candidate: RestoreSpec) -> list[StatusCause]:
    if previous != candidate:
        return [StatusCause.invalid("spec is immutable after creation", SPEC_FIELD)]
    return []
