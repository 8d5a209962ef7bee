"""
Domain models — Pydantic types for restore admission.

All models are re-exported here for convenient access:

    from restore_admission.core.models import VirtualMachineRestore, StatusCause
"""

from restore_admission.core.models.admission import (
    AdmissionRequest,
    AdmissionResponse,
    AdmissionReview,
    CauseType,
    GroupVersionResource,
    Operation,
    ResponseStatus,
    StatusCause,
)
from restore_admission.core.models.base import K8sModel, ObjectMeta
from restore_admission.core.models.restore import (
    RestoreSpec,
    RestoreStatus,
    RestoreSummary,
    TargetRef,
    VirtualMachineRestore,
)
from restore_admission.core.models.snapshot import (
    SnapshotPhase,
    SnapshotStatus,
    VirtualMachineSnapshot,
    VirtualMachineSnapshotContent,
)
from restore_admission.core.models.vm import VirtualMachine, VirtualMachineInstance

__all__ = [
    # admission.py
    "AdmissionRequest",
    "AdmissionResponse",
    "AdmissionReview",
    "CauseType",
    "GroupVersionResource",
    # base.py
    "K8sModel",
    "ObjectMeta",
    "Operation",
    "ResponseStatus",
    # restore.py
    "RestoreSpec",
    "RestoreStatus",
    "RestoreSummary",
    # snapshot.py
    "SnapshotPhase",
    "SnapshotStatus",
    "StatusCause",
    "TargetRef",
    # vm.py
    "VirtualMachine",
    "VirtualMachineInstance",
    "VirtualMachineRestore",
    "VirtualMachineSnapshot",
    "VirtualMachineSnapshotContent",
]
