"""
Test helpers — plain builders shared by test modules and fixtures.
"""

from __future__ import annotations

from typing import Any

from restore_admission.core.models import (
    AdmissionRequest,
    GroupVersionResource,
    TargetRef,
    VirtualMachineRestore,
)

NAMESPACE = "default"


def vm_target(name: str = "vm1") -> TargetRef:
    return TargetRef(api_group="kubevirt.io", kind="VirtualMachine", name=name)


def backend_storage_spec() -> dict[str, Any]:
    """A VM spec whose template keeps TPM state on backend storage."""
    return {
        "template": {
            "spec": {"domain": {"devices": {"tpm": {"persistent": True}}}},
        },
    }


def restore_request(
    restore: VirtualMachineRestore,
    operation: str = "CREATE",
    old: VirtualMachineRestore | None = None,
) -> AdmissionRequest:
    """Wrap restores the way the API server sends them."""
    return AdmissionRequest(
        uid="req-1",
        resource=GroupVersionResource(
            group="snapshot.kubevirt.io", version="v1beta1", resource="virtualmachinerestores",
        ),
        operation=operation,
        namespace=NAMESPACE,
        name=restore.metadata.name,
        object=restore.to_wire(),
        old_object=old.to_wire() if old is not None else None,
    )
