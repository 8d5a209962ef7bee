"""
VirtualMachine and VirtualMachineInstance models.

Only identity is needed for the running-instance check. The VM spec is
kept as a raw mapping; the one thing read from it is whether the
template needs backend storage.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from restore_admission.core.models.base import K8sModel, ObjectMeta


class VirtualMachine(K8sModel):
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: dict[str, Any] = Field(default_factory=dict)

    @property
    def uid(self) -> str | None:
        return self.metadata.uid

    def instance_spec(self) -> dict[str, Any]:
        """The VMI spec from ``spec.template.spec`` (empty if absent)."""
        template = self.spec.get("template") or {}
        return template.get("spec") or {}

    def requires_backend_storage(self) -> bool:
        """Whether the template asks for a per-VM backend-storage volume."""
        return backend_storage_needed(self.instance_spec())


class VirtualMachineInstance(K8sModel):
    """A running instance of a VM (same name as the VM)."""

    metadata: ObjectMeta = Field(default_factory=ObjectMeta)


def _dig(data: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def has_persistent_tpm(vmi_spec: dict[str, Any]) -> bool:
    return _dig(vmi_spec, "domain", "devices", "tpm", "persistent") is True


def has_persistent_efi(vmi_spec: dict[str, Any]) -> bool:
    return _dig(vmi_spec, "domain", "firmware", "bootloader", "efi", "persistent") is True


def backend_storage_needed(vmi_spec: dict[str, Any]) -> bool:
    """Persistent TPM and persistent EFI state live on backend storage."""
    return has_persistent_tpm(vmi_spec) or has_persistent_efi(vmi_spec)
