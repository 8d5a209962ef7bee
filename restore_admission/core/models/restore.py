"""
VirtualMachineRestore — the object under admission.

A restore names a target VM and a snapshot to roll it back to. Once
created its spec never changes; only the restore controller writes
``status``.
"""

from __future__ import annotations

from pydantic import ConfigDict, Field, field_validator

from restore_admission.core.models.base import K8sModel, ObjectMeta

# ── Resource identity ───────────────────────────────────────────

RESTORE_GROUP = "snapshot.kubevirt.io"
RESTORE_RESOURCE = "virtualmachinerestores"
RESTORE_KIND = "VirtualMachineRestore"

VM_GROUP = "kubevirt.io"
VM_KIND = "VirtualMachine"


class TargetRef(K8sModel):
    """Typed local object reference to the restore target.

    Equality is by value (group, kind, name).
    """

    api_group: str | None = None
    kind: str = ""
    name: str = ""


class RestoreSpec(K8sModel):
    """Immutable part of a restore.

    Members without a declared field are kept under their wire names so
    that equality covers the whole spec.
    """

    model_config = ConfigDict(extra="allow")

    target: TargetRef = Field(default_factory=TargetRef)
    virtual_machine_snapshot_name: str = ""
    patches: list[str] = Field(default_factory=list)

    @field_validator("target", mode="before")
    @classmethod
    def _null_target(cls, value: object) -> object:
        return {} if value is None else value

    @field_validator("patches", mode="before")
    @classmethod
    def _null_patches(cls, value: object) -> object:
        return [] if value is None else value

    @field_validator("virtual_machine_snapshot_name", mode="before")
    @classmethod
    def _null_name(cls, value: object) -> object:
        return "" if value is None else value


class RestoreStatus(K8sModel):
    complete: bool | None = None


class VirtualMachineRestore(K8sModel):
    """A declarative request to roll a VM back to a snapshot."""

    api_version: str = f"{RESTORE_GROUP}/v1beta1"
    kind: str = RESTORE_KIND
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: RestoreSpec = Field(default_factory=RestoreSpec)
    status: RestoreStatus | None = None

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def in_progress(self) -> bool:
        """True until the controller marks the restore complete."""
        return self.status is None or not self.status.complete


class RestoreSummary(K8sModel):
    """One row of the namespace restore index.

    Carries only what the conflict scan needs, so an index can be
    backed by a live list call or by a maintained cache.
    """

    name: str
    target: TargetRef = Field(default_factory=TargetRef)
    status_complete: bool | None = None

    @property
    def in_progress(self) -> bool:
        return not self.status_complete

    @classmethod
    def from_restore(cls, restore: VirtualMachineRestore) -> RestoreSummary:
        complete = restore.status.complete if restore.status else None
        return cls(
            name=restore.metadata.name,
            target=restore.spec.target.model_copy(),
            status_complete=complete,
        )
