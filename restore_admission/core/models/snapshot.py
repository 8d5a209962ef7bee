"""
VirtualMachineSnapshot and VirtualMachineSnapshotContent models.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field, field_validator

from restore_admission.core.models.base import K8sModel, ObjectMeta
from restore_admission.core.models.vm import VirtualMachine


class SnapshotPhase(StrEnum):
    """Snapshot lifecycle phases."""

    IN_PROGRESS = "InProgress"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"


_PHASE_VALUES = frozenset(p.value for p in SnapshotPhase)


class SnapshotStatus(K8sModel):
    phase: SnapshotPhase = SnapshotPhase.UNKNOWN
    ready_to_use: bool | None = None
    source_uid: str | None = Field(default=None, alias="sourceUID")
    virtual_machine_snapshot_content_name: str | None = None

    @field_validator("phase", mode="before")
    @classmethod
    def _coerce_phase(cls, value: object) -> object:
        """Unrecognised or empty phases read as Unknown."""
        if isinstance(value, str) and value in _PHASE_VALUES:
            return value
        return SnapshotPhase.UNKNOWN


class VirtualMachineSnapshot(K8sModel):
    """A point-in-time capture of a VM."""

    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    status: SnapshotStatus | None = None

    @property
    def failed(self) -> bool:
        return self.status is not None and self.status.phase == SnapshotPhase.FAILED

    @property
    def ready(self) -> bool:
        return self.status is not None and bool(self.status.ready_to_use)

    @property
    def source_uid(self) -> str | None:
        return self.status.source_uid if self.status else None

    @property
    def content_name(self) -> str | None:
        return self.status.virtual_machine_snapshot_content_name if self.status else None


class SnapshotContentSource(K8sModel):
    """The VM definition frozen at snapshot time."""

    virtual_machine: VirtualMachine | None = None


class SnapshotContentSpec(K8sModel):
    source: SnapshotContentSource = Field(default_factory=SnapshotContentSource)


class VirtualMachineSnapshotContent(K8sModel):
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: SnapshotContentSpec = Field(default_factory=SnapshotContentSpec)
