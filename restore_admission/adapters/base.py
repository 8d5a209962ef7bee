"""
Lookup ports — the read contract between the admitter and the cluster.

The admitter never talks to a cluster client directly. Each resource
type has its own narrow port, so a validator depends only on the reads
it performs and every port can be faked on its own.

Each ``get`` returns a LookupResult instead of raising for "not found":

    found(value)   the object exists
    not_found      the object does not exist (a normal answer)
    fault(error)   the read itself failed

To add a backend:
    1. Subclass the ports it can serve
    2. Return LookupResult from every get, never raise for missing objects
    3. Bundle the instances in a ClusterLookups
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

from restore_admission.core.context import ReviewContext
from restore_admission.core.errors import LookupFault
from restore_admission.core.models.restore import RestoreSummary
from restore_admission.core.models.snapshot import (
    VirtualMachineSnapshot,
    VirtualMachineSnapshotContent,
)
from restore_admission.core.models.vm import VirtualMachine, VirtualMachineInstance

T = TypeVar("T")


class LookupStatus(StrEnum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAULT = "fault"


@dataclass(frozen=True)
class LookupResult(Generic[T]):
    """Outcome of a single read."""

    status: LookupStatus
    value: T | None = None
    error: str = ""

    @property
    def found(self) -> bool:
        return self.status == LookupStatus.FOUND

    @property
    def missing(self) -> bool:
        return self.status == LookupStatus.NOT_FOUND

    @property
    def failed(self) -> bool:
        return self.status == LookupStatus.FAULT

    def unwrap(self) -> T | None:
        """The value, or None when not found. Faults raise LookupFault."""
        if self.failed:
            raise LookupFault(self.error or "lookup failed")
        return self.value

    @classmethod
    def hit(cls, value: T) -> LookupResult[T]:
        return cls(status=LookupStatus.FOUND, value=value)

    @classmethod
    def miss(cls) -> LookupResult[T]:
        return cls(status=LookupStatus.NOT_FOUND)

    @classmethod
    def fault(cls, error: str) -> LookupResult[T]:
        return cls(status=LookupStatus.FAULT, error=error)


class VirtualMachineLookup(ABC):
    @abstractmethod
    def get_virtual_machine(
        self, ctx: ReviewContext, namespace: str, name: str,
    ) -> LookupResult[VirtualMachine]:
        """Read a VirtualMachine by namespace/name."""


class VirtualMachineInstanceLookup(ABC):
    @abstractmethod
    def get_virtual_machine_instance(
        self, ctx: ReviewContext, namespace: str, name: str,
    ) -> LookupResult[VirtualMachineInstance]:
        """Read the running instance of a VM (same name as the VM)."""


class SnapshotLookup(ABC):
    @abstractmethod
    def get_snapshot(
        self, ctx: ReviewContext, namespace: str, name: str,
    ) -> LookupResult[VirtualMachineSnapshot]:
        """Read a VirtualMachineSnapshot by namespace/name."""


class SnapshotContentLookup(ABC):
    @abstractmethod
    def get_snapshot_content(
        self, ctx: ReviewContext, namespace: str, name: str,
    ) -> LookupResult[VirtualMachineSnapshotContent]:
        """Read a VirtualMachineSnapshotContent by namespace/name."""


class RestoreIndex(ABC):
    """Namespace-scoped view over existing restores.

    May be backed by a list call or a maintained cache; callers only
    rely on getting the restores of one namespace, in a stable order.
    Failures raise LookupFault.
    """

    @abstractmethod
    def list_restores(self, ctx: ReviewContext, namespace: str) -> list[RestoreSummary]:
        """All restores in ``namespace``."""


@dataclass(frozen=True)
class ClusterLookups:
    """One instance of every port, handed to the admitter."""

    virtual_machines: VirtualMachineLookup
    instances: VirtualMachineInstanceLookup
    snapshots: SnapshotLookup
    snapshot_contents: SnapshotContentLookup
    restores: RestoreIndex
