"""
Shared test fixtures — an in-memory cluster and object factories.
"""

from __future__ import annotations

from typing import Callable

import pytest

from restore_admission.adapters.memory import InMemoryCluster
from restore_admission.core.admitter import RestoreAdmitter
from restore_admission.core.context import ReviewContext
from restore_admission.core.models import (
    AdmissionRequest,
    ObjectMeta,
    RestoreSpec,
    RestoreStatus,
    SnapshotStatus,
    TargetRef,
    VirtualMachine,
    VirtualMachineInstance,
    VirtualMachineRestore,
    VirtualMachineSnapshot,
    VirtualMachineSnapshotContent,
)
from restore_admission.core.models.snapshot import SnapshotContentSource, SnapshotContentSpec
from tests.helpers import NAMESPACE, restore_request, vm_target


@pytest.fixture
def ctx() -> ReviewContext:
    return ReviewContext.background()


@pytest.fixture
def cluster() -> InMemoryCluster:
    return InMemoryCluster(default_namespace=NAMESPACE)


@pytest.fixture
def make_vm(cluster: InMemoryCluster) -> Callable[..., VirtualMachine]:
    def _make(name: str = "vm1", uid: str | None = None, spec: dict | None = None) -> VirtualMachine:
        vm = VirtualMachine(
            metadata=ObjectMeta(name=name, namespace=NAMESPACE, uid=uid or f"uid-{name}"),
            spec=spec or {},
        )
        cluster.add(vm)
        return vm
    return _make


@pytest.fixture
def make_instance(cluster: InMemoryCluster) -> Callable[..., VirtualMachineInstance]:
    def _make(name: str = "vm1") -> VirtualMachineInstance:
        vmi = VirtualMachineInstance(metadata=ObjectMeta(name=name, namespace=NAMESPACE))
        cluster.add(vmi)
        return vmi
    return _make


@pytest.fixture
def make_snapshot(cluster: InMemoryCluster) -> Callable[..., VirtualMachineSnapshot]:
    def _make(
        name: str = "snap1",
        *,
        phase: str = "Succeeded",
        ready: bool | None = True,
        source_uid: str | None = "uid-vm1",
        content_name: str | None = None,
        with_status: bool = True,
    ) -> VirtualMachineSnapshot:
        status = None
        if with_status:
            status = SnapshotStatus(
                phase=phase,
                ready_to_use=ready,
                source_uid=source_uid,
                virtual_machine_snapshot_content_name=content_name or f"{name}-content",
            )
        snapshot = VirtualMachineSnapshot(
            metadata=ObjectMeta(name=name, namespace=NAMESPACE),
            status=status,
        )
        cluster.add(snapshot)
        return snapshot
    return _make


@pytest.fixture
def make_content(cluster: InMemoryCluster) -> Callable[..., VirtualMachineSnapshotContent]:
    def _make(
        name: str = "snap1-content",
        source_spec: dict | None = None,
        with_source: bool = True,
    ) -> VirtualMachineSnapshotContent:
        source = SnapshotContentSource()
        if with_source:
            source = SnapshotContentSource(virtual_machine=VirtualMachine(
                metadata=ObjectMeta(name="vm1", namespace=NAMESPACE),
                spec=source_spec or {},
            ))
        content = VirtualMachineSnapshotContent(
            metadata=ObjectMeta(name=name, namespace=NAMESPACE),
            spec=SnapshotContentSpec(source=source),
        )
        cluster.add(content)
        return content
    return _make


@pytest.fixture
def make_restore() -> Callable[..., VirtualMachineRestore]:
    """Build (not store) a restore; add it to the cluster to make it existing."""
    def _make(
        name: str = "restore1",
        *,
        target: TargetRef | None = None,
        snapshot: str = "snap1",
        patches: list[str] | None = None,
        complete: bool | None = None,
        with_status: bool = False,
    ) -> VirtualMachineRestore:
        status = RestoreStatus(complete=complete) if (with_status or complete is not None) else None
        return VirtualMachineRestore(
            metadata=ObjectMeta(name=name, namespace=NAMESPACE),
            spec=RestoreSpec(
                target=target if target is not None else vm_target(),
                virtual_machine_snapshot_name=snapshot,
                patches=patches or [],
            ),
            status=status,
        )
    return _make


@pytest.fixture
def make_request() -> Callable[..., AdmissionRequest]:
    return restore_request


@pytest.fixture
def admitter(cluster: InMemoryCluster) -> RestoreAdmitter:
    return RestoreAdmitter(cluster.lookups(), restore_enabled=lambda: True)
