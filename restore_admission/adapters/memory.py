"""
In-memory cluster — a Lookup Gateway backed by plain objects.

Serves every port from dictionaries keyed by (namespace, name). Used as
the test double for the admitter and as the fixture backend of the
``review --cluster`` command. Objects can be loaded from
multi-document YAML; individual reads can be made to fail.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from restore_admission.adapters.base import (
    ClusterLookups,
    LookupResult,
    RestoreIndex,
    SnapshotContentLookup,
    SnapshotLookup,
    VirtualMachineInstanceLookup,
    VirtualMachineLookup,
)
from restore_admission.core.context import ReviewContext
from restore_admission.core.errors import LookupFault
from restore_admission.core.models.base import K8sModel
from restore_admission.core.models.restore import RestoreSummary, VirtualMachineRestore
from restore_admission.core.models.snapshot import (
    VirtualMachineSnapshot,
    VirtualMachineSnapshotContent,
)
from restore_admission.core.models.vm import VirtualMachine, VirtualMachineInstance

logger = logging.getLogger(__name__)

# kind → model used when loading fixture documents
_KINDS: dict[str, type[K8sModel]] = {
    "VirtualMachine": VirtualMachine,
    "VirtualMachineInstance": VirtualMachineInstance,
    "VirtualMachineSnapshot": VirtualMachineSnapshot,
    "VirtualMachineSnapshotContent": VirtualMachineSnapshotContent,
    "VirtualMachineRestore": VirtualMachineRestore,
}


class FixtureError(Exception):
    """Raised when a cluster fixture cannot be loaded."""


@dataclass(frozen=True)
class LookupCall:
    """One recorded read."""

    kind: str
    namespace: str
    name: str = ""


class InMemoryCluster(
    VirtualMachineLookup,
    VirtualMachineInstanceLookup,
    SnapshotLookup,
    SnapshotContentLookup,
    RestoreIndex,
):
    """Serves every lookup port from in-memory objects."""

    def __init__(self, default_namespace: str = "default"):
        self._default_namespace = default_namespace
        self._objects: dict[str, dict[tuple[str, str], K8sModel]] = {
            kind: {} for kind in _KINDS
        }
        self._faults: dict[tuple[str, str, str], str] = {}
        self._call_log: list[LookupCall] = []

    # ── Population ──────────────────────────────────────────────

    def add(self, obj: K8sModel) -> K8sModel:
        """Store an object under its kind and metadata namespace/name."""
        kind = _kind_of(obj)
        meta = obj.metadata  # type: ignore[attr-defined]
        namespace = meta.namespace or self._default_namespace
        self._objects[kind][(namespace, meta.name)] = obj
        return obj

    def add_document(self, doc: dict[str, Any]) -> K8sModel:
        """Decode a manifest mapping by its ``kind`` and store it."""
        kind = doc.get("kind", "")
        model = _KINDS.get(kind)
        if model is None:
            raise FixtureError(f"Unsupported kind in fixture: {kind!r}")
        try:
            obj = model.model_validate(doc)
        except ValidationError as e:
            raise FixtureError(f"Invalid {kind} in fixture: {e}") from e
        return self.add(obj)

    @classmethod
    def from_documents(
        cls, docs: list[dict[str, Any]], default_namespace: str = "default",
    ) -> InMemoryCluster:
        cluster = cls(default_namespace=default_namespace)
        for doc in docs:
            if doc:
                cluster.add_document(doc)
        return cluster

    @classmethod
    def from_yaml(cls, path: Path, default_namespace: str = "default") -> InMemoryCluster:
        """Load a multi-document YAML fixture (``List`` kinds are flattened)."""
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise FixtureError(f"Cannot read {path}: {e}") from e

        try:
            loaded = list(yaml.safe_load_all(raw))
        except yaml.YAMLError as e:
            raise FixtureError(f"Invalid YAML in {path}: {e}") from e

        docs: list[dict[str, Any]] = []
        for doc in loaded:
            if doc is None:
                continue
            if not isinstance(doc, dict):
                raise FixtureError(f"Expected a YAML mapping in {path}, got {type(doc).__name__}")
            if doc.get("kind") == "List":
                docs.extend(doc.get("items") or [])
            else:
                docs.append(doc)

        cluster = cls.from_documents(docs, default_namespace=default_namespace)
        logger.info("Loaded %d fixture objects from %s", len(docs), path)
        return cluster

    def set_fault(self, kind: str, namespace: str, name: str = "", error: str = "injected fault") -> None:
        """Make reads of one object (or a restore listing) fail."""
        self._faults[(kind, namespace, name)] = error

    def clear_faults(self) -> None:
        self._faults.clear()

    # ── Introspection ───────────────────────────────────────────

    @property
    def call_log(self) -> list[LookupCall]:
        """Every read this cluster has served."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def lookups(self) -> ClusterLookups:
        """This cluster in every port slot."""
        return ClusterLookups(
            virtual_machines=self,
            instances=self,
            snapshots=self,
            snapshot_contents=self,
            restores=self,
        )

    # ── Ports ───────────────────────────────────────────────────

    def get_virtual_machine(self, ctx: ReviewContext, namespace: str, name: str) -> LookupResult[VirtualMachine]:
        return self._get(ctx, "VirtualMachine", namespace, name)

    def get_virtual_machine_instance(
        self, ctx: ReviewContext, namespace: str, name: str,
    ) -> LookupResult[VirtualMachineInstance]:
        return self._get(ctx, "VirtualMachineInstance", namespace, name)

    def get_snapshot(self, ctx: ReviewContext, namespace: str, name: str) -> LookupResult[VirtualMachineSnapshot]:
        return self._get(ctx, "VirtualMachineSnapshot", namespace, name)

    def get_snapshot_content(
        self, ctx: ReviewContext, namespace: str, name: str,
    ) -> LookupResult[VirtualMachineSnapshotContent]:
        return self._get(ctx, "VirtualMachineSnapshotContent", namespace, name)

    def list_restores(self, ctx: ReviewContext, namespace: str) -> list[RestoreSummary]:
        self._call_log.append(LookupCall("VirtualMachineRestore", namespace))
        error = self._faults.get(("VirtualMachineRestore", namespace, ""))
        if error is not None:
            raise LookupFault(error)
        return [
            RestoreSummary.from_restore(obj)  # type: ignore[arg-type]
            for (ns, _), obj in self._objects["VirtualMachineRestore"].items()
            if ns == namespace
        ]

    def _get(self, ctx: ReviewContext, kind: str, namespace: str, name: str) -> LookupResult[Any]:
        self._call_log.append(LookupCall(kind, namespace, name))
        error = self._faults.get((kind, namespace, name))
        if error is not None:
            return LookupResult.fault(error)
        obj = self._objects[kind].get((namespace, name))
        if obj is None:
            return LookupResult.miss()
        return LookupResult.hit(obj)


def _kind_of(obj: K8sModel) -> str:
    for kind, model in _KINDS.items():
        if isinstance(obj, model):
            return kind
    raise FixtureError(f"Unsupported object type: {type(obj).__name__}")
