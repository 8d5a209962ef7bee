"""
kubectl cluster — a Lookup Gateway backed by the kubectl CLI.

Every read is one ``kubectl get ... -o json`` call, bounded by the time
left on the review context. "NotFound" answers map to not_found; any
other failure (missing binary, timeout, RBAC, unparsable output) is a
fault. Nothing is retried here.
"""

from __future__ import annotations

import json
import logging
import subprocess
from typing import Any

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

# Fully-qualified resource names, so short-name clashes can't bite
_VM = "virtualmachines.kubevirt.io"
_VMI = "virtualmachineinstances.kubevirt.io"
_SNAPSHOT = "virtualmachinesnapshots.snapshot.kubevirt.io"
_CONTENT = "virtualmachinesnapshotcontents.snapshot.kubevirt.io"
_RESTORE = "virtualmachinerestores.snapshot.kubevirt.io"

# Used when the review context has no deadline
_DEFAULT_TIMEOUT = 15.0


class KubectlCluster(
    VirtualMachineLookup,
    VirtualMachineInstanceLookup,
    SnapshotLookup,
    SnapshotContentLookup,
    RestoreIndex,
):
    """Serves every lookup port through ``kubectl get``."""

    def __init__(
        self,
        context: str | None = None,
        kubeconfig: str | None = None,
        binary: str = "kubectl",
    ):
        self._context = context
        self._kubeconfig = kubeconfig
        self._binary = binary

    def lookups(self) -> ClusterLookups:
        return ClusterLookups(
            virtual_machines=self,
            instances=self,
            snapshots=self,
            snapshot_contents=self,
            restores=self,
        )

    # ── Ports ───────────────────────────────────────────────────

    def get_virtual_machine(self, ctx: ReviewContext, namespace: str, name: str) -> LookupResult[VirtualMachine]:
        return self._get(ctx, _VM, VirtualMachine, namespace, name)

    def get_virtual_machine_instance(
        self, ctx: ReviewContext, namespace: str, name: str,
    ) -> LookupResult[VirtualMachineInstance]:
        return self._get(ctx, _VMI, VirtualMachineInstance, namespace, name)

    def get_snapshot(self, ctx: ReviewContext, namespace: str, name: str) -> LookupResult[VirtualMachineSnapshot]:
        return self._get(ctx, _SNAPSHOT, VirtualMachineSnapshot, namespace, name)

    def get_snapshot_content(
        self, ctx: ReviewContext, namespace: str, name: str,
    ) -> LookupResult[VirtualMachineSnapshotContent]:
        return self._get(ctx, _CONTENT, VirtualMachineSnapshotContent, namespace, name)

    def list_restores(self, ctx: ReviewContext, namespace: str) -> list[RestoreSummary]:
        result = self._run(ctx, "get", _RESTORE, "-n", namespace, "-o", "json")
        if result.returncode != 0:
            raise LookupFault(f"kubectl get {_RESTORE} -n {namespace}: {result.stderr.strip()}")
        try:
            items = json.loads(result.stdout).get("items") or []
            restores = [VirtualMachineRestore.model_validate(item) for item in items]
        except (ValueError, AttributeError, ValidationError) as e:
            raise LookupFault(f"Unparsable restore list for {namespace}: {e}") from e
        return [RestoreSummary.from_restore(r) for r in restores]

    # ── Internals ───────────────────────────────────────────────

    def _get(
        self,
        ctx: ReviewContext,
        resource: str,
        model: type[K8sModel],
        namespace: str,
        name: str,
    ) -> LookupResult[Any]:
        try:
            result = self._run(ctx, "get", resource, name, "-n", namespace, "-o", "json")
        except LookupFault as e:
            return LookupResult.fault(str(e))

        if result.returncode != 0:
            stderr = result.stderr.strip()
            if _is_not_found(stderr):
                logger.debug("%s %s/%s not found", resource, namespace, name)
                return LookupResult.miss()
            return LookupResult.fault(f"kubectl get {resource} {namespace}/{name}: {stderr}")

        try:
            return LookupResult.hit(model.model_validate(json.loads(result.stdout)))
        except (ValueError, ValidationError) as e:
            return LookupResult.fault(f"Unparsable {resource} {namespace}/{name}: {e}")

    def _run(self, ctx: ReviewContext, *args: str) -> subprocess.CompletedProcess[str]:
        cmd = [self._binary]
        if self._kubeconfig:
            cmd += ["--kubeconfig", self._kubeconfig]
        if self._context:
            cmd += ["--context", self._context]
        cmd += list(args)

        remaining = ctx.remaining()
        timeout = _DEFAULT_TIMEOUT if remaining is None else remaining
        logger.debug("Running %s (timeout=%.1fs)", " ".join(cmd), timeout)
        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError as e:
            raise LookupFault(f"{self._binary} not available") from e
        except subprocess.TimeoutExpired as e:
            raise LookupFault(f"{self._binary} timed out after {timeout:.1f}s") from e


def _is_not_found(stderr: str) -> bool:
    """kubectl reports missing objects as ``Error from server (NotFound)``."""
    return "(NotFound)" in stderr
