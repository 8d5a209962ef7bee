"""
Tests for lookup adapters — result type, in-memory cluster, kubectl.
"""

import json
import subprocess
import textwrap
from pathlib import Path
from unittest.mock import patch

import pytest

from restore_admission.adapters.base import LookupResult, LookupStatus
from restore_admission.adapters.kubectl import KubectlCluster
from restore_admission.adapters.memory import FixtureError, InMemoryCluster, LookupCall
from restore_admission.core.context import ReviewContext
from restore_admission.core.errors import LookupFault
from restore_admission.core.models import VirtualMachine

# ── LookupResult ─────────────────────────────────────────────────────


class TestLookupResult:
    def test_hit(self):
        result = LookupResult.hit("x")
        assert result.found
        assert result.status == LookupStatus.FOUND
        assert result.unwrap() == "x"

    def test_miss(self):
        result = LookupResult.miss()
        assert result.missing
        assert result.unwrap() is None

    def test_fault(self):
        result = LookupResult.fault("boom")
        assert result.failed
        with pytest.raises(LookupFault, match="boom"):
            result.unwrap()


# ── In-memory cluster ────────────────────────────────────────────────


class TestInMemoryCluster:
    def test_get_and_call_log(self, ctx):
        cluster = InMemoryCluster()
        cluster.add_document({"kind": "VirtualMachine", "metadata": {"name": "vm1", "uid": "u1"}})
        result = cluster.get_virtual_machine(ctx, "default", "vm1")
        assert result.found
        assert result.value.uid == "u1"
        assert cluster.call_log == [LookupCall("VirtualMachine", "default", "vm1")]

    def test_namespaces_are_separate(self, ctx):
        cluster = InMemoryCluster()
        cluster.add_document({"kind": "VirtualMachine", "metadata": {"name": "vm1", "namespace": "a"}})
        assert cluster.get_virtual_machine(ctx, "a", "vm1").found
        assert cluster.get_virtual_machine(ctx, "b", "vm1").missing

    def test_fault_injection(self, ctx):
        cluster = InMemoryCluster()
        cluster.set_fault("VirtualMachineSnapshot", "default", "snap1", error="denied")
        result = cluster.get_snapshot(ctx, "default", "snap1")
        assert result.failed
        assert result.error == "denied"
        cluster.clear_faults()
        assert cluster.get_snapshot(ctx, "default", "snap1").missing

    def test_unsupported_kind(self):
        with pytest.raises(FixtureError, match="Unsupported kind"):
            InMemoryCluster().add_document({"kind": "Pod", "metadata": {"name": "p"}})

    def test_lookups_bundle(self):
        cluster = InMemoryCluster()
        lookups = cluster.lookups()
        assert lookups.virtual_machines is cluster
        assert lookups.restores is cluster

    def test_from_yaml(self, tmp_path: Path, ctx):
        fixture = tmp_path / "cluster.yml"
        fixture.write_text(textwrap.dedent("""\
            apiVersion: kubevirt.io/v1
            kind: VirtualMachine
            metadata:
              name: vm1
              namespace: prod
              uid: uid-vm1
            ---
            apiVersion: v1
            kind: List
            items:
              - kind: VirtualMachineSnapshot
                metadata: {name: snap1, namespace: prod}
                status: {phase: Succeeded, readyToUse: true, sourceUID: uid-vm1}
              - kind: VirtualMachineRestore
                metadata: {name: r1, namespace: prod}
                spec:
                  target: {apiGroup: kubevirt.io, kind: VirtualMachine, name: vm1}
                  virtualMachineSnapshotName: snap1
        """))
        cluster = InMemoryCluster.from_yaml(fixture)
        assert cluster.get_virtual_machine(ctx, "prod", "vm1").found
        assert cluster.get_snapshot(ctx, "prod", "snap1").value.ready
        summaries = cluster.list_restores(ctx, "prod")
        assert [s.name for s in summaries] == ["r1"]
        assert summaries[0].in_progress

    def test_from_yaml_invalid(self, tmp_path: Path):
        fixture = tmp_path / "bad.yml"
        fixture.write_text("kind: [unclosed\n")
        with pytest.raises(FixtureError, match="Invalid YAML"):
            InMemoryCluster.from_yaml(fixture)

    def test_from_yaml_not_mapping(self, tmp_path: Path):
        fixture = tmp_path / "list.yml"
        fixture.write_text("- a\n- b\n")
        with pytest.raises(FixtureError, match="Expected a YAML mapping"):
            InMemoryCluster.from_yaml(fixture)

    def test_from_yaml_missing_file(self, tmp_path: Path):
        with pytest.raises(FixtureError, match="Cannot read"):
            InMemoryCluster.from_yaml(tmp_path / "nope.yml")


# ── kubectl ──────────────────────────────────────────────────────────


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=["kubectl"], returncode=returncode, stdout=stdout, stderr=stderr)


class TestKubectlCluster:
    def test_found(self, ctx):
        vm = {"kind": "VirtualMachine", "metadata": {"name": "vm1", "uid": "u1"}, "spec": {"running": False}}
        with patch("restore_admission.adapters.kubectl.subprocess.run", return_value=_completed(stdout=json.dumps(vm))) as run:
            result = KubectlCluster().get_virtual_machine(ctx, "ns", "vm1")
        assert result.found
        assert isinstance(result.value, VirtualMachine)
        assert result.value.uid == "u1"
        cmd = run.call_args.args[0]
        assert cmd == ["kubectl", "get", "virtualmachines.kubevirt.io", "vm1", "-n", "ns", "-o", "json"]

    def test_not_found(self, ctx):
        stderr = 'Error from server (NotFound): virtualmachinesnapshots "snap1" not found'
        with patch("restore_admission.adapters.kubectl.subprocess.run", return_value=_completed(1, stderr=stderr)):
            assert KubectlCluster().get_snapshot(ctx, "ns", "snap1").missing

    def test_forbidden_is_fault(self, ctx):
        stderr = "Error from server (Forbidden): virtualmachines is forbidden"
        with patch("restore_admission.adapters.kubectl.subprocess.run", return_value=_completed(1, stderr=stderr)):
            result = KubectlCluster().get_virtual_machine(ctx, "ns", "vm1")
        assert result.failed
        assert "Forbidden" in result.error

    def test_missing_binary_is_fault(self, ctx):
        with patch("restore_admission.adapters.kubectl.subprocess.run", side_effect=FileNotFoundError):
            result = KubectlCluster().get_virtual_machine_instance(ctx, "ns", "vm1")
        assert result.failed
        assert "not available" in result.error

    def test_timeout_is_fault(self, ctx):
        with patch(
            "restore_admission.adapters.kubectl.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="kubectl", timeout=1),
        ):
            assert KubectlCluster().get_snapshot_content(ctx, "ns", "c1").failed

    def test_unparsable_output_is_fault(self, ctx):
        with patch("restore_admission.adapters.kubectl.subprocess.run", return_value=_completed(stdout="not json")):
            assert KubectlCluster().get_virtual_machine(ctx, "ns", "vm1").failed

    def test_context_and_kubeconfig_flags(self, ctx):
        with patch("restore_admission.adapters.kubectl.subprocess.run", return_value=_completed(stdout="{}")) as run:
            KubectlCluster(context="prod", kubeconfig="/tmp/kc").get_virtual_machine(ctx, "ns", "vm1")
        cmd = run.call_args.args[0]
        assert cmd[:5] == ["kubectl", "--kubeconfig", "/tmp/kc", "--context", "prod"]

    def test_timeout_follows_context_deadline(self):
        ctx = ReviewContext(timeout=3)
        with patch("restore_admission.adapters.kubectl.subprocess.run", return_value=_completed(stdout="{}")) as run:
            KubectlCluster().get_virtual_machine(ctx, "ns", "vm1")
        assert 0 < run.call_args.kwargs["timeout"] <= 3

    def test_list_restores(self, ctx):
        payload = {"items": [
            {"metadata": {"name": "r1"}, "spec": {"target": {"apiGroup": "kubevirt.io", "kind": "VirtualMachine", "name": "vm1"}}},
            {"metadata": {"name": "r2"}, "spec": {}, "status": {"complete": True}},
        ]}
        with patch("restore_admission.adapters.kubectl.subprocess.run", return_value=_completed(stdout=json.dumps(payload))):
            summaries = KubectlCluster().list_restores(ctx, "ns")
        assert [s.name for s in summaries] == ["r1", "r2"]
        assert summaries[0].in_progress
        assert not summaries[1].in_progress

    def test_list_restores_failure_raises(self, ctx):
        with patch("restore_admission.adapters.kubectl.subprocess.run", return_value=_completed(1, stderr="boom")):
            with pytest.raises(LookupFault, match="boom"):
                KubectlCluster().list_restores(ctx, "ns")
