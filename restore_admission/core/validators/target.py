"""
Target validation — resolve the restore target and check it can be
restored onto.

The target reference is first classified into a closed set of target
variants. Only a VirtualMachineTarget goes on to cluster reads: a
missing VM is fine (the restore controller creates it), a VM with a
running instance is not.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from restore_admission.adapters.base import VirtualMachineInstanceLookup, VirtualMachineLookup
from restore_admission.core.context import ReviewContext
from restore_admission.core.models.admission import StatusCause
from restore_admission.core.models.restore import VM_GROUP, VM_KIND, RestoreSpec, TargetRef
from restore_admission.core.validators.patches import PATCHES_FIELD, validate_patches

logger = logging.getLogger(__name__)

TARGET_FIELD = "spec.target"


# ── Target variants ─────────────────────────────────────────────


@dataclass(frozen=True)
class VirtualMachineTarget:
    """A core-group VirtualMachine, by name."""

    name: str


@dataclass(frozen=True)
class UnsupportedTarget:
    """A reference the admitter cannot restore onto."""

    cause: StatusCause


ResolvedTarget = VirtualMachineTarget | UnsupportedTarget


def classify_target(target: TargetRef) -> ResolvedTarget:
    """Map a target reference onto its variant.

    New target kinds are added here and handled wherever a
    ResolvedTarget is matched.
    """
    if target.api_group is None:
        return UnsupportedTarget(StatusCause.not_found(
            "missing apiGroup", f"{TARGET_FIELD}.apiGroup",
        ))
    if target.api_group != VM_GROUP:
        return UnsupportedTarget(StatusCause.invalid(
            "invalid apiGroup", f"{TARGET_FIELD}.apiGroup",
        ))
    if target.kind != VM_KIND:
        return UnsupportedTarget(StatusCause.invalid(
            "invalid kind", f"{TARGET_FIELD}.kind",
        ))
    return VirtualMachineTarget(name=target.name)


# ── Resolution ──────────────────────────────────────────────────


@dataclass(frozen=True)
class TargetResolution:
    """What the cluster says about the target VM.

    ``uid`` is withheld while an instance is running; downstream
    comparisons treat an absent uid as unknown.
    """

    uid: str | None = None
    vm_exists: bool = False
    instance_exists: bool = False


@dataclass
class TargetCheck:
    """Outcome of target validation."""

    target: ResolvedTarget
    resolution: TargetResolution = field(default_factory=TargetResolution)
    causes: list[StatusCause] = field(default_factory=list)

    @property
    def supported(self) -> bool:
        return isinstance(self.target, VirtualMachineTarget)


def resolve_virtual_machine(
    ctx: ReviewContext,
    vms: VirtualMachineLookup,
    instances: VirtualMachineInstanceLookup,
    namespace: str,
    name: str,
) -> tuple[TargetResolution, list[StatusCause]]:
    """Look up the target VM and its running instance.

    Raises:
        LookupFault: On any read failure other than "not found".
    """
    ctx.check()
    vm = vms.get_virtual_machine(ctx, namespace, name).unwrap()
    if vm is None:
        logger.debug("Target VM %s/%s does not exist; restore will create it", namespace, name)
        return TargetResolution(), []

    ctx.check()
    instance = instances.get_virtual_machine_instance(ctx, namespace, name).unwrap()
    if instance is None:
        return TargetResolution(uid=vm.uid, vm_exists=True), []

    cause = StatusCause.invalid(
        f'VirtualMachineInstance "{name}" exists, VM must be stopped before restore',
        TARGET_FIELD,
    )
    return TargetResolution(vm_exists=True, instance_exists=True), [cause]


def validate_target(
    ctx: ReviewContext,
    vms: VirtualMachineLookup,
    instances: VirtualMachineInstanceLookup,
    namespace: str,
    spec: RestoreSpec,
) -> TargetCheck:
    """Validate patches, classify the target and resolve it."""
    causes = validate_patches(spec.patches, PATCHES_FIELD)

    target = classify_target(spec.target)
    if isinstance(target, UnsupportedTarget):
        return TargetCheck(target=target, causes=causes + [target.cause])

    resolution, target_causes = resolve_virtual_machine(ctx, vms, instances, namespace, target.name)
    return TargetCheck(target=target, resolution=resolution, causes=causes + target_causes)
