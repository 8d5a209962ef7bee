"""
Patch validation — restore patches may only touch the VM spec,
labels and annotations.

Each patch entry is a JSON document: one JSON-Patch operation object,
or an array of them. Paths are compared as JSON pointers, segment by
segment, so quoted values containing "/", "," or ":" cannot confuse
the check.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from restore_admission.core.models.admission import StatusCause

PATCHES_FIELD = "spec.patches"

# Pointer members that name a location in the target object
_POINTER_MEMBERS = ("path", "from")

# metadata children that may be patched, key by key
_METADATA_MAPS = {"labels", "annotations"}


@dataclass(frozen=True)
class PatchOperation:
    """One decoded JSON-Patch operation."""

    op: str
    path: str | None = None
    from_path: str | None = None
    value: Any = None

    def pointers(self) -> list[str]:
        return [p for p in (self.path, self.from_path) if p is not None]


class PatchFormatError(ValueError):
    """A patch entry is not a JSON-Patch operation (or list of them)."""


def decode_patch(raw: str) -> list[PatchOperation]:
    """Decode one patch entry into its operations.

    Raises:
        PatchFormatError: If the entry is not JSON, not an object or
            array of objects, or has a non-string pointer member.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise PatchFormatError(f"not a JSON document: {raw}") from e

    items = data if isinstance(data, list) else [data]
    ops: list[PatchOperation] = []
    for item in items:
        if not isinstance(item, dict):
            raise PatchFormatError(f"expected a JSON object per operation: {raw}")
        for member in _POINTER_MEMBERS:
            if member in item and not isinstance(item[member], str):
                raise PatchFormatError(f'"{member}" must be a string: {raw}')
        ops.append(PatchOperation(
            op=str(item.get("op", "")),
            path=item.get("path"),
            from_path=item.get("from"),
            value=item.get("value"),
        ))
    return ops


def pointer_segments(pointer: str) -> list[str]:
    """Split a JSON pointer into unescaped reference tokens."""
    if pointer == "":
        return []
    if not pointer.startswith("/"):
        # Not a pointer at all; a single opaque token never matches a prefix
        return [pointer]
    return [
        token.replace("~1", "/").replace("~0", "~")
        for token in pointer[1:].split("/")
    ]


def is_patchable(pointer: str) -> bool:
    """True for /spec/<...>, /metadata/labels/<key>, /metadata/annotations/<key>."""
    segments = pointer_segments(pointer)
    if len(segments) >= 2 and segments[0] == "spec":
        return True
    return (
        len(segments) >= 3
        and segments[0] == "metadata"
        and segments[1] in _METADATA_MAPS
    )


def validate_patches(patches: list[str], field: str = PATCHES_FIELD) -> list[StatusCause]:
    """Check every operation of every patch; causes accumulate."""
    causes: list[StatusCause] = []

    for raw in patches:
        try:
            operations = decode_patch(raw)
        except PatchFormatError as e:
            causes.append(StatusCause.invalid(f"patch format is not valid - {e}", field))
            continue

        for operation in operations:
            for pointer in operation.pointers():
                if not is_patchable(pointer):
                    causes.append(StatusCause.invalid(
                        f"patching is valid only for elements under /spec/: {pointer}",
                        field,
                    ))

    return causes
