"""
Tests for patch validation — decoding and path restrictions.
"""

import json

import pytest

from restore_admission.core.models import CauseType
from restore_admission.core.validators.patches import (
    PATCHES_FIELD,
    PatchFormatError,
    decode_patch,
    is_patchable,
    pointer_segments,
    validate_patches,
)


def _op(op: str = "replace", path: str = "/spec/running", value=None, **extra) -> str:
    doc = {"op": op, "path": path, **extra}
    if value is not None:
        doc["value"] = value
    return json.dumps(doc)


class TestDecodePatch:
    def test_single_operation(self):
        ops = decode_patch(_op(value="x"))
        assert len(ops) == 1
        assert ops[0].op == "replace"
        assert ops[0].path == "/spec/running"
        assert ops[0].value == "x"

    def test_array_of_operations(self):
        raw = json.dumps([
            {"op": "add", "path": "/spec/a", "value": 1},
            {"op": "remove", "path": "/spec/b"},
        ])
        assert [o.op for o in decode_patch(raw)] == ["add", "remove"]

    def test_not_json(self):
        with pytest.raises(PatchFormatError):
            decode_patch('{"op" "replace"}')

    def test_scalar_is_rejected(self):
        with pytest.raises(PatchFormatError):
            decode_patch("42")

    def test_non_string_path(self):
        with pytest.raises(PatchFormatError):
            decode_patch('{"op": "remove", "path": 7}')


class TestPointers:
    def test_segments(self):
        assert pointer_segments("/metadata/labels/tier") == ["metadata", "labels", "tier"]

    def test_escaped_segments(self):
        assert pointer_segments("/metadata/labels/app.io~1name") == ["metadata", "labels", "app.io/name"]

    def test_root_pointer(self):
        assert pointer_segments("") == []

    @pytest.mark.parametrize("pointer", [
        "/spec/running",
        "/spec/template/spec/domain",
        "/metadata/labels/tier",
        "/metadata/annotations/note",
    ])
    def test_allowed(self, pointer):
        assert is_patchable(pointer)

    @pytest.mark.parametrize("pointer", [
        "/status/foo",
        "/metadata/name",
        "/metadata/labels",
        "/spec",
        "/specification/x",
        "spec/running",
        "",
    ])
    def test_refused(self, pointer):
        assert not is_patchable(pointer)


class TestValidatePatches:
    def test_no_patches(self):
        assert validate_patches([]) == []

    def test_label_patch_accepted(self):
        assert validate_patches([_op(path="/metadata/labels/tier", value="gold")]) == []

    def test_status_patch_denied(self):
        causes = validate_patches([_op(path="/status/foo", value="x")])
        assert len(causes) == 1
        assert causes[0].type == CauseType.INVALID
        assert causes[0].field == PATCHES_FIELD
        assert "only for elements under /spec/" in causes[0].message
        assert "/status/foo" in causes[0].message

    def test_operation_without_path_accepted(self):
        assert validate_patches(['{"op": "test"}']) == []

    def test_missing_separator_is_format_error(self):
        causes = validate_patches(['{"op" "replace", "path": "/spec/x"}'])
        assert len(causes) == 1
        assert causes[0].message.startswith("patch format is not valid")

    def test_value_with_delimiters_is_not_confused(self):
        raw = _op(path="/spec/description", value='a, "path": "/status/x"')
        assert validate_patches([raw]) == []

    def test_move_from_is_checked(self):
        raw = _op(op="move", path="/spec/a", **{"from": "/status/a"})
        causes = validate_patches([raw])
        assert len(causes) == 1
        assert "/status/a" in causes[0].message

    def test_causes_accumulate(self):
        causes = validate_patches([
            _op(path="/status/a"),
            "not json",
            _op(path="/spec/ok"),
            _op(path="/metadata/name"),
        ])
        assert len(causes) == 3

    def test_custom_field(self):
        causes = validate_patches([_op(path="/status/a")], field="spec.other")
        assert causes[0].field == "spec.other"
