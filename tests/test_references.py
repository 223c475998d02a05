"""
Tests for reading resolver output.
"""

import pytest

from runtimecheck.errors import ReferenceFormatError
from runtimecheck.paths import Namespace, OperationKind
from runtimecheck.references import (
    ResolvedReference,
    SourceLocation,
    load_references,
    parse_references,
    reference_from_dict,
)


class TestReferenceFromDict:
    """Test conversion of single records."""

    def test_full_record(self):
        ref = reference_from_dict({
            "file": "src/app.js", "line": 3, "column": 8,
            "namespace": "modules", "path": ["node:fs", "exists"], "kind": "call",
        })
        assert ref == ResolvedReference(
            namespace=Namespace.MODULES,
            path=("node:fs", "exists"),
            kind=OperationKind.CALL,
            location=SourceLocation("src/app.js", 3, 8),
        )

    def test_defaults(self):
        ref = reference_from_dict({"namespace": "globals", "path": "Intl.v8BreakIterator"}, default_file="x.js")
        assert ref.kind is OperationKind.READ
        assert ref.path == ("Intl", "v8BreakIterator")
        assert ref.location == SourceLocation("x.js", 0, 0)

    @pytest.mark.parametrize("raw", [
        [],
        {"path": ["fs"]},
        {"namespace": "locals", "path": ["fs"]},
        {"namespace": "modules", "path": ["fs"], "kind": "delete"},
        {"namespace": "modules", "path": []},
        {"namespace": "modules", "path": ["fs", ""]},
        {"namespace": "modules"},
        {"namespace": "modules", "path": ["fs"], "line": "3"},
    ])
    def test_invalid_records(self, raw):
        with pytest.raises(ReferenceFormatError):
            reference_from_dict(raw)


class TestParseReferences:
    """Test JSON array and JSON Lines documents."""

    def test_json_array(self):
        text = '[{"namespace": "modules", "path": ["fs"]}, {"namespace": "globals", "path": ["Buffer"], "kind": "construct"}]'
        refs = parse_references(text, source="a.refs.json")
        assert [r.path for r in refs] == [("fs",), ("Buffer",)]
        assert refs[0].location.file == "a.refs.json"

    def test_json_lines_skip_blank_lines(self):
        text = '{"namespace": "modules", "path": ["fs"]}\n\n{"namespace": "modules", "path": ["os"]}\n'
        assert len(parse_references(text)) == 2

    def test_empty_document(self):
        assert parse_references("  \n") == []

    def test_bad_line_is_named(self):
        text = '{"namespace": "modules", "path": ["fs"]}\n{oops}\n'
        with pytest.raises(ReferenceFormatError, match="line 2"):
            parse_references(text, source="b.refs.jsonl")

    def test_bad_record_is_named(self):
        text = '[{"namespace": "modules", "path": ["fs"]}, {"namespace": "nowhere", "path": ["fs"]}]'
        with pytest.raises(ReferenceFormatError, match="record 2"):
            parse_references(text)

    def test_load_references(self, tmp_path):
        path = tmp_path / "app.refs.jsonl"
        path.write_text('{"file": "app.js", "line": 1, "namespace": "modules", "path": ["domain"]}\n')
        refs = load_references(path)
        assert refs[0].location == SourceLocation("app.js", 1, 0)

    def test_location_str(self):
        assert str(SourceLocation("app.js", 4, 2)) == "app.js:4:2"
