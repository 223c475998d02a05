"""
Tests for the runtimecheck command line.
"""

import json

import pytest

from runtimecheck.cli import EXIT_CONFIG_ERROR, EXIT_FINDINGS, EXIT_OK, main


@pytest.fixture
def refs_file(tmp_path):
    path = tmp_path / "app.refs.jsonl"
    path.write_text(
        '{"file": "app.js", "line": 3, "column": 4, "namespace": "modules", "path": ["node:fs", "exists"]}\n'
        '{"file": "app.js", "line": 7, "column": 0, "namespace": "globals", "path": ["Buffer"], "kind": "construct"}\n'
    )
    return path


class TestScanCommand:
    """Test `runtimecheck scan`."""

    def test_findings_exit_code(self, refs_file, capsys):
        assert main(["scan", str(refs_file), "--version", "6.1.0"]) == EXIT_FINDINGS
        out = capsys.readouterr().out
        assert "app.js:3:4 [deprecated] 'fs.exists' was deprecated since v4.0.0" in out
        assert "'new Buffer()' was deprecated since v6.0.0. Use Buffer.alloc() or Buffer.from() instead." in out

    def test_json_output(self, refs_file, capsys):
        main(["scan", str(refs_file), "--version", "6.1.0", "--format", "json"])
        data = json.loads(capsys.readouterr().out)
        assert data["counts"]["deprecated"] == 2
        assert [d["line"] for d in data["diagnostics"]] == [3, 7]

    def test_ignores(self, refs_file, capsys):
        code = main([
            "scan", str(refs_file), "--version", "6.1.0",
            "--ignore-module", "fs.exists", "--ignore-global", "new Buffer()",
        ])
        assert code == EXIT_OK
        assert "(2 ignored)" in capsys.readouterr().out

    def test_no_findings(self, refs_file):
        assert main(["scan", str(refs_file), "--version", "<4"]) == EXIT_OK

    def test_config_file(self, refs_file, tmp_path):
        config = tmp_path / "runtimecheck.yaml"
        config.write_text("version: '6.1.0'\nignoreModuleItems: [fs.exists]\n")
        assert main(["scan", str(refs_file), "--config", str(config)]) == EXIT_FINDINGS

    def test_bad_version(self, refs_file, capsys):
        assert main(["scan", str(refs_file), "--version", ">=nope"]) == EXIT_CONFIG_ERROR
        assert "Configuration error" in capsys.readouterr().err

    def test_unknown_ignore_name(self, refs_file):
        assert main(["scan", str(refs_file), "--version", "8", "--ignore-module", "fs.nothing"]) == EXIT_CONFIG_ERROR

    def test_project_dir_engines(self, refs_file, tmp_path, capsys):
        (tmp_path / "package.json").write_text('{"engines": {"node": "<4"}}')
        assert main(["scan", str(refs_file), "--project-dir", str(tmp_path)]) == EXIT_OK

    def test_missing_reference_file(self, tmp_path, capsys):
        assert main(["scan", str(tmp_path / "missing.jsonl"), "--version", "8"]) == EXIT_CONFIG_ERROR
        assert "Could not load" in capsys.readouterr().out

    def test_malformed_reference_file_with_findings(self, refs_file, tmp_path, capsys):
        bad = tmp_path / "bad.refs.jsonl"
        bad.write_text('{"file": "b.js", "line": 1\n')
        assert main(["scan", str(refs_file), str(bad), "--version", "6.1.0"]) == EXIT_CONFIG_ERROR
        out = capsys.readouterr().out
        assert "Could not load" in out
        assert "'fs.exists' was deprecated" in out


class TestCheckCommand:
    """Test `runtimecheck check`."""

    def test_removed(self, capsys):
        code = main(["check", "Intl.v8BreakIterator", "--namespace", "globals", "--version", "9.5.0"])
        assert code == EXIT_FINDINGS
        assert capsys.readouterr().out.strip() == (
            "'Intl.v8BreakIterator' was deprecated since v7.0.0, and removed in v9.0.0."
        )

    def test_fine(self, capsys):
        assert main(["check", "assert.deepStrictEqual", "--version", "1.2.0"]) == EXIT_OK
        assert "is fine" in capsys.readouterr().out

    def test_untracked(self, capsys):
        assert main(["check", "fs.readFile", "--version", "8"]) == EXIT_OK
        assert "not tracked" in capsys.readouterr().out

    def test_experimental(self, capsys):
        code = main(["check", "fetch", "--namespace", "globals", "--version", ">=16.0.0", "--allow-experimental"])
        assert code == EXIT_FINDINGS
        assert "not an experimental feature until Node.js 17.5.0 (backported: ^16.15.0)" in capsys.readouterr().out

    @pytest.mark.parametrize("path", ["fs..exists", ".exists", "fs.", ""])
    def test_invalid_path(self, path, capsys):
        assert main(["check", path, "--version", "8"]) == EXIT_CONFIG_ERROR
        assert "Invalid API path" in capsys.readouterr().err


class TestNamesCommand:
    """Test `runtimecheck names`."""

    def test_global_names(self, capsys):
        assert main(["names", "--namespace", "globals"]) == EXIT_OK
        names = capsys.readouterr().out.splitlines()
        assert "new Buffer()" in names
        assert names == sorted(names)

    def test_all_namespaces(self, capsys):
        main(["names"])
        out = capsys.readouterr().out
        assert "modules\tfs.exists" in out
        assert "globals\tBuffer()" in out
