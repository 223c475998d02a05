"""
Tests for the worked scenarios and the scenario runner.
"""

import pytest

import main
from test_cases.cases import ALL_CASES


@pytest.mark.parametrize("case", ALL_CASES, ids=[c.id for c in ALL_CASES])
class TestScenario:
    """Every scenario produces exactly its expected diagnostics."""

    def test_broken_program(self, case):
        report = main.scan_case_refs(case, case.broken_refs)
        assert [(d.message_id, d.data) for d in report.diagnostics] == [
            (e.message_id, e.data) for e in case.expected
        ]

    def test_fixed_program(self, case):
        assert main.scan_case_refs(case, case.fixed_refs).total_findings == 0


class TestRunner:
    """Test the scenario runner entry point."""

    def test_list(self, capsys):
        assert main.main(["--list"]) == 0
        out = capsys.readouterr().out
        for case in ALL_CASES:
            assert case.id in out

    def test_single_case(self, capsys):
        assert main.main(["buffer_constructor"]) == 0
        out = capsys.readouterr().out
        assert "MATCH" in out
        assert "MISMATCH" not in out
        assert "CLEAN" in out

    def test_unknown_case(self, capsys):
        assert main.main(["no_such_case"]) == 1
        assert "Unknown case" in capsys.readouterr().out

    def test_evaluation(self, capsys):
        assert main.main(["--eval"]) == 0
        assert f"Scenarios passed:    {len(ALL_CASES)}/{len(ALL_CASES)}" in capsys.readouterr().out
