"""
RuntimeCheck Scenario Runner

Walks through each worked scenario:
  1. Parse the run's options (target version etc.)
  2. Show the resolver output for the problematic program
  3. Run the RuntimeCheck pipeline → show the diagnostics
  4. Compare them with the expected diagnostics
  5. Run the pipeline on the fixed program → expect no diagnostics

Usage:
    python main.py                        # Run all scenarios
    python main.py buffer_constructor     # Run a specific scenario
    python main.py --list                 # List all available scenarios
    python main.py --eval                 # Run evaluation with metrics
"""

import argparse
import sys

from runtimecheck.options import parse_options
from runtimecheck.references import reference_from_dict
from runtimecheck.scanner import ScanReport, scan_references
from test_cases.cases import ALL_CASES, Scenario


def banner(text: str, char: str = "="):
    """Print a formatted banner."""
    width = 70
    print(f"\n{char * width}")
    print(f"  {text}")
    print(f"{char * width}")


def step(num: int, text: str):
    """Print a step indicator."""
    print(f"\n  [{num}] {text}")
    print(f"  {'-' * 60}")


def scan_case_refs(case: Scenario, records: list[dict]) -> ScanReport:
    """Run one scenario's resolver records through the pipeline."""
    options = parse_options(case.options)
    references = [reference_from_dict(r, default_file=f"{case.id}.js") for r in records]
    return scan_references(references, options)


def matches_expected(case: Scenario, report: ScanReport) -> bool:
    """True when the report holds exactly the expected diagnostics, in order."""
    actual = [(d.message_id, d.data) for d in report.diagnostics]
    expected = [(e.message_id, e.data) for e in case.expected]
    return actual == expected


def show_refs(records: list[dict], label: str):
    """Display resolver records with a label."""
    print(f"\n    --- {label} ---")
    for r in records:
        print(f"    {r['line']:3d}:{r['column']:<3d} | {r['namespace']:<8} "
              f"{'.'.join(r['path']):<28} {r['kind']}")
    print()


def run_case(case: Scenario) -> bool:
    """Execute the full walkthrough for a single scenario."""
    banner(f"CASE: {case.id} — {case.api}", "=")
    print(f"\n  Problem:\n    {case.problem}")

    # Step 1: Options
    step(1, "Parsing options")
    options = parse_options(case.options)
    print(f"    Target range: {options.target_range}")
    print(f"    Allow experimental: {options.allow_experimental}")

    # Step 2: What the resolver reports
    step(2, "Resolver output for the problematic program")
    show_refs(case.broken_refs, "References")

    # Step 3: Run the pipeline
    step(3, "RuntimeCheck — classifying each reference")
    report = scan_case_refs(case, case.broken_refs)
    if report.total_findings > 0:
        print(f"    RuntimeCheck found {report.total_findings} issue(s) "
              f"in {report.scan_time_ms:.1f}ms:")
        print()
        for diagnostic in report.diagnostics:
            print(f"    Line {diagnostic.location.line}: [{diagnostic.message_id}]")
            print(f"       {diagnostic.message}")
            print()
    else:
        print(f"    Found 0 issues (expected {len(case.expected)})")

    # Step 4: Compare with expectations
    step(4, "Checking against the expected diagnostics")
    ok = matches_expected(case, report)
    if ok:
        print("    MATCH")
    else:
        print("    MISMATCH, expected:")
        for expected in case.expected:
            print(f"      [{expected.message_id}] {expected.data}")

    # Step 5: Fixed program
    step(5, "Resolver output for the fixed program")
    show_refs(case.fixed_refs, "References")
    fixed_report = scan_case_refs(case, case.fixed_refs)
    if fixed_report.total_findings == 0:
        print("    CLEAN")
    else:
        ok = False
        for diagnostic in fixed_report.diagnostics:
            print(f"    Unexpected: {diagnostic}")

    print()
    return ok


def run_evaluation(cases_to_run: list[Scenario]):
    """Run every scenario and produce a metrics summary.

    For each case:
      - Scan the broken program → count true positives
      - Scan the fixed program → count false positives
      - Measure scan time
    """
    banner("RuntimeCheck Evaluation Suite", "▓")
    print(f"  Evaluating {len(cases_to_run)} scenario(s)...\n")

    header = (f"  {'Case ID':<20} {'Message':<22} {'Expected':>8} {'Detected':>8} "
              f"{'FP':>4} {'Time(ms)':>9} {'Status':<8}")
    print(header)
    print(f"  {'-' * 85}")

    total_expected = 0
    total_detected = 0
    total_fp = 0
    total_time = 0.0
    case_results = []

    for case in cases_to_run:
        broken_report = scan_case_refs(case, case.broken_refs)
        fixed_report = scan_case_refs(case, case.fixed_refs)

        expected = len(case.expected)
        tp = broken_report.total_findings
        fp = fixed_report.total_findings
        scan_time = broken_report.scan_time_ms + fixed_report.scan_time_ms
        passed = matches_expected(case, broken_report) and fp == 0

        if passed:
            status = "PASS"
        elif fp > 0:
            status = "FP"
        else:
            status = "MISS"

        message_id = case.expected[0].message_id if case.expected else "-"
        print(f"  {case.id:<20} {message_id:<22} {expected:>8} {tp:>8} "
              f"{fp:>4} {scan_time:>9.1f} {status:<8}")

        total_expected += expected
        total_detected += tp
        total_fp += fp
        total_time += scan_time
        case_results.append({
            "id": case.id,
            "expected": expected,
            "detected": tp,
            "fp": fp,
            "time_ms": scan_time,
            "pass": passed,
        })

    print(f"  {'-' * 85}")
    pass_count = sum(1 for r in case_results if r["pass"])

    print("\n  Evaluation Summary")
    print(f"  {'=' * 50}")
    print(f"  Scenarios evaluated: {len(case_results)}")
    print(f"  Scenarios passed:    {pass_count}/{len(case_results)}")
    print(f"  Diagnostics:         {total_detected}/{total_expected}")
    print(f"  False positives:     {total_fp}")
    print(f"  Total scan time:     {total_time:.1f}ms")
    print()

    return case_results


def main(argv=None):
    parser = argparse.ArgumentParser(description="RuntimeCheck Scenario Runner")
    parser.add_argument("case_id", nargs="?", help="Run a specific scenario by ID")
    parser.add_argument("--list", action="store_true", help="List all available scenarios")
    parser.add_argument("--eval", action="store_true", help="Run evaluation with metrics")
    args = parser.parse_args(argv)

    if args.list:
        from test_cases.cases import print_case_summary
        print_case_summary()
        return 0

    cases_to_run = ALL_CASES
    if args.case_id:
        cases_to_run = [c for c in ALL_CASES if c.id == args.case_id]
        if not cases_to_run:
            print(f"Unknown case: {args.case_id}")
            print(f"Available: {', '.join(c.id for c in ALL_CASES)}")
            return 1

    if args.eval:
        results = run_evaluation(cases_to_run)
        return 0 if all(r["pass"] for r in results) else 1

    banner("RuntimeCheck Scenarios", "▓")
    print(f"  Running {len(cases_to_run)} scenario(s)...\n")

    results = {"pass": 0, "fail": 0}
    for case in cases_to_run:
        if run_case(case):
            results["pass"] += 1
        else:
            results["fail"] += 1

    banner("Scenario Summary")
    print(f"  Scenarios run: {results['pass'] + results['fail']}")
    print(f"  Matching: {results['pass']}")
    print(f"  Mismatching: {results['fail']}")
    return 0 if results["fail"] == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
