"""
RuntimeCheck Scenarios — Worked examples of the decision engine.

Each case is a small program, already run through a reference resolver,
that uses an API the configured target range cannot rely on. RuntimeCheck
should flag every such use, and stay quiet on the fixed program.

Structure per case:
    - id: Unique identifier
    - api: The API the case is about
    - problem: What goes wrong at runtime on an affected version
    - options: The rule options of the run (target version etc.)
    - broken_refs: Resolver output for the problematic program
    - fixed_refs: Resolver output for the corrected program
    - expected: The diagnostics the broken program must produce, in order
"""

from dataclasses import dataclass, field


@dataclass
class ExpectedDiagnostic:
    """A single diagnostic a scenario must produce."""
    message_id: str       # e.g. "deprecated"
    data: dict            # e.g. {"name": "'new Buffer()'", "version": "6.0.0", ...}
    description: str      # Human-readable explanation


@dataclass
class Scenario:
    """A complete worked example for the scenario runner."""
    id: str
    api: str
    problem: str
    options: dict
    broken_refs: list[dict]
    fixed_refs: list[dict]
    expected: list[ExpectedDiagnostic] = field(default_factory=list)


def ref(path, kind="read", namespace="modules", line=1, column=0, file="app.js"):
    """Shorthand for one resolver record."""
    return {
        "file": file,
        "line": line,
        "column": column,
        "namespace": namespace,
        "path": path.split(".") if isinstance(path, str) else list(path),
        "kind": kind,
    }


# =============================================================================
# CASE 1: assert.deepStrictEqual on a runtime that predates it
# =============================================================================
CASE_DEEP_STRICT_EQUAL = Scenario(
    id="deep_strict_equal",
    api="assert.deepStrictEqual",
    problem="assert.deepStrictEqual only exists from 1.2.0; on 1.1.0 it is undefined and the call throws a TypeError.",
    options={"version": "1.1.0"},
    broken_refs=[
        ref("assert", line=1, column=15),
        ref("assert.deepStrictEqual", line=3),
        ref("assert.deepStrictEqual", kind="call", line=3),
    ],
    fixed_refs=[
        ref("assert", line=1, column=15),
        ref("assert.deepEqual", line=3),
        ref("assert.deepEqual", kind="call", line=3),
    ],
    expected=[
        ExpectedDiagnostic(
            message_id="not-supported-till",
            data={"name": "assert.deepStrictEqual", "supported": "1.2.0", "version": "1.1.0"},
            description="Introduced in 1.2.0, after the lowest targeted version.",
        ),
    ],
)


# =============================================================================
# CASE 2: new Buffer() after its deprecation
# =============================================================================
CASE_BUFFER_CONSTRUCTOR = Scenario(
    id="buffer_constructor",
    api="new Buffer()",
    problem="The Buffer constructor is deprecated since 6.0.0 and emits DEP0005 at runtime.",
    options={"version": "6.1.0"},
    broken_refs=[
        ref("Buffer", namespace="globals", line=2, column=12),
        ref("Buffer", kind="construct", namespace="globals", line=2, column=12),
    ],
    fixed_refs=[
        ref("Buffer.from", namespace="globals", line=2, column=12),
        ref("Buffer.from", kind="call", namespace="globals", line=2, column=12),
    ],
    expected=[
        ExpectedDiagnostic(
            message_id="deprecated",
            data={
                "name": "'new Buffer()'",
                "version": "6.0.0",
                "replace": ". Use Buffer.alloc() or Buffer.from() instead",
            },
            description="Both replacements exist from 5.10.0, so both are suggested.",
        ),
    ],
)


# =============================================================================
# CASE 3: Intl.v8BreakIterator after its removal
# =============================================================================
CASE_V8_BREAK_ITERATOR = Scenario(
    id="v8_break_iterator",
    api="Intl.v8BreakIterator",
    problem="Intl.v8BreakIterator was deprecated in 7.0.0 and removed in 9.0.0.",
    options={"version": "9.5.0"},
    broken_refs=[
        ref("Intl.v8BreakIterator", namespace="globals", line=4, column=18),
        ref("Intl.v8BreakIterator", kind="construct", namespace="globals", line=4, column=18),
    ],
    fixed_refs=[
        ref("Intl.Segmenter", namespace="globals", line=4, column=18),
        ref("Intl.Segmenter", kind="construct", namespace="globals", line=4, column=18),
    ],
    expected=[
        ExpectedDiagnostic(
            message_id="removed",
            data={"name": "'Intl.v8BreakIterator'", "version": "7.0.0", "removed": "9.0.0"},
            description="The target could run 9.x, where the API no longer exists.",
        ),
    ],
)


# =============================================================================
# CASE 4: assert.strict on a line without the backport
# =============================================================================
CASE_ASSERT_STRICT_BACKPORT = Scenario(
    id="assert_strict",
    api="assert.strict",
    problem="assert.strict exists from 9.9.0 and on the 8.x line from 8.13.0; 8.5.0 has neither.",
    options={"version": "8.5.0"},
    broken_refs=[
        ref("node:assert", line=1, column=15),
        ref("node:assert.strict", line=2),
    ],
    fixed_refs=[
        ref("node:assert", line=1, column=15),
        ref("node:assert.deepEqual", line=2),
    ],
    expected=[
        ExpectedDiagnostic(
            message_id="not-supported-till",
            data={"name": "assert.strict", "supported": "9.9.0 (backported: ^8.13.0)", "version": "8.5.0"},
            description="The supported text carries the backport line.",
        ),
    ],
)


# =============================================================================
# CASE 5: fs.exists with only one viable replacement
# =============================================================================
CASE_FS_EXISTS = Scenario(
    id="fs_exists",
    api="fs.exists",
    problem="fs.exists is deprecated since 4.0.0; fs.access is missing before 0.11.15.",
    options={"version": ">=0.10.0"},
    broken_refs=[
        ref("fs", line=1, column=11),
        ref("fs.exists", line=3),
        ref("fs.exists", kind="call", line=3),
    ],
    fixed_refs=[
        ref("fs", line=1, column=11),
        ref("fs.stat", line=3),
        ref("fs.stat", kind="call", line=3),
    ],
    expected=[
        ExpectedDiagnostic(
            message_id="deprecated",
            data={"name": "'fs.exists'", "version": "4.0.0", "replace": ". Use fs.stat() instead"},
            description="fs.access() is not available across the whole range, so it is omitted.",
        ),
    ],
)


# =============================================================================
# CASE 6: fetch with experimental features allowed
# =============================================================================
CASE_FETCH_EXPERIMENTAL = Scenario(
    id="fetch_experimental",
    api="fetch",
    problem="fetch is experimental from 17.5.0 (and 16.15.0 on the 16.x line); 16.0.0 has no fetch at all.",
    options={"version": ">=16.0.0", "allowExperimental": True},
    broken_refs=[
        ref("fetch", namespace="globals", line=5, column=20),
        ref("fetch", kind="call", namespace="globals", line=5, column=20),
    ],
    fixed_refs=[
        ref("https", line=1, column=14),
        ref("https.get", line=5, column=20),
        ref("https.get", kind="call", line=5, column=20),
    ],
    expected=[
        ExpectedDiagnostic(
            message_id="not-experimental-till",
            data={"name": "fetch", "experimental": "17.5.0 (backported: ^16.15.0)", "version": ">=16.0.0"},
            description="Even the experimental API is missing from the start of the range.",
        ),
    ],
)


# =============================================================================
# ALL CASES REGISTRY
# =============================================================================
ALL_CASES: list[Scenario] = [
    CASE_DEEP_STRICT_EQUAL,
    CASE_BUFFER_CONSTRUCTOR,
    CASE_V8_BREAK_ITERATOR,
    CASE_ASSERT_STRICT_BACKPORT,
    CASE_FS_EXISTS,
    CASE_FETCH_EXPERIMENTAL,
]


def print_case_summary():
    """Print a summary table of all scenarios."""
    print(f"{'ID':<20} {'API':<24} {'Options':<36} {'Message':<22} {'# Diags'}")
    print("-" * 110)
    for case in ALL_CASES:
        options = ", ".join(f"{k}={v}" for k, v in case.options.items())
        message_id = case.expected[0].message_id if case.expected else "-"
        print(f"{case.id:<20} {case.api:<24} {options:<36} {message_id:<22} {len(case.expected)}")


if __name__ == "__main__":
    print_case_summary()
