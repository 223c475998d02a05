"""
RuntimeCheck Scanner — Run resolved references through the decision pipeline.

For every reference emitted by the resolver:
  1. normalize the access path (strip the "node:" scheme)
  2. look up its lifecycle record in the registry
  3. classify the use against the configured target range
  4. compute the replacement suggestion
  5. drop it if the user ignores that name
  6. format the diagnostic

Usage:
    from runtimecheck.options import parse_options
    from runtimecheck.scanner import scan_file, scan_directory

    options = parse_options({"version": ">=8.0.0"})
    report = scan_file("build/app.refs.jsonl", options)
    print(report)

    report = scan_directory("build/refs/", options)
    print(report)
"""

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from runtimecheck.diagnostics import Diagnostic, Finding, format_finding
from runtimecheck.engine import ClassificationKind, classify
from runtimecheck.errors import ReferenceFormatError
from runtimecheck.ignore import is_ignored
from runtimecheck.knowledge_base import REGISTRY, Registry
from runtimecheck.options import ParsedOptions
from runtimecheck.paths import normalize_path
from runtimecheck.references import ResolvedReference, load_references
from runtimecheck.replacements import suggestion_text


logger = logging.getLogger(__name__)

REFERENCE_FILE_PATTERNS = ("*.refs.json", "*.refs.jsonl")


@dataclass
class ScanReport:
    """Complete scan report for one or more reference files."""
    findings: list[Finding] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    files_scanned: int = 0
    references_checked: int = 0
    ignored_count: int = 0
    scan_time_ms: float = 0.0
    errors: list[str] = field(default_factory=list)

    @property
    def total_findings(self) -> int:
        return len(self.findings)

    def count(self, kind: ClassificationKind) -> int:
        return sum(1 for f in self.findings if f.classification is kind)

    def counts(self) -> dict[str, int]:
        tally = Counter(f.classification.value for f in self.findings)
        return {kind.value: tally.get(kind.value, 0) for kind in ClassificationKind}

    def merge(self, other: "ScanReport") -> None:
        self.findings.extend(other.findings)
        self.diagnostics.extend(other.diagnostics)
        self.files_scanned += other.files_scanned
        self.references_checked += other.references_checked
        self.ignored_count += other.ignored_count
        self.errors.extend(other.errors)

    def sort(self) -> None:
        order = sorted(
            range(len(self.findings)),
            key=lambda i: (
                self.findings[i].location.file,
                self.findings[i].location.line,
                self.findings[i].location.column,
            ),
        )
        self.findings = [self.findings[i] for i in order]
        self.diagnostics = [self.diagnostics[i] for i in order]

    def to_dict(self) -> dict:
        return {
            "filesScanned": self.files_scanned,
            "referencesChecked": self.references_checked,
            "ignored": self.ignored_count,
            "counts": self.counts(),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "errors": list(self.errors),
        }

    def __str__(self) -> str:
        counts = self.counts()
        lines = []
        lines.append("RuntimeCheck Scan Report")
        lines.append(f"{'=' * 60}")
        lines.append(f"Files scanned: {self.files_scanned}")
        lines.append(f"References checked: {self.references_checked} "
                     f"({self.ignored_count} ignored)")
        lines.append(f"Findings: {self.total_findings} "
                     f"({counts['removed']} removed, {counts['deprecated']} deprecated, "
                     f"{counts['not-yet-supported']} not yet supported, "
                     f"{counts['not-yet-experimental']} not yet experimental)")
        lines.append(f"Scan time: {self.scan_time_ms:.1f}ms")

        if self.errors:
            lines.append("\nErrors:")
            for err in self.errors:
                lines.append(f"  ! {err}")

        if self.diagnostics:
            lines.append("\nFindings:")
            lines.append(f"{'-' * 60}")
            for diagnostic in self.diagnostics:
                lines.append(str(diagnostic))

        if not self.findings:
            lines.append("\nNo unsupported or deprecated API uses detected.")

        return "\n".join(lines)


def analyze_reference(
    reference: ResolvedReference,
    options: ParsedOptions,
    registry: Optional[Registry] = None,
) -> Optional[Finding]:
    """Classify one resolved reference.

    Returns:
        The Finding, or None if the API is untracked, fine for the target
        range, or ignored.
    """
    finding, _ = _analyze(reference, options, REGISTRY if registry is None else registry)
    return finding


def _analyze(
    reference: ResolvedReference,
    options: ParsedOptions,
    registry: Registry,
) -> tuple[Optional[Finding], bool]:
    """Return (finding, ignored) for one reference."""
    path = normalize_path(reference.namespace, reference.path)
    record = registry.lookup(reference.namespace, path, reference.kind)
    if record is None:
        return None, False

    classification = classify(record, options.target_range, options.allow_experimental)
    if classification is None:
        return None, False

    if is_ignored(reference.namespace, path, reference.kind, options):
        logger.debug(f"Ignoring {'.'.join(path)} ({reference.kind.value}) at {reference.location}")
        return None, True

    suggestion = None
    if classification.kind is ClassificationKind.DEPRECATED:
        suggestion = suggestion_text(record.replaced_by, options.target_range)

    finding = Finding(
        namespace=reference.namespace,
        path=path,
        kind=reference.kind,
        classification=classification.kind,
        since_version=classification.since,
        removed_version=classification.removed,
        suggestion_text=suggestion,
        location=reference.location,
        target_range=str(options.target_range),
    )
    logger.debug(f"{reference.location}: {finding.name} -> {classification.kind.value}")
    return finding, False


def scan_references(
    references: Iterable[ResolvedReference],
    options: ParsedOptions,
    registry: Optional[Registry] = None,
) -> ScanReport:
    """Run a stream of resolved references through the pipeline.

    Args:
        references: Resolver output.
        options: The run's parsed options.
        registry: Registry to consult (defaults to the bundled one).

    Returns:
        ScanReport with every finding and its diagnostic, in input order.
    """
    start = time.perf_counter()
    if registry is None:
        registry = REGISTRY
    report = ScanReport()
    files = set()

    for reference in references:
        report.references_checked += 1
        files.add(reference.location.file)
        finding, ignored = _analyze(reference, options, registry)
        if ignored:
            report.ignored_count += 1
        if finding is None:
            continue
        report.findings.append(finding)
        report.diagnostics.append(format_finding(finding))

    report.files_scanned = len(files)
    report.scan_time_ms = (time.perf_counter() - start) * 1000
    return report


def scan_file(
    filepath: str | Path,
    options: ParsedOptions,
    registry: Optional[Registry] = None,
) -> ScanReport:
    """Scan one resolver output file.

    Unreadable or malformed files are recorded in the report's errors.
    """
    filepath = Path(filepath)
    try:
        references = load_references(filepath)
    except (OSError, UnicodeDecodeError, ReferenceFormatError) as e:
        logger.warning(f"Could not load {filepath}: {e}")
        report = ScanReport()
        report.errors.append(f"Could not load {filepath}: {e}")
        return report

    report = scan_references(references, options, registry)
    report.files_scanned = max(report.files_scanned, 1)
    return report


def scan_directory(
    source_dir: str | Path,
    options: ParsedOptions,
    registry: Optional[Registry] = None,
) -> ScanReport:
    """Scan every resolver output file (*.refs.json, *.refs.jsonl) in a directory tree."""
    start = time.perf_counter()
    source_dir = Path(source_dir)
    combined = ScanReport()

    ref_files = sorted({p for pattern in REFERENCE_FILE_PATTERNS for p in source_dir.glob(f"**/{pattern}")})
    if not ref_files:
        combined.errors.append(f"No reference files found in {source_dir}")
        return combined

    for ref_file in ref_files:
        combined.merge(scan_file(ref_file, options, registry))

    combined.sort()
    combined.scan_time_ms = (time.perf_counter() - start) * 1000
    logger.info(f"Scanned {len(ref_files)} reference files: {combined.total_findings} findings")
    return combined
