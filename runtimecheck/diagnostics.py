"""
RuntimeCheck Diagnostic Formatter — Turn findings into host-facing messages.

Two message families are produced:
  - deprecation shapes ("removed", "deprecated"), naming the use with its
    decoration: 'fs.exists', 'Buffer()', 'new Buffer()', 'domain' module
  - support shapes ("not-supported-till", "not-supported-yet",
    "not-experimental-till"), naming the bare canonical path

Every Diagnostic carries a stable message id and a structured data payload
so hosts can render it in their own format.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from runtimecheck.engine import NONE_YET, ClassificationKind
from runtimecheck.paths import (
    AccessPath,
    Namespace,
    OperationKind,
    canonical_name,
    display_name,
    is_whole_module,
)
from runtimecheck.references import SourceLocation


MESSAGES: dict[str, str] = {
    "removed": "{name} was deprecated since v{version}, and removed in v{removed}.",
    "deprecated": "{name} was deprecated since v{version}{replace}.",
    "not-supported-till": (
        "The '{name}' is not supported until Node.js {supported}. "
        "The configured version range is '{version}'."
    ),
    "not-supported-yet": (
        "The '{name}' is still an experimental feature and is not supported yet. "
        "The configured version range is '{version}'."
    ),
    "not-experimental-till": (
        "The '{name}' is not an experimental feature until Node.js {experimental}. "
        "The configured version range is '{version}'."
    ),
}


@dataclass(frozen=True)
class Finding:
    """A single classified use of a tracked API."""
    namespace: Namespace
    path: AccessPath               # normalized, e.g., ("fs", "exists")
    kind: OperationKind
    classification: ClassificationKind
    since_version: str             # e.g., "6.0.0" or "10.0.0 (backported: ^8.13.0)"
    location: SourceLocation
    target_range: str              # the configured range text
    removed_version: Optional[str] = None
    suggestion_text: Optional[str] = None   # e.g., "Use Buffer.alloc() or Buffer.from() instead"

    @property
    def name(self) -> str:
        """Decorated name, also the key matched by the ignore options."""
        return display_name(self.path, self.kind)

    @property
    def canonical_name(self) -> str:
        return canonical_name(self.path)


@dataclass(frozen=True)
class Diagnostic:
    """A formatted message for one finding."""
    message_id: str
    name: str
    primary_version: str
    location: SourceLocation
    extra: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def data(self) -> dict[str, str]:
        return {"name": self.name, **self.extra}

    @property
    def message(self) -> str:
        return MESSAGES[self.message_id].format(**self.data)

    def to_dict(self) -> dict:
        return {
            "file": self.location.file,
            "line": self.location.line,
            "column": self.location.column,
            "messageId": self.message_id,
            "data": self.data,
            "message": self.message,
        }

    def __str__(self) -> str:
        return f"{self.location} [{self.message_id}] {self.message}"


def deprecation_display_name(finding: Finding) -> str:
    name = f"'{finding.name}'"
    if is_whole_module(finding.namespace, finding.path):
        return f"{name} module"
    return name


def format_finding(finding: Finding) -> Diagnostic:
    """Build the Diagnostic for a Finding."""
    kind = finding.classification

    if kind is ClassificationKind.REMOVED:
        return Diagnostic(
            message_id="removed",
            name=deprecation_display_name(finding),
            primary_version=finding.since_version,
            location=finding.location,
            extra=MappingProxyType({
                "version": finding.since_version,
                "removed": finding.removed_version or "",
            }),
        )

    if kind is ClassificationKind.DEPRECATED:
        replace = f". {finding.suggestion_text}" if finding.suggestion_text else ""
        return Diagnostic(
            message_id="deprecated",
            name=deprecation_display_name(finding),
            primary_version=finding.since_version,
            location=finding.location,
            extra=MappingProxyType({"version": finding.since_version, "replace": replace}),
        )

    if kind is ClassificationKind.NOT_YET_EXPERIMENTAL:
        return Diagnostic(
            message_id="not-experimental-till",
            name=finding.canonical_name,
            primary_version=finding.since_version,
            location=finding.location,
            extra=MappingProxyType({
                "experimental": finding.since_version,
                "version": finding.target_range,
            }),
        )

    if finding.since_version == NONE_YET:
        return Diagnostic(
            message_id="not-supported-yet",
            name=finding.canonical_name,
            primary_version=finding.since_version,
            location=finding.location,
            extra=MappingProxyType({"version": finding.target_range}),
        )

    return Diagnostic(
        message_id="not-supported-till",
        name=finding.canonical_name,
        primary_version=finding.since_version,
        location=finding.location,
        extra=MappingProxyType({
            "supported": finding.since_version,
            "version": finding.target_range,
        }),
    )
