"""
RuntimeCheck Reference Input — The resolved references a resolver hands us.

RuntimeCheck does not parse source code. An external reference resolver
walks the program (module loading, global identifiers, destructuring,
aliasing, re-exports) and emits one record per statically-attributable use:

    {"file": "src/app.js", "line": 3, "column": 8,
     "namespace": "modules", "path": ["node:fs", "exists"], "kind": "read"}

A resolver emits a "read" record for every access of a tracked path and an
additional "call" / "construct" record at invocation sites. References the
resolver cannot attribute are simply never emitted.

Files may hold a JSON array of records or one record per line (JSON Lines).
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

from runtimecheck.errors import ReferenceFormatError
from runtimecheck.paths import AccessPath, Namespace, OperationKind


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceLocation:
    """Where a reference occurs in the analysed source."""
    file: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass(frozen=True)
class ResolvedReference:
    """One statically resolved use of a global or module API."""
    namespace: Namespace
    path: AccessPath
    kind: OperationKind
    location: SourceLocation


def reference_from_dict(raw: Any, default_file: str = "<unknown>") -> ResolvedReference:
    """Build a ResolvedReference from a decoded JSON record.

    Raises:
        ReferenceFormatError: If a field is missing or has the wrong type.
    """
    if not isinstance(raw, dict):
        raise ReferenceFormatError(f"expected an object, got {type(raw).__name__}")
    try:
        namespace = Namespace(raw["namespace"])
        kind = OperationKind(raw.get("kind", "read"))
    except KeyError as e:
        raise ReferenceFormatError(f"missing field {e}") from None
    except ValueError as e:
        raise ReferenceFormatError(str(e)) from None

    path = raw.get("path")
    if isinstance(path, str):
        path = path.split(".")
    if not isinstance(path, list) or not path or not all(isinstance(s, str) and s for s in path):
        raise ReferenceFormatError(f"'path' must be a non-empty list of names: {path!r}")

    line, column = raw.get("line", 0), raw.get("column", 0)
    if not isinstance(line, int) or not isinstance(column, int):
        raise ReferenceFormatError("'line' and 'column' must be integers")

    return ResolvedReference(
        namespace=namespace,
        path=tuple(path),
        kind=kind,
        location=SourceLocation(file=str(raw.get("file", default_file)), line=line, column=column),
    )


def parse_references(text: str, source: str = "<string>") -> list[ResolvedReference]:
    """Parse a JSON array or JSON Lines document of reference records."""
    stripped = text.lstrip()
    if not stripped:
        return []

    if stripped.startswith("["):
        try:
            records = json.loads(text)
        except json.JSONDecodeError as e:
            raise ReferenceFormatError(f"{source}: invalid JSON at line {e.lineno}: {e.msg}") from None
        numbered = list(enumerate(records, 1))
        label = "record"
    else:
        numbered = []
        for lineno, line in enumerate(text.splitlines(), 1):
            if not line.strip():
                continue
            try:
                numbered.append((lineno, json.loads(line)))
            except json.JSONDecodeError as e:
                raise ReferenceFormatError(f"{source}: invalid JSON on line {lineno}: {e.msg}") from None
        label = "line"

    references = []
    for number, record in numbered:
        try:
            references.append(reference_from_dict(record, default_file=source))
        except ReferenceFormatError as e:
            raise ReferenceFormatError(f"{source}: {label} {number}: {e}") from None
    logger.debug(f"Parsed {len(references)} references from {source}")
    return references


def load_references(filepath: Union[str, Path]) -> list[ResolvedReference]:
    """Read a references file produced by the resolver.

    Raises:
        OSError: If the file cannot be read.
        ReferenceFormatError: If a record is malformed.
    """
    filepath = Path(filepath)
    return parse_references(filepath.read_text(encoding="utf-8"), source=str(filepath))
