"""
RuntimeCheck Path Normalizer — Canonical keys and display names for access paths.

An access path is the property-access chain a reference resolves to, rooted
at a global binding (("Buffer",), ("process", "binding")) or at a module
(("fs", "exists"), ("node:fs", "exists")). Module names may carry the
"node:" scheme prefix; it is stripped here, before every registry lookup,
so both spellings resolve to the same entry.
"""

from enum import Enum


# An access path: a non-empty tuple of property-name segments
AccessPath = tuple[str, ...]

SCHEME_PREFIX = "node:"


class Namespace(Enum):
    """Which registry trie an access path is rooted in."""
    GLOBALS = "globals"   # global-scope bindings (Buffer, process, ...)
    MODULES = "modules"   # exports of a loaded module (fs, node:fs, ...)


class OperationKind(Enum):
    """How the referenced API is used at the reference site."""
    READ = "read"             # any access, including ones that go on to call it
    CALL = "call"             # invoked as a function: Buffer()
    CONSTRUCT = "construct"   # invoked with new: new Buffer()


def unprefix(segment: str) -> str:
    """Strip the module scheme prefix from a single segment ("node:fs" -> "fs")."""
    if segment.startswith(SCHEME_PREFIX):
        return segment[len(SCHEME_PREFIX):]
    return segment


def normalize_path(namespace: Namespace, path) -> AccessPath:
    """Return the canonical registry key for an access path.

    Only module paths are prefix-stripped; a global named "node:x" cannot
    exist, so global paths are returned as-is.

    Raises:
        ValueError: If the path is empty or contains an empty segment.
    """
    segments = tuple(str(s) for s in path)
    if not segments or not all(segments):
        raise ValueError(f"Invalid access path: {path!r}")
    if namespace is Namespace.MODULES:
        return (unprefix(segments[0]),) + segments[1:]
    return segments


def canonical_name(path: AccessPath) -> str:
    """Dotted form of an already-normalized access path."""
    return ".".join(path)


def display_name(path: AccessPath, kind: OperationKind) -> str:
    """Decorated name for a use of `path`: bare, `name()` or `new name()`.

    This is also the key matched against the ignore options.
    """
    name = canonical_name(path)
    if kind is OperationKind.CALL:
        return f"{name}()"
    if kind is OperationKind.CONSTRUCT:
        return f"new {name}()"
    return name


def is_whole_module(namespace: Namespace, path: AccessPath) -> bool:
    """True when a module-namespace path names the module itself."""
    return namespace is Namespace.MODULES and len(path) == 1
