"""
RuntimeCheck Knowledge Base — Registry of runtime built-in API lifecycles.

Each entry describes when a built-in API was introduced (possibly backported
to older release lines), when it became usable as an experimental feature,
when it was deprecated or removed, and what should be used instead.

Entries live in a declarative YAML data file (data/registry.yaml) and are
loaded once into two read-only tries:

  - "globals": global-scope bindings (Buffer, process, Intl, ...)
  - "modules": module exports (fs, buffer, node:fs, ...)

Trie keys are access-path segments. The special keys below attach a
lifecycle record to the node they appear under:

  - "$read":      applies to any access of the path
  - "$call":      applies only when the path is called (Buffer())
  - "$construct": applies only when the path is constructed (new Buffer())

The knowledge base is designed to be extensible: add new APIs by editing the
data file, or pass extra data files to load_registry(). No engine code
changes are needed to track a new API.
"""

import logging
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Union

import yaml
from packaging.version import Version

from runtimecheck.errors import RegistryError, VersionSpecError
from runtimecheck.paths import (
    AccessPath,
    Namespace,
    OperationKind,
    display_name,
    normalize_path,
)
from runtimecheck.version_range import parse_version


logger = logging.getLogger(__name__)

KIND_KEYS: dict[str, OperationKind] = {
    "$read": OperationKind.READ,
    "$call": OperationKind.CALL,
    "$construct": OperationKind.CONSTRUCT,
}

RECORD_KEYS = frozenset({
    "introduced",
    "backported",
    "experimental",
    "experimental_backported",
    "deprecated",
    "removed",
    "replaced_by",
})


@dataclass(frozen=True)
class SupportInfo:
    """A "supported since" fact: the main-line version plus backport lines.

    Attributes:
        version: First main-line version carrying the API (e.g., 10.0.0)
        backported: Versions on older lines that also carry it, in declaration
            order (e.g., (8.13.0,) meaning "^8.13.0")
    """
    version: Version
    backported: tuple[Version, ...] = ()

    def __str__(self) -> str:
        if not self.backported:
            return str(self.version)
        lines = ", ".join(f"^{v}" for v in self.backported)
        return f"{self.version} (backported: {lines})"


@dataclass(frozen=True)
class ReplacementCandidate:
    """A suggested substitute API and the version it is available from."""
    name: str              # e.g., "Buffer.alloc()"
    supported: Version     # e.g., 5.10.0


# None (no replacement), free text, or an ordered list of candidates
Replacement = Union[None, str, tuple[ReplacementCandidate, ...]]


@dataclass(frozen=True)
class LifecycleRecord:
    """Lifecycle facts for one API path and operation kind.

    Only the fields relevant to an entry are set; a record always has at
    least one of introduced_at, experimental_until, deprecated_at.

    Attributes:
        introduced_at: When the API became stable
        experimental_until: When the API became available as an experimental
            feature; before this it is "not an experimental feature" yet
        deprecated_at: When the API was deprecated
        removed_at: When the API was removed (always after deprecated_at)
        replaced_by: What to use instead
    """
    introduced_at: Optional[SupportInfo] = None
    experimental_until: Optional[SupportInfo] = None
    deprecated_at: Optional[Version] = None
    removed_at: Optional[Version] = None
    replaced_by: Replacement = None


@dataclass(frozen=True)
class RegistryNode:
    """One trie node: per-kind lifecycle records plus child segments."""
    lifecycle: Mapping[OperationKind, LifecycleRecord] = field(
        default_factory=lambda: MappingProxyType({})
    )
    children: Mapping[str, "RegistryNode"] = field(
        default_factory=lambda: MappingProxyType({})
    )


class Registry:
    """Immutable two-namespace API knowledge base.

    Usage:
        registry = load_registry()
        record = registry.lookup(Namespace.MODULES, ("node:fs", "exists"), OperationKind.READ)
    """

    def __init__(self, roots: Mapping[Namespace, RegistryNode]):
        self._roots = MappingProxyType({ns: roots.get(ns, RegistryNode()) for ns in Namespace})

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], source: str = "<mapping>") -> "Registry":
        """Build a registry from an already-parsed data mapping."""
        builder = _RegistryBuilder()
        builder.add(data, source)
        return builder.build()

    def node(self, namespace: Namespace, path) -> Optional[RegistryNode]:
        node = self._roots[namespace]
        for segment in normalize_path(namespace, path):
            node = node.children.get(segment)
            if node is None:
                return None
        return node

    def lookup(
        self,
        namespace: Namespace,
        path,
        kind: OperationKind,
    ) -> Optional[LifecycleRecord]:
        """Find the lifecycle record for a use of `path`, or None if untracked."""
        node = self.node(namespace, path)
        if node is None:
            return None
        return node.lifecycle.get(kind)

    def iter_entries(
        self, namespace: Namespace
    ) -> Iterator[tuple[AccessPath, OperationKind, LifecycleRecord]]:
        """Yield (path, kind, record) for every record in a namespace, depth-first."""
        stack: list[tuple[AccessPath, RegistryNode]] = [((), self._roots[namespace])]
        while stack:
            path, node = stack.pop()
            for kind, record in node.lifecycle.items():
                yield path, kind, record
            for segment in sorted(node.children, reverse=True):
                stack.append((path + (segment,), node.children[segment]))

    def known_names(self, namespace: Namespace) -> frozenset[str]:
        """All decorated names that the ignore options accept for a namespace."""
        return frozenset(
            display_name(path, kind) for path, kind, _ in self.iter_entries(namespace)
        )

    def __len__(self) -> int:
        return sum(1 for ns in Namespace for _ in self.iter_entries(ns))


# =============================================================================
# LOADER: YAML data -> frozen tries
# =============================================================================

class _MutableNode:
    __slots__ = ("lifecycle", "children")

    def __init__(self):
        self.lifecycle: dict[OperationKind, LifecycleRecord] = {}
        self.children: dict[str, "_MutableNode"] = {}

    def freeze(self) -> RegistryNode:
        return RegistryNode(
            lifecycle=MappingProxyType(dict(self.lifecycle)),
            children=MappingProxyType(
                {name: child.freeze() for name, child in self.children.items()}
            ),
        )


def _version(value: Any, where: str) -> Version:
    # YAML reads 0.10 as the float 0.1
    if not isinstance(value, str):
        raise RegistryError(where, "versions must be quoted strings")
    try:
        return parse_version(value)
    except VersionSpecError as e:
        raise RegistryError(where, e.reason) from None


def _version_list(value: Any, where: str) -> tuple[Version, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        value = [value]
    return tuple(_version(v, where) for v in value)


def _support_info(raw: Mapping, version_key: str, backport_key: str, where: str) -> Optional[SupportInfo]:
    if raw.get(version_key) is None:
        if raw.get(backport_key):
            raise RegistryError(where, f"'{backport_key}' given without '{version_key}'")
        return None
    info = SupportInfo(
        version=_version(raw[version_key], where),
        backported=_version_list(raw.get(backport_key), where),
    )
    for backport in info.backported:
        if backport >= info.version:
            raise RegistryError(
                where, f"backport {backport} is not earlier than {version_key} {info.version}"
            )
    return info


def _replacement(value: Any, where: str) -> Replacement:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if not isinstance(value, list) or not value:
        raise RegistryError(where, "'replaced_by' must be null, text, or a non-empty list")
    candidates = []
    for item in value:
        if not isinstance(item, dict) or set(item) != {"name", "supported"}:
            raise RegistryError(where, f"replacement candidate needs 'name' and 'supported': {item!r}")
        candidates.append(ReplacementCandidate(
            name=str(item["name"]),
            supported=_version(item["supported"], where),
        ))
    return tuple(candidates)


def parse_record(raw: Any, where: str = "<record>") -> LifecycleRecord:
    """Validate and convert one raw lifecycle mapping into a LifecycleRecord."""
    if not isinstance(raw, dict):
        raise RegistryError(where, "lifecycle record must be a mapping")
    unknown = set(raw) - RECORD_KEYS
    if unknown:
        raise RegistryError(where, f"unknown lifecycle keys: {', '.join(sorted(unknown))}")

    record = LifecycleRecord(
        introduced_at=_support_info(raw, "introduced", "backported", where),
        experimental_until=_support_info(raw, "experimental", "experimental_backported", where),
        deprecated_at=_version(raw["deprecated"], where) if raw.get("deprecated") is not None else None,
        removed_at=_version(raw["removed"], where) if raw.get("removed") is not None else None,
        replaced_by=_replacement(raw.get("replaced_by"), where),
    )

    if record.introduced_at is None and record.experimental_until is None \
            and record.deprecated_at is None:
        raise RegistryError(where, "record has no lifecycle fact")
    if record.removed_at is not None:
        if record.deprecated_at is None:
            raise RegistryError(where, "'removed' requires 'deprecated'")
        if record.removed_at <= record.deprecated_at:
            raise RegistryError(
                where, f"removed {record.removed_at} is not later than deprecated {record.deprecated_at}"
            )
    return record


class _RegistryBuilder:
    """Accumulates data files into mutable tries, then freezes them."""

    def __init__(self):
        self._roots = {ns: _MutableNode() for ns in Namespace}

    def add(self, data: Mapping[str, Any], source: str) -> None:
        if not isinstance(data, dict):
            raise RegistryError(source, "registry data must be a mapping")
        unknown = set(data) - {ns.value for ns in Namespace}
        if unknown:
            raise RegistryError(source, f"unknown namespaces: {', '.join(sorted(unknown))}")
        for namespace in Namespace:
            tree = data.get(namespace.value) or {}
            self._merge(self._roots[namespace], tree, namespace, (), source)

    def _merge(self, node: _MutableNode, tree: Any, namespace: Namespace,
               path: AccessPath, source: str) -> None:
        where = f"{source}: {namespace.value}.{'.'.join(path) or '<root>'}"
        if not isinstance(tree, dict):
            raise RegistryError(where, "expected a mapping")
        for key, value in tree.items():
            key = str(key)
            if key in KIND_KEYS:
                if not path:
                    raise RegistryError(where, "a namespace root cannot carry a lifecycle record")
                kind = KIND_KEYS[key]
                if kind in node.lifecycle:
                    raise RegistryError(where, f"duplicate {kind.value} entry")
                node.lifecycle[kind] = parse_record(value, f"{where} [{key}]")
            elif key.startswith("$"):
                raise RegistryError(where, f"unknown operation key {key!r}")
            else:
                segment = normalize_path(namespace, [key])[0] if not path else key
                child = node.children.setdefault(segment, _MutableNode())
                self._merge(child, value, namespace, path + (segment,), source)

    def build(self) -> Registry:
        return Registry({ns: root.freeze() for ns, root in self._roots.items()})


def load_registry(*paths: Union[str, Path], include_default: bool = True) -> Registry:
    """Load the registry from the bundled data file plus any extension files.

    Args:
        paths: Additional YAML data files adding entries to the bundled data.
        include_default: Whether to include the bundled registry data.

    Returns:
        A read-only Registry.

    Raises:
        RegistryError: If any data file is malformed or redefines an entry.
    """
    builder = _RegistryBuilder()
    if include_default:
        text = resources.files("runtimecheck").joinpath("data/registry.yaml").read_text(encoding="utf-8")
        builder.add(yaml.safe_load(text), "registry.yaml")
    for path in paths:
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise RegistryError(str(path), f"could not load registry data: {e}") from None
        builder.add(data or {}, str(path))
    registry = builder.build()
    logger.info(f"Loaded API registry: {len(registry)} lifecycle records")
    return registry


# =============================================================================
# KNOWLEDGE BASE: process-wide default registry, built once at import
# =============================================================================

REGISTRY: Registry = load_registry()
