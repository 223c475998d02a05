"""
Pytest configuration and shared fixtures.
"""

import pytest

from runtimecheck.knowledge_base import REGISTRY, Registry
from runtimecheck.options import ParsedOptions
from runtimecheck.paths import Namespace, OperationKind
from runtimecheck.references import ResolvedReference, SourceLocation
from runtimecheck.version_range import parse_range


# =============================================================================
# REGISTRY FIXTURES
# =============================================================================

SMALL_REGISTRY_DATA = {
    "modules": {
        "fs": {
            "exists": {
                "$read": {
                    "deprecated": "4.0.0",
                    "replaced_by": [
                        {"name": "fs.stat()", "supported": "0.0.2"},
                        {"name": "fs.access()", "supported": "0.11.15"},
                    ],
                },
            },
            "rm": {"$read": {"introduced": "14.14.0"}},
        },
        "domain": {"$read": {"deprecated": "4.0.0"}},
        "assert": {
            "strict": {"$read": {"introduced": "10.0.0", "backported": ["8.13.0"]}},
        },
    },
    "globals": {
        "Buffer": {
            "$construct": {
                "deprecated": "6.0.0",
                "replaced_by": [
                    {"name": "Buffer.alloc()", "supported": "5.10.0"},
                    {"name": "Buffer.from()", "supported": "5.10.0"},
                ],
            },
            "$call": {"deprecated": "6.0.0", "replaced_by": "Buffer.from()"},
        },
        "fetch": {
            "$read": {"introduced": "21.0.0", "experimental": "17.5.0",
                      "experimental_backported": ["16.15.0"]},
        },
    },
}


@pytest.fixture
def registry():
    """The bundled registry."""
    return REGISTRY


@pytest.fixture
def small_registry() -> Registry:
    """A hand-written registry with a few entries of every shape."""
    return Registry.from_mapping(SMALL_REGISTRY_DATA, source="small")


# =============================================================================
# OPTION / REFERENCE FACTORIES
# =============================================================================

@pytest.fixture
def make_options():
    """Build ParsedOptions without going through validation."""
    def _make(version=">=16.0.0", globals_=(), modules=(), allow_experimental=False):
        return ParsedOptions(
            target_range=parse_range(version),
            ignored_global_names=frozenset(globals_),
            ignored_module_names=frozenset(modules),
            allow_experimental=allow_experimental,
        )
    return _make


@pytest.fixture
def make_ref():
    """Build a ResolvedReference from a dotted path."""
    def _make(path, kind="read", namespace="modules", file="app.js", line=1, column=0):
        return ResolvedReference(
            namespace=Namespace(namespace),
            path=tuple(path.split(".")),
            kind=OperationKind(kind),
            location=SourceLocation(file=file, line=line, column=column),
        )
    return _make
