"""
RuntimeCheck errors.

Configuration problems (bad version specifiers, unknown ignore names, bad
option values) are raised once, before any reference is analysed. The
decision engine itself never raises for well-formed inputs.
"""


class RuntimeCheckError(Exception):
    """Base class for all RuntimeCheck errors."""


class ConfigError(RuntimeCheckError, ValueError):
    """The user-supplied configuration cannot be used for a run."""


class VersionSpecError(ConfigError):
    """A version or version-range specifier could not be parsed."""

    def __init__(self, spec: str, reason: str):
        self.spec = spec
        self.reason = reason
        super().__init__(f"Invalid version specifier {spec!r}: {reason}")


class RegistryError(RuntimeCheckError):
    """The API registry data is malformed."""

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"{location}: {reason}")


class ReferenceFormatError(RuntimeCheckError, ValueError):
    """A resolved-reference record from the resolver is malformed."""
