"""
RuntimeCheck Version Range Service — Parse and compare target version ranges.

A configured target is turned into a VersionRange: a normalized, immutable
union of half-open intervals [low, high) over release triples. Because the
interval form is exact, one primitive answers both questions the engine
asks:

  1. "Could the target include a version at or past this boundary?"
     (deprecation / removal / introduction checks)
  2. "Is this replacement available across the whole target?"
     (target does not intersect "versions strictly below it")

Accepted specifier syntaxes:
  - a bare version ("12", "12.4", "12.4.0"): this version or later
  - node-style comparators: ">=8 <12", "^8.13.0 || >=10", "~6.1",
    "8.x", "8.0.0 - 10.2", "= 9.9.9"
  - PEP 440 specifier lists: ">=8,<12", "~=10.2", "==10.*", "!=9.0.0"
    (any spec with a comma, or starting with "==", "~=" or "!="). These
    pad missing components with zero the way SpecifierSet does, so in
    ">8,<10" the lower bound is 8.0.1, while a lone node-style ">8" is 9.0.0.

Versions are packaging.version.Version objects reduced to their release
triple; pre-release and build tags are ignored.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from runtimecheck.errors import VersionSpecError


# (major, minor, patch) where None marks a wildcard or missing component
_PartialVersion = tuple[Optional[int], Optional[int], Optional[int]]

# A half-open interval; high=None means unbounded
Interval = tuple[Version, Optional[Version]]

ZERO = Version("0.0.0")

_PARTIAL_RE = re.compile(
    r"^v?(\d+|[xX*])(?:\.(\d+|[xX*]))?(?:\.(\d+|[xX*]))?"
    r"(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?$"
)
_COMPARATOR_RE = re.compile(r"^(>=|<=|>|<|=|\^|~>|~)?(.+)$")
_HYPHEN_RE = re.compile(r"^\s*(\S+)\s+-\s+(\S+)\s*$")
_OPERATOR_SPACE_RE = re.compile(r"(>=|<=|>|<|=|\^|~>|~)\s+")
_PEP440_PREFIXES = ("==", "~=", "!=")


def parse_version(text: str) -> Version:
    """Parse a version string into a normalized release triple.

    Args:
        text: Version text such as "12.4.0", "v8.13.0" or "10".

    Returns:
        A packaging Version holding exactly major.minor.micro.

    Raises:
        VersionSpecError: If the text is not a version.
    """
    raw = str(text).strip()
    try:
        version = Version(raw[1:] if raw[:1] in ("v", "V") else raw)
    except InvalidVersion:
        raise VersionSpecError(raw, "not a version") from None
    return triple(version.major, version.minor, version.micro)


def triple(major: int, minor: int = 0, patch: int = 0) -> Version:
    return Version(f"{major}.{minor}.{patch}")


def next_patch(version: Version) -> Version:
    return triple(version.major, version.minor, version.micro + 1)


def _normalize(intervals: Iterable[Interval]) -> tuple[Interval, ...]:
    """Sort, drop empty intervals and merge overlapping/adjacent ones."""
    cleaned = sorted(
        ((low, high) for low, high in intervals if high is None or low < high),
        key=lambda interval: interval[0],
    )
    merged: list[Interval] = []
    for low, high in cleaned:
        if merged:
            last_low, last_high = merged[-1]
            if last_high is None or low <= last_high:
                if last_high is not None and (high is None or high > last_high):
                    merged[-1] = (last_low, high)
                continue
        merged.append((low, high))
    return tuple(merged)


@dataclass(frozen=True)
class VersionRange:
    """An immutable set of versions, stored as disjoint sorted intervals.

    Attributes:
        intervals: Normalized half-open intervals [low, high)
        raw: The specifier text this range was built from (used in messages)
    """
    intervals: tuple[Interval, ...]
    raw: str = ""

    @classmethod
    def of(cls, intervals: Iterable[Interval], raw: str = "") -> "VersionRange":
        return cls(_normalize(intervals), raw)

    @property
    def is_empty(self) -> bool:
        return not self.intervals

    def contains(self, version: Version) -> bool:
        return any(
            low <= version and (high is None or version < high)
            for low, high in self.intervals
        )

    def union(self, other: "VersionRange") -> "VersionRange":
        raw = f"{self.raw} || {other.raw}" if self.raw and other.raw else ""
        return VersionRange.of(self.intervals + other.intervals, raw)

    def intersection(self, other: "VersionRange") -> "VersionRange":
        result = []
        for a_low, a_high in self.intervals:
            for b_low, b_high in other.intervals:
                low = max(a_low, b_low)
                if a_high is None:
                    high = b_high
                elif b_high is None:
                    high = a_high
                else:
                    high = min(a_high, b_high)
                result.append((low, high))
        return VersionRange.of(result)

    def complement(self) -> "VersionRange":
        result = []
        cursor: Optional[Version] = ZERO
        for low, high in self.intervals:
            if cursor is not None and cursor < low:
                result.append((cursor, low))
            cursor = high
            if cursor is None:
                break
        if cursor is not None:
            result.append((cursor, None))
        return VersionRange.of(result)

    def intersects(self, other: "VersionRange") -> bool:
        return not self.intersection(other).is_empty

    def __str__(self) -> str:
        if self.raw:
            return self.raw
        return " || ".join(_interval_text(low, high) for low, high in self.intervals) or "<0.0.0"


def _interval_text(low: Version, high: Optional[Version]) -> str:
    if high is None:
        return f">={low}"
    if low == ZERO:
        return f"<{high}"
    return f">={low} <{high}"


# -----------------------------------------------------------------------------
# Range constructors
# -----------------------------------------------------------------------------

def at_least(version: Version) -> VersionRange:
    return VersionRange.of([(version, None)], raw=f">={version}")


def range_below(version: Version) -> VersionRange:
    """Versions strictly below `version`."""
    return VersionRange.of([(ZERO, version)], raw=f"<{version}")


def exactly(version: Version) -> VersionRange:
    return VersionRange.of([(version, next_patch(version))], raw=f"={version}")


def caret(version: Version) -> VersionRange:
    """The "compatible with" line of a version (node-style ^X.Y.Z)."""
    low, high = _caret_interval((version.major, version.minor, version.micro))
    return VersionRange.of([(low, high)], raw=f"^{version}")


def intersects(a: VersionRange, b: VersionRange) -> bool:
    return a.intersects(b)


def satisfies(version: Version | str, version_range: VersionRange) -> bool:
    if not isinstance(version, Version):
        version = parse_version(version)
    else:
        version = triple(version.major, version.minor, version.micro)
    return version_range.contains(version)


# -----------------------------------------------------------------------------
# Parsing
# -----------------------------------------------------------------------------

def _parse_partial(text: str, spec: str) -> _PartialVersion:
    match = _PARTIAL_RE.match(text)
    if not match:
        raise VersionSpecError(spec, f"{text!r} is not a version")
    parts: list[Optional[int]] = []
    wildcard = False
    for group in match.groups():
        if group is None or group in ("x", "X", "*") or wildcard:
            wildcard = True
            parts.append(None)
        else:
            parts.append(int(group))
    return parts[0], parts[1], parts[2]


def _lower(partial: _PartialVersion) -> Version:
    major, minor, patch = partial
    return triple(major or 0, minor or 0, patch or 0)


def _upper(partial: _PartialVersion) -> Optional[Version]:
    """First version above every version the partial denotes."""
    major, minor, patch = partial
    if major is None:
        return None
    if minor is None:
        return triple(major + 1)
    if patch is None:
        return triple(major, minor + 1)
    return triple(major, minor, patch + 1)


def _caret_interval(partial: _PartialVersion) -> Interval:
    major, minor, patch = partial
    low = _lower(partial)
    if major is None:
        return low, None
    if major > 0 or minor is None:
        return low, triple(major + 1)
    if minor > 0 or patch is None:
        return low, triple(0, minor + 1)
    return low, triple(0, 0, patch + 1)


def _tilde_interval(partial: _PartialVersion) -> Interval:
    major, minor, _ = partial
    low = _lower(partial)
    if major is None:
        return low, None
    if minor is None:
        return low, triple(major + 1)
    return low, triple(major, minor + 1)


def _comparator_intervals(operator: str, partial: _PartialVersion) -> list[Interval]:
    if operator in ("", "="):
        return [(_lower(partial), _upper(partial))]
    if operator == ">=":
        return [(_lower(partial), None)]
    if operator == ">":
        upper = _upper(partial)
        return [] if upper is None else [(upper, None)]
    if operator == "<":
        if partial[0] is None:
            return []
        return [(ZERO, _lower(partial))]
    if operator == "<=":
        return [(ZERO, _upper(partial))]
    if operator == "^":
        return [_caret_interval(partial)]
    # "~" and "~>"
    return [_tilde_interval(partial)]


def _parse_comparator_set(text: str, spec: str) -> VersionRange:
    """Parse one `||` alternative: an intersection of comparators."""
    hyphen = _HYPHEN_RE.match(text)
    if hyphen:
        low = _parse_partial(hyphen.group(1), spec)
        high = _parse_partial(hyphen.group(2), spec)
        return VersionRange.of([(_lower(low), _upper(high))])

    tokens = _OPERATOR_SPACE_RE.sub(r"\1", text.strip()).split()
    if not tokens:
        # An empty alternative matches every version, as with "*"
        return VersionRange.of([(ZERO, None)])

    result = VersionRange.of([(ZERO, None)])
    for token in tokens:
        match = _COMPARATOR_RE.match(token)
        operator, version_text = match.group(1) or "", match.group(2)
        partial = _parse_partial(version_text, spec)
        result = result.intersection(
            VersionRange.of(_comparator_intervals(operator, partial))
        )
    return result


def _pep440_intervals(operator: str, text: str, spec: str) -> list[Interval]:
    """Intervals for one PEP 440 clause; missing components are zero."""
    if text.endswith(".*"):
        partial = _parse_partial(text[:-2] + ".x", spec)
        matched = VersionRange.of([(_lower(partial), _upper(partial))])
        if operator == "!=":
            return list(matched.complement().intervals)
        return list(matched.intervals)

    try:
        release = Version(text).release
    except InvalidVersion:
        raise VersionSpecError(spec, f"{text!r} is not a version") from None
    padded = triple(*(tuple(release[:3]) + (0, 0, 0))[:3])

    if operator in ("==", "==="):
        return [(padded, next_patch(padded))]
    if operator == "!=":
        return list(VersionRange.of([(padded, next_patch(padded))]).complement().intervals)
    if operator == "~=":
        # ~=X.Y means >=X.Y, ==X.*
        prefix = list(release[:-1])[:3]
        prefix[-1] += 1
        return [(padded, triple(*prefix))]
    if operator == "<":
        return [(ZERO, padded)]
    if operator == "<=":
        return [(ZERO, next_patch(padded))]
    if operator == ">":
        return [(next_patch(padded), None)]
    if operator == ">=":
        return [(padded, None)]
    raise VersionSpecError(spec, f"unsupported operator {operator!r}")


def _parse_pep440(spec: str) -> VersionRange:
    try:
        specifiers = SpecifierSet(spec)
    except InvalidSpecifier as e:
        raise VersionSpecError(spec, str(e)) from None

    result = VersionRange.of([(ZERO, None)])
    for specifier in specifiers:
        current = VersionRange.of(_pep440_intervals(specifier.operator, specifier.version, spec))
        result = result.intersection(current)
    return result


def parse_range(spec: str) -> VersionRange:
    """Parse a configured version specifier into a VersionRange.

    Args:
        spec: Exact version (meaning "this version or later") or range expression.

    Returns:
        The parsed VersionRange, carrying `spec` as its raw text.

    Raises:
        VersionSpecError: If the specifier is malformed or denotes no version.
    """
    if not isinstance(spec, str):
        raise VersionSpecError(repr(spec), "expected a string")
    text = spec.strip()
    if not text:
        raise VersionSpecError(spec, "empty specifier")

    bare = _PARTIAL_RE.match(text)
    if bare and not any(c in text for c in "xX*"):
        result = at_least(_lower(_parse_partial(text, spec)))
    elif "," in text or text.startswith(_PEP440_PREFIXES):
        result = _parse_pep440(text)
    else:
        result = VersionRange.of([])
        for alternative in text.split("||"):
            result = result.union(_parse_comparator_set(alternative, spec))

    if result.is_empty:
        raise VersionSpecError(spec, "the range does not include any version")
    return VersionRange(result.intervals, raw=text)
