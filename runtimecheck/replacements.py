"""
RuntimeCheck Replacement Resolver — Which suggested substitutes to offer.

A replacement candidate is only suggested when it is guaranteed to exist
everywhere in the target range, i.e. the target does not intersect
"versions strictly below the candidate's supported version". Viable
candidates are joined with "or" in declaration order. Free-text
replacements are always offered verbatim.
"""

from typing import Optional

from runtimecheck.knowledge_base import Replacement, ReplacementCandidate
from runtimecheck.version_range import VersionRange, range_below


def is_viable(candidate: ReplacementCandidate, target: VersionRange) -> bool:
    return not target.intersects(range_below(candidate.supported))


def viable_candidates(
    replacement: Replacement, target: VersionRange
) -> list[ReplacementCandidate]:
    if not isinstance(replacement, tuple):
        return []
    return [c for c in replacement if is_viable(c, target)]


def suggestion_text(replacement: Replacement, target: VersionRange) -> Optional[str]:
    """Render the "Use X or Y instead" clause, or None when nothing applies."""
    if replacement is None:
        return None
    if isinstance(replacement, str):
        return f"Use {replacement} instead"
    names = [c.name for c in viable_candidates(replacement, target)]
    if not names:
        return None
    return f"Use {' or '.join(names)} instead"
