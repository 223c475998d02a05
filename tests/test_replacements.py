"""
Tests for replacement candidate viability and suggestion text.
"""

import pytest

from runtimecheck.knowledge_base import ReplacementCandidate
from runtimecheck.replacements import is_viable, suggestion_text, viable_candidates
from runtimecheck.version_range import parse_range, parse_version


def cand(name, supported):
    return ReplacementCandidate(name, parse_version(supported))


BUFFER_REPLACEMENTS = (cand("Buffer.alloc()", "5.10.0"), cand("Buffer.from()", "5.10.0"))
FS_EXISTS_REPLACEMENTS = (cand("fs.stat()", "0.0.2"), cand("fs.access()", "0.11.15"))


class TestViability:
    """Test which candidates are usable across the whole target."""

    def test_candidate_available_everywhere(self):
        assert is_viable(cand("Buffer.from()", "5.10.0"), parse_range("6.1.0"))

    def test_candidate_missing_at_range_start(self):
        assert not is_viable(cand("Buffer.from()", "5.10.0"), parse_range(">=4.0.0"))

    def test_exact_boundary_is_viable(self):
        assert is_viable(cand("Buffer.from()", "5.10.0"), parse_range("=5.10.0"))

    def test_filter_preserves_declaration_order(self):
        viable = viable_candidates(FS_EXISTS_REPLACEMENTS, parse_range(">=0.12"))
        assert [c.name for c in viable] == ["fs.stat()", "fs.access()"]

    def test_filter_drops_unavailable(self):
        viable = viable_candidates(FS_EXISTS_REPLACEMENTS, parse_range(">=0.10.0"))
        assert [c.name for c in viable] == ["fs.stat()"]

    @pytest.mark.parametrize("target", ["6.1.0", ">=5.10.0", ">=0.11 <0.12", ">=4.0.0"])
    def test_later_supported_version_never_adds_candidates(self, target):
        target_range = parse_range(target)
        narrow = {c.name for c in viable_candidates(BUFFER_REPLACEMENTS, target_range)}
        wider = (cand("Buffer.alloc()", "6.0.0"), cand("Buffer.from()", "6.0.0"))
        assert {c.name for c in viable_candidates(wider, target_range)} <= narrow


class TestSuggestionText:
    """Test the rendered suggestion clause."""

    def test_scenario_buffer(self):
        text = suggestion_text(BUFFER_REPLACEMENTS, parse_range("6.1.0"))
        assert text == "Use Buffer.alloc() or Buffer.from() instead"

    def test_single_candidate(self):
        text = suggestion_text(FS_EXISTS_REPLACEMENTS, parse_range(">=0.10.0"))
        assert text == "Use fs.stat() instead"

    def test_no_viable_candidate(self):
        assert suggestion_text(BUFFER_REPLACEMENTS, parse_range(">=4")) is None

    def test_free_text_is_always_offered(self):
        assert suggestion_text("require(\"events\")", parse_range(">=0.1")) == "Use require(\"events\") instead"

    def test_no_replacement(self):
        assert suggestion_text(None, parse_range(">=6")) is None
