"""
Tests for duplicate and similarity detection.

Tests:
- Similarity score properties
- Exact duplicate clusters and savings
- Similarity clustering and differences
- Exclusions and threshold handling
"""

import pytest

from ..analysis import DuplicateDetector, analyze_lines, differences, similarity
from ..analysis.clusters import MISSING
from ..dsl import parse_line, parse_lines

SCORED_LINES = [
    "- damage{amount=10} @target ~onAttack",
    "- damage{amount=12} @target ~onAttack",
    "- damage{amount=10;element=fire} @self ~onTimer:20 0.5",
    "- heal{amount=10} @target ~onAttack",
    "- damage{amount=10 @target",
]


class TestSimilarityScore:
    """Tests for the pairwise similarity function."""

    @pytest.mark.parametrize("text", SCORED_LINES[:4])
    def test_self_similarity(self, text):
        line = parse_line(text)
        assert similarity(line, line) == 1.0
        assert similarity(line, parse_line(text)) == 1.0

    @pytest.mark.parametrize("a", SCORED_LINES)
    @pytest.mark.parametrize("b", SCORED_LINES)
    def test_symmetric(self, a, b):
        left, right = parse_line(a), parse_line(b)
        assert similarity(left, right) == similarity(right, left)

    def test_different_mechanics_score_zero(self):
        assert similarity(parse_line(SCORED_LINES[0]), parse_line(SCORED_LINES[3])) == 0.0

    def test_invalid_lines_score_zero(self):
        invalid = parse_line(SCORED_LINES[4])
        assert similarity(invalid, invalid) == 0.0
        assert similarity(parse_line(SCORED_LINES[0]), invalid) == 0.0

    def test_mechanic_case_ignored(self):
        a = parse_line("- damage{amount=1} @target")
        b = parse_line("- DAMAGE{amount=1} @target")
        assert similarity(a, b) == 1.0

    def test_dimension_ratio(self):
        # targeter, trigger, chance, health_modifier agree; amount differs
        a = parse_line(SCORED_LINES[0])
        b = parse_line(SCORED_LINES[1])
        assert similarity(a, b) == pytest.approx(4 / 5)

    def test_differences(self):
        base = parse_line(SCORED_LINES[0])
        member = parse_line(SCORED_LINES[2])
        found = {(d.dimension, d.attribute_key): d for d in differences(base, member)}
        assert set(found) == {
            ("targeter", None),
            ("trigger", None),
            ("chance", None),
            ("attribute", "element"),
        }
        assert found[("attribute", "element")].value_in_base == MISSING
        assert found[("attribute", "element")].value_in_member == "fire"
        assert found[("chance", None)].value_in_member == "0.5"
        assert found[("targeter", None)].value_in_base == "@target"


class TestExactDuplicates:
    """Tests for exact duplicate clusters."""

    def test_three_copies(self, detector):
        result = detector.analyze(parse_lines(["- heal{amount=5} @self"] * 3))
        assert len(result.duplicates) == 1
        cluster = result.duplicates[0]
        assert cluster.kind == "exact"
        assert cluster.member_indices == (0, 1, 2)
        assert cluster.source_line == "- heal{amount=5} @self"
        assert result.summary.potential_savings == 2
        assert result.summary.exact_duplicates == 1
        assert result.summary.total_lines == 3

    def test_exact_duplicates_not_reported_as_similar(self, detector):
        result = detector.analyze(parse_lines(["- heal{amount=5} @self"] * 3))
        assert result.similar_groups == []

    def test_trimmed_comparison(self, detector):
        result = detector.analyze(parse_lines(["- heal{amount=5} @self", "  - heal{amount=5} @self  "]))
        assert result.duplicates[0].member_indices == (0, 1)

    def test_comments_and_blanks_ignored(self, detector):
        result = detector.analyze(parse_lines(["# a", "# a", "", ""]))
        assert result.duplicates == []
        assert result.summary.potential_savings == 0

    def test_clusters_ordered_by_first_index(self, detector):
        lines = parse_lines([
            "- heal{amount=1} @self",
            "- damage{amount=1} @target",
            "- damage{amount=1} @target",
            "- heal{amount=1} @self",
        ])
        result = detector.analyze(lines)
        assert [c.member_indices for c in result.duplicates] == [(0, 3), (1, 2)]
        assert result.summary.potential_savings == 2


class TestSimilarityClusters:
    """Tests for similarity clustering."""

    def test_similar_lines_cluster(self, detector):
        lines = parse_lines([
            "- damage{amount=10} @target ~onAttack",
            "- heal{amount=5} @self",
            "- damage{amount=12} @target ~onAttack",
        ])
        result = detector.analyze(lines)
        assert len(result.similar_groups) == 1
        cluster = result.similar_groups[0]
        assert cluster.kind == "similar"
        assert cluster.base_index == 0
        assert cluster.indices == [0, 2]
        member = cluster.members[0]
        assert member.similarity == pytest.approx(0.8)
        assert [(d.dimension, d.attribute_key) for d in member.differences] == [
            ("attribute", "amount")
        ]
        assert isinstance(hash(cluster), int)
        assert result.summary.potential_savings == 0

    def test_transitive_links_form_one_cluster(self):
        """A~B and B~C join even when A and C fall below the threshold."""
        lines = parse_lines([
            "- damage{amount=1;element=fire} @target ~onAttack",
            "- damage{amount=2;element=fire} @target ~onAttack",
            "- damage{amount=2;element=ice} @target ~onAttack",
        ])
        # neighbours agree on 5 of 6 dimensions, the ends on 4 of 6
        result = DuplicateDetector(threshold=0.8).analyze(lines)
        assert len(result.similar_groups) == 1
        cluster = result.similar_groups[0]
        assert cluster.indices == [0, 1, 2]
        assert cluster.members[1].similarity == pytest.approx(4 / 6)
        assert cluster.average_similarity == pytest.approx((5 / 6 + 4 / 6) / 2)

    def test_below_threshold_not_clustered(self):
        lines = parse_lines([
            "- damage{amount=10} @target ~onAttack",
            "- damage{amount=99;element=ice} @self ~onTimer 0.2",
        ])
        result = DuplicateDetector(threshold=0.7).analyze(lines)
        assert result.similar_groups == []

    def test_singletons_dropped(self, detector):
        result = detector.analyze(parse_lines(["- damage{amount=1} @target", "- heal{amount=1} @self"]))
        assert result.similar_groups == []

    def test_duplicate_text_takes_part_once(self, detector):
        lines = parse_lines([
            "- damage{amount=10} @target ~onAttack",
            "- damage{amount=10} @target ~onAttack",
            "- damage{amount=12} @target ~onAttack",
        ])
        result = detector.analyze(lines)
        assert result.duplicates[0].member_indices == (0, 1)
        assert result.similar_groups[0].indices == [0, 2]


class TestDetectorOptions:
    """Tests for exclusions and thresholds."""

    def test_excluded_mechanics(self):
        lines = parse_lines(["- delay 20"] * 3 + ["- delay{ticks=5}", "- delay{ticks=6}"])
        result = DuplicateDetector(excluded_mechanics=["Delay"]).analyze(lines)
        assert result.duplicates == []
        assert result.similar_groups == []

    def test_pacing_mechanics_excluded_by_default(self, detector):
        lines = parse_lines(["- delay 20", "- delay 20", "- wait 5", "- wait 5", "- Pause 10", "- Pause 10"])
        assert detector.analyze(lines).duplicates == []
        assert DuplicateDetector(excluded_mechanics=()).analyze(lines).summary.exact_duplicates == 3

    def test_set_threshold_clamps(self, detector):
        detector.set_threshold(1.7)
        assert detector.threshold == 1.0
        detector.set_threshold(-2)
        assert detector.threshold == 0.0

    def test_zero_threshold_never_links_different_mechanics(self):
        lines = parse_lines(["- damage{amount=1} @target", "- heal{amount=1} @self"])
        assert DuplicateDetector(threshold=0.0).analyze(lines).similar_groups == []

    def test_analyze_lines_accepts_text(self):
        result = analyze_lines(["- heal{amount=5} @self"] * 2)
        assert result.summary.exact_duplicates == 1

    def test_empty_input(self, detector):
        result = detector.analyze([])
        assert result.duplicates == []
        assert result.similar_groups == []
        assert result.summary.total_lines == 0
