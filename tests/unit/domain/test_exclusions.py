"""Unit tests for legacy exclusions."""

import pytest

from coupling_detector.domain.config import DetectorConfig
from coupling_detector.domain.entities import QualifiedName, Rule, ViolationCollection
from coupling_detector.domain.exclusions import ExclusionSet, ViolationsFilter
from coupling_detector.domain.rules import RuleMatcher
from tests.detector_test_utils import make_node

RULE = Rule.create("Acme/Component", ["Pim"])


def _collection(*nodes) -> ViolationCollection:
    matcher = RuleMatcher()
    violations = [matcher.check(node, RULE) for node in nodes]
    return ViolationCollection(v for v in violations if v is not None)


class TestExclusionSet:
    def test_from_mapping_normalizes_separators(self) -> None:
        exclusions = ExclusionSet.from_mapping({"Acme/Component": ["Pim\\Bundle\\X", "Pim/Bundle/Y"]})

        assert exclusions.is_excluded(QualifiedName.parse("Acme\\Component"), QualifiedName.parse("Pim/Bundle/X"))
        assert exclusions.is_excluded(QualifiedName.parse("Acme/Component"), QualifiedName.parse("Pim\\Bundle\\Y"))
        assert len(exclusions) == 2

    def test_unknown_subject_excludes_nothing(self) -> None:
        exclusions = ExclusionSet.from_mapping({"Acme/Component": ["Pim/X"]})

        assert exclusions.for_subject(QualifiedName.parse("Pim/Component")) == frozenset()


class TestViolationsFilter:
    """Test exact-match filtering semantics."""

    def test_excluded_symbol_is_removed(self) -> None:
        collection = _collection(make_node("a.php", "Acme/Component", "Pim/Bundle/X", "Pim/Bundle/Y"))
        violations_filter = ViolationsFilter(ExclusionSet.from_mapping({"Acme/Component": ["Pim\\Bundle\\X"]}))

        filtered = violations_filter.filter(collection)

        assert filtered.sorted_forbidden_uses() == [("Pim\\Bundle\\Y", 1)]
        assert collection.total_count() == 2

    def test_violation_left_empty_is_dropped(self) -> None:
        collection = _collection(make_node("a.php", "Acme/Component", "Pim/Bundle/X", "Pim/Bundle/X"))
        violations_filter = ViolationsFilter(ExclusionSet.from_mapping({"Acme/Component": ["Pim/Bundle/X"]}))

        assert len(violations_filter.filter(collection)) == 0

    def test_exclusion_does_not_cover_descendants(self) -> None:
        rule = Rule.create("Acme/Component", ["A"])
        collection = ViolationCollection([RuleMatcher().check(make_node("a.php", "Acme/Component", "A/B/C/D"), rule)])
        violations_filter = ViolationsFilter(ExclusionSet.from_mapping({"Acme/Component": ["A\\B\\C"]}))

        assert violations_filter.filter(collection).sorted_forbidden_uses() == [("A\\B\\C\\D", 1)]

    def test_exclusions_are_keyed_by_rule_subject(self) -> None:
        collection = _collection(make_node("a.php", "Acme/Component/Sub", "Pim/X"))
        violations_filter = ViolationsFilter(ExclusionSet.from_mapping({"Acme/Component/Sub": ["Pim/X"]}))

        assert len(violations_filter.filter(collection)) == 1

    def test_filter_is_idempotent(self) -> None:
        collection = _collection(
            make_node("a.php", "Acme/Component", "Pim/X", "Pim/Y"),
            make_node("b.php", "Acme/Component", "Pim/X"),
        )
        violations_filter = ViolationsFilter(ExclusionSet.from_mapping({"Acme/Component": ["Pim/X"]}))

        once = violations_filter.filter(collection)
        twice = violations_filter.filter(once)

        assert once.summary() == twice.summary()
        assert list(once) == list(twice)

    def test_untouched_violation_is_returned_as_is(self) -> None:
        violation = RuleMatcher().check(make_node("a.php", "Acme/Component", "Pim/Y"), RULE)
        violations_filter = ViolationsFilter(ExclusionSet.from_mapping({"Acme/Component": ["Pim/X"]}))

        assert violations_filter.filter_violation(violation) is violation

    def test_filter_keeps_skipped_paths(self) -> None:
        violation = RuleMatcher().check(make_node("a.php", "Acme/Component", "Pim/X"), RULE)
        collection = ViolationCollection([violation], skipped=["b.php"])
        violations_filter = ViolationsFilter(ExclusionSet.from_mapping({"Acme/Component": ["Pim/X"]}))

        filtered = violations_filter.filter(collection)

        assert filtered.skipped == ("b.php",)
        assert filtered.summary().skipped_count == 1


class TestExclusionSetImmutability:
    def test_entries_are_read_only(self) -> None:
        exclusions = ExclusionSet.from_mapping({"Acme/Component": ["Pim/X"]})

        with pytest.raises(TypeError):
            exclusions.entries[QualifiedName.parse("Acme/Other")] = frozenset()

    def test_source_mapping_changes_do_not_leak_in(self) -> None:
        source = {QualifiedName.parse("Acme"): frozenset({QualifiedName.parse("Pim/X")})}
        exclusions = ExclusionSet(entries=source)

        source[QualifiedName.parse("Acme/Other")] = frozenset()

        assert len(exclusions.entries) == 1

    def test_equal_sets_hash_equal(self) -> None:
        first = ExclusionSet.from_mapping({"Acme/Component": ["Pim/X", "Pim/Y"]})
        second = ExclusionSet.from_mapping({"Acme\\Component": ["Pim\\Y", "Pim\\X"]})

        assert first == second
        assert hash(first) == hash(second)
        assert hash(ExclusionSet()) == hash(ExclusionSet())

    def test_detector_config_is_hashable(self) -> None:
        config = DetectorConfig.from_dict({
            "forbidden": {"Acme/Component": ["Pim"]},
            "legacy-exclusions": {"Acme/Component": ["Pim/X"]},
        })

        assert hash(config) == hash(DetectorConfig.from_dict({
            "forbidden": {"Acme/Component": ["Pim"]},
            "legacy-exclusions": {"Acme/Component": ["Pim/X"]},
        }))
