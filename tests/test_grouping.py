"""
tests/test_grouping.py — Constraint-Aware Group Generation
===========================================================

Pure engine tests: participants are built directly, no database.
"""

from __future__ import annotations

import pytest

from enqoy.constants import ConstraintType, PersonalityCategory
from enqoy.engine.grouping import (
    ConstraintSpec,
    PairingError,
    build_group,
    generate_groups,
    is_gender_balanced,
    max_gender_difference,
    validate_constraint,
)
from enqoy.engine.personality import Participant


def _guests(n: int, **fields) -> list[Participant]:
    return [Participant(f"g{i}", **fields) for i in range(n)]


def _group_of(groups, guest_id):
    for g in groups:
        if guest_id in g.guest_ids:
            return g.name
    raise AssertionError(f"{guest_id} not seated")


def _all_ids(groups):
    return sorted(gid for g in groups for gid in g.guest_ids)


# ===========================================================================
# Group counts
# ===========================================================================
class TestGroupSizes:
    def test_too_few_postpones(self):
        assert generate_groups(_guests(3)) == []

    def test_small_event_single_group(self):
        groups = generate_groups(_guests(9))
        assert len(groups) == 1
        assert groups[0].name == "Group 1"
        assert len(groups[0].participants) == 9

    def test_twelve_guests_two_tables(self):
        groups = generate_groups(_guests(12))
        assert [len(g.participants) for g in groups] == [6, 6]
        assert [g.name for g in groups] == ["Group 1", "Group 2"]

    def test_sizes_differ_by_at_most_one(self):
        groups = generate_groups(_guests(13))
        sizes = sorted(len(g.participants) for g in groups)
        assert sizes == [4, 4, 5]

    def test_every_guest_seated_once(self):
        groups = generate_groups(_guests(20))
        assert _all_ids(groups) == sorted(f"g{i}" for i in range(20))

    def test_custom_target_size(self):
        groups = generate_groups(_guests(16), target_size=8)
        assert [len(g.participants) for g in groups] == [8, 8]


# ===========================================================================
# Constraints
# ===========================================================================
class TestConstraints:
    def test_not_with_splits_small_event(self):
        c = ConstraintSpec(ConstraintType.NOT_WITH, ("g0",), ("g1",))
        groups = generate_groups(_guests(6), [c])
        assert len(groups) == 2
        assert _group_of(groups, "g0") != _group_of(groups, "g1")

    def test_must_with_kept_together(self):
        c = ConstraintSpec(ConstraintType.MUST_WITH, ("g3",), ("g10",))
        groups = generate_groups(_guests(12), [c])
        assert _group_of(groups, "g3") == _group_of(groups, "g10")

    def test_keep_group_together(self):
        c = ConstraintSpec(ConstraintType.KEEP_GROUP_TOGETHER, ("g1", "g5", "g9"))
        groups = generate_groups(_guests(12), [c])
        assert len({_group_of(groups, g) for g in ("g1", "g5", "g9")}) == 1

    def test_max_group_size(self):
        c = ConstraintSpec(ConstraintType.MAX_GROUP_SIZE, (), max_size=4)
        groups = generate_groups(_guests(8), [c])
        assert [len(g.participants) for g in groups] == [4, 4]

    def test_contradiction_raises(self):
        constraints = [
            ConstraintSpec(ConstraintType.MUST_WITH, ("g0",), ("g1",)),
            ConstraintSpec(ConstraintType.NOT_WITH, ("g1",), ("g0",)),
        ]
        with pytest.raises(PairingError):
            generate_groups(_guests(12), constraints)

    def test_unit_larger_than_group_raises(self):
        c = ConstraintSpec(ConstraintType.KEEP_GROUP_TOGETHER, tuple(f"g{i}" for i in range(7)))
        with pytest.raises(PairingError, match="exceeds the group size"):
            generate_groups(_guests(12), [c])

    def test_unknown_guest_ids_ignored(self):
        c = ConstraintSpec(ConstraintType.NOT_WITH, ("ghost",), ("g0",))
        assert len(generate_groups(_guests(6), [c])) == 1

    def test_gender_balance(self):
        people = [Participant(f"m{i}", gender="male") for i in range(6)]
        people += [Participant(f"f{i}", gender="female") for i in range(6)]
        c = ConstraintSpec(ConstraintType.BALANCE_GENDER, ())
        groups = generate_groups(people, [c])
        assert len(groups) == 2
        for g in groups:
            assert g.gender_distribution["male"] > 0
            assert g.gender_distribution["female"] > 0
            assert is_gender_balanced(g.participants)


class TestRelaxation:
    def _spread_ages(self):
        # Every pair is more than five years apart
        return [Participant(f"g{i}", age=20 + 6 * i) for i in range(12)]

    def test_strict_failure_without_relaxation(self):
        with pytest.raises(PairingError, match="relaxation is disabled"):
            generate_groups(self._spread_ages(), allow_relaxation=False)

    def test_relaxed_pass_seats_everyone(self):
        groups = generate_groups(self._spread_ages(), seed=7)
        assert len(groups) == 2
        assert _all_ids(groups) == sorted(f"g{i}" for i in range(12))

    def test_relaxed_pass_keeps_not_with(self):
        c = ConstraintSpec(ConstraintType.NOT_WITH, ("g0",), ("g1",))
        groups = generate_groups(self._spread_ages(), [c], seed=3)
        assert _group_of(groups, "g0") != _group_of(groups, "g1")

    def test_seed_is_deterministic(self):
        a = generate_groups(self._spread_ages(), seed=11)
        b = generate_groups(self._spread_ages(), seed=11)
        assert [g.guest_ids for g in a] == [g.guest_ids for g in b]


# ===========================================================================
# Summaries & validation
# ===========================================================================
class TestGroupSummary:
    def test_build_group(self):
        people = [
            Participant("a", category=PersonalityCategory.PLANNERS, age=30, budget="<500", gender="male"),
            Participant("b", category=PersonalityCategory.PLANNERS, age=33, budget="<500", gender="female"),
            Participant("c", age=None, budget="1500+", gender=None),
        ]
        group = build_group(people, "Group 4")
        assert group.average_age == 32
        assert group.budget == "<500"
        assert group.category_distribution["Planners"] == 2
        assert group.gender_distribution == {"male": 1, "female": 1, "other": 1}

        d = group.to_dict()
        assert d["name"] == "Group 4"
        assert d["guestIds"] == ["a", "b", "c"]
        assert d["averageAge"] == 32

    def test_max_gender_difference_table(self):
        assert max_gender_difference(4) == 0
        assert max_gender_difference(6) == 2
        assert max_gender_difference(12) == 1


class TestValidateConstraint:
    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown constraint type"):
            validate_constraint("sit_far", ["g1"], None, None)

    def test_needs_subjects(self):
        with pytest.raises(ValueError, match="at least one guest"):
            validate_constraint("not_with", [], ["g2"], None)

    def test_targeted_needs_targets(self):
        with pytest.raises(ValueError, match="select target guests"):
            validate_constraint("must_with", ["g1"], [], None)

    def test_max_size(self):
        with pytest.raises(ValueError, match="at least 1"):
            validate_constraint("max_group_size", ["g1"], None, 0)

    def test_valid(self):
        validate_constraint("keep_group_together", ["g1", "g2"], None, None)
        validate_constraint("balance_gender", ["g1"], None, None)
