"""
tests/test_personality.py — Personality Categorisation & Compatibility
=======================================================================
"""

from __future__ import annotations

from datetime import date

import pytest

from enqoy.constants import PersonalityCategory
from enqoy.engine.personality import (
    Participant,
    candidate_score,
    categorize,
    default_participant,
    group_compatibility,
    is_age_compatible,
    is_budget_compatible,
    is_relationship_compatible,
    map_spending_to_budget,
    score_answers,
    suggest_pairings,
    top_category,
)

T = PersonalityCategory.TRAILBLAZERS
S = PersonalityCategory.STORYTELLERS
PH = PersonalityCategory.PHILOSOPHERS
PL = PersonalityCategory.PLANNERS
F = PersonalityCategory.FREE_SPIRITS


# ===========================================================================
# Scoring
# ===========================================================================
class TestScoring:
    def test_dinner_vibe_steering(self):
        scores = score_answers({"dinnerVibe": "steering"})
        assert scores[S] == 6
        assert scores[T] == 3

    def test_scales(self):
        scores = score_answers({"introvertScale": 5, "spiritualityScale": 5})
        assert scores[PH] == 4
        assert scores[PL] == 2

    def test_long_and_short_option_values(self):
        long = score_answers({"talkTopic": "Personal growth and philosophy"})
        short = score_answers({"talkTopic": "personal_growth"})
        assert long == short
        assert long[PH] == 3

    def test_lists_and_unknown_values_ignored(self):
        scores = score_answers({"dinnerVibe": ["steering"], "humorType": "mystery"})
        assert all(v == 0 for v in scores.values())

    def test_tie_goes_to_later_category(self):
        assert top_category({c: 0 for c in PersonalityCategory}) is F
        assert top_category({T: 3, S: 3}) is S

    def test_highest_wins(self):
        assert top_category({PH: 7, F: 2}) is PH


class TestCategorize:
    def test_empty_answers_default(self):
        p = categorize("g1", {}, age=30, gender="female")
        assert p.category is F
        assert p.budget is None
        assert p.age == 30
        assert p.scores[str(F)] == 1

    def test_full_answers(self):
        answers = {
            "dinnerVibe": "observing",
            "wardrobeStyle": "timeless",
            "talkTopic": "current_events",
            "spending": 750,
            "relationshipStatus": "married",
            "hasChildren": "yes",
            "gender": "male",
            "birthday": "1995-06-01",
        }
        p = categorize("g1", answers, today=date(2026, 1, 1))
        assert p.category is PL
        assert p.budget == "500-1000"
        assert p.age == 30
        assert p.gender == "male"
        assert p.has_children is True

    def test_profile_wins_over_answers(self):
        p = categorize("g1", {"gender": "male", "birthday": "1990-01-01"}, age=41, gender="female")
        assert p.age == 41
        assert p.gender == "female"

    def test_to_dict_camel_case(self):
        d = default_participant("g9").to_dict()
        assert d["guestId"] == "g9"
        assert d["category"] == "Free Spirits"
        assert "relationshipStatus" in d


class TestSpending:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (250, "<500"),
            (500, "500-1000"),
            (1200, "1000-1500"),
            (1500, "1500+"),
            ("500-1000", "500-1000"),
            ("1000-1500 EGP", "1000-1500"),
            ("more than 1500", "1500+"),
            ("less than 500", "<500"),
            ("Between 500 and 1000", "500-1000"),
            (None, None),
            ("", None),
            ("whatever", "whatever"),
        ],
    )
    def test_map(self, value, expected):
        assert map_spending_to_budget(value) == expected


# ===========================================================================
# Compatibility
# ===========================================================================
class TestCompatibility:
    def test_age_gap(self):
        assert is_age_compatible(Participant("a", age=30), Participant("b", age=35))
        assert not is_age_compatible(Participant("a", age=30), Participant("b", age=36))

    def test_missing_age_is_compatible(self):
        assert is_age_compatible(Participant("a"), Participant("b", age=60))

    def test_budget(self):
        assert is_budget_compatible(Participant("a", budget="<500"), Participant("b", budget="<500"))
        assert not is_budget_compatible(Participant("a", budget="<500"), Participant("b", budget="1500+"))
        assert is_budget_compatible(Participant("a"), Participant("b", budget="1500+"))

    def test_relationship(self):
        single = Participant("a", relationship_status="Single")
        married = Participant("b", relationship_status="married")
        engaged = Participant("c", relationship_status="engaged")
        assert not is_relationship_compatible(single, married)
        assert is_relationship_compatible(married, engaged)
        assert is_relationship_compatible(single, Participant("d"))

    def test_candidate_score(self):
        # Storytellers pair best with Trailblazers
        member = Participant("m", category=S, age=30, budget="<500")
        candidate = Participant("c", category=T, age=31, budget="<500")
        assert candidate_score([member], candidate) == 20

    def test_group_compatibility_penalises_mismatch(self):
        a = Participant("a", category=F, age=25, budget="<500")
        b = Participant("b", category=F, age=45, budget="1500+")
        assert group_compatibility([a, b]) == -15


class TestSuggestPairings:
    def test_sorted_and_excludes_target(self):
        target = Participant("t", category=T, age=30, budget="<500")
        others = [
            target,
            Participant("x", category=PH, age=50, budget="1500+"),
            Participant("y", category=F, age=31, budget="<500"),
        ]
        ranked = suggest_pairings(target, others)
        assert [r["guestId"] for r in ranked] == ["y", "x"]
        assert ranked[0]["score"] == 20
        assert "Similar age" in ranked[0]["reasons"]
        assert "Same budget" in ranked[0]["reasons"]

    def test_limit(self):
        target = Participant("t")
        others = [Participant(f"g{i}") for i in range(10)]
        assert len(suggest_pairings(target, others, limit=3)) == 3
