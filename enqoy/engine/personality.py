"""
enqoy.engine.personality — Assessment → Personality Category
==============================================================

Scores a guest's raw assessment answers into five dinner personalities and
derives the attributes the grouping engine compares (age, budget band,
relationship status, gender).

Weights: ``dinnerVibe`` carries the most signal, ``talkTopic`` and
``groupDynamic`` next, everything else once.  Answers may be stored in the
short form (``"current_events"``) or the full option text; both are scored.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from enqoy.constants import BEST_PAIRINGS, MAX_AGE_GAP_YEARS, PersonalityCategory
from enqoy.engine.assessment import age_from_answers

logger = logging.getLogger(__name__)

T = PersonalityCategory.TRAILBLAZERS
S = PersonalityCategory.STORYTELLERS
PH = PersonalityCategory.PHILOSOPHERS
PL = PersonalityCategory.PLANNERS
F = PersonalityCategory.FREE_SPIRITS

# Each rule: accepted answer values → points per category
_Rule = tuple[frozenset[Any], dict[PersonalityCategory, int]]


def _rule(values: tuple[Any, ...], points: dict[PersonalityCategory, int]) -> _Rule:
    return frozenset(values), points


SCORING: dict[str, list[_Rule]] = {
    "talkTopic": [
        _rule(("Current events and world issues", "current_events"), {PH: 1, PL: 3}),
        _rule(("Arts, entertainment, and pop culture", "arts_entertainment"), {S: 2, F: 2}),
        _rule(("Personal growth and philosophy", "personal_growth"), {PH: 3}),
        _rule(("Food, travel, and experiences", "food_travel"), {T: 2, F: 2}),
        _rule(("Hobbies and niche interests", "hobbies"), {T: 2, S: 2}),
    ],
    "groupDynamic": [
        _rule(
            ("A mix of people with shared interests and similar personalities", "similar"),
            {S: 2, PL: 2, PH: 2},
        ),
        _rule(
            ("A diverse group with different viewpoints and experiences", "diverse"),
            {T: 2, F: 2},
        ),
    ],
    "dinnerVibe": [
        _rule(("steering",), {S: 6, T: 3}),
        _rule(("sharing",), {S: 3}),
        _rule(("observing",), {PH: 4, PL: 4}),
        _rule(("adapting",), {F: 6}),
    ],
    "humorType": [
        _rule(("sarcastic",), {S: 1}),
        _rule(("playful", "lighthearted"), {S: 1, F: 1, T: 1}),
        _rule(("witty", "clever", "dry"), {PH: 1, S: 1}),
        _rule(("not_a_fan", "none"), {PH: 1, PL: 1}),
    ],
    "wardrobeStyle": [
        _rule(("timeless", "classics"), {PL: 4, PH: 1}),
        _rule(("bold", "trendy", "statement"), {T: 3, S: 1, F: 1}),
    ],
    "introvertScale": [
        _rule((1, 2), {T: 1, S: 1}),
        _rule((4, 5), {PH: 2, PL: 2}),
        _rule((3,), {F: 1}),
    ],
    "aloneTimeScale": [
        _rule((1, 2), {S: 1, T: 1}),
        _rule((4, 5), {PH: 1, PL: 1}),
        _rule((3,), {F: 1}),
    ],
    "familyScale": [
        _rule((1, 2), {F: 1}),
        _rule((4, 5), {PH: 1, PL: 1}),
        _rule((3,), {T: 1}),
    ],
    "spiritualityScale": [
        _rule((1, 2), {T: 1, S: 1}),
        _rule((4, 5), {PH: 2}),
        _rule((3,), {F: 1}),
    ],
    "humorScale": [
        _rule((1, 2), {PH: 1}),
        _rule((4, 5), {S: 1, F: 1}),
        _rule((3,), {T: 1}),
    ],
    "meetingPriority": [
        _rule(("Shared values and interests", "values", "friendship"), {PH: 1, PL: 1}),
        _rule(("Fun and engaging conversations", "fun"), {S: 1, T: 1}),
        _rule(("Learning something new from others", "learning"), {PH: 1, T: 1}),
        _rule(("Feeling a sense of connection", "connection"), {F: 2}),
    ],
}

SINGLE_STATUSES = frozenset({"single"})


@dataclass
class Participant:
    """A guest as the grouping engine sees them."""

    guest_id: str
    category: PersonalityCategory = F
    scores: dict[str, int] = field(default_factory=dict)
    age: int | None = None
    gender: str | None = None
    budget: str | None = None
    relationship_status: str | None = None
    has_children: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "guestId": self.guest_id,
            "category": str(self.category),
            "scores": dict(self.scores),
            "age": self.age,
            "gender": self.gender,
            "budget": self.budget,
            "relationshipStatus": self.relationship_status,
            "hasChildren": self.has_children,
        }


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------
def score_answers(answers: Mapping[str, Any]) -> dict[PersonalityCategory, int]:
    scores = {c: 0 for c in PersonalityCategory}
    for key, rules in SCORING.items():
        value = answers.get(key)
        if value is None or isinstance(value, (list, dict)):
            continue
        for values, points in rules:
            if value in values:
                for category, pts in points.items():
                    scores[category] += pts
                break
    return scores


def top_category(scores: Mapping[PersonalityCategory, int]) -> PersonalityCategory:
    """Highest score; ties go to the later category in declaration order."""
    best = T
    for category in PersonalityCategory:
        if scores.get(category, 0) >= scores.get(best, 0):
            best = category
    return best


def map_spending_to_budget(spending: Any) -> str | None:
    """Normalise a spending answer into ``<500``, ``500-1000``, ``1000-1500`` or ``1500+``."""
    if spending is None or spending == "" or spending == 0:
        return None
    if isinstance(spending, (int, float)) and not isinstance(spending, bool):
        if spending < 500:
            return "<500"
        if spending < 1000:
            return "500-1000"
        if spending < 1500:
            return "1000-1500"
        return "1500+"

    text = str(spending)
    if "500-1000" in text:
        return "500-1000"
    if "1000-1500" in text:
        return "1000-1500"
    if "1500+" in text or "more than 1500" in text:
        return "1500+"
    if "less than 500" in text or "< 500" in text or text == "<500":
        return "<500"

    lower = text.lower()
    if "500" in lower and "1000" in lower:
        return "500-1000"
    if "1000" in lower and "1500" in lower:
        return "1000-1500"
    if "1500" in lower or "more" in lower:
        return "1500+"
    return text


def default_participant(
    guest_id: str, age: int | None = None, gender: str | None = None
) -> Participant:
    """Guest without answers: a Free Spirit with no budget."""
    return Participant(
        guest_id=guest_id,
        category=F,
        scores={str(c): (1 if c is F else 0) for c in PersonalityCategory},
        age=age or None,
        gender=gender or None,
    )


def categorize(
    guest_id: str,
    answers: Mapping[str, Any] | None,
    *,
    age: int | None = None,
    gender: str | None = None,
    today: date | None = None,
) -> Participant:
    """Categorise one guest.  Profile *age* / *gender* win over the answers."""
    if not answers:
        return default_participant(guest_id, age, gender)

    scores = score_answers(answers)
    return Participant(
        guest_id=guest_id,
        category=top_category(scores),
        scores={str(c): v for c, v in scores.items()},
        age=age or age_from_answers(answers, today),
        gender=gender or answers.get("gender") or None,
        budget=map_spending_to_budget(answers.get("spending")),
        relationship_status=answers.get("relationshipStatus") or None,
        has_children=answers.get("hasChildren") == "yes",
    )


# ---------------------------------------------------------------------------
# Pairwise compatibility
# ---------------------------------------------------------------------------
def best_pairings(category: PersonalityCategory | str) -> tuple[PersonalityCategory, ...]:
    try:
        return BEST_PAIRINGS[PersonalityCategory(category)]
    except ValueError:
        return ()


def is_age_compatible(a: Participant, b: Participant) -> bool:
    if not a.age or not b.age:
        return True
    return abs(a.age - b.age) <= MAX_AGE_GAP_YEARS


def is_budget_compatible(a: Participant, b: Participant) -> bool:
    if not a.budget or not b.budget:
        return True
    return a.budget == b.budget


def is_relationship_compatible(a: Participant, b: Participant) -> bool:
    """Singles sit with singles, committed guests with committed guests."""
    if not a.relationship_status or not b.relationship_status:
        return True
    a_single = a.relationship_status.lower() in SINGLE_STATUSES
    b_single = b.relationship_status.lower() in SINGLE_STATUSES
    return a_single == b_single


def candidate_score(group: list[Participant], candidate: Participant) -> int:
    """How well *candidate* fits next to the current members."""
    preferred = best_pairings(candidate.category)
    score = 0
    for member in group:
        if member.category in preferred:
            score += 10
        if is_age_compatible(member, candidate):
            score += 5
        if is_budget_compatible(member, candidate):
            score += 5
    return score


def group_compatibility(group: list[Participant]) -> int:
    """Pairwise score over the whole group; mismatches cost points."""
    score = 0
    for i, a in enumerate(group):
        preferred = best_pairings(a.category)
        for b in group[i + 1:]:
            if b.category in preferred:
                score += 10
            score += 5 if is_age_compatible(a, b) else -10
            score += 5 if is_budget_compatible(a, b) else -5
    return score


def suggest_pairings(
    target: Participant, others: list[Participant], limit: int = 5
) -> list[dict[str, Any]]:
    """Rank *others* by how well they sit next to *target*."""
    ranked = []
    for other in others:
        if other.guest_id == target.guest_id:
            continue
        reasons = []
        if other.category in best_pairings(target.category):
            reasons.append(f"{target.category} pair well with {other.category}")
        if target.age and other.age and is_age_compatible(target, other):
            reasons.append("Similar age")
        if target.budget and other.budget and is_budget_compatible(target, other):
            reasons.append("Same budget")
        ranked.append({
            "guestId": other.guest_id,
            "category": str(other.category),
            "score": candidate_score([other], target),
            "reasons": reasons,
        })
    ranked.sort(key=lambda r: r["score"], reverse=True)
    return ranked[:limit]
