"""
enqoy.engine.grouping — Constraint-Aware Group Generation
===========================================================

Splits an event's guests into dinner groups.

    < 4 guests   → no groups (the event should be postponed)
    4–9 guests   → one table, unless a constraint forces a split
    10+ guests   → ceil(n / size) groups with sizes differing by at most one

Constraints:

- ``not_with``            never relaxed; subjects and targets are kept apart
- ``must_with``           subjects and targets form one indivisible unit
- ``keep_group_together`` all subjects form one indivisible unit
- ``max_group_size``      caps the group size
- ``balance_gender``      both genders present, size-dependent max difference

A strict greedy pass also honours age, budget and relationship
compatibility.  If it cannot fill every group and relaxation is allowed, a
lenient pass keeps only the hard constraints and spreads the remaining
guests by group size.
"""

from __future__ import annotations

import logging
import math
import random
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from enqoy.constants import (
    MIN_PARTICIPANTS,
    SINGLE_GROUP_MAX,
    TARGETED_CONSTRAINTS,
    ConstraintType,
    PersonalityCategory,
)
from enqoy.engine.personality import (
    Participant,
    candidate_score,
    group_compatibility,
    is_age_compatible,
    is_budget_compatible,
    is_relationship_compatible,
)

logger = logging.getLogger(__name__)

# Largest allowed |male - female| by group size
_GENDER_MAX_DIFFERENCE = {4: 0, 5: 1, 6: 2, 7: 1, 8: 2, 9: 1}


class PairingError(Exception):
    """Raised when the constraints cannot be satisfied."""


@dataclass(frozen=True, slots=True)
class ConstraintSpec:
    type: str
    subject_ids: tuple[str, ...]
    target_ids: tuple[str, ...] = ()
    max_size: int | None = None


def validate_constraint(
    type_: str,
    subject_ids: Iterable[str],
    target_ids: Iterable[str] | None,
    max_size: int | None,
) -> None:
    """Raise :class:`ValueError` for a malformed constraint."""
    try:
        ConstraintType(type_)
    except ValueError:
        raise ValueError(f"Unknown constraint type: {type_}") from None
    if not list(subject_ids):
        raise ValueError("Please select at least one guest")
    if type_ in TARGETED_CONSTRAINTS and not list(target_ids or ()):
        raise ValueError("Please select target guests")
    if type_ == ConstraintType.MAX_GROUP_SIZE and (max_size is None or max_size < 1):
        raise ValueError("Max group size must be at least 1")


# ---------------------------------------------------------------------------
# Group summary
# ---------------------------------------------------------------------------
@dataclass
class Group:
    name: str
    participants: list[Participant]
    category_distribution: dict[str, int] = field(default_factory=dict)
    gender_distribution: dict[str, int] = field(default_factory=dict)
    average_age: int = 0
    budget: str = "unknown"
    compatibility_score: int = 0

    @property
    def guest_ids(self) -> list[str]:
        return [p.guest_id for p in self.participants]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "guestIds": self.guest_ids,
            "participants": [p.to_dict() for p in self.participants],
            "categoryDistribution": dict(self.category_distribution),
            "genderDistribution": dict(self.gender_distribution),
            "averageAge": self.average_age,
            "budget": self.budget,
            "compatibilityScore": self.compatibility_score,
        }


def gender_counts(participants: Iterable[Participant]) -> dict[str, int]:
    counts = {"male": 0, "female": 0, "other": 0}
    for p in participants:
        g = (p.gender or "").lower()
        counts[g if g in ("male", "female") else "other"] += 1
    return counts


def build_group(participants: list[Participant], name: str) -> Group:
    categories = {str(c): 0 for c in PersonalityCategory}
    for p in participants:
        categories[str(p.category)] += 1

    ages = [p.age for p in participants if p.age]
    budgets = Counter(p.budget for p in participants if p.budget)

    return Group(
        name=name,
        participants=list(participants),
        category_distribution=categories,
        gender_distribution=gender_counts(participants),
        average_age=int(sum(ages) / len(ages) + 0.5) if ages else 0,
        budget=budgets.most_common(1)[0][0] if budgets else "unknown",
        compatibility_score=group_compatibility(participants),
    )


# ---------------------------------------------------------------------------
# Gender balance
# ---------------------------------------------------------------------------
def max_gender_difference(size: int) -> int:
    return _GENDER_MAX_DIFFERENCE.get(size, 1)


def is_gender_balanced(participants: list[Participant]) -> bool:
    counts = gender_counts(participants)
    male, female = counts["male"], counts["female"]
    if male == 0 or female == 0:
        return False
    return abs(male - female) <= max_gender_difference(len(participants))


def can_still_balance(participants: list[Participant], target_size: int) -> bool:
    """False once the open seats can no longer fix the gender split."""
    counts = gender_counts(participants)
    male, female = counts["male"], counts["female"]
    remaining = target_size - len(participants)
    if abs(male - female) > max_gender_difference(target_size) + remaining:
        return False
    if remaining <= 0 and (male == 0 or female == 0):
        return False
    return True


# ---------------------------------------------------------------------------
# Constraint compilation
# ---------------------------------------------------------------------------
class _Rules:
    """Constraints resolved against the participant set."""

    def __init__(self, participants: list[Participant], constraints: Iterable[ConstraintSpec]):
        known = {p.guest_id for p in participants}
        self.avoid: dict[str, set[str]] = {}
        self.max_size: int | None = None
        self.balance_gender = False

        parent = {gid: gid for gid in known}

        def find(x: str) -> str:
            while parent[x] != x:
                parent[x] = parent[parent[x]]
                x = parent[x]
            return x

        def union(ids: list[str]) -> None:
            for other in ids[1:]:
                parent[find(other)] = find(ids[0])

        for c in constraints:
            subjects = [g for g in c.subject_ids if g in known]
            targets = [g for g in c.target_ids if g in known]
            if c.type == ConstraintType.NOT_WITH:
                for s in subjects:
                    for t in targets:
                        if s != t:
                            self.avoid.setdefault(s, set()).add(t)
                            self.avoid.setdefault(t, set()).add(s)
            elif c.type == ConstraintType.MUST_WITH:
                union(subjects + targets)
            elif c.type == ConstraintType.KEEP_GROUP_TOGETHER:
                union(subjects)
            elif c.type == ConstraintType.MAX_GROUP_SIZE and c.max_size:
                self.max_size = c.max_size if self.max_size is None else min(self.max_size, c.max_size)
            elif c.type == ConstraintType.BALANCE_GENDER:
                self.balance_gender = True

        by_root: dict[str, list[Participant]] = {}
        for p in participants:
            by_root.setdefault(find(p.guest_id), []).append(p)
        self.units: list[list[Participant]] = list(by_root.values())

        for unit in self.units:
            ids = [p.guest_id for p in unit]
            for gid in ids:
                clash = self.avoid.get(gid, set()).intersection(ids)
                if clash:
                    raise PairingError(
                        f"Guest {gid} must sit with {sorted(clash)} but is also "
                        "marked not_with them"
                    )

    def conflicts(self, group: list[Participant], unit: list[Participant]) -> bool:
        members = {p.guest_id for p in group}
        return any(self.avoid.get(p.guest_id, set()) & members for p in unit)


def _soft_compatible(group: list[Participant], unit: list[Participant]) -> bool:
    for member in group:
        for cand in unit:
            if not is_age_compatible(member, cand):
                return False
            if not is_budget_compatible(member, cand):
                return False
            if not is_relationship_compatible(member, cand):
                return False
    return True


def _group_targets(n: int, size: int) -> list[int]:
    count = max(1, math.ceil(n / size))
    base, extra = divmod(n, count)
    return [base + (1 if g < extra else 0) for g in range(count)]


# ---------------------------------------------------------------------------
# Passes
# ---------------------------------------------------------------------------
def _strict(units: list[list[Participant]], targets: list[int], rules: _Rules) -> list[list[Participant]] | None:
    remaining = sorted(units, key=len, reverse=True)
    groups: list[list[Participant]] = []

    for target in targets:
        seed = next((u for u in remaining if len(u) <= target), None)
        if seed is None:
            return None
        remaining.remove(seed)
        group = list(seed)

        while len(group) < target:
            best: list[Participant] | None = None
            best_score = -math.inf
            for unit in remaining:
                if len(group) + len(unit) > target:
                    continue
                if rules.conflicts(group, unit):
                    continue
                if not _soft_compatible(group, unit):
                    continue
                if rules.balance_gender and not can_still_balance(group + unit, target):
                    continue
                score = sum(candidate_score(group, p) for p in unit) / len(unit)
                if score > best_score:
                    best, best_score = unit, score
            if best is None:
                return None
            remaining.remove(best)
            group.extend(best)

        if rules.balance_gender and not is_gender_balanced(group):
            return None
        groups.append(group)

    return groups if not remaining else None


def _lenient(
    units: list[list[Participant]],
    targets: list[int],
    rules: _Rules,
    rng: random.Random,
) -> list[list[Participant]]:
    shuffled = list(units)
    rng.shuffle(shuffled)
    shuffled.sort(key=len, reverse=True)
    groups: list[list[Participant]] = [[] for _ in targets]

    for unit in shuffled:
        open_groups = [
            g for g, members in enumerate(groups)
            if len(members) + len(unit) <= targets[g] and not rules.conflicts(members, unit)
        ]
        if rules.balance_gender:
            balanced = [
                g for g in open_groups
                if can_still_balance(groups[g] + unit, targets[g])
                and (len(groups[g]) + len(unit) < targets[g] or is_gender_balanced(groups[g] + unit))
            ]
            if balanced:
                open_groups = balanced
            elif open_groups:
                logger.warning(
                    "No gender-balanced seat for %s; placing anyway",
                    [p.guest_id for p in unit],
                )

        if not open_groups:
            # Overflow: any group that keeps not_with and the size cap intact
            open_groups = [
                g for g, members in enumerate(groups)
                if not rules.conflicts(members, unit)
                and (rules.max_size is None or len(members) + len(unit) <= rules.max_size)
            ]
            if not open_groups:
                raise PairingError(
                    f"Cannot seat {[p.guest_id for p in unit]} without breaking a "
                    "not_with or max_group_size constraint"
                )
            logger.warning("Overflowing %s into an already full group", [p.guest_id for p in unit])

        chosen = min(open_groups, key=lambda g: (len(groups[g]), g))
        groups[chosen].extend(unit)

    return [g for g in groups if g]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def generate_groups(
    participants: list[Participant],
    constraints: Iterable[ConstraintSpec] = (),
    *,
    target_size: int = 6,
    allow_relaxation: bool = True,
    seed: int | None = None,
) -> list[Group]:
    """Partition *participants* into named groups.

    Raises
    ------
    PairingError
        If ``not_with`` cannot be honoured, a unit is larger than the
        allowed group size, or strict grouping fails with relaxation off.
    """
    n = len(participants)
    if n < MIN_PARTICIPANTS:
        logger.info("Only %d participant(s); minimum is %d. Postpone the event.", n, MIN_PARTICIPANTS)
        return []

    rules = _Rules(participants, constraints)
    size = max(1, target_size)
    if rules.max_size is not None:
        size = min(size, rules.max_size)

    single_ok = n <= SINGLE_GROUP_MAX and (rules.max_size is None or n <= rules.max_size)
    if single_ok and not rules.conflicts(participants, participants):
        if rules.balance_gender and not is_gender_balanced(participants):
            logger.warning("Single group of %d is not gender balanced", n)
        logger.info("%d participants: one group", n)
        return [build_group(participants, "Group 1")]

    if single_ok:
        # A not_with pair forces a split even for a small event
        targets = _group_targets(n, max(1, math.ceil(n / 2)))
    else:
        targets = _group_targets(n, size)
    logger.info("%d participants → %d group(s) sized %s", n, len(targets), targets)

    largest_unit = max(len(u) for u in rules.units)
    if largest_unit > max(targets):
        raise PairingError(
            f"A must-sit-together unit of {largest_unit} guests exceeds the group size of {max(targets)}"
        )

    groups = _strict(rules.units, targets, rules)
    if groups is None:
        if not allow_relaxation:
            raise PairingError("Strict grouping failed and constraint relaxation is disabled")
        logger.info("Strict grouping failed, relaxing soft constraints")
        groups = _lenient(rules.units, targets, rules, random.Random(seed))

    return [build_group(g, f"Group {i}") for i, g in enumerate(groups, start=1)]
