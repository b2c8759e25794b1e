"""
enqoy.engine.assessment — Assessment Steps, Validation & Derived Profile
==========================================================================

Pure logic behind the member personality assessment.  No HTTP, no timers;
:mod:`enqoy.client.wizard` drives this module and owns the side effects.

The wizard walks steps 1..22 (plus the optional fun-facts step 23).  Each
step owns one or more answer keys; :func:`step_error` decides whether the
member may advance, and :func:`build_profile_update` derives the profile
fields written after submission (age, resolved city, phone, gender).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_COUNTRY_CODE = "+251"

BIRTHDAY_STEP = 22
FUN_FACTS_STEP = 23
CITY_STEP = 2

CITY_MAIN = "main"
CITY_OUTSIDE = "outside"
DIETARY_OTHER = "other"


# ---------------------------------------------------------------------------
# Step table
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Step:
    """One wizard page: which answer keys it owns and how they are checked."""

    number: int
    kind: str                     # phone | city | choice | scale | multi | date | text
    fields: tuple[str, ...]
    title: str


STEPS: dict[int, Step] = {
    s.number: s
    for s in (
        Step(1, "phone", ("phone", "phoneVerify"), "Your phone number"),
        Step(2, "city", ("city",), "Where do you live?"),
        Step(3, "choice", ("preferredTime",), "Preferred dinner time"),
        Step(4, "choice", ("dinnerVibe",), "Your dinner vibe"),
        Step(5, "choice", ("talkTopic",), "What do you love talking about?"),
        Step(6, "choice", ("groupDynamic",), "Ideal group dynamic"),
        Step(7, "choice", ("humorType",), "Your sense of humour"),
        Step(8, "choice", ("wardrobeStyle",), "Your wardrobe style"),
        Step(9, "scale", ("introvertScale",), "I am more of an introvert"),
        Step(10, "scale", ("aloneTimeScale",), "I need time alone to recharge"),
        Step(11, "scale", ("familyScale",), "Family comes first"),
        Step(12, "scale", ("spiritualityScale",), "Spirituality matters to me"),
        Step(13, "scale", ("humorScale",), "Humour is essential in a conversation"),
        Step(14, "choice", ("meetingPriority",), "What matters most when meeting people"),
        Step(15, "multi", ("dietaryPreferences",), "Dietary preferences"),
        Step(16, "choice", ("restaurantFrequency",), "How often do you eat out?"),
        Step(17, "choice", ("spending",), "Typical spend per dinner"),
        Step(18, "choice", ("gender",), "Gender"),
        Step(19, "choice", ("relationshipStatus",), "Relationship status"),
        Step(20, "choice", ("hasChildren",), "Do you have children?"),
        Step(21, "choice", ("country",), "Where are you from?"),
        Step(22, "date", ("birthday",), "Your birthday"),
        Step(23, "text", ("nickName", "neverGuess", "funFact"), "A little more about you"),
    )
}

SCALE_FIELDS: tuple[str, ...] = tuple(
    s.fields[0] for s in STEPS.values() if s.kind == "scale"
)

# Keys outside the step table that still belong to the answer set
EXTRA_FIELDS: tuple[str, ...] = ("countryCode", "specifiedCity", "customDietary")

TRACKED_FIELDS: tuple[str, ...] = (
    tuple(f for s in STEPS.values() for f in s.fields) + EXTRA_FIELDS
)


def total_steps(include_fun_facts: bool = True) -> int:
    return FUN_FACTS_STEP if include_fun_facts else BIRTHDAY_STEP


def empty_answers() -> dict[str, Any]:
    """Blank answer set: scales unanswered, dietary list empty."""
    answers: dict[str, Any] = {f: "" for f in TRACKED_FIELDS}
    for f in SCALE_FIELDS:
        answers[f] = None
    answers["dietaryPreferences"] = []
    answers["countryCode"] = DEFAULT_COUNTRY_CODE
    return answers


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------
_NON_DIGIT = re.compile(r"\D")


def normalize_phone(value: Any) -> str:
    """Strip everything but digits from a phone entry."""
    return _NON_DIGIT.sub("", str(value or ""))


def _filled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set)):
        return len(value) > 0
    return True


def is_valid_scale(value: Any) -> bool:
    """Scale answers are integers 1–5.  ``True`` is not a 1."""
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 5


def as_list(value: Any) -> list:
    """Multi-select answers may arrive as a list or a single legacy string."""
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def parse_birthday(value: Any) -> date | None:
    """Parse an ISO date (or datetime) string.  Returns ``None`` if invalid."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def calculate_age(birthday: date, today: date | None = None) -> int:
    """Whole years elapsed, counting a birthday only once it has passed."""
    today = today or date.today()
    age = today.year - birthday.year
    if (today.month, today.day) < (birthday.month, birthday.day):
        age -= 1
    return age


def age_from_answers(answers: Mapping[str, Any], today: date | None = None) -> int | None:
    born = parse_birthday(answers.get("birthday"))
    if born is None:
        return None
    return calculate_age(born, today)


def resolve_city(city: Any, specified_city: Any, main_city: str) -> str | None:
    """Map the city answer to the city stored on the profile.

    ``"main"`` becomes the configured main city, ``"outside"`` the city the
    member typed in; any other non-empty value is kept literally.
    """
    if city == CITY_MAIN:
        return main_city
    if city == CITY_OUTSIDE:
        return (specified_city or "").strip() or None
    if _filled(city):
        return str(city)
    return None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
def step_error(step: int, answers: Mapping[str, Any]) -> str | None:
    """Return the message to show the member, or ``None`` if *step* is complete."""
    spec = STEPS.get(step)
    if spec is None:
        return f"Unknown step {step}"

    if spec.kind == "phone":
        phone = normalize_phone(answers.get("phone"))
        verify = normalize_phone(answers.get("phoneVerify"))
        if not phone or not verify:
            return "Please enter and confirm your phone number"
        if phone != verify:
            return "Phone numbers don't match"
        return None

    if spec.kind == "city":
        city = answers.get("city")
        if not _filled(city):
            return "Please select an option to continue"
        if city == CITY_OUTSIDE and not _filled(answers.get("specifiedCity")):
            return "Please tell us which city you live in"
        return None

    if spec.kind == "scale":
        if not is_valid_scale(answers.get(spec.fields[0])):
            return "Please pick a value from 1 to 5"
        return None

    if spec.kind == "multi":
        selected = as_list(answers.get(spec.fields[0]))
        if not selected:
            return "Please select at least one option"
        if DIETARY_OTHER in selected and not _filled(answers.get("customDietary")):
            return "Please describe your dietary preference"
        return None

    if spec.kind == "date":
        if parse_birthday(answers.get(spec.fields[0])) is None:
            return "Please enter a valid date"
        return None

    if spec.kind == "text":
        if not all(_filled(answers.get(f)) for f in spec.fields):
            return "Please fill in all fields"
        return None

    if not _filled(answers.get(spec.fields[0])):
        return "Please select an option to continue"
    return None


def validate_step(step: int, answers: Mapping[str, Any]) -> bool:
    return step_error(step, answers) is None


# ---------------------------------------------------------------------------
# Derived profile update
# ---------------------------------------------------------------------------
def full_phone(answers: Mapping[str, Any]) -> str | None:
    digits = normalize_phone(answers.get("phone"))
    if not digits:
        return None
    code = answers.get("countryCode") or DEFAULT_COUNTRY_CODE
    return f"{code}{digits}"


def build_profile_update(
    answers: Mapping[str, Any],
    *,
    main_city: str,
    today: date | None = None,
) -> dict[str, Any]:
    """Profile fields derived from a completed answer set.

    Only keys with a value are included, so the PATCH never blanks a field
    the member did not answer.
    """
    update: dict[str, Any] = {
        "age": age_from_answers(answers, today),
        "city": resolve_city(answers.get("city"), answers.get("specifiedCity"), main_city),
        "phone": full_phone(answers),
        "gender": answers.get("gender") or None,
    }
    return {k: v for k, v in update.items() if v is not None}


def restore_answers(saved: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge saved answers over a blank set.

    Keys the step table does not know about (country-specific questions) are
    carried through untouched.
    """
    answers = empty_answers()
    if not saved:
        return answers
    for key, value in saved.items():
        if key in SCALE_FIELDS:
            answers[key] = value if is_valid_scale(value) else None
        elif key == "dietaryPreferences":
            answers[key] = as_list(value)
        elif value is not None:
            answers[key] = value
    return answers
