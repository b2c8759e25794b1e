"""
enqoy.client.wizard — Assessment Wizard Controller
===================================================

Drives :mod:`enqoy.engine.assessment` against the API:

- ``load()`` restores saved answers from ``/assessments/my``; autosave is
  armed only once this has finished.
- ``set()`` records an answer and schedules a debounced full-state
  ``save-progress``.  A newer save cancels an older one still in flight.
- ``next()`` validates the current step.  Two answers end the flow early:
  living outside the served city (an interest is registered for the city
  typed in) and being under the minimum age on the birthday step.
- ``submit()`` posts the answers, patches the derived profile fields and
  navigates to ``/dashboard``.

After the assessment has been completed, single edits go through
``update_answer()`` (``PATCH /assessments/answer``), never save-progress.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from enqoy.client.http import ApiError, error_message
from enqoy.client.notify import Toaster
from enqoy.client.sdk import EnqoyApi
from enqoy.config import EnqoyConfig
from enqoy.engine import assessment
from enqoy.engine.debounce import Debouncer

logger = logging.getLogger(__name__)

DASHBOARD_ROUTE = "/dashboard"


class WizardState(enum.StrEnum):
    IN_PROGRESS = "in_progress"
    OUTSIDE_CITY = "outside_city"       # showOutsideCityMessage
    UNDERAGE = "underage"               # showUnderageMessage
    SUBMITTED = "submitted"


class AssessmentWizard:
    """One member's pass through the assessment."""

    def __init__(
        self,
        api: EnqoyApi,
        *,
        config: EnqoyConfig | None = None,
        toaster: Toaster | None = None,
        navigate: Callable[[str], Any] | None = None,
        today: date | None = None,
    ) -> None:
        self.api = api
        self.config = config or EnqoyConfig()
        self.toaster = toaster or Toaster()
        self._navigate = navigate
        self._today = today

        self.step = 1
        self.answers: dict[str, Any] = assessment.empty_answers()
        self.state = WizardState.IN_PROGRESS
        self.is_completed = False
        self.loaded = False
        self.submitting = False
        self.total_steps = assessment.total_steps(self.config.include_fun_facts_step)

        self._autosave = Debouncer(
            self.save_progress,
            self.config.autosave_debounce_ms / 1000,
            name="assessment-autosave",
        )

    # -- loading -----------------------------------------------------------
    async def load(self) -> None:
        """Restore saved progress.  No saved progress is not an error."""
        try:
            data = await self.api.assessments.get_my()
        except ApiError as exc:
            if exc.status_code == 404:
                logger.info("No saved assessment progress")
            else:
                logger.warning("Could not load saved assessment: %s", exc)
            data = None

        if isinstance(data, dict) and data:
            self.answers = assessment.restore_answers(data.get("answers"))
            self.is_completed = bool(data.get("isCompleted"))
            saved_step = data.get("currentStep")
            if isinstance(saved_step, int) and 1 <= saved_step <= self.total_steps:
                self.step = saved_step
        else:
            logger.info("Starting a fresh assessment")
        self.loaded = True

    # -- answers -----------------------------------------------------------
    def set(self, key: str, value: Any) -> None:
        """Record an answer.  Call from the event loop."""
        if self.answers.get(key) == value:
            return
        self.answers[key] = value
        if self.loaded and not self.is_completed and self.state is WizardState.IN_PROGRESS:
            self._autosave.trigger()

    async def save_progress(self) -> None:
        if self.is_completed:
            return
        await self.api.assessments.save_progress(dict(self.answers))
        logger.debug("Assessment progress saved at step %d", self.step)

    async def update_answer(self, key: str, value: Any) -> bool:
        """Edit one answer of a completed assessment."""
        self.answers[key] = value
        try:
            await self.api.assessments.update_answer(key, value)
        except ApiError as exc:
            self.toaster.error(error_message(exc, "Failed to update answer"))
            return False
        return True

    # -- navigation --------------------------------------------------------
    @property
    def current_step(self) -> assessment.Step:
        return assessment.STEPS[self.step]

    @property
    def age(self) -> int | None:
        return assessment.age_from_answers(self.answers, self._today)

    def _underage(self) -> bool:
        age = self.age
        return age is not None and age < self.config.minimum_age

    async def next(self) -> bool:
        """Advance one step if the current one is complete."""
        if self.state is not WizardState.IN_PROGRESS:
            return False
        problem = assessment.step_error(self.step, self.answers)
        if problem:
            self.toaster.error(problem)
            return False

        if self.step == assessment.CITY_STEP and self.answers.get("city") == assessment.CITY_OUTSIDE:
            await self._register_outside_city()
            return False

        if self.step == assessment.BIRTHDAY_STEP and self._underage():
            logger.info("Assessment stopped: member is under %d", self.config.minimum_age)
            self.state = WizardState.UNDERAGE
            self._autosave.cancel()
            return False

        if self.step < self.total_steps:
            self.step += 1
        return True

    def back(self) -> None:
        if self.step > 1:
            self.step -= 1

    def back_to_birthday(self) -> None:
        """Leave the underage message and let the member correct the date."""
        self.state = WizardState.IN_PROGRESS
        self.step = assessment.BIRTHDAY_STEP

    async def _register_outside_city(self) -> None:
        city = str(self.answers.get("specifiedCity") or "").strip()
        try:
            await self.api.outside_city_interests.create(city)
        except ApiError as exc:
            logger.warning("Could not register interest for %s: %s", city, exc)
        self.state = WizardState.OUTSIDE_CITY
        self._autosave.cancel()

    # -- submission --------------------------------------------------------
    async def submit(self) -> bool:
        if self.step < self.total_steps:
            self.toaster.error("Please complete all required fields")
            return False
        problem = assessment.step_error(self.step, self.answers)
        if problem:
            self.toaster.error(problem)
            return False
        if self._underage():
            self.state = WizardState.UNDERAGE
            self.step = assessment.BIRTHDAY_STEP
            return False

        self.submitting = True
        self._autosave.cancel()
        try:
            await self.api.assessments.submit(dict(self.answers))
            update = assessment.build_profile_update(
                self.answers, main_city=self.config.main_city, today=self._today
            )
            if update:
                await self.api.users.update_profile(update)
        except ApiError as exc:
            self.toaster.error(error_message(exc, "Failed to submit assessment"))
            return False
        finally:
            self.submitting = False

        self.state = WizardState.SUBMITTED
        self.is_completed = True
        self.toaster.success("Assessment completed successfully!")
        if self._navigate is not None:
            self._navigate(DASHBOARD_ROUTE)
        return True

    # -- lifecycle ---------------------------------------------------------
    def blocks_unload(self) -> bool:
        """Whether leaving now would lose an assessment in progress."""
        return self.state is WizardState.IN_PROGRESS and not self.is_completed

    async def close(self) -> None:
        self._autosave.cancel()
        await self._autosave.wait()
