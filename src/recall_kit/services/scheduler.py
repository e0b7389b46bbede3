"""Review scheduler for recall_kit.

This module turns a grade into the next memory state of an item:
difficulty and stability updates, the discrete state transition, and
the next due time with optional interval fuzz.
"""

import math
import random

from recall_kit.config import SchedulerSettings
from recall_kit.domain.memory import (
    fuzz_interval,
    next_difficulty,
    next_forget_stability,
    next_interval,
    next_recall_stability,
    retrievability,
)
from recall_kit.domain.weights import MemoryWeights, SchedulingParams
from recall_kit.errors import ValidationError
from recall_kit.logging import get_logger
from recall_kit.models.memory import GRADE_LABELS, Grade, ItemMemoryState, ItemState
from recall_kit.models.session import SchedulingOption
from recall_kit.utils.clock import MS_PER_DAY, MS_PER_MINUTE

__all__ = [
    "STATE_TRANSITIONS",
    "Scheduler",
    "elapsed_days_between",
    "format_interval",
    "parse_grade",
    "schedule_review",
]

logger = get_logger(__name__)

_MINUTES_PER_DAY = 1440.0

STATE_TRANSITIONS: dict[tuple[ItemState, Grade], ItemState] = {
    (ItemState.NEW, Grade.AGAIN): ItemState.LEARNING,
    (ItemState.NEW, Grade.HARD): ItemState.REVIEW,
    (ItemState.NEW, Grade.GOOD): ItemState.REVIEW,
    (ItemState.NEW, Grade.EASY): ItemState.REVIEW,
    (ItemState.LEARNING, Grade.AGAIN): ItemState.LEARNING,
    (ItemState.LEARNING, Grade.HARD): ItemState.REVIEW,
    (ItemState.LEARNING, Grade.GOOD): ItemState.REVIEW,
    (ItemState.LEARNING, Grade.EASY): ItemState.REVIEW,
    (ItemState.REVIEW, Grade.AGAIN): ItemState.RELEARNING,
    (ItemState.REVIEW, Grade.HARD): ItemState.REVIEW,
    (ItemState.REVIEW, Grade.GOOD): ItemState.REVIEW,
    (ItemState.REVIEW, Grade.EASY): ItemState.REVIEW,
    (ItemState.RELEARNING, Grade.AGAIN): ItemState.RELEARNING,
    (ItemState.RELEARNING, Grade.HARD): ItemState.REVIEW,
    (ItemState.RELEARNING, Grade.GOOD): ItemState.REVIEW,
    (ItemState.RELEARNING, Grade.EASY): ItemState.REVIEW,
}

_LAPSE_STATES = frozenset({ItemState.REVIEW, ItemState.RELEARNING})


def parse_grade(value: object) -> Grade:
    """Validate a wire-level grade (1-4).

    Raises:
        ValidationError: If value is not an integer in 1..4
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Grade must be an integer 1-4, got {value!r}")
    try:
        return Grade(value)
    except ValueError as e:
        raise ValidationError(f"Grade must be 1-4, got {value}") from e


def elapsed_days_between(last_review: int | None, now: int) -> float:
    """Days from last_review to now; 0 when never reviewed or clock went back."""
    if last_review is None:
        return 0.0
    return max(0.0, (now - last_review) / MS_PER_DAY)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_interval(due: int, now: int) -> str:
    """Render the gap between now and due, e.g. ``10m``, ``3h``, ``4d``, ``2mo``."""
    diff_ms = due - now
    minutes = _round_half_up(diff_ms / MS_PER_MINUTE)
    hours = _round_half_up(diff_ms / (MS_PER_MINUTE * 60))
    days = _round_half_up(diff_ms / MS_PER_DAY)

    if minutes < 1:
        return "<1m"
    if minutes < 60:
        return f"{minutes}m"
    if hours < 24:
        return f"{hours}h"
    if days < 30:
        return f"{days}d"
    if days < 365:
        return f"{_round_half_up(days / 30)}mo"
    return f"{_round_half_up(days / 365)}y"


def schedule_review(
    state: ItemMemoryState,
    grade: Grade | int,
    now: int,
    weights: MemoryWeights | None = None,
    rng: random.Random | None = None,
    params: SchedulingParams | None = None,
) -> ItemMemoryState:
    """Compute the memory state that results from grading an item.

    Pure: the input state is never modified, and with the same weights,
    params and rng seed the result is identical. Fuzz is applied only
    when an rng is given and params enable it.

    Args:
        state: Current memory state
        grade: Grade 1-4
        now: Grading time in epoch milliseconds
        weights: Memory-model weights (defaults when None)
        rng: Random source for interval fuzz
        params: Interval parameters (defaults when None)

    Returns:
        New ItemMemoryState

    Raises:
        ValidationError: If grade is outside 1..4
    """
    g = parse_grade(grade)
    weights = weights or MemoryWeights()
    params = params or SchedulingParams()

    elapsed = elapsed_days_between(state.last_review, now)

    if state.state is ItemState.NEW:
        difficulty = weights.difficulty_for(g)
        stability = weights.stability_for(g)
    else:
        r = retrievability(elapsed, state.stability, params)
        if g is Grade.AGAIN:
            stability = next_forget_stability(state.difficulty, state.stability, r, weights)
        else:
            stability = next_recall_stability(
                state.difficulty, state.stability, r, g, weights
            )
        difficulty = next_difficulty(state.difficulty, g, weights)

    new_state = STATE_TRANSITIONS[(state.state, g)]
    lapses = state.lapses
    if g is Grade.AGAIN and state.state in _LAPSE_STATES:
        lapses += 1

    if new_state is ItemState.LEARNING:
        step_minutes = params.learning_step_minutes
        scheduled_days = step_minutes / _MINUTES_PER_DAY
        due = now + round(step_minutes * MS_PER_MINUTE)
    elif new_state is ItemState.RELEARNING:
        step_minutes = params.relearning_step_minutes
        scheduled_days = step_minutes / _MINUTES_PER_DAY
        due = now + round(step_minutes * MS_PER_MINUTE)
    else:
        interval = next_interval(stability, params)
        if rng is not None:
            interval = fuzz_interval(interval, params, rng)
        scheduled_days = float(interval)
        due = now + interval * MS_PER_DAY

    logger.debug(
        "review_scheduled",
        item_id=state.id,
        grade=int(g),
        prior_state=state.state.value,
        new_state=new_state.value,
        stability=stability,
        difficulty=difficulty,
        scheduled_days=scheduled_days,
    )

    return ItemMemoryState(
        id=state.id,
        deck_id=state.deck_id,
        difficulty=difficulty,
        stability=max(0.0, stability),
        elapsed_days=elapsed,
        scheduled_days=scheduled_days,
        reps=state.reps + 1,
        lapses=lapses,
        state=new_state,
        due=due,
        last_review=now,
        schema_version=state.schema_version,
    )


class Scheduler:
    """Configured scheduler bound to one weight set and random source.

    Example:
        scheduler = Scheduler.from_settings(SchedulerSettings())
        updated = scheduler.schedule(state, Grade.GOOD, now)
        options = scheduler.preview(state, now)
    """

    def __init__(
        self,
        weights: MemoryWeights | None = None,
        params: SchedulingParams | None = None,
        rng: random.Random | None = None,
        fuzz_seed: int | None = None,
    ) -> None:
        """Initialize scheduler.

        Args:
            weights: Memory-model weights (defaults when None)
            params: Interval parameters (defaults when None)
            rng: Random source for fuzz; built from fuzz_seed when None
            fuzz_seed: Seed for the internal random source
        """
        self._weights = weights or MemoryWeights()
        self._params = params or SchedulingParams()
        self._rng = rng if rng is not None else random.Random(fuzz_seed)

    @classmethod
    def from_settings(
        cls,
        settings: SchedulerSettings,
        rng: random.Random | None = None,
    ) -> "Scheduler":
        return cls(
            weights=settings.memory_weights(),
            params=settings.scheduling_params(),
            rng=rng,
            fuzz_seed=settings.fuzz_seed,
        )

    @property
    def weights(self) -> MemoryWeights:
        return self._weights

    @property
    def params(self) -> SchedulingParams:
        return self._params

    def schedule(self, state: ItemMemoryState, grade: Grade | int, now: int) -> ItemMemoryState:
        rng = self._rng if self._params.enable_fuzz else None
        return schedule_review(state, grade, now, self._weights, rng, self._params)

    def retrievability(self, state: ItemMemoryState, now: int) -> float:
        """Current probability of recall; 1.0 for an item never reviewed."""
        if state.state is ItemState.NEW or state.last_review is None:
            return 1.0
        elapsed = elapsed_days_between(state.last_review, now)
        return retrievability(elapsed, state.stability, self._params)

    def preview(self, state: ItemMemoryState, now: int) -> list[SchedulingOption]:
        """Show what each grade would schedule, without committing anything.

        Fuzz draws come from a source seeded by item and time, so repeated
        previews with the same now return the same options.
        """
        options = []
        for grade in Grade:
            rng = random.Random(f"{state.id}:{now}") if self._params.enable_fuzz else None
            result = schedule_review(state, grade, now, self._weights, rng, self._params)
            options.append(
                SchedulingOption(
                    grade=grade,
                    label=GRADE_LABELS[grade],
                    next_due=result.due,
                    interval=format_interval(result.due, now),
                )
            )
        return options
