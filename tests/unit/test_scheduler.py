"""Unit tests for the recall_kit scheduler."""

import random

import pytest

from recall_kit.domain.memory import (
    clamp,
    fuzz_interval,
    next_difficulty,
    next_interval,
    retrievability,
)
from recall_kit.domain.weights import MemoryWeights, SchedulingParams
from recall_kit.errors import ValidationError
from recall_kit.models.memory import Grade, ItemMemoryState, ItemState
from recall_kit.services.scheduler import (
    STATE_TRANSITIONS,
    Scheduler,
    format_interval,
    parse_grade,
    schedule_review,
)
from recall_kit.utils.clock import MS_PER_DAY, MS_PER_MINUTE
from tests.mocks.mock_storage import NOW


class TestFormulas:
    """Tests for the pure memory-model formulas."""

    def test_retrievability_at_stability_is_target(self) -> None:
        params = SchedulingParams()
        assert retrievability(10.0, 10.0, params) == pytest.approx(0.9)

    def test_retrievability_without_elapsed_time(self) -> None:
        assert retrievability(0.0, 5.0, SchedulingParams()) == 1.0
        assert retrievability(-3.0, 5.0, SchedulingParams()) == 1.0

    def test_retrievability_decays(self) -> None:
        params = SchedulingParams()
        assert retrievability(30.0, 10.0, params) < retrievability(5.0, 10.0, params)

    def test_difficulty_moves_toward_bound(self, weights: MemoryWeights) -> None:
        assert next_difficulty(5.0, Grade.AGAIN, weights) > 5.0
        assert next_difficulty(5.0, Grade.GOOD, weights) == 5.0
        assert next_difficulty(5.0, Grade.EASY, weights) < 5.0

    def test_difficulty_clamped(self, weights: MemoryWeights) -> None:
        assert next_difficulty(10.0, Grade.AGAIN, weights) == 10.0
        assert next_difficulty(1.0, Grade.EASY, weights) == 1.0

    def test_interval_equals_stability_at_default_retention(self) -> None:
        assert next_interval(10.0, SchedulingParams()) == 10

    def test_interval_bounds(self) -> None:
        params = SchedulingParams(maximum_interval=100)
        assert next_interval(0.01, params) == 1
        assert next_interval(5000.0, params) == 100

    def test_fuzz_within_band(self) -> None:
        params = SchedulingParams(fuzz_factor=0.05)
        rng = random.Random(0)
        results = {fuzz_interval(40, params, rng) for _ in range(200)}

        assert results <= set(range(38, 43))
        assert len(results) > 1

    def test_short_intervals_not_fuzzed(self) -> None:
        params = SchedulingParams(fuzz_threshold_days=2.5)
        rng = random.Random(0)
        assert all(fuzz_interval(2, params, rng) == 2 for _ in range(50))

    @pytest.mark.parametrize("interval", [3, 5, 12, 19, 20, 41, 100])
    def test_fuzz_proportional_to_interval(self, interval: int) -> None:
        params = SchedulingParams(fuzz_factor=0.05)
        rng = random.Random(interval)

        for _ in range(200):
            fuzzed = fuzz_interval(interval, params, rng)
            assert abs(fuzzed - interval) <= interval * params.fuzz_factor

    def test_fuzz_respects_maximum(self) -> None:
        params = SchedulingParams(maximum_interval=30, fuzz_factor=0.25)
        rng = random.Random(1)
        assert all(1 <= fuzz_interval(30, params, rng) <= 30 for _ in range(100))

    def test_clamp(self) -> None:
        assert clamp(11.0, 1.0, 10.0) == 10.0
        assert clamp(-1.0, 1.0, 10.0) == 1.0


class TestParseGrade:
    """Tests for grade validation."""

    @pytest.mark.parametrize("value", [1, 2, 3, 4])
    def test_valid(self, value: int) -> None:
        assert parse_grade(value) == Grade(value)

    @pytest.mark.parametrize("value", [0, 5, -1, True, "3", 2.0, None])
    def test_invalid(self, value: object) -> None:
        with pytest.raises(ValidationError):
            parse_grade(value)


class TestScheduleReview:
    """Tests for schedule_review."""

    def test_new_good_goes_to_review(
        self,
        new_item: ItemMemoryState,
        weights: MemoryWeights,
        no_fuzz_params: SchedulingParams,
    ) -> None:
        result = schedule_review(new_item, Grade.GOOD, NOW, weights, None, no_fuzz_params)

        assert result.state is ItemState.REVIEW
        assert result.stability == weights.stability_for(Grade.GOOD)
        assert result.difficulty == weights.difficulty_for(Grade.GOOD)
        assert result.due > NOW
        assert result.due == NOW + 4 * MS_PER_DAY
        assert result.scheduled_days == 4.0
        assert result.reps == 1
        assert result.lapses == 0
        assert result.last_review == NOW
        assert result.elapsed_days == 0.0

    def test_new_again_goes_to_learning(self, new_item: ItemMemoryState) -> None:
        result = schedule_review(new_item, Grade.AGAIN, NOW)

        assert result.state is ItemState.LEARNING
        assert result.lapses == 0
        assert result.due == NOW + MS_PER_MINUTE
        assert result.stability > 0

    def test_review_again_lapses(self, review_item: ItemMemoryState) -> None:
        result = schedule_review(review_item, Grade.AGAIN, NOW)

        assert result.state is ItemState.RELEARNING
        assert result.lapses == review_item.lapses + 1
        assert result.due - NOW < MS_PER_DAY
        assert result.due == NOW + 10 * MS_PER_MINUTE
        assert 0 < result.stability < review_item.stability
        assert result.difficulty > review_item.difficulty

    def test_review_good_grows_stability(
        self,
        review_item: ItemMemoryState,
        weights: MemoryWeights,
        no_fuzz_params: SchedulingParams,
    ) -> None:
        result = schedule_review(review_item, Grade.GOOD, NOW, weights, None, no_fuzz_params)

        assert result.state is ItemState.REVIEW
        assert result.stability > review_item.stability
        assert result.difficulty == review_item.difficulty
        assert result.elapsed_days == pytest.approx(10.0)
        assert result.scheduled_days == float(round(result.stability))

    def test_easy_beats_hard(self, review_item: ItemMemoryState) -> None:
        hard = schedule_review(review_item, Grade.HARD, NOW)
        easy = schedule_review(review_item, Grade.EASY, NOW)

        assert easy.stability > hard.stability
        assert easy.due > hard.due

    def test_learning_again_does_not_lapse(self, learning_item: ItemMemoryState) -> None:
        result = schedule_review(learning_item, Grade.AGAIN, NOW)

        assert result.state is ItemState.LEARNING
        assert result.lapses == learning_item.lapses

    def test_relearning_again_lapses(self, relearning_item: ItemMemoryState) -> None:
        result = schedule_review(relearning_item, Grade.AGAIN, NOW)

        assert result.state is ItemState.RELEARNING
        assert result.lapses == relearning_item.lapses + 1

    def test_maximum_interval(self, review_item: ItemMemoryState) -> None:
        params = SchedulingParams(maximum_interval=30, enable_fuzz=False)
        strong = review_item.model_copy(update={"stability": 500.0})

        result = schedule_review(strong, Grade.EASY, NOW, params=params)

        assert result.scheduled_days == 30.0
        assert result.due == NOW + 30 * MS_PER_DAY

    def test_input_not_mutated(self, review_item: ItemMemoryState) -> None:
        before = review_item.model_dump()
        schedule_review(review_item, Grade.AGAIN, NOW)
        assert review_item.model_dump() == before

    def test_clock_going_backwards(self, review_item: ItemMemoryState) -> None:
        result = schedule_review(review_item, Grade.GOOD, review_item.last_review - MS_PER_DAY)

        assert result.elapsed_days == 0.0
        assert result.stability == pytest.approx(review_item.stability)

    def test_invalid_grade(self, review_item: ItemMemoryState) -> None:
        with pytest.raises(ValidationError):
            schedule_review(review_item, 5, NOW)

    @pytest.mark.parametrize(("prior", "grade"), list(STATE_TRANSITIONS))
    def test_transition_table(
        self,
        prior: ItemState,
        grade: Grade,
        review_item: ItemMemoryState,
        new_item: ItemMemoryState,
    ) -> None:
        if prior is ItemState.NEW:
            state = new_item
        else:
            state = review_item.model_copy(update={"state": prior})

        result = schedule_review(state, grade, NOW)

        assert result.state is STATE_TRANSITIONS[(prior, grade)]
        assert result.reps == state.reps + 1
        assert 1.0 <= result.difficulty <= 10.0
        assert result.stability >= 0.0
        if grade is Grade.AGAIN and prior in (ItemState.REVIEW, ItemState.RELEARNING):
            assert result.lapses == state.lapses + 1
        else:
            assert result.lapses == state.lapses

    def test_bounds_across_extremes(self, weights: MemoryWeights) -> None:
        for difficulty in (1.0, 5.5, 10.0):
            for stability in (0.0, 0.01, 3.0, 300.0):
                for elapsed_days in (0, 1, 90, 2000):
                    state = ItemMemoryState(
                        id="x",
                        difficulty=difficulty,
                        stability=stability,
                        reps=4,
                        state=ItemState.REVIEW,
                        due=NOW,
                        last_review=NOW - elapsed_days * MS_PER_DAY,
                    )
                    for grade in Grade:
                        result = schedule_review(state, grade, NOW, weights)
                        assert 1.0 <= result.difficulty <= 10.0
                        assert result.stability >= 0.0
                        assert result.due > NOW


class TestScheduler:
    """Tests for the configured Scheduler."""

    def test_same_seed_same_schedule(self, review_item: ItemMemoryState) -> None:
        first = Scheduler(fuzz_seed=11).schedule(review_item, Grade.EASY, NOW)
        second = Scheduler(fuzz_seed=11).schedule(review_item, Grade.EASY, NOW)

        assert first == second

    def test_fuzz_disabled_matches_pure_function(
        self,
        scheduler: Scheduler,
        review_item: ItemMemoryState,
    ) -> None:
        expected = schedule_review(
            review_item, Grade.GOOD, NOW, scheduler.weights, None, scheduler.params
        )
        assert scheduler.schedule(review_item, Grade.GOOD, NOW) == expected

    def test_injected_rng_is_used(self, review_item: ItemMemoryState) -> None:
        strong = review_item.model_copy(update={"stability": 50.0})
        dues = {
            Scheduler(rng=random.Random(seed)).schedule(strong, Grade.GOOD, NOW).due
            for seed in range(20)
        }
        assert len(dues) > 1

    def test_retrievability(
        self,
        scheduler: Scheduler,
        new_item: ItemMemoryState,
        review_item: ItemMemoryState,
    ) -> None:
        assert scheduler.retrievability(new_item, NOW) == 1.0
        assert scheduler.retrievability(review_item, NOW) == pytest.approx(0.9)

    def test_preview_lists_every_grade(
        self,
        seeded_scheduler: Scheduler,
        review_item: ItemMemoryState,
    ) -> None:
        options = seeded_scheduler.preview(review_item, NOW)

        assert [o.grade for o in options] == list(Grade)
        assert [o.label for o in options] == ["Again", "Hard", "Good", "Easy"]
        assert options[0].interval == "10m"
        assert options[0].next_due < options[3].next_due

    def test_preview_is_repeatable(
        self,
        seeded_scheduler: Scheduler,
        review_item: ItemMemoryState,
    ) -> None:
        before = review_item.model_dump()

        first = seeded_scheduler.preview(review_item, NOW)
        second = seeded_scheduler.preview(review_item, NOW)

        assert first == second
        assert review_item.model_dump() == before

    def test_from_settings(self) -> None:
        from recall_kit.config import SchedulerSettings

        settings = SchedulerSettings(maximum_interval=50, enable_fuzz=False)
        scheduler = Scheduler.from_settings(settings)

        assert scheduler.params.maximum_interval == 50
        assert scheduler.params.enable_fuzz is False


class TestFormatInterval:
    """Tests for human-readable intervals."""

    @pytest.mark.parametrize(
        ("delta_ms", "expected"),
        [
            (20_000, "<1m"),
            (10 * MS_PER_MINUTE, "10m"),
            (3 * 60 * MS_PER_MINUTE, "3h"),
            (4 * MS_PER_DAY, "4d"),
            (60 * MS_PER_DAY, "2mo"),
            (400 * MS_PER_DAY, "1y"),
        ],
    )
    def test_format(self, delta_ms: int, expected: str) -> None:
        assert format_interval(NOW + delta_ms, NOW) == expected
