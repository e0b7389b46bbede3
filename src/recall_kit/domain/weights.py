"""Memory-model parameters for recall_kit.

The weight vector calibrates the difficulty/stability formulas; the
scheduling params control interval derivation. Both are plain
configuration and can be swapped without touching scheduling logic.
"""

from collections.abc import Sequence

from pydantic import BaseModel, Field, field_validator

from recall_kit.models.memory import Grade

__all__ = [
    "DEFAULT_WEIGHT_VECTOR",
    "MemoryWeights",
    "SchedulingParams",
]

# Published FSRS-4.5 defaults (w0..w16)
DEFAULT_WEIGHT_VECTOR: tuple[float, ...] = (
    0.4872,
    1.4003,
    3.7145,
    13.8206,
    5.1618,
    1.2298,
    0.8975,
    0.031,
    1.6474,
    0.1367,
    1.0461,
    2.1072,
    0.0793,
    0.3246,
    1.587,
    0.2272,
    2.8755,
)

_VECTOR_LENGTH = len(DEFAULT_WEIGHT_VECTOR)


def _initial_difficulties(base: float, step: float) -> tuple[float, float, float, float]:
    return tuple(  # type: ignore[return-value]
        min(10.0, max(1.0, base - (grade - 3) * step)) for grade in Grade
    )


def _grade_deltas(delta: float) -> tuple[float, float, float, float]:
    return tuple(-delta * (grade - 3) for grade in Grade)  # type: ignore[return-value]


class MemoryWeights(BaseModel, frozen=True):
    """Named view over the memory-model weight vector.

    Per-grade tables are indexed by ``grade - 1`` (Again, Hard, Good, Easy);
    ``grade_bonus`` covers the success grades only (Hard, Good, Easy).

    Attributes:
        initial_stability: Stability seeded on the first grading of a New item
        initial_difficulty: Difficulty seeded on the first grading
        grade_delta: Signed difficulty step per grade
        w_a: Log-scale of the success stability gain
        w_b: Stability saturation exponent
        w_c: Retrievability sensitivity of the success gain
        grade_bonus: Success gain multiplier for Hard/Good/Easy
        w_d: Post-lapse stability scale
        w_e: Difficulty exponent of the lapse formula
        w_f: Stability exponent of the lapse formula
        w_g: Retrievability sensitivity of the lapse formula
    """

    initial_stability: tuple[float, float, float, float] = tuple(  # type: ignore[assignment]
        DEFAULT_WEIGHT_VECTOR[0:4]
    )
    initial_difficulty: tuple[float, float, float, float] = _initial_difficulties(
        DEFAULT_WEIGHT_VECTOR[4], DEFAULT_WEIGHT_VECTOR[5]
    )
    grade_delta: tuple[float, float, float, float] = _grade_deltas(DEFAULT_WEIGHT_VECTOR[6])
    w_a: float = DEFAULT_WEIGHT_VECTOR[8]
    w_b: float = DEFAULT_WEIGHT_VECTOR[9]
    w_c: float = DEFAULT_WEIGHT_VECTOR[10]
    grade_bonus: tuple[float, float, float] = (
        DEFAULT_WEIGHT_VECTOR[15],
        1.0,
        DEFAULT_WEIGHT_VECTOR[16],
    )
    w_d: float = Field(default=DEFAULT_WEIGHT_VECTOR[11], gt=0.0)
    w_e: float = DEFAULT_WEIGHT_VECTOR[12]
    w_f: float = DEFAULT_WEIGHT_VECTOR[13]
    w_g: float = DEFAULT_WEIGHT_VECTOR[14]

    @field_validator("initial_stability")
    @classmethod
    def _positive_stability(cls, value: tuple[float, ...]) -> tuple[float, ...]:
        if any(s <= 0.0 for s in value):
            raise ValueError("initial stabilities must be positive")
        return value

    @field_validator("initial_difficulty")
    @classmethod
    def _difficulty_in_range(cls, value: tuple[float, ...]) -> tuple[float, ...]:
        if any(not 1.0 <= d <= 10.0 for d in value):
            raise ValueError("initial difficulties must lie in [1, 10]")
        return value

    @classmethod
    def from_vector(cls, vector: Sequence[float]) -> "MemoryWeights":
        """Build weights from the conventional 17-element FSRS vector.

        w7 (difficulty mean reversion) has no counterpart in this model
        and is ignored.

        Raises:
            ValueError: If the vector has the wrong length
        """
        if len(vector) != _VECTOR_LENGTH:
            raise ValueError(
                f"Expected {_VECTOR_LENGTH} weights, got {len(vector)}"
            )
        w = [float(x) for x in vector]
        return cls(
            initial_stability=(w[0], w[1], w[2], w[3]),
            initial_difficulty=_initial_difficulties(w[4], w[5]),
            grade_delta=_grade_deltas(w[6]),
            w_a=w[8],
            w_b=w[9],
            w_c=w[10],
            grade_bonus=(w[15], 1.0, w[16]),
            w_d=w[11],
            w_e=w[12],
            w_f=w[13],
            w_g=w[14],
        )

    def stability_for(self, grade: Grade) -> float:
        return self.initial_stability[grade - 1]

    def difficulty_for(self, grade: Grade) -> float:
        return self.initial_difficulty[grade - 1]

    def delta_for(self, grade: Grade) -> float:
        return self.grade_delta[grade - 1]

    def bonus_for(self, grade: Grade) -> float:
        if grade is Grade.AGAIN:
            raise ValueError("Again has no success bonus")
        return self.grade_bonus[grade - 2]


class SchedulingParams(BaseModel, frozen=True):
    """Interval-derivation parameters.

    Attributes:
        request_retention: Target probability of recall at the due time
        maximum_interval: Upper bound on any review interval (days)
        enable_fuzz: Whether long intervals are randomly perturbed
        fuzz_factor: Half-width of the fuzz band as a fraction of the interval
        fuzz_threshold_days: Intervals at or below this are never fuzzed
        learning_step_minutes: Delay before a Learning item resurfaces
        relearning_step_minutes: Delay before a Relearning item resurfaces
        decay_factor: Time scale of the forgetting curve
        curve_exponent: Power of the forgetting curve
    """

    request_retention: float = Field(default=0.9, gt=0.0, lt=1.0)
    maximum_interval: int = Field(default=365, ge=1)
    enable_fuzz: bool = True
    fuzz_factor: float = Field(default=0.05, ge=0.0, le=0.25)
    fuzz_threshold_days: float = Field(default=2.5, ge=0.0)
    learning_step_minutes: float = Field(default=1.0, gt=0.0)
    relearning_step_minutes: float = Field(default=10.0, gt=0.0)
    decay_factor: float = Field(default=1.0 / 9.0, gt=0.0)
    curve_exponent: float = Field(default=1.0, gt=0.0)
