"""Shared test fixtures for recall_kit.

This module provides pytest fixtures used across all tests.
"""

import random
from unittest.mock import AsyncMock

import pytest

from recall_kit.domain.weights import MemoryWeights, SchedulingParams
from recall_kit.infra.memory.repositories import InMemoryStorageRepository
from recall_kit.models.memory import ItemMemoryState, ItemState
from recall_kit.services.scheduler import Scheduler
from recall_kit.utils.clock import MS_PER_DAY
from tests.mocks.mock_storage import NOW, FlakyStorage


# Mock fixtures
@pytest.fixture
def mock_storage() -> AsyncMock:
    """Create mock storage interface."""
    storage = AsyncMock()
    storage.get_item.return_value = None
    storage.save_item.return_value = "test-item-id"
    storage.get_due_items.return_value = []
    storage.append_review.return_value = "test-review-id"
    storage.get_last_review.return_value = None
    storage.delete_review.return_value = True
    return storage


@pytest.fixture
def memory_storage() -> InMemoryStorageRepository:
    return InMemoryStorageRepository()


@pytest.fixture
def flaky_storage() -> FlakyStorage:
    return FlakyStorage()


# Scheduler fixtures
@pytest.fixture
def no_fuzz_params() -> SchedulingParams:
    return SchedulingParams(enable_fuzz=False)


@pytest.fixture
def weights() -> MemoryWeights:
    return MemoryWeights()


@pytest.fixture
def scheduler(no_fuzz_params: SchedulingParams) -> Scheduler:
    """Scheduler with fuzz disabled, so intervals are exact."""
    return Scheduler(params=no_fuzz_params)


@pytest.fixture
def seeded_scheduler() -> Scheduler:
    return Scheduler(rng=random.Random(42))


# Sample data fixtures
@pytest.fixture
def new_item() -> ItemMemoryState:
    return ItemMemoryState.new("card-new", NOW - 1000, deck_id="spanish")


@pytest.fixture
def learning_item() -> ItemMemoryState:
    return ItemMemoryState(
        id="card-learning",
        deck_id="spanish",
        difficulty=7.6,
        stability=0.4872,
        scheduled_days=1 / 1440,
        reps=1,
        state=ItemState.LEARNING,
        due=NOW - 1000,
        last_review=NOW - 60_000,
    )


@pytest.fixture
def review_item() -> ItemMemoryState:
    """Review item last seen 10 days ago with 10 days stability (R = 0.9)."""
    return ItemMemoryState(
        id="card-review",
        deck_id="spanish",
        difficulty=5.0,
        stability=10.0,
        elapsed_days=3.0,
        scheduled_days=10.0,
        reps=3,
        lapses=0,
        state=ItemState.REVIEW,
        due=NOW,
        last_review=NOW - 10 * MS_PER_DAY,
    )


@pytest.fixture
def relearning_item() -> ItemMemoryState:
    return ItemMemoryState(
        id="card-relearning",
        deck_id="french",
        difficulty=6.0,
        stability=2.5,
        scheduled_days=10 / 1440,
        reps=5,
        lapses=1,
        state=ItemState.RELEARNING,
        due=NOW - 1000,
        last_review=NOW - 600_000,
    )
