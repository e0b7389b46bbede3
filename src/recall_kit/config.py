"""Configuration management for recall_kit.

This module provides typed configuration classes using pydantic-settings.
Configuration is loaded from environment variables with optional .env file support.
"""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from recall_kit.domain.weights import MemoryWeights, SchedulingParams

__all__ = [
    "MongoSettings",
    "ProgressSettings",
    "RecallKitConfig",
    "SchedulerSettings",
    "SessionSettings",
]


class MongoSettings(BaseSettings):
    """MongoDB connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="RECALL_KIT_MONGO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    uri: SecretStr = SecretStr("mongodb://localhost:27017")
    database: str = "recall_kit"
    collection_prefix: str = ""


class SchedulerSettings(BaseSettings):
    """Memory-model and interval settings.

    ``weights`` takes the conventional 17-element FSRS vector, e.g.
    ``RECALL_KIT_SCHEDULER_WEIGHTS='[0.4872, 1.4003, ...]'``. When unset the
    published FSRS-4.5 defaults are used.
    """

    model_config = SettingsConfigDict(
        env_prefix="RECALL_KIT_SCHEDULER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    request_retention: float = Field(default=0.9, gt=0.0, lt=1.0)
    maximum_interval: int = Field(default=365, ge=1)
    enable_fuzz: bool = True
    fuzz_factor: float = Field(default=0.05, ge=0.0, le=0.25)
    fuzz_threshold_days: float = Field(default=2.5, ge=0.0)
    fuzz_seed: int | None = None
    learning_step_minutes: float = Field(default=1.0, gt=0.0)
    relearning_step_minutes: float = Field(default=10.0, gt=0.0)
    weights: list[float] | None = None

    def memory_weights(self) -> MemoryWeights:
        """Build the weight set, falling back to defaults."""
        if self.weights is None:
            return MemoryWeights()
        return MemoryWeights.from_vector(self.weights)

    def scheduling_params(self) -> SchedulingParams:
        return SchedulingParams(
            request_retention=self.request_retention,
            maximum_interval=self.maximum_interval,
            enable_fuzz=self.enable_fuzz,
            fuzz_factor=self.fuzz_factor,
            fuzz_threshold_days=self.fuzz_threshold_days,
            learning_step_minutes=self.learning_step_minutes,
            relearning_step_minutes=self.relearning_step_minutes,
        )


class SessionSettings(BaseSettings):
    """Study session sizing."""

    model_config = SettingsConfigDict(
        env_prefix="RECALL_KIT_SESSION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    deck_limit: int = Field(default=20, ge=1)
    all_limit: int = Field(default=50, ge=1)


class ProgressSettings(BaseSettings):
    """Daily progress tracking settings."""

    model_config = SettingsConfigDict(
        env_prefix="RECALL_KIT_PROGRESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    daily_goal: int = Field(default=20, ge=1)


class RecallKitConfig(BaseSettings):
    """Main configuration aggregating all settings.

    Example usage:
        config = RecallKitConfig()
        retention = config.scheduler.request_retention
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    mongo: MongoSettings = MongoSettings()
    scheduler: SchedulerSettings = SchedulerSettings()
    session: SessionSettings = SessionSettings()
    progress: ProgressSettings = ProgressSettings()
