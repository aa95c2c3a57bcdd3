from __future__ import annotations

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

from .errors import ConfigError

MIN_MAX_FACTOR = 2
MAX_MAX_FACTOR = 12
QUESTION_COUNTS: tuple[int, ...] = (5, 10, 20)

FEEDBACK_ENV = "MATH_SMASH_FEEDBACK_S"
PAUSE_ENV = "MATH_SMASH_PAUSE_S"
LOCK_INPUT_ENV = "MATH_SMASH_LOCK_INPUT"
LOG_FORMAT_ENV = "MATH_SMASH_LOG_FORMAT"

LOG_FORMATS: tuple[str, ...] = ("console", "json")


def clamp_max_factor(value: int) -> int:
    return max(MIN_MAX_FACTOR, min(MAX_MAX_FACTOR, int(value)))


@dataclass(frozen=True, slots=True)
class QuizConfig:
    """User-chosen generation parameters, edited on the settings screen."""

    max_factor: int = MIN_MAX_FACTOR
    question_count: int = QUESTION_COUNTS[0]

    def __post_init__(self) -> None:
        if not (MIN_MAX_FACTOR <= self.max_factor <= MAX_MAX_FACTOR):
            raise ValueError(f"max_factor must be in [{MIN_MAX_FACTOR}, {MAX_MAX_FACTOR}]")
        if self.question_count not in QUESTION_COUNTS:
            raise ValueError(f"question_count must be one of {QUESTION_COUNTS}")

    def with_max_factor(self, value: int) -> "QuizConfig":
        return replace(self, max_factor=clamp_max_factor(value))

    def step_max_factor(self, delta: int) -> "QuizConfig":
        return self.with_max_factor(self.max_factor + delta)

    def with_question_count(self, value: int) -> "QuizConfig":
        if value not in QUESTION_COUNTS:
            raise ValueError(f"question_count must be one of {QUESTION_COUNTS}")
        return replace(self, question_count=int(value))


@dataclass(frozen=True, slots=True)
class QuizSettings:
    """Runtime tunables that are not exposed on the settings screen."""

    feedback_duration_s: float = 1.5
    pause_duration_s: float = 0.3
    max_input_length: int = 3
    lock_input_during_feedback: bool = True
    log_format: str = "console"

    def __post_init__(self) -> None:
        if not math.isfinite(self.feedback_duration_s):
            raise ConfigError("feedback_duration_s", self.feedback_duration_s, "must be a finite number of seconds")
        if not math.isfinite(self.pause_duration_s):
            raise ConfigError("pause_duration_s", self.pause_duration_s, "must be a finite number of seconds")
        if self.feedback_duration_s < 0:
            raise ConfigError("feedback_duration_s", self.feedback_duration_s, "must be >= 0")
        if self.pause_duration_s < 0:
            raise ConfigError("pause_duration_s", self.pause_duration_s, "must be >= 0")
        if self.max_input_length < 1:
            raise ConfigError("max_input_length", self.max_input_length, "must be >= 1")
        if self.log_format not in LOG_FORMATS:
            raise ConfigError("log_format", self.log_format, f"must be one of {LOG_FORMATS}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "QuizSettings":
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            feedback_duration_s=_env_float(env, FEEDBACK_ENV, defaults.feedback_duration_s),
            pause_duration_s=_env_float(env, PAUSE_ENV, defaults.pause_duration_s),
            max_input_length=defaults.max_input_length,
            lock_input_during_feedback=_env_bool(env, LOCK_INPUT_ENV, defaults.lock_input_during_feedback),
            log_format=env.get(LOG_FORMAT_ENV, defaults.log_format).strip().lower() or defaults.log_format,
        )


def _env_float(env: Mapping[str, str], name: str, fallback: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return fallback
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(name, raw, "expected a number of seconds") from None
    if not math.isfinite(value):
        raise ConfigError(name, raw, "must be a finite number of seconds")
    if value < 0:
        raise ConfigError(name, raw, "must be >= 0")
    return value


def _env_bool(env: Mapping[str, str], name: str, fallback: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return fallback
    lowered = raw.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ConfigError(name, raw, "expected a boolean")
