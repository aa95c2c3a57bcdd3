from __future__ import annotations

import pytest

from math_smash.config import QuizConfig, QuizSettings
from math_smash.errors import ConfigError


def test_defaults_match_first_launch() -> None:
    config = QuizConfig()
    assert config.max_factor == 2
    assert config.question_count == 5


def test_max_factor_is_clamped() -> None:
    config = QuizConfig()
    assert config.with_max_factor(1).max_factor == 2
    assert config.with_max_factor(99).max_factor == 12
    assert config.with_max_factor(7).max_factor == 7
    assert QuizConfig(max_factor=12).step_max_factor(1).max_factor == 12
    assert QuizConfig(max_factor=2).step_max_factor(-1).max_factor == 2


def test_question_count_is_restricted_to_choices() -> None:
    config = QuizConfig()
    assert config.with_question_count(20).question_count == 20
    with pytest.raises(ValueError):
        config.with_question_count(7)
    with pytest.raises(ValueError):
        QuizConfig(question_count=3)
    with pytest.raises(ValueError):
        QuizConfig(max_factor=13)


def test_settings_from_empty_env_uses_defaults() -> None:
    settings = QuizSettings.from_env({})
    assert settings == QuizSettings()
    assert settings.feedback_duration_s == 1.5
    assert settings.pause_duration_s == 0.3
    assert settings.max_input_length == 3
    assert settings.lock_input_during_feedback is True


def test_settings_from_env_overrides() -> None:
    settings = QuizSettings.from_env(
        {
            "MATH_SMASH_FEEDBACK_S": "0.5",
            "MATH_SMASH_PAUSE_S": "0",
            "MATH_SMASH_LOCK_INPUT": "off",
            "MATH_SMASH_LOG_FORMAT": "JSON",
        }
    )
    assert settings.feedback_duration_s == 0.5
    assert settings.pause_duration_s == 0.0
    assert settings.lock_input_during_feedback is False
    assert settings.log_format == "json"


@pytest.mark.parametrize(
    "env",
    [
        {"MATH_SMASH_FEEDBACK_S": "soon"},
        {"MATH_SMASH_FEEDBACK_S": "nan"},
        {"MATH_SMASH_PAUSE_S": "-1"},
        {"MATH_SMASH_PAUSE_S": "inf"},
        {"MATH_SMASH_LOCK_INPUT": "maybe"},
        {"MATH_SMASH_LOG_FORMAT": "xml"},
    ],
)
def test_settings_from_env_rejects_bad_values(env: dict[str, str]) -> None:
    with pytest.raises(ConfigError):
        QuizSettings.from_env(env)


@pytest.mark.parametrize("field", ["feedback_duration_s", "pause_duration_s"])
@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_settings_reject_non_finite_durations(field: str, value: float) -> None:
    with pytest.raises(ConfigError):
        QuizSettings(**{field: value})
