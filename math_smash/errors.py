"""Error types raised by the quiz core."""

from __future__ import annotations


class MathSmashError(Exception):
    """Base class for all Math Smash errors."""


class InfeasibleConfigError(MathSmashError, ValueError):
    """Raised when more distinct questions are requested than factor pairs exist."""

    def __init__(self, max_factor: int, count: int) -> None:
        self.max_factor = max_factor
        self.count = count
        super().__init__(
            f"Cannot generate {count} distinct questions: tables up to {max_factor}"
            f" only have {max_factor * max_factor} factor pairs"
        )


class ConfigError(MathSmashError, ValueError):
    """Raised when a runtime setting cannot be parsed or is out of range."""

    def __init__(self, name: str, value: object, reason: str) -> None:
        self.name = name
        self.value = value
        super().__init__(f"Invalid setting {name}={value!r}: {reason}")
