"""Observer port for quiz session events, plus the structlog implementation."""

from __future__ import annotations

from typing import Protocol

import structlog


class SessionObserver(Protocol):
    """Receives structured events as the session moves between screens.

    Implementations may log to structlog or record for tests.
    """

    def config_changed(self, max_factor: int, question_count: int) -> None: ...

    def game_started(self, generation: int, max_factor: int, question_count: int) -> None: ...

    def answer_submitted(
        self,
        generation: int,
        index: int,
        question: str,
        raw: str,
        is_correct: bool,
        score: int,
    ) -> None: ...

    def question_advanced(self, generation: int, index: int, total: int) -> None: ...

    def game_finished(self, generation: int, score: int, total: int) -> None: ...

    def game_abandoned(self, generation: int, index: int, score: int) -> None: ...

    def game_reset(self, generation: int) -> None: ...

    def timer_stale(self, timer: str, timer_generation: int, current_generation: int) -> None: ...


class StructlogSessionObserver:
    """Logs session events to structlog.

    Does NOT inherit from SessionObserver (structural typing via Protocol).
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger("math_smash")

    def config_changed(self, max_factor: int, question_count: int) -> None:
        self._log.debug("quiz.config.changed", max_factor=max_factor, question_count=question_count)

    def game_started(self, generation: int, max_factor: int, question_count: int) -> None:
        self._log.info(
            "quiz.game.started",
            generation=generation,
            max_factor=max_factor,
            question_count=question_count,
        )

    def answer_submitted(
        self,
        generation: int,
        index: int,
        question: str,
        raw: str,
        is_correct: bool,
        score: int,
    ) -> None:
        self._log.info(
            "quiz.answer.submitted",
            generation=generation,
            index=index,
            question=question,
            raw=raw,
            is_correct=is_correct,
            score=score,
        )

    def question_advanced(self, generation: int, index: int, total: int) -> None:
        self._log.debug("quiz.question.advanced", generation=generation, index=index, total=total)

    def game_finished(self, generation: int, score: int, total: int) -> None:
        self._log.info("quiz.game.finished", generation=generation, score=score, total=total)

    def game_abandoned(self, generation: int, index: int, score: int) -> None:
        self._log.info("quiz.game.abandoned", generation=generation, index=index, score=score)

    def game_reset(self, generation: int) -> None:
        self._log.debug("quiz.game.reset", generation=generation)

    def timer_stale(self, timer: str, timer_generation: int, current_generation: int) -> None:
        self._log.warning(
            "quiz.timer.stale",
            timer=timer,
            timer_generation=timer_generation,
            current_generation=current_generation,
        )
