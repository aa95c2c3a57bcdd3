"""Scripted end-to-end runs of the quiz session on a fake clock."""

from __future__ import annotations

import pytest

from math_smash.config import QuizConfig, QuizSettings
from math_smash.session import PlayingState, QuizSession, ResultsState, RoundPhase, Screen, SettingsState

from .fakes import FakeClock, FakeSessionObserver, FixedGenerator


def _type_answer(session: QuizSession, value: int) -> None:
    for ch in str(value):
        session.press_digit(ch)


def test_headless_scripted_run_produces_expected_score() -> None:
    clock = FakeClock()
    observer = FakeSessionObserver()
    session = QuizSession(
        clock=clock,
        seed=555,
        config=QuizConfig(max_factor=6, question_count=5),
        observer=observer,
    )
    session.start_game()

    # Answer the 2nd and 4th questions wrongly.
    for i in range(5):
        state = session.state
        assert isinstance(state, PlayingState)
        assert state.index == i
        answer = state.current.answer
        clock.advance(1.0)
        _type_answer(session, answer + 1 if i in (1, 3) else answer)
        assert session.submit() is True

        clock.advance(1.6)
        session.update()
        assert session.screen is Screen.PLAYING
        assert session.state.feedback is None  # type: ignore[union-attr]
        assert session.state.round_phase is RoundPhase.PAUSE  # type: ignore[union-attr]

        clock.advance(0.4)
        session.update()

    final = session.state
    assert isinstance(final, ResultsState)
    assert final.score == 3
    assert session.snapshot().score_text == "You scored 3 out of 5"

    summary = session.summary()
    assert summary.attempted == 5
    assert summary.correct == 3
    assert summary.accuracy == 3 / 5
    # First question was shown at t=0; later ones when the previous pause ended.
    assert summary.mean_response_time_s == pytest.approx((1.0 + 4 * 1.2) / 5)

    assert observer.advanced == [1, 2, 3, 4]
    assert len(observer.answers) == 5
    assert observer.finished[0].score == 3
    assert observer.stale == []


def test_one_late_update_runs_the_whole_delay_chain() -> None:
    clock = FakeClock()
    session = QuizSession(
        clock=clock,
        config=QuizConfig(max_factor=12, question_count=5),
        observer=FakeSessionObserver(),
        generator=FixedGenerator([(3, 4), (5, 6), (2, 2), (7, 7), (9, 8)]),  # type: ignore[arg-type]
    )
    session.start_game()
    _type_answer(session, 12)
    session.submit()

    clock.advance(1.79)
    session.update()
    assert session.state.index == 0  # type: ignore[union-attr]

    clock.advance(0.11)
    session.update()
    state = session.state
    assert isinstance(state, PlayingState)
    assert state.index == 1
    assert state.round_phase is RoundPhase.ANSWERING
    assert state.presented_at_s == pytest.approx(1.8)
    assert session.pending_timers() == 0


def test_double_submit_during_feedback_is_refused() -> None:
    clock = FakeClock()
    session = QuizSession(
        clock=clock,
        config=QuizConfig(max_factor=12, question_count=5),
        observer=FakeSessionObserver(),
        settings=QuizSettings(lock_input_during_feedback=False),
        generator=FixedGenerator([(3, 4)] * 5),  # type: ignore[arg-type]
    )
    session.start_game()
    _type_answer(session, 12)
    session.submit()
    _type_answer(session, 12)
    assert session.submit() is False
    assert session.state.score == 1  # type: ignore[union-attr]
    assert session.pending_timers() == 1


def test_input_is_locked_during_feedback_by_default() -> None:
    clock = FakeClock()
    session = QuizSession(
        clock=clock,
        config=QuizConfig(max_factor=12, question_count=5),
        observer=FakeSessionObserver(),
        generator=FixedGenerator([(3, 4), (5, 6), (2, 2), (7, 7), (9, 8)]),  # type: ignore[arg-type]
    )
    session.start_game()
    _type_answer(session, 12)
    session.submit()

    assert session.press_digit("3") is False
    clock.advance(1.5)
    session.update()
    assert session.press_digit("3") is False
    clock.advance(0.3)
    session.update()
    assert session.state.pending_input == ""  # type: ignore[union-attr]
    assert session.press_digit("3") is True


def test_unlocked_input_carries_into_next_question() -> None:
    clock = FakeClock()
    session = QuizSession(
        clock=clock,
        config=QuizConfig(max_factor=12, question_count=5),
        observer=FakeSessionObserver(),
        settings=QuizSettings(lock_input_during_feedback=False),
        generator=FixedGenerator([(3, 4), (5, 6), (2, 2), (7, 7), (9, 8)]),  # type: ignore[arg-type]
    )
    session.start_game()
    _type_answer(session, 12)
    session.submit()

    _type_answer(session, 30)
    clock.advance(2.0)
    session.update()
    state = session.state
    assert isinstance(state, PlayingState)
    assert state.index == 1
    assert state.pending_input == "30"
    assert session.submit() is True
    assert session.state.score == 2  # type: ignore[union-attr]


def test_stale_timers_after_abandon_do_not_touch_new_game() -> None:
    clock = FakeClock()
    observer = FakeSessionObserver()
    session = QuizSession(
        clock=clock,
        config=QuizConfig(max_factor=12, question_count=5),
        observer=observer,
        generator=FixedGenerator([(3, 4), (5, 6), (2, 2), (7, 7), (9, 8)]),  # type: ignore[arg-type]
    )
    session.start_game()
    _type_answer(session, 12)
    session.submit()

    assert session.abandon() is True
    assert isinstance(session.state, SettingsState)
    session.start_game()
    fresh = session.state
    assert isinstance(fresh, PlayingState)

    clock.advance(5.0)
    session.update()
    assert session.state is fresh
    assert session.pending_timers() == 0
    assert len(observer.stale) == 1
    assert observer.stale[0].timer == "FeedbackElapsed"
    assert observer.stale[0].timer_generation == 1
    assert observer.stale[0].current_generation == 3


def test_play_again_after_results_clears_everything() -> None:
    clock = FakeClock()
    observer = FakeSessionObserver()
    session = QuizSession(
        clock=clock,
        config=QuizConfig(max_factor=12, question_count=5),
        observer=observer,
        generator=FixedGenerator([(3, 4), (5, 6), (2, 2), (7, 7), (9, 8)]),  # type: ignore[arg-type]
    )
    session.start_game()
    for _ in range(5):
        session.press_digit("1")
        session.submit()
        clock.advance(2.0)
        session.update()
    assert session.screen is Screen.RESULTS
    assert session.state.score == 0  # type: ignore[union-attr]

    assert session.play_again() is True
    state = session.state
    assert isinstance(state, SettingsState)
    snap = session.snapshot()
    assert snap.score == 0
    assert snap.progress == ""
    assert snap.input_display == ""
    assert session.summary().attempted == 0
    assert observer.resets == [state.generation]
