"""Quiz session state machine.

The session moves through three screens::

    SETTINGS -> PLAYING -> RESULTS -> SETTINGS

Each screen has its own frozen state type and every change goes through
:func:`reduce`, which maps ``(state, action)`` to a :class:`Transition`
holding the next state and any actions to run later.  :class:`QuizSession`
is the driver used by the UI: it generates question batches, keeps the
delayed actions on a clock-based timer list and dispatches them from
:meth:`QuizSession.update`, which the frame loop calls every tick.

After an answer is submitted the round goes ANSWERING -> FEEDBACK -> PAUSE
and then either advances to the next question or finishes the game.  The
two delayed actions carry the generation token and question index they were
scheduled for; if the session has moved on by the time they fire they are
dropped without touching state.
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field, replace
from enum import Enum

from .clock import Clock
from .config import QuizConfig, QuizSettings
from .observer import SessionObserver, StructlogSessionObserver
from .questions import Question, QuestionGenerator, max_distinct_questions

CORRECT_TEXT = "Correct!"
WRONG_TEXT = "Wrong!"

DIGITS = "0123456789"

KEY_CLEAR = "C"
KEY_BACKSPACE = "⌫"
KEYPAD_ROWS: tuple[tuple[str, ...], ...] = (
    ("1", "2", "3"),
    ("4", "5", "6"),
    ("7", "8", "9"),
    (KEY_CLEAR, "0", KEY_BACKSPACE),
)


class Screen(str, Enum):
    SETTINGS = "settings"
    PLAYING = "playing"
    RESULTS = "results"


class RoundPhase(str, Enum):
    ANSWERING = "answering"
    FEEDBACK = "feedback"
    PAUSE = "pause"


@dataclass(frozen=True, slots=True)
class Feedback:
    text: str
    is_correct: bool


@dataclass(frozen=True, slots=True)
class AnswerRecord:
    index: int
    question: Question
    raw: str
    value: int
    is_correct: bool
    presented_at_s: float
    answered_at_s: float

    @property
    def response_time_s(self) -> float:
        return max(0.0, self.answered_at_s - self.presented_at_s)


@dataclass(frozen=True, slots=True)
class QuizSummary:
    attempted: int
    correct: int
    accuracy: float
    mean_response_time_s: float | None


# -- States -------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SettingsState:
    config: QuizConfig = field(default_factory=QuizConfig)
    generation: int = 0

    @property
    def screen(self) -> Screen:
        return Screen.SETTINGS


@dataclass(frozen=True, slots=True)
class PlayingState:
    config: QuizConfig
    questions: tuple[Question, ...]
    generation: int
    index: int = 0
    score: int = 0
    pending_input: str = ""
    feedback: Feedback | None = None
    round_phase: RoundPhase = RoundPhase.ANSWERING
    presented_at_s: float = 0.0
    answers: tuple[AnswerRecord, ...] = ()

    @property
    def screen(self) -> Screen:
        return Screen.PLAYING

    @property
    def current(self) -> Question:
        return self.questions[self.index]

    @property
    def accepting_answer(self) -> bool:
        return self.round_phase is RoundPhase.ANSWERING


@dataclass(frozen=True, slots=True)
class ResultsState:
    config: QuizConfig
    questions: tuple[Question, ...]
    generation: int
    score: int
    answers: tuple[AnswerRecord, ...] = ()

    @property
    def screen(self) -> Screen:
        return Screen.RESULTS


QuizState = SettingsState | PlayingState | ResultsState


# -- Actions ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SetMaxFactor:
    value: int


@dataclass(frozen=True, slots=True)
class StepMaxFactor:
    delta: int


@dataclass(frozen=True, slots=True)
class SetQuestionCount:
    value: int


@dataclass(frozen=True, slots=True)
class StartGame:
    questions: tuple[Question, ...]
    now_s: float = 0.0


@dataclass(frozen=True, slots=True)
class PressDigit:
    digit: str


@dataclass(frozen=True, slots=True)
class ClearInput:
    pass


@dataclass(frozen=True, slots=True)
class Backspace:
    pass


@dataclass(frozen=True, slots=True)
class Submit:
    now_s: float = 0.0


@dataclass(frozen=True, slots=True)
class FeedbackElapsed:
    generation: int
    index: int


@dataclass(frozen=True, slots=True)
class PauseElapsed:
    generation: int
    index: int
    now_s: float = 0.0


@dataclass(frozen=True, slots=True)
class AbandonGame:
    pass


@dataclass(frozen=True, slots=True)
class PlayAgain:
    pass


Action = (
    SetMaxFactor
    | StepMaxFactor
    | SetQuestionCount
    | StartGame
    | PressDigit
    | ClearInput
    | Backspace
    | Submit
    | FeedbackElapsed
    | PauseElapsed
    | AbandonGame
    | PlayAgain
)

TimerAction = FeedbackElapsed | PauseElapsed


@dataclass(frozen=True, slots=True)
class Scheduled:
    delay_s: float
    action: TimerAction


@dataclass(frozen=True, slots=True)
class Transition:
    state: QuizState
    accepted: bool = True
    schedule: tuple[Scheduled, ...] = ()


# -- Reducer ------------------------------------------------------------------


def parse_answer(raw: str) -> int | None:
    s = raw.strip()
    if not s:
        return None
    try:
        return int(s)
    except ValueError:
        return None


def reduce(state: QuizState, action: Action, settings: QuizSettings) -> Transition:
    """Return the transition for ``action`` applied to ``state``.

    Actions that do not apply to the current screen, or that are refused by
    the current round phase, come back with ``accepted=False`` and the same
    state object.
    """
    rejected = Transition(state, accepted=False)

    if isinstance(state, SettingsState):
        if isinstance(action, SetMaxFactor):
            return Transition(replace(state, config=state.config.with_max_factor(action.value)))
        if isinstance(action, StepMaxFactor):
            return Transition(replace(state, config=state.config.step_max_factor(action.delta)))
        if isinstance(action, SetQuestionCount):
            return Transition(replace(state, config=state.config.with_question_count(action.value)))
        if isinstance(action, StartGame):
            if not action.questions:
                return rejected
            return Transition(
                PlayingState(
                    config=state.config,
                    questions=tuple(action.questions),
                    generation=state.generation + 1,
                    presented_at_s=action.now_s,
                )
            )
        return rejected

    if isinstance(state, PlayingState):
        return _reduce_playing(state, action, settings)

    if isinstance(action, PlayAgain):
        return Transition(SettingsState(config=state.config, generation=state.generation + 1))
    return rejected


def _reduce_playing(state: PlayingState, action: Action, settings: QuizSettings) -> Transition:
    rejected = Transition(state, accepted=False)
    input_locked = settings.lock_input_during_feedback and not state.accepting_answer

    if isinstance(action, PressDigit):
        if input_locked or len(action.digit) != 1 or action.digit not in DIGITS:
            return rejected
        if len(state.pending_input) >= settings.max_input_length:
            return rejected
        return Transition(replace(state, pending_input=state.pending_input + action.digit))

    if isinstance(action, ClearInput):
        if input_locked:
            return rejected
        return Transition(replace(state, pending_input=""))

    if isinstance(action, Backspace):
        if input_locked or not state.pending_input:
            return rejected
        return Transition(replace(state, pending_input=state.pending_input[:-1]))

    if isinstance(action, Submit):
        if not state.accepting_answer:
            return rejected
        value = parse_answer(state.pending_input)
        if value is None:
            return rejected
        question = state.current
        is_correct = value == question.answer
        record = AnswerRecord(
            index=state.index,
            question=question,
            raw=state.pending_input,
            value=value,
            is_correct=is_correct,
            presented_at_s=state.presented_at_s,
            answered_at_s=action.now_s,
        )
        next_state = replace(
            state,
            score=state.score + 1 if is_correct else state.score,
            pending_input="",
            feedback=Feedback(CORRECT_TEXT if is_correct else WRONG_TEXT, is_correct),
            round_phase=RoundPhase.FEEDBACK,
            answers=state.answers + (record,),
        )
        timer = FeedbackElapsed(generation=state.generation, index=state.index)
        return Transition(next_state, schedule=(Scheduled(settings.feedback_duration_s, timer),))

    if isinstance(action, FeedbackElapsed):
        if not _timer_matches(state, action.generation, action.index, RoundPhase.FEEDBACK):
            return rejected
        timer = PauseElapsed(generation=state.generation, index=state.index)
        return Transition(
            replace(state, feedback=None, round_phase=RoundPhase.PAUSE),
            schedule=(Scheduled(settings.pause_duration_s, timer),),
        )

    if isinstance(action, PauseElapsed):
        if not _timer_matches(state, action.generation, action.index, RoundPhase.PAUSE):
            return rejected
        if state.index + 1 < len(state.questions):
            return Transition(
                replace(
                    state,
                    index=state.index + 1,
                    round_phase=RoundPhase.ANSWERING,
                    presented_at_s=action.now_s,
                )
            )
        return Transition(
            ResultsState(
                config=state.config,
                questions=state.questions,
                generation=state.generation,
                score=state.score,
                answers=state.answers,
            )
        )

    if isinstance(action, AbandonGame):
        return Transition(SettingsState(config=state.config, generation=state.generation + 1))

    return rejected


def _timer_matches(state: PlayingState, generation: int, index: int, phase: RoundPhase) -> bool:
    return state.generation == generation and state.index == index and state.round_phase is phase


def summarize(answers: tuple[AnswerRecord, ...]) -> QuizSummary:
    attempted = len(answers)
    correct = sum(1 for a in answers if a.is_correct)
    accuracy = 0.0 if attempted == 0 else correct / attempted
    rts = [a.response_time_s for a in answers]
    mean_rt = None if not rts else sum(rts) / len(rts)
    return QuizSummary(attempted=attempted, correct=correct, accuracy=accuracy, mean_response_time_s=mean_rt)


# -- View model ---------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class QuizSnapshot:
    """View model for the UI (pure data)."""

    screen: Screen
    title: str
    max_factor: int
    question_count: int
    start_enabled: bool = False
    notice: str | None = None
    progress: str = ""
    prompt: str = ""
    input_display: str = ""
    submit_enabled: bool = False
    input_locked: bool = False
    feedback: Feedback | None = None
    score: int = 0
    total: int = 0
    score_text: str = ""


def snapshot_of(state: QuizState, settings: QuizSettings) -> QuizSnapshot:
    config = state.config
    if isinstance(state, SettingsState):
        available = max_distinct_questions(config.max_factor)
        feasible = config.question_count <= available
        notice = None
        if not feasible:
            notice = f"Tables up to {config.max_factor} only have {available} different questions."
        return QuizSnapshot(
            screen=state.screen,
            title="Choose Tables",
            max_factor=config.max_factor,
            question_count=config.question_count,
            start_enabled=feasible,
            notice=notice,
        )

    if isinstance(state, PlayingState):
        total = len(state.questions)
        return QuizSnapshot(
            screen=state.screen,
            title="Math Smash",
            max_factor=config.max_factor,
            question_count=config.question_count,
            progress=f"Question {state.index + 1} of {total}",
            prompt=state.current.text,
            input_display=state.pending_input or "?",
            submit_enabled=state.accepting_answer and state.pending_input != "",
            input_locked=settings.lock_input_during_feedback and not state.accepting_answer,
            feedback=state.feedback,
            score=state.score,
            total=total,
        )

    total = len(state.questions)
    return QuizSnapshot(
        screen=state.screen,
        title="Great Job!",
        max_factor=config.max_factor,
        question_count=config.question_count,
        score=state.score,
        total=total,
        score_text=f"You scored {state.score} out of {total}",
    )


# -- Driver -------------------------------------------------------------------


class QuizSession:
    """Owns the current state and the timer list for delayed transitions.

    - Deterministic: questions come from a generator seeded at construction.
    - Time is entirely via injected Clock; timers fire from :meth:`update`.
    """

    def __init__(
        self,
        *,
        clock: Clock,
        seed: int | None = None,
        settings: QuizSettings | None = None,
        config: QuizConfig | None = None,
        observer: SessionObserver | None = None,
        generator: QuestionGenerator | None = None,
    ) -> None:
        self._clock = clock
        self._settings = settings if settings is not None else QuizSettings()
        self._observer: SessionObserver = observer if observer is not None else StructlogSessionObserver()
        self._generator = generator if generator is not None else QuestionGenerator(seed)
        self._state: QuizState = SettingsState(config=config if config is not None else QuizConfig())
        self._timers: list[tuple[float, int, TimerAction]] = []
        self._timer_seq = itertools.count()

    @property
    def state(self) -> QuizState:
        return self._state

    @property
    def screen(self) -> Screen:
        return self._state.screen

    @property
    def settings(self) -> QuizSettings:
        return self._settings

    @property
    def config(self) -> QuizConfig:
        return self._state.config

    def pending_timers(self) -> int:
        return len(self._timers)

    def snapshot(self) -> QuizSnapshot:
        return snapshot_of(self._state, self._settings)

    def summary(self) -> QuizSummary:
        answers = self._state.answers if not isinstance(self._state, SettingsState) else ()
        return summarize(answers)

    # Settings screen.

    def set_max_factor(self, value: int) -> bool:
        return self._dispatch(SetMaxFactor(value))

    def step_max_factor(self, delta: int) -> bool:
        return self._dispatch(StepMaxFactor(delta))

    def set_question_count(self, value: int) -> bool:
        return self._dispatch(SetQuestionCount(value))

    def start_game(self) -> bool:
        """Generate a question batch and enter the playing screen.

        Raises InfeasibleConfigError if the configuration cannot yield enough
        distinct questions; the state is left unchanged in that case.
        """
        if not isinstance(self._state, SettingsState):
            return False
        config = self._state.config
        questions = self._generator.generate(config.max_factor, config.question_count)
        return self._dispatch(StartGame(tuple(questions), now_s=self._clock.now()))

    # Playing screen.

    def press_key(self, label: str) -> bool:
        """Apply one keypad button by its label (digit, ``C`` or ``⌫``)."""
        if label == KEY_CLEAR:
            return self.clear_input()
        if label == KEY_BACKSPACE:
            return self.backspace()
        return self.press_digit(label)

    def press_digit(self, digit: str) -> bool:
        return self._dispatch(PressDigit(digit))

    def clear_input(self) -> bool:
        return self._dispatch(ClearInput())

    def backspace(self) -> bool:
        return self._dispatch(Backspace())

    def submit(self) -> bool:
        """Submit the pending input. Returns False (no-op) when it is not a number."""
        return self._dispatch(Submit(now_s=self._clock.now()))

    def abandon(self) -> bool:
        return self._dispatch(AbandonGame())

    # Results screen.

    def play_again(self) -> bool:
        return self._dispatch(PlayAgain())

    # Timers.

    def update(self) -> None:
        """Fire every timer whose due time has passed, in due order.

        A timer scheduled by another timer is anchored to its parent's due
        time, so one late update can run a whole feedback/pause chain.
        """
        now = self._clock.now()
        while self._timers and self._timers[0][0] <= now:
            due_at, _, action = heapq.heappop(self._timers)
            if isinstance(action, PauseElapsed):
                action = replace(action, now_s=due_at)
            self._dispatch(action, at_s=due_at)

    def _dispatch(self, action: Action, *, at_s: float | None = None) -> bool:
        before = self._state
        transition = reduce(before, action, self._settings)
        self._state = transition.state

        base = self._clock.now() if at_s is None else at_s
        for item in transition.schedule:
            heapq.heappush(self._timers, (base + item.delay_s, next(self._timer_seq), item.action))

        if transition.accepted:
            self._notify(before, action)
        elif isinstance(action, (FeedbackElapsed, PauseElapsed)):
            self._observer.timer_stale(type(action).__name__, action.generation, self._state.generation)
        return transition.accepted

    def _notify(self, before: QuizState, action: Action) -> None:
        after = self._state
        if isinstance(action, (SetMaxFactor, StepMaxFactor, SetQuestionCount)):
            self._observer.config_changed(after.config.max_factor, after.config.question_count)
        elif isinstance(action, StartGame):
            self._observer.game_started(after.generation, after.config.max_factor, after.config.question_count)
        elif isinstance(action, Submit) and isinstance(after, PlayingState):
            record = after.answers[-1]
            self._observer.answer_submitted(
                after.generation,
                record.index,
                record.question.text,
                record.raw,
                record.is_correct,
                after.score,
            )
        elif isinstance(action, PauseElapsed):
            if isinstance(after, PlayingState):
                self._observer.question_advanced(after.generation, after.index, len(after.questions))
            elif isinstance(after, ResultsState):
                self._observer.game_finished(after.generation, after.score, len(after.questions))
        elif isinstance(action, AbandonGame) and isinstance(before, PlayingState):
            self._observer.game_abandoned(before.generation, before.index, before.score)
        elif isinstance(action, PlayAgain):
            self._observer.game_reset(after.generation)
