"""Pygame front end for Math Smash.

All quiz logic (question generation, scoring, feedback timing) lives in
``session``; this module only renders the current :class:`QuizSnapshot` and
turns keyboard and mouse input into session calls.  Clickable regions are
recorded as hitboxes while rendering and looked up on the next mouse press.
"""

from __future__ import annotations

import random
from collections.abc import Callable
from typing import Protocol

import pygame
import structlog

from .clock import PygameTickClock
from .config import QUESTION_COUNTS, QuizSettings
from .errors import InfeasibleConfigError
from .logging_config import configure_logging
from .session import DIGITS, KEY_BACKSPACE, KEY_CLEAR, KEYPAD_ROWS, QuizSession, QuizSnapshot, Screen

WINDOW_SIZE = (540, 860)
TARGET_FPS = 60

TEXT_MAIN = (255, 255, 255)
TEXT_DARK = (20, 20, 30)
TEXT_MUTED = (220, 220, 240)
BG_TOP = (40, 90, 230)
BG_BOTTOM = (130, 50, 190)
BUTTON_BLUE = (40, 110, 240)
BUTTON_KEY = (90, 140, 245)
BUTTON_IDLE = (190, 190, 205)
BUTTON_GREEN = (40, 170, 80)
BUTTON_DISABLED = (130, 130, 140)
INPUT_BG = (200, 200, 215)
FEEDBACK_GOOD = (60, 220, 110)
FEEDBACK_BAD = (235, 70, 70)

_KEY_CAPTIONS = {KEY_BACKSPACE: "<-"}
_COUNT_KEYS = {pygame.K_1: QUESTION_COUNTS[0], pygame.K_2: QUESTION_COUNTS[1], pygame.K_3: QUESTION_COUNTS[2]}

log = structlog.get_logger("math_smash.app")


class View(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


class App:
    def __init__(self, surface: pygame.Surface) -> None:
        self._surface = surface
        self._screens: list[View] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    def push(self, screen: View) -> None:
        self._screens.append(screen)

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


class QuizScreen:
    """Single screen showing settings, questions or results for one session."""

    def __init__(self, app: App, *, session: QuizSession) -> None:
        self._app = app
        self._session = session
        self._notice: str | None = None

        self._title_font = pygame.font.Font(None, 56)
        self._big_font = pygame.font.Font(None, 84)
        self._mid_font = pygame.font.Font(None, 40)
        self._small_font = pygame.font.Font(None, 28)

        # Button id -> rect, refreshed during render.
        self._hitboxes: dict[str, pygame.Rect] = {}

        self._background: pygame.Surface | None = None

    @property
    def session(self) -> QuizSession:
        return self._session

    def hitbox(self, button_id: str) -> pygame.Rect | None:
        """Rect of a clickable button from the last render, if it was drawn enabled."""
        return self._hitboxes.get(button_id)

    # -- Event handling -----------------------------------------------------
    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            self._handle_key(event)
            return
        if event.type == pygame.MOUSEBUTTONDOWN and getattr(event, "button", 0) == 1:
            pos = getattr(event, "pos", None)
            if pos is None:
                return
            for button_id, rect in list(self._hitboxes.items()):
                if rect.collidepoint(pos):
                    self._activate(button_id)
                    return

    def _handle_key(self, event: pygame.event.Event) -> None:
        screen = self._session.screen
        key = event.key

        if screen is Screen.SETTINGS:
            if key in (pygame.K_LEFT, pygame.K_MINUS, pygame.K_KP_MINUS):
                self._activate("minus")
            elif key in (pygame.K_RIGHT, pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
                self._activate("plus")
            elif key in _COUNT_KEYS:
                self._activate(f"count:{_COUNT_KEYS[key]}")
            elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
                self._activate("start")
            elif key == pygame.K_ESCAPE:
                self._app.quit()
            return

        if screen is Screen.PLAYING:
            if key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                self._activate("submit")
            elif key == pygame.K_BACKSPACE:
                self._activate(f"key:{KEY_BACKSPACE}")
            elif key in (pygame.K_DELETE, pygame.K_c):
                self._activate(f"key:{KEY_CLEAR}")
            elif key == pygame.K_ESCAPE:
                self._session.abandon()
                self._notice = None
            elif len(event.unicode) == 1 and event.unicode in DIGITS:
                self._activate(f"key:{event.unicode}")
            return

        if key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._activate("play_again")
        elif key == pygame.K_ESCAPE:
            self._app.quit()

    def _activate(self, button_id: str) -> None:
        session = self._session
        if button_id == "minus":
            session.step_max_factor(-1)
            self._notice = None
        elif button_id == "plus":
            session.step_max_factor(1)
            self._notice = None
        elif button_id.startswith("count:"):
            session.set_question_count(int(button_id.split(":", 1)[1]))
            self._notice = None
        elif button_id == "start":
            try:
                session.start_game()
            except InfeasibleConfigError as exc:
                log.info("quiz.start.refused", reason=str(exc))
                self._notice = str(exc)
        elif button_id.startswith("key:"):
            session.press_key(button_id.split(":", 1)[1])
        elif button_id == "submit":
            session.submit()
        elif button_id == "play_again":
            session.play_again()

    # -- Rendering ----------------------------------------------------------
    def render(self, surface: pygame.Surface) -> None:
        self._session.update()
        snap = self._session.snapshot()

        self._hitboxes = {}
        surface.blit(self._background_for(surface.get_size()), (0, 0))

        if snap.screen is Screen.SETTINGS:
            self._render_settings(surface, snap)
        elif snap.screen is Screen.PLAYING:
            self._render_playing(surface, snap)
        else:
            self._render_results(surface, snap)

    def _background_for(self, size: tuple[int, int]) -> pygame.Surface:
        if self._background is not None and self._background.get_size() == size:
            return self._background
        w, h = size
        bg = pygame.Surface(size)
        for y in range(h):
            t = y / max(1, h - 1)
            color = tuple(int(round(a + (b - a) * t)) for a, b in zip(BG_TOP, BG_BOTTOM))
            pygame.draw.line(bg, color, (0, y), (w, y))
        self._background = bg
        return bg

    def _button(
        self,
        surface: pygame.Surface,
        button_id: str | None,
        rect: pygame.Rect,
        label: str,
        *,
        fill: tuple[int, int, int],
        text_color: tuple[int, int, int] = TEXT_MAIN,
        font: pygame.font.Font | None = None,
        radius: int = 10,
    ) -> None:
        pygame.draw.rect(surface, fill, rect, border_radius=radius)
        f = font if font is not None else self._mid_font
        text = f.render(label, True, text_color)
        surface.blit(text, text.get_rect(center=rect.center))
        if button_id is not None:
            self._hitboxes[button_id] = rect

    def _center_text(
        self,
        surface: pygame.Surface,
        font: pygame.font.Font,
        text: str,
        y: int,
        color: tuple[int, int, int] = TEXT_MAIN,
    ) -> int:
        rendered = font.render(text, True, color)
        rect = rendered.get_rect(midtop=(surface.get_width() // 2, y))
        surface.blit(rendered, rect)
        return rect.bottom

    def _render_settings(self, surface: pygame.Surface, snap: QuizSnapshot) -> None:
        w, h = surface.get_size()
        cx = w // 2
        y = max(40, h // 6)

        y = self._center_text(surface, self._title_font, snap.title, y) + 30

        label = self._mid_font.render(f"Up to: {snap.max_factor}", True, TEXT_MAIN)
        surface.blit(label, label.get_rect(midright=(cx - 10, y + 25)))
        self._button(surface, "minus", pygame.Rect(cx + 10, y, 50, 50), "-", fill=BUTTON_KEY, radius=25)
        self._button(surface, "plus", pygame.Rect(cx + 70, y, 50, 50), "+", fill=BUTTON_KEY, radius=25)
        y += 90

        y = self._center_text(surface, self._mid_font, "Number of Questions", y) + 20
        size, gap = 60, 20
        row_w = len(QUESTION_COUNTS) * size + (len(QUESTION_COUNTS) - 1) * gap
        x = cx - row_w // 2
        for count in QUESTION_COUNTS:
            selected = count == snap.question_count
            self._button(
                surface,
                f"count:{count}",
                pygame.Rect(x, y, size, size),
                str(count),
                fill=BUTTON_BLUE if selected else BUTTON_IDLE,
                text_color=TEXT_MAIN if selected else TEXT_DARK,
                radius=size // 2,
            )
            x += size + gap
        y += size + 50

        start = pygame.Rect(40, y, w - 80, 60)
        self._button(
            surface,
            "start" if snap.start_enabled else None,
            start,
            "Start Game",
            fill=BUTTON_BLUE if snap.start_enabled else BUTTON_DISABLED,
        )
        y = start.bottom + 20

        notice = self._notice or snap.notice
        if notice:
            self._center_text(surface, self._small_font, notice, y, TEXT_MUTED)

    def _render_playing(self, surface: pygame.Surface, snap: QuizSnapshot) -> None:
        w, _ = surface.get_size()
        cx = w // 2
        y = 40

        y = self._center_text(surface, self._small_font, snap.progress, y) + 20
        y = self._center_text(surface, self._big_font, snap.prompt, y) + 20

        answer_box = pygame.Rect(cx - 75, y, 150, 80)
        pygame.draw.rect(surface, INPUT_BG, answer_box, border_radius=15)
        answer = self._big_font.render(snap.input_display, True, TEXT_DARK)
        surface.blit(answer, answer.get_rect(center=answer_box.center))
        y = answer_box.bottom + 25

        key_size, key_gap = 64, 18
        row_w = 3 * key_size + 2 * key_gap
        key_fill = BUTTON_DISABLED if snap.input_locked else BUTTON_KEY
        for row in KEYPAD_ROWS:
            x = cx - row_w // 2
            for label in row:
                self._button(
                    surface,
                    f"key:{label}",
                    pygame.Rect(x, y, key_size, key_size),
                    _KEY_CAPTIONS.get(label, label),
                    fill=key_fill,
                    radius=key_size // 2,
                )
                x += key_size + key_gap
            y += key_size + 12
        y += 10

        submit = pygame.Rect(cx - 80, y, 160, 56)
        self._button(
            surface,
            "submit" if snap.submit_enabled else None,
            submit,
            "Submit",
            fill=BUTTON_GREEN if snap.submit_enabled else BUTTON_DISABLED,
        )
        y = submit.bottom + 20

        if snap.feedback is not None:
            color = FEEDBACK_GOOD if snap.feedback.is_correct else FEEDBACK_BAD
            self._center_text(surface, self._mid_font, snap.feedback.text, y, color)

    def _render_results(self, surface: pygame.Surface, snap: QuizSnapshot) -> None:
        w, h = surface.get_size()
        y = max(60, h // 4)
        y = self._center_text(surface, self._title_font, snap.title, y) + 30
        y = self._center_text(surface, self._mid_font, snap.score_text, y) + 16

        summary = self._session.summary()
        if summary.mean_response_time_s is not None:
            line = f"Accuracy {summary.accuracy * 100:.0f}%  |  Avg time {summary.mean_response_time_s:.1f}s"
            y = self._center_text(surface, self._small_font, line, y, TEXT_MUTED)
        y += 40

        self._button(surface, "play_again", pygame.Rect(40, y, w - 80, 60), "Play Again", fill=BUTTON_BLUE)


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    session: QuizSession | None = None,
    settings: QuizSettings | None = None,
) -> int:
    settings = settings if settings is not None else QuizSettings.from_env()
    configure_logging(settings.log_format)

    pygame.init()
    pygame.display.set_caption("Math Smash")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)
    clock = pygame.time.Clock()

    app = App(surface=surface)

    if session is None:
        session = QuizSession(clock=PygameTickClock(), seed=_new_seed(), settings=settings)
    app.push(QuizScreen(app, session=session))
    log.info("app.started", window=WINDOW_SIZE, lock_input=settings.lock_input_during_feedback)

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    log.info("app.stopped", frames=frame)
    return 0
