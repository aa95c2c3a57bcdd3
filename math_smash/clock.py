from __future__ import annotations

from typing import Protocol

import pygame


class Clock(Protocol):
    """Time source for quiz timers, in seconds.

    Feedback and pause delays are due at ``now() + delay``; the session only
    compares and adds these values, so any monotonic origin works.
    """

    def now(self) -> float: ...


class PygameTickClock:
    """Seconds since ``pygame.init()``, read from the SDL tick counter.

    Using the same counter as the frame loop keeps timer deadlines in step
    with frames: a delay never fires before the frame that reaches it.
    """

    def now(self) -> float:
        return pygame.time.get_ticks() / 1000.0
