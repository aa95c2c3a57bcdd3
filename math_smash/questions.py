"""Multiplication question model and de-duplicating generator.

Questions are drawn by rejection sampling: both factors are picked uniformly
from ``[1, max_factor]`` and a candidate is kept only if its ``(left, right)``
pair has not been produced earlier in the same batch.  Before sampling, the
request is checked against the number of ordered pairs available
(``max_factor ** 2``) so an impossible request fails immediately with
:class:`InfeasibleConfigError` instead of looping forever.
"""

from __future__ import annotations

import itertools
import random
from dataclasses import dataclass, field

from .errors import InfeasibleConfigError

_ids = itertools.count(1)


def _next_id() -> int:
    return next(_ids)


@dataclass(frozen=True, slots=True)
class Question:
    """A single ``left × right`` problem.

    ``id`` only identifies the instance for list rendering; equality and
    hashing use the factor pair.
    """

    left: int
    right: int
    id: int = field(default_factory=_next_id, compare=False)

    @property
    def text(self) -> str:
        return f"{self.left} × {self.right}"

    @property
    def answer(self) -> int:
        return self.left * self.right

    @property
    def pair(self) -> tuple[int, int]:
        return (self.left, self.right)


def max_distinct_questions(max_factor: int) -> int:
    """Number of ordered factor pairs available for tables up to ``max_factor``."""
    return max_factor * max_factor


def generate_questions(max_factor: int, count: int, *, rng: random.Random) -> list[Question]:
    """Return ``count`` questions with pairwise-distinct factor pairs.

    Order is generation order. Raises :class:`InfeasibleConfigError` when
    ``count`` exceeds the number of distinct pairs.
    """
    if max_factor < 1:
        raise ValueError("max_factor must be >= 1")
    if count <= 0:
        return []
    if count > max_distinct_questions(max_factor):
        raise InfeasibleConfigError(max_factor, count)

    seen: set[tuple[int, int]] = set()
    out: list[Question] = []
    while len(out) < count:
        left = rng.randint(1, max_factor)
        right = rng.randint(1, max_factor)
        if (left, right) in seen:
            continue
        seen.add((left, right))
        out.append(Question(left=left, right=right))
    return out


class QuestionGenerator:
    """Seeded source of question batches.

    Two generators built with the same seed yield identical batches.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def generate(self, max_factor: int, count: int) -> list[Question]:
        return generate_questions(max_factor, count, rng=self._rng)
