"""Tests for the de-duplicating multiplication question generator."""

from __future__ import annotations

import random

import pytest

from math_smash.errors import InfeasibleConfigError, MathSmashError
from math_smash.questions import Question, QuestionGenerator, generate_questions, max_distinct_questions


@pytest.mark.parametrize("max_factor", range(2, 13))
def test_generates_exact_count_of_distinct_in_range_pairs(max_factor: int) -> None:
    rng = random.Random(max_factor)
    for count in {1, 5, 10, 20, max_distinct_questions(max_factor)}:
        if count > max_distinct_questions(max_factor):
            continue
        qs = generate_questions(max_factor, count, rng=rng)
        assert len(qs) == count
        pairs = [q.pair for q in qs]
        assert len(set(pairs)) == count
        assert all(1 <= a <= max_factor and 1 <= b <= max_factor for a, b in pairs)


def test_two_times_tables_yield_all_four_pairs_but_not_five() -> None:
    qs = generate_questions(2, 4, rng=random.Random(3))
    assert sorted(q.pair for q in qs) == [(1, 1), (1, 2), (2, 1), (2, 2)]

    with pytest.raises(InfeasibleConfigError) as info:
        generate_questions(2, 5, rng=random.Random(3))
    assert info.value.max_factor == 2
    assert info.value.count == 5


def test_infeasible_error_is_a_value_error() -> None:
    err = InfeasibleConfigError(3, 10)
    assert isinstance(err, ValueError)
    assert isinstance(err, MathSmashError)
    assert "9" in str(err)


def test_zero_count_and_bad_factor() -> None:
    assert generate_questions(5, 0, rng=random.Random(1)) == []
    with pytest.raises(ValueError):
        generate_questions(0, 1, rng=random.Random(1))


def test_question_text_answer_and_structural_equality() -> None:
    a = Question(left=3, right=4)
    b = Question(left=3, right=4)
    assert a.text == "3 × 4"
    assert a.answer == 12
    assert a.id != b.id
    assert a == b
    assert len({a, b}) == 1
    assert Question(left=4, right=3) != a


def test_generator_determinism() -> None:
    """Generators with the same seed should produce identical batches."""
    g1 = QuestionGenerator(seed=12345)
    g2 = QuestionGenerator(seed=12345)
    assert [q.pair for q in g1.generate(12, 20)] == [q.pair for q in g2.generate(12, 20)]
