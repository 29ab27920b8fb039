from __future__ import annotations

import random

import pytest

from statecheck.arbitrary import Arbitrary, constant, integers, nat, sampled_from, text


def test_integers_draw_stays_in_bounds() -> None:
    rng = random.Random(7)
    arbitrary = integers(-3, 4)
    drawn = [arbitrary.draw(rng) for _ in range(200)]

    assert min(drawn) >= -3
    assert max(drawn) <= 4
    assert set(drawn) == set(range(-3, 5))


def test_nat_includes_upper_bound() -> None:
    rng = random.Random(0)
    drawn = {nat(4).draw(rng) for _ in range(200)}
    assert drawn == {0, 1, 2, 3, 4}


def test_same_seed_draws_same_values() -> None:
    first = [text().draw(random.Random(99)) for _ in range(5)]
    second = [text().draw(random.Random(99)) for _ in range(5)]
    assert first == second


def test_integers_shrink_toward_zero() -> None:
    assert list(nat(20).shrink(10)) == [0, 5, 9]
    assert list(nat(20).shrink(1)) == [0]
    assert list(nat(20).shrink(0)) == []


def test_integers_shrink_toward_closest_bound_when_zero_out_of_range() -> None:
    assert list(integers(-10, -3).shrink(-8)) == [-3, -5, -7]
    assert list(integers(2, 9).shrink(2)) == []


def test_integers_shrink_halves_large_values_exactly() -> None:
    assert list(nat(2**61).shrink(2**60 + 3)) == [0, 2**59 + 1, 2**60 + 2]
    assert list(integers(-(2**61), -1).shrink(-(2**60) - 3)) == [-1, -(2**59) - 2, -(2**60) - 2]


def test_arbitrary_subclasses_must_implement_draw() -> None:
    class NoDraw(Arbitrary[int]):
        pass

    with pytest.raises(TypeError):
        NoDraw()  # type: ignore[abstract]


def test_integers_rejects_inverted_range() -> None:
    with pytest.raises(ValueError, match="min_value"):
        integers(5, 1)


def test_text_respects_max_size_and_alphabet() -> None:
    rng = random.Random(3)
    arbitrary = text(max_size=4, alphabet="xy")
    for _ in range(100):
        value = arbitrary.draw(rng)
        assert len(value) <= 4
        assert set(value) <= {"x", "y"}


def test_text_shrink_toward_empty() -> None:
    assert list(text().shrink("abcd")) == ["", "ab", "abc", "bcd"]
    assert list(text().shrink("ab")) == ["", "a", "b"]
    assert list(text().shrink("a")) == [""]
    assert list(text().shrink("")) == []


def test_constant_never_shrinks() -> None:
    arbitrary = constant("fixed")
    assert arbitrary.draw(random.Random(1)) == "fixed"
    assert list(arbitrary.shrink("fixed")) == []


def test_sampled_from_shrinks_toward_earlier_values() -> None:
    arbitrary = sampled_from(["a", "b", "c"])
    assert list(arbitrary.shrink("c")) == ["a", "b"]
    assert list(arbitrary.shrink("a")) == []
    with pytest.raises(ValueError):
        sampled_from([])
