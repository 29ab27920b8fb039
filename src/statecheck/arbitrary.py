"""Value generation strategies.

An :class:`Arbitrary` draws values from a ``random.Random`` and proposes
simpler variants of a value for shrinking. Draws depend only on the random
source, so a fixed seed always yields the same values.
"""

from __future__ import annotations

import random
import string
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")

PRINTABLE_ALPHABET = string.ascii_letters + string.digits + string.punctuation + " "


class Arbitrary(ABC, Generic[T]):
    @abstractmethod
    def draw(self, rng: random.Random) -> T:
        raise NotImplementedError

    def shrink(self, value: T) -> Iterator[T]:
        """Yield strictly simpler candidates, simplest first."""
        return iter(())


@dataclass(slots=True, frozen=True)
class Integers(Arbitrary[int]):
    min_value: int
    max_value: int

    def __post_init__(self) -> None:
        if self.min_value > self.max_value:
            raise ValueError("min_value must be <= max_value")

    def draw(self, rng: random.Random) -> int:
        return rng.randint(self.min_value, self.max_value)

    @property
    def target(self) -> int:
        # Zero when in range, otherwise the bound closest to it.
        return min(max(0, self.min_value), self.max_value)

    def shrink(self, value: int) -> Iterator[int]:
        target = self.target
        distance = value - target
        if distance == 0:
            return
        step = 1 if distance > 0 else -1
        seen: set[int] = set()
        for candidate in (target, target + step * (abs(distance) // 2), value - step):
            if abs(candidate - target) < abs(distance) and candidate not in seen:
                seen.add(candidate)
                yield candidate


@dataclass(slots=True, frozen=True)
class Text(Arbitrary[str]):
    max_size: int = 10
    alphabet: str = PRINTABLE_ALPHABET

    def draw(self, rng: random.Random) -> str:
        size = rng.randint(0, self.max_size)
        return "".join(rng.choice(self.alphabet) for _ in range(size))

    def shrink(self, value: str) -> Iterator[str]:
        if not value:
            return
        seen: set[str] = set()
        for candidate in ("", value[: len(value) // 2], value[:-1], value[1:]):
            if len(candidate) < len(value) and candidate not in seen:
                seen.add(candidate)
                yield candidate


@dataclass(slots=True, frozen=True)
class Constant(Arbitrary[Any]):
    value: Any

    def draw(self, rng: random.Random) -> Any:
        return self.value


@dataclass(slots=True, frozen=True)
class SampledFrom(Arbitrary[Any]):
    values: tuple[Any, ...]

    def __post_init__(self) -> None:
        if not self.values:
            raise ValueError("values must not be empty")

    def draw(self, rng: random.Random) -> Any:
        return rng.choice(self.values)

    def shrink(self, value: Any) -> Iterator[Any]:
        try:
            position = self.values.index(value)
        except ValueError:
            return
        yield from self.values[:position]


def integers(min_value: int, max_value: int) -> Integers:
    return Integers(min_value=min_value, max_value=max_value)


def nat(max_value: int) -> Integers:
    """Natural numbers in ``[0, max_value]``."""
    return Integers(min_value=0, max_value=max_value)


def text(max_size: int = 10, alphabet: str = PRINTABLE_ALPHABET) -> Text:
    if max_size < 0:
        raise ValueError("max_size must be >= 0")
    if not alphabet:
        raise ValueError("alphabet must not be empty")
    return Text(max_size=max_size, alphabet=alphabet)


def constant(value: Any) -> Constant:
    return Constant(value=value)


def sampled_from(values: Sequence[Any]) -> SampledFrom:
    return SampledFrom(values=tuple(values))


__all__ = [
    "PRINTABLE_ALPHABET",
    "Arbitrary",
    "Constant",
    "Integers",
    "SampledFrom",
    "Text",
    "constant",
    "integers",
    "nat",
    "sampled_from",
    "text",
]
