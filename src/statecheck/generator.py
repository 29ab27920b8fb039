from __future__ import annotations

import dataclasses
import itertools
import random
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from statecheck.arbitrary import Arbitrary
from statecheck.constants import DEFAULT_MAX_COMMANDS


@dataclass(slots=True, frozen=True)
class CommandVariant:
    """One command constructor and the arbitraries for its fields, in field order."""

    command_type: type
    args: tuple[Arbitrary[Any], ...] = ()
    weight: int = 1

    def __post_init__(self) -> None:
        if self.weight <= 0:
            raise ValueError(f"weight must be > 0 for {self.command_type.__name__}")
        if not dataclasses.is_dataclass(self.command_type):
            raise TypeError(f"{self.command_type.__name__} must be a dataclass")
        fields = dataclasses.fields(self.command_type)
        if len(fields) != len(self.args):
            raise ValueError(
                f"{self.command_type.__name__} has {len(fields)} field(s) but {len(self.args)} arbitrary(ies)"
            )

    def draw(self, rng: random.Random) -> Any:
        return self.command_type(*(arbitrary.draw(rng) for arbitrary in self.args))

    def shrink(self, command: Any) -> Iterator[Any]:
        for field, arbitrary in zip(dataclasses.fields(self.command_type), self.args, strict=True):
            for candidate in arbitrary.shrink(getattr(command, field.name)):
                yield dataclasses.replace(command, **{field.name: candidate})


def run_seed(seed: int, run_index: int) -> int:
    return seed * 1_000_003 + run_index


class CommandGenerator:
    def __init__(self, variants: Sequence[CommandVariant], max_commands: int = DEFAULT_MAX_COMMANDS) -> None:
        if not variants:
            raise ValueError("variants must not be empty")
        if max_commands < 0:
            raise ValueError("max_commands must be >= 0")
        self.variants = list(variants)
        self.max_commands = max_commands
        self._weights = [variant.weight for variant in self.variants]
        self._by_type = {variant.command_type: variant for variant in self.variants}

    def with_max_commands(self, max_commands: int) -> CommandGenerator:
        return CommandGenerator(self.variants, max_commands=max_commands)

    def iter_commands(self, rng: random.Random) -> Iterator[Any]:
        while True:
            (variant,) = rng.choices(self.variants, weights=self._weights)
            yield variant.draw(rng)

    def draw_sequence(self, rng: random.Random) -> list[Any]:
        size = rng.randint(0, self.max_commands)
        return list(itertools.islice(self.iter_commands(rng), size))

    def sequence_for_run(self, seed: int, run_index: int) -> list[Any]:
        return self.draw_sequence(random.Random(run_seed(seed, run_index)))

    def shrink_command(self, command: Any) -> Iterator[Any]:
        variant = self._by_type.get(type(command))
        if variant is None:
            return iter(())
        return variant.shrink(command)


__all__ = [
    "CommandGenerator",
    "CommandVariant",
    "run_seed",
]
