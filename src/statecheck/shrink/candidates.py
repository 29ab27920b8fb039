"""Deterministic enumeration of shrink candidates.

Candidates depend only on the sequence being shrunk, so the index of an
accepted candidate is enough to replay a shrink step later.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from itertools import chain
from typing import Any

ShrinkCommandFn = Callable[[Any], Iterable[Any]]


def _drop_last(sequence: list[Any]) -> Iterator[list[Any]]:
    size = len(sequence)
    half = size // 2
    if 0 < half < size - 1:
        yield sequence[:half]
    yield sequence[: size - 1]


def _drop_chunks(sequence: list[Any]) -> Iterator[list[Any]]:
    size = len(sequence)
    chunk_size = size // 2
    while chunk_size >= 2:
        for start in range(0, size, chunk_size):
            yield [*sequence[:start], *sequence[start + chunk_size :]]
        chunk_size //= 2


def _drop_one(sequence: list[Any]) -> Iterator[list[Any]]:
    for index in range(len(sequence)):
        yield [*sequence[:index], *sequence[index + 1 :]]


def _simplify_parameters(sequence: list[Any], shrink_command: ShrinkCommandFn) -> Iterator[list[Any]]:
    for index, command in enumerate(sequence):
        for simpler in shrink_command(command):
            yield [*sequence[:index], simpler, *sequence[index + 1 :]]


def iter_candidates(sequence: Sequence[Any], shrink_command: ShrinkCommandFn) -> Iterator[list[Any]]:
    current = list(sequence)
    if not current:
        return
    for candidate in chain(_drop_last(current), _drop_chunks(current), _drop_one(current)):
        if candidate:
            yield candidate
    yield from _simplify_parameters(current, shrink_command)


__all__ = ["ShrinkCommandFn", "iter_candidates"]
