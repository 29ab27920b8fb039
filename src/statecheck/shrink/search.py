from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from itertools import islice
from time import monotonic
from typing import Any

import structlog

from statecheck.shrink.candidates import ShrinkCommandFn, iter_candidates

logger = structlog.get_logger(__name__)

# Length of the failing prefix (through the failing command), or None when the sequence passes.
FailsFn = Callable[[list[Any]], Awaitable[int | None]]


@dataclass(slots=True)
class ShrinkResult:
    original_len: int
    reduced_len: int
    iterations: int
    seconds: float
    reduced_commands: list[Any]
    path: list[int] = field(default_factory=list)
    exhausted: bool = False

    @property
    def reduced(self) -> bool:
        return bool(self.path)


def _truncate(candidate: list[Any], prefix_len: int) -> list[Any]:
    if 0 < prefix_len < len(candidate):
        return candidate[:prefix_len]
    return candidate


async def shrink_sequence(
    sequence: Sequence[Any],
    *,
    fails: FailsFn,
    shrink_command: ShrinkCommandFn,
    max_seconds: float,
    max_iterations: int,
) -> ShrinkResult:
    if max_seconds <= 0:
        raise ValueError("max_seconds must be > 0")
    if max_iterations <= 0:
        raise ValueError("max_iterations must be > 0")
    if not sequence:
        raise ValueError("sequence must not be empty")
    if await fails(list(sequence)) is None:
        raise ValueError("fails must hold for the original sequence")

    started = monotonic()
    current = list(sequence)
    path: list[int] = []
    iterations = 0
    exhausted = False

    while not exhausted:
        accepted = False
        for index, candidate in enumerate(iter_candidates(current, shrink_command)):
            elapsed = monotonic() - started
            if elapsed >= max_seconds or iterations >= max_iterations:
                exhausted = True
                break

            iterations += 1
            prefix_len = await fails(candidate)
            if prefix_len is not None:
                current = _truncate(candidate, prefix_len)
                path.append(index)
                accepted = True
                logger.debug("shrink_accepted", candidate_index=index, length=len(current))
                break

        if not accepted:
            break

    seconds = monotonic() - started
    return ShrinkResult(
        original_len=len(sequence),
        reduced_len=len(current),
        iterations=iterations,
        seconds=round(seconds, 6),
        reduced_commands=current,
        path=path,
        exhausted=exhausted,
    )


async def replay_path(
    sequence: Sequence[Any],
    path: Sequence[int],
    shrink_command: ShrinkCommandFn,
    truncate: FailsFn | None = None,
) -> list[Any]:
    """Rebuild a shrunk sequence by taking candidate ``path[i]`` at step ``i``.

    With ``truncate``, every picked candidate is cut to its failing prefix the
    same way :func:`shrink_sequence` cut it.
    """
    current = list(sequence)
    for step, index in enumerate(path):
        if index < 0:
            raise ValueError(f"Shrink path step {step} has negative index {index}")
        picked = next(islice(iter_candidates(current, shrink_command), index, None), None)
        if picked is None:
            raise ValueError(f"Shrink path step {step} index {index} is out of range")
        if truncate is not None:
            prefix_len = await truncate(picked)
            if prefix_len is not None:
                picked = _truncate(picked, prefix_len)
        current = picked
    return current


__all__ = [
    "FailsFn",
    "ShrinkResult",
    "replay_path",
    "shrink_sequence",
]
