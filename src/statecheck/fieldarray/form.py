"""In-memory list-backed form.

Structural actions (add, move, insert) are reconciled on the next event loop
turn, so their effect is only observable after ``await form.settle()``.
Changing an input's value is synchronous.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

DEFAULT_LABEL_TEMPLATE = "Fruit {number} name"


class FieldArrayForm:
    def __init__(self, name: str = "fruits", label_template: str = DEFAULT_LABEL_TEMPLATE) -> None:
        self.name = name
        self.label_template = label_template
        self._values: list[str] = []
        self._pending: list[Callable[[], None]] = []
        self._errors: list[Exception] = []
        self._disposed = False

    def _ensure_active(self) -> None:
        if self._disposed:
            raise RuntimeError(f"Form {self.name!r} has been disposed")

    def _schedule(self, update: Callable[[], None]) -> None:
        self._ensure_active()
        if not self._pending:
            asyncio.get_running_loop().call_soon(self._flush)
        self._pending.append(update)

    def _flush(self) -> None:
        pending, self._pending = self._pending, []
        if self._disposed:
            return
        for update in pending:
            try:
                update()
            except Exception as exc:
                # Re-raised by the next settle() so the caller sees it.
                self._errors.append(exc)

    def label_for(self, index: int) -> str:
        return self.label_template.format(number=index + 1)

    def labels(self) -> list[str]:
        return [self.label_for(index) for index in range(len(self._values))]

    def _index_for_label(self, label: str) -> int:
        for index in range(len(self._values)):
            if self.label_for(index) == label:
                return index
        raise LookupError(f"Unable to find an input labelled {label!r}")

    # Controls.

    def click_add(self) -> None:
        self._schedule(self._push)

    def change(self, label: str, value: str) -> None:
        self._ensure_active()
        self._values[self._index_for_label(label)] = value

    def dispatch_move(self, from_index: int, to_index: int) -> None:
        self._schedule(lambda: self._move(from_index, to_index))

    def dispatch_insert(self, index: int, value: str) -> None:
        self._schedule(lambda: self._insert(index, value))

    # Reconciliation.

    def _push(self) -> None:
        self._values.append("")

    def _move(self, from_index: int, to_index: int) -> None:
        value = self._values.pop(from_index)
        self._values.insert(to_index, value)

    def _insert(self, index: int, value: str) -> None:
        self._values.insert(min(len(self._values), index), value)

    async def settle(self) -> None:
        await asyncio.sleep(0)
        if self._errors:
            error, self._errors = self._errors[0], []
            raise error

    # Queries.

    def count(self) -> int:
        self._ensure_active()
        return len(self._values)

    def values(self) -> list[str]:
        self._ensure_active()
        return list(self._values)

    def dispose(self) -> None:
        self._pending = []
        self._disposed = True

    @property
    def disposed(self) -> bool:
        return self._disposed


__all__ = ["DEFAULT_LABEL_TEMPLATE", "FieldArrayForm"]
