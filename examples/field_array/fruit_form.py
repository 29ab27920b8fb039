"""Example properties for the fruit form.

Run from this directory:

    statecheck run                      # uses statecheck.yaml
    statecheck run fruit_form:stale_move_form --seed 7
"""

from __future__ import annotations

from statecheck.driver import PropertySpec
from statecheck.fieldarray import ChangeValue, FieldArrayForm, Move, field_array_property


class StaleMoveForm(FieldArrayForm):
    """Fields are not re-keyed after a move, so the next change lands on the old slot."""

    def __init__(self) -> None:
        super().__init__()
        self._stale_order: list[int] | None = None

    def _move(self, from_index: int, to_index: int) -> None:
        super()._move(from_index, to_index)
        order = list(range(len(self._values)))
        order.insert(to_index, order.pop(from_index))
        self._stale_order = order

    def _push(self) -> None:
        super()._push()
        self._stale_order = None

    def _insert(self, index: int, value: str) -> None:
        super()._insert(index, value)
        self._stale_order = None

    def _index_for_label(self, label: str) -> int:
        index = super()._index_for_label(label)
        if self._stale_order is None:
            return index
        return self._stale_order[index]


def fruit_form() -> PropertySpec:
    return field_array_property(name="fruit-form")


def stale_move_form() -> PropertySpec:
    return field_array_property(
        name="stale-move-form",
        form_factory=StaleMoveForm,
        examples=[[Move(1, 0), ChangeValue(0, "apple")]],
    )
