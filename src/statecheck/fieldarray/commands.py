from __future__ import annotations

from dataclasses import dataclass
from typing import assert_never

from statecheck.arbitrary import nat, text
from statecheck.command import CommandSpec, Expectations
from statecheck.fieldarray.form import FieldArrayForm
from statecheck.generator import CommandVariant

Model = list[str]

POSTCONDITION_COUNT = "correct_number_of_inputs"
POSTCONDITION_VALUES = "correct_values"


@dataclass(slots=True, frozen=True)
class AddField:
    def __str__(self) -> str:
        return "add field"


@dataclass(slots=True, frozen=True)
class ChangeValue:
    index: int
    value: str

    def __str__(self) -> str:
        return f"change value at {self.index} to {self.value}"


@dataclass(slots=True, frozen=True)
class Move:
    from_index: int
    to_index: int

    def __str__(self) -> str:
        return f"move {self.from_index} to {self.to_index}"


@dataclass(slots=True, frozen=True)
class Insert:
    index: int
    value: str

    def __str__(self) -> str:
        return f"insert {self.value} at {self.index}"


FieldArrayCommand = AddField | ChangeValue | Move | Insert


def check_command(command: FieldArrayCommand, model: Model) -> bool:
    if isinstance(command, AddField | Insert):
        return True
    if isinstance(command, ChangeValue):
        return 0 <= command.index < len(model)
    if isinstance(command, Move):
        return 0 <= command.from_index < len(model) and 0 <= command.to_index < len(model)
    assert_never(command)


def apply_to_model(command: FieldArrayCommand, model: Model) -> None:
    if isinstance(command, AddField):
        model.append("")
    elif isinstance(command, ChangeValue):
        model[command.index] = command.value
    elif isinstance(command, Move):
        # `to_index` addresses the list after the element has been removed.
        value = model.pop(command.from_index)
        model.insert(command.to_index, value)
    elif isinstance(command, Insert):
        model.insert(min(len(model), command.index), command.value)
    else:
        assert_never(command)


def assert_postconditions(model: Model, form: FieldArrayForm, expect: Expectations) -> None:
    expect.equal(POSTCONDITION_COUNT, len(model), form.count())
    expect.equal(POSTCONDITION_VALUES, list(model), form.values())


async def run_command(command: FieldArrayCommand, model: Model, form: FieldArrayForm, expect: Expectations) -> None:
    apply_to_model(command, model)

    if isinstance(command, AddField):
        form.click_add()
        await form.settle()
    elif isinstance(command, ChangeValue):
        form.change(form.label_for(command.index), command.value)
    elif isinstance(command, Move):
        form.dispatch_move(command.from_index, command.to_index)
        await form.settle()
    elif isinstance(command, Insert):
        form.dispatch_insert(command.index, command.value)
        await form.settle()
    else:
        assert_never(command)

    assert_postconditions(model, form, expect)


FIELD_ARRAY_COMMANDS = CommandSpec(check=check_command, run=run_command)


def field_array_variants(initial_size: int) -> list[CommandVariant]:
    bound = initial_size * 2
    return [
        CommandVariant(AddField),
        CommandVariant(ChangeValue, (nat(bound), text())),
        CommandVariant(Move, (nat(bound), nat(bound))),
        CommandVariant(Insert, (nat(bound), text())),
    ]


__all__ = [
    "FIELD_ARRAY_COMMANDS",
    "POSTCONDITION_COUNT",
    "POSTCONDITION_VALUES",
    "AddField",
    "ChangeValue",
    "FieldArrayCommand",
    "Insert",
    "Model",
    "Move",
    "apply_to_model",
    "assert_postconditions",
    "check_command",
    "field_array_variants",
    "run_command",
]
