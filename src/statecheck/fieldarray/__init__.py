"""Reference system under test: a list-backed form with add, change, move and insert."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from functools import partial
from typing import Any

from statecheck.constants import DEFAULT_MAX_COMMANDS
from statecheck.driver import PropertySpec
from statecheck.fieldarray.commands import (
    FIELD_ARRAY_COMMANDS,
    AddField,
    ChangeValue,
    FieldArrayCommand,
    Insert,
    Move,
    field_array_variants,
)
from statecheck.fieldarray.form import FieldArrayForm
from statecheck.generator import CommandGenerator
from statecheck.runner import InitialState

INITIAL_NUMBER_OF_FIELDS = 2

FormFactory = Callable[[], FieldArrayForm]


async def setup_form(
    initial_size: int = INITIAL_NUMBER_OF_FIELDS,
    form_factory: FormFactory = FieldArrayForm,
) -> InitialState:
    form = form_factory()
    model: list[str] = []
    try:
        for _ in range(initial_size):
            form.click_add()
            model.append("")
        await form.settle()
    except BaseException:
        form.dispose()
        raise
    return InitialState(model=model, sut=form)


def dispose_form(form: FieldArrayForm) -> None:
    form.dispose()


def field_array_property(
    *,
    name: str = "field-array",
    initial_size: int = INITIAL_NUMBER_OF_FIELDS,
    form_factory: FormFactory = FieldArrayForm,
    max_commands: int = DEFAULT_MAX_COMMANDS,
    examples: Sequence[Sequence[Any]] = (),
    target: str | None = None,
) -> PropertySpec:
    return PropertySpec(
        name=name,
        generator=CommandGenerator(field_array_variants(initial_size), max_commands=max_commands),
        setup=partial(setup_form, initial_size, form_factory),
        teardown=dispose_form,
        commands=FIELD_ARRAY_COMMANDS,
        examples=[list(example) for example in examples],
        target=target,
    )


__all__ = [
    "INITIAL_NUMBER_OF_FIELDS",
    "AddField",
    "ChangeValue",
    "FieldArrayCommand",
    "FieldArrayForm",
    "Insert",
    "Move",
    "dispose_form",
    "field_array_property",
    "setup_form",
]
