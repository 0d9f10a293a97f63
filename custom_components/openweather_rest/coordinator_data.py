"""
WeatherSnapshot — immutable snapshot of everything published to entities.

This is a pure data module with no HA or network dependencies.
"""
from __future__ import annotations

import dataclasses

from .variables import VariableValue, empty_variables


@dataclasses.dataclass(frozen=True)
class WeatherSnapshot:
    """
    Typed, copy-on-write snapshot of the published weather state.

    Always replace via dataclasses.replace(), never mutate in place.
    """

    # variable id → published value (every declared id is present)
    variables: dict[str, VariableValue] = dataclasses.field(default_factory=empty_variables)

    # True between sunrise and sunset of the last document, None before the first one
    is_day: bool | None = None

    # Provider icon code of the current condition
    icon_code: str | None = None

    # Last successfully received raw document
    document: dict | None = None

    def value(self, variable_id: str):
        return self.variables.get(variable_id)
