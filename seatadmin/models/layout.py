"""Seating layout configuration: zones -> sections -> rows.

The same checks back both the pydantic validators (boundary validation) and
:func:`assert_valid_configuration`, which the expander runs on every layout it
receives.
"""

from typing import Iterable, List, Optional

from pydantic import ConfigDict, StrictInt, field_validator, model_validator
from pydantic.alias_generators import to_camel

from seatadmin.exceptions import InvalidConfigurationError
from seatadmin.models.base import CamelModel

# Separator of the seat id components; not allowed inside any layout name
SEAT_ID_SEPARATOR = "-"


def check_name(value, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidConfigurationError(f"{what} must be a non-empty string")
    if SEAT_ID_SEPARATOR in value:
        raise InvalidConfigurationError(
            f"{what} '{value}' must not contain '{SEAT_ID_SEPARATOR}'"
        )
    return value


def check_seat_count(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidConfigurationError(
            f"seatCount must be a positive integer, got {value!r}"
        )
    return value


def check_aisles(aisles: Optional[Iterable[int]], seat_count: int, label: str) -> None:
    for position in aisles or []:
        if isinstance(position, bool) or not isinstance(position, int):
            raise InvalidConfigurationError(
                f"aisle position {position!r} in row '{label}' is not an integer"
            )
        if position < 1 or position > seat_count - 1:
            raise InvalidConfigurationError(
                f"aisle position {position} in row '{label}' is outside [1, {seat_count - 1}]"
            )


def check_unique(names: List[str], what: str, parent: str) -> None:
    seen = set()
    for name in names:
        if name in seen:
            raise InvalidConfigurationError(f"duplicate {what} '{name}' in {parent}")
        seen.add(name)


class _LayoutModel(CamelModel):
    model_config = ConfigDict(
        populate_by_name=True, alias_generator=to_camel, frozen=True
    )


class Row(_LayoutModel):
    label: str
    seat_count: StrictInt
    # Seat numbers after which a visual gap is drawn; no effect on seat identity
    aisles: Optional[List[StrictInt]] = None

    @field_validator("label")
    @classmethod
    def _check_label(cls, value):
        return check_name(value, "row label")

    @field_validator("seat_count")
    @classmethod
    def _check_seat_count(cls, value):
        return check_seat_count(value)

    @model_validator(mode="after")
    def _check_aisles(self):
        check_aisles(self.aisles, self.seat_count, self.label)
        return self


class Section(_LayoutModel):
    name: str
    rows: List[Row]

    @field_validator("name")
    @classmethod
    def _check_name(cls, value):
        return check_name(value, "section name")

    @model_validator(mode="after")
    def _check_rows(self):
        check_unique([row.label for row in self.rows], "row label", f"section '{self.name}'")
        return self


class Zone(_LayoutModel):
    name: str
    sections: List[Section]

    @field_validator("name")
    @classmethod
    def _check_name(cls, value):
        return check_name(value, "zone name")

    @model_validator(mode="after")
    def _check_sections(self):
        check_unique(
            [section.name for section in self.sections], "section name", f"zone '{self.name}'"
        )
        return self


class EventConfiguration(_LayoutModel):
    zones: List[Zone]

    @model_validator(mode="after")
    def _check_zones(self):
        check_unique([zone.name for zone in self.zones], "zone name", "configuration")
        return self


def assert_valid_configuration(config: EventConfiguration) -> None:
    """Re-check every layout invariant, including on models built without validation."""
    if not isinstance(config, EventConfiguration):
        raise InvalidConfigurationError(
            f"expected EventConfiguration, got {type(config).__name__}"
        )
    zones = config.zones or []
    check_unique([zone.name for zone in zones], "zone name", "configuration")
    for zone in zones:
        check_name(zone.name, "zone name")
        check_unique(
            [section.name for section in zone.sections], "section name", f"zone '{zone.name}'"
        )
        for section in zone.sections:
            check_name(section.name, "section name")
            check_unique(
                [row.label for row in section.rows], "row label", f"section '{section.name}'"
            )
            for row in section.rows:
                check_name(row.label, "row label")
                check_seat_count(row.seat_count)
                check_aisles(row.aisles, row.seat_count, row.label)
