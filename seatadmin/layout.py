"""Layout expansion: event configuration -> ordered seat identities."""

from typing import List, Optional

from seatadmin.models.layout import (SEAT_ID_SEPARATOR, EventConfiguration,
                                     assert_valid_configuration)
from seatadmin.models.seat import SeatIdentity, SeatLabel


def seat_id(event_id: int, zone: str, section: str, row: str, seat_number: int) -> str:
    """Build the seat id: {eventId}-{zone}-{section}-{row}-{seatNumber}"""
    return SEAT_ID_SEPARATOR.join(
        (str(event_id), zone, section, row, str(seat_number))
    )


def parse_event_id(seat_id_value: str) -> Optional[int]:
    """Return the event id prefix of a seat id, or None if it has none"""
    prefix, _, rest = seat_id_value.partition(SEAT_ID_SEPARATOR)
    if not rest or not (prefix.isascii() and prefix.isdigit()):
        return None
    return int(prefix)


def expand(config: EventConfiguration, event_id: int) -> List[SeatIdentity]:
    """Expand a layout into seat identities.

    Zones, sections and rows are walked in configuration order and seats are
    numbered 1..seatCount within each row. The result is deterministic for a
    given (config, event_id), which is what lets reconciliation match seats
    across layout edits. Aisles are display metadata and are ignored here.

    Raises InvalidConfigurationError if the layout breaks an invariant; such a
    layout should never get past request validation.
    """
    assert_valid_configuration(config)

    identities = []
    for zone in config.zones:
        for section in zone.sections:
            for row in section.rows:
                for number in range(1, row.seat_count + 1):
                    identities.append(
                        SeatIdentity(
                            id=seat_id(event_id, zone.name, section.name, row.label, number),
                            event_id=event_id,
                            label=SeatLabel(
                                zone=zone.name,
                                section=section.name,
                                row=row.label,
                                seat=str(number),
                            ),
                        )
                    )
    return identities


def total_seats(config: EventConfiguration) -> int:
    """Number of seats a layout expands to"""
    return sum(
        row.seat_count
        for zone in config.zones
        for section in zone.sections
        for row in section.rows
    )
