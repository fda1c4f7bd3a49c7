"""Carry seat state across a layout edit.

Seats whose id survives the edit keep their status and requesting user. New
ids start out available. Ids that disappear (a renamed zone/section/row, a
shortened row) are dropped together with any booking they held: editing a
layout is allowed to cancel bookings, and callers are told which ones through
``ReconcileResult.dropped``.
"""

from dataclasses import dataclass, field
from typing import List, Mapping

from seatadmin.layout import expand
from seatadmin.models.layout import EventConfiguration
from seatadmin.models.seat import Seat, SeatStatus


@dataclass
class ReconcileResult:
    seats: List[Seat] = field(default_factory=list)
    preserved: List[str] = field(default_factory=list)
    added: List[str] = field(default_factory=list)
    dropped: List[Seat] = field(default_factory=list)

    @property
    def dropped_bookings(self) -> List[Seat]:
        """Dropped seats that were not available"""
        return [seat for seat in self.dropped if seat.status is not SeatStatus.AVAILABLE]


def reconcile(event_id: int, old_seats: Mapping[str, Seat],
              new_config: EventConfiguration) -> ReconcileResult:
    result = ReconcileResult()

    for identity in expand(new_config, event_id):
        old = old_seats.get(identity.id)
        if old is None:
            result.seats.append(Seat.available(identity))
            result.added.append(identity.id)
            continue

        result.seats.append(
            Seat(
                id=identity.id,
                event_id=event_id,
                status=old.status,
                user_id=old.user_id,
                label=identity.label,
            )
        )
        result.preserved.append(identity.id)

    kept = set(result.preserved)
    result.dropped = [seat for seat_id, seat in old_seats.items() if seat_id not in kept]
    return result
