"""Store interfaces.

Backends are interchangeable. ``SeatStore`` owns the per-event locking: its
public methods take the event's read or write lock and delegate to the
unlocked ``_``-prefixed primitives each backend implements, so every backend
gets the same exclusivity guarantees.
"""

from abc import ABC, abstractmethod
from typing import Collection, Dict, Iterable, List, Optional

from seatadmin.exceptions import InvalidTransitionError
from seatadmin.layout import parse_event_id
from seatadmin.locks import EventLockRegistry
from seatadmin.logger_config import logger
from seatadmin.models.event import Event
from seatadmin.models.layout import EventConfiguration
from seatadmin.models.seat import Seat, SeatIdentity, SeatStatus, SeatUpdate
from seatadmin.models.user import User
from seatadmin.reconciler import ReconcileResult, reconcile


class SeatStore(ABC):
    def __init__(self, locks: Optional[EventLockRegistry] = None):
        self.locks = locks if locks is not None else EventLockRegistry()

    # === Backend primitives (called with the event lock held) ===

    @abstractmethod
    def _load(self, event_id: int) -> List[Seat]:
        """All seats of an event in layout order"""

    @abstractmethod
    def _replace(self, event_id: int, seats: List[Seat]) -> None:
        """Make ``seats`` (in this order) the complete seat set of the event"""

    @abstractmethod
    def _update(self, event_id: int, seats: List[Seat]) -> None:
        """Overwrite status and requesting user of existing seats"""

    @abstractmethod
    def _purge(self, event_id: int) -> int:
        """Remove every seat of the event, returning how many were removed"""

    def _load_many(self, event_id: int, ids: Collection[str]) -> Dict[str, Seat]:
        wanted = set(ids)
        return {seat.id: seat for seat in self._load(event_id) if seat.id in wanted}

    # === Reads ===

    def list_by_event(self, event_id: int) -> List[Seat]:
        with self.locks.read(event_id):
            return self._load(event_id)

    def get_many(self, ids: Iterable[str]) -> Dict[str, Seat]:
        """Look up seats by id; unknown ids are absent from the result"""
        by_event: Dict[int, List[str]] = {}
        for seat_id in ids:
            event_id = parse_event_id(seat_id)
            if event_id is not None:
                by_event.setdefault(event_id, []).append(seat_id)

        found = {}
        for event_id, event_ids in by_event.items():
            with self.locks.read(event_id):
                found.update(self._load_many(event_id, event_ids))
        return found

    # === Mutations ===

    def create_all(self, event_id: int, identities: Iterable[SeatIdentity]) -> int:
        """Insert an available seat per identity unless a seat with that id exists.

        Existing seats keep their status and requesting user. Returns the
        number of seats inserted.
        """
        with self.locks.write(event_id):
            current = self._load(event_id)
            existing = {seat.id: seat for seat in current}
            merged = []
            placed = set()
            inserted = 0
            for identity in identities:
                if identity.id in placed:
                    continue
                placed.add(identity.id)
                if identity.id in existing:
                    merged.append(existing.pop(identity.id))
                else:
                    merged.append(Seat.available(identity))
                    inserted += 1
            # Seats outside the given identities stay, after the ordered ones
            merged.extend(existing.values())
            if inserted:
                self._replace(event_id, merged)
        logger.debug(f"Inserted {inserted} seats for event {event_id}")
        return inserted

    def apply_status(self, event_id: int, ids: Iterable[str], update: SeatUpdate,
                     allowed_from: Optional[Collection[SeatStatus]] = None) -> List[Seat]:
        """Apply ``update`` to every seat of the event named in ``ids``.

        Ids that are not seats of the event are skipped; only updated seats
        are returned. With ``allowed_from`` every matched seat must currently
        be in one of those states, otherwise nothing is written and
        InvalidTransitionError is raised.
        """
        requested = list(dict.fromkeys(ids))
        with self.locks.write(event_id):
            found = self._load_many(event_id, requested)
            matched = [found[seat_id] for seat_id in requested if seat_id in found]

            if allowed_from is not None:
                rejected = [seat.id for seat in matched if seat.status not in allowed_from]
                if rejected:
                    raise InvalidTransitionError(
                        f"Cannot set seats to {update.status.value}: "
                        f"{', '.join(rejected)} not in an allowed state",
                        rejected,
                    )

            updated = [update.apply(seat) for seat in matched]
            if updated:
                self._update(event_id, updated)
        return updated

    def reset_all(self, event_id: int) -> List[Seat]:
        """Make every seat of the event available with no requesting user"""
        update = SeatUpdate.clear(SeatStatus.AVAILABLE)
        with self.locks.write(event_id):
            updated = [update.apply(seat) for seat in self._load(event_id)]
            if updated:
                self._update(event_id, updated)
        return updated

    def delete_all_for_event(self, event_id: int) -> int:
        with self.locks.write(event_id):
            return self._purge(event_id)

    def reconcile_layout(self, event_id: int, config: EventConfiguration) -> ReconcileResult:
        """Rebuild the event's seat set from a new layout, keeping surviving bookings.

        Seats that no longer exist in the layout are removed along with their
        bookings (see ``ReconcileResult.dropped``).
        """
        with self.locks.write(event_id):
            old_seats = {seat.id: seat for seat in self._load(event_id)}
            result = reconcile(event_id, old_seats, config)
            self._replace(event_id, result.seats)
        return result


class EventStore(ABC):
    @abstractmethod
    def next_id(self) -> int:
        """Allocate a new event id"""

    @abstractmethod
    def save(self, event: Event) -> None:
        ...

    @abstractmethod
    def get(self, event_id: int) -> Optional[Event]:
        ...

    @abstractmethod
    def list(self) -> List[Event]:
        """All events ordered by id"""

    @abstractmethod
    def delete(self, event_id: int) -> bool:
        """Delete an event, returning whether it existed"""


class UserStore(ABC):
    @abstractmethod
    def next_id(self) -> int:
        ...

    @abstractmethod
    def save(self, user: User) -> None:
        ...

    @abstractmethod
    def get(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    def get_by_username(self, username: str) -> Optional[User]:
        ...

    @abstractmethod
    def list(self) -> List[User]:
        ...

    @abstractmethod
    def delete(self, user_id: int) -> bool:
        ...
