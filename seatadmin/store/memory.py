"""In-memory backend.

Each event's seats live in their own dict. Mutations build a new dict and
swap it in, so a seat list handed out earlier is never modified afterwards.
"""

import itertools
import threading
from typing import Dict, List, Optional

from seatadmin.models.event import Event
from seatadmin.models.seat import Seat
from seatadmin.models.user import User
from seatadmin.store.base import EventStore, SeatStore, UserStore


class InMemorySeatStore(SeatStore):
    def __init__(self, locks=None):
        super().__init__(locks)
        self._seats: Dict[int, Dict[str, Seat]] = {}

    def _load(self, event_id: int) -> List[Seat]:
        return list(self._seats.get(event_id, {}).values())

    def _load_many(self, event_id, ids):
        seats = self._seats.get(event_id, {})
        return {seat_id: seats[seat_id] for seat_id in ids if seat_id in seats}

    def _replace(self, event_id: int, seats: List[Seat]) -> None:
        self._seats[event_id] = {seat.id: seat for seat in seats}

    def _update(self, event_id: int, seats: List[Seat]) -> None:
        current = dict(self._seats.get(event_id, {}))
        for seat in seats:
            if seat.id in current:
                current[seat.id] = seat
        self._seats[event_id] = current

    def _purge(self, event_id: int) -> int:
        return len(self._seats.pop(event_id, {}))


class InMemoryEventStore(EventStore):
    def __init__(self):
        self._events: Dict[int, Event] = {}
        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()

    def next_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    def save(self, event: Event) -> None:
        self._events[event.id] = event

    def get(self, event_id: int) -> Optional[Event]:
        return self._events.get(event_id)

    def list(self) -> List[Event]:
        return [self._events[event_id] for event_id in sorted(self._events)]

    def delete(self, event_id: int) -> bool:
        return self._events.pop(event_id, None) is not None


class InMemoryUserStore(UserStore):
    def __init__(self):
        self._users: Dict[int, User] = {}
        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()

    def next_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    def save(self, user: User) -> None:
        self._users[user.id] = user

    def get(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        for user in self._users.values():
            if user.username == username:
                return user
        return None

    def list(self) -> List[User]:
        return [self._users[user_id] for user_id in sorted(self._users)]

    def delete(self, user_id: int) -> bool:
        return self._users.pop(user_id, None) is not None
