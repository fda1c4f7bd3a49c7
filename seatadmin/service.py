"""Event and booking operations exposed to the API layer."""

import threading
from collections import Counter
from typing import Iterable, List, Optional

from seatadmin.exceptions import ConflictError, NotFoundError, UnauthorizedError
from seatadmin.layout import expand
from seatadmin.logger_config import logger
from seatadmin.models.event import Event, EventCreate, EventUpdate
from seatadmin.models.seat import Seat, SeatStatus, SeatSummary
from seatadmin.models.user import User, UserCreate
from seatadmin.store.base import EventStore, SeatStore, UserStore
from seatadmin.transitions import SeatAction, allowed_sources, authorize, update_for


class SeatingService:
    def __init__(self, events: EventStore, seats: SeatStore, users: UserStore,
                 strict_transitions: bool = False):
        self.events = events
        self.seats = seats
        self.users = users
        self.strict_transitions = strict_transitions
        self._user_lock = threading.Lock()

    # === Events ===

    def list_events(self) -> List[Event]:
        return self.events.list()

    def get_event(self, event_id: int) -> Event:
        event = self.events.get(event_id)
        if event is None:
            raise NotFoundError(f"Event with ID {event_id} not found")
        return event

    def create_event(self, event_data: EventCreate) -> Event:
        """Create an event and the seats of its layout"""
        event_id = self.events.next_id()
        event = Event(
            id=event_id,
            name=event_data.name,
            venue=event_data.venue,
            date=event_data.date,
            configuration=event_data.configuration,
        )
        identities = expand(event.configuration, event_id)

        with self.seats.locks.write(event_id):
            self.events.save(event)
            try:
                created = self.seats.create_all(event_id, identities)
            except Exception:
                self.events.delete(event_id)
                raise

        logger.info(f"Created event {event_id} '{event.name}' with {created} seats")
        return event

    def update_event(self, event_id: int, event_data: EventUpdate) -> Event:
        """Apply a partial update; a new configuration reconciles the seats.

        Seats that disappear from the layout are deleted even if they were
        pending or reserved.
        """
        changes = {
            field: getattr(event_data, field)
            for field in event_data.model_fields_set
            if getattr(event_data, field) is not None
        }

        with self.seats.locks.write(event_id):
            existing = self.get_event(event_id)
            updated = existing.model_copy(update=changes)
            self.events.save(updated)

            if "configuration" in changes:
                try:
                    result = self.seats.reconcile_layout(event_id, updated.configuration)
                except Exception:
                    # Seat writes were rolled back; restore the old event record
                    self.events.save(existing)
                    raise
                logger.info(
                    f"Reconciled event {event_id}: {len(result.preserved)} kept, "
                    f"{len(result.added)} added, {len(result.dropped)} dropped"
                )
                if result.dropped_bookings:
                    logger.warning(
                        f"Layout edit of event {event_id} dropped booked seats: "
                        f"{', '.join(seat.id for seat in result.dropped_bookings)}"
                    )

        return updated

    def delete_event(self, event_id: int) -> None:
        """Delete an event and all its seats; unknown ids are a no-op"""
        with self.seats.locks.write(event_id):
            existed = self.events.delete(event_id)
            removed = self.seats.delete_all_for_event(event_id)
        if existed:
            logger.info(f"Deleted event {event_id} and {removed} seats")

    # === Seats ===

    def list_seats(self, event_id: int) -> List[Seat]:
        self.get_event(event_id)
        return self.seats.list_by_event(event_id)

    def get_seat(self, event_id: int, seat_id: str) -> Seat:
        self.get_event(event_id)
        seat = self.seats.get_many([seat_id]).get(seat_id)
        if seat is None or seat.event_id != event_id:
            raise NotFoundError(f"Seat {seat_id} not found in event {event_id}")
        return seat

    def seat_summary(self, event_id: int) -> SeatSummary:
        counts = Counter(seat.status for seat in self.list_seats(event_id))
        return SeatSummary(
            event_id=event_id,
            total=sum(counts.values()),
            available=counts[SeatStatus.AVAILABLE],
            pending=counts[SeatStatus.PENDING],
            reserved=counts[SeatStatus.RESERVED],
            blocked=counts[SeatStatus.BLOCKED],
        )

    def book_seats(self, event_id: int, ids: Iterable[str], caller: User) -> List[Seat]:
        """Request seats for the caller (pending until an admin decides)"""
        return self._transition(SeatAction.BOOK, event_id, ids, caller)

    def approve_seats(self, event_id: int, ids: Iterable[str], caller: User) -> List[Seat]:
        return self._transition(SeatAction.APPROVE, event_id, ids, caller)

    def reject_seats(self, event_id: int, ids: Iterable[str], caller: User) -> List[Seat]:
        return self._transition(SeatAction.REJECT, event_id, ids, caller)

    def override_seats(self, event_id: int, ids: Iterable[str], status: SeatStatus,
                       caller: User, user_id: Optional[int] = None) -> List[Seat]:
        """Set seats to any status directly, e.g. to block them"""
        return self._transition(
            SeatAction.OVERRIDE, event_id, ids, caller, status=status, user_id=user_id
        )

    def reset_seats(self, event_id: int, caller: User) -> List[Seat]:
        authorize(SeatAction.RESET, caller)
        self.get_event(event_id)
        seats = self.seats.reset_all(event_id)
        logger.info(f"User {caller.id} reset {len(seats)} seats of event {event_id}")
        return seats

    def _transition(self, action: SeatAction, event_id: int, ids: Iterable[str],
                    caller: User, status: Optional[SeatStatus] = None,
                    user_id: Optional[int] = None) -> List[Seat]:
        authorize(action, caller)
        self.get_event(event_id)

        ids = list(ids)
        update = update_for(action, caller, status=status, user_id=user_id)
        allowed = allowed_sources(action) if self.strict_transitions else None
        updated = self.seats.apply_status(event_id, ids, update, allowed_from=allowed)

        logger.info(
            f"User {caller.id} {action.value} on event {event_id}: "
            f"{len(updated)}/{len(set(ids))} seats -> {update.status.value}"
        )
        return updated

    # === Users ===

    def list_users(self) -> List[User]:
        return self.users.list()

    def get_user(self, user_id: int) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")
        return user

    def create_user(self, user_data: UserCreate) -> User:
        with self._user_lock:
            if self.users.get_by_username(user_data.username) is not None:
                raise ConflictError(f"Username '{user_data.username}' already exists")
            user = User(id=self.users.next_id(), username=user_data.username, role=user_data.role)
            self.users.save(user)
        logger.info(f"Created {user.role.value} user {user.id} '{user.username}'")
        return user

    def delete_user(self, user_id: int) -> None:
        if not self.users.delete(user_id):
            raise NotFoundError(f"User with ID {user_id} not found")
        logger.info(f"Deleted user {user_id}")

    def resolve_caller(self, user_id: Optional[int]) -> User:
        """Map the caller's user id to a registered user"""
        if user_id is None:
            raise UnauthorizedError("Authentication required")
        user = self.users.get(user_id)
        if user is None:
            raise UnauthorizedError(f"Unknown user {user_id}")
        return user
