"""DynamoDB backend (single table, ``pk``/``sk``).

Item layout:

    event    pk=<event id>       sk="EVENT"
    seat     pk=<event id>       sk="SEAT#<seat id>"   (+ position for layout order)
    user     pk="USER#<user id>" sk="USER"
    counters pk="COUNTER"        sk="event" | "user"

Multi-seat writes go through TransactWriteItems. DynamoDB allows at most 100
actions per transaction, so larger writes are split; if a later transaction
fails the earlier ones are rolled back (see
``DynamoDBClient.transact_write_all``). Another process reading between
those transactions can see the partial write.

The per-event lock lives in this process, so the read/write exclusivity of
``SeatStore`` holds for a single service instance sharing the table.
"""

import json
from decimal import Decimal
from typing import Any, Dict, List, Optional

from seatadmin.database import DynamoDBClient
from seatadmin.exceptions import StorageError
from seatadmin.logger_config import logger
from seatadmin.models.event import Event
from seatadmin.models.layout import EventConfiguration
from seatadmin.models.seat import Seat, SeatLabel, SeatStatus
from seatadmin.models.user import User, UserRole
from seatadmin.store.base import EventStore, SeatStore, UserStore

EVENT_SK = "EVENT"
SEAT_PREFIX = "SEAT#"
USER_PREFIX = "USER#"
USER_SK = "USER"


def _check(result: Dict[str, Any], action: str) -> Dict[str, Any]:
    if result["status"] == "error":
        logger.error(f"DynamoDB {action} failed: {result['error']}")
        raise StorageError(f"Failed to {action}: {result['error']}")
    return result


def _to_int(value) -> Optional[int]:
    # Numbers come back from DynamoDB as Decimal
    if value is None:
        return None
    return int(value) if isinstance(value, Decimal) else value


def seat_to_item(seat: Seat, position: int) -> Dict[str, Any]:
    item = {
        "pk": str(seat.event_id),
        "sk": f"{SEAT_PREFIX}{seat.id}",
        "seat_id": seat.id,
        "event_id": seat.event_id,
        "status": seat.status.value,
        "position": position,
        "label": seat.label.model_dump(),
    }
    if seat.user_id is not None:
        item["user_id"] = seat.user_id
    return item


def item_to_seat(item: Dict[str, Any]) -> Seat:
    return Seat(
        id=item["seat_id"],
        event_id=_to_int(item["event_id"]),
        status=SeatStatus(item["status"]),
        user_id=_to_int(item.get("user_id")),
        label=SeatLabel(**item["label"]),
    )


class DynamoDBSeatStore(SeatStore):
    def __init__(self, client: DynamoDBClient, locks=None):
        super().__init__(locks)
        self.client = client

    def _items(self, event_id: int) -> List[Dict[str, Any]]:
        result = _check(self.client.query_items(str(event_id), SEAT_PREFIX), "fetch seats")
        return sorted(result["items"], key=lambda item: _to_int(item.get("position", 0)))

    def _load(self, event_id: int) -> List[Seat]:
        return [item_to_seat(item) for item in self._items(event_id)]

    def _replace(self, event_id: int, seats: List[Seat]) -> None:
        old_items = {item["seat_id"]: item for item in self._items(event_id)}
        keep = {seat.id for seat in seats}
        actions, rollback = [], []

        for seat_id, item in old_items.items():
            if seat_id not in keep:
                actions.append(self.client.delete_action(item["pk"], item["sk"]))
                rollback.append(self.client.put_action(item))

        for position, seat in enumerate(seats):
            item = seat_to_item(seat, position)
            old = old_items.get(seat.id)
            if old == item:
                continue
            actions.append(self.client.put_action(item))
            if old is None:
                rollback.append(self.client.delete_action(item["pk"], item["sk"]))
            else:
                rollback.append(self.client.put_action(old))

        _check(self.client.transact_write_all(actions, rollback), "replace seats")

    def _update(self, event_id: int, seats: List[Seat]) -> None:
        old_items = {item["seat_id"]: item for item in self._items(event_id)}
        names = {"#status": "status"}
        actions, rollback = [], []

        for seat in seats:
            old = old_items.get(seat.id)
            if old is None:
                continue
            if seat.user_id is None:
                expression = "SET #status = :status REMOVE user_id"
                values = {":status": seat.status.value}
            else:
                expression = "SET #status = :status, user_id = :user_id"
                values = {":status": seat.status.value, ":user_id": seat.user_id}
            actions.append(
                self.client.update_action(
                    old["pk"], old["sk"], expression, values, expression_names=names
                )
            )
            rollback.append(self.client.put_action(old))

        _check(self.client.transact_write_all(actions, rollback), "update seats")

    def _purge(self, event_id: int) -> int:
        items = self._items(event_id)
        actions = [self.client.delete_action(item["pk"], item["sk"]) for item in items]
        rollback = [self.client.put_action(item) for item in items]
        _check(self.client.transact_write_all(actions, rollback), "delete seats")
        return len(items)


class DynamoDBEventStore(EventStore):
    def __init__(self, client: DynamoDBClient):
        self.client = client

    def next_id(self) -> int:
        return _check(self.client.next_counter("event"), "allocate event id")["value"]

    def save(self, event: Event) -> None:
        event_item = {
            "pk": str(event.id),
            "sk": EVENT_SK,
            "event_id": event.id,
            "name": event.name,
            "venue": event.venue,
            "date": event.date,
            # Stored as JSON so layout numbers keep their int type
            "configuration": json.dumps(event.configuration.model_dump(by_alias=True)),
        }
        _check(self.client.put_item(event_item), f"save event {event.id}")

    @staticmethod
    def _to_event(item: Dict[str, Any]) -> Event:
        return Event(
            id=_to_int(item["event_id"]),
            name=item["name"],
            venue=item["venue"],
            date=item["date"],
            configuration=EventConfiguration.model_validate_json(item["configuration"]),
        )

    def get(self, event_id: int) -> Optional[Event]:
        result = _check(self.client.get_item(str(event_id), EVENT_SK), f"fetch event {event_id}")
        if result["status"] == "not_found":
            return None
        return self._to_event(result["item"])

    def list(self) -> List[Event]:
        result = _check(self.client.scan_items("sk = :sk", {":sk": EVENT_SK}), "fetch events")
        events = [self._to_event(item) for item in result["items"]]
        return sorted(events, key=lambda event: event.id)

    def delete(self, event_id: int) -> bool:
        result = _check(self.client.delete_item(str(event_id), EVENT_SK), f"delete event {event_id}")
        return result["status"] == "success"


class DynamoDBUserStore(UserStore):
    def __init__(self, client: DynamoDBClient):
        self.client = client

    def next_id(self) -> int:
        return _check(self.client.next_counter("user"), "allocate user id")["value"]

    def save(self, user: User) -> None:
        user_item = {
            "pk": f"{USER_PREFIX}{user.id}",
            "sk": USER_SK,
            "user_id": user.id,
            "username": user.username,
            "role": user.role.value,
        }
        _check(self.client.put_item(user_item), f"save user {user.id}")

    @staticmethod
    def _to_user(item: Dict[str, Any]) -> User:
        return User(
            id=_to_int(item["user_id"]),
            username=item["username"],
            role=UserRole(item["role"]),
        )

    def get(self, user_id: int) -> Optional[User]:
        result = _check(
            self.client.get_item(f"{USER_PREFIX}{user_id}", USER_SK), f"fetch user {user_id}"
        )
        if result["status"] == "not_found":
            return None
        return self._to_user(result["item"])

    def get_by_username(self, username: str) -> Optional[User]:
        for user in self.list():
            if user.username == username:
                return user
        return None

    def list(self) -> List[User]:
        result = _check(self.client.scan_items("sk = :sk", {":sk": USER_SK}), "fetch users")
        users = [self._to_user(item) for item in result["items"]]
        return sorted(users, key=lambda user: user.id)

    def delete(self, user_id: int) -> bool:
        result = _check(
            self.client.delete_item(f"{USER_PREFIX}{user_id}", USER_SK), f"delete user {user_id}"
        )
        return result["status"] == "success"
