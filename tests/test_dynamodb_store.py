import json

import pytest
from botocore.exceptions import ClientError

from seatadmin.exceptions import StorageError
from seatadmin.main import build_service
from seatadmin.models.event import EventCreate, EventUpdate
from seatadmin.models.seat import SeatStatus
from seatadmin.models.user import UserCreate, UserRole

from conftest import SAMPLE_CONFIGURATION, SAMPLE_SEAT_COUNT


@pytest.fixture
def dynamodb_service(dynamodb_settings, dynamodb_client):
    return build_service(dynamodb_settings, db_client=dynamodb_client)


def create_event(service, name="Dynamo Night"):
    return service.create_event(
        EventCreate.model_validate(
            {"name": name, "venue": "Hall", "date": "2025-01-01", "configuration": SAMPLE_CONFIGURATION}
        )
    )


def test_event_round_trip(dynamodb_service, fake_table):
    event = create_event(dynamodb_service)

    loaded = dynamodb_service.get_event(event.id)

    assert loaded == event
    assert loaded.configuration.zones[1].sections[0].rows[0].aisles == [2]
    stored = fake_table.items[(str(event.id), "EVENT")]
    assert json.loads(stored["configuration"])["zones"][0]["sections"][0]["rows"][0] == {
        "label": "1",
        "seatCount": 3,
        "aisles": None,
    }


def test_ids_come_from_counters(dynamodb_service, fake_table):
    first = create_event(dynamodb_service, "First")
    second = create_event(dynamodb_service, "Second")

    assert (first.id, second.id) == (1, 2)
    assert fake_table.items[("COUNTER", "event")]["next_value"] == 2
    assert [event.name for event in dynamodb_service.list_events()] == ["First", "Second"]


def test_seats_keep_layout_order(dynamodb_service):
    event = create_event(dynamodb_service)

    seats = dynamodb_service.list_seats(event.id)

    assert len(seats) == SAMPLE_SEAT_COUNT
    assert [seat.id for seat in seats[:4]] == [
        f"{event.id}-Front-A-1-1",
        f"{event.id}-Front-A-1-2",
        f"{event.id}-Front-A-1-3",
        f"{event.id}-Front-A-2-1",
    ]
    assert seats[-1].id == f"{event.id}-Back-B-AA-4"


def test_booking_workflow(dynamodb_service, fake_table):
    admin = dynamodb_service.create_user(UserCreate(username="admin", role=UserRole.ADMIN))
    member = dynamodb_service.create_user(UserCreate(username="alice"))
    event = create_event(dynamodb_service)
    seat_id = f"{event.id}-Back-B-AA-3"

    dynamodb_service.book_seats(event.id, [seat_id], member)
    dynamodb_service.approve_seats(event.id, [seat_id], admin)
    approved = dynamodb_service.get_seat(event.id, seat_id)
    dynamodb_service.reset_seats(event.id, admin)

    assert approved.status == SeatStatus.RESERVED
    assert approved.user_id == member.id
    assert "user_id" not in fake_table.items[(str(event.id), f"SEAT#{seat_id}")]
    assert dynamodb_service.get_seat(event.id, seat_id).status == SeatStatus.AVAILABLE


def test_layout_edit_rewrites_positions(dynamodb_service, fake_table):
    event = create_event(dynamodb_service)
    configuration = {
        "zones": [
            {"name": "Back", "sections": [{"name": "B", "rows": [{"label": "AA", "seatCount": 2}]}]},
            SAMPLE_CONFIGURATION["zones"][0],
        ]
    }

    dynamodb_service.update_event(event.id, EventUpdate.model_validate({"configuration": configuration}))

    seats = dynamodb_service.list_seats(event.id)
    assert [seat.id for seat in seats[:2]] == [f"{event.id}-Back-B-AA-1", f"{event.id}-Back-B-AA-2"]
    assert len(seats) == 7
    assert (str(event.id), f"SEAT#{event.id}-Back-B-AA-4") not in fake_table.items


def test_user_round_trip(dynamodb_service):
    user = dynamodb_service.create_user(UserCreate(username="bob", role=UserRole.ADMIN))

    assert dynamodb_service.get_user(user.id) == user
    assert dynamodb_service.users.get_by_username("bob") == user
    assert dynamodb_service.resolve_caller(user.id).is_admin


def test_delete_event_removes_items(dynamodb_service, fake_table):
    event = create_event(dynamodb_service)

    dynamodb_service.delete_event(event.id)

    assert not any(pk == str(event.id) for pk, _ in fake_table.items)
    assert dynamodb_service.events.delete(event.id) is False


def test_client_errors_become_storage_errors(dynamodb_service, fake_table):
    def failing_query(**kwargs):
        raise ClientError({"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow down"}}, "Query")

    event = create_event(dynamodb_service)
    fake_table.query = failing_query

    with pytest.raises(StorageError) as excinfo:
        dynamodb_service.list_seats(event.id)

    assert excinfo.value.status_code == 500


def long_row_configuration(label="1", seat_count=150):
    return {"zones": [{"name": "Hall", "sections": [{"name": "A", "rows": [{"label": label, "seatCount": seat_count}]}]}]}


def create_long_row_event(service):
    return service.create_event(
        EventCreate.model_validate(
            {"name": "Long Row", "venue": "Hall", "date": "2025-01-01", "configuration": long_row_configuration()}
        )
    )


def snapshot(service, event_id):
    return [(seat.id, seat.status, seat.user_id) for seat in service.list_seats(event_id)]


def test_failed_bulk_update_writes_nothing(dynamodb_service, fake_client):
    """A bulk status change that fails leaves every seat as it was"""
    member = dynamodb_service.create_user(UserCreate(username="alice"))
    event = create_event(dynamodb_service)
    before = snapshot(dynamodb_service, event.id)
    fake_client.fail_next(1)

    with pytest.raises(StorageError):
        dynamodb_service.book_seats(
            event.id, [f"{event.id}-Front-A-1-{n}" for n in (1, 2, 3)], member
        )

    assert snapshot(dynamodb_service, event.id) == before


def test_bulk_update_is_split_into_transactions(dynamodb_service, fake_client):
    member = dynamodb_service.create_user(UserCreate(username="alice"))
    event = create_long_row_event(dynamodb_service)
    fake_client.transaction_sizes.clear()

    booked = dynamodb_service.book_seats(
        event.id, [seat.id for seat in dynamodb_service.list_seats(event.id)], member
    )

    assert len(booked) == 150
    assert fake_client.transaction_sizes == [100, 50]
    assert all(seat.status == SeatStatus.PENDING for seat in dynamodb_service.list_seats(event.id))


def test_failed_later_transaction_rolls_back_earlier_ones(dynamodb_service, fake_client, fake_table):
    member = dynamodb_service.create_user(UserCreate(username="alice"))
    event = create_long_row_event(dynamodb_service)
    before = snapshot(dynamodb_service, event.id)
    fake_client.fail_next(2)

    with pytest.raises(StorageError):
        dynamodb_service.book_seats(event.id, [seat_id for seat_id, _, _ in before], member)

    assert snapshot(dynamodb_service, event.id) == before
    seat_items = [item for (pk, sk), item in fake_table.items.items() if sk.startswith("SEAT#")]
    assert not any("user_id" in item for item in seat_items)


def test_failed_layout_edit_keeps_seats_and_event(dynamodb_service, fake_client):
    """Seats and the stored layout stay on the old configuration"""
    event = create_long_row_event(dynamodb_service)
    before = snapshot(dynamodb_service, event.id)
    fake_client.fail_next(2)

    with pytest.raises(StorageError):
        dynamodb_service.update_event(
            event.id,
            EventUpdate.model_validate({"configuration": long_row_configuration(label="2")}),
        )

    assert snapshot(dynamodb_service, event.id) == before
    assert dynamodb_service.get_event(event.id).configuration == event.configuration


def test_failed_event_save_leaves_seats_untouched(dynamodb_service, fake_table):
    event = create_event(dynamodb_service)
    before = snapshot(dynamodb_service, event.id)
    put_item = fake_table.put_item

    def failing_put_item(Item):
        if Item["sk"] == "EVENT":
            raise ClientError({"Error": {"Code": "InternalServerError", "Message": "boom"}}, "PutItem")
        return put_item(Item=Item)

    fake_table.put_item = failing_put_item

    with pytest.raises(StorageError):
        dynamodb_service.update_event(
            event.id, EventUpdate.model_validate({"configuration": long_row_configuration()})
        )

    fake_table.put_item = put_item
    assert snapshot(dynamodb_service, event.id) == before
    assert dynamodb_service.get_event(event.id) == event


def test_failed_seat_creation_removes_event(dynamodb_service, fake_client):
    fake_client.fail_next(1)

    with pytest.raises(StorageError):
        create_event(dynamodb_service)

    assert dynamodb_service.list_events() == []
