import gc

from conftest import SAMPLE_SEAT_COUNT


def test_get_event_seats(client, test_event):
    """Test getting seats for an event"""
    response = client.get(f"/api/events/{test_event['id']}/seats")

    assert response.status_code == 200
    data = response.json()

    assert len(data) == SAMPLE_SEAT_COUNT
    assert all(seat["eventId"] == test_event["id"] for seat in data)
    assert data[0] == {
        "id": f"{test_event['id']}-Front-A-1-1",
        "eventId": test_event["id"],
        "status": "available",
        "userId": None,
        "label": {"zone": "Front", "section": "A", "row": "1", "seat": "1"},
    }
    assert data[-1]["id"] == f"{test_event['id']}-Back-B-AA-4"


def test_get_event_seats_invalid_event(client):
    """Test getting seats for non-existent event"""
    response = client.get("/api/events/999/seats")

    assert response.status_code == 404
    assert "not found" in response.json()["detail"]


def test_get_single_seat(client, test_event):
    seat_id = f"{test_event['id']}-Back-B-AA-2"

    response = client.get(f"/api/events/{test_event['id']}/seats/{seat_id}")

    assert response.status_code == 200
    assert response.json()["label"] == {"zone": "Back", "section": "B", "row": "AA", "seat": "2"}


def test_get_single_seat_not_found(client, test_event):
    response = client.get(f"/api/events/{test_event['id']}/seats/{test_event['id']}-Back-B-AA-9")

    assert response.status_code == 404


def test_seat_summary(client, test_event, admin_headers, user_headers):
    event_id = test_event["id"]
    client.post(
        f"/api/events/{event_id}/seats/book",
        json={"ids": [f"{event_id}-Front-A-1-1", f"{event_id}-Front-A-1-2"]},
        headers=user_headers,
    )
    client.post(
        f"/api/events/{event_id}/seats/update",
        json={"ids": [f"{event_id}-Back-B-AA-1"], "status": "blocked"},
        headers=admin_headers,
    )

    response = client.get(f"/api/events/{event_id}/seats/summary")

    assert response.status_code == 200
    assert response.json() == {
        "eventId": event_id,
        "total": SAMPLE_SEAT_COUNT,
        "available": SAMPLE_SEAT_COUNT - 3,
        "pending": 2,
        "reserved": 0,
        "blocked": 1,
    }


def test_get_seat_with_non_ascii_event_prefix(client, test_event):
    response = client.get(f"/api/events/{test_event['id']}/seats/²-Front-A-1-1")

    assert response.status_code == 404


def test_seat_lookups_do_not_accumulate_locks(client, service, test_event, admin_headers):
    """Reads of unknown seat ids and deleted events leave no locks behind"""
    event_id = test_event["id"]
    for prefix in range(1000, 1200):
        response = client.get(f"/api/events/{event_id}/seats/{prefix}-x-y-z-1")
        assert response.status_code == 404

    client.delete(f"/api/events/{event_id}", headers=admin_headers)

    gc.collect()
    assert len(service.seats.locks) == 0
