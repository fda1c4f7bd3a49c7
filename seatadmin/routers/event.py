from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Response

from seatadmin.dependencies import get_service, require_admin
from seatadmin.exceptions import DomainError
from seatadmin.logger_config import logger
from seatadmin.models.event import Event, EventCreate, EventUpdate
from seatadmin.models.user import User
from seatadmin.service import SeatingService

router = APIRouter(prefix="/api", tags=["events"])


@router.get("/events", response_model=List[Event])
def get_events(service: SeatingService = Depends(get_service)):
    """Get all events"""
    try:
        return service.list_events()
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception("Failed to list events")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.get("/events/{event_id}", response_model=Event)
def get_event(
    event_id: int = Path(..., description="The event ID"),
    service: SeatingService = Depends(get_service),
):
    """Get a specific event by ID"""
    try:
        return service.get_event(event_id)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception(f"Failed to fetch event {event_id}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.post("/events", response_model=Event, status_code=201)
def create_event(
    event_data: EventCreate,
    service: SeatingService = Depends(get_service),
    admin: User = Depends(require_admin),
):
    """Create a new event and generate the seats of its layout"""
    try:
        return service.create_event(event_data)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception("Failed to create event")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.put("/events/{event_id}", response_model=Event)
def update_event(
    event_data: EventUpdate,
    event_id: int = Path(..., description="The event ID"),
    service: SeatingService = Depends(get_service),
    admin: User = Depends(require_admin),
):
    """Update an event. A new configuration regenerates the seats, keeping
    bookings of seats that still exist and dropping the rest."""
    try:
        return service.update_event(event_id, event_data)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception(f"Failed to update event {event_id}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.delete("/events/{event_id}", status_code=204)
def delete_event(
    event_id: int = Path(..., description="The event ID"),
    service: SeatingService = Depends(get_service),
    admin: User = Depends(require_admin),
):
    """Delete an event and all of its seats"""
    try:
        service.delete_event(event_id)
        return Response(status_code=204)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception(f"Failed to delete event {event_id}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")
