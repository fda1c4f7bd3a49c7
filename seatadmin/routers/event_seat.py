from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path

from seatadmin.dependencies import get_service
from seatadmin.exceptions import DomainError
from seatadmin.logger_config import logger
from seatadmin.models.seat import Seat, SeatSummary
from seatadmin.service import SeatingService

router = APIRouter(prefix="/api", tags=["event-seats"])


@router.get("/events/{event_id}/seats", response_model=List[Seat])
def get_event_seats(
    event_id: int = Path(..., description="The event ID"),
    service: SeatingService = Depends(get_service),
):
    """Get all seats for a specific event, in layout order"""
    try:
        return service.list_seats(event_id)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception(f"Failed to fetch seats of event {event_id}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.get("/events/{event_id}/seats/summary", response_model=SeatSummary)
def get_event_seat_summary(
    event_id: int = Path(..., description="The event ID"),
    service: SeatingService = Depends(get_service),
):
    """Count the seats of an event per status"""
    try:
        return service.seat_summary(event_id)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception(f"Failed to summarize seats of event {event_id}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.get("/events/{event_id}/seats/{seat_id}", response_model=Seat)
def get_event_seat(
    event_id: int = Path(..., description="The event ID"),
    seat_id: str = Path(..., description="The seat ID"),
    service: SeatingService = Depends(get_service),
):
    """Get a single seat of an event"""
    try:
        return service.get_seat(event_id, seat_id)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception(f"Failed to fetch seat {seat_id}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")
