"""Booking workflow endpoints.

Seat ids that do not belong to the event are ignored; every endpoint returns
only the seats it changed, so callers needing all-or-nothing semantics compare
the returned count with the request.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path

from seatadmin.dependencies import get_current_user, get_service
from seatadmin.exceptions import DomainError
from seatadmin.logger_config import logger
from seatadmin.models.seat import Seat, SeatIdsRequest, SeatStatusUpdateRequest
from seatadmin.models.user import User
from seatadmin.service import SeatingService

router = APIRouter(prefix="/api", tags=["seat-booking"])


@router.post("/events/{event_id}/seats/book", response_model=List[Seat])
def book_seats(
    request: SeatIdsRequest,
    event_id: int = Path(..., description="The event ID"),
    service: SeatingService = Depends(get_service),
    caller: User = Depends(get_current_user),
):
    """Request seats for the calling user; they stay pending until approved"""
    try:
        return service.book_seats(event_id, request.ids, caller)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception(f"Failed to book seats of event {event_id}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.post("/events/{event_id}/seats/approve", response_model=List[Seat])
def approve_seats(
    request: SeatIdsRequest,
    event_id: int = Path(..., description="The event ID"),
    service: SeatingService = Depends(get_service),
    caller: User = Depends(get_current_user),
):
    """Approve booking requests: seats become reserved for the requesting user"""
    try:
        return service.approve_seats(event_id, request.ids, caller)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception(f"Failed to approve seats of event {event_id}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.post("/events/{event_id}/seats/reject", response_model=List[Seat])
def reject_seats(
    request: SeatIdsRequest,
    event_id: int = Path(..., description="The event ID"),
    service: SeatingService = Depends(get_service),
    caller: User = Depends(get_current_user),
):
    """Reject booking requests: seats become available again"""
    try:
        return service.reject_seats(event_id, request.ids, caller)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception(f"Failed to reject seats of event {event_id}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.post("/events/{event_id}/seats/reset", response_model=List[Seat])
def reset_seats(
    event_id: int = Path(..., description="The event ID"),
    service: SeatingService = Depends(get_service),
    caller: User = Depends(get_current_user),
):
    """Make every seat of the event available"""
    try:
        return service.reset_seats(event_id, caller)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception(f"Failed to reset seats of event {event_id}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.post("/events/{event_id}/seats/update", response_model=List[Seat])
def update_seats(
    request: SeatStatusUpdateRequest,
    event_id: int = Path(..., description="The event ID"),
    service: SeatingService = Depends(get_service),
    caller: User = Depends(get_current_user),
):
    """Set seats to a status directly. Without userId the requesting user is cleared."""
    try:
        return service.override_seats(
            event_id, request.ids, request.status, caller, user_id=request.user_id
        )
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception(f"Failed to update seats of event {event_id}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")
