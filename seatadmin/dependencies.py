from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from seatadmin.exceptions import DomainError
from seatadmin.models.user import User
from seatadmin.service import SeatingService


def get_service(request: Request) -> SeatingService:
    """Service instance attached to the running app"""
    return request.app.state.service


def get_current_user(
    x_user_id: Optional[int] = Header(None, description="ID of the calling user"),
    service: SeatingService = Depends(get_service),
) -> User:
    """Resolve the caller from the X-User-Id header"""
    try:
        return service.resolve_caller(x_user_id)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
