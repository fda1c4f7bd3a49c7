from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Response

from seatadmin.dependencies import get_current_user, get_service, require_admin
from seatadmin.exceptions import DomainError
from seatadmin.logger_config import logger
from seatadmin.models.user import User, UserCreate
from seatadmin.service import SeatingService

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/user", response_model=User)
def get_me(caller: User = Depends(get_current_user)):
    """Get the calling user"""
    return caller


@router.get("/users", response_model=List[User])
def get_users(
    service: SeatingService = Depends(get_service),
    admin: User = Depends(require_admin),
):
    """List all users"""
    try:
        return service.list_users()
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception("Failed to list users")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.post("/users", response_model=User, status_code=201)
def create_user(
    user_data: UserCreate,
    service: SeatingService = Depends(get_service),
    admin: User = Depends(require_admin),
):
    """Create a new user"""
    try:
        return service.create_user(user_data)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception("Failed to create user")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.get("/users/{user_id}", response_model=User)
def get_user(
    user_id: int = Path(..., description="The user ID"),
    service: SeatingService = Depends(get_service),
    admin: User = Depends(require_admin),
):
    """Get a specific user by ID"""
    try:
        return service.get_user(user_id)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception(f"Failed to fetch user {user_id}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.delete("/users/{user_id}", status_code=204)
def delete_user(
    user_id: int = Path(..., description="The user ID"),
    service: SeatingService = Depends(get_service),
    admin: User = Depends(require_admin),
):
    """Delete a user"""
    try:
        service.delete_user(user_id)
        return Response(status_code=204)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception(f"Failed to delete user {user_id}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")
