"""Booking workflow: who may move seats between which states.

    available --book--> pending --approve--> reserved
                        pending --reject---> available
    any --reset--> available          (admin, whole event)
    any --override--> any             (admin, e.g. blocking seats)

The store applies updates unconditionally. Source states are only checked in
strict mode, where ``allowed_sources`` is passed down to the store.
"""

from enum import Enum
from typing import FrozenSet, Optional

from seatadmin.exceptions import ForbiddenError, UnauthorizedError
from seatadmin.models.seat import SeatStatus, SeatUpdate
from seatadmin.models.user import User


class SeatAction(str, Enum):
    BOOK = "book"
    APPROVE = "approve"
    REJECT = "reject"
    RESET = "reset"
    OVERRIDE = "override"


ALL_STATES = frozenset(SeatStatus)

SOURCE_STATES = {
    SeatAction.BOOK: frozenset({SeatStatus.AVAILABLE}),
    SeatAction.APPROVE: frozenset({SeatStatus.PENDING}),
    SeatAction.REJECT: frozenset({SeatStatus.PENDING}),
    SeatAction.RESET: ALL_STATES,
    SeatAction.OVERRIDE: ALL_STATES,
}

ADMIN_ACTIONS = frozenset(
    {SeatAction.APPROVE, SeatAction.REJECT, SeatAction.RESET, SeatAction.OVERRIDE}
)


def authorize(action: SeatAction, caller: Optional[User]) -> None:
    if caller is None:
        raise UnauthorizedError("Authentication required")
    if action in ADMIN_ACTIONS and not caller.is_admin:
        raise ForbiddenError(f"Only admins may {action.value} seats")


def update_for(action: SeatAction, caller: User, status: Optional[SeatStatus] = None,
               user_id: Optional[int] = None) -> SeatUpdate:
    """Build the seat update an action applies"""
    if action is SeatAction.BOOK:
        return SeatUpdate.assign(SeatStatus.PENDING, caller.id)
    if action is SeatAction.APPROVE:
        return SeatUpdate.keep(SeatStatus.RESERVED)
    if action in (SeatAction.REJECT, SeatAction.RESET):
        return SeatUpdate.clear(SeatStatus.AVAILABLE)
    if action is SeatAction.OVERRIDE:
        if status is None:
            raise ValueError("override needs a target status")
        if user_id is None:
            return SeatUpdate.clear(status)
        return SeatUpdate.assign(status, user_id)
    raise ValueError(f"Unknown seat action {action!r}")


def allowed_sources(action: SeatAction) -> FrozenSet[SeatStatus]:
    return SOURCE_STATES[action]
