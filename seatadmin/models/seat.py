from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from seatadmin.models.base import CamelModel


class SeatStatus(str, Enum):
    AVAILABLE = "available"
    PENDING = "pending"
    RESERVED = "reserved"
    BLOCKED = "blocked"


class _FrozenModel(CamelModel):
    model_config = ConfigDict(
        populate_by_name=True, alias_generator=to_camel, frozen=True
    )


class SeatLabel(_FrozenModel):
    zone: str
    section: str
    row: str
    seat: str  # seat number as a string


class SeatIdentity(_FrozenModel):
    id: str
    event_id: int
    label: SeatLabel


class Seat(_FrozenModel):
    id: str
    event_id: int
    status: SeatStatus = SeatStatus.AVAILABLE
    user_id: Optional[int] = None  # requesting user, meaningful for pending/reserved
    label: SeatLabel

    @classmethod
    def available(cls, identity: SeatIdentity) -> "Seat":
        """Fresh seat for a layout position: available, no requesting user."""
        return cls(id=identity.id, event_id=identity.event_id, label=identity.label)


class OwnerChange(str, Enum):
    ASSIGN = "assign"
    CLEAR = "clear"
    KEEP = "keep"


@dataclass(frozen=True)
class SeatUpdate:
    """Fully specified seat status change.

    Both fields are always applied: the status is overwritten and the
    requesting user is explicitly assigned, cleared or kept.
    """

    status: SeatStatus
    owner: OwnerChange
    user_id: Optional[int] = None

    def __post_init__(self):
        if self.owner is OwnerChange.ASSIGN and self.user_id is None:
            raise ValueError("assigning a requesting user needs a user id")
        if self.owner is not OwnerChange.ASSIGN and self.user_id is not None:
            raise ValueError(f"user id given with owner change '{self.owner.value}'")

    @classmethod
    def assign(cls, status: SeatStatus, user_id: int) -> "SeatUpdate":
        return cls(SeatStatus(status), OwnerChange.ASSIGN, user_id)

    @classmethod
    def clear(cls, status: SeatStatus) -> "SeatUpdate":
        return cls(SeatStatus(status), OwnerChange.CLEAR)

    @classmethod
    def keep(cls, status: SeatStatus) -> "SeatUpdate":
        return cls(SeatStatus(status), OwnerChange.KEEP)

    def apply(self, seat: Seat) -> Seat:
        if self.owner is OwnerChange.ASSIGN:
            user_id = self.user_id
        elif self.owner is OwnerChange.CLEAR:
            user_id = None
        else:
            user_id = seat.user_id
        return seat.model_copy(update={"status": self.status, "user_id": user_id})


class SeatIdsRequest(CamelModel):
    ids: List[str]


class SeatStatusUpdateRequest(CamelModel):
    ids: List[str]
    status: SeatStatus
    user_id: Optional[int] = None


class SeatSummary(CamelModel):
    event_id: int
    total: int
    available: int
    pending: int
    reserved: int
    blocked: int
