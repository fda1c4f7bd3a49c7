from typing import Optional

from pydantic import Field

from seatadmin.models.base import CamelModel
from seatadmin.models.layout import EventConfiguration


class EventCreate(CamelModel):
    name: str = Field(..., min_length=1)
    venue: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1)
    configuration: EventConfiguration


class EventUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    venue: Optional[str] = Field(None, min_length=1)
    date: Optional[str] = Field(None, min_length=1)
    configuration: Optional[EventConfiguration] = None


class Event(CamelModel):
    id: int
    name: str
    venue: str
    date: str
    configuration: EventConfiguration
