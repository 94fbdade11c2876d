import datetime as dt
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from app.schemas.common import TimeHHMM

class SlotCreate(BaseModel):
    date: dt.date
    time: TimeHHMM
    doctor_name: Optional[str] = None
    duration_minutes: int = Field(30, ge=5, le=480, validation_alias=AliasChoices("duration_minutes", "duration"))

class SlotOut(BaseModel):
    id: str
    clinic_id: str
    date: dt.date
    time: str
    doctor_name: Optional[str] = None
    duration_minutes: int
    is_available: bool

    class Config:
        from_attributes = True

class SlotView(SlotOut):
    booked_by: Optional[str] = None
