import datetime as dt
from typing import Optional

from pydantic import BaseModel

from app.schemas.common import TimeHHMM

class FollowupCreate(BaseModel):
    appointment_id: Optional[str] = None
    patient_name: Optional[str] = None
    patient_phone: Optional[str] = None
    followup_date: Optional[dt.date] = None
    followup_time: Optional[TimeHHMM] = None
    reason: Optional[str] = None
    doctor_name: Optional[str] = None

class FollowupOut(BaseModel):
    id: str
    appointment_id: Optional[str] = None
    patient_name: str
    patient_phone: str
    followup_date: dt.date
    followup_time: str
    reason: str = ""
    doctor_name: str
    status: str

    class Config:
        from_attributes = True
