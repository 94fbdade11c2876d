import datetime as dt
from typing import Optional

from pydantic import BaseModel

from app.models.appointment import ApptStatus
from app.schemas.common import TimeHHMM

class AppointmentCreate(BaseModel):
    # required-ness is checked by the booking service (patient fields may come from the token)
    clinic_id: Optional[str] = None
    appointment_date: Optional[dt.date] = None
    appointment_time: Optional[TimeHHMM] = None
    slot_id: Optional[str] = None
    reason: Optional[str] = None
    disease: Optional[str] = None
    doctor_name: Optional[str] = None
    patient_name: Optional[str] = None
    patient_phone: Optional[str] = None
    patient_email: Optional[str] = None

class StatusUpdate(BaseModel):
    status: str

class AppointmentOut(BaseModel):
    id: str
    patient_id: Optional[str] = None
    clinic_id: str
    slot_id: Optional[str] = None
    patient_name: str
    patient_phone: str
    patient_email: Optional[str] = None
    appointment_date: dt.date
    appointment_time: str
    reason: str = ""
    disease: str = ""
    doctor_name: Optional[str] = None
    status: ApptStatus
    clinic_name: Optional[str] = None

    class Config:
        from_attributes = True

    @staticmethod
    def from_model(a) -> "AppointmentOut":
        out = AppointmentOut.model_validate(a)
        clinic = a.__dict__.get("clinic")   # only when eagerly loaded
        if clinic is not None:
            out.clinic_name = clinic.name
        return out

class StatsOut(BaseModel):
    total: int
    today: int
    followups: int
    pending: int
