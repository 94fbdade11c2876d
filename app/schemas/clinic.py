from pydantic import BaseModel, Field
from typing import Optional

class ClinicCreate(BaseModel):
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    phone: Optional[str] = None
    email: Optional[str] = None
    specialties: str = ""
    diseases_handled: str = ""
    operating_hours: str = ""

class ClinicSummary(BaseModel):
    id: str
    name: str
    address: str
    city: str
    state: str

    class Config:
        from_attributes = True

class ClinicOut(ClinicCreate):
    id: str
    hospital_id: str
    hospital_name: Optional[str] = None

    class Config:
        from_attributes = True

class ClinicSearchOut(ClinicOut):
    # only present when the query carried coordinates and the clinic has them
    distance: Optional[float] = None
