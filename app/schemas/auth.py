from pydantic import BaseModel, EmailStr, Field
from enum import Enum

class Role(str, Enum):
    patient = "patient"
    hospital = "hospital"

class RegisterIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
    role: Role
    phone: str | None = None

class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

class UserOut(BaseModel):
    id: str
    email: EmailStr
    name: str
    role: Role
    phone: str | None = None

    class Config:
        from_attributes = True

class AuthOut(BaseModel):
    token: str
    user: UserOut
