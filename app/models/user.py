import enum
import uuid
from sqlalchemy import String, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.core.db import Base

class RoleEnum(str, enum.Enum):
    patient = "patient"
    hospital = "hospital"

class User(Base):
    """A patient account, or a hospital account that owns clinics."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)   # lower-cased, trimmed
    name: Mapped[str] = mapped_column(String(255))
    role: Mapped[RoleEnum] = mapped_column(Enum(RoleEnum), default=RoleEnum.patient)
    hashed_password: Mapped[str] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # only populated for hospital accounts
    clinics = relationship("Clinic", back_populates="hospital")
