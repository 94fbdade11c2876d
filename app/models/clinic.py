import uuid
from sqlalchemy import String, Float, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.core.db import Base

class Clinic(Base):
    __tablename__ = "clinics"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    hospital_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), index=True)

    name: Mapped[str] = mapped_column(String(255), index=True)
    address: Mapped[str] = mapped_column(String(255))
    city: Mapped[str] = mapped_column(String(255), index=True)
    state: Mapped[str] = mapped_column(String(100))
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # comma separated free text, matched with ILIKE
    specialties: Mapped[str] = mapped_column(Text, default="")
    diseases_handled: Mapped[str] = mapped_column(Text, default="")
    operating_hours: Mapped[str] = mapped_column(String(255), default="")

    hospital = relationship("User", back_populates="clinics")
    slots = relationship("Slot", back_populates="clinic", cascade="all, delete-orphan")
