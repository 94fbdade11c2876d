import uuid
import enum
from datetime import date, datetime
from sqlalchemy import String, Enum, ForeignKey, Date, DateTime, Text, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.core.db import Base

class ApptStatus(str, enum.Enum):
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"

class Appointment(Base):
    __tablename__ = "appointments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # null for anonymous / walk-in bookings
    patient_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    clinic_id: Mapped[str] = mapped_column(String(36), ForeignKey("clinics.id", ondelete="CASCADE"), index=True)
    slot_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("slots.id", ondelete="SET NULL"), nullable=True, index=True
    )
    # mirrors slot_id while status == scheduled, NULL otherwise; backs uq_appt_active_slot
    active_slot_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    patient_name: Mapped[str] = mapped_column(String(255))
    patient_phone: Mapped[str] = mapped_column(String(50))
    patient_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    appointment_date: Mapped[date] = mapped_column(Date, index=True)
    appointment_time: Mapped[str] = mapped_column(String(5))   # HH:MM

    reason: Mapped[str] = mapped_column(Text, default="")
    disease: Mapped[str] = mapped_column(String(255), default="")
    doctor_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[ApptStatus] = mapped_column(Enum(ApptStatus), default=ApptStatus.scheduled, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(), server_default=func.current_timestamp())

    clinic = relationship("Clinic")

    __table_args__ = (
        UniqueConstraint("active_slot_id", "appointment_date", "appointment_time", name="uq_appt_active_slot"),
        Index("ix_appt_date_time", "appointment_date", "appointment_time"),
    )
