"""initial booking schema

Revision ID: 5b1c0e7a9d21
Revises:
Create Date: 2025-11-03 10:12:40.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1c0e7a9d21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

role_enum = sa.Enum("patient", "hospital", name="roleenum")
status_enum = sa.Enum("scheduled", "completed", "cancelled", name="apptstatus")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", role_enum, nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "clinics",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("hospital_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(255), nullable=False),
        sa.Column("state", sa.String(100), nullable=False),
        sa.Column("zip_code", sa.String(20), nullable=True),
        sa.Column("latitude", sa.Float, nullable=True),
        sa.Column("longitude", sa.Float, nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("specialties", sa.Text, nullable=False),
        sa.Column("diseases_handled", sa.Text, nullable=False),
        sa.Column("operating_hours", sa.String(255), nullable=False),
    )
    op.create_index("ix_clinics_hospital_id", "clinics", ["hospital_id"])
    op.create_index("ix_clinics_name", "clinics", ["name"])
    op.create_index("ix_clinics_city", "clinics", ["city"])

    op.create_table(
        "slots",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("clinic_id", sa.String(36), sa.ForeignKey("clinics.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("time", sa.String(5), nullable=False),
        sa.Column("doctor_name", sa.String(255), nullable=True),
        sa.Column("duration_minutes", sa.Integer, nullable=False),
        sa.Column("is_available", sa.Boolean, nullable=False),
        sa.UniqueConstraint("clinic_id", "date", "time", "doctor_name", name="uq_slot_definition"),
    )
    op.create_index("ix_slots_clinic_id", "slots", ["clinic_id"])
    op.create_index("ix_slot_clinic_date_time", "slots", ["clinic_id", "date", "time"])

    op.create_table(
        "appointments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("patient_id", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("clinic_id", sa.String(36), sa.ForeignKey("clinics.id", ondelete="CASCADE"), nullable=False),
        sa.Column("slot_id", sa.String(36), sa.ForeignKey("slots.id", ondelete="SET NULL"), nullable=True),
        sa.Column("active_slot_id", sa.String(36), nullable=True),
        sa.Column("patient_name", sa.String(255), nullable=False),
        sa.Column("patient_phone", sa.String(50), nullable=False),
        sa.Column("patient_email", sa.String(255), nullable=True),
        sa.Column("appointment_date", sa.Date, nullable=False),
        sa.Column("appointment_time", sa.String(5), nullable=False),
        sa.Column("reason", sa.Text, nullable=False),
        sa.Column("disease", sa.String(255), nullable=False),
        sa.Column("doctor_name", sa.String(255), nullable=True),
        sa.Column("status", status_enum, nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.current_timestamp(), nullable=False),
        # one scheduled appointment per slot/date/time (active_slot_id is NULL once not scheduled)
        sa.UniqueConstraint("active_slot_id", "appointment_date", "appointment_time", name="uq_appt_active_slot"),
    )
    op.create_index("ix_appointments_patient_id", "appointments", ["patient_id"])
    op.create_index("ix_appointments_clinic_id", "appointments", ["clinic_id"])
    op.create_index("ix_appointments_slot_id", "appointments", ["slot_id"])
    op.create_index("ix_appointments_appointment_date", "appointments", ["appointment_date"])
    op.create_index("ix_appointments_status", "appointments", ["status"])
    op.create_index("ix_appt_date_time", "appointments", ["appointment_date", "appointment_time"])

    op.create_table(
        "followups",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("appointment_id", sa.String(36), sa.ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_by", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("patient_name", sa.String(255), nullable=False),
        sa.Column("patient_phone", sa.String(50), nullable=False),
        sa.Column("followup_date", sa.Date, nullable=False),
        sa.Column("followup_time", sa.String(5), nullable=False),
        sa.Column("reason", sa.Text, nullable=False),
        sa.Column("doctor_name", sa.String(255), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.current_timestamp(), nullable=False),
    )
    op.create_index("ix_followups_appointment_id", "followups", ["appointment_id"])
    op.create_index("ix_followups_created_by", "followups", ["created_by"])
    op.create_index("ix_followups_followup_date", "followups", ["followup_date"])


def downgrade() -> None:
    # reverse order
    op.drop_table("followups")
    op.drop_table("appointments")
    op.drop_table("slots")
    op.drop_table("clinics")
    op.drop_table("users")
    status_enum.drop(op.get_bind(), checkfirst=True)
    role_enum.drop(op.get_bind(), checkfirst=True)
