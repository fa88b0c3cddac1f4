"""Appointments table model using SQLAlchemy Core."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    Time,
)

metadata = MetaData()

appointments = Table(
    "appointments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    # References (existence checked by the scheduling service)
    Column("patient_id", Integer, nullable=False, index=True),
    Column("provider_id", Integer, nullable=False),
    # Interval
    Column("appointment_date", Date, nullable=False),
    Column("appointment_time", Time, nullable=False),
    Column("duration_minutes", Integer, nullable=False, server_default="30"),
    # Status management
    Column("status", Text, nullable=False, server_default="scheduled"),
    Column("reason", Text, nullable=False),
    Column("notes", Text, nullable=True),
    # Audit fields
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=True),
    # Constraints
    CheckConstraint(
        "duration_minutes > 0 AND duration_minutes <= 480",
        name="appointments_duration_check",
    ),
    CheckConstraint(
        "status IN ('scheduled', 'completed', 'cancelled', 'no_show')",
        name="appointments_status_check",
    ),
    Index("ix_appointments_provider_date", "provider_id", "appointment_date"),
)
