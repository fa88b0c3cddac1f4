"""Patient directory table using SQLAlchemy Core."""

from sqlalchemy import Column, DateTime, Integer, MetaData, Table, Text

metadata = MetaData()

# Owned by the patient registry; scheduling only checks existence.
patients = Table(
    "patients",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("full_name", Text, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=True),
)
