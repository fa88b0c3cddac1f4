"""Provider directory table using SQLAlchemy Core."""

from sqlalchemy import Boolean, Column, Integer, MetaData, String, Table, Text, text

metadata = MetaData()

# Owned by the provider registry; scheduling resolves records by id.
providers = Table(
    "providers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("full_name", Text, nullable=False),
    Column("specialization", String(200)),
    Column("is_active", Boolean, nullable=False, server_default=text("true")),
)
