"""Database models."""

from sqlalchemy import MetaData

from clinic_scheduling.models.appointments import appointments
from clinic_scheduling.models.appointments import metadata as appointments_metadata
from clinic_scheduling.models.patients import metadata as patients_metadata
from clinic_scheduling.models.patients import patients
from clinic_scheduling.models.providers import metadata as providers_metadata
from clinic_scheduling.models.providers import providers

# Combined metadata for create_all / migrations
metadata = MetaData()
for _source in (appointments_metadata, patients_metadata, providers_metadata):
    for _table in _source.tables.values():
        _table.to_metadata(metadata)

__all__ = [
    "appointments",
    "metadata",
    "patients",
    "providers",
]
