"""
Schemas para HealthRecord.
"""

from datetime import datetime

from pydantic import Field

from finca.models.health_record import HealthRecordType
from finca.schemas.base import RecordUpdate, SyncableRecord


class HealthRecordRecord(SyncableRecord):
    animal_id: str = Field(..., min_length=1)
    date: datetime
    record_type: HealthRecordType = HealthRecordType.OTHER
    description: str = ""
    product: str = ""
    dose: str = ""
    administration_route: str = ""
    responsible: str = ""
    notes: str = ""
    next_treatment_date: datetime | None = None
    recorded_by: str | None = None


class HealthRecordUpdate(RecordUpdate):
    date: datetime | None = None
    record_type: HealthRecordType | None = None
    description: str | None = None
    product: str | None = None
    dose: str | None = None
    administration_route: str | None = None
    responsible: str | None = None
    notes: str | None = None
    next_treatment_date: datetime | None = None
