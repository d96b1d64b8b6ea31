"""
Schemas para ReproductionRecord.
"""

from datetime import datetime

from pydantic import Field

from finca.models.reproduction_record import ReproductiveEventType
from finca.schemas.base import RecordUpdate, SyncableRecord


class ReproductionRecordRecord(SyncableRecord):
    animal_id: str = Field(..., min_length=1)
    date: datetime
    event_type: ReproductiveEventType = ReproductiveEventType.OTHER

    # Monta / inseminación
    sire_id: str = ""
    semen_type: str = ""
    inseminator: str = ""

    # Parto
    offspring_count: int = Field(0, ge=0)
    offspring_ids: list[str] = Field(default_factory=list)
    complications: str = ""

    # Diagnóstico de gestación
    diagnosis_result: bool | None = None
    diagnosis_method: str = ""
    gestation_days: int | None = Field(None, ge=0)
    expected_birth_date: datetime | None = None

    notes: str = ""
    recorded_by: str | None = None


class ReproductionRecordUpdate(RecordUpdate):
    date: datetime | None = None
    event_type: ReproductiveEventType | None = None
    sire_id: str | None = None
    semen_type: str | None = None
    inseminator: str | None = None
    offspring_count: int | None = Field(None, ge=0)
    offspring_ids: list[str] | None = None
    complications: str | None = None
    diagnosis_result: bool | None = None
    diagnosis_method: str | None = None
    gestation_days: int | None = Field(None, ge=0)
    expected_birth_date: datetime | None = None
    notes: str | None = None
