"""
Schemas para MilkProduction y sus agregados.
"""

from datetime import date as date_type
from datetime import datetime

from pydantic import BaseModel, Field

from finca.models.milk_production import MilkingShift
from finca.schemas.base import RecordUpdate, SyncableRecord


class MilkProductionRecord(SyncableRecord):
    animal_id: str = Field(..., min_length=1)
    date: datetime
    shift: MilkingShift = MilkingShift.MORNING
    quantity_liters: float = Field(0.0, ge=0, description="Cantidad en litros")
    quality: str = ""
    fat_percentage: float | None = Field(None, ge=0, le=100)
    protein_percentage: float | None = Field(None, ge=0, le=100)
    notes: str = ""
    recorded_by: str | None = None


class MilkProductionUpdate(RecordUpdate):
    date: datetime | None = None
    shift: MilkingShift | None = None
    quantity_liters: float | None = Field(None, ge=0)
    quality: str | None = None
    fat_percentage: float | None = Field(None, ge=0, le=100)
    protein_percentage: float | None = Field(None, ge=0, le=100)
    notes: str | None = None


class DailyMilkTotal(BaseModel):
    """Total de leche de un día calendario (UTC)."""
    day: date_type
    total_liters: float
