"""
Schemas para Animal.
"""

from datetime import date

from pydantic import Field

from finca.models.animal import AnimalStatus, Sex, Species
from finca.schemas.base import RecordUpdate, SyncableRecord


class AnimalRecord(SyncableRecord):
    tag_number: str = Field("", max_length=50)
    name: str = Field("", max_length=100)
    species: Species = Species.OTHER
    breed: str = ""
    sex: Sex | None = None
    birth_date: date | None = None
    weight_kg: float = Field(0.0, ge=0)
    color: str = ""
    origin: str = ""
    mother_id: str = ""
    father_id: str = ""
    acquisition_date: date | None = None
    acquisition_price: float = Field(0.0, ge=0)
    status: AnimalStatus = AnimalStatus.ACTIVE


class AnimalUpdate(RecordUpdate):
    tag_number: str | None = Field(None, max_length=50)
    name: str | None = Field(None, max_length=100)
    species: Species | None = None
    breed: str | None = None
    sex: Sex | None = None
    birth_date: date | None = None
    weight_kg: float | None = Field(None, ge=0)
    color: str | None = None
    origin: str | None = None
    mother_id: str | None = None
    father_id: str | None = None
    acquisition_date: date | None = None
    acquisition_price: float | None = Field(None, ge=0)
    status: AnimalStatus | None = None
