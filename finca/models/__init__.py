"""
Modelos SQLAlchemy — exportar todos para que Alembic los detecte.
"""

from finca.models.animal import Animal, AnimalStatus, Sex, Species
from finca.models.health_record import HealthRecord, HealthRecordType
from finca.models.milk_production import MilkingShift, MilkProduction
from finca.models.preference import Preference
from finca.models.reproduction_record import ReproductionRecord, ReproductiveEventType

__all__ = [
    "Animal",
    "AnimalStatus",
    "Sex",
    "Species",
    "HealthRecord",
    "HealthRecordType",
    "MilkProduction",
    "MilkingShift",
    "Preference",
    "ReproductionRecord",
    "ReproductiveEventType",
]
