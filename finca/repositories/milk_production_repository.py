"""
Repositorio de MilkProduction con los agregados de litros.
"""

from datetime import datetime

from finca.local.daos import MilkProductionDao
from finca.local.live import LiveQuery
from finca.models.milk_production import MilkingShift
from finca.repositories.base import SyncedRepository
from finca.schemas.milk_production import DailyMilkTotal, MilkProductionRecord


class MilkProductionRepository(SyncedRepository[MilkProductionDao, MilkProductionRecord]):
    kind = "MilkProduction"

    def get_by_animal(self, animal_id: str) -> LiveQuery[list[MilkProductionRecord]]:
        return self._dao.get_by_animal(animal_id)

    def get_by_date_range(self, start: datetime, end: datetime) -> LiveQuery[list[MilkProductionRecord]]:
        return self._dao.get_by_date_range(start, end)

    def get_by_shift(self, shift: MilkingShift) -> LiveQuery[list[MilkProductionRecord]]:
        return self._dao.get_by_shift(shift)

    def get_total_by_animal(self, animal_id: str, start: datetime, end: datetime) -> LiveQuery[float]:
        return self._dao.total_by_animal(animal_id, start, end)

    def get_daily_totals(self, start: datetime, end: datetime) -> LiveQuery[list[DailyMilkTotal]]:
        return self._dao.daily_totals(start, end)

    def count_by_shift(self, shift: MilkingShift) -> LiveQuery[int]:
        return self._dao.count_by_shift(shift)
