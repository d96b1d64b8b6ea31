"""
Repositorio de ReproductionRecord (celos, servicios, diagnósticos y partos).
"""

from datetime import datetime

from finca.local.daos import ReproductionRecordDao
from finca.local.live import LiveQuery
from finca.models.reproduction_record import ReproductiveEventType
from finca.repositories.base import SyncedRepository
from finca.schemas.reproduction_record import ReproductionRecordRecord


class ReproductionRecordRepository(
    SyncedRepository[ReproductionRecordDao, ReproductionRecordRecord]
):
    kind = "ReproductionRecord"

    def get_by_animal(self, animal_id: str) -> LiveQuery[list[ReproductionRecordRecord]]:
        return self._dao.get_by_animal(animal_id)

    def get_by_event_type(
        self, event_type: ReproductiveEventType
    ) -> LiveQuery[list[ReproductionRecordRecord]]:
        return self._dao.get_by_event_type(event_type)

    def get_by_date_range(
        self, start: datetime, end: datetime
    ) -> LiveQuery[list[ReproductionRecordRecord]]:
        return self._dao.get_by_date_range(start, end)

    def get_births_in_range(
        self, start: datetime, end: datetime
    ) -> LiveQuery[list[ReproductionRecordRecord]]:
        return self._dao.get_births_in_range(start, end)

    def get_upcoming_births(self, reference: datetime) -> LiveQuery[list[ReproductionRecordRecord]]:
        return self._dao.get_upcoming_births(reference)

    def get_births_by_mother(self, mother_id: str) -> LiveQuery[list[ReproductionRecordRecord]]:
        return self._dao.get_births_by_mother(mother_id)

    def count_by_event_type(self, event_type: ReproductiveEventType) -> LiveQuery[int]:
        return self._dao.count_by_event_type(event_type)
