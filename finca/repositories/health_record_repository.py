"""
Repositorio de HealthRecord (vacunas, desparasitaciones, tratamientos...).
"""

from datetime import datetime

from finca.local.daos import HealthRecordDao
from finca.local.live import LiveQuery
from finca.models.health_record import HealthRecordType
from finca.repositories.base import SyncedRepository
from finca.schemas.health_record import HealthRecordRecord


class HealthRecordRepository(SyncedRepository[HealthRecordDao, HealthRecordRecord]):
    kind = "HealthRecord"

    def get_by_animal(self, animal_id: str) -> LiveQuery[list[HealthRecordRecord]]:
        return self._dao.get_by_animal(animal_id)

    def get_by_type(self, record_type: HealthRecordType) -> LiveQuery[list[HealthRecordRecord]]:
        return self._dao.get_by_type(record_type)

    def get_by_date_range(self, start: datetime, end: datetime) -> LiveQuery[list[HealthRecordRecord]]:
        return self._dao.get_by_date_range(start, end)

    def get_pending(self, reference: datetime) -> LiveQuery[list[HealthRecordRecord]]:
        """Próximos tratamientos posteriores a `reference`."""
        return self._dao.get_pending(reference)

    def count_by_type(self, record_type: HealthRecordType) -> LiveQuery[int]:
        return self._dao.count_by_type(record_type)
