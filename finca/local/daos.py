"""
DAOs concretos por tipo de entidad.
Consultas especializadas (filtros, conteos y agregados) sobre el DAO genérico.
"""

from datetime import date, datetime

from sqlalchemy import and_, func, select
from sqlalchemy.exc import SQLAlchemyError

from finca.core.exceptions import LocalStoreError
from finca.local.dao import AnimalOwnedDao, SyncableDao
from finca.local.live import LiveQuery
from finca.models.animal import Animal, AnimalStatus, Species
from finca.models.health_record import HealthRecord, HealthRecordType
from finca.models.milk_production import MilkingShift, MilkProduction
from finca.models.reproduction_record import ReproductionRecord, ReproductiveEventType
from finca.schemas.animal import AnimalRecord
from finca.schemas.health_record import HealthRecordRecord
from finca.schemas.milk_production import DailyMilkTotal, MilkProductionRecord
from finca.schemas.reproduction_record import ReproductionRecordRecord


# ── Animal ───────────────────────────────────────────

class AnimalDao(SyncableDao[Animal, AnimalRecord]):
    model = Animal
    record_type = AnimalRecord

    def get_by_status(self, status: AnimalStatus) -> LiveQuery[list[AnimalRecord]]:
        return self.filter_by(Animal.status, status)

    def get_by_species(self, species: Species) -> LiveQuery[list[AnimalRecord]]:
        return self.filter_by(Animal.species, species)

    def get_by_species_set(self, species: set[Species]) -> LiveQuery[list[AnimalRecord]]:
        return self.filter_in(Animal.species, species)

    async def list_by_species_set(self, species: set[Species]) -> list[AnimalRecord]:
        if not species:
            return await self._fetch_records()
        return await self._fetch_records(Animal.species.in_(list(species)))

    def search_animals(self, term: str) -> LiveQuery[list[AnimalRecord]]:
        return self.search(term, Animal.tag_number, Animal.name)

    def count_by_species(self, species: Species) -> LiveQuery[int]:
        return self.count_by(Animal.species, species)

    def count_by_status(self, status: AnimalStatus) -> LiveQuery[int]:
        return self.count_by(Animal.status, status)


# ── HealthRecord ─────────────────────────────────────

class HealthRecordDao(AnimalOwnedDao[HealthRecord, HealthRecordRecord]):
    model = HealthRecord
    record_type = HealthRecordRecord

    def get_by_type(self, record_type: HealthRecordType) -> LiveQuery[list[HealthRecordRecord]]:
        return self.filter_by(HealthRecord.record_type, record_type, order_by=self._by_date())

    def get_pending(self, reference: datetime) -> LiveQuery[list[HealthRecordRecord]]:
        """Seguimientos programados después de `reference`, el más próximo primero."""
        return self._live(lambda: self._fetch_records(
            HealthRecord.next_treatment_date.is_not(None),
            HealthRecord.next_treatment_date > reference,
            order_by=[HealthRecord.next_treatment_date.asc()],
        ))

    def count_by_type(self, record_type: HealthRecordType) -> LiveQuery[int]:
        return self.count_by(HealthRecord.record_type, record_type)


# ── MilkProduction ───────────────────────────────────

class MilkProductionDao(AnimalOwnedDao[MilkProduction, MilkProductionRecord]):
    model = MilkProduction
    record_type = MilkProductionRecord

    def get_by_shift(self, shift: MilkingShift) -> LiveQuery[list[MilkProductionRecord]]:
        return self.filter_by(MilkProduction.shift, shift, order_by=self._by_date())

    def count_by_shift(self, shift: MilkingShift) -> LiveQuery[int]:
        return self.count_by(MilkProduction.shift, shift)

    def total_by_animal(self, animal_id: str, start: datetime, end: datetime) -> LiveQuery[float]:
        """Litros totales de un animal en el rango (0.0 si no hay registros)."""
        query = select(func.sum(MilkProduction.quantity_liters)).where(
            MilkProduction.animal_id == animal_id,
            self._between(start, end),
        )

        async def _total() -> float:
            return float(await self._scalar(query) or 0.0)

        return self._live(_total)

    def daily_totals(self, start: datetime, end: datetime) -> LiveQuery[list[DailyMilkTotal]]:
        """Totales agrupados por día calendario, en orden ascendente."""
        day = func.date(MilkProduction.date)
        query = (
            select(day, func.sum(MilkProduction.quantity_liters))
            .where(self._between(start, end))
            .group_by(day)
            .order_by(day)
        )

        async def _daily() -> list[DailyMilkTotal]:
            try:
                async with self._session_factory() as db:
                    result = await db.execute(query)
                    rows = result.all()
            except SQLAlchemyError as exc:
                raise LocalStoreError(f"Error leyendo {self.table_name}: {exc}") from exc
            return [
                DailyMilkTotal(day=date.fromisoformat(str(row_day)), total_liters=float(total or 0.0))
                for row_day, total in rows
            ]

        return self._live(_daily)


# ── ReproductionRecord ───────────────────────────────

class ReproductionRecordDao(AnimalOwnedDao[ReproductionRecord, ReproductionRecordRecord]):
    model = ReproductionRecord
    record_type = ReproductionRecordRecord

    def get_by_event_type(
        self, event_type: ReproductiveEventType
    ) -> LiveQuery[list[ReproductionRecordRecord]]:
        return self.filter_by(ReproductionRecord.event_type, event_type, order_by=self._by_date())

    def get_births_in_range(
        self, start: datetime, end: datetime
    ) -> LiveQuery[list[ReproductionRecordRecord]]:
        return self._live(lambda: self._fetch_records(
            ReproductionRecord.event_type == ReproductiveEventType.BIRTH,
            self._between(start, end),
            order_by=self._by_date(),
        ))

    def get_upcoming_births(self, reference: datetime) -> LiveQuery[list[ReproductionRecordRecord]]:
        """Diagnósticos de gestación con fecha probable de parto posterior a `reference`."""
        return self._live(lambda: self._fetch_records(
            and_(
                ReproductionRecord.event_type == ReproductiveEventType.PREGNANCY_DIAGNOSIS,
                ReproductionRecord.expected_birth_date.is_not(None),
                ReproductionRecord.expected_birth_date > reference,
            ),
            order_by=[ReproductionRecord.expected_birth_date.asc()],
        ))

    def get_births_by_mother(self, mother_id: str) -> LiveQuery[list[ReproductionRecordRecord]]:
        return self._live(lambda: self._fetch_records(
            ReproductionRecord.event_type == ReproductiveEventType.BIRTH,
            ReproductionRecord.animal_id == mother_id,
            order_by=self._by_date(),
        ))

    def count_by_event_type(self, event_type: ReproductiveEventType) -> LiveQuery[int]:
        return self.count_by(ReproductionRecord.event_type, event_type)
