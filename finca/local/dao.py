"""
DAO genérico para las entidades sincronizables.

Todas las escrituras hacen commit antes de retornar y notifican al
ChangeNotifier; todas las lecturas se exponen como LiveQuery. Cualquier
SQLAlchemyError se convierte en LocalStoreError y se propaga.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, and_, delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from finca.core.exceptions import LocalStoreError
from finca.local.live import ChangeNotifier, LiveQuery
from finca.models.base import SyncableMixin
from finca.schemas.base import SyncableRecord

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=SyncableMixin)
RecordT = TypeVar("RecordT", bound=SyncableRecord)


class SyncableDao(Generic[ModelT, RecordT]):
    model: type[ModelT]
    record_type: type[RecordT]

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        notifier: ChangeNotifier,
    ):
        self._session_factory = session_factory
        self._notifier = notifier

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    def _default_order(self) -> list:
        return [self.model.updated_at.desc()]

    def _to_record(self, row: ModelT) -> RecordT:
        return self.record_type.model_validate(row)

    def _live(self, fetch, tables: Iterable[str] | None = None) -> LiveQuery:
        return LiveQuery(self._notifier, tables or [self.table_name], fetch)

    # ── Ejecución ────────────────────────────────────

    async def _fetch_records(
        self,
        *criteria: ColumnElement[bool],
        order_by: Sequence | None = None,
        limit: int | None = None,
    ) -> list[RecordT]:
        query = select(self.model).where(*criteria)
        query = query.order_by(*(order_by if order_by is not None else self._default_order()))
        if limit is not None:
            query = query.limit(limit)
        try:
            async with self._session_factory() as db:
                result = await db.execute(query)
                return [self._to_record(row) for row in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise LocalStoreError(f"Error leyendo {self.table_name}: {exc}") from exc

    async def _scalar(self, query) -> Any:
        try:
            async with self._session_factory() as db:
                result = await db.execute(query)
                return result.scalar()
        except SQLAlchemyError as exc:
            raise LocalStoreError(f"Error leyendo {self.table_name}: {exc}") from exc

    async def _execute_write(self, statement) -> int:
        """Ejecuta un INSERT/UPDATE/DELETE, hace commit y notifica. Retorna filas afectadas."""
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    statement, execution_options={"synchronize_session": False}
                )
                affected = result.rowcount
                await db.commit()
        except SQLAlchemyError as exc:
            logger.error(f"Escritura fallida en {self.table_name}: {exc}")
            raise LocalStoreError(f"Error escribiendo en {self.table_name}: {exc}") from exc

        if affected:
            self._notifier.notify(self.table_name)
        return affected

    # ── Escrituras ───────────────────────────────────

    async def upsert(self, record: RecordT) -> None:
        """Inserta o reemplaza la fila completa (sin borrar, para no disparar cascadas)."""
        await self.upsert_many([record])

    async def upsert_many(self, records: Sequence[RecordT]) -> None:
        if not records:
            return
        try:
            async with self._session_factory() as db:
                for record in records:
                    await db.merge(self.model(**record.to_row()))
                await db.commit()
        except SQLAlchemyError as exc:
            logger.error(f"Upsert fallido en {self.table_name}: {exc}")
            raise LocalStoreError(f"Error guardando en {self.table_name}: {exc}") from exc

        self._notifier.notify(self.table_name)

    async def update(self, record: RecordT) -> int:
        """Actualiza una fila existente. 0 significa que no existe."""
        values = record.to_row()
        identity = values.pop("id")
        return await self._execute_write(
            update(self.model).where(self.model.id == identity).values(**values)
        )

    async def delete_by_id(self, identity: str) -> int:
        return await self._execute_write(
            delete(self.model).where(self.model.id == identity)
        )

    async def mark_synchronized(self, identities: Sequence[str]) -> int:
        """Marca varias filas como sincronizadas en una sola sentencia."""
        if not identities:
            return 0
        return await self._execute_write(
            update(self.model)
            .where(self.model.id.in_(list(identities)))
            .values(synchronized=True, sync_attempts=0, sync_error=None, sync_blocked=False)
        )

    async def mark_version_synchronized(self, identity: str, version: datetime) -> bool:
        """
        Marca la fila como sincronizada solo si `updated_at` sigue siendo la
        versión que se escribió en remoto.
        """
        affected = await self._execute_write(
            update(self.model)
            .where(self.model.id == identity, self.model.updated_at == version)
            .values(synchronized=True, sync_attempts=0, sync_error=None, sync_blocked=False)
        )
        return affected > 0

    async def record_sync_failure(
        self,
        identity: str,
        version: datetime,
        error: str,
        permanent: bool = False,
    ) -> bool:
        affected = await self._execute_write(
            update(self.model)
            .where(self.model.id == identity, self.model.updated_at == version)
            .values(
                sync_attempts=self.model.sync_attempts + 1,
                sync_error=error[:2000],
                sync_blocked=permanent,
            )
        )
        return affected > 0

    async def requeue_blocked(self) -> int:
        return await self._execute_write(
            update(self.model)
            .where(self.model.sync_blocked.is_(True))
            .values(sync_blocked=False, sync_attempts=0)
        )

    # ── Lecturas puntuales ───────────────────────────

    async def find_by_id(self, identity: str) -> RecordT | None:
        records = await self._fetch_records(self.model.id == identity)
        return records[0] if records else None

    async def list_pending(self) -> list[RecordT]:
        """Filas sin sincronizar que el barrido debe intentar (no bloqueadas)."""
        return await self._fetch_records(
            self.model.synchronized.is_(False),
            self.model.sync_blocked.is_(False),
            order_by=[self.model.updated_at.asc()],
        )

    async def count_unsynced(self) -> int:
        return await self._scalar(
            select(func.count()).select_from(self.model).where(self.model.synchronized.is_(False))
        ) or 0

    async def count_blocked(self) -> int:
        return await self._scalar(
            select(func.count()).select_from(self.model).where(self.model.sync_blocked.is_(True))
        ) or 0

    # ── Lecturas reactivas ───────────────────────────

    def get_by_id(self, identity: str) -> LiveQuery[RecordT | None]:
        return self._live(lambda: self.find_by_id(identity))

    def get_all(self) -> LiveQuery[list[RecordT]]:
        return self._live(lambda: self._fetch_records())

    def filter_by(self, column, value, order_by: Sequence | None = None) -> LiveQuery[list[RecordT]]:
        return self._live(lambda: self._fetch_records(column == value, order_by=order_by))

    def filter_in(self, column, values: Iterable, order_by: Sequence | None = None) -> LiveQuery[list[RecordT]]:
        values = list(values)
        return self._live(lambda: self._fetch_records(column.in_(values), order_by=order_by))

    def search(self, term: str, *columns) -> LiveQuery[list[RecordT]]:
        """Subcadena sin distinguir mayúsculas sobre las columnas dadas (OR)."""
        term = term.strip()
        if not term:
            return self.get_all()
        criteria = [column.icontains(term, autoescape=True) for column in columns]
        return self._live(lambda: self._fetch_records(or_(*criteria)))

    def count_by(self, column, value) -> LiveQuery[int]:
        query = select(func.count()).select_from(self.model).where(column == value)

        async def _count() -> int:
            return await self._scalar(query) or 0

        return self._live(_count)

    def recent(self, limit: int) -> LiveQuery[list[RecordT]]:
        """Últimos registros creados."""
        return self._live(
            lambda: self._fetch_records(order_by=[self.model.created_at.desc()], limit=limit)
        )

    def get_unsynced(self) -> LiveQuery[list[RecordT]]:
        return self._live(lambda: self._fetch_records(self.model.synchronized.is_(False)))


class AnimalOwnedDao(SyncableDao[ModelT, RecordT]):
    """DAO de registros que pertenecen a un Animal y tienen columna `date`."""

    def _by_date(self) -> list:
        return [self.model.date.desc()]

    def _between(self, start: datetime, end: datetime) -> ColumnElement[bool]:
        return and_(self.model.date >= start, self.model.date <= end)

    async def list_ids_by_animal(self, animal_id: str) -> list[str]:
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(self.model.id).where(self.model.animal_id == animal_id)
                )
                return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise LocalStoreError(f"Error leyendo {self.table_name}: {exc}") from exc

    def get_by_animal(self, animal_id: str) -> LiveQuery[list[RecordT]]:
        return self.filter_by(self.model.animal_id, animal_id, order_by=self._by_date())

    def get_by_date_range(self, start: datetime, end: datetime) -> LiveQuery[list[RecordT]]:
        """Rango inclusivo en ambos extremos."""
        return self._live(
            lambda: self._fetch_records(self._between(start, end), order_by=self._by_date())
        )
