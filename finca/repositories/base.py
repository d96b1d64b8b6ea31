"""
Repositorio genérico de doble almacén.

Regla de escritura: primero local (autoritativo, debe tener éxito), luego
el espejo remoto en una tarea de fondo; el flag `synchronized` solo pasa a
True tras una escritura remota confirmada de la versión local vigente.
Las lecturas salen exclusivamente del almacén local.

Los errores remotos nunca se propagan: quedan en la fila (sync_attempts,
sync_error, sync_blocked) y en el log acotado `recent_errors`.
"""

import asyncio
import logging
from collections import deque
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

from finca.core.auth import AuthProvider
from finca.core.exceptions import RecordNotFoundError, RemoteStoreError
from finca.database import utcnow
from finca.local.dao import SyncableDao
from finca.local.live import LiveQuery
from finca.models.base import new_identity
from finca.remote.base import RemoteStore
from finca.schemas.base import RecordUpdate, SyncableRecord
from finca.schemas.sync import MirrorOutcome, SyncErrorEntry

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=SyncableRecord)
DaoT = TypeVar("DaoT", bound=SyncableDao)

# Una mutación local siempre reinicia el estado de sincronización
_RESET_SYNC_STATE = {
    "synchronized": False,
    "sync_attempts": 0,
    "sync_error": None,
    "sync_blocked": False,
}


class SyncedRepository(Generic[DaoT, RecordT]):
    kind: str = "record"

    def __init__(
        self,
        dao: DaoT,
        remote: RemoteStore,
        error_log_size: int = 100,
        auth: AuthProvider | None = None,
        collection: str | None = None,
    ):
        self._dao = dao
        self._remote = remote
        self._auth = auth
        self.collection = collection or dao.table_name
        self._tasks: set[asyncio.Task] = set()
        self._errors: deque[SyncErrorEntry] = deque(maxlen=error_log_size)
        # Un lock por identidad mientras haya tareas usándolo
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @property
    def dao(self) -> DaoT:
        return self._dao

    @property
    def active_locks(self) -> int:
        return len(self._locks)

    @property
    def recent_errors(self) -> list[SyncErrorEntry]:
        return list(self._errors)

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    # ── Escrituras ───────────────────────────────────

    async def save(self, record: RecordT) -> str:
        """
        Crea (identidad vacía) o actualiza (identidad existente) y agenda el
        espejo remoto. Retorna la identidad sin esperar al almacén remoto.

        Raises:
            RecordNotFoundError: la identidad no existe localmente.
            LocalStoreError: falló la escritura local.
        """
        now = utcnow()
        if record.is_draft:
            prepared = record.model_copy(update={
                "id": new_identity(),
                "created_at": now,
                "updated_at": now,
                **_RESET_SYNC_STATE,
                **self._stamp(record),
            })
            await self._dao.upsert(prepared)
            logger.debug(f"{self.kind} {prepared.id} creado localmente")
        else:
            stored = await self._dao.find_by_id(record.id)
            if stored is None:
                raise RecordNotFoundError(self.kind, record.id)
            prepared = record.model_copy(update={
                "created_at": stored.created_at,
                "updated_at": now,
                **_RESET_SYNC_STATE,
            })
            if not await self._dao.update(prepared):
                raise RecordNotFoundError(self.kind, record.id)
            logger.debug(f"{self.kind} {prepared.id} actualizado localmente")

        self._schedule(self._mirror_in_background(prepared.id))
        return prepared.id

    async def update(self, identity: str, changes: RecordUpdate) -> str:
        """Aplica solo los campos asignados en `changes` y guarda."""
        stored = await self._dao.find_by_id(identity)
        if stored is None:
            raise RecordNotFoundError(self.kind, identity)
        return await self.save(changes.apply_to(stored))

    async def delete(self, identity: str) -> bool:
        """
        Borra localmente (los dependientes caen por cascada) y agenda el
        borrado remoto. Retorna False si la fila no existía localmente.
        """
        deleted = await self._dao.delete_by_id(identity) > 0
        if deleted:
            logger.debug(f"{self.kind} {identity} eliminado localmente")
        self.schedule_remote_delete(identity)
        return deleted

    def schedule_remote_delete(self, identity: str) -> None:
        self._schedule(self._remote_delete(identity))

    def _stamp(self, record: RecordT) -> dict:
        if "recorded_by" not in type(record).model_fields or record.recorded_by:
            return {}
        if self._auth is None:
            return {}
        return {"recorded_by": self._auth.current_user_id()}

    # ── Lecturas ─────────────────────────────────────

    def get_by_id(self, identity: str) -> LiveQuery[RecordT | None]:
        return self._dao.get_by_id(identity)

    def get_all(self) -> LiveQuery[list[RecordT]]:
        return self._dao.get_all()

    def get_unsynced(self) -> LiveQuery[list[RecordT]]:
        return self._dao.get_unsynced()

    def recent(self, limit: int = 10) -> LiveQuery[list[RecordT]]:
        return self._dao.recent(limit)

    async def find_by_id(self, identity: str) -> RecordT | None:
        return await self._dao.find_by_id(identity)

    async def list_pending(self) -> list[RecordT]:
        return await self._dao.list_pending()

    async def count_unsynced(self) -> int:
        return await self._dao.count_unsynced()

    async def count_blocked(self) -> int:
        return await self._dao.count_blocked()

    async def requeue_blocked(self) -> int:
        return await self._dao.requeue_blocked()

    # ── Espejo remoto ────────────────────────────────

    @asynccontextmanager
    async def _identity_lock(self, identity: str) -> AsyncIterator[None]:
        """Serializa espejo y borrado de una identidad; libera la entrada al quedar sin uso."""
        lock = self._locks.get(identity)
        if lock is None:
            lock = self._locks[identity] = asyncio.Lock()
        self._lock_users[identity] = self._lock_users.get(identity, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[identity] -= 1
            if not self._lock_users[identity]:
                del self._lock_users[identity]
                del self._locks[identity]

    async def mirror(self, identity: str) -> MirrorOutcome:
        """
        Escribe en remoto la versión local vigente y la marca sincronizada
        si nadie la modificó mientras tanto. Lo usan la tarea de fondo y el
        barrido de reconciliación.
        """
        async with self._identity_lock(identity):
            record = await self._dao.find_by_id(identity)
            if record is None or record.synchronized:
                return MirrorOutcome.SKIPPED

            version = record.updated_at
            try:
                await self._remote.upsert(self.collection, identity, record.to_document())
            except RemoteStoreError as exc:
                return await self._mirror_failed(record, exc, exc.permanent)
            except Exception as exc:
                # Cualquier otro fallo del cliente remoto se trata como transitorio
                return await self._mirror_failed(record, exc, False)

            if await self._dao.mark_version_synchronized(identity, version):
                return MirrorOutcome.SYNCHRONIZED

            logger.info(f"{self.kind} {identity} cambió durante la escritura remota")
            return MirrorOutcome.STALE

    async def _mirror_failed(
        self, record: RecordT, exc: Exception, permanent: bool
    ) -> MirrorOutcome:
        logger.warning(
            f"Espejo remoto de {self.kind} {record.id} falló "
            f"({'permanente' if permanent else 'transitorio'}): {exc}"
        )
        self._log_error(record.id, "upsert", exc, permanent)
        await self._dao.record_sync_failure(record.id, record.updated_at, str(exc), permanent)
        return MirrorOutcome.BLOCKED if permanent else MirrorOutcome.FAILED

    async def _mirror_in_background(self, identity: str) -> None:
        outcome = await self.mirror(identity)
        logger.debug(f"Espejo de {self.kind} {identity}: {outcome.value}")

    async def _remote_delete(self, identity: str) -> None:
        async with self._identity_lock(identity):
            try:
                await self._remote.delete(self.collection, identity)
            except Exception as exc:
                # Sin lápida: el documento remoto puede quedar huérfano
                permanent = isinstance(exc, RemoteStoreError) and exc.permanent
                logger.warning(f"Borrado remoto de {self.kind} {identity} falló: {exc}")
                self._log_error(identity, "delete", exc, permanent)

    def _log_error(self, identity: str, operation: str, exc: Exception, permanent: bool) -> None:
        self._errors.append(SyncErrorEntry(
            kind=self.kind,
            identity=identity,
            operation=operation,
            error=str(exc) or type(exc).__name__,
            permanent=permanent,
            occurred_at=utcnow(),
        ))

    # ── Tareas de fondo ──────────────────────────────

    def _schedule(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            # Fallos locales dentro del espejo; el barrido reintentará la fila
            logger.error(f"Tarea de sincronización de {self.kind} falló: {exc!r}")

    async def drain(self) -> None:
        """Espera todas las tareas remotas en curso (tests, apagado)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancela las tareas pendientes; los intentos abandonados quedan para el barrido."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
