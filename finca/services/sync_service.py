"""
Barrido de reconciliación local → remoto.

Flujo:
1. Por cada tipo de entidad, leer las filas no sincronizadas y no bloqueadas
2. Por cada fila, ejecutar el paso de espejo del repositorio
   (upsert remoto + marca con guard de versión)
3. Un fallo en una fila no detiene a las demás
4. Retornar un SweepResult con los contadores por tipo

Sin lotes, sin backoff y sin orden garantizado. Si no hay pendientes no se
hace ninguna llamada remota ni escritura local.
"""

import logging
from collections.abc import Iterable

from finca.database import utcnow
from finca.repositories.base import SyncedRepository
from finca.schemas.sync import (
    KindSweepResult,
    KindSyncStatus,
    MirrorOutcome,
    SweepResult,
    SyncStatusResponse,
)

logger = logging.getLogger(__name__)


class SyncService:
    def __init__(self, repositories: Iterable[SyncedRepository]):
        self._repositories = {repository.kind: repository for repository in repositories}

    @property
    def kinds(self) -> list[str]:
        return list(self._repositories)

    def _select(self, kinds: Iterable[str] | None) -> list[SyncedRepository]:
        if kinds is None:
            return list(self._repositories.values())
        selected = []
        for kind in kinds:
            if kind not in self._repositories:
                raise ValueError(f"Tipo de entidad desconocido: {kind}")
            selected.append(self._repositories[kind])
        return selected

    # ── Barrido ──────────────────────────────────────

    async def run(self, kinds: Iterable[str] | None = None) -> SweepResult:
        result = SweepResult(started_at=utcnow())

        for repository in self._select(kinds):
            result.kinds.append(await self._sweep_kind(repository))

        result.finished_at = utcnow()
        if result.attempted:
            logger.info(result.summary)
        else:
            logger.debug("Barrido sin registros pendientes")
        return result

    async def _sweep_kind(self, repository: SyncedRepository) -> KindSweepResult:
        kind_result = KindSweepResult(kind=repository.kind)
        pending = await repository.list_pending()

        for record in pending:
            try:
                outcome = await repository.mirror(record.id)
            except Exception as e:
                # Fallo local al registrar el resultado; la fila queda pendiente
                logger.error(f"Error reconciliando {repository.kind} {record.id}: {e}")
                outcome = MirrorOutcome.FAILED
            kind_result.count(outcome)

        if pending:
            logger.info(
                f"{repository.kind}: {kind_result.synchronized}/{kind_result.attempted} "
                f"sincronizados, {kind_result.failed} fallidos, {kind_result.blocked} bloqueados"
            )
        return kind_result

    # ── Estado y reencolado ──────────────────────────

    async def status(self) -> SyncStatusResponse:
        kinds = []
        errors = []
        for repository in self._repositories.values():
            kinds.append(KindSyncStatus(
                kind=repository.kind,
                unsynced=await repository.count_unsynced(),
                blocked=await repository.count_blocked(),
            ))
            errors.extend(repository.recent_errors)

        errors.sort(key=lambda entry: entry.occurred_at, reverse=True)
        return SyncStatusResponse(
            kinds=kinds,
            pending_total=sum(k.unsynced for k in kinds),
            recent_errors=errors,
        )

    async def requeue_blocked(self, kinds: Iterable[str] | None = None) -> int:
        """Quita el bloqueo de las filas con fallo permanente para que el barrido las reintente."""
        total = 0
        for repository in self._select(kinds):
            total += await repository.requeue_blocked()
        if total:
            logger.info(f"Reencolados {total} registros bloqueados")
        return total
