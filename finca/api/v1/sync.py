"""
Endpoints de monitoreo de la sincronización local → remoto.

GET  /sync/status     — Pendientes y bloqueados por tipo, errores recientes
POST /sync/run        — Ejecutar un barrido de reconciliación ahora
POST /sync/run/async  — Encolar el barrido en Celery
POST /sync/requeue    — Reintentar registros bloqueados por error permanente
"""

import logging

from fastapi import APIRouter, Depends, Query

from finca.api.dependencies import get_sync_service
from finca.core.exceptions import ValidationException
from finca.schemas.sync import RequeueResponse, SweepResult, SyncStatusResponse
from finca.services.sync_service import SyncService

logger = logging.getLogger(__name__)

router = APIRouter()


def _validate_kinds(service: SyncService, kinds: list[str] | None) -> list[str] | None:
    if not kinds:
        return None
    unknown = [kind for kind in kinds if kind not in service.kinds]
    if unknown:
        raise ValidationException(
            f"Tipos desconocidos: {', '.join(unknown)}. Válidos: {', '.join(service.kinds)}"
        )
    return kinds


@router.get(
    "/status",
    response_model=SyncStatusResponse,
    summary="Estado de sincronización",
    description="Registros sin sincronizar y bloqueados por tipo, más los últimos errores remotos.",
)
async def sync_status(
    service: SyncService = Depends(get_sync_service),
) -> SyncStatusResponse:
    return await service.status()


@router.post(
    "/run",
    response_model=SweepResult,
    summary="Ejecutar barrido de reconciliación",
    description=(
        "Envía al almacén remoto todos los registros no sincronizados. "
        "Los errores remotos no fallan la petición: se reflejan en los contadores."
    ),
)
async def run_sweep(
    kind: list[str] | None = Query(None, description="Limitar a estos tipos de entidad"),
    service: SyncService = Depends(get_sync_service),
) -> SweepResult:
    kinds = _validate_kinds(service, kind)
    result = await service.run(kinds)
    logger.info(f"Barrido manual: {result.summary}")
    return result


@router.post(
    "/run/async",
    response_model=dict,
    summary="Encolar barrido en Celery",
)
async def run_sweep_async(
    kind: list[str] | None = Query(None),
    service: SyncService = Depends(get_sync_service),
) -> dict:
    from finca.tasks.sync_tasks import reconcile_task

    kinds = _validate_kinds(service, kind)
    task = reconcile_task.delay(kinds)
    logger.info(f"Barrido encolado: task={task.id}")
    return {"task_id": str(task.id), "status": "queued"}


@router.post(
    "/requeue",
    response_model=RequeueResponse,
    summary="Reencolar registros bloqueados",
    description="Quita el bloqueo de los registros con fallo remoto permanente para que el próximo barrido los reintente.",
)
async def requeue_blocked(
    kind: list[str] | None = Query(None),
    service: SyncService = Depends(get_sync_service),
) -> RequeueResponse:
    kinds = _validate_kinds(service, kind)
    return RequeueResponse(requeued=await service.requeue_blocked(kinds))
