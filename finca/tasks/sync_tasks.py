"""
Tareas Celery de sincronización.
Cada ejecución arma su propio contenedor: el worker no comparte event loop
con la API.
"""

import asyncio
import logging

from finca.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    name="sync.reconcile",
)
def reconcile_task(self, kinds: list[str] | None = None) -> dict:
    """
    Ejecuta un barrido de reconciliación. Los errores remotos ya quedan
    absorbidos por el barrido; solo se reintenta ante fallos locales.
    """
    async def _reconcile() -> dict:
        from finca.config import get_settings
        from finca.container import Container

        async with Container(get_settings()) as container:
            result = await container.sync_service.run(kinds)
            return result.model_dump(mode="json")

    try:
        result = asyncio.run(_reconcile())
    except Exception as exc:
        logger.error(f"Error en el barrido de reconciliación: {exc}")
        raise self.retry(exc=exc)

    logger.info(f"Barrido Celery completado: {len(result['kinds'])} tipos procesados")
    return result


@celery_app.task(name="sync.requeue_blocked")
def requeue_blocked_task(kinds: list[str] | None = None) -> int:
    """Quita el bloqueo de los registros con fallo permanente."""
    async def _requeue() -> int:
        from finca.config import get_settings
        from finca.container import Container

        async with Container(get_settings()) as container:
            return await container.sync_service.requeue_blocked(kinds)

    requeued = asyncio.run(_requeue())
    logger.info(f"Reencolados {requeued} registros bloqueados")
    return requeued
