"""
Configuración de Celery para el barrido de reconciliación periódico.
"""

from celery import Celery

from finca.config import get_settings

settings = get_settings()

celery_app = Celery(
    "finca",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
)

# Barrido periódico (0 lo desactiva)
if settings.SYNC_SWEEP_INTERVAL_SECONDS > 0:
    celery_app.conf.beat_schedule = {
        "sync-reconcile": {
            "task": "sync.reconcile",
            "schedule": float(settings.SYNC_SWEEP_INTERVAL_SECONDS),
        },
    }

# Auto-descubrir tareas en finca/tasks/
celery_app.autodiscover_tasks(["finca.tasks"], related_name="sync_tasks")
