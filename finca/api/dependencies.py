"""
Dependencias de FastAPI.
"""

from fastapi import Request

from finca.container import Container
from finca.services.sync_service import SyncService


def get_container(request: Request) -> Container:
    """El contenedor lo crea el lifespan de la app."""
    return request.app.state.container


def get_sync_service(request: Request) -> SyncService:
    return get_container(request).sync_service
