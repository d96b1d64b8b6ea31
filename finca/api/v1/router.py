"""
Router principal de la API v1.
Agrupa todos los sub-routers de la versión 1.
"""

from fastapi import APIRouter

from finca.api.v1.sync import router as sync_router

api_v1_router = APIRouter()

api_v1_router.include_router(sync_router, prefix="/sync", tags=["Sincronización"])
