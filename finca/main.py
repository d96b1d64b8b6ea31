"""
Punto de entrada de la API de monitoreo (FastAPI).
Configura logging, CORS, el contenedor de dependencias y monta los routers.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from finca.api.v1.router import api_v1_router
from finca.config import get_settings
from finca.container import Container
from finca.core.exceptions import LocalStoreError

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

SHUTDOWN_DRAIN_SECONDS = 5.0


# ── Lifecycle ────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Eventos de inicio y cierre de la aplicación."""
    # Startup
    logger.info(f"{settings.APP_NAME} iniciando en modo {settings.APP_ENV}")
    container = Container(settings)
    await container.start()
    app.state.container = container
    yield
    # Shutdown
    logger.info(f"{settings.APP_NAME} cerrando...")
    try:
        await asyncio.wait_for(container.drain(), timeout=SHUTDOWN_DRAIN_SECONDS)
    except asyncio.TimeoutError:
        logger.warning("Espejos remotos sin terminar al cerrar; quedan para el barrido")
    await container.aclose()


# ── App ──────────────────────────────────────────────
app = FastAPI(
    title=settings.APP_NAME,
    description="Monitoreo de la sincronización offline-first de Finca Manager",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ── CORS ─────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Errores del almacén local ────────────────────────
@app.exception_handler(LocalStoreError)
async def local_store_exception_handler(request: Request, exc: LocalStoreError):
    logger.error(f"Almacén local no disponible en {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Almacén local no disponible"},
    )


# ── Global Exception Handler ────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Captura excepciones no manejadas para evitar exponer detalles internos."""
    logger.error(f"Error no manejado en {request.url.path}: {exc!r}")
    if settings.DEBUG:
        # En desarrollo, mostrar detalles
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": str(exc), "type": type(exc).__name__},
        )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Error interno del servidor"},
    )


# ── Routers ──────────────────────────────────────────
app.include_router(api_v1_router, prefix=settings.API_V1_PREFIX)


# ── Health Check ─────────────────────────────────────
@app.get("/health", tags=["Health"])
async def health_check():
    """Endpoint de health check para monitoreo."""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": "0.1.0",
        "environment": settings.APP_ENV,
    }
