"""
Contenedor de dependencias.

Construye explícitamente engine, notifier, DAOs, almacén remoto,
repositorios y servicio de sincronización al arrancar el proceso (API,
worker Celery o tests) y los cierra en orden inverso.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from finca.config import Settings
from finca.core.auth import AuthProvider, StaticAuthProvider
from finca.database import Base, build_engine, build_session_factory, init_models
from finca.local.daos import AnimalDao, HealthRecordDao, MilkProductionDao, ReproductionRecordDao
from finca.local.live import ChangeNotifier
from finca.local.preferences import PreferenceStore
from finca.remote.base import RemoteStore
from finca.remote.http_store import HttpDocumentStore
from finca.remote.memory_store import MemoryDocumentStore
from finca.repositories.animal_repository import AnimalRepository
from finca.repositories.health_record_repository import HealthRecordRepository
from finca.repositories.milk_production_repository import MilkProductionRepository
from finca.repositories.reproduction_record_repository import ReproductionRecordRepository
from finca.services.sync_service import SyncService

logger = logging.getLogger(__name__)


def build_remote_store(settings: Settings) -> RemoteStore:
    if settings.REMOTE_STORE_BACKEND == "memory":
        return MemoryDocumentStore()
    return HttpDocumentStore(
        base_url=settings.REMOTE_STORE_URL,
        token=settings.REMOTE_STORE_TOKEN,
        timeout=settings.REMOTE_STORE_TIMEOUT_SECONDS,
    )


class Container:
    def __init__(
        self,
        settings: Settings,
        engine: AsyncEngine | None = None,
        remote: RemoteStore | None = None,
        auth: AuthProvider | None = None,
    ):
        self.settings = settings
        self.engine = engine or build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
        self.session_factory = build_session_factory(self.engine)
        self.notifier = ChangeNotifier(Base.metadata)
        self.remote = remote or build_remote_store(settings)
        self.auth = auth or StaticAuthProvider(settings.DEVICE_USER_ID)

        self.preferences = PreferenceStore(self.session_factory, self.notifier)

        options = {"error_log_size": settings.SYNC_ERROR_LOG_SIZE, "auth": self.auth}
        self.health_records = HealthRecordRepository(
            HealthRecordDao(self.session_factory, self.notifier), self.remote, **options
        )
        self.milk_productions = MilkProductionRepository(
            MilkProductionDao(self.session_factory, self.notifier), self.remote, **options
        )
        self.reproduction_records = ReproductionRecordRepository(
            ReproductionRecordDao(self.session_factory, self.notifier), self.remote, **options
        )
        self.animals = AnimalRepository(
            AnimalDao(self.session_factory, self.notifier),
            self.remote,
            preferences=self.preferences,
            dependents=[self.health_records, self.milk_productions, self.reproduction_records],
            **options,
        )

        self.sync_service = SyncService(self.repositories)

    @property
    def repositories(self) -> list:
        return [
            self.animals,
            self.health_records,
            self.milk_productions,
            self.reproduction_records,
        ]

    async def start(self) -> None:
        """Crea las tablas que falten."""
        await init_models(self.engine)
        logger.info(
            f"Contenedor listo: db={self.engine.url.render_as_string(hide_password=True)}, "
            f"remoto={type(self.remote).__name__}"
        )

    async def drain(self) -> None:
        for repository in self.repositories:
            await repository.drain()

    async def aclose(self) -> None:
        for repository in self.repositories:
            await repository.aclose()
        await self.remote.aclose()
        await self.engine.dispose()
        logger.info("Contenedor cerrado")

    async def __aenter__(self) -> "Container":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
