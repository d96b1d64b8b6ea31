"""
Fixtures compartidas para Pytest.
Configura base de datos SQLite de test, almacén remoto en memoria y clientes HTTP.
"""

from collections.abc import AsyncGenerator
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from finca.api.dependencies import get_sync_service
from finca.config import Settings
from finca.container import Container
from finca.models.animal import Species
from finca.remote.memory_store import MemoryDocumentStore
from finca.schemas.animal import AnimalRecord


def at(day: int, hour: int = 6) -> datetime:
    """Fecha fija de marzo 2026 en UTC para los registros de test."""
    return datetime(2026, 3, day, hour, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        REMOTE_STORE_BACKEND="memory",
        SYNC_ERROR_LOG_SIZE=5,
        DEVICE_USER_ID="user-test",
    )


@pytest.fixture
def remote() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest_asyncio.fixture
async def container(settings: Settings, remote: MemoryDocumentStore) -> AsyncGenerator[Container, None]:
    """Contenedor completo con tablas creadas; se cierra al terminar cada test."""
    container = Container(settings, remote=remote)
    await container.start()
    yield container
    await container.drain()
    await container.aclose()


@pytest.fixture
def animals(container: Container):
    return container.animals


@pytest.fixture
def health_records(container: Container):
    return container.health_records


@pytest.fixture
def milk_productions(container: Container):
    return container.milk_productions


@pytest.fixture
def reproduction_records(container: Container):
    return container.reproduction_records


@pytest_asyncio.fixture
async def cow(animals) -> AnimalRecord:
    """Una vaca ya sincronizada."""
    identity = await animals.save(AnimalRecord(
        tag_number="BOV-001",
        name="Bella",
        species=Species.BOVINE,
    ))
    await animals.drain()
    return await animals.find_by_id(identity)


@pytest_asyncio.fixture
async def client(container: Container) -> AsyncGenerator[AsyncClient, None]:
    """Cliente HTTP de test que usa el contenedor de test."""
    from finca.main import app

    app.dependency_overrides[get_sync_service] = lambda: container.sync_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
