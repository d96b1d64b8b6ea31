"""
Tests del DAO genérico sobre SQLite: escrituras, flags de sincronización y
claves foráneas.
"""

from datetime import timedelta

import pytest

from conftest import at

from finca.core.exceptions import LocalStoreError
from finca.database import utcnow
from finca.local.daos import AnimalDao, HealthRecordDao
from finca.models.base import new_identity
from finca.schemas.animal import AnimalRecord
from finca.schemas.health_record import HealthRecordRecord


@pytest.fixture
def animal_dao(container) -> AnimalDao:
    return AnimalDao(container.session_factory, container.notifier)


@pytest.fixture
def health_dao(container) -> HealthRecordDao:
    return HealthRecordDao(container.session_factory, container.notifier)


def make_animal(**fields) -> AnimalRecord:
    now = utcnow()
    return AnimalRecord(id=new_identity(), created_at=now, updated_at=now, **fields)


async def test_upsert_and_find(animal_dao):
    record = make_animal(tag_number="BOV-001", name="Bella")
    await animal_dao.upsert(record)

    assert await animal_dao.find_by_id(record.id) == record


async def test_update_and_delete_report_affected_rows(animal_dao):
    record = make_animal(tag_number="BOV-001")
    await animal_dao.upsert(record)

    assert await animal_dao.update(record.model_copy(update={"name": "Bella"})) == 1
    assert await animal_dao.update(make_animal(tag_number="ghost")) == 0
    assert await animal_dao.delete_by_id(record.id) == 1
    assert await animal_dao.delete_by_id(record.id) == 0


async def test_upsert_of_parent_keeps_children(animal_dao, health_dao):
    animal = make_animal(tag_number="BOV-001")
    await animal_dao.upsert(animal)
    child = HealthRecordRecord(
        id=new_identity(), created_at=utcnow(), updated_at=utcnow(),
        animal_id=animal.id, date=at(1),
    )
    await health_dao.upsert(child)

    await animal_dao.upsert(animal.model_copy(update={"name": "Renombrada"}))

    assert await health_dao.find_by_id(child.id) is not None


async def test_foreign_key_is_enforced(health_dao):
    orphan = HealthRecordRecord(
        id=new_identity(), created_at=utcnow(), updated_at=utcnow(),
        animal_id="no-existe", date=at(1),
    )
    with pytest.raises(LocalStoreError):
        await health_dao.upsert(orphan)


async def test_mark_synchronized_in_one_statement(animal_dao):
    records = [make_animal(tag_number=f"BOV-{n}") for n in range(3)]
    await animal_dao.upsert_many(records)

    assert await animal_dao.mark_synchronized([records[0].id, records[1].id]) == 2
    assert await animal_dao.mark_synchronized([]) == 0

    unsynced = await animal_dao.get_unsynced().get()
    assert [r.id for r in unsynced] == [records[2].id]
    assert await animal_dao.count_unsynced() == 1


async def test_version_guard(animal_dao):
    record = make_animal(tag_number="BOV-001")
    await animal_dao.upsert(record)

    older = record.updated_at - timedelta(seconds=1)
    assert await animal_dao.mark_version_synchronized(record.id, older) is False
    assert await animal_dao.mark_version_synchronized(record.id, record.updated_at) is True
    assert (await animal_dao.find_by_id(record.id)).synchronized is True


async def test_sync_failure_bookkeeping_and_requeue(animal_dao):
    record = make_animal(tag_number="BOV-001")
    await animal_dao.upsert(record)

    await animal_dao.record_sync_failure(record.id, record.updated_at, "timeout")
    await animal_dao.record_sync_failure(record.id, record.updated_at, "x" * 5000, permanent=True)

    stored = await animal_dao.find_by_id(record.id)
    assert stored.sync_attempts == 2
    assert stored.sync_blocked is True
    assert len(stored.sync_error) == 2000
    assert await animal_dao.list_pending() == []
    assert await animal_dao.count_blocked() == 1

    assert await animal_dao.requeue_blocked() == 1
    pending = await animal_dao.list_pending()
    assert [r.id for r in pending] == [record.id]
    assert pending[0].sync_attempts == 0


async def test_list_pending_oldest_first(animal_dao):
    now = utcnow()
    newer = make_animal(tag_number="NEW").model_copy(update={"updated_at": now})
    older = make_animal(tag_number="OLD").model_copy(update={"updated_at": now - timedelta(hours=1)})
    await animal_dao.upsert_many([newer, older])

    assert [r.tag_number for r in await animal_dao.list_pending()] == ["OLD", "NEW"]
