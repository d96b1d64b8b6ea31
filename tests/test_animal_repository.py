"""
Tests del repositorio de Animal: ciclo de vida, flag de sincronización,
búsqueda y filtros.
"""

from datetime import datetime, timezone

import pytest

from finca.core.exceptions import RecordNotFoundError
from finca.models.animal import AnimalStatus, Species
from finca.schemas.animal import AnimalRecord, AnimalUpdate
from finca.schemas.sync import MirrorOutcome


# ── Crear y leer ─────────────────────────────────────

async def test_save_draft_assigns_identity_and_reads_back(animals):
    identity = await animals.save(AnimalRecord(
        tag_number="BOV-001",
        name="Bella",
        species=Species.BOVINE,
        weight_kg=420.5,
    ))

    assert identity
    stored = await animals.get_by_id(identity).get()
    assert stored is not None
    assert stored.id == identity
    assert stored.tag_number == "BOV-001"
    assert stored.name == "Bella"
    assert stored.species == Species.BOVINE
    assert stored.weight_kg == 420.5
    assert stored.created_at == stored.updated_at
    assert stored.created_at.tzinfo is not None


async def test_mirror_marks_synchronized_and_writes_document(animals, remote):
    identity = await animals.save(AnimalRecord(tag_number="BOV-001", name="Bella"))
    await animals.drain()

    stored = await animals.find_by_id(identity)
    assert stored.synchronized is True

    document = remote.collections["animals"][identity]
    assert document["id"] == identity
    assert document["tag_number"] == "BOV-001"
    assert document["species"] == "other"
    assert "synchronized" not in document
    assert "sync_attempts" not in document
    assert "sync_blocked" not in document


async def test_get_by_id_unknown_returns_none(animals):
    assert await animals.get_by_id("no-existe").get() is None


# ── Actualizar ───────────────────────────────────────

async def test_update_resets_flag(animals, remote, cow):
    assert cow.synchronized is True

    remote.online = False
    await animals.update(cow.id, AnimalUpdate(name="Bella II"))
    await animals.drain()

    stored = await animals.find_by_id(cow.id)
    assert stored.name == "Bella II"
    assert stored.synchronized is False
    assert stored.sync_attempts == 1
    assert stored.updated_at > cow.updated_at


async def test_update_only_applies_assigned_fields(animals, cow):
    await animals.update(cow.id, AnimalUpdate(weight_kg=450.0))
    await animals.drain()

    stored = await animals.find_by_id(cow.id)
    assert stored.weight_kg == 450.0
    assert stored.name == "Bella"
    assert stored.tag_number == "BOV-001"


async def test_save_keeps_stored_created_at(animals, cow):
    forged = datetime(2000, 1, 1, tzinfo=timezone.utc)
    await animals.save(cow.model_copy(update={"created_at": forged, "name": "Otra"}))
    await animals.drain()

    stored = await animals.find_by_id(cow.id)
    assert stored.created_at == cow.created_at
    assert stored.name == "Otra"


async def test_save_unknown_identity_raises(animals):
    with pytest.raises(RecordNotFoundError):
        await animals.save(AnimalRecord(id="no-existe", tag_number="X"))


async def test_update_unknown_identity_raises(animals):
    with pytest.raises(RecordNotFoundError):
        await animals.update("no-existe", AnimalUpdate(name="X"))


# ── Borrar ───────────────────────────────────────────

async def test_delete_reports_local_outcome(animals, remote, cow):
    assert await animals.delete(cow.id) is True
    await animals.drain()

    assert await animals.find_by_id(cow.id) is None
    assert cow.id not in remote.collections["animals"]
    assert await animals.delete(cow.id) is False


async def test_failed_remote_delete_is_logged_not_raised(animals, remote, cow):
    remote.online = False

    assert await animals.delete(cow.id) is True
    await animals.drain()

    assert await animals.find_by_id(cow.id) is None
    assert cow.id in remote.collections["animals"]
    errors = animals.recent_errors
    assert errors[-1].operation == "delete"
    assert errors[-1].identity == cow.id


# ── Flag de sincronización extremo a extremo ─────────

async def test_flag_transitions_online_offline_sweep(container, animals, remote):
    online_id = await animals.save(AnimalRecord(tag_number="BOV-010"))
    await animals.drain()
    assert (await animals.find_by_id(online_id)).synchronized is True

    remote.online = False
    offline_id = await animals.save(AnimalRecord(tag_number="BOV-011"))
    await animals.drain()
    assert (await animals.find_by_id(offline_id)).synchronized is False

    remote.online = True
    result = await container.sync_service.run()

    assert result.synchronized == 1
    assert (await animals.find_by_id(offline_id)).synchronized is True
    assert offline_id in remote.collections["animals"]


async def test_mirror_skips_synchronized_record(animals, remote, cow):
    calls_before = len(remote.calls)
    assert await animals.mirror(cow.id) == MirrorOutcome.SKIPPED
    assert len(remote.calls) == calls_before


async def test_error_log_is_bounded(animals, remote):
    remote.online = False
    for n in range(8):
        await animals.save(AnimalRecord(tag_number=f"BOV-{n:03d}"))
    await animals.drain()

    # SYNC_ERROR_LOG_SIZE=5 en el fixture de settings
    assert len(animals.recent_errors) == 5


# ── Búsqueda y filtros ───────────────────────────────

async def test_search_is_case_insensitive_substring_over_tag_and_name(animals, cow):
    assert [a.id for a in await animals.search("bov").get()] == [cow.id]
    assert [a.id for a in await animals.search("ell").get()] == [cow.id]
    assert await animals.search("xyz").get() == []


async def test_search_blank_term_returns_all(animals, cow):
    assert [a.id for a in await animals.search("  ").get()] == [cow.id]


async def test_search_treats_wildcards_literally(animals, cow):
    assert await animals.search("%").get() == []


async def test_filters_by_status_and_species(animals, cow):
    goat_id = await animals.save(AnimalRecord(
        tag_number="CAP-001", species=Species.CAPRINE, status=AnimalStatus.SOLD,
    ))

    assert [a.id for a in await animals.get_by_status(AnimalStatus.SOLD).get()] == [goat_id]
    assert [a.id for a in await animals.get_by_species(Species.BOVINE).get()] == [cow.id]
    both = await animals.get_by_species_set({Species.BOVINE, Species.CAPRINE}).get()
    assert {a.id for a in both} == {cow.id, goat_id}
    assert await animals.count_by_species(Species.CAPRINE).get() == 1
    assert await animals.count_by_status(AnimalStatus.ACTIVE).get() == 1


async def test_get_all_orders_most_recently_updated_first(animals, cow):
    second_id = await animals.save(AnimalRecord(tag_number="BOV-002"))
    assert [a.id for a in await animals.get_all().get()] == [second_id, cow.id]

    await animals.update(cow.id, AnimalUpdate(name="Bella"))
    assert [a.id for a in await animals.get_all().get()] == [cow.id, second_id]


async def test_recent_orders_by_creation(animals, cow):
    second_id = await animals.save(AnimalRecord(tag_number="BOV-002"))
    await animals.update(cow.id, AnimalUpdate(name="Bella"))

    assert [a.id for a in await animals.recent(1).get()] == [second_id]


async def test_selected_species_filter(container, animals, cow):
    goat_id = await animals.save(AnimalRecord(tag_number="CAP-001", species=Species.CAPRINE))
    query = animals.get_by_selected_species()

    # Selección vacía = todos
    assert {a.id for a in await query.get()} == {cow.id, goat_id}

    await container.preferences.save_selected_species({"caprine"})
    assert [a.id for a in await query.get()] == [goat_id]
    assert query.tables == {"animals", "preferences"}


async def test_selected_species_filter_accepts_enum_members(container, animals, cow):
    await animals.save(AnimalRecord(tag_number="CAP-001", species=Species.CAPRINE))

    await container.preferences.save_selected_species({Species.BOVINE})

    assert [a.tag_number for a in await animals.get_by_selected_species().get()] == ["BOV-001"]
