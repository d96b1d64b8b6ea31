"""
Tests de los repositorios dependientes de Animal: sanitario, producción de
leche y reproducción. Incluye borrado en cascada y agregados de litros.
"""

from datetime import date

from conftest import at

from finca.models.health_record import HealthRecordType
from finca.models.milk_production import MilkingShift
from finca.models.reproduction_record import ReproductiveEventType
from finca.schemas.health_record import HealthRecordRecord
from finca.schemas.milk_production import DailyMilkTotal, MilkProductionRecord
from finca.schemas.reproduction_record import ReproductionRecordRecord


# ── Cascada ──────────────────────────────────────────

async def test_delete_animal_cascades_locally_but_not_remotely(
    animals, health_records, remote, cow
):
    record_id = await health_records.save(HealthRecordRecord(
        animal_id=cow.id,
        date=at(1),
        record_type=HealthRecordType.VACCINATION,
        product="Aftosa",
    ))
    await health_records.drain()
    assert record_id in remote.collections["health_records"]

    await animals.delete(cow.id)
    await animals.drain()

    assert await health_records.get_by_id(record_id).get() is None
    assert await health_records.get_by_animal(cow.id).get() == []
    # El documento dependiente sigue en remoto
    assert record_id in remote.collections["health_records"]
    assert cow.id not in remote.collections["animals"]


async def test_delete_animal_with_remote_cascade(animals, milk_productions, health_records, remote, cow):
    milk_id = await milk_productions.save(MilkProductionRecord(
        animal_id=cow.id, date=at(1), quantity_liters=10,
    ))
    health_id = await health_records.save(HealthRecordRecord(animal_id=cow.id, date=at(1)))
    await milk_productions.drain()
    await health_records.drain()

    await animals.delete(cow.id, cascade_remote=True)
    await animals.drain()
    await milk_productions.drain()
    await health_records.drain()

    assert milk_id not in remote.collections["milk_productions"]
    assert health_id not in remote.collections["health_records"]


# ── Auth provider ────────────────────────────────────

async def test_recorded_by_stamped_from_auth_provider(health_records, cow):
    stamped_id = await health_records.save(HealthRecordRecord(animal_id=cow.id, date=at(2)))
    explicit_id = await health_records.save(HealthRecordRecord(
        animal_id=cow.id, date=at(2), recorded_by="vet-7",
    ))

    assert (await health_records.find_by_id(stamped_id)).recorded_by == "user-test"
    assert (await health_records.find_by_id(explicit_id)).recorded_by == "vet-7"


# ── Sanitario ────────────────────────────────────────

async def test_health_queries(health_records, cow):
    vaccine_id = await health_records.save(HealthRecordRecord(
        animal_id=cow.id,
        date=at(1),
        record_type=HealthRecordType.VACCINATION,
        next_treatment_date=at(20),
    ))
    treatment_id = await health_records.save(HealthRecordRecord(
        animal_id=cow.id,
        date=at(5),
        record_type=HealthRecordType.TREATMENT,
        next_treatment_date=at(10),
    ))
    await health_records.save(HealthRecordRecord(
        animal_id=cow.id, date=at(15), record_type=HealthRecordType.CHECKUP,
    ))

    by_animal = await health_records.get_by_animal(cow.id).get()
    assert [r.date for r in by_animal] == [at(15), at(5), at(1)]

    vaccines = await health_records.get_by_type(HealthRecordType.VACCINATION).get()
    assert [r.id for r in vaccines] == [vaccine_id]

    # Rango inclusivo en ambos extremos
    in_range = await health_records.get_by_date_range(at(1), at(5)).get()
    assert {r.id for r in in_range} == {vaccine_id, treatment_id}

    pending = await health_records.get_pending(at(8)).get()
    assert [r.id for r in pending] == [treatment_id, vaccine_id]

    assert await health_records.count_by_type(HealthRecordType.CHECKUP).get() == 1


# ── Producción de leche ──────────────────────────────

async def test_milk_total_reflects_deletions(milk_productions, cow):
    ids = []
    for day, liters in ((1, 10.0), (2, 12.0), (3, 8.0)):
        ids.append(await milk_productions.save(MilkProductionRecord(
            animal_id=cow.id, date=at(day), quantity_liters=liters,
        )))

    total = milk_productions.get_total_by_animal(cow.id, at(1, 0), at(3, 23))
    assert await total.get() == 30.0

    await milk_productions.delete(ids[2])
    assert await total.get() == 22.0


async def test_milk_total_empty_range_is_zero(milk_productions, cow):
    assert await milk_productions.get_total_by_animal(cow.id, at(1), at(2)).get() == 0.0


async def test_milk_daily_totals_and_shift_queries(milk_productions, cow):
    await milk_productions.save(MilkProductionRecord(
        animal_id=cow.id, date=at(1, 5), quantity_liters=6, shift=MilkingShift.MORNING,
    ))
    await milk_productions.save(MilkProductionRecord(
        animal_id=cow.id, date=at(1, 16), quantity_liters=4, shift=MilkingShift.AFTERNOON,
    ))
    await milk_productions.save(MilkProductionRecord(
        animal_id=cow.id, date=at(2, 5), quantity_liters=7, shift=MilkingShift.MORNING,
    ))

    daily = await milk_productions.get_daily_totals(at(1, 0), at(2, 23)).get()
    assert daily == [
        DailyMilkTotal(day=date(2026, 3, 1), total_liters=10.0),
        DailyMilkTotal(day=date(2026, 3, 2), total_liters=7.0),
    ]

    mornings = await milk_productions.get_by_shift(MilkingShift.MORNING).get()
    assert [r.quantity_liters for r in mornings] == [7.0, 6.0]
    assert await milk_productions.count_by_shift(MilkingShift.AFTERNOON).get() == 1


# ── Reproducción ─────────────────────────────────────

async def test_reproduction_queries(reproduction_records, cow):
    diagnosis_id = await reproduction_records.save(ReproductionRecordRecord(
        animal_id=cow.id,
        date=at(1),
        event_type=ReproductiveEventType.PREGNANCY_DIAGNOSIS,
        diagnosis_result=True,
        expected_birth_date=at(28),
    ))
    old_diagnosis_id = await reproduction_records.save(ReproductionRecordRecord(
        animal_id=cow.id,
        date=at(2),
        event_type=ReproductiveEventType.PREGNANCY_DIAGNOSIS,
        expected_birth_date=at(3),
    ))
    birth_id = await reproduction_records.save(ReproductionRecordRecord(
        animal_id=cow.id,
        date=at(10),
        event_type=ReproductiveEventType.BIRTH,
        offspring_count=2,
        offspring_ids=["calf-1", "calf-2"],
    ))

    upcoming = await reproduction_records.get_upcoming_births(at(5)).get()
    assert [r.id for r in upcoming] == [diagnosis_id]

    births = await reproduction_records.get_births_in_range(at(1), at(10)).get()
    assert [r.id for r in births] == [birth_id]
    assert births[0].offspring_ids == ["calf-1", "calf-2"]

    by_mother = await reproduction_records.get_births_by_mother(cow.id).get()
    assert [r.id for r in by_mother] == [birth_id]

    diagnoses = await reproduction_records.get_by_event_type(
        ReproductiveEventType.PREGNANCY_DIAGNOSIS
    ).get()
    assert [r.id for r in diagnoses] == [old_diagnosis_id, diagnosis_id]

    assert len(await reproduction_records.get_by_animal(cow.id).get()) == 3
    assert await reproduction_records.count_by_event_type(ReproductiveEventType.BIRTH).get() == 1
