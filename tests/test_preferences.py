"""
Tests del almacén de preferencias.
"""

import asyncio
from typing import get_type_hints

from finca.local.preferences import PreferenceStore
from finca.models.animal import Species


async def test_get_returns_default_when_missing(container):
    assert await container.preferences.get("missing", "default") == "default"


async def test_set_overwrites_value(container):
    await container.preferences.set("unidad", "litros")
    await container.preferences.set("unidad", "galones")

    assert await container.preferences.get("unidad") == "galones"


async def test_selected_species_round_trip(container):
    assert await container.preferences.get_selected_species() == set()

    await container.preferences.save_selected_species({"ovine", "bovine"})

    assert await container.preferences.get_selected_species() == {"bovine", "ovine"}
    assert await container.preferences.get("selected_species") == ["bovine", "ovine"]


async def test_selected_species_stream_reemits(container):
    stream = aiter(container.preferences.selected_species())
    assert await asyncio.wait_for(anext(stream), 2) == set()

    await container.preferences.save_selected_species({"caprine"})

    assert await asyncio.wait_for(anext(stream), 2) == {"caprine"}
    await stream.aclose()


async def test_selected_species_stores_enum_values(container):
    await container.preferences.save_selected_species({Species.BOVINE, "ovine"})

    assert await container.preferences.get("selected_species") == ["bovine", "ovine"]
    assert await container.preferences.get_selected_species() == {"bovine", "ovine"}


def test_species_annotations_resolve_to_builtin_set():
    hints = get_type_hints(PreferenceStore.get_selected_species)

    assert hints["return"] == set[str]
