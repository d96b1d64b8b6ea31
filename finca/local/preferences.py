"""
Almacén de preferencias del usuario (clave/valor JSON en la tabla `preferences`).
La selección de especies se guarda como lista ordenada de valores.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from finca.core.exceptions import LocalStoreError
from finca.local.live import ChangeNotifier, LiveQuery
from finca.models.preference import Preference

logger = logging.getLogger(__name__)

SELECTED_SPECIES_KEY = "selected_species"


class PreferenceStore:
    table_name = Preference.__tablename__

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        notifier: ChangeNotifier,
    ):
        self._session_factory = session_factory
        self._notifier = notifier

    async def get(self, key: str, default: Any = None) -> Any:
        try:
            async with self._session_factory() as db:
                result = await db.execute(select(Preference.value).where(Preference.key == key))
                value = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise LocalStoreError(f"Error leyendo preferencia {key}: {exc}") from exc
        return default if value is None else value

    async def set(self, key: str, value: Any) -> None:
        try:
            async with self._session_factory() as db:
                await db.merge(Preference(key=key, value=value))
                await db.commit()
        except SQLAlchemyError as exc:
            logger.error(f"No se pudo guardar la preferencia {key}: {exc}")
            raise LocalStoreError(f"Error guardando preferencia {key}: {exc}") from exc

        self._notifier.notify(self.table_name)

    # ── Selección de especies ────────────────────────

    async def get_selected_species(self) -> set[str]:
        return set(await self.get(SELECTED_SPECIES_KEY, []))

    async def save_selected_species(self, species: Iterable[str]) -> None:
        # Species es (str, Enum): str() daría "Species.BOVINE"
        values = {s.value if isinstance(s, enum.Enum) else s for s in species}
        await self.set(SELECTED_SPECIES_KEY, sorted(values))

    def selected_species(self) -> LiveQuery[set[str]]:
        return LiveQuery(self._notifier, [self.table_name], self.get_selected_species)
