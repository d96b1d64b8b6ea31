"""
Repositorio de Animal.

Además de las consultas por estado/especie ofrece el filtro por la
selección de especies guardada en preferencias, que se re-emite tanto al
cambiar los animales como al cambiar la selección.
"""

import logging

from finca.local.daos import AnimalDao
from finca.local.live import LiveQuery
from finca.local.preferences import PreferenceStore
from finca.models.animal import AnimalStatus, Species
from finca.remote.base import RemoteStore
from finca.repositories.base import SyncedRepository
from finca.schemas.animal import AnimalRecord

logger = logging.getLogger(__name__)

_SPECIES_VALUES = {species.value for species in Species}


class AnimalRepository(SyncedRepository[AnimalDao, AnimalRecord]):
    kind = "Animal"

    def __init__(
        self,
        dao: AnimalDao,
        remote: RemoteStore,
        preferences: PreferenceStore,
        dependents: list[SyncedRepository] | None = None,
        **kwargs,
    ):
        super().__init__(dao, remote, **kwargs)
        self._preferences = preferences
        self._dependents = list(dependents or [])

    def add_dependent(self, repository: SyncedRepository) -> None:
        self._dependents.append(repository)

    async def delete(self, identity: str, cascade_remote: bool = False) -> bool:
        """
        Borra el animal; sus registros locales caen por ON DELETE CASCADE.
        Con `cascade_remote=True` también se agendan los borrados remotos de
        los dependientes; por defecto quedan en el almacén remoto.
        """
        dependent_ids: list[tuple[SyncedRepository, list[str]]] = []
        if cascade_remote:
            for repository in self._dependents:
                ids = await repository.dao.list_ids_by_animal(identity)
                dependent_ids.append((repository, ids))

        deleted = await super().delete(identity)

        for repository, ids in dependent_ids:
            for dependent_id in ids:
                repository.schedule_remote_delete(dependent_id)
        if dependent_ids:
            total = sum(len(ids) for _, ids in dependent_ids)
            logger.info(f"Animal {identity}: {total} borrados remotos de dependientes agendados")
        return deleted

    # ── Consultas ────────────────────────────────────

    def get_by_status(self, status: AnimalStatus) -> LiveQuery[list[AnimalRecord]]:
        return self._dao.get_by_status(status)

    def get_by_species(self, species: Species) -> LiveQuery[list[AnimalRecord]]:
        return self._dao.get_by_species(species)

    def get_by_species_set(self, species: set[Species]) -> LiveQuery[list[AnimalRecord]]:
        return self._dao.get_by_species_set(species)

    def search(self, term: str) -> LiveQuery[list[AnimalRecord]]:
        """Subcadena sin distinguir mayúsculas en número de arete o nombre."""
        return self._dao.search_animals(term)

    def get_by_selected_species(self) -> LiveQuery[list[AnimalRecord]]:
        """Animales de las especies seleccionadas; selección vacía = todos."""

        async def _fetch() -> list[AnimalRecord]:
            selected = await self._preferences.get_selected_species()
            species = {Species(value) for value in selected if value in _SPECIES_VALUES}
            if selected and not species:
                return []
            return await self._dao.list_by_species_set(species)

        return LiveQuery(
            self._dao.notifier,
            [self._dao.table_name, self._preferences.table_name],
            _fetch,
        )

    def count_by_species(self, species: Species) -> LiveQuery[int]:
        return self._dao.count_by_species(species)

    def count_by_status(self, status: AnimalStatus) -> LiveQuery[int]:
        return self._dao.count_by_status(status)
