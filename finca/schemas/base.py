"""
Schemas base compartidos por las cuatro entidades sincronizables.

`SyncableRecord` es el valor inmutable que circula entre la UI, los
repositorios y los DAOs; las filas ORM nunca salen de la capa local.
`RecordUpdate` es el builder tipado de actualizaciones parciales: solo
se aplican los campos asignados explícitamente.
"""

from datetime import datetime
from typing import TypeVar

from pydantic import BaseModel, ConfigDict

from finca.models.base import LOCAL_ONLY_COLUMNS

RecordT = TypeVar("RecordT", bound="SyncableRecord")


class SyncableRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # ── Estado local de sincronización ───────────────
    synchronized: bool = False
    sync_attempts: int = 0
    sync_error: str | None = None
    sync_blocked: bool = False

    @property
    def is_draft(self) -> bool:
        return not self.id

    def to_document(self) -> dict:
        """Documento remoto: todos los campos salvo el estado local de sync."""
        return self.model_dump(mode="json", exclude=set(LOCAL_ONLY_COLUMNS))

    def to_row(self) -> dict:
        """Valores de columna para la fila local."""
        return self.model_dump()


class RecordUpdate(BaseModel):
    """Actualización parcial; cada subclase declara sus campos como opcionales."""

    def apply_to(self, record: RecordT) -> RecordT:
        # Revalidar contra el record rechaza None en campos obligatorios
        changes = self.model_dump(exclude_unset=True)
        return type(record).model_validate({**record.model_dump(), **changes})
