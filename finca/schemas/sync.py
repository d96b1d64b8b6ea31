"""
Schemas para la sincronización local → remoto.

El flujo es:
1. Cada mutación local deja la fila con synchronized=False
2. El repositorio intenta espejarla en segundo plano (MirrorOutcome)
3. Lo que falle queda pendiente para el barrido de reconciliación
4. El barrido devuelve un SweepResult por tipo de entidad
"""

import enum
from datetime import datetime

from pydantic import BaseModel, Field


class MirrorOutcome(str, enum.Enum):
    """Resultado de espejar un registro individual."""
    SYNCHRONIZED = "synchronized"
    STALE = "stale"           # Otra mutación local llegó durante la escritura remota
    SKIPPED = "skipped"       # Ya sincronizado o eliminado localmente
    FAILED = "failed"         # Error remoto transitorio
    BLOCKED = "blocked"       # Error remoto permanente


# ── Log de errores remotos ───────────────────────────

class SyncErrorEntry(BaseModel):
    """Un fallo remoto capturado (nunca se propaga al llamador)."""
    kind: str
    identity: str
    operation: str = Field(..., description="upsert | delete")
    error: str
    permanent: bool = False
    occurred_at: datetime


# ── Resultado del barrido ────────────────────────────

class KindSweepResult(BaseModel):
    kind: str
    attempted: int = 0
    synchronized: int = 0
    stale: int = 0
    skipped: int = 0
    failed: int = 0
    blocked: int = 0

    def count(self, outcome: MirrorOutcome) -> None:
        self.attempted += 1
        field = outcome.value
        setattr(self, field, getattr(self, field) + 1)


class SweepResult(BaseModel):
    started_at: datetime
    finished_at: datetime | None = None
    kinds: list[KindSweepResult] = Field(default=[])

    @property
    def attempted(self) -> int:
        return sum(k.attempted for k in self.kinds)

    @property
    def synchronized(self) -> int:
        return sum(k.synchronized for k in self.kinds)

    @property
    def failed(self) -> int:
        return sum(k.failed + k.blocked for k in self.kinds)

    @property
    def summary(self) -> str:
        return (
            f"Barrido: {self.attempted} intentados, "
            f"{self.synchronized} sincronizados, "
            f"{self.failed} fallidos"
        )


# ── Estado de sincronización ─────────────────────────

class KindSyncStatus(BaseModel):
    kind: str
    unsynced: int = 0
    blocked: int = 0


class SyncStatusResponse(BaseModel):
    """Estado agregado para una vista de monitoreo."""
    kinds: list[KindSyncStatus] = Field(default=[])
    pending_total: int = 0
    recent_errors: list[SyncErrorEntry] = Field(default=[])


class RequeueResponse(BaseModel):
    requeued: int
