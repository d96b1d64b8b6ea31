"""
Columnas compartidas por todas las entidades sincronizables.

Cada fila lleva su identidad generada en el cliente, timestamps y el
estado de espejado con el almacén remoto. Las columnas `sync_*` son
exclusivamente locales y nunca viajan al documento remoto.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from finca.database import UTCDateTime, utcnow

# Columnas que solo existen en el almacén local
LOCAL_ONLY_COLUMNS = frozenset({
    "synchronized",
    "sync_attempts",
    "sync_error",
    "sync_blocked",
})


def new_identity() -> str:
    return str(uuid.uuid4())


class SyncableMixin:
    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=new_identity,
        comment="UUID generado en el dispositivo, igual en ambos almacenes"
    )

    # ── Timestamps ───────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, index=True
    )

    # ── Estado de sincronización ─────────────────────
    synchronized: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, index=True,
        comment="True solo tras una escritura remota confirmada de esta versión"
    )
    sync_attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
        comment="Intentos remotos fallidos desde la última mutación local"
    )
    sync_error: Mapped[str | None] = mapped_column(Text)
    sync_blocked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
        comment="Fallo remoto permanente: el barrido lo omite hasta reencolar"
    )
