"""
Modelo ReproductionRecord — celos, montas, inseminaciones, diagnósticos
de gestación y partos.
"""

import enum
from datetime import datetime

from sqlalchemy import JSON, Boolean, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from finca.database import Base, UTCDateTime, utcnow
from finca.models.base import SyncableMixin


class ReproductiveEventType(str, enum.Enum):
    HEAT = "heat"
    MATING = "mating"
    INSEMINATION = "insemination"
    PREGNANCY_DIAGNOSIS = "pregnancy_diagnosis"
    BIRTH = "birth"
    ABORTION = "abortion"
    OTHER = "other"


class ReproductionRecord(SyncableMixin, Base):
    __tablename__ = "reproduction_records"

    # Normalmente la hembra
    animal_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("animals.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )

    date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    event_type: Mapped[ReproductiveEventType] = mapped_column(
        Enum(ReproductiveEventType, native_enum=False, length=30),
        nullable=False, default=ReproductiveEventType.OTHER,
    )

    # ── Monta / inseminación ─────────────────────────
    sire_id: Mapped[str] = mapped_column(String(36), nullable=False, default="")
    semen_type: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    inseminator: Mapped[str] = mapped_column(String(200), nullable=False, default="")

    # ── Parto ────────────────────────────────────────
    offspring_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    offspring_ids: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
        comment="Identidades de las crías registradas"
    )
    complications: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # ── Diagnóstico de gestación ─────────────────────
    diagnosis_result: Mapped[bool | None] = mapped_column(
        Boolean, comment="True positivo, False negativo, NULL pendiente"
    )
    diagnosis_method: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    gestation_days: Mapped[int | None] = mapped_column(Integer)
    expected_birth_date: Mapped[datetime | None] = mapped_column(UTCDateTime)

    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    recorded_by: Mapped[str | None] = mapped_column(String(128))

    __table_args__ = (
        Index("idx_reproduction_records_event_date", "event_type", "date"),
    )

    def __repr__(self) -> str:
        return f"<ReproductionRecord {self.id} animal={self.animal_id}>"
