"""
Modelo MilkProduction — producción de leche por ordeño de cada animal.
"""

import enum
from datetime import datetime

from sqlalchemy import Enum, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from finca.database import Base, UTCDateTime, utcnow
from finca.models.base import SyncableMixin


class MilkingShift(str, enum.Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    NIGHT = "night"
    OTHER = "other"


class MilkProduction(SyncableMixin, Base):
    __tablename__ = "milk_productions"

    animal_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("animals.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )

    # ── Ordeño ───────────────────────────────────────
    date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    shift: Mapped[MilkingShift] = mapped_column(
        Enum(MilkingShift, native_enum=False, length=20),
        nullable=False, default=MilkingShift.MORNING,
    )
    quantity_liters: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # ── Calidad (opcional) ───────────────────────────
    quality: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    fat_percentage: Mapped[float | None] = mapped_column(Float)
    protein_percentage: Mapped[float | None] = mapped_column(Float)

    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    recorded_by: Mapped[str | None] = mapped_column(String(128))

    __table_args__ = (
        Index("idx_milk_productions_animal_date", "animal_id", "date"),
    )

    def __repr__(self) -> str:
        return f"<MilkProduction {self.id} animal={self.animal_id} {self.quantity_liters}L>"
