"""
Modelo HealthRecord — tratamientos, vacunas, diagnósticos y demás
intervenciones sanitarias de un animal.
"""

import enum
from datetime import datetime

from sqlalchemy import Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from finca.database import Base, UTCDateTime, utcnow
from finca.models.base import SyncableMixin


class HealthRecordType(str, enum.Enum):
    VACCINATION = "vaccination"
    DEWORMING = "deworming"
    TREATMENT = "treatment"
    DIAGNOSIS = "diagnosis"
    CHECKUP = "checkup"
    SURGERY = "surgery"
    OTHER = "other"


class HealthRecord(SyncableMixin, Base):
    __tablename__ = "health_records"

    animal_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("animals.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )

    # ── Datos del registro ───────────────────────────
    date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    record_type: Mapped[HealthRecordType] = mapped_column(
        Enum(HealthRecordType, native_enum=False, length=20),
        nullable=False, default=HealthRecordType.OTHER,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # ── Tratamiento o vacuna ─────────────────────────
    product: Mapped[str] = mapped_column(
        String(200), nullable=False, default="",
        comment="Medicamento o vacuna aplicada"
    )
    dose: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    administration_route: Mapped[str] = mapped_column(
        String(50), nullable=False, default="",
        comment="Intramuscular, subcutánea, oral, etc."
    )
    responsible: Mapped[str] = mapped_column(
        String(200), nullable=False, default="",
        comment="Veterinario o persona que realiza la intervención"
    )

    # ── Seguimiento ──────────────────────────────────
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    next_treatment_date: Mapped[datetime | None] = mapped_column(UTCDateTime)
    recorded_by: Mapped[str | None] = mapped_column(
        String(128), comment="Usuario que capturó el registro"
    )

    __table_args__ = (
        Index("idx_health_records_type_date", "record_type", "date"),
    )

    def __repr__(self) -> str:
        return f"<HealthRecord {self.id} animal={self.animal_id}>"
