"""
Modelo Animal — cada animal individual del hato.
Es la entidad dueña de los registros sanitarios, de producción y reproductivos.
"""

import enum
from datetime import date

from sqlalchemy import Date, Enum, Float, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from finca.database import Base
from finca.models.base import SyncableMixin


class Species(str, enum.Enum):
    BOVINE = "bovine"
    OVINE = "ovine"
    CAPRINE = "caprine"
    PORCINE = "porcine"
    EQUINE = "equine"
    AVIAN = "avian"
    OTHER = "other"


class Sex(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"


class AnimalStatus(str, enum.Enum):
    ACTIVE = "active"
    SOLD = "sold"
    DEAD = "dead"
    SLAUGHTERED = "slaughtered"
    TRANSFERRED = "transferred"
    OTHER = "other"


class Animal(SyncableMixin, Base):
    __tablename__ = "animals"

    # ── Identificación ───────────────────────────────
    tag_number: Mapped[str] = mapped_column(
        String(50), nullable=False, default="",
        comment="Número de identificación oficial o arete"
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    # ── Características ──────────────────────────────
    species: Mapped[Species] = mapped_column(
        Enum(Species, native_enum=False, length=20),
        nullable=False, default=Species.OTHER,
    )
    breed: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    sex: Mapped[Sex | None] = mapped_column(Enum(Sex, native_enum=False, length=10))
    birth_date: Mapped[date | None] = mapped_column(Date)
    weight_kg: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    color: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    # ── Origen ───────────────────────────────────────
    origin: Mapped[str] = mapped_column(
        String(100), nullable=False, default="",
        comment="Nacido en finca, comprado, etc."
    )
    mother_id: Mapped[str] = mapped_column(String(36), nullable=False, default="")
    father_id: Mapped[str] = mapped_column(String(36), nullable=False, default="")
    acquisition_date: Mapped[date | None] = mapped_column(Date)
    acquisition_price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # ── Estado ───────────────────────────────────────
    status: Mapped[AnimalStatus] = mapped_column(
        Enum(AnimalStatus, native_enum=False, length=20),
        nullable=False, default=AnimalStatus.ACTIVE,
    )

    __table_args__ = (
        Index("idx_animals_species", "species"),
        Index("idx_animals_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Animal {self.id} {self.tag_number} {self.name}>"
