"""Esquema local inicial: animales, registros dependientes y preferencias

Revision ID: 0001_local_schema
Revises:
Create Date: 2026-10-19 09:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from finca.database import UTCDateTime

# revision identifiers, used by Alembic.
revision: str = '0001_local_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _syncable_columns() -> list[sa.Column]:
    """Identidad, timestamps y estado de sincronización (comunes a las 4 tablas)."""
    return [
        sa.Column('id', sa.String(length=36), nullable=False,
                  comment='UUID generado en el dispositivo, igual en ambos almacenes'),
        sa.Column('created_at', UTCDateTime(), nullable=False),
        sa.Column('updated_at', UTCDateTime(), nullable=False),
        sa.Column('synchronized', sa.Boolean(), nullable=False,
                  comment='True solo tras una escritura remota confirmada de esta versión'),
        sa.Column('sync_attempts', sa.Integer(), nullable=False,
                  comment='Intentos remotos fallidos desde la última mutación local'),
        sa.Column('sync_error', sa.Text(), nullable=True),
        sa.Column('sync_blocked', sa.Boolean(), nullable=False,
                  comment='Fallo remoto permanente: el barrido lo omite hasta reencolar'),
    ]


def _animal_fk() -> sa.Column:
    return sa.Column('animal_id', sa.String(length=36),
                     sa.ForeignKey('animals.id', ondelete='CASCADE'), nullable=False)


def _index_sync_columns(table: str) -> None:
    op.create_index(f'ix_{table}_updated_at', table, ['updated_at'])
    op.create_index(f'ix_{table}_synchronized', table, ['synchronized'])


def upgrade() -> None:
    # 1. animals
    op.create_table(
        'animals',
        *_syncable_columns(),
        sa.Column('tag_number', sa.String(length=50), nullable=False,
                  comment='Número de identificación oficial o arete'),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('species', sa.Enum(
            'BOVINE', 'OVINE', 'CAPRINE', 'PORCINE', 'EQUINE', 'AVIAN', 'OTHER',
            name='species', native_enum=False, length=20,
        ), nullable=False),
        sa.Column('breed', sa.String(length=100), nullable=False),
        sa.Column('sex', sa.Enum('MALE', 'FEMALE', name='sex', native_enum=False, length=10),
                  nullable=True),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('weight_kg', sa.Float(), nullable=False),
        sa.Column('color', sa.String(length=50), nullable=False),
        sa.Column('origin', sa.String(length=100), nullable=False,
                  comment='Nacido en finca, comprado, etc.'),
        sa.Column('mother_id', sa.String(length=36), nullable=False),
        sa.Column('father_id', sa.String(length=36), nullable=False),
        sa.Column('acquisition_date', sa.Date(), nullable=True),
        sa.Column('acquisition_price', sa.Float(), nullable=False),
        sa.Column('status', sa.Enum(
            'ACTIVE', 'SOLD', 'DEAD', 'SLAUGHTERED', 'TRANSFERRED', 'OTHER',
            name='animalstatus', native_enum=False, length=20,
        ), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    _index_sync_columns('animals')
    op.create_index('idx_animals_species', 'animals', ['species'])
    op.create_index('idx_animals_status', 'animals', ['status'])

    # 2. health_records
    op.create_table(
        'health_records',
        *_syncable_columns(),
        _animal_fk(),
        sa.Column('date', UTCDateTime(), nullable=False),
        sa.Column('record_type', sa.Enum(
            'VACCINATION', 'DEWORMING', 'TREATMENT', 'DIAGNOSIS', 'CHECKUP', 'SURGERY', 'OTHER',
            name='healthrecordtype', native_enum=False, length=20,
        ), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('product', sa.String(length=200), nullable=False,
                  comment='Medicamento o vacuna aplicada'),
        sa.Column('dose', sa.String(length=100), nullable=False),
        sa.Column('administration_route', sa.String(length=50), nullable=False,
                  comment='Intramuscular, subcutánea, oral, etc.'),
        sa.Column('responsible', sa.String(length=200), nullable=False,
                  comment='Veterinario o persona que realiza la intervención'),
        sa.Column('notes', sa.Text(), nullable=False),
        sa.Column('next_treatment_date', UTCDateTime(), nullable=True),
        sa.Column('recorded_by', sa.String(length=128), nullable=True,
                  comment='Usuario que capturó el registro'),
        sa.PrimaryKeyConstraint('id'),
    )
    _index_sync_columns('health_records')
    op.create_index('ix_health_records_animal_id', 'health_records', ['animal_id'])
    op.create_index('idx_health_records_type_date', 'health_records', ['record_type', 'date'])

    # 3. milk_productions
    op.create_table(
        'milk_productions',
        *_syncable_columns(),
        _animal_fk(),
        sa.Column('date', UTCDateTime(), nullable=False),
        sa.Column('shift', sa.Enum(
            'MORNING', 'AFTERNOON', 'NIGHT', 'OTHER',
            name='milkingshift', native_enum=False, length=20,
        ), nullable=False),
        sa.Column('quantity_liters', sa.Float(), nullable=False),
        sa.Column('quality', sa.String(length=50), nullable=False),
        sa.Column('fat_percentage', sa.Float(), nullable=True),
        sa.Column('protein_percentage', sa.Float(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=False),
        sa.Column('recorded_by', sa.String(length=128), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    _index_sync_columns('milk_productions')
    op.create_index('ix_milk_productions_animal_id', 'milk_productions', ['animal_id'])
    op.create_index('idx_milk_productions_animal_date', 'milk_productions', ['animal_id', 'date'])

    # 4. reproduction_records
    op.create_table(
        'reproduction_records',
        *_syncable_columns(),
        _animal_fk(),
        sa.Column('date', UTCDateTime(), nullable=False),
        sa.Column('event_type', sa.Enum(
            'HEAT', 'MATING', 'INSEMINATION', 'PREGNANCY_DIAGNOSIS', 'BIRTH', 'ABORTION', 'OTHER',
            name='reproductiveeventtype', native_enum=False, length=30,
        ), nullable=False),
        sa.Column('sire_id', sa.String(length=36), nullable=False),
        sa.Column('semen_type', sa.String(length=100), nullable=False),
        sa.Column('inseminator', sa.String(length=200), nullable=False),
        sa.Column('offspring_count', sa.Integer(), nullable=False),
        sa.Column('offspring_ids', sa.JSON(), nullable=False,
                  comment='Identidades de las crías registradas'),
        sa.Column('complications', sa.Text(), nullable=False),
        sa.Column('diagnosis_result', sa.Boolean(), nullable=True,
                  comment='True positivo, False negativo, NULL pendiente'),
        sa.Column('diagnosis_method', sa.String(length=100), nullable=False),
        sa.Column('gestation_days', sa.Integer(), nullable=True),
        sa.Column('expected_birth_date', UTCDateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=False),
        sa.Column('recorded_by', sa.String(length=128), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    _index_sync_columns('reproduction_records')
    op.create_index('ix_reproduction_records_animal_id', 'reproduction_records', ['animal_id'])
    op.create_index(
        'idx_reproduction_records_event_date', 'reproduction_records', ['event_type', 'date']
    )

    # 5. preferences (no se sincroniza)
    op.create_table(
        'preferences',
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', sa.JSON(), nullable=True),
        sa.Column('updated_at', UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint('key'),
    )


def downgrade() -> None:
    op.drop_table('preferences')
    for table in ('reproduction_records', 'milk_productions', 'health_records', 'animals'):
        op.drop_table(table)
