"""Initial clinic schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _audit_columns():
    return [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # Reference data
    op.create_table(
        "types",
        *_audit_columns(),
        sa.Column("name", sa.String(length=80), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "specialties",
        *_audit_columns(),
        sa.Column("name", sa.String(length=80), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # People
    op.create_table(
        "owners",
        *_audit_columns(),
        sa.Column("first_name", sa.String(length=30), nullable=False),
        sa.Column("last_name", sa.String(length=30), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=True, comment="Street address"),
        sa.Column("city", sa.String(length=80), nullable=True, comment="City"),
        sa.Column(
            "telephone",
            sa.String(length=20),
            nullable=True,
            comment="Digits-only telephone number",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_owners_last_name", "owners", ["last_name"])

    op.create_table(
        "vets",
        *_audit_columns(),
        sa.Column("first_name", sa.String(length=30), nullable=False),
        sa.Column("last_name", sa.String(length=30), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_vets_last_name", "vets", ["last_name"])

    op.create_table(
        "vet_specialties",
        sa.Column("vet_id", sa.Integer(), nullable=False),
        sa.Column("specialty_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["vet_id"], ["vets.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["specialty_id"], ["specialties.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("vet_id", "specialty_id"),
    )

    # Pets and visits
    op.create_table(
        "pets",
        *_audit_columns(),
        sa.Column("name", sa.String(length=80), nullable=False),
        sa.Column("birth_date", sa.Date(), nullable=True, comment="Pet's birth date"),
        sa.Column("type_id", sa.Integer(), nullable=True, comment="Id of the pet's type"),
        sa.Column("owner_id", sa.Integer(), nullable=True, comment="Id of the pet's owner"),
        sa.ForeignKeyConstraint(["type_id"], ["types.id"]),
        sa.ForeignKeyConstraint(["owner_id"], ["owners.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_pets_owner_id", "pets", ["owner_id"])
    op.create_index("idx_pets_owner_name", "pets", ["owner_id", "name"])

    op.create_table(
        "visits",
        *_audit_columns(),
        sa.Column("pet_id", sa.Integer(), nullable=True, comment="Id of the visited pet"),
        sa.Column("visit_date", sa.Date(), nullable=False, comment="Date of the visit"),
        sa.Column(
            "description",
            sa.String(length=255),
            nullable=True,
            comment="Reason for or notes about the visit",
        ),
        sa.ForeignKeyConstraint(["pet_id"], ["pets.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_visits_pet_date", "visits", ["pet_id", "visit_date"])


def downgrade() -> None:
    op.drop_index("idx_visits_pet_date", table_name="visits")
    op.drop_table("visits")
    op.drop_index("idx_pets_owner_name", table_name="pets")
    op.drop_index("ix_pets_owner_id", table_name="pets")
    op.drop_table("pets")
    op.drop_table("vet_specialties")
    op.drop_index("ix_vets_last_name", table_name="vets")
    op.drop_table("vets")
    op.drop_index("ix_owners_last_name", table_name="owners")
    op.drop_table("owners")
    op.drop_table("specialties")
    op.drop_table("types")
