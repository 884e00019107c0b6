"""Reference tables for the administrative hierarchy.

Creates:
- provinces
- districts (-> provinces)
- municipalities (-> districts)
- wards (one row per municipality, ward numbers comma-delimited)
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_reference_tables"
down_revision = None
branch_labels = None
depends_on = None


def _name_columns() -> list[sa.Column]:
    return [
        sa.Column("name_en", sa.String(length=255), nullable=False),
        sa.Column("name_np", sa.String(length=255), nullable=False),
        sa.Column("name_en_search", sa.String(length=255), nullable=False),
        sa.Column("name_np_search", sa.String(length=255), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "provinces",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        *_name_columns(),
    )

    op.create_table(
        "districts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column(
            "province_id",
            sa.Integer(),
            sa.ForeignKey("provinces.id"),
            nullable=False,
        ),
        *_name_columns(),
    )
    op.create_index("ix_districts_province_id", "districts", ["province_id"])

    op.create_table(
        "municipalities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column(
            "district_id",
            sa.Integer(),
            sa.ForeignKey("districts.id"),
            nullable=False,
        ),
        *_name_columns(),
        sa.Column("type_en", sa.String(length=100), nullable=False),
        sa.Column("type_np", sa.String(length=100), nullable=False),
    )
    op.create_index("ix_municipalities_district_id", "municipalities", ["district_id"])

    op.create_table(
        "wards",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column(
            "municipality_id",
            sa.Integer(),
            sa.ForeignKey("municipalities.id"),
            nullable=False,
        ),
        sa.Column("encoded_wards", sa.Text(), nullable=False),
    )
    op.create_index("ix_wards_municipality_id", "wards", ["municipality_id"])


def downgrade() -> None:
    op.drop_index("ix_wards_municipality_id", table_name="wards")
    op.drop_table("wards")
    op.drop_index("ix_municipalities_district_id", table_name="municipalities")
    op.drop_table("municipalities")
    op.drop_index("ix_districts_province_id", table_name="districts")
    op.drop_table("districts")
    op.drop_table("provinces")
