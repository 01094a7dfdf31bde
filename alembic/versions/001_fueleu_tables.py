"""FuelEU compliance, banking and pooling tables.

Revision ID: 001_fueleu
Revises:
Create Date: 2026-10-19

Adds api_keys, routes, compliance_balances, bank_entries, pools and
pool_members.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "001_fueleu"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "api_keys",
        sa.Column("id", postgresql.UUID(), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("key_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("last_used_at", sa.DateTime(), nullable=True),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("TRUE")),
        sa.Column("metadata", sa.JSON(), nullable=True),
    )
    op.create_index("ix_api_keys_key_hash", "api_keys", ["key_hash"], unique=True)
    op.create_index("ix_api_keys_is_active", "api_keys", ["is_active"])

    op.create_table(
        "routes",
        sa.Column("id", postgresql.UUID(), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("route_id", sa.String(50), nullable=False),
        sa.Column("vessel_type", sa.String(50), nullable=False),
        sa.Column("fuel_type", sa.String(50), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("ghg_intensity", sa.Float(), nullable=False),
        sa.Column("fuel_consumption", sa.Float(), nullable=False),
        sa.Column("distance", sa.Float(), nullable=False),
        sa.Column("total_emissions", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_baseline", sa.Boolean(), nullable=False, server_default=sa.text("FALSE")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("NOW()"), nullable=False),
    )
    op.create_index("ix_routes_route_id", "routes", ["route_id"], unique=True)
    op.create_index("ix_routes_year", "routes", ["year"])

    op.create_table(
        "compliance_balances",
        sa.Column("id", postgresql.UUID(), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("ship_id", sa.String(50), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("cb_gco2eq", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("NOW()"), nullable=False),
        sa.UniqueConstraint("ship_id", "year", name="uq_compliance_ship_year"),
    )

    op.create_table(
        "bank_entries",
        sa.Column("id", postgresql.UUID(), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("ship_id", sa.String(50), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("amount_gco2eq", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("NOW()"), nullable=False),
    )
    op.create_index("ix_bank_entries_ship", "bank_entries", ["ship_id"])

    op.create_table(
        "pools",
        sa.Column("id", postgresql.UUID(), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    )
    op.create_index("ix_pools_year", "pools", ["year"])

    op.create_table(
        "pool_members",
        sa.Column("pool_id", postgresql.UUID(), sa.ForeignKey("pools.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("ship_id", sa.String(50), primary_key=True),
        sa.Column("cb_before", sa.Float(), nullable=False),
        sa.Column("cb_after", sa.Float(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("pool_members")
    op.drop_index("ix_pools_year", table_name="pools")
    op.drop_table("pools")
    op.drop_index("ix_bank_entries_ship", table_name="bank_entries")
    op.drop_table("bank_entries")
    op.drop_table("compliance_balances")
    op.drop_index("ix_routes_year", table_name="routes")
    op.drop_index("ix_routes_route_id", table_name="routes")
    op.drop_table("routes")
    op.drop_index("ix_api_keys_is_active", table_name="api_keys")
    op.drop_index("ix_api_keys_key_hash", table_name="api_keys")
    op.drop_table("api_keys")
