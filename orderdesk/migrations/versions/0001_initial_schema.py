"""initial schema: reference tables, orders, order changes

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "cities",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("name_key", sa.String(length=255), nullable=False),
    )
    op.create_index("ix_cities_name_key", "cities", ["name_key"], unique=True)

    op.create_table(
        "districts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("city_id", sa.Integer(), sa.ForeignKey("cities.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("name_key", sa.String(length=255), nullable=False),
        sa.UniqueConstraint("city_id", "name_key", name="uq_districts_city_name_key"),
    )
    op.create_index("ix_districts_city_id", "districts", ["city_id"])

    op.create_table(
        "villages",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("name_key", sa.String(length=255), nullable=False),
    )
    op.create_index("ix_villages_name_key", "villages", ["name_key"], unique=True)

    op.create_table(
        "years",
        sa.Column("year", sa.String(length=4), primary_key=True),
    )

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("location_type", sa.String(length=16), nullable=True),
        sa.Column("location_name", sa.String(length=255), nullable=True),
        sa.Column("district", sa.String(length=255), nullable=True),
        sa.Column("city_id", sa.Integer(), sa.ForeignKey("cities.id"), nullable=True),
        sa.Column("district_id", sa.Integer(), sa.ForeignKey("districts.id"), nullable=True),
        sa.Column("final_price", sa.Float(), nullable=True),
        sa.Column("deposit", sa.Float(), nullable=True),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("ordered_at", sa.Date(), nullable=True),
        sa.Column("completed_at", sa.Date(), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_orders_city_id", "orders", ["city_id"])
    op.create_index("ix_orders_district_id", "orders", ["district_id"])
    op.create_index("ix_orders_created_at", "orders", ["created_at"])

    op.create_table(
        "order_changes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "order_id",
            sa.Integer(),
            sa.ForeignKey("orders.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("field", sa.String(length=64), nullable=False),
        sa.Column("old_value", sa.String(), nullable=True),
        sa.Column("new_value", sa.String(), nullable=True),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_order_changes_order_id", "order_changes", ["order_id"])


def downgrade() -> None:
    op.drop_index("ix_order_changes_order_id", table_name="order_changes")
    op.drop_table("order_changes")

    op.drop_index("ix_orders_created_at", table_name="orders")
    op.drop_index("ix_orders_district_id", table_name="orders")
    op.drop_index("ix_orders_city_id", table_name="orders")
    op.drop_table("orders")

    op.drop_table("years")

    op.drop_index("ix_villages_name_key", table_name="villages")
    op.drop_table("villages")

    op.drop_index("ix_districts_city_id", table_name="districts")
    op.drop_table("districts")

    op.drop_index("ix_cities_name_key", table_name="cities")
    op.drop_table("cities")
