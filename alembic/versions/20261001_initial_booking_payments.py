"""Initial schema: users, properties, apartments, payments, audit logs.

Revision ID: 9f1c2a7b3d10
Revises:
Create Date: 2026-10-01 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "9f1c2a7b3d10"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        *_timestamps(),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.UniqueConstraint("email"),
    )
    op.create_table(
        "properties",
        *_timestamps(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("price", sa.Numeric(18, 2), nullable=True),
        sa.CheckConstraint("price >= 0", name="ck_property_price_non_negative"),
    )
    op.create_table(
        "apartments",
        *_timestamps(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=True),
    )
    op.create_table(
        "apartment_units",
        *_timestamps(),
        sa.Column("apartment_id", sa.Integer(), sa.ForeignKey("apartments.id"), nullable=False),
        sa.Column("unit_number", sa.String(length=32), nullable=False),
        sa.Column("floor_number", sa.Integer(), nullable=True),
        sa.Column("bedrooms", sa.Integer(), nullable=True),
        sa.Column("bathrooms", sa.Integer(), nullable=True),
        sa.Column("area", sa.Numeric(10, 2), nullable=True),
        sa.Column("price", sa.Numeric(18, 2), nullable=True),
        sa.Column("is_available", sa.Boolean(), nullable=False),
    )
    op.create_index("ix_apartment_units_apartment_id", "apartment_units", ["apartment_id"], unique=False)

    payment_method_enum = sa.Enum("CREDIT_CARD", "UPI", "RAZORPAY", name="paymentmethod")
    op.create_table(
        "payments",
        *_timestamps(),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("total_price", sa.Numeric(18, 2), nullable=True),
        sa.Column("amount_paid", sa.Numeric(18, 2), nullable=False),
        sa.Column("payment_method", payment_method_enum, nullable=False),
        sa.Column("payment_details", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("invoice_number", sa.String(length=64), nullable=True),
        sa.Column("is_deposit", sa.Boolean(), nullable=False),
    )
    op.create_index("ix_payments_user_id", "payments", ["user_id"], unique=False)
    op.create_index("ix_payments_user_property", "payments", ["user_id", "property_id"], unique=False)
    op.create_index("ix_payments_payment_date", "payments", ["payment_date"], unique=False)

    op.create_table(
        "apartment_bookings",
        *_timestamps(),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("apartment_id", sa.Integer(), sa.ForeignKey("apartments.id"), nullable=False),
        sa.Column("unit_id", sa.Integer(), sa.ForeignKey("apartment_units.id"), nullable=False),
        sa.Column("payment_id", sa.Integer(), sa.ForeignKey("payments.id"), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.UniqueConstraint("payment_id"),
    )
    op.create_index("ix_apartment_bookings_user", "apartment_bookings", ["user_id"], unique=False)
    op.create_index("ix_apartment_bookings_unit_id", "apartment_bookings", ["unit_id"], unique=False)

    op.create_table(
        "audit_logs",
        *_timestamps(),
        sa.Column("actor", sa.String(length=100), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("data_json", sa.JSON(), nullable=False),
        sa.Column("at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity", "entity_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_audit_logs_entity", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_apartment_bookings_unit_id", table_name="apartment_bookings")
    op.drop_index("ix_apartment_bookings_user", table_name="apartment_bookings")
    op.drop_table("apartment_bookings")
    op.drop_index("ix_payments_payment_date", table_name="payments")
    op.drop_index("ix_payments_user_property", table_name="payments")
    op.drop_index("ix_payments_user_id", table_name="payments")
    op.drop_table("payments")
    sa.Enum(name="paymentmethod").drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_apartment_units_apartment_id", table_name="apartment_units")
    op.drop_table("apartment_units")
    op.drop_table("apartments")
    op.drop_table("properties")
    op.drop_table("users")
