"""create payment orders, payment records and subscriptions"""
from alembic import op
import sqlalchemy as sa

revision = "0001_payment_tables"
down_revision = None
branch_labels = None
depends_on = None

_STATUSES = ("pending", "completed", "failed")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "payment_orders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.String(length=200), nullable=False),
        sa.Column("plan_id", sa.String(length=100), nullable=False),
        sa.Column("billing_cycle", sa.String(length=16), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("provider", sa.String(length=32), nullable=False),
        sa.Column(
            "status",
            sa.Enum("created", "completed", "failed", name="paymentorderstatus"),
            nullable=False,
        ),
        *_timestamps(),
        sa.UniqueConstraint("order_id", name="uq_payment_orders_order_id"),
        sa.CheckConstraint("amount > 0", name="ck_payment_orders_positive_amount"),
    )

    op.create_table(
        "payment_records",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("payment_id", sa.String(length=200), nullable=False),
        sa.Column("order_id", sa.String(length=200), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("plan_id", sa.String(length=100), nullable=False),
        sa.Column("provider", sa.String(length=32), nullable=True),
        sa.Column("status", sa.Enum(*_STATUSES, name="paymentrecordstatus"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("payment_id", name="uq_payment_records_payment_id"),
        sa.CheckConstraint("amount > 0", name="ck_payment_records_positive_amount"),
    )
    op.create_index("ix_payment_records_order_id", "payment_records", ["order_id"])

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("subscription_id", sa.String(length=36), nullable=False),
        sa.Column("plan_id", sa.String(length=100), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("status", sa.Enum(*_STATUSES, name="subscriptionstatus"), nullable=False),
        sa.Column("payment_record_id", sa.Integer(), sa.ForeignKey("payment_records.id"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("subscription_id", name="uq_subscriptions_subscription_id"),
        sa.UniqueConstraint("payment_record_id", name="uq_subscriptions_payment_record_id"),
    )


def downgrade() -> None:
    op.drop_table("subscriptions")
    op.drop_index("ix_payment_records_order_id", table_name="payment_records")
    op.drop_table("payment_records")
    op.drop_table("payment_orders")
