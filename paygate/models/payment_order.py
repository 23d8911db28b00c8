"""Orders opened with a payment provider."""
import enum

from sqlalchemy import CheckConstraint, Enum as SqlEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class PaymentOrderStatus(str, enum.Enum):
    CREATED = "created"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentOrder(Base):
    """Order created by ``initiate``; the plan it was opened for is kept here."""

    __tablename__ = "payment_orders"
    __table_args__ = (CheckConstraint("amount > 0", name="ck_payment_orders_positive_amount"),)

    order_id: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    plan_id: Mapped[str] = mapped_column(String(100), nullable=False)
    billing_cycle: Mapped[str] = mapped_column(String(16), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    provider: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[PaymentOrderStatus] = mapped_column(
        SqlEnum(PaymentOrderStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PaymentOrderStatus.CREATED,
    )
