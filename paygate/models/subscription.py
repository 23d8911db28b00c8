"""Subscriptions granted for verified payments."""
import enum

from sqlalchemy import Enum as SqlEnum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class SubscriptionStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class SubscriptionRecord(Base):
    """Subscription derived 1:1 from a ``PaymentRecord``."""

    __tablename__ = "subscriptions"

    subscription_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    plan_id: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[SubscriptionStatus] = mapped_column(
        SqlEnum(SubscriptionStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=SubscriptionStatus.COMPLETED,
    )
    payment_record_id: Mapped[int] = mapped_column(
        ForeignKey("payment_records.id"), nullable=False, unique=True
    )

    payment_record = relationship("PaymentRecord", back_populates="subscription")
