"""Ledger entries for verified payments."""
import enum

from sqlalchemy import CheckConstraint, Enum as SqlEnum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class PaymentRecordStatus(str, enum.Enum):
    """Possible statuses for a ledger entry."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentRecord(Base):
    """Append-only record of a payment whose signature was verified.

    ``payment_id`` is unique: inserting it twice is how duplicate deliveries
    are detected.
    """

    __tablename__ = "payment_records"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payment_records_positive_amount"),
        Index("ix_payment_records_order_id", "order_id"),
    )

    payment_id: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    order_id: Mapped[str] = mapped_column(String(200), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    plan_id: Mapped[str] = mapped_column(String(100), nullable=False)
    provider: Mapped[str | None] = mapped_column(String(32), nullable=True)
    status: Mapped[PaymentRecordStatus] = mapped_column(
        SqlEnum(PaymentRecordStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PaymentRecordStatus.COMPLETED,
    )

    subscription = relationship(
        "SubscriptionRecord",
        back_populates="payment_record",
        uselist=False,
        cascade="all, delete-orphan",
    )
