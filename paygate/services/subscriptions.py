"""Subscription lookups and construction."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from paygate.models import PaymentRecord, SubscriptionRecord, SubscriptionStatus


def generate_subscription_id() -> str:
    """Return a fresh UUID4, independent of any provider-assigned id."""

    return str(uuid4())


def build_subscription(plan_id: str, amount: int) -> SubscriptionRecord:
    return SubscriptionRecord(
        subscription_id=generate_subscription_id(),
        plan_id=plan_id,
        amount=amount,
        status=SubscriptionStatus.COMPLETED,
    )


def get_subscription(db: Session, subscription_id: str) -> SubscriptionRecord | None:
    stmt = select(SubscriptionRecord).where(SubscriptionRecord.subscription_id == subscription_id).limit(1)
    return db.scalars(stmt).first()


def get_subscription_by_payment_id(db: Session, payment_id: str) -> SubscriptionRecord | None:
    stmt = (
        select(SubscriptionRecord)
        .join(PaymentRecord, SubscriptionRecord.payment_record_id == PaymentRecord.id)
        .where(PaymentRecord.payment_id == payment_id)
        .limit(1)
    )
    return db.scalars(stmt).first()


def serialize_subscription(subscription: SubscriptionRecord) -> dict[str, object]:
    return {
        "subscriptionId": subscription.subscription_id,
        "planId": subscription.plan_id,
        "amount": subscription.amount,
        "status": subscription.status.value,
        "createdAt": subscription.created_at.isoformat(),
    }


__all__ = [
    "generate_subscription_id",
    "build_subscription",
    "get_subscription",
    "get_subscription_by_payment_id",
    "serialize_subscription",
]
