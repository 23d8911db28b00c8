"""Idempotency ledger for verified payments.

A payment id is recorded at most once. The unique constraint on
``payment_records.payment_id`` is the insert-if-absent primitive: when two
deliveries of the same payment race, the database rejects the second insert
and the loser re-reads the winner's row.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from paygate.models import PaymentRecord, PaymentRecordStatus
from paygate.services.subscriptions import build_subscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerEntry:
    created: bool
    record: PaymentRecord


def get_payment_record(db: Session, payment_id: str) -> PaymentRecord | None:
    """Return the ledger entry for ``payment_id`` if present."""

    if not payment_id:
        return None
    stmt = select(PaymentRecord).where(PaymentRecord.payment_id == payment_id).limit(1)
    return db.scalars(stmt).first()


def record_if_new(
    db: Session,
    *,
    payment_id: str,
    order_id: str,
    amount: int,
    plan_id: str,
    provider: str | None = None,
) -> LedgerEntry:
    """Record a verified payment and its subscription unless already known.

    Returns ``created=False`` with the untouched existing record for
    duplicates; callers still acknowledge those as successes.
    """

    existing = get_payment_record(db, payment_id)
    if existing is not None:
        logger.info("Duplicate payment ignored", extra={"payment_id": payment_id, "provider": provider})
        return LedgerEntry(created=False, record=existing)

    record = PaymentRecord(
        payment_id=payment_id,
        order_id=order_id,
        amount=amount,
        plan_id=plan_id,
        provider=provider,
        status=PaymentRecordStatus.COMPLETED,
    )
    record.subscription = build_subscription(plan_id, amount)
    try:
        db.add(record)
        db.commit()
    except IntegrityError:
        db.rollback()
        winner = get_payment_record(db, payment_id)
        if winner is None:
            # The violation was not the payment id uniqueness.
            raise
        logger.info(
            "Concurrent duplicate payment resolved",
            extra={"payment_id": payment_id, "provider": provider},
        )
        return LedgerEntry(created=False, record=winner)

    db.refresh(record)
    logger.info(
        "Payment recorded",
        extra={
            "payment_id": payment_id,
            "order_id": order_id,
            "provider": provider,
            "subscription_id": record.subscription.subscription_id,
        },
    )
    return LedgerEntry(created=True, record=record)


__all__ = ["LedgerEntry", "get_payment_record", "record_if_new"]
