"""Payment initiation, verification and webhook endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from paygate.db import get_db
from paygate.schemas.payment import InitiatePaymentRequest, VerifyPaymentRequest
from paygate.services.orchestrator import PaymentOrchestrator
from paygate.services.subscriptions import serialize_subscription

router = APIRouter(prefix="/payment", tags=["payment"])


def get_orchestrator(db: Session = Depends(get_db)) -> PaymentOrchestrator:
    return PaymentOrchestrator(db)


@router.post("/initiate", status_code=status.HTTP_200_OK)
def initiate_payment(
    payload: InitiatePaymentRequest,
    orchestrator: PaymentOrchestrator = Depends(get_orchestrator),
) -> dict[str, object]:
    """Create an order with the configured payment provider."""

    data = orchestrator.initiate(
        plan_id=payload.plan_id,
        amount=payload.amount,
        billing_cycle=payload.billing_cycle,
    )
    return {"success": True, "data": data}


@router.post("/verify", status_code=status.HTTP_200_OK)
def verify_payment(
    payload: VerifyPaymentRequest,
    orchestrator: PaymentOrchestrator = Depends(get_orchestrator),
) -> dict[str, object]:
    """Verify a checkout signature and grant the subscription."""

    subscription = orchestrator.verify(
        order_id=payload.order_id,
        payment_id=payload.payment_id,
        signature=payload.signature,
        plan_id=payload.plan_id,
        amount=payload.amount,
        provider_hint=payload.provider,
    )
    return {
        "success": True,
        "subscriptionId": subscription.subscription_id,
        "amount": subscription.amount,
        "planId": subscription.plan_id,
    }


@router.post("/webhook/{provider_name}", status_code=status.HTTP_200_OK)
async def payment_webhook(
    provider_name: str,
    request: Request,
    orchestrator: PaymentOrchestrator = Depends(get_orchestrator),
) -> dict[str, bool]:
    """Receive asynchronous payment status callbacks."""

    raw_body = await request.body()
    headers = {k: v for k, v in request.headers.items()}
    return orchestrator.handle_webhook(provider_name, raw_body, headers)


@router.get("/subscriptions/{subscription_id}", status_code=status.HTTP_200_OK)
def read_subscription(
    subscription_id: str,
    orchestrator: PaymentOrchestrator = Depends(get_orchestrator),
) -> dict[str, object]:
    subscription = orchestrator.get_subscription(subscription_id)
    return {"success": True, "data": serialize_subscription(subscription)}


__all__ = ["router", "get_orchestrator"]
