"""Request bodies for the payment endpoints."""
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from paygate.utils.sanitize import sanitize_text

# Largest amount a signed 64-bit INTEGER column holds.
MAX_AMOUNT = 2**63 - 1


class InitiatePaymentRequest(BaseModel):
    plan_id: str = Field(alias="planId", min_length=1, max_length=100)
    amount: int = Field(ge=1, le=MAX_AMOUNT, description="Amount in the smallest currency unit.")
    billing_cycle: Literal["monthly", "annual"] = Field(alias="billingCycle")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    @field_validator("plan_id", mode="before")
    @classmethod
    def _strip_html(cls, value):
        return sanitize_text(value)


class VerifyPaymentRequest(BaseModel):
    # Ids and signature are only trimmed (str_strip_whitespace); they are signed values.
    order_id: str = Field(alias="orderId", min_length=1, max_length=200)
    payment_id: str = Field(alias="paymentId", min_length=1, max_length=200)
    signature: str = Field(min_length=1, max_length=500)
    provider: Literal["razorpay", "pinelabs"]
    plan_id: str = Field(alias="planId", min_length=1, max_length=100)
    amount: int = Field(ge=1, le=MAX_AMOUNT)

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    @field_validator("plan_id", mode="before")
    @classmethod
    def _strip_html(cls, value):
        return sanitize_text(value)
