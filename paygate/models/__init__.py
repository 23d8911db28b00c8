"""ORM models package."""
from .base import Base
from .payment_order import PaymentOrder, PaymentOrderStatus
from .payment_record import PaymentRecord, PaymentRecordStatus
from .subscription import SubscriptionRecord, SubscriptionStatus

__all__ = [
    "Base",
    "PaymentOrder",
    "PaymentOrderStatus",
    "PaymentRecord",
    "PaymentRecordStatus",
    "SubscriptionRecord",
    "SubscriptionStatus",
]
