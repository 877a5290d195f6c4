# courier_hub/modules/payments/service.py
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from courier_hub.core.auth.policy import AccessContext, Action, CurrentUser, Resource, ensure_allowed
from courier_hub.core.errors import Conflict, NotFound
from courier_hub.modules.parcels.repository import ParcelRepository
from courier_hub.shared.database.models import Payment
from courier_hub.shared.ids import validate_id
from courier_hub.shared.pagination import PageParams
from .processor import PaymentProcessor
from .repository import PaymentRepository
from .schemas import PaymentCreate

logger = logging.getLogger(__name__)


class PaymentService:
    def __init__(self, payments: PaymentRepository, parcels: ParcelRepository, processor: PaymentProcessor):
        self.payments = payments
        self.parcels = parcels
        self.processor = processor

    def create_intent(self, user: CurrentUser, amount_in_cents: int) -> str:
        logger.info(f"Creating payment intent of {amount_in_cents} for {user.email}")
        return self.processor.create_intent(amount_in_cents)

    def record_payment(self, user: CurrentUser, data: PaymentCreate) -> Payment:
        parcel_id = validate_id(data.parcel_id, "parcel id")
        parcel = self.parcels.get(parcel_id)
        if parcel is None:
            raise NotFound("Parcel not found")
        ensure_allowed(
            user, Action.CREATE,
            AccessContext(resource=Resource.PAYMENT, caller_email=user.email, owner_email=parcel.created_by),
            "You can only pay for your own parcels",
        )
        if parcel.payment_status == "paid":
            raise Conflict("Parcel is already paid")

        payment = Payment(
            parcel_id=parcel_id,
            user_email=user.email,
            transaction_id=data.transaction_id,
            amount=Decimal(str(data.amount)),
            currency=data.currency.lower(),
            payment_method=data.payment_method,
            created_at=datetime.now(),
        )
        payment = self.payments.record(payment)
        logger.info(f"Payment {data.transaction_id} recorded for parcel {parcel_id} by {user.email}")
        return payment

    def list_payments(self, user: CurrentUser, params: PageParams, email: Optional[str] = None) -> Dict[str, Any]:
        if user.is_admin:
            user_email = email
        else:
            ensure_allowed(
                user, Action.READ,
                AccessContext(resource=Resource.PAYMENT, caller_email=user.email, owner_email=user.email),
            )
            user_email = user.email
        items, meta = self.payments.list_payments(params, user_email=user_email)
        return {"data": items, "pagination": meta}
