# courier_hub/modules/payments/router.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from courier_hub.config.database import get_db
from courier_hub.core.auth.dependencies import get_current_user
from courier_hub.core.auth.policy import CurrentUser
from courier_hub.modules.parcels.repository import ParcelRepository
from courier_hub.shared.pagination import PageParams, page_params
from .processor import PaymentProcessor, get_payment_processor
from .repository import PaymentRepository
from .schemas import (
    PaymentCreate, PaymentIntentRequest, PaymentIntentResponse,
    PaymentListResponse, PaymentRecordedResponse, PaymentResponse,
)
from .service import PaymentService

router = APIRouter()


def get_payment_service(
    db: Session = Depends(get_db),
    processor: PaymentProcessor = Depends(get_payment_processor),
) -> PaymentService:
    return PaymentService(PaymentRepository(db), ParcelRepository(db), processor)


@router.post("/create-intent", response_model=PaymentIntentResponse)
def create_payment_intent(
    data: PaymentIntentRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    """Create a processor payment intent; returns the client secret"""
    return PaymentIntentResponse(client_secret=service.create_intent(current_user, data.amount_in_cents))


@router.post("", response_model=PaymentRecordedResponse, status_code=status.HTTP_201_CREATED)
def record_payment(
    data: PaymentCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    """
    Record a captured payment.

    Marks the parcel as paid and stores an immutable payment record.
    """
    payment = service.record_payment(current_user, data)
    return PaymentRecordedResponse(
        message="Payment history saved successfully",
        payment=PaymentResponse.model_validate(payment),
    )


@router.get("", response_model=PaymentListResponse)
def list_payments(
    email: Optional[str] = Query(None, description="Payer email (admin only)"),
    params: PageParams = Depends(page_params),
    current_user: CurrentUser = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    """Payments, newest first. Non-admins only see their own."""
    return service.list_payments(current_user, params, email=email)
