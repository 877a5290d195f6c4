# courier_hub/modules/payments/schemas.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from courier_hub.shared.schemas.common import BaseResponse, OrmModel, Pagination


class PaymentIntentRequest(BaseModel):
    amount_in_cents: int = Field(..., gt=0, alias="amountInCents")

    model_config = ConfigDict(populate_by_name=True)


class PaymentIntentResponse(BaseModel):
    client_secret: str = Field(..., serialization_alias="clientSecret")


class PaymentCreate(BaseModel):
    """Confirmation of a captured payment, posted by the client after the processor succeeds"""
    model_config = ConfigDict(populate_by_name=True)

    parcel_id: str = Field(..., alias="parcelId")
    transaction_id: str = Field(..., min_length=1, alias="transactionId")
    amount: float = Field(..., gt=0)
    currency: str = Field("usd", min_length=3, max_length=10)
    payment_method: Optional[str] = Field(None, alias="paymentMethod")


class PaymentResponse(OrmModel):
    id: str
    parcel_id: str
    user_email: str
    transaction_id: str
    amount: float
    currency: str
    payment_method: Optional[str] = None
    created_at: datetime


class PaymentRecordedResponse(BaseResponse):
    payment: PaymentResponse


class PaymentListResponse(BaseModel):
    data: List[PaymentResponse]
    pagination: Pagination
