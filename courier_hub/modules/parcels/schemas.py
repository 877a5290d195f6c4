# courier_hub/modules/parcels/schemas.py
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from courier_hub.shared.schemas.common import (
    BaseResponse, DeliveryStatus, OrmModel, Pagination, PaymentStatus,
)


class ParcelType(str, Enum):
    DOCUMENT = "document"
    NON_DOCUMENT = "non-document"


class ParcelCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    parcel_type: ParcelType = ParcelType.NON_DOCUMENT
    weight: Optional[float] = Field(None, gt=0)

    sender_name: str = Field(..., min_length=1)
    sender_contact: str = Field(..., min_length=3)
    sender_region: str = Field(..., min_length=1)
    sender_district: str = Field(..., min_length=1)
    sender_address: str = Field(..., min_length=1)
    pickup_instruction: Optional[str] = None

    receiver_name: str = Field(..., min_length=1)
    receiver_contact: str = Field(..., min_length=3)
    receiver_region: str = Field(..., min_length=1)
    receiver_district: str = Field(..., min_length=1)
    receiver_address: str = Field(..., min_length=1)
    delivery_instruction: Optional[str] = None

    cost: float = Field(..., gt=0, description="Delivery charge")


class ParcelUpdate(BaseModel):
    """Fields a customer may change while the parcel is pending and unpaid"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    parcel_type: Optional[ParcelType] = None
    weight: Optional[float] = Field(None, gt=0)

    sender_name: Optional[str] = Field(None, min_length=1)
    sender_contact: Optional[str] = Field(None, min_length=3)
    sender_region: Optional[str] = Field(None, min_length=1)
    sender_district: Optional[str] = Field(None, min_length=1)
    sender_address: Optional[str] = Field(None, min_length=1)
    pickup_instruction: Optional[str] = None

    receiver_name: Optional[str] = Field(None, min_length=1)
    receiver_contact: Optional[str] = Field(None, min_length=3)
    receiver_region: Optional[str] = Field(None, min_length=1)
    receiver_district: Optional[str] = Field(None, min_length=1)
    receiver_address: Optional[str] = Field(None, min_length=1)
    delivery_instruction: Optional[str] = None

    cost: Optional[float] = Field(None, gt=0)


class ParcelResponse(OrmModel):
    id: str
    tracking_id: str
    created_by: str
    title: str
    parcel_type: str
    weight: Optional[float] = None

    sender_name: str
    sender_contact: str
    sender_region: str
    sender_district: str
    sender_address: str
    pickup_instruction: Optional[str] = None

    receiver_name: str
    receiver_contact: str
    receiver_region: str
    receiver_district: str
    receiver_address: str
    delivery_instruction: Optional[str] = None

    cost: float
    delivery_status: DeliveryStatus
    payment_status: PaymentStatus
    assigned_to_collect: Optional[str] = None
    assigned_to_deliver: Optional[str] = None
    collect_cashout_status: Optional[str] = None
    deliver_cashout_status: Optional[str] = None

    created_at: datetime
    updated_at: Optional[datetime] = None
    assigned_at: Optional[datetime] = None
    collected_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None


class ParcelListResponse(BaseModel):
    data: List[ParcelResponse]
    pagination: Pagination


class ParcelFilters(BaseModel):
    email: Optional[str] = None
    delivery_status: Optional[DeliveryStatus] = None
    payment_status: Optional[PaymentStatus] = None


class StatusTransitionResponse(BaseResponse):
    parcel_id: str
    previous_status: str
    delivery_status: str
    assigned_to_deliver: Optional[str] = None


class AssignmentResponse(BaseResponse):
    parcel_id: str
    leg: str
    rider_email: str
    delivery_status: str
    assigned_at: datetime
