# courier_hub/shared/schemas/common.py
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    USER = "user"
    RIDER = "rider"
    ADMIN = "admin"


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    COLLECTING = "collecting"
    COLLECTED = "collected"
    SEND_WAREHOUSE = "sendWarehouse"
    DELIVERING = "delivering"
    DELIVERED = "delivered"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class BaseResponse(BaseModel):
    success: bool = True
    message: str = ""
    timestamp: datetime = Field(default_factory=datetime.now)


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    page: int
    limit: int
    total_pages: int = Field(..., alias="totalPages")


class StatusCount(BaseModel):
    status: str
    count: int


class OrmModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseResponse):
    details: Optional[Any] = None
