# courier_hub/modules/riders/schemas.py
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from courier_hub.modules.parcels.schemas import ParcelResponse
from courier_hub.shared.schemas.common import BaseResponse, OrmModel, Pagination


class ApplicationDecision(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"


class RiderStatus(str, Enum):
    ACTIVE = "active"
    DEACTIVE = "deactive"


class Leg(str, Enum):
    COLLECT = "collect"
    DELIVER = "deliver"


class RiderApplicationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    age: Optional[int] = Field(None, ge=18, le=80)
    phone: str = Field(..., min_length=3, max_length=50)
    national_id: Optional[str] = Field(None, max_length=50)
    region: str = Field(..., min_length=1)
    district: str = Field(..., min_length=1)
    bike_brand: Optional[str] = None
    bike_registration: Optional[str] = None
    note: Optional[str] = None


class RiderApplicationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    age: Optional[int] = Field(None, ge=18, le=80)
    phone: Optional[str] = Field(None, min_length=3, max_length=50)
    national_id: Optional[str] = Field(None, max_length=50)
    region: Optional[str] = None
    district: Optional[str] = None
    bike_brand: Optional[str] = None
    bike_registration: Optional[str] = None
    note: Optional[str] = None


class RiderApplicationResponse(OrmModel):
    id: str
    email: str
    name: str
    age: Optional[int] = None
    phone: str
    national_id: Optional[str] = None
    region: str
    district: str
    bike_brand: Optional[str] = None
    bike_registration: Optional[str] = None
    note: Optional[str] = None
    applied_at: datetime
    updated_at: Optional[datetime] = None


class RiderApplicationListResponse(BaseModel):
    data: List[RiderApplicationResponse]
    pagination: Pagination


class DecisionResponse(BaseResponse):
    email: str
    decision: ApplicationDecision
    role: str


class RiderProfileResponse(OrmModel):
    email: str
    role: str
    name: Optional[str] = None
    district: Optional[str] = None
    rider_status: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class RiderListResponse(BaseModel):
    data: List[RiderProfileResponse]
    pagination: Pagination


class RiderStatusResponse(BaseResponse):
    email: str
    rider_status: RiderStatus
    role: str


class RiderEarningsResponse(BaseModel):
    rider_email: str
    commission_rate: float
    collected_parcel_earning: float
    delivered_parcel_earning: float
    total_earning: float
    cashed_out_earning: float
    available_earning: float
    collected_parcel_count: int
    delivered_parcel_count: int


class RiderTask(BaseModel):
    leg: Leg
    earning: float
    cashout_status: Optional[str] = None
    parcel: ParcelResponse


class RiderTasksResponse(BaseModel):
    data: List[RiderTask]
    pagination: Pagination


class CashoutResponse(BaseResponse):
    parcel_id: str
    leg: Leg
    amount: float
