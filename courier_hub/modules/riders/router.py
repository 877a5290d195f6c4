# courier_hub/modules/riders/router.py
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from courier_hub.config.database import get_db
from courier_hub.config.settings import settings
from courier_hub.core.auth.dependencies import (
    get_admin_user, get_current_user, get_customer_user, get_rider_user,
)
from courier_hub.core.auth.policy import CurrentUser
from courier_hub.modules.parcels.repository import ParcelRepository
from courier_hub.modules.users.repository import UserRepository
from courier_hub.shared.pagination import PageParams, page_params
from courier_hub.shared.schemas.common import MessageResponse
from .repository import RiderApplicationRepository
from .schemas import (
    ApplicationDecision, CashoutResponse, DecisionResponse, Leg,
    RiderApplicationCreate, RiderApplicationListResponse, RiderApplicationResponse,
    RiderApplicationUpdate, RiderEarningsResponse, RiderListResponse, RiderStatus,
    RiderStatusResponse, RiderTasksResponse,
)
from .service import RiderService

router = APIRouter()


def get_rider_service(db: Session = Depends(get_db)) -> RiderService:
    return RiderService(
        RiderApplicationRepository(db),
        UserRepository(db),
        ParcelRepository(db),
        commission_rate=settings.rider_leg_commission,
    )


# ==================== APPLICATIONS ====================

@router.post("/applications", response_model=RiderApplicationResponse, status_code=status.HTTP_201_CREATED)
def create_application(
    data: RiderApplicationCreate,
    current_user: CurrentUser = Depends(get_customer_user),
    service: RiderService = Depends(get_rider_service),
):
    """Apply to become a rider; one outstanding application per email"""
    return service.apply(current_user, data)


@router.get("/applications", response_model=RiderApplicationListResponse)
def list_applications(
    district: Optional[str] = Query(None),
    params: PageParams = Depends(page_params),
    current_user: CurrentUser = Depends(get_admin_user),
    service: RiderService = Depends(get_rider_service),
):
    return service.list_applications(params, district=district)


@router.get("/applications/{email}", response_model=RiderApplicationResponse)
def get_application(
    email: str = Path(...),
    current_user: CurrentUser = Depends(get_current_user),
    service: RiderService = Depends(get_rider_service),
):
    """Admins can read any application; applicants only their own"""
    return service.get_application(current_user, email)


@router.put("/applications/{email}", response_model=RiderApplicationResponse)
def update_application(
    data: RiderApplicationUpdate,
    email: str = Path(...),
    current_user: CurrentUser = Depends(get_current_user),
    service: RiderService = Depends(get_rider_service),
):
    return service.update_application(current_user, email, data)


@router.delete("/applications/{email}", response_model=MessageResponse)
def delete_application(
    email: str = Path(...),
    current_user: CurrentUser = Depends(get_current_user),
    service: RiderService = Depends(get_rider_service),
):
    service.delete_application(current_user, email)
    return MessageResponse(message="Application deleted successfully")


@router.patch("/applications/{email}/{decision}", response_model=DecisionResponse)
def decide_application(
    email: str = Path(...),
    decision: ApplicationDecision = Path(..., description="accept | reject"),
    current_user: CurrentUser = Depends(get_admin_user),
    service: RiderService = Depends(get_rider_service),
):
    """
    Dispose of an application.

    - **accept**: user becomes a rider, application fields are merged into their profile
    - **reject**: application is deleted, role unchanged
    """
    return service.decide_application(current_user, email, decision)


# ==================== RIDER WORK ====================

@router.get("/my-earnings", response_model=RiderEarningsResponse)
def get_my_earnings(
    current_user: CurrentUser = Depends(get_rider_user),
    service: RiderService = Depends(get_rider_service),
):
    """35% of parcel cost per leg held; collect and deliver legs count separately"""
    return service.earnings(current_user)


@router.get("/parcels", response_model=RiderTasksResponse)
def get_active_parcels(
    params: PageParams = Depends(page_params),
    current_user: CurrentUser = Depends(get_rider_user),
    service: RiderService = Depends(get_rider_service),
):
    return service.active_tasks(current_user, params)


@router.get("/parcels/completed", response_model=RiderTasksResponse)
def get_completed_parcels(
    params: PageParams = Depends(page_params),
    current_user: CurrentUser = Depends(get_rider_user),
    service: RiderService = Depends(get_rider_service),
):
    return service.completed_tasks(current_user, params)


@router.patch("/parcels/{parcel_id}/cashout", response_model=CashoutResponse)
def cashout_parcel(
    parcel_id: str = Path(...),
    leg: Leg = Query(..., description="collect | deliver"),
    current_user: CurrentUser = Depends(get_rider_user),
    service: RiderService = Depends(get_rider_service),
):
    """Withdraw the earning of one completed leg; a second call is rejected"""
    return service.cashout(current_user, parcel_id, leg)


# ==================== RIDERS DIRECTORY ====================

@router.get("", response_model=RiderListResponse)
def list_riders(
    district: Optional[str] = Query(None),
    rider_status: Optional[RiderStatus] = Query(None, alias="status"),
    params: PageParams = Depends(page_params),
    current_user: CurrentUser = Depends(get_admin_user),
    service: RiderService = Depends(get_rider_service),
):
    return service.list_riders(params, district=district, rider_status=rider_status)


@router.patch("/{email}/status", response_model=RiderStatusResponse)
def set_rider_status(
    email: str = Path(...),
    rider_status: RiderStatus = Query(..., alias="status"),
    current_user: CurrentUser = Depends(get_admin_user),
    service: RiderService = Depends(get_rider_service),
):
    """Deactivating demotes the rider to role user; activating restores role rider"""
    return service.set_rider_status(email, rider_status)
