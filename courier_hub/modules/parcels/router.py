# courier_hub/modules/parcels/router.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from courier_hub.config.database import get_db
from courier_hub.core.auth.dependencies import get_admin_user, get_current_user, get_rider_user
from courier_hub.core.auth.policy import CurrentUser
from courier_hub.modules.users.repository import UserRepository
from courier_hub.shared.pagination import PageParams, page_params
from courier_hub.shared.schemas.common import (
    DeliveryStatus, MessageResponse, PaymentStatus, StatusCount,
)
from .repository import ParcelRepository
from .schemas import (
    AssignmentResponse, ParcelCreate, ParcelFilters, ParcelListResponse,
    ParcelResponse, ParcelUpdate, StatusTransitionResponse,
)
from .service import ParcelService

router = APIRouter()


def get_parcel_service(db: Session = Depends(get_db)) -> ParcelService:
    return ParcelService(ParcelRepository(db), UserRepository(db))


@router.get("/status-count", response_model=List[StatusCount])
def get_status_count(service: ParcelService = Depends(get_parcel_service)):
    """Parcel count per delivery status, sorted by status name"""
    return service.status_counts()


@router.get("", response_model=ParcelListResponse)
def list_parcels(
    email: Optional[str] = Query(None, description="Creator email (admin only)"),
    delivery_status: Optional[DeliveryStatus] = Query(None),
    payment_status: Optional[PaymentStatus] = Query(None),
    params: PageParams = Depends(page_params),
    current_user: CurrentUser = Depends(get_current_user),
    service: ParcelService = Depends(get_parcel_service),
):
    """
    Role-scoped parcel listing.

    - **admin**: every parcel, optionally filtered by creator email
    - **rider**: parcels where the caller holds the collect or deliver leg
    - **user**: parcels the caller created
    """
    filters = ParcelFilters(email=email, delivery_status=delivery_status, payment_status=payment_status)
    return service.list_parcels(current_user, filters, params)


@router.get("/{parcel_id}", response_model=ParcelResponse)
def get_parcel(
    parcel_id: str = Path(..., description="Parcel id"),
    current_user: CurrentUser = Depends(get_current_user),
    service: ParcelService = Depends(get_parcel_service),
):
    return service.get_parcel(current_user, parcel_id)


@router.post("", response_model=ParcelResponse, status_code=status.HTTP_201_CREATED)
def create_parcel(
    parcel: ParcelCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: ParcelService = Depends(get_parcel_service),
):
    return service.create_parcel(current_user, parcel)


@router.put("/{parcel_id}", response_model=ParcelResponse)
def update_parcel(
    data: ParcelUpdate,
    parcel_id: str = Path(..., description="Parcel id"),
    current_user: CurrentUser = Depends(get_current_user),
    service: ParcelService = Depends(get_parcel_service),
):
    """Owner update, allowed only while the parcel is pending and unpaid"""
    return service.update_parcel(current_user, parcel_id, data)


@router.delete("/{parcel_id}", response_model=MessageResponse)
def delete_parcel(
    parcel_id: str = Path(..., description="Parcel id"),
    current_user: CurrentUser = Depends(get_current_user),
    service: ParcelService = Depends(get_parcel_service),
):
    service.delete_parcel(current_user, parcel_id)
    return MessageResponse(message="Parcel deleted successfully")


@router.patch("/{parcel_id}/assign/{rider_email}", response_model=AssignmentResponse)
def assign_rider(
    parcel_id: str = Path(..., description="Parcel id"),
    rider_email: str = Path(..., description="Email of a user with role rider"),
    current_user: CurrentUser = Depends(get_admin_user),
    service: ParcelService = Depends(get_parcel_service),
):
    """
    Assign a rider to the next open leg.

    - pending parcel: sets **assigned_to_collect**, status `collecting`
    - any later non-terminal parcel: sets **assigned_to_deliver**, status `delivering`
    """
    return service.assign_rider(current_user, parcel_id, rider_email)


@router.patch("/{parcel_id}/status", response_model=StatusTransitionResponse)
def advance_status(
    parcel_id: str = Path(..., description="Parcel id"),
    current_user: CurrentUser = Depends(get_rider_user),
    service: ParcelService = Depends(get_parcel_service),
):
    """
    Advance the parcel to its next delivery status.

    The next status is derived from the current one; only the rider
    holding the leg that drives the transition may call this.
    """
    return service.advance_status(current_user, parcel_id)
