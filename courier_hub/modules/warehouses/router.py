# courier_hub/modules/warehouses/router.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from courier_hub.config.database import get_db
from courier_hub.core.auth.dependencies import get_current_user
from courier_hub.core.auth.policy import CurrentUser
from courier_hub.shared.pagination import PageParams, page_params
from .repository import WarehouseRepository
from .schemas import WarehouseListResponse

router = APIRouter()


@router.get("", response_model=WarehouseListResponse)
def list_warehouses(
    region: Optional[str] = Query(None),
    district: Optional[str] = Query(None),
    params: PageParams = Depends(page_params),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Active hubs, used to route cross-district parcels"""
    items, meta = WarehouseRepository(db).list_warehouses(params, region=region, district=district)
    return {"data": items, "pagination": meta}
