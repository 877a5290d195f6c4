# courier_hub/modules/warehouses/schemas.py
from typing import List, Optional

from pydantic import BaseModel

from courier_hub.shared.schemas.common import OrmModel, Pagination


class WarehouseResponse(OrmModel):
    id: str
    region: str
    district: str
    city: Optional[str] = None
    covered_area: Optional[List[str]] = None
    status: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class WarehouseListResponse(BaseModel):
    data: List[WarehouseResponse]
    pagination: Pagination
