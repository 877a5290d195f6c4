# courier_hub/modules/warehouses/repository.py
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from courier_hub.shared.database.models import Warehouse
from courier_hub.shared.pagination import PageParams, paginate


class WarehouseRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_warehouses(
        self, params: PageParams, region: Optional[str] = None, district: Optional[str] = None
    ) -> Tuple[List[Warehouse], Dict[str, int]]:
        query = self.db.query(Warehouse).filter(Warehouse.status == "active")
        if region:
            query = query.filter(Warehouse.region == region)
        if district:
            query = query.filter(Warehouse.district == district)
        return paginate(query.order_by(Warehouse.region.asc(), Warehouse.district.asc()), params)
