# courier_hub/api/v1/router.py
from fastapi import APIRouter

from courier_hub.modules.parcels import router as parcels_router
from courier_hub.modules.payments import router as payments_router
from courier_hub.modules.riders import router as riders_router
from courier_hub.modules.users import router as users_router
from courier_hub.modules.warehouses.router import router as warehouses_router

api_router = APIRouter()

api_router.include_router(users_router, prefix="/users", tags=["Users"])

api_router.include_router(parcels_router, prefix="/parcels", tags=["Parcels"])

api_router.include_router(riders_router, prefix="/riders", tags=["Riders"])

api_router.include_router(payments_router, prefix="/payments", tags=["Payments"])

api_router.include_router(warehouses_router, prefix="/warehouses", tags=["Warehouses"])
