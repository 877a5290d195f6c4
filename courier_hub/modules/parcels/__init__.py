# courier_hub/modules/parcels/__init__.py
"""
Parcels module - customer shipments and the delivery lifecycle

- lifecycle.py: delivery status state machine and leg assignment rules
- router.py: parcel endpoints (customer CRUD, admin assignment, rider status advance)
- service.py: business rules and access checks
- repository.py: conditional reads and writes
- schemas.py: request/response models
"""

from .router import router
from .service import ParcelService
from .repository import ParcelRepository

__all__ = [
    "router",
    "ParcelService",
    "ParcelRepository",
]
