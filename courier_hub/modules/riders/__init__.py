# courier_hub/modules/riders/__init__.py
"""
Riders module

- Rider applications (submit, review, accept/reject)
- Riders directory and activation (admin)
- Active and completed legs, earnings and cashout (rider)
"""

from .router import router
from .service import RiderService
from .repository import RiderApplicationRepository

__all__ = [
    "router",
    "RiderService",
    "RiderApplicationRepository",
]
