# courier_hub/modules/payments/__init__.py
from .router import router
from .service import PaymentService

__all__ = ["router", "PaymentService"]
