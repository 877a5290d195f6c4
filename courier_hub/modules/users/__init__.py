# courier_hub/modules/users/__init__.py
from .router import router
from .service import UserService
from .repository import UserRepository

__all__ = ["router", "UserService", "UserRepository"]
