# courier_hub/core/auth/dependencies.py
from typing import List, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from courier_hub.config.database import get_db
from courier_hub.core.auth.identity import IdentityProvider, VerifiedIdentity, get_identity_provider
from courier_hub.core.auth.policy import CurrentUser
from courier_hub.core.errors import Forbidden, Unauthenticated
from courier_hub.shared.database.models import User

security = HTTPBearer(auto_error=False)


def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> VerifiedIdentity:
    """Verify the bearer credential with the identity provider"""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise Unauthenticated("Missing or malformed token")
    return provider.verify(credentials.credentials)


def get_current_user(
    identity: VerifiedIdentity = Depends(get_identity),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """Verified identity plus the role stored for its email.

    FastAPI caches this per request, so the role is looked up once per
    request and never across requests.
    """
    role = db.query(User.role).filter(User.email == identity.email).scalar()
    if role is None:
        raise Unauthenticated("User not found")
    return CurrentUser(email=identity.email, uid=identity.uid, role=role)


def require_roles(allowed_roles: List[str]):
    """Dependency factory that requires one of the given roles"""
    def role_checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed_roles:
            raise Forbidden("Forbidden access")
        return current_user
    return role_checker


def get_admin_user(current_user: CurrentUser = Depends(require_roles(["admin"]))) -> CurrentUser:
    return current_user


def get_rider_user(current_user: CurrentUser = Depends(require_roles(["rider"]))) -> CurrentUser:
    return current_user


def get_customer_user(current_user: CurrentUser = Depends(require_roles(["user"]))) -> CurrentUser:
    return current_user
