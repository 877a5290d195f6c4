# courier_hub/modules/users/router.py
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.orm import Session

from courier_hub.config.database import get_db
from courier_hub.core.auth.dependencies import get_admin_user, get_current_user, get_identity
from courier_hub.core.auth.identity import IdentityProvider, VerifiedIdentity, get_identity_provider
from courier_hub.core.auth.policy import CurrentUser
from courier_hub.shared.pagination import PageParams, page_params
from courier_hub.shared.schemas.common import MessageResponse, Role
from .repository import UserRepository
from .schemas import (
    LoginResponse, LoginUpsert, ProfileUpdate, RoleResponse, RoleUpdate,
    UserListResponse, UserResponse,
)
from .service import UserService

router = APIRouter()


def get_user_service(
    db: Session = Depends(get_db),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
) -> UserService:
    return UserService(UserRepository(db), identity_provider)


@router.post("", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
def login_upsert(
    response: Response,
    data: Optional[LoginUpsert] = None,
    identity: VerifiedIdentity = Depends(get_identity),
    service: UserService = Depends(get_user_service),
):
    """
    Called by the client after every sign-in.

    Creates the account with role `user` on first login (201); afterwards
    only refreshes `last_logged_in` (200).
    """
    user, created = service.login(identity, data or LoginUpsert())
    if not created:
        response.status_code = status.HTTP_200_OK
    return LoginResponse(
        message="User created" if created else "User already exists",
        created=created,
        user=UserResponse.model_validate(user),
    )


@router.get("/role", response_model=RoleResponse)
def get_role(current_user: CurrentUser = Depends(get_current_user)):
    return RoleResponse(role=current_user.role)


@router.get("/profile", response_model=UserResponse)
def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return service.get_profile(current_user)


@router.put("/profile", response_model=UserResponse)
def update_profile(
    data: ProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Only name, photo_url, phone and address can be changed here"""
    return service.update_profile(current_user, data)


# ==================== ADMIN ====================

@router.get("", response_model=UserListResponse)
def list_users(
    role: Optional[Role] = Query(None),
    search: Optional[str] = Query(None, description="Email substring"),
    params: PageParams = Depends(page_params),
    current_user: CurrentUser = Depends(get_admin_user),
    service: UserService = Depends(get_user_service),
):
    return service.list_users(params, role=role, search=search)


@router.patch("/{email}/role", response_model=UserResponse)
def set_role(
    data: RoleUpdate,
    email: str = Path(...),
    current_user: CurrentUser = Depends(get_admin_user),
    service: UserService = Depends(get_user_service),
):
    return service.set_role(current_user, email, data.role)


@router.delete("/{email}", response_model=MessageResponse)
def delete_user(
    email: str = Path(...),
    current_user: CurrentUser = Depends(get_admin_user),
    service: UserService = Depends(get_user_service),
):
    """Delete a user and their rider application; the identity account is removed best-effort"""
    service.delete_user(current_user, email)
    return MessageResponse(message="User deleted successfully")
