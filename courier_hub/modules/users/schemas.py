# courier_hub/modules/users/schemas.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from courier_hub.shared.schemas.common import OrmModel, Pagination, Role


class LoginUpsert(BaseModel):
    """Optional profile data sent on login; the email always comes from the token"""
    name: Optional[str] = Field(None, max_length=255)
    photo_url: Optional[str] = Field(None, max_length=500)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    photo_url: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=500)


class RoleUpdate(BaseModel):
    role: Role


class UserResponse(OrmModel):
    id: str
    email: str
    role: Role
    name: Optional[str] = None
    photo_url: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    district: Optional[str] = None
    rider_status: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: datetime
    last_logged_in: Optional[datetime] = None


class LoginResponse(BaseModel):
    message: str
    created: bool
    user: UserResponse


class RoleResponse(BaseModel):
    role: Role


class UserListResponse(BaseModel):
    data: List[UserResponse]
    pagination: Pagination
