# courier_hub/core/auth/policy.py
"""
Access policy.

Pure decisions over (role, action, facts). Nothing here touches storage:
callers fetch the facts first and ask ``allow``; list endpoints ask
``parcel_scope`` and turn the answer into a query filter so records a caller
may not see are never loaded.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from courier_hub.core.errors import Forbidden


class Resource(str, Enum):
    PARCEL = "parcel"
    PAYMENT = "payment"
    PROFILE = "profile"
    APPLICATION = "application"
    EARNINGS = "earnings"


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ADVANCE = "advance"
    ASSIGN = "assign"
    CASHOUT = "cashout"


@dataclass(frozen=True)
class CurrentUser:
    """Verified identity plus the role stored for it"""
    email: str
    uid: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


@dataclass(frozen=True)
class AccessContext:
    resource: Resource
    caller_email: str
    owner_email: Optional[str] = None
    assigned_to_collect: Optional[str] = None
    assigned_to_deliver: Optional[str] = None
    delivery_status: Optional[str] = None
    payment_status: Optional[str] = None
    leg: Optional[str] = None  # collect | deliver


@dataclass(frozen=True)
class ParcelScope:
    """Query-level visibility: None means unrestricted"""
    owner_email: Optional[str] = None
    rider_email: Optional[str] = None

    @property
    def unrestricted(self) -> bool:
        return self.owner_email is None and self.rider_email is None


def is_customer_editable(delivery_status: Optional[str], payment_status: Optional[str]) -> bool:
    return delivery_status == "pending" and payment_status == "unpaid"


def _is_assigned(ctx: AccessContext) -> bool:
    return ctx.caller_email in (ctx.assigned_to_collect, ctx.assigned_to_deliver)


def _rider_allows(action: Action, ctx: AccessContext) -> bool:
    if ctx.resource == Resource.PARCEL:
        if action in (Action.READ, Action.ADVANCE):
            return _is_assigned(ctx)
        if action == Action.CASHOUT:
            if ctx.leg == "collect":
                return ctx.caller_email == ctx.assigned_to_collect
            if ctx.leg == "deliver":
                return ctx.caller_email == ctx.assigned_to_deliver
        return False
    is_owner = ctx.owner_email == ctx.caller_email
    if ctx.resource in (Resource.EARNINGS, Resource.PAYMENT):
        return action == Action.READ and is_owner
    if ctx.resource == Resource.PROFILE:
        return action in (Action.READ, Action.UPDATE) and is_owner
    return False


def _user_allows(action: Action, ctx: AccessContext) -> bool:
    is_owner = ctx.owner_email == ctx.caller_email

    if ctx.resource == Resource.PARCEL:
        if action == Action.CREATE:
            return True
        if action == Action.READ:
            return is_owner
        if action in (Action.UPDATE, Action.DELETE):
            return is_owner and is_customer_editable(ctx.delivery_status, ctx.payment_status)
        return False
    if ctx.resource == Resource.PAYMENT:
        return action in (Action.CREATE, Action.READ) and is_owner
    if ctx.resource == Resource.APPLICATION:
        return action in (Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE) and is_owner
    if ctx.resource == Resource.PROFILE:
        return action in (Action.READ, Action.UPDATE) and is_owner
    return False


def allow(role: str, action: Action, ctx: AccessContext) -> bool:
    if role == "admin":
        return True
    if role == "rider":
        return _rider_allows(action, ctx)
    if role == "user":
        return _user_allows(action, ctx)
    return False


def ensure_allowed(user: CurrentUser, action: Action, ctx: AccessContext, message: str = None) -> None:
    if not allow(user.role, action, ctx):
        raise Forbidden(message or f"Not allowed to {action.value} this {ctx.resource.value}")


def parcel_scope(user: CurrentUser) -> ParcelScope:
    if user.role == "admin":
        return ParcelScope()
    if user.role == "rider":
        return ParcelScope(rider_email=user.email)
    return ParcelScope(owner_email=user.email)
