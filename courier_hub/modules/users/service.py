# courier_hub/modules/users/service.py
import logging
from typing import Any, Dict, Optional, Tuple

from courier_hub.core.auth.identity import IdentityProvider, VerifiedIdentity
from courier_hub.core.auth.policy import AccessContext, Action, CurrentUser, Resource, ensure_allowed
from courier_hub.core.errors import InvalidInput, NotFound
from courier_hub.shared.database.models import User
from courier_hub.shared.pagination import PageParams
from courier_hub.shared.schemas.common import Role
from .repository import UserRepository
from .schemas import LoginUpsert, ProfileUpdate

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, users: UserRepository, identity_provider: Optional[IdentityProvider] = None):
        self.users = users
        self.identity_provider = identity_provider

    def login(self, identity: VerifiedIdentity, data: LoginUpsert) -> Tuple[User, bool]:
        user, created = self.users.upsert_on_login(identity.email, uid=identity.uid, name=data.name, photo_url=data.photo_url)
        if created:
            logger.info(f"New user registered: {identity.email}")
        return user, created

    def _profile_context(self, user: CurrentUser) -> AccessContext:
        return AccessContext(resource=Resource.PROFILE, caller_email=user.email, owner_email=user.email)

    def get_profile(self, user: CurrentUser) -> User:
        ensure_allowed(user, Action.READ, self._profile_context(user))
        profile = self.users.get_by_email(user.email)
        if profile is None:
            raise NotFound("User not found")
        return profile

    def update_profile(self, user: CurrentUser, data: ProfileUpdate) -> User:
        ensure_allowed(user, Action.UPDATE, self._profile_context(user))
        values = data.model_dump(exclude_unset=True, exclude_none=True)
        if not values:
            raise InvalidInput("No fields to update")
        if self.users.update_profile(user.email, values) == 0:
            raise NotFound("User not found")
        return self.users.get_by_email(user.email)

    # ---------- admin ----------

    def list_users(self, params: PageParams, role: Optional[Role] = None, search: Optional[str] = None) -> Dict[str, Any]:
        items, meta = self.users.list_users(params, role=role.value if role else None, search=search)
        return {"data": items, "pagination": meta}

    def set_role(self, admin: CurrentUser, email: str, role: Role) -> User:
        email = email.lower()
        if email == admin.email and role != Role.ADMIN:
            raise InvalidInput("Admins cannot demote themselves")
        if self.users.set_role(email, role.value) == 0:
            raise NotFound("User not found")
        logger.info(f"Role of {email} set to {role.value} by {admin.email}")
        return self.users.get_by_email(email)

    def delete_user(self, admin: CurrentUser, email: str) -> None:
        """Delete from the store (cascading to the rider application), then from
        the identity provider. The store is authoritative: a provider failure
        is logged and left for reconciliation."""
        email = email.lower()
        if email == admin.email:
            raise InvalidInput("Admins cannot delete themselves")
        target = self.users.get_by_email(email)
        if target is None:
            raise NotFound("User not found")
        uid = target.uid
        if self.users.delete_with_application(email) == 0:
            raise NotFound("User not found")
        logger.info(f"User {email} deleted by {admin.email}")

        if self.identity_provider is None:
            return
        try:
            self.identity_provider.delete_account(uid, email)
        except Exception as e:
            logger.error(f"Identity account deletion failed for {email}; store deletion stands: {e}")
