# courier_hub/modules/users/repository.py
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from courier_hub.shared.database.models import RiderApplication, User
from courier_hub.shared.pagination import PageParams, paginate

logger = logging.getLogger(__name__)


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get_rider(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email, User.role == "rider").first()

    def upsert_on_login(self, email: str, uid: Optional[str] = None, name: Optional[str] = None, photo_url: Optional[str] = None) -> Tuple[User, bool]:
        """Refresh lastLoggedIn if the user exists, otherwise insert with role=user.
        Returns (user, created)."""
        now = datetime.now()
        user = self.get_by_email(email)
        if user is not None:
            user.last_logged_in = now
            if uid and not user.uid:
                user.uid = uid
            self.db.commit()
            return user, False

        user = User(
            email=email,
            uid=uid,
            role="user",
            name=name,
            photo_url=photo_url,
            created_at=now,
            last_logged_in=now,
        )
        try:
            self.db.add(user)
            self.db.commit()
        except IntegrityError:
            # lost a race with a concurrent first login; the row exists now
            self.db.rollback()
            existing = self.get_by_email(email)
            if existing is None:
                logger.exception(f"Error creating user {email}")
                raise
            existing.last_logged_in = now
            self.db.commit()
            return existing, False
        self.db.refresh(user)
        return user, True

    def update_profile(self, email: str, values: Dict[str, Any]) -> int:
        affected = self.db.query(User).filter(User.email == email).update(values, synchronize_session=False)
        self.db.commit()
        return affected

    def list_users(
        self, params: PageParams, role: Optional[str] = None, search: Optional[str] = None
    ) -> Tuple[List[User], Dict[str, int]]:
        query = self.db.query(User)
        if role:
            query = query.filter(User.role == role)
        if search:
            query = query.filter(User.email.ilike(f"%{search}%"))
        return paginate(query.order_by(User.created_at.desc(), User.email.asc()), params)

    def list_riders(
        self, params: PageParams, district: Optional[str] = None, rider_status: Optional[str] = None
    ) -> Tuple[List[User], Dict[str, int]]:
        query = self.db.query(User).filter(User.details.isnot(None))
        if rider_status:
            query = query.filter(User.rider_status == rider_status)
        else:
            query = query.filter(User.role == "rider")
        if district:
            query = query.filter(User.district == district)
        return paginate(query.order_by(User.email.asc()), params)

    def set_role(self, email: str, role: str) -> int:
        affected = self.db.query(User).filter(User.email == email).update(
            {"role": role}, synchronize_session=False
        )
        self.db.commit()
        return affected

    def set_rider_status(self, email: str, rider_status: str, role: str) -> int:
        """Toggle an existing rider profile; users without one are never promoted"""
        affected = (
            self.db.query(User)
            .filter(User.email == email, User.role != "admin", User.details.isnot(None))
            .update({"rider_status": rider_status, "role": role}, synchronize_session=False)
        )
        self.db.commit()
        return affected

    def delete_with_application(self, email: str) -> int:
        """Delete the user and any rider application they own, in one transaction"""
        try:
            self.db.query(RiderApplication).filter(RiderApplication.email == email).delete(
                synchronize_session=False
            )
            affected = self.db.query(User).filter(User.email == email).delete(synchronize_session=False)
            self.db.commit()
            return affected
        except Exception:
            self.db.rollback()
            logger.exception(f"Error deleting user {email}")
            raise
