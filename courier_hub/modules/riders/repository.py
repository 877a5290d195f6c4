# courier_hub/modules/riders/repository.py
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from courier_hub.core.errors import Conflict
from courier_hub.shared.database.models import RiderApplication, User
from courier_hub.shared.pagination import PageParams, paginate

logger = logging.getLogger(__name__)


class RiderApplicationRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, email: str) -> Optional[RiderApplication]:
        return self.db.query(RiderApplication).filter(RiderApplication.email == email).first()

    def list_applications(
        self, params: PageParams, district: Optional[str] = None
    ) -> Tuple[List[RiderApplication], Dict[str, int]]:
        query = self.db.query(RiderApplication)
        if district:
            query = query.filter(RiderApplication.district == district)
        return paginate(query.order_by(RiderApplication.applied_at.desc()), params)

    def create(self, application: RiderApplication) -> RiderApplication:
        try:
            self.db.add(application)
            self.db.commit()
        except IntegrityError as e:
            # unique email: a concurrent submission got there first
            self.db.rollback()
            raise Conflict("You have already applied.") from e
        self.db.refresh(application)
        return application

    def update(self, email: str, values: Dict[str, Any]) -> int:
        values = dict(values, updated_at=datetime.now())
        affected = (
            self.db.query(RiderApplication)
            .filter(RiderApplication.email == email)
            .update(values, synchronize_session=False)
        )
        self.db.commit()
        return affected

    def delete(self, email: str) -> int:
        affected = (
            self.db.query(RiderApplication)
            .filter(RiderApplication.email == email)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return affected

    def accept(self, application: RiderApplication) -> int:
        """Promote the applicant to rider and drop the application, atomically.

        Returns the number of applications removed; zero means another admin
        already disposed of it and nothing was changed.
        """
        details = application.profile()
        try:
            removed = (
                self.db.query(RiderApplication)
                .filter(RiderApplication.id == application.id)
                .delete(synchronize_session=False)
            )
            if removed == 0:
                self.db.rollback()
                return 0

            promoted = (
                self.db.query(User)
                .filter(User.email == application.email)
                .update(
                    {
                        "role": "rider",
                        "rider_status": "active",
                        "district": application.district,
                        "details": details,
                        "name": func.coalesce(User.name, application.name),
                    },
                    synchronize_session=False,
                )
            )
            if promoted == 0:
                self.db.rollback()
                return 0

            self.db.commit()
            return removed
        except Exception:
            self.db.rollback()
            logger.exception(f"Error accepting rider application for {application.email}")
            raise
