# courier_hub/modules/parcels/repository.py
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from courier_hub.core.auth.policy import ParcelScope
from courier_hub.modules.parcels import lifecycle
from courier_hub.shared.database.models import CASHED_OUT, Parcel
from courier_hub.shared.pagination import PageParams, paginate

logger = logging.getLogger(__name__)


class ParcelRepository:
    """Parcel storage. Every mutation is a single conditional UPDATE/DELETE
    and reports the number of rows it touched."""

    def __init__(self, db: Session):
        self.db = db

    # ---------- reads ----------

    def _scoped(self, scope: ParcelScope):
        query = self.db.query(Parcel)
        if scope.owner_email is not None:
            query = query.filter(Parcel.created_by == scope.owner_email)
        if scope.rider_email is not None:
            query = query.filter(
                or_(
                    Parcel.assigned_to_collect == scope.rider_email,
                    Parcel.assigned_to_deliver == scope.rider_email,
                )
            )
        return query

    def get(self, parcel_id: str) -> Optional[Parcel]:
        return self.db.query(Parcel).filter(Parcel.id == parcel_id).first()

    def get_visible(self, parcel_id: str, scope: ParcelScope) -> Optional[Parcel]:
        return self._scoped(scope).filter(Parcel.id == parcel_id).first()

    def list_parcels(
        self,
        scope: ParcelScope,
        params: PageParams,
        created_by: Optional[str] = None,
        delivery_status: Optional[str] = None,
        payment_status: Optional[str] = None,
    ) -> Tuple[List[Parcel], Dict[str, int]]:
        query = self._scoped(scope)
        if created_by:
            query = query.filter(Parcel.created_by == created_by)
        if delivery_status:
            query = query.filter(Parcel.delivery_status == delivery_status)
        if payment_status:
            query = query.filter(Parcel.payment_status == payment_status)
        query = query.order_by(Parcel.created_at.desc(), Parcel.id.desc())
        return paginate(query, params)

    def status_counts(self) -> List[Dict[str, Any]]:
        rows = (
            self.db.query(Parcel.delivery_status, func.count(Parcel.id))
            .group_by(Parcel.delivery_status)
            .order_by(Parcel.delivery_status.asc())
            .all()
        )
        return [{"status": status, "count": count} for status, count in rows]

    def for_rider(self, rider_email: str) -> List[Parcel]:
        """Every parcel where the rider holds either leg"""
        return self._scoped(ParcelScope(rider_email=rider_email)).all()

    def active_for_rider(self, rider_email: str) -> List[Parcel]:
        return (
            self.db.query(Parcel)
            .filter(
                or_(
                    (Parcel.assigned_to_collect == rider_email)
                    & Parcel.delivery_status.in_(lifecycle.COLLECT_ACTIVE),
                    (Parcel.assigned_to_deliver == rider_email)
                    & Parcel.delivery_status.in_(lifecycle.DELIVER_ACTIVE),
                )
            )
            .order_by(Parcel.assigned_at.desc())
            .all()
        )

    def completed_for_rider(self, rider_email: str) -> List[Parcel]:
        return (
            self.db.query(Parcel)
            .filter(
                or_(
                    (Parcel.assigned_to_collect == rider_email)
                    & Parcel.delivery_status.in_(lifecycle.COLLECT_DONE)
                    & Parcel.collected_at.isnot(None),
                    (Parcel.assigned_to_deliver == rider_email)
                    & Parcel.delivery_status.in_(lifecycle.DELIVER_DONE),
                )
            )
            .order_by(Parcel.updated_at.desc())
            .all()
        )

    # ---------- writes ----------

    def _apply(self, query, values: Dict[str, Any]) -> int:
        try:
            affected = query.update(values, synchronize_session=False)
            self.db.commit()
            return affected
        except Exception:
            self.db.rollback()
            logger.exception("Conditional parcel update failed")
            raise

    def create(self, parcel: Parcel) -> Parcel:
        try:
            self.db.add(parcel)
            self.db.commit()
            self.db.refresh(parcel)
            return parcel
        except Exception:
            self.db.rollback()
            logger.exception("Error creating parcel")
            raise

    def _customer_editable(self, parcel_id: str, owner_email: str):
        return self.db.query(Parcel).filter(
            Parcel.id == parcel_id,
            Parcel.created_by == owner_email,
            Parcel.delivery_status == lifecycle.PENDING,
            Parcel.payment_status == "unpaid",
        )

    def update_if_editable(self, parcel_id: str, owner_email: str, values: Dict[str, Any]) -> int:
        values = dict(values, updated_at=datetime.now())
        return self._apply(self._customer_editable(parcel_id, owner_email), values)

    def delete_if_editable(self, parcel_id: str, owner_email: str) -> int:
        try:
            affected = self._customer_editable(parcel_id, owner_email).delete(synchronize_session=False)
            self.db.commit()
            return affected
        except Exception:
            self.db.rollback()
            logger.exception("Error deleting parcel")
            raise

    def delete(self, parcel_id: str) -> int:
        try:
            affected = self.db.query(Parcel).filter(Parcel.id == parcel_id).delete(synchronize_session=False)
            self.db.commit()
            return affected
        except Exception:
            self.db.rollback()
            logger.exception("Error deleting parcel")
            raise

    def apply_transition(self, parcel_id: str, rider_email: str, transition: lifecycle.Transition) -> int:
        """Advance only if the parcel is still in ``transition.current`` and the
        caller still holds the leg that drives it"""
        leg_column = Parcel.assigned_to_collect if transition.leg == lifecycle.COLLECT_LEG else Parcel.assigned_to_deliver
        query = self.db.query(Parcel).filter(
            Parcel.id == parcel_id,
            Parcel.delivery_status == transition.current,
            leg_column == rider_email,
        )
        now = datetime.now()
        values: Dict[str, Any] = {"delivery_status": transition.next, "updated_at": now}
        if transition.assign_deliverer:
            values["assigned_to_deliver"] = rider_email
            values["assigned_at"] = now
        if transition.next == lifecycle.COLLECTED:
            values["collected_at"] = now
        if transition.next == lifecycle.DELIVERED:
            values["delivered_at"] = now
        return self._apply(query, values)

    def assign_leg(
        self, parcel_id: str, current_status: str, assignment: lifecycle.Assignment, rider_email: str
    ) -> Tuple[int, datetime]:
        now = datetime.now()
        query = self.db.query(Parcel).filter(
            Parcel.id == parcel_id,
            Parcel.delivery_status == current_status,
        )
        values = {
            assignment.field: rider_email,
            "delivery_status": assignment.next,
            "assigned_at": now,
            "updated_at": now,
        }
        return self._apply(query, values), now

    def cashout(self, parcel_id: str, rider_email: str, leg: str) -> int:
        """Flip the leg's cashout flag only if the caller performed that leg,
        the leg is complete, and it has not been cashed out yet"""
        if leg == lifecycle.COLLECT_LEG:
            rider_column, flag_column, done = Parcel.assigned_to_collect, Parcel.collect_cashout_status, lifecycle.COLLECT_DONE
        else:
            rider_column, flag_column, done = Parcel.assigned_to_deliver, Parcel.deliver_cashout_status, lifecycle.DELIVER_DONE
        query = self.db.query(Parcel).filter(
            Parcel.id == parcel_id,
            rider_column == rider_email,
            Parcel.delivery_status.in_(done),
            flag_column.is_(None),
        )
        if leg == lifecycle.COLLECT_LEG:
            query = query.filter(Parcel.collected_at.isnot(None))
        return self._apply(query, {flag_column.key: CASHED_OUT})
