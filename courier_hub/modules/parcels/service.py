# courier_hub/modules/parcels/service.py
import logging
import secrets
from datetime import datetime
from typing import Any, Dict, List

from courier_hub.core.auth.policy import (
    AccessContext, Action, CurrentUser, Resource, ensure_allowed, is_customer_editable, parcel_scope,
)
from courier_hub.core.errors import Conflict, Forbidden, InvalidInput, NotFound
from courier_hub.modules.parcels import lifecycle
from courier_hub.modules.parcels.repository import ParcelRepository
from courier_hub.modules.parcels.schemas import ParcelCreate, ParcelFilters, ParcelUpdate
from courier_hub.modules.users.repository import UserRepository
from courier_hub.shared.database.models import Parcel
from courier_hub.shared.ids import validate_id
from courier_hub.shared.pagination import PageParams

logger = logging.getLogger(__name__)


def parcel_context(parcel: Parcel, user: CurrentUser, leg: str = None) -> AccessContext:
    return AccessContext(
        resource=Resource.PARCEL,
        caller_email=user.email,
        owner_email=parcel.created_by,
        assigned_to_collect=parcel.assigned_to_collect,
        assigned_to_deliver=parcel.assigned_to_deliver,
        delivery_status=parcel.delivery_status,
        payment_status=parcel.payment_status,
        leg=leg,
    )


def _tracking_id() -> str:
    return f"PCL-{datetime.now():%Y%m%d}-{secrets.token_hex(4).upper()}"


class ParcelService:
    def __init__(self, parcels: ParcelRepository, users: UserRepository):
        self.parcels = parcels
        self.users = users

    # ---------- queries ----------

    def status_counts(self) -> List[Dict[str, Any]]:
        return self.parcels.status_counts()

    def list_parcels(self, user: CurrentUser, filters: ParcelFilters, params: PageParams) -> Dict[str, Any]:
        # only admins may filter by another customer's email
        created_by = filters.email if user.is_admin else None
        items, meta = self.parcels.list_parcels(
            parcel_scope(user),
            params,
            created_by=created_by,
            delivery_status=filters.delivery_status.value if filters.delivery_status else None,
            payment_status=filters.payment_status.value if filters.payment_status else None,
        )
        return {"data": items, "pagination": meta}

    def get_parcel(self, user: CurrentUser, parcel_id: str) -> Parcel:
        parcel_id = validate_id(parcel_id, "parcel id")
        parcel = self.parcels.get_visible(parcel_id, parcel_scope(user))
        if parcel is None:
            raise NotFound("Parcel not found")
        return parcel

    # ---------- customer operations ----------

    def create_parcel(self, user: CurrentUser, data: ParcelCreate) -> Parcel:
        now = datetime.now()
        values = data.model_dump()
        values["parcel_type"] = data.parcel_type.value
        parcel = Parcel(
            **values,
            tracking_id=_tracking_id(),
            created_by=user.email,
            delivery_status=lifecycle.PENDING,
            payment_status="unpaid",
            created_at=now,
        )
        parcel = self.parcels.create(parcel)
        logger.info(f"Parcel {parcel.id} ({parcel.tracking_id}) created by {user.email}")
        return parcel

    def _editable_snapshot(self, user: CurrentUser, parcel_id: str, action: Action) -> Parcel:
        parcel = self.parcels.get_visible(parcel_id, parcel_scope(user))
        if parcel is None:
            raise NotFound("Parcel not found")
        if not is_customer_editable(parcel.delivery_status, parcel.payment_status):
            logger.warning(
                f"Rejected {action.value} on parcel {parcel_id}: "
                f"{parcel.delivery_status}/{parcel.payment_status}"
            )
            raise Forbidden("Parcel can no longer be modified once paid or in delivery")
        ensure_allowed(user, action, parcel_context(parcel, user))
        return parcel

    def update_parcel(self, user: CurrentUser, parcel_id: str, data: ParcelUpdate) -> Parcel:
        parcel_id = validate_id(parcel_id, "parcel id")
        values = data.model_dump(exclude_unset=True, exclude_none=True)
        if not values:
            raise InvalidInput("No fields to update")
        if "parcel_type" in values:
            values["parcel_type"] = data.parcel_type.value

        parcel = self._editable_snapshot(user, parcel_id, Action.UPDATE)
        # the write repeats the ownership and pending/unpaid predicates
        affected = self.parcels.update_if_editable(parcel_id, parcel.created_by, values)
        if affected == 0:
            raise Conflict("Parcel changed while updating; no changes applied")
        return self.parcels.get(parcel_id)

    def delete_parcel(self, user: CurrentUser, parcel_id: str) -> None:
        parcel_id = validate_id(parcel_id, "parcel id")
        if user.is_admin:
            if self.parcels.delete(parcel_id) == 0:
                raise NotFound("Parcel not found")
            logger.info(f"Parcel {parcel_id} deleted by admin {user.email}")
            return

        parcel = self._editable_snapshot(user, parcel_id, Action.DELETE)
        if self.parcels.delete_if_editable(parcel_id, parcel.created_by) == 0:
            raise Conflict("Parcel changed while deleting; no changes applied")
        logger.info(f"Parcel {parcel_id} deleted by {user.email}")

    # ---------- rider lifecycle ----------

    def advance_status(self, user: CurrentUser, parcel_id: str) -> Dict[str, Any]:
        parcel_id = validate_id(parcel_id, "parcel id")
        parcel = self.parcels.get_visible(parcel_id, parcel_scope(user))
        if parcel is None:
            raise NotFound("Parcel not found or unauthorized")
        ensure_allowed(user, Action.ADVANCE, parcel_context(parcel, user))

        transition = lifecycle.advance(
            parcel.delivery_status, parcel.sender_district, parcel.receiver_district
        )
        leg_rider = parcel.assigned_to_collect if transition.leg == lifecycle.COLLECT_LEG else parcel.assigned_to_deliver
        if leg_rider != user.email:
            raise Forbidden(f"Only the rider assigned to the {transition.leg} leg can advance this parcel")

        if self.parcels.apply_transition(parcel_id, user.email, transition) == 0:
            raise Conflict("Parcel status changed concurrently; no changes applied")

        logger.info(f"Parcel {parcel_id}: {transition.current} -> {transition.next} by {user.email}")
        return {
            "message": "Delivery status updated successfully",
            "parcel_id": parcel_id,
            "previous_status": transition.current,
            "delivery_status": transition.next,
            "assigned_to_deliver": user.email if transition.assign_deliverer else parcel.assigned_to_deliver,
        }

    # ---------- admin assignment ----------

    def assign_rider(self, user: CurrentUser, parcel_id: str, rider_email: str) -> Dict[str, Any]:
        parcel_id = validate_id(parcel_id, "parcel id")
        rider_email = rider_email.strip().lower()

        parcel = self.parcels.get(parcel_id)
        if parcel is None:
            raise NotFound("Parcel not found")
        ensure_allowed(user, Action.ASSIGN, parcel_context(parcel, user))

        if self.users.get_rider(rider_email) is None:
            raise NotFound(f"Rider {rider_email} not found")

        current_status = parcel.delivery_status
        assignment = lifecycle.assignment_for(current_status)
        affected, assigned_at = self.parcels.assign_leg(parcel_id, current_status, assignment, rider_email)
        if affected == 0:
            raise Conflict("Parcel status changed concurrently; rider not assigned")

        logger.info(
            f"Parcel {parcel_id}: {assignment.leg} leg assigned to {rider_email} "
            f"({current_status} -> {assignment.next})"
        )
        return {
            "message": "Rider assigned successfully",
            "parcel_id": parcel_id,
            "leg": assignment.leg,
            "rider_email": rider_email,
            "delivery_status": assignment.next,
            "assigned_at": assigned_at,
        }
