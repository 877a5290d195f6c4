# courier_hub/modules/riders/service.py
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List

from courier_hub.core.auth.policy import AccessContext, Action, CurrentUser, Resource, ensure_allowed
from courier_hub.core.errors import Conflict, InvalidInput, NotFound
from courier_hub.modules.parcels import lifecycle
from courier_hub.modules.parcels.repository import ParcelRepository
from courier_hub.modules.parcels.service import parcel_context
from courier_hub.modules.users.repository import UserRepository
from courier_hub.shared.database.models import RiderApplication
from courier_hub.shared.ids import validate_id
from courier_hub.shared.pagination import PageParams, paginate_items
from .earnings import compute_earnings, leg_earning
from .repository import RiderApplicationRepository
from .schemas import (
    ApplicationDecision, Leg, RiderApplicationCreate, RiderApplicationUpdate, RiderStatus,
)

logger = logging.getLogger(__name__)


class RiderService:
    def __init__(
        self,
        applications: RiderApplicationRepository,
        users: UserRepository,
        parcels: ParcelRepository,
        commission_rate: Decimal,
    ):
        self.applications = applications
        self.users = users
        self.parcels = parcels
        self.commission_rate = commission_rate

    # ---------- applications ----------

    def _application_context(self, user: CurrentUser, email: str) -> AccessContext:
        return AccessContext(resource=Resource.APPLICATION, caller_email=user.email, owner_email=email)

    def apply(self, user: CurrentUser, data: RiderApplicationCreate) -> RiderApplication:
        ensure_allowed(user, Action.CREATE, self._application_context(user, user.email))
        if self.applications.get(user.email) is not None:
            raise Conflict("You have already applied.")

        application = RiderApplication(**data.model_dump(), email=user.email, applied_at=datetime.now())
        application = self.applications.create(application)
        logger.info(f"Rider application submitted by {user.email} for district {application.district}")
        return application

    def list_applications(self, params: PageParams, district: str = None) -> Dict[str, Any]:
        items, meta = self.applications.list_applications(params, district=district)
        return {"data": items, "pagination": meta}

    def get_application(self, user: CurrentUser, email: str) -> RiderApplication:
        email = email.lower()
        ensure_allowed(user, Action.READ, self._application_context(user, email))
        application = self.applications.get(email)
        if application is None:
            raise NotFound("Application not found")
        return application

    def update_application(self, user: CurrentUser, email: str, data: RiderApplicationUpdate) -> RiderApplication:
        email = email.lower()
        ensure_allowed(user, Action.UPDATE, self._application_context(user, email))
        values = data.model_dump(exclude_unset=True, exclude_none=True)
        if not values:
            raise InvalidInput("No fields to update")
        if self.applications.update(email, values) == 0:
            raise NotFound("Application not found")
        return self.applications.get(email)

    def delete_application(self, user: CurrentUser, email: str) -> None:
        email = email.lower()
        ensure_allowed(user, Action.DELETE, self._application_context(user, email))
        if self.applications.delete(email) == 0:
            raise NotFound("Application not found")
        logger.info(f"Rider application for {email} withdrawn by {user.email}")

    def decide_application(self, user: CurrentUser, email: str, decision: ApplicationDecision) -> Dict[str, Any]:
        email = email.lower()
        application = self.applications.get(email)
        if application is None:
            raise NotFound("Application not found")

        if decision == ApplicationDecision.REJECT:
            if self.applications.delete(email) == 0:
                raise NotFound("Application not found")
            logger.info(f"Rider application for {email} rejected by {user.email}")
            applicant = self.users.get_by_email(email)
            return {
                "message": "Application rejected",
                "email": email,
                "decision": decision,
                "role": applicant.role if applicant else "user",
            }

        if self.users.get_by_email(email) is None:
            raise NotFound(f"User {email} not found")
        if self.applications.accept(application) == 0:
            raise Conflict("Application was already processed")

        logger.info(f"Rider application for {email} accepted by {user.email}")
        return {
            "message": "Application accepted, user promoted to rider",
            "email": email,
            "decision": decision,
            "role": "rider",
        }

    # ---------- riders directory ----------

    def list_riders(self, params: PageParams, district: str = None, rider_status: RiderStatus = None) -> Dict[str, Any]:
        items, meta = self.users.list_riders(
            params, district=district, rider_status=rider_status.value if rider_status else None
        )
        return {"data": items, "pagination": meta}

    def set_rider_status(self, email: str, rider_status: RiderStatus) -> Dict[str, Any]:
        email = email.lower()
        role = "rider" if rider_status == RiderStatus.ACTIVE else "user"
        if self.users.set_rider_status(email, rider_status.value, role) == 0:
            raise NotFound("Rider not found")
        logger.info(f"Rider {email} set to {rider_status.value} (role={role})")
        return {
            "message": "Rider updated successfully",
            "email": email,
            "rider_status": rider_status,
            "role": role,
        }

    # ---------- rider work ----------

    def _tasks(self, parcels, rider_email: str, legs_filter) -> List[Dict[str, Any]]:
        tasks = []
        for parcel in parcels:
            for leg, rider, cashout_status in (
                (Leg.COLLECT, parcel.assigned_to_collect, parcel.collect_cashout_status),
                (Leg.DELIVER, parcel.assigned_to_deliver, parcel.deliver_cashout_status),
            ):
                if rider == rider_email and legs_filter(leg.value, parcel):
                    tasks.append({
                        "leg": leg,
                        "earning": leg_earning(parcel.cost, self.commission_rate),
                        "cashout_status": cashout_status,
                        "parcel": parcel,
                    })
        return tasks

    def active_tasks(self, user: CurrentUser, params: PageParams) -> Dict[str, Any]:
        def is_active(leg, parcel):
            if leg == lifecycle.COLLECT_LEG:
                return parcel.delivery_status in lifecycle.COLLECT_ACTIVE
            return parcel.delivery_status in lifecycle.DELIVER_ACTIVE

        tasks = self._tasks(self.parcels.active_for_rider(user.email), user.email, is_active)
        items, meta = paginate_items(tasks, params)
        return {"data": items, "pagination": meta}

    def completed_tasks(self, user: CurrentUser, params: PageParams) -> Dict[str, Any]:
        tasks = self._tasks(self.parcels.completed_for_rider(user.email), user.email, lifecycle.leg_completed)
        items, meta = paginate_items(tasks, params)
        return {"data": items, "pagination": meta}

    def earnings(self, user: CurrentUser) -> Dict[str, Any]:
        ensure_allowed(
            user, Action.READ,
            AccessContext(resource=Resource.EARNINGS, caller_email=user.email, owner_email=user.email),
        )
        result = compute_earnings(self.parcels.for_rider(user.email), user.email, self.commission_rate)
        result["rider_email"] = user.email
        result["commission_rate"] = self.commission_rate
        return result

    def cashout(self, user: CurrentUser, parcel_id: str, leg: Leg) -> Dict[str, Any]:
        parcel_id = validate_id(parcel_id, "parcel id")
        parcel = self.parcels.get(parcel_id)
        if parcel is None:
            raise Conflict("Parcel not found or already cashed out")
        ensure_allowed(
            user, Action.CASHOUT, parcel_context(parcel, user, leg.value),
            "You can only cash out legs you performed",
        )

        if self.parcels.cashout(parcel_id, user.email, leg.value) == 0:
            logger.warning(f"Cashout rejected for parcel {parcel_id} ({leg.value}) by {user.email}")
            raise Conflict("Parcel not found or already cashed out")

        amount = leg_earning(parcel.cost, self.commission_rate)
        logger.info(f"Rider {user.email} cashed out {amount} for parcel {parcel_id} ({leg.value} leg)")
        return {
            "message": "Cashout successful",
            "parcel_id": parcel_id,
            "leg": leg,
            "amount": amount,
        }
