# courier_hub/modules/parcels/lifecycle.py
"""
Parcel delivery lifecycle.

    pending -> collecting -> collected -> sendWarehouse -> delivering -> delivered
                                      \\-> delivering (same district)

Admins move a parcel into ``collecting``/``delivering`` by assigning a
rider to the matching leg. Riders advance it through the rest with
``advance``; the next state is computed here, never taken from the caller.
"""
from typing import NamedTuple, Optional

from courier_hub.core.errors import InvalidInput

PENDING = "pending"
COLLECTING = "collecting"
COLLECTED = "collected"
SEND_WAREHOUSE = "sendWarehouse"
DELIVERING = "delivering"
DELIVERED = "delivered"

STATUSES = (PENDING, COLLECTING, COLLECTED, SEND_WAREHOUSE, DELIVERING, DELIVERED)

COLLECT_LEG = "collect"
DELIVER_LEG = "deliver"

# Statuses in which each leg has been physically completed. The collect leg
# additionally needs collected_at: a deliverer assigned while the parcel was
# still collecting moves it to delivering without a pickup.
COLLECT_DONE = (COLLECTED, SEND_WAREHOUSE, DELIVERING, DELIVERED)
DELIVER_DONE = (DELIVERED,)

# Statuses in which a rider still has work on each leg
COLLECT_ACTIVE = (COLLECTING, COLLECTED)
DELIVER_ACTIVE = (DELIVERING,)


class Transition(NamedTuple):
    current: str
    next: str
    leg: str
    assign_deliverer: bool = False


class Assignment(NamedTuple):
    leg: str
    field: str
    next: str


def advance(status: str, sender_district: Optional[str], receiver_district: Optional[str]) -> Transition:
    """Next rider-driven transition from ``status``"""
    if status == COLLECTING:
        return Transition(COLLECTING, COLLECTED, COLLECT_LEG)
    if status == COLLECTED:
        if sender_district != receiver_district:
            return Transition(COLLECTED, SEND_WAREHOUSE, COLLECT_LEG)
        return Transition(COLLECTED, DELIVERING, COLLECT_LEG, assign_deliverer=True)
    if status == DELIVERING:
        return Transition(DELIVERING, DELIVERED, DELIVER_LEG)
    raise InvalidInput(f"Invalid status transition from '{status}'")


def assignment_for(status: str) -> Assignment:
    """Which leg an admin assignment fills, given the current status"""
    if status == PENDING:
        return Assignment(COLLECT_LEG, "assigned_to_collect", COLLECTING)
    if status in (COLLECTING, COLLECTED, SEND_WAREHOUSE, DELIVERING):
        return Assignment(DELIVER_LEG, "assigned_to_deliver", DELIVERING)
    raise InvalidInput(f"Cannot assign a rider to a parcel in status '{status}'")


def leg_completed(leg: str, parcel) -> bool:
    """Whether the rider on ``leg`` actually performed it"""
    if leg == COLLECT_LEG:
        return parcel.collected_at is not None and parcel.delivery_status in COLLECT_DONE
    if leg == DELIVER_LEG:
        return parcel.delivery_status in DELIVER_DONE
    raise InvalidInput(f"Unknown leg '{leg}'")


def is_valid_status(status: str) -> bool:
    return status in STATUSES
