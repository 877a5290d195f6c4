# courier_hub/modules/riders/earnings.py
"""Rider earnings, derived on demand from the parcels a rider holds legs on."""
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable

from courier_hub.modules.parcels import lifecycle
from courier_hub.shared.database.models import CASHED_OUT

CENT = Decimal("0.01")


def leg_earning(cost, rate: Decimal) -> Decimal:
    return (Decimal(str(cost)) * rate).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_earnings(parcels: Iterable, rider_email: str, rate: Decimal) -> Dict[str, Any]:
    """Collect and deliver legs count independently, each at ``rate`` of cost."""
    collected = delivered = Decimal("0.00")
    cashed_out = available = Decimal("0.00")
    collected_count = delivered_count = 0

    for parcel in parcels:
        amount = leg_earning(parcel.cost, rate)
        legs = (
            (lifecycle.COLLECT_LEG, parcel.assigned_to_collect, parcel.collect_cashout_status),
            (lifecycle.DELIVER_LEG, parcel.assigned_to_deliver, parcel.deliver_cashout_status),
        )
        for leg, rider, cashout_status in legs:
            if rider != rider_email:
                continue
            if leg == lifecycle.COLLECT_LEG:
                collected += amount
                collected_count += 1
            else:
                delivered += amount
                delivered_count += 1

            if cashout_status == CASHED_OUT:
                cashed_out += amount
            elif lifecycle.leg_completed(leg, parcel):
                available += amount

    return {
        "collected_parcel_earning": collected,
        "delivered_parcel_earning": delivered,
        "total_earning": collected + delivered,
        "cashed_out_earning": cashed_out,
        "available_earning": available,
        "collected_parcel_count": collected_count,
        "delivered_parcel_count": delivered_count,
    }
