from datetime import datetime
from types import SimpleNamespace

import pytest

from courier_hub.core.errors import InvalidInput
from courier_hub.modules.parcels import lifecycle


def test_collecting_advances_to_collected():
    transition = lifecycle.advance("collecting", "Dhaka", "Dhaka")
    assert transition.next == "collected"
    assert transition.leg == "collect"
    assert not transition.assign_deliverer


def test_collected_cross_district_goes_to_warehouse():
    transition = lifecycle.advance("collected", "Dhaka", "Sylhet")
    assert transition.next == "sendWarehouse"
    assert not transition.assign_deliverer


def test_collected_same_district_goes_straight_to_delivery():
    transition = lifecycle.advance("collected", "Dhaka", "Dhaka")
    assert transition.next == "delivering"
    assert transition.assign_deliverer


def test_delivering_advances_to_delivered():
    transition = lifecycle.advance("delivering", "Dhaka", "Sylhet")
    assert transition.next == "delivered"
    assert transition.leg == "deliver"


@pytest.mark.parametrize("status", ["pending", "sendWarehouse", "delivered", "way-to-collect", "bogus"])
def test_other_states_cannot_be_advanced_by_rider(status):
    with pytest.raises(InvalidInput):
        lifecycle.advance(status, "Dhaka", "Dhaka")


@pytest.mark.parametrize("status,field,next_status", [
    ("pending", "assigned_to_collect", "collecting"),
    ("collecting", "assigned_to_deliver", "delivering"),
    ("collected", "assigned_to_deliver", "delivering"),
    ("sendWarehouse", "assigned_to_deliver", "delivering"),
    ("delivering", "assigned_to_deliver", "delivering"),
])
def test_assignment_targets_the_open_leg(status, field, next_status):
    assignment = lifecycle.assignment_for(status)
    assert assignment.field == field
    assert assignment.next == next_status


def test_delivered_parcel_cannot_be_assigned():
    with pytest.raises(InvalidInput):
        lifecycle.assignment_for("delivered")


def leg_state(status, collected_at=None):
    return SimpleNamespace(delivery_status=status, collected_at=collected_at)


def test_leg_completion():
    picked_up = datetime(2024, 1, 1, 9, 0)
    assert not lifecycle.leg_completed("collect", leg_state("collecting"))
    assert lifecycle.leg_completed("collect", leg_state("sendWarehouse", picked_up))
    assert lifecycle.leg_completed("collect", leg_state("delivered", picked_up))
    assert not lifecycle.leg_completed("deliver", leg_state("delivering", picked_up))
    assert lifecycle.leg_completed("deliver", leg_state("delivered", picked_up))


def test_collect_leg_skipped_by_early_deliverer_is_not_completed():
    # deliverer assigned while collecting: status moved on, nobody picked up
    assert not lifecycle.leg_completed("collect", leg_state("delivering"))
    assert not lifecycle.leg_completed("collect", leg_state("delivered"))


def test_every_transition_target_is_a_known_status():
    for status in ("collecting", "collected", "delivering"):
        for receiver in ("Dhaka", "Sylhet"):
            assert lifecycle.is_valid_status(lifecycle.advance(status, "Dhaka", receiver).next)
