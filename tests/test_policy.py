from courier_hub.core.auth.policy import (
    AccessContext, Action, CurrentUser, Resource, allow, parcel_scope,
)


def parcel_ctx(caller, **kwargs):
    defaults = dict(
        owner_email="owner@example.com",
        assigned_to_collect="collector@example.com",
        assigned_to_deliver="deliverer@example.com",
        delivery_status="pending",
        payment_status="unpaid",
    )
    defaults.update(kwargs)
    return AccessContext(resource=Resource.PARCEL, caller_email=caller, **defaults)


def test_admin_is_unrestricted():
    ctx = parcel_ctx("admin@example.com", delivery_status="delivered", payment_status="paid")
    for action in Action:
        assert allow("admin", action, ctx)


def test_rider_reads_and_advances_only_assigned_parcels():
    assert allow("rider", Action.READ, parcel_ctx("collector@example.com"))
    assert allow("rider", Action.ADVANCE, parcel_ctx("deliverer@example.com"))
    assert not allow("rider", Action.READ, parcel_ctx("stranger@example.com"))
    assert not allow("rider", Action.ADVANCE, parcel_ctx("stranger@example.com"))
    assert not allow("rider", Action.UPDATE, parcel_ctx("collector@example.com"))


def test_rider_cashes_out_only_own_leg():
    assert allow("rider", Action.CASHOUT, parcel_ctx("collector@example.com", leg="collect"))
    assert not allow("rider", Action.CASHOUT, parcel_ctx("collector@example.com", leg="deliver"))


def test_customer_edits_only_pending_unpaid_own_parcels():
    assert allow("user", Action.UPDATE, parcel_ctx("owner@example.com"))
    assert allow("user", Action.DELETE, parcel_ctx("owner@example.com"))
    assert not allow("user", Action.UPDATE, parcel_ctx("owner@example.com", payment_status="paid"))
    assert not allow("user", Action.DELETE, parcel_ctx("owner@example.com", delivery_status="collecting"))
    assert not allow("user", Action.READ, parcel_ctx("other@example.com"))
    assert allow("user", Action.READ, parcel_ctx("owner@example.com", delivery_status="delivered"))


def test_profile_and_payments_are_owner_only():
    own = AccessContext(resource=Resource.PAYMENT, caller_email="a@example.com", owner_email="a@example.com")
    other = AccessContext(resource=Resource.PAYMENT, caller_email="a@example.com", owner_email="b@example.com")
    assert allow("user", Action.READ, own)
    assert not allow("user", Action.READ, other)

    profile = AccessContext(resource=Resource.PROFILE, caller_email="r@example.com", owner_email="r@example.com")
    assert allow("rider", Action.UPDATE, profile)


def test_unknown_role_is_denied():
    assert not allow("guest", Action.READ, parcel_ctx("owner@example.com"))


def test_parcel_scope_by_role():
    assert parcel_scope(CurrentUser("a@example.com", "1", "admin")).unrestricted
    assert parcel_scope(CurrentUser("r@example.com", "2", "rider")).rider_email == "r@example.com"
    assert parcel_scope(CurrentUser("u@example.com", "3", "user")).owner_email == "u@example.com"
