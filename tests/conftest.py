from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from courier_hub.config.database import Base, get_db
from courier_hub.core.auth.identity import VerifiedIdentity, get_identity_provider
from courier_hub.core.errors import Unauthenticated
from courier_hub.main import app
from courier_hub.modules.payments.processor import get_payment_processor
from courier_hub.modules.parcels.lifecycle import COLLECT_DONE
from courier_hub.shared.database.models import Parcel, RiderApplication, User


class FakeIdentityProvider:
    """Accepts tokens of the form ``token-<email>``"""

    def __init__(self):
        self.deleted = []
        self.fail_delete = False

    def verify(self, token):
        if not token.startswith("token-"):
            raise Unauthenticated("Invalid token")
        email = token[len("token-"):]
        return VerifiedIdentity(email=email, uid=f"uid-{email}")

    def delete_account(self, uid, email):
        if self.fail_delete:
            raise RuntimeError("identity provider unavailable")
        self.deleted.append((uid, email))


class FakePaymentProcessor:
    def __init__(self):
        self.amounts = []

    def create_intent(self, amount_minor_units):
        self.amounts.append(amount_minor_units)
        return f"pi_test_secret_{amount_minor_units}"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def identity_provider():
    return FakeIdentityProvider()


@pytest.fixture
def payment_processor():
    return FakePaymentProcessor()


@pytest.fixture
def client(session_factory, identity_provider, payment_processor):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider
    app.dependency_overrides[get_payment_processor] = lambda: payment_processor
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(email):
    return {"Authorization": f"Bearer token-{email}"}


def make_user(db, email, role="user", **fields):
    user = User(email=email, role=role, uid=f"uid-{email}", **fields)
    db.add(user)
    db.commit()
    return user


def make_rider(db, email, district="Dhaka"):
    return make_user(
        db, email, role="rider", district=district, rider_status="active",
        details={"name": email.split("@")[0], "district": district},
    )


def make_application(db, email, district="Dhaka"):
    application = RiderApplication(
        email=email, name="Applicant", age=25, phone="01700000000",
        region="Dhaka", district=district, bike_brand="Honda",
    )
    db.add(application)
    db.commit()
    return application


_parcel_clock = [datetime(2024, 1, 1, 8, 0, 0)]


def make_parcel(db, created_by, **overrides):
    _parcel_clock[0] += timedelta(minutes=1)
    values = dict(
        tracking_id=f"PCL-TEST-{_parcel_clock[0]:%H%M%S%f}",
        created_by=created_by,
        title="Documents",
        parcel_type="document",
        sender_name="Sender",
        sender_contact="01711111111",
        sender_region="Dhaka",
        sender_district="Dhaka",
        sender_address="House 1, Road 2",
        receiver_name="Receiver",
        receiver_contact="01822222222",
        receiver_region="Dhaka",
        receiver_district="Dhaka",
        receiver_address="House 3, Road 4",
        cost=100,
        delivery_status="pending",
        payment_status="unpaid",
        created_at=_parcel_clock[0],
    )
    values.update(overrides)
    if values["delivery_status"] in COLLECT_DONE and "collected_at" not in overrides:
        values["collected_at"] = values["created_at"]
    parcel = Parcel(**values)
    db.add(parcel)
    db.commit()
    return parcel


def reload(db, model, **criteria):
    """Read the current row, bypassing this session's identity map"""
    db.expire_all()
    return db.query(model).filter_by(**criteria).first()


PARCEL_PAYLOAD = {
    "title": "Birthday gift",
    "parcel_type": "non-document",
    "weight": 1.5,
    "sender_name": "Rahim",
    "sender_contact": "01711111111",
    "sender_region": "Dhaka",
    "sender_district": "Dhaka",
    "sender_address": "Road 1",
    "receiver_name": "Karim",
    "receiver_contact": "01822222222",
    "receiver_region": "Chattogram",
    "receiver_district": "Chattogram",
    "receiver_address": "Road 9",
    "cost": 150,
}
