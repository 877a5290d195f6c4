# courier_hub/shared/database/models.py
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, DateTime, Text, Numeric, JSON,
    CheckConstraint, Index,
)
from sqlalchemy.dialects.postgresql import JSONB

from courier_hub.config.database import Base
from courier_hub.shared.ids import new_id

JSONType = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")

ROLES = ("user", "rider", "admin")
DELIVERY_STATUSES = (
    "pending", "collecting", "collected", "sendWarehouse", "delivering", "delivered",
)
PAYMENT_STATUSES = ("unpaid", "paid")
CASHED_OUT = "cashed_out"


def _in_clause(column: str, values) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


# =====================================================
# USERS / RIDERS
# =====================================================

class User(Base):
    """Account keyed by email; role is the single source of truth for authorization"""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(_in_clause("role", ROLES), name="ck_users_role"),
    )

    id = Column(String(24), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    uid = Column(String(128), index=True)  # identity provider account id
    role = Column(String(20), nullable=False, default="user")

    # Profile
    name = Column(String(255))
    photo_url = Column(String(500))
    phone = Column(String(50))
    address = Column(String(500))

    # Rider profile, populated when an application is accepted
    district = Column(String(100), index=True)
    rider_status = Column(String(20))  # active | deactive
    details = Column(JSONType)

    created_at = Column(DateTime, nullable=False, default=datetime.now)
    last_logged_in = Column(DateTime, default=datetime.now)


class RiderApplication(Base):
    """Outstanding request by a user to become a rider, one per email"""
    __tablename__ = "rider_applications"

    id = Column(String(24), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)

    name = Column(String(255), nullable=False)
    age = Column(Integer)
    phone = Column(String(50), nullable=False)
    national_id = Column(String(50))
    region = Column(String(100), nullable=False)
    district = Column(String(100), nullable=False, index=True)
    bike_brand = Column(String(100))
    bike_registration = Column(String(100))
    note = Column(Text)

    applied_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime)

    PROFILE_FIELDS = (
        "name", "age", "phone", "national_id", "region", "district",
        "bike_brand", "bike_registration", "note",
    )

    def profile(self) -> dict:
        data = {field: getattr(self, field) for field in self.PROFILE_FIELDS}
        data["applied_at"] = self.applied_at.isoformat() if self.applied_at else None
        return data


# =====================================================
# PARCELS
# =====================================================

class Parcel(Base):
    """Shipment record; delivery_status drives every transition"""
    __tablename__ = "parcels"
    __table_args__ = (
        CheckConstraint(_in_clause("delivery_status", DELIVERY_STATUSES), name="ck_parcels_delivery_status"),
        CheckConstraint(_in_clause("payment_status", PAYMENT_STATUSES), name="ck_parcels_payment_status"),
        Index("ix_parcels_delivery_status", "delivery_status"),
    )

    id = Column(String(24), primary_key=True, default=new_id)
    tracking_id = Column(String(32), unique=True, nullable=False)
    created_by = Column(String(255), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    parcel_type = Column(String(20), nullable=False, default="non-document")
    weight = Column(Numeric(8, 2))

    sender_name = Column(String(255), nullable=False)
    sender_contact = Column(String(50), nullable=False)
    sender_region = Column(String(100), nullable=False)
    sender_district = Column(String(100), nullable=False)
    sender_address = Column(String(500), nullable=False)
    pickup_instruction = Column(Text)

    receiver_name = Column(String(255), nullable=False)
    receiver_contact = Column(String(50), nullable=False)
    receiver_region = Column(String(100), nullable=False)
    receiver_district = Column(String(100), nullable=False)
    receiver_address = Column(String(500), nullable=False)
    delivery_instruction = Column(Text)

    cost = Column(Numeric(10, 2), nullable=False)

    delivery_status = Column(String(20), nullable=False, default="pending")
    payment_status = Column(String(10), nullable=False, default="unpaid")

    # Legs (weak references by rider email)
    assigned_to_collect = Column(String(255), index=True)
    assigned_to_deliver = Column(String(255), index=True)
    collect_cashout_status = Column(String(20))
    deliver_cashout_status = Column(String(20))

    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime)
    assigned_at = Column(DateTime)
    collected_at = Column(DateTime)
    delivered_at = Column(DateTime)


# =====================================================
# PAYMENTS
# =====================================================

class Payment(Base):
    """Immutable record of a captured payment"""
    __tablename__ = "payments"

    id = Column(String(24), primary_key=True, default=new_id)
    parcel_id = Column(String(24), nullable=False, index=True)
    user_email = Column(String(255), nullable=False, index=True)
    transaction_id = Column(String(255), unique=True, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(10), nullable=False, default="usd")
    payment_method = Column(String(50))
    created_at = Column(DateTime, nullable=False, default=datetime.now, index=True)


# =====================================================
# WAREHOUSES
# =====================================================

class Warehouse(Base):
    """Service-area hub used for cross-district routing"""
    __tablename__ = "warehouses"

    id = Column(String(24), primary_key=True, default=new_id)
    region = Column(String(100), nullable=False, index=True)
    district = Column(String(100), nullable=False, index=True)
    city = Column(String(100))
    covered_area = Column(JSONType)
    status = Column(String(20), nullable=False, default="active")
    latitude = Column(Numeric(9, 6))
    longitude = Column(Numeric(9, 6))
