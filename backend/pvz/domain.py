# Overview: Plain domain records passed between services, stores and routes.

"""
Domain Records

Stores return these records, never ORM rows, so the SQL and in-memory
implementations of each port are interchangeable.

JSON keys are camelCase to match the public PVZ API contract.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from pvz.time_utils import to_utc_z


# Reception lifecycle states
STATUS_IN_PROGRESS = "in_progress"
STATUS_CLOSED = "closed"
RECEPTION_STATUSES = {STATUS_IN_PROGRESS, STATUS_CLOSED}

# Allow-lists
PRODUCT_TYPES = {"electronics", "clothing", "footwear"}
ALLOWED_CITIES = {"Moscow", "Saint Petersburg", "Kazan"}

ROLE_EMPLOYEE = "employee"
ROLE_MODERATOR = "moderator"
USER_ROLES = {ROLE_EMPLOYEE, ROLE_MODERATOR}


@dataclass
class PickupPoint:
    id: str
    city: str
    registration_date: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "registrationDate": to_utc_z(self.registration_date),
            "city": self.city,
        }


@dataclass
class Reception:
    """
    Intake batch at a pickup point.

    in_progress -> closed is the only transition; closed is terminal.
    """
    id: str
    pvz_id: str
    date_time: datetime
    status: str = STATUS_IN_PROGRESS

    @property
    def is_open(self) -> bool:
        return self.status == STATUS_IN_PROGRESS

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "dateTime": to_utc_z(self.date_time),
            "pvzId": self.pvz_id,
            "status": self.status,
        }


@dataclass
class Product:
    """
    Item logged in a reception.

    seq is assigned by the store on insert and breaks ties between products
    sharing a date_time; "last" is the max (date_time, seq).
    """
    id: str
    date_time: datetime
    type: str
    reception_id: str
    seq: int | None = None

    @property
    def sort_key(self) -> tuple:
        return (self.date_time, self.seq or 0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "dateTime": to_utc_z(self.date_time),
            "type": self.type,
            "receptionId": self.reception_id,
        }


@dataclass
class User:
    id: str
    email: str
    role: str
    password_hash: str = field(default="", repr=False)

    def to_dict(self) -> dict:
        # password_hash never leaves the core
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role,
        }


@dataclass
class Session:
    """Bearer session. user_id is None for dummy logins."""
    token_hash: str
    role: str
    created_at: datetime
    expires_at: datetime
    user_id: str | None = None
    email: str | None = None
    revoked_at: datetime | None = None

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None
