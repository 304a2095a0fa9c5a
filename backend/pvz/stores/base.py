# Overview: Store ports consumed by the PVZ services.

"""
Store Ports

Services depend on these protocols, never on a concrete store. Two
implementations exist for every port:

- stores.sql: Flask-SQLAlchemy (production)
- stores.memory: in-process dicts (tests, STORE_BACKEND=memory)

CONTRACT:
- "No rows" lookups raise the specific DomainError (NoActiveReceptionError,
  ProductNotFoundError, UserNotFoundError, ...), never return None.
- Any other failure raises StoreError (or lets the driver error propagate)
  and leaves no partial state behind.
- timeout (seconds) bounds the call; exceeding it raises StoreTimeoutError.
  Implementations that cannot block may ignore it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from pvz.domain import PickupPoint, Product, Reception, Session, User


@runtime_checkable
class UserStore(Protocol):

    def create_user(self, user: User) -> None:
        """Persist a new user. Duplicate email raises EmailExistsError."""
        ...

    def get_user_by_email(self, email: str) -> User:
        """Return the user or raise UserNotFoundError."""
        ...

    def get_user(self, user_id: str) -> User:
        """Return the user or raise UserNotFoundError."""
        ...


@runtime_checkable
class PickupPointStore(Protocol):

    def create(self, pvz: PickupPoint) -> None:
        ...

    def get(self, pvz_id: str, *, timeout: Optional[float] = None) -> PickupPoint:
        """Return the pickup point or raise PickupPointNotFoundError."""
        ...

    def list(
        self,
        limit: int,
        offset: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[PickupPoint]:
        """
        Ordered by registration_date then id. Date bounds are inclusive
        and filter on registration_date.
        """
        ...


@runtime_checkable
class ReceptionStore(Protocol):

    def create(self, reception: Reception, *, timeout: Optional[float] = None) -> None:
        """
        Persist a new reception. Implementations that can detect a second
        in_progress reception for the same pickup point raise
        ActiveReceptionExistsError.
        """
        ...

    def get_active(
        self,
        pvz_id: str,
        *,
        for_update: bool = False,
        timeout: Optional[float] = None,
    ) -> Reception:
        """
        Return the in_progress reception or raise NoActiveReceptionError.

        for_update locks the row for callers that go on to write.
        """
        ...

    def close(self, reception_id: str, *, timeout: Optional[float] = None) -> None:
        """Mark the reception closed. Zero rows affected raises StoreError."""
        ...

    def get(self, reception_id: str) -> Reception:
        """Return the reception or raise ReceptionNotFoundError."""
        ...

    def list_for_pvz(self, pvz_id: str) -> list[Reception]:
        """All receptions of a pickup point, newest first."""
        ...


@runtime_checkable
class ProductStore(Protocol):

    def add(self, product: Product, *, timeout: Optional[float] = None) -> None:
        """Persist the product and assign product.seq."""
        ...

    def get_last(self, reception_id: str, *, timeout: Optional[float] = None) -> Product:
        """Return the max (date_time, seq) product or raise ProductNotFoundError."""
        ...

    def delete(self, product_id: str, *, timeout: Optional[float] = None) -> None:
        """Delete one product. Zero rows affected raises ProductDeleteConflictError."""
        ...

    def list_for_reception(self, reception_id: str) -> list[Product]:
        """Products of a reception in insertion order."""
        ...


@runtime_checkable
class SessionStore(Protocol):

    def create(self, session: Session) -> None:
        ...

    def get_by_hash(self, token_hash: str) -> Optional[Session]:
        ...

    def revoke(self, token_hash: str, revoked_at: datetime) -> bool:
        """Return True if an active session was revoked."""
        ...
