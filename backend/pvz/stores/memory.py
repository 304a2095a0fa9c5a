# Overview: In-process implementations of the store ports.

"""
In-Memory Stores

Used by the test suite and by STORE_BACKEND=memory. Each store guards its
dicts with its own lock and hands out copies, so callers never mutate
stored state by accident.

ReceptionStore mirrors the SQL partial unique index: creating a second
in_progress reception for a pickup point raises ActiveReceptionExistsError.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from datetime import datetime
from typing import Optional

from pvz.domain import (
    STATUS_CLOSED,
    STATUS_IN_PROGRESS,
    PickupPoint,
    Product,
    Reception,
    Session,
    User,
)
from pvz.errors import (
    ActiveReceptionExistsError,
    EmailExistsError,
    NoActiveReceptionError,
    PickupPointNotFoundError,
    ProductDeleteConflictError,
    ProductNotFoundError,
    ReceptionNotFoundError,
    StoreError,
    UserNotFoundError,
)


class MemoryUserStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: dict[str, User] = {}

    def create_user(self, user: User) -> None:
        with self._lock:
            if any(u.email == user.email for u in self._by_id.values()):
                raise EmailExistsError()
            self._by_id[user.id] = replace(user)

    def get_user_by_email(self, email: str) -> User:
        with self._lock:
            for user in self._by_id.values():
                if user.email == email:
                    return replace(user)
        raise UserNotFoundError()

    def get_user(self, user_id: str) -> User:
        with self._lock:
            user = self._by_id.get(user_id)
            if user is None:
                raise UserNotFoundError()
            return replace(user)


class MemoryPickupPointStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: dict[str, PickupPoint] = {}

    def create(self, pvz: PickupPoint) -> None:
        with self._lock:
            if pvz.id in self._by_id:
                raise StoreError(f"pickup point {pvz.id} already exists")
            self._by_id[pvz.id] = replace(pvz)

    def get(self, pvz_id: str, *, timeout: Optional[float] = None) -> PickupPoint:
        with self._lock:
            pvz = self._by_id.get(pvz_id)
            if pvz is None:
                raise PickupPointNotFoundError(pvz_id)
            return replace(pvz)

    def list(
        self,
        limit: int,
        offset: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[PickupPoint]:
        with self._lock:
            items = [
                p for p in self._by_id.values()
                if (start_date is None or p.registration_date >= start_date)
                and (end_date is None or p.registration_date <= end_date)
            ]
        items.sort(key=lambda p: (p.registration_date, p.id))
        return [replace(p) for p in items[offset:offset + limit]]


class MemoryReceptionStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: dict[str, Reception] = {}

    def create(self, reception: Reception, *, timeout: Optional[float] = None) -> None:
        with self._lock:
            if reception.id in self._by_id:
                raise StoreError(f"reception {reception.id} already exists")
            if reception.status == STATUS_IN_PROGRESS and self._active_for(reception.pvz_id):
                raise ActiveReceptionExistsError(reception.pvz_id)
            self._by_id[reception.id] = replace(reception)

    def _active_for(self, pvz_id: str) -> Optional[Reception]:
        active = [
            r for r in self._by_id.values()
            if r.pvz_id == pvz_id and r.status == STATUS_IN_PROGRESS
        ]
        if not active:
            return None
        return max(active, key=lambda r: r.date_time)

    def get_active(
        self,
        pvz_id: str,
        *,
        for_update: bool = False,
        timeout: Optional[float] = None,
    ) -> Reception:
        with self._lock:
            reception = self._active_for(pvz_id)
            if reception is None:
                raise NoActiveReceptionError(pvz_id)
            return replace(reception)

    def close(self, reception_id: str, *, timeout: Optional[float] = None) -> None:
        with self._lock:
            reception = self._by_id.get(reception_id)
            if reception is None or reception.status != STATUS_IN_PROGRESS:
                raise StoreError("no reception updated")
            reception.status = STATUS_CLOSED

    def get(self, reception_id: str) -> Reception:
        with self._lock:
            reception = self._by_id.get(reception_id)
            if reception is None:
                raise ReceptionNotFoundError(reception_id)
            return replace(reception)

    def list_for_pvz(self, pvz_id: str) -> list[Reception]:
        with self._lock:
            items = [replace(r) for r in self._by_id.values() if r.pvz_id == pvz_id]
        items.sort(key=lambda r: r.date_time, reverse=True)
        return items


class MemoryProductStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._seq = itertools.count(1)
        self._by_id: dict[str, Product] = {}

    def add(self, product: Product, *, timeout: Optional[float] = None) -> None:
        with self._lock:
            if product.id in self._by_id:
                raise StoreError(f"product {product.id} already exists")
            product.seq = next(self._seq)
            self._by_id[product.id] = replace(product)

    def get_last(self, reception_id: str, *, timeout: Optional[float] = None) -> Product:
        with self._lock:
            items = [p for p in self._by_id.values() if p.reception_id == reception_id]
            if not items:
                raise ProductNotFoundError(reception_id)
            return replace(max(items, key=lambda p: p.sort_key))

    def delete(self, product_id: str, *, timeout: Optional[float] = None) -> None:
        with self._lock:
            if self._by_id.pop(product_id, None) is None:
                raise ProductDeleteConflictError(product_id)

    def list_for_reception(self, reception_id: str) -> list[Product]:
        with self._lock:
            items = [replace(p) for p in self._by_id.values() if p.reception_id == reception_id]
        items.sort(key=lambda p: p.seq or 0)
        return items


class MemorySessionStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._by_hash: dict[str, Session] = {}

    def create(self, session: Session) -> None:
        with self._lock:
            self._by_hash[session.token_hash] = replace(session)

    def get_by_hash(self, token_hash: str) -> Optional[Session]:
        with self._lock:
            session = self._by_hash.get(token_hash)
            return replace(session) if session else None

    def revoke(self, token_hash: str, revoked_at: datetime) -> bool:
        with self._lock:
            session = self._by_hash.get(token_hash)
            if session is None or session.is_revoked:
                return False
            session.revoked_at = revoked_at
            return True
