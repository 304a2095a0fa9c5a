# Overview: Builds the stores and services for one Flask app.

"""
Service Container

Services depend on store ports; the container decides which concrete stores
back them ("sql" or "memory") and wires one shared KeyedLock into the
reception and product services so both serialize on the same pickup point.

create_app stores the container in app.extensions["pvz"]; routes reach it
through get_services().
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from flask import current_app

from pvz.services import (
    IdentityConfig,
    IdentityService,
    PickupPointService,
    ProductService,
    ReceptionService,
)
from pvz.services.concurrency import KeyedLock
from pvz.stores import memory
from pvz.stores.base import (
    PickupPointStore,
    ProductStore,
    ReceptionStore,
    SessionStore,
    UserStore,
)


@dataclass
class Stores:
    users: UserStore
    pickup_points: PickupPointStore
    receptions: ReceptionStore
    products: ProductStore
    sessions: SessionStore


def build_stores(backend: str) -> Stores:
    if backend == "memory":
        return Stores(
            users=memory.MemoryUserStore(),
            pickup_points=memory.MemoryPickupPointStore(),
            receptions=memory.MemoryReceptionStore(),
            products=memory.MemoryProductStore(),
            sessions=memory.MemorySessionStore(),
        )
    if backend == "sql":
        from pvz.stores import sql
        return Stores(
            users=sql.SqlUserStore(),
            pickup_points=sql.SqlPickupPointStore(),
            receptions=sql.SqlReceptionStore(),
            products=sql.SqlProductStore(),
            sessions=sql.SqlSessionStore(),
        )
    raise ValueError(f"Unknown STORE_BACKEND '{backend}'. Must be one of: memory, sql")


class ServiceContainer:
    def __init__(self, stores: Stores, identity_config: IdentityConfig, timeout: float | None = None):
        self.stores = stores
        self.locks = KeyedLock()

        self.receptions = ReceptionService(
            stores.receptions,
            stores.pickup_points,
            locks=self.locks,
            default_timeout=timeout,
        )
        self.products = ProductService(
            stores.products,
            stores.receptions,
            locks=self.locks,
            default_timeout=timeout,
        )
        self.pickup_points = PickupPointService(
            stores.pickup_points,
            stores.receptions,
            stores.products,
        )
        self.identity = IdentityService(stores.users, stores.sessions, identity_config)

    @classmethod
    def from_config(cls, config) -> "ServiceContainer":
        identity_config = IdentityConfig(
            secret_key=config["SECRET_KEY"],
            session_ttl=timedelta(hours=config.get("SESSION_TTL_HOURS", 24)),
            bcrypt_rounds=config.get("BCRYPT_ROUNDS", 12),
        )
        return cls(
            build_stores(config.get("STORE_BACKEND", "sql")),
            identity_config,
            timeout=config.get("STORE_TIMEOUT_SECONDS"),
        )


def get_services() -> ServiceContainer:
    return current_app.extensions["pvz"]
