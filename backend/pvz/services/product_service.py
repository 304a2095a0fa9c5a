# Overview: Service-layer operations for products inside the open reception.

"""
Product Ledger Service

Products are logged into the in_progress reception of a pickup point and
removed strictly last-in-first-out. "Last" is the product with the greatest
(date_time, seq); seq is the store's insertion sequence and breaks ties
between products logged within the same clock tick.

ERRORS:
- InvalidProductTypeError: checked before any store call, so it wins over
  NoActiveReceptionError and nothing is created
- NoActiveReceptionError: no in_progress reception for the pickup point
- ProductNotFoundError: the open reception is empty
- ProductDeleteConflictError: the last product vanished between lookup and
  delete (zero rows affected)

Operations share the per-pickup-point KeyedLock with ReceptionService so
a close cannot interleave with an add or a delete on the same pickup point.
"""

from __future__ import annotations

import logging
import uuid

from pvz.domain import PRODUCT_TYPES, Product
from pvz.errors import InvalidProductTypeError
from pvz.services.concurrency import Deadline, KeyedLock
from pvz.stores.base import ProductStore, ReceptionStore
from pvz.time_utils import utcnow

logger = logging.getLogger(__name__)


def validate_product_type(product_type: str) -> None:
    if product_type not in PRODUCT_TYPES:
        raise InvalidProductTypeError(product_type)


class ProductService:
    def __init__(
        self,
        products: ProductStore,
        receptions: ReceptionStore,
        locks: KeyedLock | None = None,
        default_timeout: float | None = None,
    ):
        self.products = products
        self.receptions = receptions
        self.locks = locks if locks is not None else KeyedLock()
        self.default_timeout = default_timeout

    def _deadline(self, timeout: float | None) -> Deadline:
        return Deadline(self.default_timeout if timeout is None else timeout)

    def add_product(self, pvz_id: str, product_type: str, *, timeout: float | None = None) -> Product:
        """
        Log a product into the open reception of a pickup point.

        A store failure returns no product; only the error propagates.
        """
        validate_product_type(product_type)

        deadline = self._deadline(timeout)
        with self.locks.hold(pvz_id, deadline):
            deadline.check("active reception lookup")
            reception = self.receptions.get_active(pvz_id, for_update=True, timeout=deadline.remaining())

            product = Product(
                id=str(uuid.uuid4()),
                date_time=utcnow(),
                type=product_type,
                reception_id=reception.id,
            )

            deadline.check("product insert")
            self.products.add(product, timeout=deadline.remaining())

        logger.info("Added %s product %s to reception %s", product_type, product.id, reception.id)
        return product

    def delete_last_product(self, pvz_id: str, *, timeout: float | None = None) -> Product:
        """Remove the most recently logged product of the open reception and return it."""
        deadline = self._deadline(timeout)
        with self.locks.hold(pvz_id, deadline):
            deadline.check("active reception lookup")
            reception = self.receptions.get_active(pvz_id, for_update=True, timeout=deadline.remaining())

            deadline.check("last product lookup")
            product = self.products.get_last(reception.id, timeout=deadline.remaining())

            deadline.check("product delete")
            self.products.delete(product.id, timeout=deadline.remaining())

        logger.info("Deleted product %s from reception %s", product.id, reception.id)
        return product

    def get_last_product(self, pvz_id: str) -> Product:
        reception = self.receptions.get_active(pvz_id)
        return self.products.get_last(reception.id)

    def list_products(self, reception_id: str) -> list[Product]:
        return self.products.list_for_reception(reception_id)
