from __future__ import annotations

import logging
import uuid
from datetime import datetime

from pvz.domain import ALLOWED_CITIES, PickupPoint
from pvz.errors import InvalidCityError
from pvz.stores.base import PickupPointStore, ProductStore, ReceptionStore
from pvz.time_utils import utcnow

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 30


def validate_city(city: str) -> None:
    if city not in ALLOWED_CITIES:
        raise InvalidCityError(city)


def normalize_paging(page: int | None, limit: int | None) -> tuple[int, int]:
    """Return (limit, offset). page < 1 becomes 1; limit outside 1..30 becomes 10."""
    if page is None or page < 1:
        page = 1
    if limit is None or limit < 1 or limit > MAX_PAGE_SIZE:
        limit = DEFAULT_PAGE_SIZE
    return limit, (page - 1) * limit


class PickupPointService:
    def __init__(
        self,
        pickup_points: PickupPointStore,
        receptions: ReceptionStore | None = None,
        products: ProductStore | None = None,
    ):
        self.pickup_points = pickup_points
        self.receptions = receptions
        self.products = products

    def create_pickup_point(
        self,
        city: str,
        *,
        pvz_id: str | None = None,
        registration_date: datetime | None = None,
    ) -> PickupPoint:
        validate_city(city)

        pvz = PickupPoint(
            id=pvz_id or str(uuid.uuid4()),
            city=city,
            registration_date=registration_date or utcnow(),
        )
        self.pickup_points.create(pvz)

        logger.info("Registered pickup point %s in %s", pvz.id, city)
        return pvz

    def get_pickup_point(self, pvz_id: str) -> PickupPoint:
        return self.pickup_points.get(pvz_id)

    def list_pickup_points(
        self,
        page: int | None = 1,
        limit: int | None = DEFAULT_PAGE_SIZE,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[PickupPoint]:
        limit, offset = normalize_paging(page, limit)
        return self.pickup_points.list(limit, offset, start_date, end_date)

    def list_pickup_points_with_receptions(
        self,
        page: int | None = 1,
        limit: int | None = DEFAULT_PAGE_SIZE,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[dict]:
        """
        Page of pickup points, each with its receptions (newest first) and
        every reception's products (insertion order).
        """
        if self.receptions is None or self.products is None:
            raise RuntimeError("reception and product stores are required for the detailed listing")

        result = []
        for pvz in self.list_pickup_points(page, limit, start_date, end_date):
            receptions = []
            for reception in self.receptions.list_for_pvz(pvz.id):
                receptions.append({
                    "reception": reception.to_dict(),
                    "products": [p.to_dict() for p in self.products.list_for_reception(reception.id)],
                })
            result.append({"pvz": pvz.to_dict(), "receptions": receptions})
        return result
