"""
Pickup point registry tests: city allow-list, paging and the detailed listing.
"""

from datetime import datetime, timedelta

import pytest

from pvz.errors import InvalidCityError, PickupPointNotFoundError
from pvz.services.pickup_point_service import normalize_paging


class TestCreatePickupPoint:

    @pytest.mark.parametrize("city", ["Moscow", "Saint Petersburg", "Kazan"])
    def test_allowed_cities(self, pickup_points, city):
        pvz = pickup_points.create_pickup_point(city)

        assert pvz.city == city
        assert pickup_points.get_pickup_point(pvz.id) == pvz

    @pytest.mark.parametrize("city", ["", "Novosibirsk", "moscow"])
    def test_rejected_cities(self, pickup_points, city):
        with pytest.raises(InvalidCityError):
            pickup_points.create_pickup_point(city)

    def test_explicit_id_and_date(self, pickup_points):
        when = datetime(2026, 1, 2, 3, 4, 5)
        pvz = pickup_points.create_pickup_point("Kazan", pvz_id="pvz-1", registration_date=when)

        assert pvz.id == "pvz-1"
        assert pvz.registration_date == when

    def test_unknown_pickup_point(self, pickup_points):
        with pytest.raises(PickupPointNotFoundError):
            pickup_points.get_pickup_point("missing")


class TestPaging:

    @pytest.mark.parametrize(
        "page,limit,expected",
        [
            (1, 10, (10, 0)),
            (3, 5, (5, 10)),
            (0, 5, (5, 0)),
            (-2, 5, (5, 0)),
            (2, 0, (10, 10)),
            (2, 31, (10, 10)),
            (1, 30, (30, 0)),
            (None, None, (10, 0)),
        ],
    )
    def test_normalize_paging(self, page, limit, expected):
        assert normalize_paging(page, limit) == expected

    def test_list_is_ordered_and_paged(self, pickup_points):
        base = datetime(2026, 5, 1)
        created = [
            pickup_points.create_pickup_point("Moscow", registration_date=base + timedelta(days=i))
            for i in range(5)
        ]

        page_one = pickup_points.list_pickup_points(page=1, limit=2)
        page_three = pickup_points.list_pickup_points(page=3, limit=2)

        assert [p.id for p in page_one] == [created[0].id, created[1].id]
        assert [p.id for p in page_three] == [created[4].id]

    def test_date_filter_is_inclusive(self, pickup_points):
        base = datetime(2026, 5, 1)
        created = [
            pickup_points.create_pickup_point("Kazan", registration_date=base + timedelta(days=i))
            for i in range(4)
        ]

        items = pickup_points.list_pickup_points(
            start_date=base + timedelta(days=1),
            end_date=base + timedelta(days=2),
        )

        assert [p.id for p in items] == [created[1].id, created[2].id]


class TestDetailedListing:

    def test_receptions_and_products_nested(self, pickup_points, receptions, products, moscow):
        first = receptions.open_reception(moscow.id)
        products.add_product(moscow.id, "electronics")
        receptions.close_reception(moscow.id)
        second = receptions.open_reception(moscow.id)
        p1 = products.add_product(moscow.id, "clothing")
        p2 = products.add_product(moscow.id, "footwear")

        [entry] = pickup_points.list_pickup_points_with_receptions()

        assert entry["pvz"]["id"] == moscow.id
        by_id = {r["reception"]["id"]: r for r in entry["receptions"]}
        assert set(by_id) == {first.id, second.id}
        assert by_id[first.id]["reception"]["status"] == "closed"
        assert [p["id"] for p in by_id[second.id]["products"]] == [p1.id, p2.id]
        assert by_id[second.id]["products"][0]["receptionId"] == second.id

    def test_pickup_point_without_receptions(self, pickup_points, moscow):
        assert pickup_points.list_pickup_points_with_receptions() == [
            {"pvz": moscow.to_dict(), "receptions": []}
        ]
