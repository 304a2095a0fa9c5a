"""
HTTP API tests.

Verifies:
- Unauthenticated requests return 401
- Role checks return 403
- The full pickup point scenario: create, open, log products, LIFO delete, close
- Error bodies are {"message": ...} with the mapped status codes
"""

import pytest

from conftest import auth_headers, get_dummy_token


# =============================================================================
# UNAUTHENTICATED ACCESS - 401
# =============================================================================


class TestUnauthenticatedAccess:

    @pytest.mark.parametrize(
        "method,path",
        [
            ("POST", "/pvz"),
            ("GET", "/pvz"),
            ("POST", "/receptions"),
            ("POST", "/products"),
            ("POST", "/pvz/abc/close_last_reception"),
            ("POST", "/pvz/abc/delete_last_product"),
            ("POST", "/logout"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"
        assert resp.json["message"] == "Missing Authorization header"

    def test_malformed_header(self, client, db_session):
        resp = client.get("/pvz", headers={"Authorization": "Token abc"})
        assert resp.status_code == 401
        assert resp.json["message"] == "Invalid Authorization header"

    def test_unknown_token(self, client, db_session):
        resp = client.get("/pvz", headers=auth_headers("f" * 64))
        assert resp.status_code == 401
        assert resp.json["message"] == "Invalid token"


# =============================================================================
# ROLE CHECKS - 403
# =============================================================================


class TestRoleChecks:

    def test_employee_cannot_create_pvz(self, client, employee_headers):
        resp = client.post("/pvz", json={"city": "Moscow"}, headers=employee_headers)
        assert resp.status_code == 403
        assert resp.json["message"] == "Access denied"

    def test_moderator_cannot_open_reception(self, client, moderator_headers):
        resp = client.post("/receptions", json={"pvzId": "x"}, headers=moderator_headers)
        assert resp.status_code == 403

    def test_moderator_cannot_add_product(self, client, moderator_headers):
        resp = client.post("/products", json={"pvzId": "x", "type": "clothing"}, headers=moderator_headers)
        assert resp.status_code == 403

    def test_both_roles_can_list(self, client, employee_headers, moderator_headers):
        assert client.get("/pvz", headers=employee_headers).status_code == 200
        assert client.get("/pvz", headers=moderator_headers).status_code == 200


# =============================================================================
# AUTH ENDPOINTS
# =============================================================================


class TestAuthEndpoints:

    def test_dummy_login_invalid_role(self, client, db_session):
        resp = client.post("/dummyLogin", json={"role": "admin"})
        assert resp.status_code == 400
        assert resp.json["message"] == "Invalid role"

    def test_register_login_logout(self, client, db_session):
        resp = client.post("/register", json={
            "email": "employee@pvz.local",
            "password": "Password123",
            "role": "employee",
        })
        assert resp.status_code == 201
        assert resp.json["email"] == "employee@pvz.local"
        assert "password" not in resp.json and "passwordHash" not in resp.json

        resp = client.post("/register", json={
            "email": "employee@pvz.local",
            "password": "Password123",
            "role": "employee",
        })
        assert resp.status_code == 400
        assert resp.json["message"] == "Email already exists"

        resp = client.post("/login", json={"email": "employee@pvz.local", "password": "wrong-password"})
        assert resp.status_code == 401
        assert resp.json["message"] == "Invalid credentials"

        resp = client.post("/login", json={"email": "employee@pvz.local", "password": "Password123"})
        assert resp.status_code == 200
        headers = auth_headers(resp.json["token"])

        assert client.post("/logout", headers=headers).status_code == 200
        assert client.get("/pvz", headers=headers).status_code == 401

    def test_register_short_password(self, client, db_session):
        resp = client.post("/register", json={"email": "a@b.c", "password": "short", "role": "moderator"})
        assert resp.status_code == 400

    def test_register_missing_body(self, client, db_session):
        resp = client.post("/register", data="not json")
        assert resp.status_code == 400
        assert resp.json["message"] == "Invalid request"


# =============================================================================
# PICKUP POINT SCENARIO
# =============================================================================


class TestPickupPointScenario:

    def test_full_reception_lifecycle(self, client, db_session):
        moderator = auth_headers(get_dummy_token(client, "moderator"))
        employee = auth_headers(get_dummy_token(client, "employee"))

        resp = client.post("/pvz", json={"city": "Moscow"}, headers=moderator)
        assert resp.status_code == 201
        pvz_id = resp.json["id"]
        assert resp.json["city"] == "Moscow"
        assert resp.json["registrationDate"].endswith("Z")

        # No products before a reception is open
        resp = client.post("/products", json={"pvzId": pvz_id, "type": "electronics"}, headers=employee)
        assert resp.status_code == 400
        assert resp.json["message"] == "No active reception"

        resp = client.post("/receptions", json={"pvzId": pvz_id}, headers=employee)
        assert resp.status_code == 201
        reception_id = resp.json["id"]
        assert resp.json["status"] == "in_progress"

        resp = client.post("/receptions", json={"pvzId": pvz_id}, headers=employee)
        assert resp.status_code == 400
        assert resp.json["message"] == "Active reception exists"

        product_ids = []
        for product_type in ("electronics", "clothing", "footwear"):
            resp = client.post("/products", json={"pvzId": pvz_id, "type": product_type}, headers=employee)
            assert resp.status_code == 201
            assert resp.json["receptionId"] == reception_id
            product_ids.append(resp.json["id"])

        resp = client.post(f"/pvz/{pvz_id}/delete_last_product", headers=employee)
        assert resp.status_code == 200
        assert resp.json["product"]["id"] == product_ids[-1]

        resp = client.post(f"/pvz/{pvz_id}/close_last_reception", headers=employee)
        assert resp.status_code == 200
        assert resp.json["id"] == reception_id
        assert resp.json["status"] == "closed"

        resp = client.post(f"/pvz/{pvz_id}/close_last_reception", headers=employee)
        assert resp.status_code == 400
        assert resp.json["message"] == "No active reception"

        resp = client.post(f"/pvz/{pvz_id}/delete_last_product", headers=employee)
        assert resp.status_code == 400

        resp = client.get("/pvz", headers=moderator)
        assert resp.status_code == 200
        [entry] = resp.json
        assert entry["pvz"]["id"] == pvz_id
        [reception] = entry["receptions"]
        assert reception["reception"]["status"] == "closed"
        assert [p["id"] for p in reception["products"]] == product_ids[:2]

    def test_invalid_city(self, client, moderator_headers):
        resp = client.post("/pvz", json={"city": "Paris"}, headers=moderator_headers)
        assert resp.status_code == 400
        assert resp.json["message"] == "City not allowed"

    def test_invalid_product_type(self, client, employee_headers):
        resp = client.post("/products", json={"pvzId": "x", "type": "food"}, headers=employee_headers)
        assert resp.status_code == 400
        assert resp.json["message"] == "Invalid product type"

    def test_reception_for_unknown_pvz(self, client, employee_headers):
        resp = client.post("/receptions", json={"pvzId": "missing"}, headers=employee_headers)
        assert resp.status_code == 404

    def test_delete_from_empty_reception(self, client, moderator_headers, employee_headers):
        pvz_id = client.post("/pvz", json={"city": "Kazan"}, headers=moderator_headers).json["id"]
        client.post("/receptions", json={"pvzId": pvz_id}, headers=employee_headers)

        resp = client.post(f"/pvz/{pvz_id}/delete_last_product", headers=employee_headers)
        assert resp.status_code == 400
        assert resp.json["message"] == "No products in reception"

    @pytest.mark.parametrize(
        "path,body,role",
        [
            ("/products", {"pvzId": "x", "type": ["electronics"]}, "employee"),
            ("/products", {"pvzId": {"a": 1}, "type": "electronics"}, "employee"),
            ("/products", {"pvzId": 42, "type": "electronics"}, "employee"),
            ("/receptions", {"pvzId": ["x"]}, "employee"),
            ("/pvz", {"city": ["Moscow"]}, "moderator"),
            ("/pvz", {"city": "Moscow", "id": {"x": 1}}, "moderator"),
        ],
    )
    def test_wrong_json_types_are_rejected(self, client, db_session, path, body, role):
        headers = auth_headers(get_dummy_token(client, role))

        resp = client.post(path, json=body, headers=headers)

        assert resp.status_code == 400
        assert resp.json["message"] == "Invalid request"

    @pytest.mark.parametrize(
        "path,body",
        [
            ("/dummyLogin", {"role": ["employee"]}),
            ("/register", {"email": "a@b.c", "password": "Password123", "role": ["employee"]}),
            ("/register", {"email": ["a@b.c"], "password": "Password123", "role": "employee"}),
            ("/login", {"email": {"a": 1}, "password": "Password123"}),
        ],
    )
    def test_wrong_json_types_on_auth_routes(self, client, db_session, path, body):
        resp = client.post(path, json=body)

        assert resp.status_code == 400

    def test_active_reception_lookup(self, client, moderator_headers, employee_headers):
        pvz_id = client.post("/pvz", json={"city": "Moscow"}, headers=moderator_headers).json["id"]

        resp = client.get(f"/pvz/{pvz_id}/receptions/active", headers=moderator_headers)
        assert resp.status_code == 400

        opened = client.post("/receptions", json={"pvzId": pvz_id}, headers=employee_headers).json
        resp = client.get(f"/pvz/{pvz_id}/receptions/active", headers=moderator_headers)
        assert resp.status_code == 200
        assert resp.json == opened

    def test_list_filters_and_paging(self, client, moderator_headers):
        for day in ("2026-01-01", "2026-02-01", "2026-03-01"):
            client.post(
                "/pvz",
                json={"city": "Kazan", "registrationDate": f"{day}T10:00:00Z"},
                headers=moderator_headers,
            )

        resp = client.get(
            "/pvz?startDate=2026-01-15T00:00:00Z&endDate=2026-03-01T10:00:00Z",
            headers=moderator_headers,
        )
        assert [e["pvz"]["registrationDate"] for e in resp.json] == [
            "2026-02-01T10:00:00Z",
            "2026-03-01T10:00:00Z",
        ]

        resp = client.get("/pvz?page=2&limit=2", headers=moderator_headers)
        assert len(resp.json) == 1

        resp = client.get("/pvz?limit=500", headers=moderator_headers)
        assert len(resp.json) == 3

    def test_list_invalid_date(self, client, employee_headers):
        resp = client.get("/pvz?startDate=yesterday", headers=employee_headers)
        assert resp.status_code == 400
        assert resp.json["message"] == "Invalid startDate format"


class TestSystem:

    def test_health(self, client, db_session):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json["store_backend"] == "sql"
        assert resp.json["checks"]["database"]["status"] == "healthy"

    def test_cli_creates_pickup_point(self, app, db_session):
        runner = app.test_cli_runner()

        result = runner.invoke(args=["pvz", "create", "--city", "Kazan"])
        assert result.exit_code == 0
        assert "Created pickup point" in result.output

        result = runner.invoke(args=["pvz", "list"])
        assert "Kazan" in result.output
        assert "no open reception" in result.output
