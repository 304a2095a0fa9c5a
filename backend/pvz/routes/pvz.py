# Overview: Flask API routes for pickup points and their reception/product actions.

"""
Pickup Point Routes

SECURITY: All routes require authentication.
- Creating a pickup point requires the moderator role
- Listing and the active reception lookup are open to employees and moderators
- Closing a reception and deleting the last product require the employee role
"""

from flask import Blueprint, request, jsonify

from ..container import get_services
from ..decorators import require_auth, require_role
from ..domain import ROLE_EMPLOYEE, ROLE_MODERATOR
from ..errors import (
    InvalidCityError,
    NoActiveReceptionError,
    ProductDeleteConflictError,
    ProductNotFoundError,
)
from pvz.time_utils import parse_iso_datetime


pvz_bp = Blueprint("pvz", __name__, url_prefix="/pvz")


@pvz_bp.post("")
@require_auth
@require_role(ROLE_MODERATOR)
def create_pvz_route():
    """
    Request body:
    {
        "city": "Moscow",             // required: Moscow, Saint Petersburg, Kazan
        "id": "...",                  // optional, generated if absent
        "registrationDate": "..."     // optional, ISO-8601, defaults to now
    }
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get("city"), str) or not data["city"]:
        return jsonify({"message": "Invalid request"}), 400
    if data.get("id") is not None and not isinstance(data["id"], str):
        return jsonify({"message": "Invalid request"}), 400

    registration_date = None
    if data.get("registrationDate"):
        if not isinstance(data["registrationDate"], str):
            return jsonify({"message": "Invalid registrationDate format"}), 400
        registration_date = parse_iso_datetime(data["registrationDate"])
        if registration_date is None:
            return jsonify({"message": "Invalid registrationDate format"}), 400

    try:
        pvz = get_services().pickup_points.create_pickup_point(
            data["city"],
            pvz_id=data.get("id") or None,
            registration_date=registration_date,
        )
    except InvalidCityError:
        return jsonify({"message": "City not allowed"}), 400

    return jsonify(pvz.to_dict()), 201


@pvz_bp.get("")
@require_auth
@require_role(ROLE_EMPLOYEE, ROLE_MODERATOR)
def list_pvz_route():
    """
    List pickup points with their receptions and products.

    Query parameters:
    - startDate: registrationDate >= startDate (ISO-8601)
    - endDate: registrationDate <= endDate (ISO-8601)
    - page: 1-based page number (default: 1)
    - limit: page size 1..30 (default: 10)
    """
    start_date_str = request.args.get("startDate")
    end_date_str = request.args.get("endDate")
    page = request.args.get("page", 1, type=int)
    limit = request.args.get("limit", 10, type=int)

    start_date = None
    end_date = None
    if start_date_str:
        start_date = parse_iso_datetime(start_date_str)
        if start_date is None:
            return jsonify({"message": "Invalid startDate format"}), 400
    if end_date_str:
        end_date = parse_iso_datetime(end_date_str)
        if end_date is None:
            return jsonify({"message": "Invalid endDate format"}), 400

    items = get_services().pickup_points.list_pickup_points_with_receptions(
        page=page,
        limit=limit,
        start_date=start_date,
        end_date=end_date,
    )
    return jsonify(items), 200


@pvz_bp.post("/<pvz_id>/close_last_reception")
@require_auth
@require_role(ROLE_EMPLOYEE)
def close_last_reception_route(pvz_id: str):
    try:
        reception = get_services().receptions.close_reception(pvz_id)
    except NoActiveReceptionError:
        return jsonify({"message": "No active reception"}), 400

    return jsonify(reception.to_dict()), 200


@pvz_bp.post("/<pvz_id>/delete_last_product")
@require_auth
@require_role(ROLE_EMPLOYEE)
def delete_last_product_route(pvz_id: str):
    try:
        product = get_services().products.delete_last_product(pvz_id)
    except NoActiveReceptionError:
        return jsonify({"message": "No active reception"}), 400
    except ProductNotFoundError:
        return jsonify({"message": "No products in reception"}), 400
    except ProductDeleteConflictError:
        return jsonify({"message": "Product was already removed"}), 409

    return jsonify({"message": "Product deleted", "product": product.to_dict()}), 200


@pvz_bp.get("/<pvz_id>/receptions/active")
@require_auth
@require_role(ROLE_EMPLOYEE, ROLE_MODERATOR)
def get_active_reception_route(pvz_id: str):
    try:
        reception = get_services().receptions.get_active_reception(pvz_id)
    except NoActiveReceptionError:
        return jsonify({"message": "No active reception"}), 400

    return jsonify(reception.to_dict()), 200
