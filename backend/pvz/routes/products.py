# Overview: Flask API routes for logging products into the open reception.

from flask import Blueprint, request, jsonify

from ..container import get_services
from ..decorators import require_auth, require_role
from ..domain import ROLE_EMPLOYEE
from ..errors import InvalidProductTypeError, NoActiveReceptionError


products_bp = Blueprint("products", __name__, url_prefix="/products")


@products_bp.post("")
@require_auth
@require_role(ROLE_EMPLOYEE)
def create_product_route():
    """
    Request body:
    {
        "type": "electronics",   // required: electronics, clothing, footwear
        "pvzId": "..."           // required
    }
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"message": "Invalid request"}), 400

    pvz_id = data.get("pvzId")
    product_type = data.get("type")
    if not pvz_id or not isinstance(pvz_id, str):
        return jsonify({"message": "Invalid request"}), 400
    if product_type is not None and not isinstance(product_type, str):
        return jsonify({"message": "Invalid request"}), 400

    try:
        product = get_services().products.add_product(pvz_id, product_type)
    except InvalidProductTypeError:
        return jsonify({"message": "Invalid product type"}), 400
    except NoActiveReceptionError:
        return jsonify({"message": "No active reception"}), 400

    return jsonify(product.to_dict()), 201
