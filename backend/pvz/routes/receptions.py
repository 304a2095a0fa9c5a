# Overview: Flask API routes for opening receptions.

from flask import Blueprint, request, jsonify

from ..container import get_services
from ..decorators import require_auth, require_role
from ..domain import ROLE_EMPLOYEE
from ..errors import ActiveReceptionExistsError, PickupPointNotFoundError


receptions_bp = Blueprint("receptions", __name__, url_prefix="/receptions")


@receptions_bp.post("")
@require_auth
@require_role(ROLE_EMPLOYEE)
def create_reception_route():
    """
    Open a reception.

    Request body:
    {
        "pvzId": "..."    // required
    }
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get("pvzId"), str) or not data["pvzId"]:
        return jsonify({"message": "Invalid request"}), 400

    try:
        reception = get_services().receptions.open_reception(data["pvzId"])
    except ActiveReceptionExistsError:
        return jsonify({"message": "Active reception exists"}), 400
    except PickupPointNotFoundError:
        return jsonify({"message": "Pickup point not found"}), 404

    return jsonify(reception.to_dict()), 201
