# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

- POST /dummyLogin: token for a role, no account required
- POST /register:   create an employee or moderator account
- POST /login:      email + password -> bearer token
- POST /logout:     revoke the presented bearer token
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..container import get_services
from ..decorators import require_auth
from ..errors import (
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRoleError,
    PasswordValidationError,
)


auth_bp = Blueprint("auth", __name__)


def _json_body() -> dict | None:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


@auth_bp.post("/dummyLogin")
def dummy_login_route():
    data = _json_body()
    if data is None:
        return jsonify({"message": "Invalid request"}), 400

    role = data.get("role")
    if not isinstance(role, str):
        return jsonify({"message": "Invalid role"}), 400

    try:
        token = get_services().identity.dummy_login(role)
    except InvalidRoleError:
        return jsonify({"message": "Invalid role"}), 400

    return jsonify({"token": token}), 200


@auth_bp.post("/register")
def register_route():
    """
    Request body:
    {
        "email": "user@example.com",
        "password": "...",          // at least 8 characters
        "role": "employee"          // employee | moderator
    }

    Returns:
        201 {id, email, role}
    """
    data = _json_body()
    if data is None:
        return jsonify({"message": "Invalid request"}), 400

    email = data.get("email")
    password = data.get("password")
    role = data.get("role")

    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        return jsonify({"message": "Invalid request"}), 400
    if not isinstance(role, str):
        return jsonify({"message": "Invalid role"}), 400

    try:
        user = get_services().identity.register_user(email, password, role)
    except InvalidRoleError:
        return jsonify({"message": "Invalid role"}), 400
    except EmailExistsError:
        return jsonify({"message": "Email already exists"}), 400
    except PasswordValidationError as exc:
        return jsonify({"message": str(exc)}), 400

    return jsonify(user.to_dict()), 201


@auth_bp.post("/login")
def login_route():
    data = _json_body()
    if data is None:
        return jsonify({"message": "Invalid request"}), 400

    email = data.get("email")
    password = data.get("password")
    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        return jsonify({"message": "Invalid request"}), 400

    try:
        _user, token = get_services().identity.login(email, password)
    except InvalidCredentialsError:
        return jsonify({"message": "Invalid credentials"}), 401

    return jsonify({"token": token}), 200


@auth_bp.post("/logout")
@require_auth
def logout_route():
    revoked = get_services().identity.logout(g.token)
    if not revoked:
        current_app.logger.warning("Logout for a token that was already revoked")
        return jsonify({"message": "Invalid token"}), 401

    return jsonify({"message": "Logout successful"}), 200
