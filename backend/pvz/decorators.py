# Overview: Request decorators for API routes (bearer authentication and role checks).

from functools import wraps
from flask import request, jsonify, g

from .container import get_services


def _is_authenticated() -> bool:
    return hasattr(g, 'session_context')


def require_auth(f):
    """
    Require a valid bearer token.

    Sets the following Flask g attributes:
    - g.session_context: SessionContext (role, user_id, email)
    - g.token: the raw bearer token (used by logout)

    Returns 401 if:
    - No Authorization header or not a Bearer header
    - Unknown, expired or revoked token
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header:
            return jsonify({"message": "Missing Authorization header"}), 401

        parts = auth_header.split(" ")
        if len(parts) != 2 or parts[0].lower() != "bearer":
            return jsonify({"message": "Invalid Authorization header"}), 401

        token = parts[1]
        context = get_services().identity.validate_token(token)

        if not context:
            return jsonify({"message": "Invalid token"}), 401

        g.session_context = context
        g.token = token

        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """
    Require the authenticated identity to hold one of the given roles.

    Must be stacked below @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"message": "Authentication required"}), 401

            if g.session_context.role not in roles:
                return jsonify({"message": "Access denied"}), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
