import secrets
from functools import wraps

from flask import current_app, request
from flask_login import current_user

from weekly_picks.exceptions import AuthError, ValidationError
from weekly_picks.models import Game

ADMIN_KEY_HEADER = "X-Admin-Key"


def has_admin_key():
    expected = current_app.config.get("ADMIN_API_KEY")
    supplied = request.headers.get(ADMIN_KEY_HEADER)
    if not expected or not supplied:
        return False
    return secrets.compare_digest(supplied.encode(), expected.encode())


def admin_required(f):
    """Allow the configured admin key or an authenticated admin user"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if has_admin_key():
            return f(*args, **kwargs)
        if current_user.is_authenticated and current_user.is_admin:
            return f(*args, **kwargs)

        current_app.logger.warning(
            f"Rejected admin request to {request.path} from {request.remote_addr}"
        )
        raise AuthError("Administrative credentials required")

    return decorated_function


def valid_week(f):
    """Reject week path parameters outside the regular season"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not Game.is_valid_week(kwargs.get("week")):
            raise ValidationError("Invalid week number")
        return f(*args, **kwargs)

    return decorated_function


def add_no_store_headers(f):
    """Mark per-user API responses as uncacheable"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        response = f(*args, **kwargs)
        if hasattr(response, "headers"):
            response.headers["Cache-Control"] = (
                "no-store, no-cache, must-revalidate, max-age=0"
            )
        return response

    return decorated_function
