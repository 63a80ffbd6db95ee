import logging

from flask import jsonify, request
from flask_login import current_user, login_required
from sqlalchemy.exc import IntegrityError

from weekly_picks import db, limiter, login_manager
from weekly_picks.exceptions import (
    AuthError,
    ConflictError,
    InvalidGroupCode,
    ValidationError,
)
from weekly_picks.forms import validate_json_form
from weekly_picks.forms.auth import LoginForm, RegistrationForm
from weekly_picks.models import GroupCode, User
from weekly_picks.routes.auth import bp

logger = logging.getLogger(__name__)


@login_manager.request_loader
def load_user_from_request(req):
    """Resolve ``Authorization: Bearer <token>`` to a user"""
    header = req.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return User.verify_auth_token(token.strip())


@login_manager.unauthorized_handler
def unauthorized():
    raise AuthError("No valid authentication token provided")


@bp.route("/register", methods=["POST"])
@limiter.limit("5 per hour")
def register():
    form = validate_json_form(RegistrationForm)

    group_code = GroupCode.get_by_code(form.group_code.data)
    if group_code is None:
        raise InvalidGroupCode()

    # Raises when the code is spent/expired or the group is full
    group = group_code.redeem()

    user = User(
        username=form.username.data,
        email=form.email.data,
        group_id=group.id,
    )
    user.set_password(form.password.data)
    db.session.add(user)

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Username or email already registered")

    logger.info(f"Registered user {user.username} into group {group.name}")

    return (
        jsonify(
            {
                "message": "User created successfully",
                "token": user.generate_auth_token(),
                "user": user.to_dict(),
                "group": group.to_dict(),
            }
        ),
        201,
    )


@bp.route("/login", methods=["POST"])
@limiter.limit("10 per minute")
def login():
    form = validate_json_form(LoginForm)

    user = User.query.filter_by(email=form.email.data).first()
    if user is None or not user.check_password(form.password.data):
        logger.info(f"Failed login for {form.email.data} from {request.remote_addr}")
        raise ValidationError("Invalid credentials")

    if not user.is_active:
        raise ValidationError("Your account has been deactivated")

    user.update_last_login()

    return jsonify(
        {
            "message": "Login successful",
            "token": user.generate_auth_token(),
            "user": user.to_dict(),
        }
    )


@bp.route("/profile")
@login_required
def profile():
    data = current_user.to_dict()
    data["group"] = current_user.group.to_dict() if current_user.group else None
    return jsonify(data)
