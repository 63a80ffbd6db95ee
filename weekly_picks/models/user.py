from datetime import datetime, timezone

from flask import current_app
from flask_login import UserMixin
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from weekly_picks import db

AUTH_TOKEN_SALT = "weekly-picks-auth"


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(30), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # Group membership (one group per user, fixed at registration)
    group_id = db.Column(db.Integer, db.ForeignKey("groups.id"), nullable=False)

    # Account status
    is_active = db.Column(db.Boolean, default=True)
    is_admin = db.Column(db.Boolean, default=False)  # Site-wide admin privileges

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    last_login = db.Column(db.DateTime)

    # Relationships
    picks = db.relationship(
        "Pick", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.Index("idx_user_group", "group_id"),
        db.Index("idx_user_active_status", "is_active"),
    )

    def __repr__(self):
        return f"<User {self.username}>"

    def set_password(self, password):
        """Set password hash"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Check password against hash"""
        return check_password_hash(self.password_hash, password)

    @staticmethod
    def _token_serializer():
        return URLSafeTimedSerializer(
            current_app.config["SECRET_KEY"], salt=AUTH_TOKEN_SALT
        )

    def generate_auth_token(self):
        """Signed bearer token carrying the user id"""
        return User._token_serializer().dumps({"user_id": self.id})

    @staticmethod
    def verify_auth_token(token):
        """Return the active user a token was issued for, or None"""
        max_age = current_app.config.get("AUTH_TOKEN_MAX_AGE", 7 * 24 * 3600)
        try:
            data = User._token_serializer().loads(token, max_age=max_age)
        except SignatureExpired:
            current_app.logger.info("Rejected expired auth token")
            return None
        except BadSignature:
            return None

        user_id = data.get("user_id") if isinstance(data, dict) else None
        if user_id is None:
            return None

        user = db.session.get(User, user_id)
        if user is None or not user.is_active:
            return None
        return user

    def update_last_login(self):
        """Update last login timestamp"""
        self.last_login = datetime.now(timezone.utc)
        db.session.commit()

    def to_dict(self):
        """Convert user to dictionary for API responses"""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "groupId": self.group_id,
            "isAdmin": bool(self.is_admin),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
