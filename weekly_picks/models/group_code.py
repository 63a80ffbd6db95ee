import logging
from datetime import datetime, timezone

from weekly_picks import db
from weekly_picks.exceptions import GroupFullError, InvalidGroupCode

logger = logging.getLogger(__name__)


class GroupCode(db.Model):
    __tablename__ = "group_codes"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(20), unique=True, nullable=False, index=True)
    group_id = db.Column(db.Integer, db.ForeignKey("groups.id"), nullable=False)

    # Status and limits
    is_active = db.Column(db.Boolean, default=True)
    usage_count = db.Column(db.Integer, default=0, nullable=False)
    max_usage = db.Column(db.Integer)  # None = unlimited
    expires_at = db.Column(db.DateTime)  # None = never

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.Index("idx_group_code_group", "group_id"),
        db.Index("idx_group_code_active", "is_active"),
    )

    def __repr__(self):
        return f"<GroupCode {self.code} group={self.group_id}>"

    def is_expired(self, now=None):
        """Check if the code has passed its expiry"""
        if self.expires_at is None:
            return False

        now = now or datetime.now(timezone.utc)
        expires_at = self.expires_at

        # If expires_at is timezone-naive, assume it's UTC
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)

        return now > expires_at

    def is_exhausted(self):
        return self.max_usage is not None and self.usage_count >= self.max_usage

    def is_valid(self, now=None):
        """Active, not expired, and below its usage cap"""
        is_valid = (
            bool(self.is_active) and not self.is_expired(now) and not self.is_exhausted()
        )
        logger.debug(
            f"GroupCode {self.code} validity check: active={self.is_active}, "
            f"usage={self.usage_count}/{self.max_usage}, expires_at={self.expires_at}, "
            f"valid={is_valid}"
        )
        return is_valid

    def redeem(self, now=None):
        """Check the code admits one more member and count the usage.

        Returns the group to join. Nothing is committed here; the caller
        commits together with the new user.
        """
        if not self.is_valid(now):
            raise InvalidGroupCode()

        group = self.group
        if not group.is_active:
            raise InvalidGroupCode("Group is no longer active")
        if group.is_full():
            raise GroupFullError(group.name)

        self.usage_count = (self.usage_count or 0) + 1
        return group

    @staticmethod
    def get_by_code(code):
        return GroupCode.query.filter_by(code=code).first()

    def to_dict(self):
        """Convert code to dictionary for API responses"""
        return {
            "id": self.id,
            "code": self.code,
            "groupId": self.group_id,
            "isActive": self.is_active,
            "usageCount": self.usage_count,
            "maxUsage": self.max_usage,
            "expiresAt": self.expires_at.isoformat() if self.expires_at else None,
            "isValid": self.is_valid(),
        }
