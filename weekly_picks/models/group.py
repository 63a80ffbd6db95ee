from datetime import datetime, timezone

from weekly_picks import db


class Group(db.Model):
    __tablename__ = "groups"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)

    # Group settings
    is_active = db.Column(db.Boolean, default=True)
    max_members = db.Column(db.Integer)  # None = unlimited

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    members = db.relationship("User", backref="group", lazy="dynamic")
    codes = db.relationship(
        "GroupCode", backref="group", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.Index("idx_group_name", "name"),
        db.Index("idx_group_active", "is_active"),
        db.CheckConstraint(
            "max_members IS NULL OR max_members >= 1", name="positive_max_members"
        ),
    )

    def __repr__(self):
        return f"<Group {self.name}>"

    def get_active_members(self):
        """Get all active members of the group"""
        from .user import User

        return self.members.filter_by(is_active=True).order_by(User.id).all()

    def get_member_count(self):
        """Get count of active members"""
        return self.members.filter_by(is_active=True).count()

    def is_full(self):
        """Check if group has reached maximum capacity"""
        if self.max_members is None:
            return False
        return self.get_member_count() >= self.max_members

    def to_dict(self, include_members=False, include_codes=False):
        """Convert group to dictionary for API responses"""
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "isActive": self.is_active,
            "maxMembers": self.max_members,
            "memberCount": self.get_member_count(),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

        if include_members:
            data["members"] = [
                {
                    "id": member.id,
                    "username": member.username,
                    "email": member.email,
                    "createdAt": (
                        member.created_at.isoformat() if member.created_at else None
                    ),
                }
                for member in self.get_active_members()
            ]

        if include_codes:
            data["codes"] = [code.to_dict() for code in self.codes.all()]

        return data
