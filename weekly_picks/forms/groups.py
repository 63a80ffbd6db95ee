import html

from flask_wtf import FlaskForm
from wtforms import DateTimeField, IntegerField, StringField, TextAreaField
from wtforms.validators import DataRequired, Length, NumberRange, Optional, Regexp


def sanitize_input(text):
    """Sanitize user input to prevent XSS"""
    if not text or not isinstance(text, str):
        return text
    return html.escape(text.strip())


CODE_VALIDATORS = [
    DataRequired(),
    Length(min=6, max=20, message="Code must be between 6 and 20 characters"),
    Regexp(
        r"^[A-Za-z0-9_-]+$",
        message="Code can only contain letters, numbers, underscores, and hyphens",
    ),
]


class CreateGroupForm(FlaskForm):
    name = StringField(
        "Group name",
        filters=[sanitize_input],
        validators=[
            DataRequired(),
            Length(
                min=3,
                max=100,
                message="Group name must be between 3 and 100 characters",
            ),
        ],
    )
    description = TextAreaField(
        "Description",
        filters=[sanitize_input],
        validators=[
            Optional(),
            Length(max=500, message="Description cannot exceed 500 characters"),
        ],
    )
    max_members = IntegerField(
        "Maximum members",
        name="maxMembers",
        validators=[
            Optional(),
            NumberRange(min=1, message="Maximum members must be at least 1"),
        ],
    )


class CreateGroupCodeForm(FlaskForm):
    code = StringField("Code", validators=CODE_VALIDATORS)
    group_id = IntegerField("Group ID", name="groupId", validators=[DataRequired()])
    max_usage = IntegerField(
        "Maximum usage",
        name="maxUsage",
        validators=[
            Optional(),
            NumberRange(min=1, message="Maximum usage must be at least 1"),
        ],
    )
    expires_at = DateTimeField(
        "Expires at",
        name="expiresAt",
        format=[
            "%Y-%m-%dT%H:%M:%S.%fZ",
            "%Y-%m-%dT%H:%M:%SZ",
            "%Y-%m-%dT%H:%M:%S",
            "%Y-%m-%d",
        ],
        validators=[Optional()],
    )


class QuickSetupForm(FlaskForm):
    group_name = StringField(
        "Group name",
        name="groupName",
        filters=[sanitize_input],
        validators=[DataRequired(), Length(min=3, max=100)],
    )
    group_description = TextAreaField(
        "Description",
        name="groupDescription",
        filters=[sanitize_input],
        validators=[Optional(), Length(max=500)],
    )
    code = StringField("Code", validators=CODE_VALIDATORS)
    max_members = IntegerField(
        "Maximum members",
        name="maxMembers",
        validators=[Optional(), NumberRange(min=1)],
    )
    max_usage = IntegerField(
        "Maximum usage",
        name="maxUsage",
        validators=[Optional(), NumberRange(min=1)],
    )
