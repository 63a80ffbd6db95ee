from flask import request
from werkzeug.datastructures import MultiDict

from weekly_picks.exceptions import ValidationError


def get_json_body():
    """Request body as a dict, or a ValidationError"""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def load_json_form(form_class):
    """Bind a form to the scalar values of the JSON request body"""
    payload = get_json_body()
    formdata = MultiDict(
        {
            key: str(value)
            for key, value in payload.items()
            if value is not None and not isinstance(value, (dict, list))
        }
    )
    return form_class(formdata=formdata)


def first_form_error(form):
    """Human-readable message for the first failing field"""
    for field_name, messages in form.errors.items():
        if messages:
            field = getattr(form, field_name, None)
            label = field.label.text if field is not None else field_name
            message = messages[0]
            if message == "This field is required.":
                return f"{label} is required"
            return message
    return "Invalid request"


def validate_json_form(form_class):
    """Load and validate a form, raising ValidationError on the first problem"""
    form = load_json_form(form_class)
    if not form.validate():
        raise ValidationError(first_form_error(form))
    return form
