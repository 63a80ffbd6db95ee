"""
Domain errors for the Weekly Picks application.

Route handlers let these propagate; ``register_error_handlers`` turns them
into JSON responses carrying ``status_code``.
"""


class PicksError(Exception):
    """Base class for errors that map onto an HTTP response"""

    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {"message": self.message}


class ValidationError(PicksError):
    """Missing or malformed input"""


class DeadlineClosed(ValidationError):
    def __init__(self, week):
        super().__init__("Picks deadline has passed")
        self.week = week


class InvalidGame(ValidationError):
    def __init__(self, message="One or more invalid games"):
        super().__init__(message)


class InvalidSelection(ValidationError):
    """Selected team does not belong to the game it was submitted for"""


class InvalidGroupCode(ValidationError):
    def __init__(self, message="Invalid or expired group code"):
        super().__init__(message)


class GroupFullError(ValidationError):
    def __init__(self, group_name):
        super().__init__(f"Group '{group_name}' is full")


class ConflictError(PicksError):
    """Duplicate value for a unique field"""


class AuthError(PicksError):
    status_code = 401


class NotFoundError(PicksError):
    status_code = 404


class UpstreamUnavailable(Exception):
    """Schedule feed could not be reached or returned unusable data.

    Never surfaced to API callers; the schedule provider recovers from it.
    """
