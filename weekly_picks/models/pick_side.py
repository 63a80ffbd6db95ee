import enum


class PickSide(enum.Enum):
    """Which of a game's two teams a pick backs"""

    HOME = "home"
    AWAY = "away"

    @classmethod
    def parse(cls, value):
        """Return the side named by value, or None if it names neither"""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None
