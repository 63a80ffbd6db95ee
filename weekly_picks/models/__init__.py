from weekly_picks import db  # noqa: F401 - imported for model imports

from .game import Game
from .group import Group
from .group_code import GroupCode
from .pick import Pick
from .pick_side import PickSide
from .user import User

__all__ = [
    "User",
    "Group",
    "GroupCode",
    "Game",
    "Pick",
    "PickSide",
]
