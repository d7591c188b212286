from survivor import db  # noqa: F401 - imported for model imports

from .match import Match
from .matchweek import Matchweek
from .pick import Pick
from .pick_history import PickHistory
from .team import Team
from .user import User

__all__ = [
    "User",
    "Team",
    "Matchweek",
    "Match",
    "Pick",
    "PickHistory",
]
