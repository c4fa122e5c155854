from .space import Space
from .user import User
from .match import Match, MatchStatus, ResultType, OPEN_STATUSES, RESULTED_STATUSES
from .prediction import Prediction
from .session import AuthSession

__all__ = [
    "Space",
    "User",
    "Match",
    "MatchStatus",
    "ResultType",
    "OPEN_STATUSES",
    "RESULTED_STATUSES",
    "Prediction",
    "AuthSession",
]
