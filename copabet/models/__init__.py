from copabet import db  # noqa: F401 - imported for model imports

from .bet import Bet
from .match import Match
from .user import ROLE_ADMIN, ROLE_USER, User

__all__ = [
    "User",
    "Match",
    "Bet",
    "ROLE_ADMIN",
    "ROLE_USER",
]
