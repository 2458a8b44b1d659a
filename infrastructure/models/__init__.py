"""Infrastructure models package exports."""
from .base import Base, metadata
from .content import CommentModel, FavoriteModel, NewsArticleModel
from .match import MatchEventModel, MatchModel, MatchPlayerStatsModel
from .team import PlayerModel, TeamModel
from .user import UserModel

__all__ = [
    "Base",
    "metadata",
    "UserModel",
    "TeamModel",
    "PlayerModel",
    "MatchModel",
    "MatchEventModel",
    "MatchPlayerStatsModel",
    "NewsArticleModel",
    "CommentModel",
    "FavoriteModel",
]
