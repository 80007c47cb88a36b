"""Models package - SQLModel database models."""

from techfeed.models.article import Article
from techfeed.models.favorite_source import FavoriteSource
from techfeed.models.read_article import ReadArticle
from techfeed.models.source import Source, SourceKind
from techfeed.models.user import User

__all__ = ["Source", "SourceKind", "Article", "User", "ReadArticle", "FavoriteSource"]
