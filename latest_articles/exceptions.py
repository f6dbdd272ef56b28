"""
Exceptions raised by the latest articles block and its collaborators.
"""
from typing import Dict, Optional


class LatestArticlesError(Exception):
    """Base class for all errors raised by this package."""


class StoreError(LatestArticlesError):
    """Raised when a content store query is invalid or the storage fails."""


class ArticleNotFoundError(StoreError):
    """Raised when an article id cannot be loaded from the store."""

    def __init__(self, article_id):
        super().__init__(f"Article {article_id} not found")
        self.article_id = article_id


class ConfigFormError(LatestArticlesError):
    """Raised when a block configuration form submission is rejected."""

    def __init__(self, errors: Optional[Dict[str, str]] = None):
        self.errors = errors or {}
        message = "; ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(message or "Invalid form submission")
