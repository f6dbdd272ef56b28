"""
Article data model.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

ARTICLE_TYPE = "article"

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

@dataclass
class Article:
    """
    Represents a content item as stored by a content store.
    """
    title: str
    type: str = ARTICLE_TYPE
    status: bool = True  # True when published
    created: datetime = field(default_factory=utcnow)
    langcode: str = "en"
    id: Optional[int] = None

    @property
    def url(self) -> str:
        """Canonical path of the article."""
        return f"/node/{self.id}"
