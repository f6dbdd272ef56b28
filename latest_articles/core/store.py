"""
Content stores for the latest articles block.

A store answers two questions: which article ids match a filter (in a given
order, up to a limit) and what a single article looks like. The block only
ever reads from a store; ``add`` and ``delete`` exist for seeding content.
"""
import sqlite3
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from latest_articles.core.article import Article
from latest_articles.exceptions import ArticleNotFoundError, StoreError

logger = logging.getLogger(__name__)

# Fields that may appear in query conditions and sorts
FIELDS = ("id", "title", "type", "status", "created", "langcode")
DIRECTIONS = ("ASC", "DESC")

AccessHandler = Callable[[Article], bool]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ContentStore(ABC):
    """
    Base class for content stores.

    Subclasses implement the raw selection and loading; this class validates
    queries and applies the optional access handler.
    """
    def __init__(self, access_handler: Optional[AccessHandler] = None):
        """
        Initialize the store.

        Args:
            access_handler: Callable deciding whether an article may be listed.
                Only consulted by queries that request access checking.
        """
        self.access_handler = access_handler

    def query(
        self,
        conditions: Dict[str, Any],
        sort: Tuple[str, str] = ("created", "DESC"),
        limit: Optional[int] = None,
        access_check: bool = True,
    ) -> List[int]:
        """
        Find article ids matching all conditions.

        Args:
            conditions: Field to value equality conditions
            sort: (field, direction) pair, direction is ASC or DESC
            limit: Maximum number of ids to return (None = no limit)
            access_check: Filter ids through the access handler, if any

        Returns:
            Ordered list of article ids
        """
        conditions = self._normalize_conditions(conditions)
        sort_field, direction = sort
        direction = direction.upper()
        if sort_field not in FIELDS:
            raise StoreError(f"Unknown sort field: {sort_field}")
        if direction not in DIRECTIONS:
            raise StoreError(f"Unknown sort direction: {sort[1]}")
        if limit is not None and limit < 0:
            raise StoreError(f"Invalid query limit: {limit}")

        if access_check and self.access_handler is not None:
            ids = [
                article_id
                for article_id in self._select(conditions, (sort_field, direction), None)
                if self.access_handler(self.load(article_id))
            ]
            return ids if limit is None else ids[:limit]

        return self._select(conditions, (sort_field, direction), limit)

    @staticmethod
    def _normalize_conditions(conditions: Dict[str, Any]) -> Dict[str, Any]:
        normalized = {}
        for name, value in conditions.items():
            if name not in FIELDS:
                raise StoreError(f"Unknown condition field: {name}")
            if name == "status":
                value = bool(value)
            elif name == "created":
                value = _as_utc(value)
            normalized[name] = value
        return normalized

    @abstractmethod
    def _select(self, conditions: Dict[str, Any], sort: Tuple[str, str], limit: Optional[int]) -> List[int]:
        """Return ids matching validated conditions, sorted, up to limit."""

    @abstractmethod
    def load(self, article_id: int) -> Article:
        """Load a single article, raising ArticleNotFoundError if missing."""

    @abstractmethod
    def add(self, article: Article) -> Article:
        """Store an article and return it with its id assigned."""

    @abstractmethod
    def delete(self, article_id: int) -> None:
        """Remove an article, raising ArticleNotFoundError if missing."""


class InMemoryContentStore(ContentStore):
    """
    Content store holding articles in a dictionary.
    """
    def __init__(self, articles=(), access_handler: Optional[AccessHandler] = None):
        super().__init__(access_handler)
        self._articles: Dict[int, Article] = {}
        self._next_id = 1
        for article in articles:
            self.add(article)

    def _select(self, conditions, sort, limit):
        matches = [
            article for article in self._articles.values()
            if all(getattr(article, name) == value for name, value in conditions.items())
        ]
        sort_field, direction = sort
        # Ties on the sort field fall back to id in the same direction
        matches.sort(
            key=lambda a: (getattr(a, sort_field), a.id),
            reverse=direction == "DESC",
        )
        ids = [article.id for article in matches]
        return ids if limit is None else ids[:limit]

    def load(self, article_id: int) -> Article:
        try:
            return replace(self._articles[article_id])
        except KeyError:
            raise ArticleNotFoundError(article_id) from None

    def add(self, article: Article) -> Article:
        article_id = article.id if article.id is not None else self._next_id
        stored = replace(article, id=article_id, status=bool(article.status), created=_as_utc(article.created))
        self._articles[article_id] = stored
        self._next_id = max(self._next_id, article_id + 1)
        logger.debug(f"Stored article {article_id}: {stored.title}")
        return replace(stored)

    def delete(self, article_id: int) -> None:
        if self._articles.pop(article_id, None) is None:
            raise ArticleNotFoundError(article_id)

    def __len__(self):
        return len(self._articles)


class SqliteContentStore(ContentStore):
    """
    Content store backed by a SQLite database file.
    """
    def __init__(self, db_path: str = "content.db", access_handler: Optional[AccessHandler] = None):
        super().__init__(access_handler)
        self.db_path = Path(db_path)
        self._init_db()

    @contextmanager
    def _connection(self, action: str):
        """
        Open a connection for one operation, committing on success.

        Args:
            action: Description of the operation, used in error messages

        Raises:
            StoreError: If SQLite fails while opening or using the database
        """
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open content store {self.db_path}: {e}") from e
        try:
            with conn:
                yield conn
        except sqlite3.Error as e:
            raise StoreError(f"{action} failed on {self.db_path}: {e}") from e
        finally:
            conn.close()

    def _init_db(self):
        """Initialize the SQLite database for content."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Cannot create directory for {self.db_path}: {e}") from e
        with self._connection("Schema setup") as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS articles (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    type TEXT NOT NULL,
                    status INTEGER NOT NULL,
                    created REAL NOT NULL,
                    langcode TEXT NOT NULL
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS articles_status_type_created "
                "ON articles (status, type, created)"
            )

    @staticmethod
    def _to_column(name: str, value: Any) -> Any:
        if name == "status":
            return int(value)
        if name == "created":
            return value.timestamp()
        return value

    @staticmethod
    def _row_to_article(row) -> Article:
        article_id, title, type_, status, created, langcode = row
        return Article(
            id=article_id,
            title=title,
            type=type_,
            status=bool(status),
            created=datetime.fromtimestamp(created, tz=timezone.utc),
            langcode=langcode,
        )

    def _select(self, conditions, sort, limit):
        # Field names are checked against FIELDS before reaching here
        sql = "SELECT id FROM articles"
        params = []
        if conditions:
            sql += " WHERE " + " AND ".join(f"{name} = ?" for name in conditions)
            params.extend(self._to_column(name, value) for name, value in conditions.items())
        sort_field, direction = sort
        sql += f" ORDER BY {sort_field} {direction}, id {direction}"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        with self._connection("Query") as conn:
            return [row[0] for row in conn.execute(sql, params)]

    def load(self, article_id: int) -> Article:
        with self._connection(f"Loading article {article_id}") as conn:
            row = conn.execute(
                "SELECT id, title, type, status, created, langcode FROM articles WHERE id = ?",
                (article_id,)
            ).fetchone()
        if row is None:
            raise ArticleNotFoundError(article_id)
        return self._row_to_article(row)

    def add(self, article: Article) -> Article:
        created = _as_utc(article.created)
        with self._connection("Storing article") as conn:
            cursor = conn.execute(
                """
                INSERT OR REPLACE INTO articles (id, title, type, status, created, langcode)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (article.id, article.title, article.type, int(bool(article.status)),
                 created.timestamp(), article.langcode)
            )
            article_id = cursor.lastrowid if article.id is None else article.id
        logger.debug(f"Stored article {article_id}: {article.title}")
        return replace(article, id=article_id, status=bool(article.status), created=created)

    def delete(self, article_id: int) -> None:
        with self._connection(f"Deleting article {article_id}") as conn:
            deleted = conn.execute("DELETE FROM articles WHERE id = ?", (article_id,)).rowcount
        if deleted == 0:
            raise ArticleNotFoundError(article_id)
