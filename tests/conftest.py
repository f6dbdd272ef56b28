from datetime import datetime, timedelta, timezone

import pytest

from latest_articles.core.article import Article
from latest_articles.core.store import InMemoryContentStore, SqliteContentStore

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_article(title, minutes=0, **kwargs):
    return Article(title=title, created=BASE_TIME + timedelta(minutes=minutes), **kwargs)


@pytest.fixture
def memory_store():
    return InMemoryContentStore()


@pytest.fixture
def sqlite_store(tmp_path):
    return SqliteContentStore(str(tmp_path / "content.db"))


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    """Each content store implementation, empty."""
    if request.param == "memory":
        return InMemoryContentStore()
    return SqliteContentStore(str(tmp_path / "content.db"))
