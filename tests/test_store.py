"""
Unit tests for the content stores.
"""
from datetime import datetime, timezone

import pytest

from latest_articles.core.article import Article
from latest_articles.exceptions import ArticleNotFoundError, StoreError
from latest_articles.core.store import InMemoryContentStore, SqliteContentStore

from tests.conftest import make_article


class TestContentStore:
    """Behavior shared by every store implementation."""

    def test_add_assigns_ids(self, store):
        first = store.add(make_article("First"))
        second = store.add(make_article("Second"))

        assert first.id is not None
        assert second.id != first.id

    def test_load_returns_stored_article(self, store):
        stored = store.add(make_article("Hello", minutes=5, langcode="fr"))
        loaded = store.load(stored.id)

        assert loaded.title == "Hello"
        assert loaded.type == "article"
        assert loaded.status is True
        assert loaded.langcode == "fr"
        assert loaded.created == stored.created
        assert loaded.url == f"/node/{stored.id}"

    def test_load_missing_raises(self, store):
        with pytest.raises(ArticleNotFoundError) as exc_info:
            store.load(42)
        assert exc_info.value.article_id == 42

    def test_delete(self, store):
        article = store.add(make_article("Gone"))
        store.delete(article.id)

        with pytest.raises(ArticleNotFoundError):
            store.load(article.id)
        with pytest.raises(ArticleNotFoundError):
            store.delete(article.id)

    def test_query_filters_on_conditions(self, store):
        published = store.add(make_article("Published"))
        store.add(make_article("Draft", status=False))
        store.add(make_article("Page", type="page"))

        ids = store.query({"status": 1, "type": "article"})

        assert ids == [published.id]

    def test_query_sorts_and_limits(self, store):
        ids = [store.add(make_article(f"Article {i}", minutes=i)).id for i in range(4)]

        assert store.query({}, sort=("created", "DESC")) == list(reversed(ids))
        assert store.query({}, sort=("created", "ASC"), limit=2) == ids[:2]
        assert store.query({}, limit=0) == []

    def test_ties_fall_back_to_id(self, store):
        first = store.add(make_article("Same time A"))
        second = store.add(make_article("Same time B"))

        assert store.query({}, sort=("created", "DESC")) == [second.id, first.id]

    def test_naive_datetimes_are_utc(self, store):
        article = store.add(Article(title="Naive", created=datetime(2024, 3, 1, 9, 30)))

        assert store.load(article.id).created == datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize("kwargs", [
        {"conditions": {"author": "x"}},
        {"conditions": {}, "sort": ("popularity", "DESC")},
        {"conditions": {}, "sort": ("created", "SIDEWAYS")},
        {"conditions": {}, "limit": -1},
    ])
    def test_invalid_queries(self, store, kwargs):
        with pytest.raises(StoreError):
            store.query(**kwargs)

    def test_access_handler_filters_before_limit(self, store):
        store.access_handler = lambda article: "secret" not in article.title
        visible_old = store.add(make_article("Old", minutes=1))
        store.add(make_article("secret newest", minutes=3))
        visible_new = store.add(make_article("New", minutes=2))

        assert store.query({}, limit=2) == [visible_new.id, visible_old.id]
        assert len(store.query({}, limit=2, access_check=False)) == 2
        assert visible_old.id not in store.query({}, limit=2, access_check=False)


class TestInMemoryContentStore:

    def test_seed_articles(self):
        store = InMemoryContentStore([make_article("A"), make_article("B")])
        assert len(store) == 2

    def test_loaded_article_is_a_copy(self, memory_store):
        article = memory_store.add(make_article("Original"))
        loaded = memory_store.load(article.id)
        loaded.title = "Changed"

        assert memory_store.load(article.id).title == "Original"

    def test_explicit_id_advances_counter(self, memory_store):
        memory_store.add(make_article("Explicit", id=10))
        assert memory_store.add(make_article("Next")).id == 11


class TestSqliteContentStore:

    def test_persists_across_instances(self, tmp_path):
        path = str(tmp_path / "nested" / "content.db")
        article = SqliteContentStore(path).add(make_article("Durable"))

        assert SqliteContentStore(path).load(article.id).title == "Durable"

    def test_add_with_id_replaces(self, sqlite_store):
        article = sqlite_store.add(make_article("Before"))
        sqlite_store.add(make_article("After", id=article.id))

        assert sqlite_store.load(article.id).title == "After"
        assert sqlite_store.query({}) == [article.id]

    def test_corrupt_database_raises_store_error(self, tmp_path):
        path = tmp_path / "content.db"
        path.write_bytes(b"this is not a sqlite database" * 100)

        with pytest.raises(StoreError):
            SqliteContentStore(str(path))

    def test_storage_failures_raise_store_error(self, sqlite_store):
        article = sqlite_store.add(make_article("Kept"))
        sqlite_store.db_path.write_bytes(b"garbage" * 500)

        with pytest.raises(StoreError):
            sqlite_store.load(article.id)
        with pytest.raises(StoreError):
            sqlite_store.add(make_article("Another"))
        with pytest.raises(StoreError):
            sqlite_store.delete(article.id)
        with pytest.raises(StoreError):
            sqlite_store.query({})
