"""
Shared fixtures: a seeded SQLite content store, a search engine over it,
and a TestClient with the engine installed.
"""

import pytest
from fastapi.testclient import TestClient

from community_search.common.outcome import Outcome
from community_search.identity.client import IdentityClient, extract_bearer_token
from community_search.search.search_engine import SearchEngine
from community_search.store.database import init_database
from community_search.store.sqlite_store import SqliteContentStore


ARTICLES = [
    {
        "id": "a1", "title": "How to reset your password",
        "content": "Open settings and choose reset password. You will receive an email.",
        "excerpt": "Step by step password reset guide", "author_id": "u1",
        "category_id": "account", "status": "published", "featured": 0,
        "view_count": 500, "like_count": 20, "created_at": "2024-01-10 10:00:00",
    },
    {
        "id": "a2", "title": "Billing overview",
        "content": "Invoices are issued monthly. Payment methods include card.",
        "excerpt": "Everything about invoices", "author_id": "u2",
        "category_id": "billing", "status": "published", "featured": 1,
        "view_count": 300, "like_count": 5, "created_at": "2024-02-01 09:00:00",
    },
    {
        "id": "a3", "title": "Account security basics",
        "content": "Enable two-factor authentication and change your password regularly.",
        "excerpt": "Keep your account safe", "author_id": "u1",
        "category_id": "account", "status": "published", "featured": 0,
        "view_count": 200, "like_count": 3, "created_at": "2024-03-01 12:00:00",
    },
    {
        "id": "a4", "title": "Draft: password policies",
        "content": "Internal password rules", "excerpt": "Unpublished",
        "author_id": "u3", "category_id": "account", "status": "draft",
        "view_count": 999, "created_at": "2024-03-05 12:00:00",
    },
    {
        "id": "a5", "title": "Export your data",
        "content": "Use the export tool in settings to download a CSV. Discounts of 50% apply.",
        "excerpt": "Data export", "author_id": "u2", "category_id": "data",
        "status": "published", "view_count": 50, "created_at": "2024-04-01 08:00:00",
    },
]

QUESTIONS = [
    {
        "id": "q1", "title": "Password reset email never arrives",
        "content": "I asked for a password reset but no email came.",
        "author_id": "u4", "category_id": "account", "status": "open",
        "view_count": 120, "answer_count": 3, "created_at": "2024-02-15 10:00:00",
    },
    {
        "id": "q2", "title": "Deleted question about password",
        "content": "Removed", "author_id": "u4", "category_id": "account",
        "status": "deleted", "view_count": 10, "created_at": "2024-02-16 10:00:00",
    },
    {
        "id": "q3", "title": "How do I change billing currency?",
        "content": "Need to switch from USD to EUR", "author_id": "u5",
        "category_id": "billing", "status": "open", "view_count": 40,
        "created_at": "2024-02-20 10:00:00",
    },
]

FORUM_POSTS = [
    {
        "id": "f1", "title": "Tips for managing passwords",
        "content": "Use a password manager for every account.",
        "author_id": "u6", "category_id": "account", "status": "active",
        "is_pinned": 1, "view_count": 80, "reply_count": 5,
        "created_at": "2024-01-20 10:00:00",
    },
    {
        "id": "f2", "title": "Dark mode discussion",
        "content": "Would love a darker theme for late nights.",
        "author_id": "u7", "category_id": "ui", "status": "active",
        "is_pinned": 0, "view_count": 60, "reply_count": 2,
        "created_at": "2024-01-25 10:00:00",
    },
    {
        "id": "f3", "title": "Locked thread on password",
        "content": "Closed", "author_id": "u7", "category_id": "account",
        "status": "locked", "view_count": 5, "created_at": "2024-01-26 10:00:00",
    },
]

FEATURE_REQUESTS = [
    {
        "id": "r1", "title": "Dark mode", "description": "Add a dark theme to the dashboard",
        "author_id": "u8", "category_id": "ui", "status": "pending",
        "star_count": 42, "created_at": "2024-01-05 10:00:00",
    },
    {
        "id": "r2", "title": "Password-less login", "description": "Support magic links",
        "author_id": "u8", "category_id": "account", "status": "planned",
        "star_count": 10, "created_at": "2024-01-06 10:00:00",
    },
    {
        "id": "r3", "title": "Rejected password idea", "description": "No",
        "author_id": "u9", "category_id": "account", "status": "rejected",
        "star_count": 1, "created_at": "2024-01-07 10:00:00",
    },
]

SEARCH_ANALYTICS = [
    {"original_query": "password reset", "user_id": "u1", "results_count": 4},
    {"original_query": "password reset", "user_id": "u2", "results_count": 4},
    {"original_query": "password reset", "user_id": "u3", "results_count": 4},
    {"original_query": "Password Reset ", "user_id": "u4", "results_count": 4},
    {"original_query": "password manager", "user_id": "u1", "results_count": 1},
    {"original_query": "billing", "user_id": "u2", "results_count": 2},
    {"original_query": "billing", "user_id": "u3", "results_count": 2},
]

SEARCH_SYNONYMS = [
    {"term": "password", "synonyms": ["passcode", "passphrase", "login secret"], "weight": 2.0},
    {"term": "billing", "synonyms": ["invoice", "payment"], "weight": 1.5},
]

USERS = {"valid-token": "user-123"}


class StubIdentity(IdentityClient):
    """Identity client that resolves tokens from a dict instead of over HTTP."""

    def __init__(self, users=None, fail=False):
        super().__init__(auth_url="http://auth.test", api_key="test-key")
        self.users = users if users is not None else USERS
        self.fail = fail
        self.calls = 0

    async def resolve(self, authorization):
        self.calls += 1
        token = extract_bearer_token(authorization)
        if token is None:
            return Outcome.ok(None, "identity")
        if self.fail:
            return Outcome.degraded(None, "auth service unavailable", "identity")
        return Outcome.ok(self.users.get(token), "identity")


def seed_database(db_path):
    db = init_database(db_path)
    try:
        db.insert("content_articles", ARTICLES)
        db.insert("questions", QUESTIONS)
        db.insert("forum_posts", FORUM_POSTS)
        db.insert("feature_requests", FEATURE_REQUESTS)
        db.insert("search_analytics", SEARCH_ANALYTICS)
        db.insert("search_synonyms", SEARCH_SYNONYMS)
    finally:
        db.close()


def insert_rows(db_path, table, rows):
    db = init_database(db_path)
    try:
        db.insert(table, rows)
    finally:
        db.close()


def count_analytics(db_path, user_id=None):
    db = init_database(db_path)
    try:
        conn = db.connect()
        if user_id is None:
            row = conn.execute("SELECT COUNT(*) FROM search_analytics").fetchone()
        else:
            row = conn.execute(
                "SELECT COUNT(*) FROM search_analytics WHERE user_id = ?", (user_id,)
            ).fetchone()
        return row[0]
    finally:
        db.close()


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "community.db")
    seed_database(path)
    return path


@pytest.fixture
def store(db_path):
    return SqliteContentStore(db_path)


@pytest.fixture
def identity():
    return StubIdentity()


@pytest.fixture
def engine(store, identity):
    engine = SearchEngine(store=store, identity=identity)
    yield engine
    engine.close()


@pytest.fixture
def client(store, identity):
    from community_search.api import routes
    from community_search.api.main import app

    routes.init_search_engine(store=store, identity=identity)
    yield TestClient(app)
    routes.shutdown_search_engine()
