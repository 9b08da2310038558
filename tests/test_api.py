import pytest
from fastapi.testclient import TestClient

from community_search.store.sqlite_store import SqliteContentStore

from conftest import StubIdentity, count_analytics, insert_rows

ENHANCED = "/api/v1/enhanced-search"
UNIVERSAL = "/api/v1/universal-search"
AUTOCOMPLETE = "/api/v1/search-autocomplete"


@pytest.fixture
def missing_store_client(tmp_path):
    from community_search.api import routes
    from community_search.api.main import app

    routes.init_search_engine(
        store=SqliteContentStore(str(tmp_path / "missing.db")),
        identity=StubIdentity()
    )
    yield TestClient(app)
    routes.shutdown_search_engine()


# ============================================================================
# Enhanced search
# ============================================================================

def test_enhanced_search_payload(client):
    response = client.post(ENHANCED, json={"query": "password"})
    assert response.status_code == 200

    data = response.json()["data"]
    assert set(data) == {
        "results", "total", "query", "suggestions", "relatedArticles",
        "searchTime", "contentTypes", "hasMore"
    }
    assert [r["id"] for r in data["results"]] == ["f1", "a1", "q1", "r2", "a3"]
    assert data["results"][0]["relevanceScore"] == 120
    assert data["total"] == 5
    assert data["query"] == "password"
    assert data["hasMore"] is False
    assert [a["id"] for a in data["relatedArticles"]] == ["a1", "a3"]
    assert data["suggestions"][0]["type"] == "popular"


def test_enhanced_search_options(client):
    response = client.post(ENHANCED, json={
        "query": "invoices",
        "contentTypes": ["articles", "questions"],
        "categoryId": "billing",
        "limit": 10,
        "includeRelated": False,
        "includeSuggestions": False,
    })
    assert response.status_code == 200

    data = response.json()["data"]
    assert [r["id"] for r in data["results"]] == ["a2"]
    assert data["contentTypes"] == ["articles", "questions"]
    assert data["relatedArticles"] == []
    assert data["suggestions"] == []


def test_enhanced_search_pagination(client):
    data = client.post(ENHANCED, json={"query": "password", "limit": 2, "offset": 2}).json()["data"]
    assert [r["id"] for r in data["results"]] == ["q1", "r2"]
    assert data["hasMore"] is True


def test_enhanced_search_no_results(client):
    response = client.post(ENHANCED, json={"query": "zzqx"})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["results"] == []
    assert data["total"] == 0


@pytest.mark.parametrize("body", [
    {},
    {"query": ""},
    {"query": "   "},
    {"query": "password", "limit": 0},
    {"query": "password", "limit": 101},
    {"query": "password", "offset": -1},
    {"query": "password", "contentTypes": ["videos"]},
])
def test_enhanced_search_validation(client, body):
    response = client.post(ENHANCED, json=body)
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "ENHANCED_SEARCH_FAILED"
    assert error["message"]


def test_enhanced_search_related_article_with_null_counter(client, db_path):
    insert_rows(db_path, "content_articles", [{
        "id": "n1", "title": "Billing contacts", "content": "Who to ask",
        "category_id": "billing", "status": "published", "view_count": None,
    }])

    response = client.post(ENHANCED, json={"query": "overview"})

    assert response.status_code == 200
    related = response.json()["data"]["relatedArticles"]
    assert [a["id"] for a in related] == ["n1"]
    assert related[0]["view_count"] == 0


@pytest.mark.parametrize("path,code", [
    (ENHANCED, "ENHANCED_SEARCH_FAILED"),
    (UNIVERSAL, "SEARCH_FAILED"),
])
def test_unexpected_error_uses_endpoint_code(client, monkeypatch, path, code):
    from community_search.api import routes

    async def broken_search(query, authorization=None):
        raise RuntimeError("boom")

    monkeypatch.setattr(routes.search_engine, "search", broken_search)

    response = client.post(path, json={"query": "password"})
    assert response.status_code == 500
    assert response.json()["error"]["code"] == code


def test_enhanced_search_store_unavailable(missing_store_client):
    response = missing_store_client.post(ENHANCED, json={"query": "password"})
    assert response.status_code == 503
    assert response.json()["error"]["code"] == "ENHANCED_SEARCH_FAILED"


# ============================================================================
# Analytics
# ============================================================================

def test_authenticated_search_recorded(client, db_path):
    before = count_analytics(db_path)

    response = client.post(
        ENHANCED,
        json={"query": "Dark mode"},
        headers={"Authorization": "Bearer valid-token"}
    )

    assert response.status_code == 200
    assert count_analytics(db_path) == before + 1
    assert count_analytics(db_path, "user-123") == 1


def test_anonymous_search_not_recorded(client, db_path):
    before = count_analytics(db_path)

    client.post(ENHANCED, json={"query": "Dark mode"})
    client.post(ENHANCED, json={"query": "Dark mode"}, headers={"Authorization": "Bearer nobody"})

    assert count_analytics(db_path) == before


# ============================================================================
# Universal search
# ============================================================================

def test_universal_search(client):
    response = client.post(UNIVERSAL, json={"query": "dark"})
    assert response.status_code == 200

    data = response.json()["data"]
    assert set(data) == {"results", "total", "query", "contentTypes"}
    assert [r["id"] for r in data["results"]] == ["f2", "r1"]


def test_universal_search_validation(client):
    response = client.post(UNIVERSAL, json={"query": ""})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "SEARCH_FAILED"


# ============================================================================
# Autocomplete
# ============================================================================

def test_autocomplete(client):
    response = client.post(AUTOCOMPLETE, json={"query": "pass"})
    assert response.status_code == 200

    data = response.json()["data"]
    assert data["query"] == "pass"
    assert data["total"] == 6
    assert [s["type"] for s in data["suggestions"]][:2] == ["popular", "popular"]


def test_autocomplete_short_query(client):
    response = client.post(AUTOCOMPLETE, json={"query": "p"})
    assert response.status_code == 200
    assert response.json()["data"] == {"suggestions": [], "query": "p", "total": 0}


def test_autocomplete_validation(client):
    response = client.post(AUTOCOMPLETE, json={"query": "pass", "limit": 500})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "AUTOCOMPLETE_FAILED"


# ============================================================================
# CORS, health and root
# ============================================================================

def test_cors_preflight(client):
    response = client.options(
        ENHANCED,
        headers={
            "Origin": "https://community.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, content-type, apikey",
        }
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "POST" in response.headers["access-control-allow-methods"]
    assert "authorization" in response.headers["access-control-allow-headers"].lower()


def test_cors_header_on_response(client):
    response = client.post(
        ENHANCED,
        json={"query": "password"},
        headers={"Origin": "https://community.example.com"}
    )
    assert response.headers["access-control-allow-origin"] == "*"


def test_cors_header_on_error(client):
    response = client.post(
        ENHANCED,
        json={"query": ""},
        headers={"Origin": "https://community.example.com"}
    )
    assert response.status_code == 400
    assert response.headers["access-control-allow-origin"] == "*"


def test_health(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["store_connected"] is True


def test_health_degraded_without_store(missing_store_client):
    data = missing_store_client.get("/api/v1/health").json()
    assert data["status"] == "degraded"
    assert data["store_connected"] is False


def test_root(client):
    data = client.get("/").json()
    assert data["endpoints"]["enhanced_search"] == ENHANCED
