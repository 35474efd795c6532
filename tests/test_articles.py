"""
Article endpoint tests — the HTTP mapping of every operation, the error
envelope, and the diagnostic response headers.

Each test creates the articles it needs via the API, so test order does
not matter.
"""
import pytest
from httpx import AsyncClient

BASE = "/api/v1/articles"


async def _create(client: AsyncClient, **overrides) -> dict:
    payload = {
        "title": "Hello World",
        "content": "Body text",
        "excerpt": "Short summary",
        "slug": "hello-world",
    }
    payload.update(overrides)
    resp = await client.post(BASE, json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Infrastructure / health
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    resp = await async_client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_response_timing_headers(async_client: AsyncClient):
    resp = await async_client.get(BASE)
    assert "x-response-time-ms" in resp.headers
    assert int(resp.headers["x-query-count"]) >= 1


# ---------------------------------------------------------------------------
# createArticle
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_article(async_client: AsyncClient):
    article = await _create(async_client)
    assert article["title"] == "Hello World"
    assert article["slug"] == "hello-world"
    assert article["published"] is False
    assert article["created_at"] == article["updated_at"]


@pytest.mark.asyncio
async def test_create_article_duplicate_slug_returns_409(async_client: AsyncClient):
    await _create(async_client)
    resp = await async_client.post(BASE, json={
        "title": "Other", "content": "Other", "slug": "hello-world",
    })
    assert resp.status_code == 409
    error = resp.json()["error"]
    assert error["code"] == "SLUG_CONFLICT"
    assert error["slug"] == "hello-world"


@pytest.mark.asyncio
async def test_create_article_validation_error(async_client: AsyncClient):
    resp = await async_client.post(BASE, json={"title": "", "content": "C", "slug": "s"})
    assert resp.status_code == 422
    error = resp.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert any(d["field"].endswith("title") for d in error["details"])


# ---------------------------------------------------------------------------
# getArticleById / getArticleBySlug
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_get_article_by_id(async_client: AsyncClient):
    created = await _create(async_client)
    resp = await async_client.get(f"{BASE}/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == created


@pytest.mark.asyncio
async def test_get_article_by_id_not_found_is_null(async_client: AsyncClient):
    resp = await async_client.get(f"{BASE}/99999")
    assert resp.status_code == 200
    assert resp.json() is None


@pytest.mark.asyncio
async def test_get_article_by_id_rejects_non_positive_id(async_client: AsyncClient):
    resp = await async_client.get(f"{BASE}/0")
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_get_article_by_slug_case_sensitive(async_client: AsyncClient):
    created = await _create(async_client, title="A", content="x", slug="a")
    resp = await async_client.get(f"{BASE}/slug/A")
    assert resp.status_code == 200
    assert resp.json() is None

    resp = await async_client.get(f"{BASE}/slug/a")
    assert resp.json() == created


# ---------------------------------------------------------------------------
# getArticles / getPublishedArticles
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_articles_with_filter_and_paging(async_client: AsyncClient):
    ids = []
    for i in range(4):
        ids.append((await _create(async_client, slug=f"a{i}", published=i % 2 == 0))["id"])

    resp = await async_client.get(BASE)
    assert [a["id"] for a in resp.json()] == list(reversed(ids))

    resp = await async_client.get(BASE, params={"published": "true"})
    assert [a["id"] for a in resp.json()] == [ids[2], ids[0]]

    resp = await async_client.get(BASE, params={"published": "false", "limit": 1, "offset": 1})
    assert [a["id"] for a in resp.json()] == [ids[1]]


@pytest.mark.asyncio
async def test_get_published_articles_scenario(async_client: AsyncClient):
    ids = [(await _create(async_client, slug=f"p{i}", published=True))["id"] for i in range(5)]
    await _create(async_client, slug="draft", published=False)

    resp = await async_client.get(f"{BASE}/published", params={"limit": 2, "offset": 2})
    assert resp.status_code == 200
    assert [a["id"] for a in resp.json()] == [ids[2], ids[1]]


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"limit": 0}, {"limit": 101}, {"offset": -1}])
async def test_list_articles_rejects_out_of_range_paging(async_client: AsyncClient, params):
    for path in (BASE, f"{BASE}/published"):
        resp = await async_client.get(path, params=params)
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


# ---------------------------------------------------------------------------
# updateArticle
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_update_article(async_client: AsyncClient):
    created = await _create(async_client)
    resp = await async_client.patch(f"{BASE}/{created['id']}", json={
        "title": "Updated Title",
        "published": True,
    })
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["title"] == "Updated Title"
    assert updated["published"] is True
    assert updated["slug"] == "hello-world"
    assert updated["excerpt"] == "Short summary"
    assert updated["created_at"] == created["created_at"]
    assert updated["updated_at"] != created["updated_at"]


@pytest.mark.asyncio
async def test_update_article_null_excerpt(async_client: AsyncClient):
    created = await _create(async_client)
    resp = await async_client.patch(f"{BASE}/{created['id']}", json={"excerpt": None})
    assert resp.status_code == 200
    assert resp.json()["excerpt"] is None


@pytest.mark.asyncio
async def test_update_article_empty_body_is_null(async_client: AsyncClient):
    created = await _create(async_client)
    resp = await async_client.patch(f"{BASE}/{created['id']}", json={})
    assert resp.status_code == 200
    assert resp.json() is None

    fetched = (await async_client.get(f"{BASE}/{created['id']}")).json()
    assert fetched["updated_at"] == created["updated_at"]


@pytest.mark.asyncio
async def test_update_nonexistent_article_is_null(async_client: AsyncClient):
    resp = await async_client.patch(f"{BASE}/99999", json={"title": "Ghost"})
    assert resp.status_code == 200
    assert resp.json() is None


@pytest.mark.asyncio
async def test_update_article_null_title_rejected(async_client: AsyncClient):
    created = await _create(async_client)
    resp = await async_client.patch(f"{BASE}/{created['id']}", json={"title": None})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_update_article_slug_conflict_returns_409(async_client: AsyncClient):
    await _create(async_client, slug="first")
    second = await _create(async_client, slug="second")

    resp = await async_client.patch(f"{BASE}/{second['id']}", json={"slug": "first"})
    assert resp.status_code == 409
    assert resp.json()["error"]["slug"] == "first"

    fetched = (await async_client.get(f"{BASE}/{second['id']}")).json()
    assert fetched == second


# ---------------------------------------------------------------------------
# deleteArticle
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_delete_article(async_client: AsyncClient):
    created = await _create(async_client)
    resp = await async_client.delete(f"{BASE}/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() is True

    resp = await async_client.delete(f"{BASE}/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() is False

    assert (await async_client.get(f"{BASE}/{created['id']}")).json() is None
