from __future__ import annotations

from fastapi.testclient import TestClient
from conftest import ADMIN_KEY, reviews_payload

from foodmap.app import app
from foodmap.cache.registry import CacheNamespace
from foodmap.store.base import Collection

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"username": "user", "password": "user123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


# ── Public / auth ────────────────────────────────────────────────────────


def test_health():
    assert client.get("/health").json() == {"status": "ok"}


def test_metadata_lists_categories():
    body = client.get("/metadata").json()
    assert "noodles" in body["categories"]
    assert "Ximending" in body["locations"]


def test_login_and_me():
    resp = client.post("/auth/login", json={"username": "user", "password": "user123"})
    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "user"
    assert client.get("/auth/me").json()["username"] == "user"


def test_login_wrong_password():
    resp = client.post("/auth/login", json={"username": "user", "password": "wrong"})
    assert resp.status_code == 401


def test_logout_clears_session():
    c = TestClient(app)
    _login_user(c)
    assert c.post("/auth/logout").json()["status"] == "logged_out"
    assert c.get("/auth/me").status_code == 401


# ── Lookups ──────────────────────────────────────────────────────────────


def test_batch_requires_login():
    c = TestClient(app)
    resp = c.post("/batch", json={"restaurants": ["Ay-Chung"], "include": ["rating"]})
    assert resp.status_code == 401


def test_batch_returns_every_name(engine):
    _login_user(client)
    resp = client.post("/batch", json={"restaurants": ["Ay-Chung", "Unknown"], "include": ["rating", "photo"]})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["results"] == {"Ay-Chung": {}, "Unknown": {}}


def test_batch_serves_durable_records(engine):
    client.app.state.engine.store._collections[Collection.reviews]["Ay-Chung"] = {
        **reviews_payload(4.4, 50), "restaurant_name": "Ay-Chung",
    }
    _login_user(client)
    resp = client.post("/batch", json={"restaurants": ["Ay-Chung"], "include": ["rating"]})
    assert resp.json()["results"]["Ay-Chung"]["rating"] == {"rating": 4.4, "reviews_count": 50}


def test_batch_validation_errors():
    _login_user(client)
    assert client.post("/batch", json={"restaurants": [], "include": ["rating"]}).status_code == 422
    assert client.post("/batch", json={"restaurants": ["a"], "include": ["menu"]}).status_code == 422


def test_single_lookup_goes_external(fake_source):
    fake_source.reviews["Ay-Chung"] = reviews_payload()
    _login_user(client)
    resp = client.get("/restaurants/Ay-Chung/rating")
    assert resp.status_code == 200
    body = resp.json()
    assert body["source"] == "external"
    assert body["found"] is True
    assert body["data"] == {"rating": 4.5, "reviews_count": 120}

    again = client.get("/restaurants/Ay-Chung/rating").json()
    assert again["source"] == "memory"


def test_single_lookup_not_found(fake_source):
    _login_user(client)
    body = client.get("/restaurants/Nowhere/price").json()
    assert body["found"] is False
    assert body["data"] is None


def test_nearby_from_catalog():
    _login_user(client)
    resp = client.post("/nearby", json={"lat": 25.0478, "lng": 121.5170, "radius_meters": 2000, "limit": 3})
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == len(body["results"]) <= 3
    assert body["results"][0]["name"] == "Taipei Station Biandang"
    assert body["results"][0]["formatted_distance"] == "0m"
    assert body["user_location"] == {"lat": 25.0478, "lng": 121.517}


def test_nearby_rejects_bad_coordinates():
    _login_user(client)
    resp = client.post("/nearby", json={"lat": 95, "lng": 121.5})
    assert resp.status_code == 422


# ── Admin ────────────────────────────────────────────────────────────────


def test_cache_stats_requires_admin():
    c = TestClient(app)
    assert c.get("/cache/stats").status_code == 401
    _login_user(c)
    assert c.get("/cache/stats").status_code == 403
    _login_admin(c)
    body = c.get("/cache/stats").json()
    assert set(body["stats"]) == {"rating", "review", "photo", "price", "nearby"}


def test_cache_stats_with_admin_key():
    c = TestClient(app)
    resp = c.get("/cache/stats", headers={"X-Admin-Key": ADMIN_KEY})
    assert resp.status_code == 200


def test_memory_invalidate_requires_admin():
    c = TestClient(app)
    assert c.post("/cache/memory/invalidate", json={"type": "all"}).status_code == 401
    _login_user(c)
    assert c.post("/cache/memory/invalidate", json={"type": "all"}).status_code == 403
    resp = c.post("/cache/memory/invalidate", json={"type": "all"}, headers={"X-Admin-Key": "nope"})
    assert resp.status_code == 403


def test_memory_invalidate_restaurant(engine):
    engine.caches[CacheNamespace.rating].set("Ay-Chung", {"rating": 4.5})
    c = TestClient(app)
    _login_admin(c)
    resp = c.post("/cache/memory/invalidate", json={"type": "restaurant", "name": "Ay-Chung"})
    assert resp.status_code == 200
    assert resp.json()["removed"] == 1
    assert c.post("/cache/memory/invalidate", json={"type": "restaurant"}).status_code == 400


def test_durable_invalidate_and_status(engine):
    engine.store._collections[Collection.prices]["Din Tai Fung"] = {"price_level": 3}
    headers = {"X-Admin-Key": ADMIN_KEY}

    status = client.get("/cache/invalidate", headers=headers).json()
    assert status["cache"]["prices"]["count"] == 1

    resp = client.post("/cache/invalidate", json={"type": "prices", "name": "Din Tai Fung"}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["deleted"] == {"prices": 1}
    assert body["restaurant_name"] == "Din Tai Fung"

    resp = client.post("/cache/invalidate", json={}, headers=headers)
    assert resp.json()["deleted"] == {"reviews": 0, "images": 0, "prices": 0}


def test_durable_invalidate_unknown_type():
    resp = client.post("/cache/invalidate", json={"type": "menus"}, headers={"X-Admin-Key": ADMIN_KEY})
    assert resp.status_code == 422


def test_refresh_defaults_to_catalog(fake_source):
    fake_source.reviews["Din Tai Fung"] = reviews_payload()
    c = TestClient(app)
    _login_admin(c)
    resp = c.post("/cache/refresh", json={})
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 18
    assert body["success_count"] == 1
    assert body["failed_count"] == 17
    assert len(body["failed"]) == 10


def test_refresh_named_restaurants(fake_source):
    fake_source.reviews["Ay-Chung"] = reviews_payload()
    resp = client.post("/cache/refresh", json={"restaurants": ["Ay-Chung"]}, headers={"X-Admin-Key": ADMIN_KEY})
    assert resp.json()["success_count"] == 1


def test_analytics_counts_lookups(fake_source):
    fake_source.reviews["Ay-Chung"] = reviews_payload()
    c = TestClient(app)
    _login_user(c)
    c.get("/restaurants/Ay-Chung/rating")
    c.get("/restaurants/Ay-Chung/rating")
    c.post("/batch", json={"restaurants": ["Ay-Chung"], "include": ["rating"]})
    _login_admin(c)
    body = c.get("/analytics").json()
    assert body["total_lookups"] == 2
    assert body["total_batches"] == 1
    assert body["sources"] == {"external": 1, "memory": 1}
    assert body["memory_hit_rate"] == 50.0
    assert body["top_restaurants"][0] == {"name": "Ay-Chung", "count": 3}


def test_analytics_requires_admin():
    c = TestClient(app)
    _login_user(c)
    assert c.get("/analytics").status_code == 403
