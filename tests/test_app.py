"""Tests for the JSON API."""

import asyncio
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

import web.app as web_app
from dining_scraper.cache import RestaurantCache
from dining_scraper.errors import TransportError
from web.app import _invalidation_loop, app, get_cache, get_upstream, seconds_until_midnight


@pytest.fixture
def client(fake_upstream):
    cache = RestaurantCache(fake_upstream)
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_upstream] = lambda: fake_upstream
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestRestaurantsRoutes:
    def test_all(self, client):
        response = client.get("/restaurants")

        assert response.status_code == 200
        names = [r["name"] for r in response.json()["data"]]
        assert names == ["Burrito Boyz", "Starbucks", "Centro Pizza"]

    def test_restaurant_json_shape(self, client):
        burrito = client.get("/restaurants").json()["data"][0]

        assert burrito["location"] == {"name": "Student Centre", "slug": "student-centre"}
        assert burrito["tags"] == ["grill", "halal"]
        assert burrito["schedule"]["2024-03-04"] == {
            "open": [{"from": "09:00:00", "to": "17:00:00"}]
        }
        assert burrito["schedule"]["2024-03-07"] == "closed"

        starbucks = client.get("/restaurants").json()["data"][1]
        assert "schedule" not in starbucks
        assert "location_phone" not in starbucks

    def test_open_now_bypasses_cache(self, client, fake_upstream):
        client.get("/restaurants/open-now")
        response = client.get("/restaurants/open-now")

        assert response.status_code == 200
        assert fake_upstream.calls["open_now"] == 2
        assert fake_upstream.calls["all_restaurants"] == 0

    def test_food_type(self, client, fake_upstream):
        response = client.get("/restaurants/food-type/pizza")

        assert response.status_code == 200
        assert [r["name"] for r in response.json()["data"]] == ["Centro Pizza"]

    def test_branded_food_type(self, client, fake_upstream):
        response = client.get("/restaurants/food-type/coffee/starbucks")

        assert response.status_code == 200
        assert [r["name"] for r in response.json()["data"]] == ["Starbucks"]
        assert fake_upstream.calls["coffee_brand:starbucks"] == 1

    def test_unknown_food_type(self, client):
        response = client.get("/restaurants/food-type/tacos")

        assert response.status_code == 404
        assert "tacos" in response.json()["error"]

    def test_coffee_brand(self, client):
        response = client.get("/restaurants/coffee-brand/starbucks")

        assert response.status_code == 200
        assert [r["name"] for r in response.json()["data"]] == ["Starbucks"]

    def test_unknown_coffee_brand(self, client):
        response = client.get("/restaurants/coffee-brand/second-cup")

        assert response.status_code == 404
        assert "error" in response.json()

    def test_upstream_failure_is_500(self, client, fake_upstream):
        fake_upstream.failures["all_restaurants"] = TransportError(
            "https://maceats.mcmaster.ca/locations", "unexpected response", status_code=503
        )

        response = client.get("/restaurants")

        assert response.status_code == 500
        assert "503" in response.json()["error"]


class TestLocationsRoutes:
    def test_all(self, client):
        response = client.get("/locations")

        assert response.json() == {
            "data": [
                {"name": "Student Centre", "slug": "student-centre"},
                {"name": "Centro for Food", "slug": "centro-food"},
            ]
        }

    def test_location_restaurants(self, client):
        response = client.get("/locations/student-centre")

        assert [r["name"] for r in response.json()["data"]] == ["Burrito Boyz", "Starbucks"]

    def test_unknown_location_is_empty(self, client):
        response = client.get("/locations/nowhere")

        assert response.status_code == 200
        assert response.json() == {"data": []}


class TestMisc:
    def test_unknown_route(self, client):
        response = client.get("/menus")

        assert response.status_code == 404
        assert "error" in response.json()

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_cors_allows_any_origin(self, client):
        response = client.get("/health", headers={"Origin": "https://example.com"})

        assert response.headers["access-control-allow-origin"] == "*"

    def test_uninitialized_cache(self):
        response = TestClient(app).get("/restaurants")

        assert response.status_code == 503
        assert response.json() == {"error": "Cache not initialized yet"}

    @pytest.mark.parametrize(
        ("now", "expected"),
        [
            (datetime(2024, 3, 4, 23, 0), 3600.0),
            (datetime(2024, 3, 4, 0, 0), 86400.0),
            (datetime(2024, 12, 31, 23, 59, 30), 30.0),
        ],
    )
    def test_seconds_until_midnight(self, now, expected):
        assert seconds_until_midnight(now) == expected


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_invalidation_loop_clears_cache_at_midnight(self, monkeypatch, fake_upstream):
        cache = RestaurantCache(fake_upstream)
        await cache.all_restaurants()
        delays = []

        async def fake_sleep(delay):
            delays.append(delay)
            if len(delays) > 1:
                raise asyncio.CancelledError

        monkeypatch.setattr(web_app.asyncio, "sleep", fake_sleep)
        with pytest.raises(asyncio.CancelledError):
            await _invalidation_loop(cache)
        monkeypatch.undo()

        assert 0 < delays[0] <= 86400
        await cache.all_restaurants()
        assert fake_upstream.calls["all_restaurants"] == 2

    def test_startup_and_shutdown(self, monkeypatch, fake_upstream):
        monkeypatch.setattr(
            web_app.Upstream, "from_settings", classmethod(lambda cls, settings: fake_upstream)
        )
        try:
            with TestClient(app) as client:
                assert isinstance(app.state.cache, RestaurantCache)
                assert app.state.upstream is fake_upstream
                assert web_app._invalidation_task is not None

                response = client.get("/locations")

                assert response.status_code == 200
                assert fake_upstream.calls["locations"] == 1
                assert not fake_upstream.closed

            assert fake_upstream.closed
            assert web_app._invalidation_task is None
        finally:
            for name in ("cache", "upstream"):
                if hasattr(app.state, name):
                    delattr(app.state, name)
