"""Tests for the /api/recipes endpoints."""

import pytest
from fastapi.testclient import TestClient

from kitchen_stories.main import create_app


def _post(client, headers, form, image=None):
    files = {"image": image} if image else None
    return client.post("/api/recipes", data=form, files=files, headers=headers)


class TestCreate:
    def test_create_with_image(self, client, admin_headers, recipe_form, png_bytes, context):
        res = _post(client, admin_headers, recipe_form(), ("tea.png", png_bytes, "image/png"))

        assert res.status_code == 201
        body = res.json()
        assert body["message"] == "Recipe created successfully"
        assert isinstance(body["recipeId"], int)
        assert body["image_url"].startswith("/uploads/")
        assert context.storage.exists(body["image_url"])

    def test_create_then_get(self, client, admin_headers, recipe_form):
        recipe_id = _post(client, admin_headers, recipe_form()).json()["recipeId"]

        res = client.get(f"/api/recipes/{recipe_id}")

        assert res.status_code == 200
        recipe = res.json()
        assert recipe["id"] == recipe_id
        assert recipe["title"] == "Tea"
        assert recipe["servings"] == "1 cup"
        assert recipe["image_url"] is None
        assert recipe["is_favorite"] is False
        assert recipe["ingredients"] == [{"group": "Main", "items": ["Tea bag", "Water"]}]
        assert recipe["instructions"] == ["Boil water", "Steep"]

    def test_optional_fields_round_trip(self, client, admin_headers, recipe_form):
        form = recipe_form(total_time="5 mins", notes="Use loose leaf")
        recipe_id = _post(client, admin_headers, form).json()["recipeId"]

        recipe = client.get(f"/api/recipes/{recipe_id}").json()

        assert recipe["total_time"] == "5 mins"
        assert recipe["notes"] == "Use loose leaf"

    def test_missing_required_field(self, client, admin_headers, recipe_form):
        form = recipe_form()
        del form["title"]
        assert _post(client, admin_headers, form).status_code == 422

    def test_malformed_children_are_dropped(self, client, admin_headers, recipe_form):
        form = recipe_form()
        form["ingredients"] = "[{broken"
        form["instructions"] = "not json"

        res = _post(client, admin_headers, form)

        assert res.status_code == 201
        recipe = client.get(f"/api/recipes/{res.json()['recipeId']}").json()
        assert recipe["ingredients"] == []
        assert recipe["instructions"] == []

    def test_rejects_non_image_upload(self, client, admin_headers, recipe_form):
        res = _post(client, admin_headers, recipe_form(), ("notes.txt", b"hello", "text/plain"))

        assert res.status_code == 400
        assert res.json()["error"] == "Only image files are allowed!"
        assert client.get("/api/recipes").json() == []

    def test_rejects_oversized_upload(self, client, admin_headers, recipe_form, context):
        big = b"\x89PNG" + b"\x00" * context.storage.max_bytes

        res = _post(client, admin_headers, recipe_form(), ("big.png", big, "image/png"))

        assert res.status_code == 413
        assert client.get("/api/recipes").json() == []
        assert list(context.storage.root.iterdir()) == []


@pytest.fixture
def strict_client(settings):
    app = create_app(settings.model_copy(update={"strict_child_payloads": True}))
    with TestClient(app) as c:
        yield c


def test_strict_mode_rejects_malformed_children(strict_client, admin_headers, recipe_form, png_bytes):
    form = recipe_form()
    form["instructions"] = "not json"

    res = _post(strict_client, admin_headers, form, ("tea.png", png_bytes, "image/png"))

    assert res.status_code == 422
    assert res.json()["error"] == "Invalid instructions"
    assert strict_client.get("/api/recipes").json() == []


class TestList:
    def _seed(self, client, headers, recipe_form):
        ids = {}
        for title, category, description in [
            ("Tea", "drinks", "A calming cup"),
            ("Pancakes", "breakfast", "Fluffy stack"),
            ("Iced Tea", "drinks", "Cold and sweet"),
        ]:
            form = recipe_form(title=title, category=category, description=description)
            ids[title] = _post(client, headers, form).json()["recipeId"]
        return ids

    def test_list_newest_first(self, client, admin_headers, recipe_form):
        ids = self._seed(client, admin_headers, recipe_form)

        rows = client.get("/api/recipes").json()

        assert [r["id"] for r in rows] == [ids["Iced Tea"], ids["Pancakes"], ids["Tea"]]
        assert "ingredients" not in rows[0]

    def test_filter_by_category(self, client, admin_headers, recipe_form):
        self._seed(client, admin_headers, recipe_form)

        rows = client.get("/api/recipes", params={"category": "breakfast"}).json()
        assert [r["title"] for r in rows] == ["Pancakes"]

        rows = client.get("/api/recipes", params={"category": "all"}).json()
        assert len(rows) == 3

    def test_filter_favorites(self, client, admin_headers, recipe_form):
        ids = self._seed(client, admin_headers, recipe_form)
        client.patch(f"/api/recipes/{ids['Pancakes']}/favorite")

        rows = client.get("/api/recipes", params={"category": "favorites"}).json()

        assert [r["id"] for r in rows] == [ids["Pancakes"]]

    def test_search(self, client, admin_headers, recipe_form):
        self._seed(client, admin_headers, recipe_form)

        rows = client.get("/api/recipes", params={"search": "sweet"}).json()
        assert [r["title"] for r in rows] == ["Iced Tea"]

        rows = client.get("/api/recipes", params={"category": "drinks", "search": "Tea"}).json()
        assert {r["title"] for r in rows} == {"Tea", "Iced Tea"}


class TestReplace:
    def test_replace_fields_and_children(self, client, admin_headers, recipe_form):
        recipe_id = _post(client, admin_headers, recipe_form()).json()["recipeId"]
        form = recipe_form(
            ingredients=[{"group": "Spices", "items": ["cardamom", "ginger"]}],
            instructions=["Simmer with milk"],
            title="Chai",
        )

        res = client.put(f"/api/recipes/{recipe_id}", data=form, headers=admin_headers)

        assert res.status_code == 200
        assert res.json()["message"] == "Recipe updated successfully"
        recipe = client.get(f"/api/recipes/{recipe_id}").json()
        assert recipe["title"] == "Chai"
        assert recipe["ingredients"] == [{"group": "Spices", "items": ["cardamom", "ginger"]}]
        assert recipe["instructions"] == ["Simmer with milk"]

    def test_replace_keeps_image_and_favorite(self, client, admin_headers, recipe_form, png_bytes):
        created = _post(client, admin_headers, recipe_form(), ("tea.png", png_bytes, "image/png")).json()
        recipe_id = created["recipeId"]
        client.patch(f"/api/recipes/{recipe_id}/favorite")

        client.put(f"/api/recipes/{recipe_id}", data=recipe_form(title="Chai"), headers=admin_headers)

        recipe = client.get(f"/api/recipes/{recipe_id}").json()
        assert recipe["image_url"] == created["image_url"]
        assert recipe["is_favorite"] is True

    def test_replace_image_removes_previous_file(self, client, admin_headers, recipe_form, png_bytes, context):
        old_url = _post(
            client, admin_headers, recipe_form(), ("tea.png", png_bytes, "image/png")
        ).json()["image_url"]
        recipe_id = client.get("/api/recipes").json()[0]["id"]

        res = client.put(
            f"/api/recipes/{recipe_id}",
            data=recipe_form(),
            files={"image": ("new.gif", b"GIF89a", "image/gif")},
            headers=admin_headers,
        )

        new_url = res.json()["image_url"]
        assert new_url.endswith(".gif")
        assert client.get(f"/api/recipes/{recipe_id}").json()["image_url"] == new_url
        assert not context.storage.exists(old_url)

    def test_replace_missing_is_404(self, client, admin_headers, recipe_form, png_bytes, context):
        res = client.put(
            "/api/recipes/999",
            data=recipe_form(),
            files={"image": ("tea.png", png_bytes, "image/png")},
            headers=admin_headers,
        )

        assert res.status_code == 404
        assert res.json()["error"] == "Recipe not found"
        assert list(context.storage.root.iterdir()) == []


class TestDelete:
    def test_delete_removes_recipe_and_image(self, client, admin_headers, recipe_form, png_bytes, context):
        created = _post(client, admin_headers, recipe_form(), ("tea.png", png_bytes, "image/png")).json()
        recipe_id = created["recipeId"]

        res = client.delete(f"/api/recipes/{recipe_id}", headers=admin_headers)

        assert res.status_code == 200
        assert res.json() == {"message": "Recipe deleted successfully", "deletedId": recipe_id}
        assert client.get(f"/api/recipes/{recipe_id}").status_code == 404
        assert not context.storage.exists(created["image_url"])

    def test_delete_missing_is_404(self, client, admin_headers):
        assert client.delete("/api/recipes/999", headers=admin_headers).status_code == 404


class TestFavorite:
    def test_toggle_twice(self, client, admin_headers, recipe_form):
        recipe_id = _post(client, admin_headers, recipe_form()).json()["recipeId"]

        first = client.patch(f"/api/recipes/{recipe_id}/favorite").json()
        second = client.patch(f"/api/recipes/{recipe_id}/favorite").json()

        assert first == {"message": "Favorite status toggled successfully", "is_favorite": True}
        assert second["is_favorite"] is False

    def test_toggle_missing_is_404(self, client):
        assert client.patch("/api/recipes/999/favorite").status_code == 404


def test_get_missing_is_404(client):
    res = client.get("/api/recipes/4242")
    assert res.status_code == 404
    assert res.json()["error"] == "Recipe not found"


def test_uploaded_image_is_served(client, admin_headers, recipe_form, png_bytes):
    url = _post(client, admin_headers, recipe_form(), ("tea.png", png_bytes, "image/png")).json()["image_url"]

    res = client.get(url)

    assert res.status_code == 200
    assert res.content == png_bytes


def test_ready(client):
    assert client.get("/api/ready").json() == {"ok": True, "db_ok": True}


def test_rate_limit(settings):
    app = create_app(settings.model_copy(update={"rate_limit_enabled": True, "rate_limit": "2/minute"}))
    with TestClient(app) as c:
        assert c.get("/api/recipes").status_code == 200
        assert c.get("/api/recipes").status_code == 200
        res = c.get("/api/recipes")

    assert res.status_code == 429
    assert "error" in res.json()


def test_rate_limit_buckets_are_per_operation(settings, admin_headers, recipe_form):
    app = create_app(settings.model_copy(update={"rate_limit_enabled": True, "rate_limit": "2/minute"}))
    with TestClient(app) as c:
        for _ in range(2):
            assert c.get("/api/recipes").status_code == 200
        assert c.get("/api/recipes").status_code == 429

        assert c.get("/api/ready").status_code == 200
        assert c.post("/api/recipes", data=recipe_form(), headers=admin_headers).status_code == 201
        assert c.post("/api/recipes", data=recipe_form(), headers={"X-Admin-Password": "x"}).status_code == 401
        assert c.post("/api/recipes", data=recipe_form(), headers=admin_headers).status_code == 429
