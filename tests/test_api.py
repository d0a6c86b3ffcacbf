import json

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from swipechef.auth import get_current_user
from swipechef.main import app
from swipechef.sessions import SessionRegistry, get_session_registry


@pytest.fixture
def registry(session_factory, storage):
    return SessionRegistry(session_factory, storage, use_sample_fallback=False)


@pytest_asyncio.fixture
async def client(registry, alice):
    app.dependency_overrides[get_current_user] = lambda: alice
    app.dependency_overrides[get_session_registry] = lambda: registry
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def recipe_body(title: str = "Pasta", **extra) -> dict:
    body = {
        "title": title,
        "mealType": "dinner",
        "isSimple": False,
        "ingredients": [{"name": "Spaghetti", "quantity": "200", "unit": "g"}],
        "steps": ["Boil water", "Cook pasta"],
        "prepTime": 5,
        "cookTime": 10,
    }
    body.update(extra)
    return body


@pytest.mark.asyncio
async def test_requests_without_token_are_rejected() -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/recipes")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_session_start_and_end(client, registry) -> None:
    response = await client.post("/api/session")

    assert response.status_code == 200
    body = response.json()
    assert body["userId"] == "user_alice"
    assert body["recipeCount"] == 0
    assert body["settings"]["showDinner"] is True
    assert len(registry) == 1

    response = await client.delete("/api/session")
    assert response.json() == {"message": "Signed out"}
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_session_start_reloads_a_live_session(client, alice_gw, make_form) -> None:
    assert (await client.post("/api/session")).json()["recipeCount"] == 0

    await alice_gw.recipes.create_recipe(make_form("Pasta"))

    assert (await client.post("/api/session")).json()["recipeCount"] == 1


@pytest.mark.asyncio
async def test_create_and_list_recipes(client) -> None:
    response = await client.post("/api/recipes", json=recipe_body())

    assert response.status_code == 201
    created = response.json()
    assert created["ownerId"] == "user_alice"
    assert created["mealType"] == "dinner"
    assert created["ingredients"][0]["name"] == "Spaghetti"

    listed = (await client.get("/api/recipes")).json()
    assert [r["id"] for r in listed] == [created["id"]]

    fetched = await client.get(f"/api/recipes/{created['id']}")
    assert fetched.json()["title"] == "Pasta"


@pytest.mark.asyncio
async def test_invalid_recipe_is_422(client) -> None:
    response = await client.post("/api/recipes", json=recipe_body(ingredients=[], steps=[]))

    assert response.status_code == 422
    assert response.json()["detail"] == "Add at least one ingredient"


@pytest.mark.asyncio
async def test_create_with_image_upload(client, storage) -> None:
    response = await client.post(
        "/api/recipes/with-image",
        data={"recipe_data": json.dumps(recipe_body("Pizza"))},
        files={"image": ("pizza.png", b"\x89PNG fake", "image/png")},
    )

    assert response.status_code == 201
    image_url = response.json()["imageUrl"]
    assert image_url in storage.objects
    assert storage.objects[image_url].startswith("file://")


@pytest.mark.asyncio
async def test_update_and_delete_recipe(client) -> None:
    created = (await client.post("/api/recipes", json=recipe_body())).json()

    updated = await client.put(f"/api/recipes/{created['id']}", json=recipe_body("Pasta al forno"))
    assert updated.json()["title"] == "Pasta al forno"

    deleted = await client.delete(f"/api/recipes/{created['id']}")
    assert deleted.status_code == 200
    assert (await client.get("/api/recipes")).json() == []

    missing = await client.delete(f"/api/recipes/{created['id']}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_like_search_and_tabs(client, bob_gw, make_form) -> None:
    theirs = (await bob_gw.recipes.create_recipe(make_form("Green Curry"))).data
    await client.post("/api/recipes", json=recipe_body("Lasagne"))

    liked = await client.post(f"/api/recipes/{theirs.id}/like")
    assert liked.json() == {"recipeId": theirs.id, "liked": True}
    assert (await client.get(f"/api/recipes/{theirs.id}/like")).json()["liked"] is True

    assert [r["title"] for r in (await client.get("/api/recipes/liked")).json()] == ["Green Curry"]
    assert [r["title"] for r in (await client.get("/api/recipes", params={"tab": "all"})).json()] == [
        "Lasagne", "Green Curry",
    ]
    assert [r["title"] for r in (await client.get("/api/recipes/search", params={"q": "CURRY"})).json()] == [
        "Green Curry",
    ]

    unliked = await client.delete(f"/api/recipes/{theirs.id}/like")
    assert unliked.json()["liked"] is False


@pytest.mark.asyncio
async def test_empty_deck(client) -> None:
    await client.post("/api/recipes", json=recipe_body())
    deck = (await client.get("/api/recipes/deck")).json()
    assert deck == {"current": None, "next": None, "remaining": 0}


@pytest.mark.asyncio
async def test_meal_plan_endpoints(client) -> None:
    oats = (await client.post("/api/recipes", json=recipe_body("Oats", mealType="breakfast"))).json()
    pancakes = (await client.post("/api/recipes", json=recipe_body("Pancakes", mealType="breakfast"))).json()

    for recipe in (oats, pancakes):
        response = await client.post(
            "/api/meal-plans",
            json={"date": "2024-06-01", "mealSlot": "breakfast", "recipeId": recipe["id"]},
        )
        assert response.status_code == 201

    day = (await client.get("/api/meal-plans/day/2024-06-01")).json()
    assert [m["recipe"]["id"] for m in day] == [pancakes["id"]]

    week = (await client.get("/api/meal-plans/week", params={"week_of": "2024-06-01"})).json()
    assert week["weekStart"] == "2024-05-27"
    assert len(week["days"]) == 7
    assert week["days"][5]["breakfast"]["recipe"]["title"] == "Pancakes"

    removed = await client.delete("/api/meal-plans/2024-06-01/breakfast")
    assert removed.status_code == 200
    assert (await client.get("/api/meal-plans/day/2024-06-01")).json() == []


@pytest.mark.asyncio
async def test_settings_endpoints(client) -> None:
    assert (await client.get("/api/settings")).json()["showSnack"] is True

    patched = await client.patch("/api/settings", json={"showBreakfast": False, "showLunch": False})
    assert patched.json()["showBreakfast"] is False

    assert (await client.post("/api/settings/toggle/snack")).json()["showSnack"] is False
    refused = await client.post("/api/settings/toggle/dinner")
    assert refused.status_code == 422


@pytest.mark.asyncio
async def test_household_endpoints(client, bob_gw) -> None:
    assert (await client.get("/api/households/me")).json() is None

    created = await client.post("/api/households", json={"name": "Smith Family"})
    assert created.status_code == 201
    household = created.json()
    assert len(household["code"]) == 6

    conflict = await client.post("/api/households", json={"name": "Another"})
    assert conflict.status_code == 409

    bad_code = await bob_gw.households.join_household_by_code("??????")
    assert bad_code.error.status_code == 404

    invite = await client.post(f"/api/households/{household['id']}/invitations", json={"email": "bob@example.com"})
    assert invite.status_code == 201
    assert invite.json()["householdName"] == "Smith Family"

    members = (await client.get(f"/api/households/{household['id']}/members")).json()
    assert [(m["userId"], m["role"]) for m in members] == [("user_alice", "owner")]

    left = await client.post("/api/households/leave")
    assert left.status_code == 200
    assert (await client.get("/api/households/me")).json() is None


@pytest.mark.asyncio
async def test_join_with_unknown_code_is_404(client) -> None:
    response = await client.post("/api/households/join", json={"code": "zzzzzz"})
    assert response.status_code == 404
    assert response.json()["detail"] == "Invalid household code"
