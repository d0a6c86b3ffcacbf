import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from swipechef.errors import Conflict, NotAuthenticated, NotFound, RemoteFailure, ValidationFailed
from swipechef.gateway import RecipeGateway
from swipechef.models.entities import MealSlot, MealType, RecipeForm
from swipechef.models.recipe import RecipeRecord


async def count_recipes(session_factory) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count(RecipeRecord.id)))).scalar()


@pytest.mark.asyncio
async def test_incomplete_recipe_rejected_before_any_request(alice, storage, unreachable_session_factory) -> None:
    gateway = RecipeGateway(alice, unreachable_session_factory, storage=storage)
    form = RecipeForm(title="Pasta", is_simple=False, ingredients=[], steps=[])

    result = await gateway.create_recipe(form)

    assert not result.ok
    assert isinstance(result.error, ValidationFailed)
    assert storage.objects == {}


@pytest.mark.asyncio
async def test_simple_recipe_only_needs_title(alice_gw) -> None:
    result = await alice_gw.recipes.create_recipe(RecipeForm(title="  Toast ", is_simple=True))

    assert result.ok
    assert result.data.title == "Toast"
    assert result.data.owner_id == "user_alice"


@pytest.mark.asyncio
async def test_meal_type_all_is_not_a_recipe_type(alice_gw, make_form) -> None:
    result = await alice_gw.recipes.create_recipe(make_form(meal_type=MealType.ALL))
    assert isinstance(result.error, ValidationFailed)


@pytest.mark.asyncio
async def test_requests_need_a_user(storage, unreachable_session_factory, make_form) -> None:
    gateway = RecipeGateway(None, unreachable_session_factory, storage=storage)

    assert isinstance((await gateway.create_recipe(make_form())).error, NotAuthenticated)
    assert isinstance((await gateway.get_user_recipes()).error, NotAuthenticated)
    assert isinstance((await gateway.like_recipe("whatever")).error, NotAuthenticated)


@pytest.mark.asyncio
async def test_user_recipes_newest_first_and_scoped(alice_gw, bob_gw, make_form) -> None:
    await alice_gw.recipes.create_recipe(make_form("First"))
    await alice_gw.recipes.create_recipe(make_form("Second"))
    await bob_gw.recipes.create_recipe(make_form("Bob's"))

    result = await alice_gw.recipes.get_user_recipes()

    assert [r.title for r in result.data] == ["Second", "First"]


@pytest.mark.asyncio
async def test_blank_ingredients_and_steps_are_dropped(alice_gw, make_form) -> None:
    form = make_form(
        ingredients=[{"name": "Rice"}, {"name": "  "}],
        steps=["Cook", " "],
        equipment=["", " "],
    )
    recipe = (await alice_gw.recipes.create_recipe(form)).data

    assert [i.name for i in recipe.ingredients] == ["Rice"]
    assert recipe.steps == ["Cook"]
    assert recipe.equipment is None


@pytest.mark.asyncio
async def test_local_image_is_uploaded_before_insert(alice_gw, storage, make_form) -> None:
    result = await alice_gw.recipes.create_recipe(make_form(image_url="file:///tmp/photo.jpg"))

    assert result.ok
    assert result.data.image_url in storage.objects
    assert "/recipe-images/user_alice/" in result.data.image_url


@pytest.mark.asyncio
async def test_remote_image_url_is_stored_as_is(alice_gw, storage, make_form) -> None:
    url = "https://example.com/pasta.jpg"
    result = await alice_gw.recipes.create_recipe(make_form(image_url=url))

    assert result.data.image_url == url
    assert storage.objects == {}


@pytest.mark.asyncio
async def test_failed_insert_removes_uploaded_image(alice_gw, storage, session_factory, make_form, monkeypatch) -> None:
    async def failing_insert(session, values):
        raise SQLAlchemyError("insert failed")

    monkeypatch.setattr(alice_gw.recipes, "_insert_recipe", failing_insert)

    result = await alice_gw.recipes.create_recipe(make_form(image_url="file:///tmp/photo.jpg"))

    assert isinstance(result.error, RemoteFailure)
    assert len(storage.deleted) == 1
    assert storage.objects == {}
    assert await count_recipes(session_factory) == 0


@pytest.mark.asyncio
async def test_upload_failure_fails_the_create(alice_gw, storage, session_factory, make_form) -> None:
    storage.fail_uploads = True

    result = await alice_gw.recipes.create_recipe(make_form(image_url="file:///tmp/photo.jpg"))

    assert isinstance(result.error, RemoteFailure)
    assert await count_recipes(session_factory) == 0


@pytest.mark.asyncio
async def test_update_is_owner_scoped(alice_gw, bob_gw, make_form) -> None:
    recipe = (await alice_gw.recipes.create_recipe(make_form())).data

    result = await bob_gw.recipes.update_recipe(recipe.id, make_form("Stolen"))

    assert isinstance(result.error, NotFound)
    assert (await alice_gw.recipes.get_recipe_by_id(recipe.id)).data.title == "Pasta"


@pytest.mark.asyncio
async def test_update_replaces_image_and_deletes_old_one(alice_gw, storage, make_form) -> None:
    recipe = (await alice_gw.recipes.create_recipe(make_form(image_url="file:///tmp/one.jpg"))).data
    old_url = recipe.image_url

    result = await alice_gw.recipes.update_recipe(
        recipe.id, make_form("Pasta al forno", image_url="file:///tmp/two.jpg"), old_url
    )

    assert result.ok
    assert result.data.title == "Pasta al forno"
    assert result.data.image_url != old_url
    assert result.data.image_url in storage.objects
    assert old_url in storage.deleted


@pytest.mark.asyncio
async def test_failed_update_keeps_old_image(alice_gw, storage, make_form) -> None:
    recipe = (await alice_gw.recipes.create_recipe(make_form(image_url="file:///tmp/one.jpg"))).data

    result = await alice_gw.recipes.update_recipe(recipe.id, make_form(title=""), recipe.image_url)

    assert isinstance(result.error, ValidationFailed)
    assert recipe.image_url in storage.objects


@pytest.mark.asyncio
async def test_delete_removes_image_likes_and_plans(alice_gw, bob_gw, storage, make_form) -> None:
    recipe = (await alice_gw.recipes.create_recipe(make_form(image_url="file:///tmp/one.jpg"))).data
    await bob_gw.recipes.like_recipe(recipe.id)
    await alice_gw.meal_plans.upsert_meal_plan(recipe.created_at.date(), MealSlot.DINNER, recipe.id)

    result = await alice_gw.recipes.delete_recipe(recipe.id, recipe.image_url)

    assert result.ok
    assert recipe.image_url in storage.deleted
    assert isinstance((await alice_gw.recipes.get_recipe_by_id(recipe.id)).error, NotFound)
    assert (await bob_gw.recipes.get_liked_recipes()).data == []
    assert (await alice_gw.meal_plans.list_meal_plans()).data == []


@pytest.mark.asyncio
async def test_delete_someone_elses_recipe_is_not_found(alice_gw, bob_gw, make_form) -> None:
    recipe = (await alice_gw.recipes.create_recipe(make_form())).data

    result = await bob_gw.recipes.delete_recipe(recipe.id)

    assert isinstance(result.error, NotFound)
    assert (await alice_gw.recipes.get_recipe_by_id(recipe.id)).ok


@pytest.mark.asyncio
async def test_unknown_ids_are_not_found(alice_gw) -> None:
    assert isinstance((await alice_gw.recipes.get_recipe_by_id("not-a-uuid")).error, NotFound)
    assert isinstance(
        (await alice_gw.recipes.get_recipe_by_id("00000000-0000-0000-0000-000000000000")).error, NotFound
    )


@pytest.mark.asyncio
async def test_like_lifecycle(alice_gw, bob_gw, make_form) -> None:
    recipe = (await alice_gw.recipes.create_recipe(make_form())).data

    assert (await bob_gw.recipes.like_recipe(recipe.id)).ok
    assert (await bob_gw.recipes.is_recipe_liked(recipe.id)).data is True
    assert [r.id for r in (await bob_gw.recipes.get_liked_recipes()).data] == [recipe.id]

    duplicate = await bob_gw.recipes.like_recipe(recipe.id)
    assert isinstance(duplicate.error, Conflict)

    assert (await bob_gw.recipes.unlike_recipe(recipe.id)).ok
    assert (await bob_gw.recipes.is_recipe_liked(recipe.id)).data is False


@pytest.mark.asyncio
async def test_like_unknown_recipe_is_not_found(bob_gw) -> None:
    result = await bob_gw.recipes.like_recipe("00000000-0000-0000-0000-000000000000")
    assert isinstance(result.error, NotFound)
