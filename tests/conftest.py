import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["ENVIRONMENT"] = "test"

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from swipechef.auth import ClerkUser
from swipechef.db.database import Base
from swipechef.errors import StorageError
from swipechef.gateway import build_gateways
from swipechef.models.entities import Ingredient, RecipeForm
import swipechef.models  # noqa: F401


class FakeStorage:
    """In-memory stand-in for the S3 storage service."""

    def __init__(self):
        self.objects: dict[str, str] = {}
        self.deleted: list[str] = []
        self.fail_uploads = False

    async def upload_recipe_image(self, uri: str, recipe_key: str, user_id: str) -> str:
        if self.fail_uploads:
            raise StorageError("upload refused")
        url = f"https://test-bucket.s3.us-east-1.amazonaws.com/recipe-images/{user_id}/{recipe_key}_{len(self.objects)}.jpg"
        self.objects[url] = uri
        return url

    async def delete_recipe_image(self, image_url: str) -> bool:
        self.deleted.append(image_url)
        return self.objects.pop(image_url, None) is not None


def recipe_form(title: str = "Pasta", **overrides) -> RecipeForm:
    values = {
        "title": title,
        "description": f"{title} for two",
        "ingredients": [Ingredient(name="Spaghetti", quantity="200", unit="g")],
        "steps": ["Boil water", "Cook pasta"],
    }
    values.update(overrides)
    return RecipeForm(**values)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'swipechef.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def alice():
    return ClerkUser(id="user_alice", email="alice@example.com", first_name="Alice")


@pytest.fixture
def bob():
    return ClerkUser(id="user_bob", email="bob@example.com", first_name="Bob")


@pytest.fixture
def carol():
    return ClerkUser(id="user_carol", email="carol@example.com")


@pytest.fixture
def make_form():
    return recipe_form


@pytest.fixture
def gateways_for(session_factory, storage):
    def build(user):
        return build_gateways(user, session_factory, storage=storage)
    return build


@pytest.fixture
def alice_gw(gateways_for, alice):
    return gateways_for(alice)


@pytest.fixture
def bob_gw(gateways_for, bob):
    return gateways_for(bob)


@pytest.fixture
def carol_gw(gateways_for, carol):
    return gateways_for(carol)


@pytest.fixture
def unreachable_session_factory():
    """A session factory that fails the test if anything tries to connect."""
    def factory():
        raise AssertionError("no database request expected")
    return factory
