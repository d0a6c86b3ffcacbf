"""Registry of live session stores, one per signed-in user."""

from typing import Callable, Optional
import asyncio
import logging
import time

from swipechef.auth import ClerkUser
from swipechef.config import get_settings
from swipechef.gateway import Gateways, build_gateways
from swipechef.store import RecipeStore

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    Creates, starts and ends RecipeStores.

    Stores are built explicitly here and handed to whoever needs them; there
    is no global "current store". Loads are serialized per user, never across
    users. Stores left idle for longer than `idle_ttl` seconds are torn down
    and dropped on the next access to the registry.
    """

    def __init__(
        self,
        session_factory=None,
        storage=None,
        use_sample_fallback: Optional[bool] = None,
        idle_ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        settings = get_settings()
        self.session_factory = session_factory
        self.storage = storage
        if use_sample_fallback is None:
            use_sample_fallback = settings.sample_recipes_fallback
        self.use_sample_fallback = use_sample_fallback
        if idle_ttl is None:
            idle_ttl = settings.session_idle_ttl_seconds
        self.idle_ttl = idle_ttl
        self.clock = clock
        self._stores: dict[str, RecipeStore] = {}
        self._last_used: dict[str, float] = {}
        self._user_locks: dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._stores)

    def gateways_for(self, user: ClerkUser) -> Gateways:
        return build_gateways(user, self.session_factory, storage=self.storage)

    def get(self, user_id: str) -> Optional[RecipeStore]:
        return self._stores.get(user_id)

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._user_locks.get(user_id)
        if lock is None:
            lock = self._user_locks[user_id] = asyncio.Lock()
        return lock

    def _drop(self, user_id: str) -> Optional[RecipeStore]:
        store = self._stores.pop(user_id, None)
        self._last_used.pop(user_id, None)
        lock = self._user_locks.get(user_id)
        if lock is not None and not lock.locked():
            del self._user_locks[user_id]
        if store is not None:
            store.teardown()
        return store

    def evict_idle(self) -> int:
        """Tear down stores nobody has touched for `idle_ttl` seconds. Returns how many."""
        if not self.idle_ttl or self.idle_ttl <= 0:
            return 0
        cutoff = self.clock() - self.idle_ttl
        stale = []
        for user_id, used in self._last_used.items():
            store = self._stores.get(user_id)
            if used >= cutoff or self._lock_for(user_id).locked():
                continue
            if store is not None and store.has_pending_changes:
                continue
            stale.append(user_id)
        for user_id in stale:
            self._drop(user_id)
        if stale:
            logger.info("Evicted %d idle sessions", len(stale))
        return len(stale)

    async def get_or_start(self, user: ClerkUser, refresh: bool = False) -> RecipeStore:
        """
        Return the user's store, creating and loading it on first use.

        An existing store is reloaded when `refresh` is set or while it is
        still serving the sample recipes.
        """
        self.evict_idle()
        async with self._lock_for(user.id):
            store = self._stores.get(user.id)
            self._last_used[user.id] = self.clock()
            if store is None:
                store = RecipeStore(
                    user,
                    self.gateways_for(user),
                    use_sample_fallback=self.use_sample_fallback,
                )
                self._stores[user.id] = store
                logger.info("Starting session for user %s", user.id)
                await store.start()
            elif refresh or store.using_sample_data:
                logger.info("Reloading session for user %s", user.id)
                await store.start()
            self._last_used[user.id] = self.clock()
            return store

    async def end(self, user_id: str) -> bool:
        lock = self._lock_for(user_id)
        async with lock:
            store = self._drop(user_id)
        if not lock.locked():
            self._user_locks.pop(user_id, None)
        if store is None:
            return False
        logger.info("Ended session for user %s", user_id)
        return True

    async def close_all(self) -> None:
        user_ids = list(self._stores)
        for user_id in user_ids:
            self._drop(user_id)
        if user_ids:
            logger.info("Closed %d sessions", len(user_ids))


session_registry: Optional[SessionRegistry] = None


def get_session_registry() -> SessionRegistry:
    """FastAPI dependency returning the process-wide registry."""
    global session_registry
    if session_registry is None:
        session_registry = SessionRegistry()
    return session_registry
