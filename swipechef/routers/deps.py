"""Shared router dependencies and error translation."""

from typing import TypeVar

from fastapi import Depends, HTTPException

from swipechef.auth import ClerkUser, get_current_user
from swipechef.errors import GatewayError, RemoteFailure
from swipechef.gateway import Gateways, Result
from swipechef.sessions import SessionRegistry, get_session_registry
from swipechef.store import RecipeStore

T = TypeVar("T")


async def get_store(
    user: ClerkUser = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_session_registry),
) -> RecipeStore:
    """The caller's session store, started on first use."""
    return await registry.get_or_start(user)


def get_gateways(
    user: ClerkUser = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_session_registry),
) -> Gateways:
    return registry.gateways_for(user)


def http_error(error: GatewayError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.message)


def unwrap(result: Result[T]) -> T:
    """Payload of a successful Result, or the matching HTTPException."""
    if not result.ok:
        raise http_error(result.error)
    return result.data


def store_failure(store: RecipeStore) -> HTTPException:
    return http_error(store.last_error or RemoteFailure())
