"""Result values returned across the gateway boundary."""

from dataclasses import dataclass
from functools import wraps
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar
import logging

from botocore.exceptions import BotoCoreError, ClientError
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError

from swipechef.errors import Conflict, GatewayError, NotFound, RemoteFailure, StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Result(Generic[T]):
    """`data` on success, `error` on failure. Never both."""
    data: Optional[T] = None
    error: Optional[GatewayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Optional[T] = None) -> "Result[T]":
        return cls(data=data)

    @classmethod
    def failure(cls, error: GatewayError) -> "Result[T]":
        return cls(error=error)


def to_gateway_error(exc: Exception) -> GatewayError:
    """Map whatever the database or object store raised onto the taxonomy."""
    if isinstance(exc, GatewayError):
        return exc
    if isinstance(exc, IntegrityError):
        return Conflict(str(exc.orig) if exc.orig is not None else str(exc))
    if isinstance(exc, NoResultFound):
        return NotFound()
    if isinstance(exc, (SQLAlchemyError, StorageError, ClientError, BotoCoreError)):
        return RemoteFailure(str(exc))
    return RemoteFailure(str(exc) or exc.__class__.__name__)


def gateway_call(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[Result[T]]]:
    """
    Wrap a gateway coroutine so it returns a Result instead of raising.

    Inside the wrapped coroutine, failures are raised as GatewayError
    subclasses (or come from SQLAlchemy/boto3) and the return value is the
    success payload.
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Result[T]:
        try:
            return Result.success(await func(*args, **kwargs))
        except Exception as exc:
            error = to_gateway_error(exc)
            if isinstance(exc, GatewayError):
                logger.info("%s: %s", func.__qualname__, error.message)
            else:
                logger.exception("Error in %s", func.__qualname__)
            return Result.failure(error)

    return wrapper
