"""Wall-clock timeouts for provider calls."""

import asyncio
from typing import Awaitable, Optional, TypeVar

from .exceptions import ProviderTimeoutError

T = TypeVar("T")


async def with_timeout(
    awaitable: Awaitable[T],
    seconds: float,
    operation: str,
    provider: Optional[str] = None,
) -> T:
    """Await ``awaitable``; raise ``ProviderTimeoutError`` after ``seconds``.

    Timeouts are transient, so callers retry them like any other
    ``TransientProviderError``.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError as exc:
        raise ProviderTimeoutError(
            f"{operation} timed out after {seconds:g}s", provider=provider
        ) from exc


__all__ = ["with_timeout"]
