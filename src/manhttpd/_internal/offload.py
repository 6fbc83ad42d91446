"""Blocking-work offload.

The request path touches the filesystem and spawns ``mandoc``. None of
that may run on the event loop, which is also servicing the connection's
reads and keep-alive timer. Callers depend on the ``Offload`` shape
instead of on anyio directly so tests can swap in ``run_inline``.

Usage::

    mtime = await run_blocking(lambda: store.modified(path))
"""

from collections.abc import Awaitable, Callable
from typing import TypeAlias, TypeVar

import anyio

Offload: TypeAlias = Callable[[Callable[[], object]], Awaitable[object]]

T = TypeVar("T")


async def run_blocking(func: Callable[[], T]) -> T:
    """Run *func* in anyio's worker thread pool and await its result.

    The pool is bounded by anyio's default capacity limiter. Cancelling the
    awaiting task does not abandon the thread: the call runs to completion.
    """
    return await anyio.to_thread.run_sync(func)


async def run_inline(func: Callable[[], T]) -> T:
    """Run *func* directly on the calling task. For tests and tooling."""
    return func()
