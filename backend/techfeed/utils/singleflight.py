"""Single-flight guard: at most one operation in flight, later callers share its outcome."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """
    Run an async operation once for any number of concurrent callers.

    The first caller runs the operation. Callers arriving while it is in
    flight are queued as waiters and released with the same result (or
    exception) when it completes. The next call after completion starts a
    new operation.
    """

    def __init__(self) -> None:
        self._in_flight = False
        self._waiters: list[asyncio.Future[T]] = []

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        if self._in_flight:
            waiter: asyncio.Future[T] = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            return await waiter

        self._in_flight = True
        try:
            result = await operation()
        except Exception as exc:
            for waiter in self._release():
                waiter.set_exception(exc)
            raise
        except BaseException:
            for waiter in self._release():
                waiter.cancel()
            raise

        for waiter in self._release():
            waiter.set_result(result)
        return result

    def _release(self) -> list[asyncio.Future[T]]:
        waiters = [w for w in self._waiters if not w.done()]
        self._waiters = []
        self._in_flight = False
        return waiters
