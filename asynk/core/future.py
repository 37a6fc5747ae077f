"""
Future

Settle-once asynchronous result handle with continuation registration,
value flattening and an asyncio bridge.
"""

import asyncio
import logging
from typing import Any, Callable, Generic, Iterable, List, Optional, Tuple, TypeVar

from ..exceptions import FutureNotReady, ResolutionCycleError, as_exception, unwrap_rejection
from .reactor import Reactor

T = TypeVar('T')

logger = logging.getLogger(__name__)

PENDING = "pending"
FULFILLED = "fulfilled"
REJECTED = "rejected"


def is_future(value: Any) -> bool:
    """
    Check whether ``value`` honours the future contract.

    Accepts asynk futures, asyncio futures and tasks, and "thenables":
    objects exposing ``then(on_fulfilled, on_rejected)``.
    """
    if isinstance(value, Future) or asyncio.isfuture(value):
        return True
    if isinstance(value, type):
        return False
    return callable(getattr(value, "then", None))


class Future(Generic[T]):
    """
    Asynchronous result handle.

    A future starts pending and settles exactly once, either fulfilled with
    a value or rejected with a reason. The reason may be any object; it is
    only wrapped in ``Rejection`` when it has to be raised.

    Continuations registered with ``then`` always run on a later turn of the
    ``Reactor``, even when the future has already settled.

    Examples:
        # Async/await
        result = await future

        # Explicit chaining
        future.then(lambda x: x * 2).then(lambda y: str(y))
    """

    def __init__(self):
        self._state = PENDING
        self._value: Optional[T] = None
        self._exception: Any = None
        self._adopting = False
        self._callbacks: List[Tuple[Callable[[Any], Any], Callable[[Any], Any]]] = []

    def __repr__(self):
        return f"<Future {self._state} at {hex(id(self))}>"

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    def resolve(self, value: Any) -> bool:
        """
        Fulfill the future, adopting ``value`` if it is itself a future.

        Adoption is transitive: a future resolved with a future of a future
        settles with the innermost outcome.

        Returns:
            False if the future was already settled or adopting another one
        """
        if self._state != PENDING or self._adopting:
            return False
        self._resolve(value)
        return True

    def reject(self, reason: Any) -> bool:
        """
        Reject the future with ``reason``.

        Returns:
            False if the future was already settled or adopting another one
        """
        if self._state != PENDING or self._adopting:
            return False
        self._settle(REJECTED, reason)
        return True

    def _resolve(self, value: Any) -> None:
        if value is self:
            self._settle(REJECTED, ResolutionCycleError("Future cannot be resolved with itself"))
            return

        if is_future(value):
            self._adopting = True
            Future.cast(value)._subscribe(self._resolve, self._adopted_rejection)
            return

        self._settle(FULFILLED, value)

    def _adopted_rejection(self, reason: Any) -> None:
        self._settle(REJECTED, reason)

    def _settle(self, state: str, result: Any) -> None:
        if self._state != PENDING:
            return

        self._state = state
        if state == FULFILLED:
            self._value = result
        else:
            self._exception = result

        callbacks, self._callbacks = self._callbacks, []
        for on_fulfilled, on_rejected in callbacks:
            self._schedule(on_fulfilled, on_rejected)

    def _schedule(self, on_fulfilled: Callable[[Any], Any], on_rejected: Callable[[Any], Any]) -> None:
        if self._state == FULFILLED:
            Reactor.call_soon(on_fulfilled, self._value)
        else:
            Reactor.call_soon(on_rejected, self._exception)

    def _subscribe(self, on_fulfilled: Callable[[Any], Any], on_rejected: Callable[[Any], Any]) -> None:
        """Register raw continuations; exactly one of them runs, on a later turn."""
        if self._state == PENDING:
            self._callbacks.append((on_fulfilled, on_rejected))
        else:
            self._schedule(on_fulfilled, on_rejected)

    # ------------------------------------------------------------------
    # Chaining
    # ------------------------------------------------------------------

    def then(
        self,
        on_fulfilled: Optional[Callable[[T], Any]] = None,
        on_rejected: Optional[Callable[[Any], Any]] = None,
    ) -> 'Future':
        """
        Explicit continuation chaining.

        Args:
            on_fulfilled: Continuation that receives the value
            on_rejected: Continuation that receives the rejection reason

        Returns:
            New future resolved with the continuation's return value, or
            rejected with what it raised. A missing continuation passes the
            outcome through unchanged.

        Example:
            future.then(lambda x: x * 2).then(lambda y: str(y))
        """
        derived: Future = Future()

        def _fulfilled(value):
            if on_fulfilled is None:
                derived.resolve(value)
                return
            try:
                result = on_fulfilled(value)
            except Exception as e:
                derived.reject(unwrap_rejection(e))
            else:
                derived.resolve(result)

        def _rejected(reason):
            if on_rejected is None:
                derived.reject(reason)
                return
            try:
                result = on_rejected(reason)
            except Exception as e:
                derived.reject(unwrap_rejection(e))
            else:
                derived.resolve(result)

        self._subscribe(_fulfilled, _rejected)
        return derived

    def handle_error(self, func: Callable[[Any], T]) -> 'Future[T]':
        """
        Handle errors in the future chain.

        Args:
            func: Error handler that receives the rejection reason

        Returns:
            New future with error handling
        """
        return self.then(None, func)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def done(self) -> bool:
        """Check if future has settled."""
        return self._state != PENDING

    def is_ready(self) -> bool:
        """Check if future is fulfilled."""
        return self._state == FULFILLED

    def failed(self) -> bool:
        """Check if future has been rejected."""
        return self._state == REJECTED

    def exception(self) -> Any:
        """Rejection reason, or None."""
        return self._exception

    def get(self) -> T:
        """
        Get the value.

        Outside a running event loop this drains the ``Reactor`` until the
        future settles. Only use in synchronous contexts.

        Returns:
            The future's value

        Raises:
            The rejection reason (wrapped in ``Rejection`` if it is not an
            exception), or ``FutureNotReady`` if the future cannot settle
        """
        if self._state == PENDING and Reactor._running_loop() is None:
            Reactor.run_until_complete(self)

        if self._state == FULFILLED:
            return self._value
        if self._state == REJECTED:
            raise as_exception(self._exception)

        raise FutureNotReady(f"{self!r} has not settled")

    def __await__(self):
        """
        Make future awaitable.

        Integrates with Python's asyncio event loop.
        """
        async def _await_impl():
            if self._state == FULFILLED:
                # Fast path: already resolved
                return self._value

            if self._state == REJECTED:
                raise as_exception(self._exception)

            loop = asyncio.get_running_loop()
            Reactor.attach(loop)
            waiter = loop.create_future()

            def _set_result(value):
                if not waiter.done():
                    waiter.set_result(value)

            def _set_exception(reason):
                if not waiter.done():
                    waiter.set_exception(as_exception(reason))

            self._subscribe(_set_result, _set_exception)
            return await waiter

        return _await_impl().__await__()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @staticmethod
    def make_ready(value: T) -> 'Future[T]':
        """Create a future that's already resolved."""
        f: Future[T] = Future()
        f.resolve(value)
        return f

    @staticmethod
    def make_exception(reason: Any) -> 'Future[T]':
        """Create a future that's already rejected."""
        f: Future[T] = Future()
        f.reject(reason)
        return f

    @staticmethod
    def from_asyncio(aio_future: 'asyncio.Future[T]') -> 'Future[T]':
        """
        Adopt an asyncio future or task.

        Cancellation is reported as a rejection with ``CancelledError``.
        """
        f: Future[T] = Future()

        def _done(source):
            if source.cancelled():
                f.reject(asyncio.CancelledError())
                return
            error = source.exception()
            if error is not None:
                f.reject(unwrap_rejection(error))
            else:
                f.resolve(source.result())

        aio_future.add_done_callback(_done)
        return f

    @staticmethod
    def cast(value: Any) -> 'Future':
        """
        Convert any future-like object to a ``Future``.

        Raises:
            TypeError: If ``value`` is not future-like
        """
        if isinstance(value, Future):
            return value
        if asyncio.isfuture(value):
            return Future.from_asyncio(value)
        if not is_future(value):
            raise TypeError(f"Cannot convert {type(value).__name__!r} to a Future")

        # Foreign thenable: settle through our own queue so delivery stays
        # asynchronous even if the thenable calls back synchronously.
        f: Future = Future()
        try:
            value.then(f.resolve, f.reject)
        except Exception as e:
            logger.debug(f"Thenable {value!r} raised from then(): {e!r}")
            f.reject(e)
        return f


def _coerce(value: Any) -> Future:
    if is_future(value):
        return Future.cast(value)
    return Future.make_ready(value)


def when_all(futures: Iterable[Any]) -> Future[List[Any]]:
    """
    Wait for all futures to complete.

    Args:
        futures: Futures to wait for (plain values count as fulfilled)

    Returns:
        Future of the list of results in input order; rejects with the first
        rejection

    Example:
        users = yield when_all([get_user(i) for i in ids])
    """
    pending = [_coerce(f) for f in futures]
    result: Future[List[Any]] = Future()

    if not pending:
        result.resolve([])
        return result

    values: List[Any] = [None] * len(pending)
    remaining = [len(pending)]

    for index, future in enumerate(pending):
        def _fulfilled(value, index=index):
            values[index] = value
            remaining[0] -= 1
            if remaining[0] == 0:
                result.resolve(values)

        future._subscribe(_fulfilled, result.reject)

    return result


def when_any(futures: Iterable[Any]) -> Future[Any]:
    """
    Wait for the first future to settle.

    Args:
        futures: Futures to race

    Returns:
        Future settled like the first input to settle

    Raises:
        ValueError: If ``futures`` is empty
    """
    pending = [_coerce(f) for f in futures]
    if not pending:
        raise ValueError("when_any() requires at least one future")

    result: Future[Any] = Future()
    for future in pending:
        future._subscribe(result.resolve, result.reject)
    return result
