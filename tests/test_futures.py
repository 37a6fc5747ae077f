"""
Unit Tests for Futures

Settlement, chaining, flattening and asyncio interop of asynk futures.
"""

import asyncio

import pytest

from asynk import (
    Future, FutureNotReady, Reactor, Rejection, ResolutionCycleError,
    is_future, when_all, when_any,
)


class TestBasicFutures:
    """Test basic future operations."""

    def test_make_ready(self):
        """Test creating a ready future."""
        f = Future.make_ready(42)
        assert f.is_ready()
        assert not f.failed()
        assert f.get() == 42

    def test_make_exception(self):
        """Test creating a failed future."""
        f = Future.make_exception(ValueError("test error"))
        assert not f.is_ready()
        assert f.failed()
        assert f.done()
        with pytest.raises(ValueError, match="test error"):
            f.get()

    def test_non_exception_reason(self):
        """Plain reasons are raised wrapped in Rejection."""
        f = Future.make_exception("REJECTION!")
        assert f.exception() == "REJECTION!"
        with pytest.raises(Rejection) as exc_info:
            f.get()
        assert exc_info.value.reason == "REJECTION!"

    def test_pending_future(self):
        """A fresh future is pending and cannot be read synchronously."""
        f = Future()
        assert not f.done()
        with pytest.raises(FutureNotReady):
            f.get()

    def test_settles_once(self):
        """Only the first settlement counts."""
        f = Future()
        assert f.resolve(1)
        assert not f.resolve(2)
        assert not f.reject("late")
        assert f.get() == 1

    def test_resolve_with_self(self):
        """Resolving a future with itself rejects it."""
        f = Future()
        f.resolve(f)
        assert f.failed()
        assert isinstance(f.exception(), ResolutionCycleError)

    def test_resolve_with_pending_future(self):
        """A future resolved with a pending future follows it."""
        inner = Future()
        outer = Future()
        assert outer.resolve(inner)
        assert not outer.reject("ignored while adopting")

        inner.resolve("value")
        assert outer.get() == "value"

    def test_resolve_adopts_rejection(self):
        """Adopting a rejected future rejects with the same reason."""
        reason = object()
        outer = Future.make_ready(Future.make_exception(reason))
        Reactor.run()
        assert outer.failed()
        assert outer.exception() is reason

    @pytest.mark.asyncio
    async def test_await_ready_future(self):
        """Test awaiting an already-ready future."""
        f = Future.make_ready(123)
        result = await f
        assert result == 123

    @pytest.mark.asyncio
    async def test_await_pending_future(self):
        """Awaiting waits for settlement."""
        f = Future()
        asyncio.get_running_loop().call_later(0.01, f.resolve, "later")
        assert await f == "later"

    @pytest.mark.asyncio
    async def test_await_rejected_future(self):
        """Awaiting a rejected future raises."""
        f = Future()
        asyncio.get_running_loop().call_soon(f.reject, "REJECTION!")
        with pytest.raises(Rejection) as exc_info:
            await f
        assert exc_info.value.reason == "REJECTION!"

    @pytest.mark.asyncio
    async def test_await_multiple_futures(self):
        """Test awaiting multiple futures."""
        f1 = Future.make_ready(1)
        f2 = Future.make_ready(2)
        f3 = Future.make_ready(3)

        results = await asyncio.gather(f1, f2, f3)
        assert results == [1, 2, 3]


class TestChaining:
    """Test future chaining operations."""

    def test_simple_chain(self):
        """Test simple .then() chain."""
        f = Future.make_ready(10)
        result = f.then(lambda x: x * 2).get()
        assert result == 20

    def test_multi_step_chain(self):
        """Test multi-step chain."""
        result = (Future.make_ready(5)
                  .then(lambda x: x * 2)      # 10
                  .then(lambda x: x + 5)      # 15
                  .then(lambda x: x * 3)      # 45
                  .get())
        assert result == 45

    def test_chain_with_types(self):
        """Test chain that changes types."""
        result = (Future.make_ready(42)
                  .then(lambda x: str(x))
                  .then(lambda x: x + " is the answer")
                  .get())
        assert result == "42 is the answer"

    def test_chain_with_error(self):
        """Test error propagation through chain."""
        f = Future.make_exception(ValueError("error"))
        result = f.then(lambda x: x * 2)
        Reactor.run()
        assert result.failed()

    def test_chain_returning_future(self):
        """A continuation returning a future is flattened."""
        result = Future.make_ready(2).then(lambda x: Future.make_ready(x * 21))
        assert result.get() == 42

    def test_continuation_raising(self):
        """A continuation that raises rejects the derived future."""
        error = ArithmeticError("bad")

        def explode(_):
            raise error

        result = Future.make_ready(1).then(explode)
        Reactor.run()
        assert result.exception() is error

    def test_continuations_are_asynchronous(self):
        """Continuations never run inside the registering call."""
        calls = []
        Future.make_ready(1).then(calls.append)
        assert calls == []
        Reactor.run()
        assert calls == [1]

    def test_continuations_run_once_in_order(self):
        """Continuations run once each, in registration order."""
        calls = []
        f = Future()
        f.then(lambda v: calls.append(("a", v)))
        f.then(lambda v: calls.append(("b", v)))
        f.resolve(1)
        f.resolve(2)
        Reactor.run()
        assert calls == [("a", 1), ("b", 1)]


class TestErrorHandling:
    """Test error handling patterns."""

    def test_handle_error(self):
        """Test error handling with handle_error."""
        f = Future.make_exception(ValueError("error"))
        result = f.handle_error(lambda e: "default")
        assert result.get() == "default"

    def test_handle_error_no_error(self):
        """Test handle_error when no error."""
        f = Future.make_ready(42)
        result = f.handle_error(lambda e: 0)
        assert result.get() == 42

    def test_then_with_rejection_handler(self):
        """then() accepts a rejection continuation."""
        result = Future.make_exception("x").then(lambda v: "value", lambda r: f"recovered {r}")
        assert result.get() == "recovered x"

    def test_handler_reraising(self):
        """A rejection handler can reject again."""
        def rethrow(reason):
            raise Rejection(reason)

        result = Future.make_exception("again").handle_error(rethrow)
        Reactor.run()
        assert result.exception() == "again"


class TestInterop:
    """Future-likes from outside asynk."""

    def test_is_future(self):
        """Futures, thenables and asyncio futures are recognised."""
        class Thenable:
            def then(self, on_fulfilled, on_rejected):
                pass

        assert is_future(Future())
        assert is_future(Thenable())
        assert not is_future(Thenable)
        assert not is_future(42)
        assert not is_future(None)

    def test_cast_rejects_plain_values(self):
        """Only future-likes can be cast."""
        with pytest.raises(TypeError):
            Future.cast(5)

    def test_cast_thenable_that_raises(self):
        """A thenable raising from then() gives a rejected future."""
        error = RuntimeError("broken thenable")

        class Broken:
            def then(self, on_fulfilled, on_rejected):
                raise error

        f = Future.cast(Broken())
        assert f.exception() is error

    @pytest.mark.asyncio
    async def test_from_asyncio(self):
        """asyncio futures are adopted."""
        loop = asyncio.get_running_loop()
        aio = loop.create_future()
        f = Future.from_asyncio(aio)
        aio.set_result("done")
        assert await f == "done"
        assert is_future(aio)

    @pytest.mark.asyncio
    async def test_from_asyncio_cancelled(self):
        """Cancellation becomes a CancelledError rejection."""
        aio = asyncio.get_running_loop().create_future()
        f = Future.from_asyncio(aio)
        aio.cancel()
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert f.failed()
        assert isinstance(f.exception(), asyncio.CancelledError)


class TestParallelExecution:
    """Test parallel execution patterns."""

    def test_when_all(self):
        """Test when_all combinator."""
        futures = [Future.make_ready(i * i) for i in range(5)]
        assert when_all(futures).get() == [0, 1, 4, 9, 16]

    def test_when_all_empty(self):
        """Test when_all with empty list."""
        assert when_all([]).get() == []

    def test_when_all_plain_values(self):
        """Plain values count as fulfilled futures."""
        assert when_all([1, Future.make_ready(2), 3]).get() == [1, 2, 3]

    def test_when_all_keeps_input_order(self):
        """Results follow input order, not completion order."""
        first, second = Future(), Future()
        combined = when_all([first, second])
        second.resolve("b")
        Reactor.run()
        first.resolve("a")
        assert combined.get() == ["a", "b"]

    def test_when_all_first_rejection(self):
        """when_all rejects with the first rejection."""
        combined = when_all([Future.make_ready(1), Future.make_exception("bad"), Future()])
        Reactor.run()
        assert combined.exception() == "bad"

    @pytest.mark.asyncio
    async def test_when_all_awaited(self):
        """when_all works under asyncio."""
        results = await when_all([Future.make_ready(i) for i in range(3)])
        assert results == [0, 1, 2]

    def test_when_any(self):
        """Test when_any combinator."""
        slow = Future()
        combined = when_any([slow, Future.make_ready(2)])
        assert combined.get() == 2

    def test_when_any_empty(self):
        """when_any needs at least one future."""
        with pytest.raises(ValueError):
            when_any([])
