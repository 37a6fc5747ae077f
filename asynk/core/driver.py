"""
Coroutine Driver

Runs a resumable computation to completion, treating every suspension as
"wait for this future", and exposes the whole run as a single Future.
"""

import functools
import logging
from typing import Any, Callable

from ..config import get_settings
from ..exceptions import YieldedNonFutureError, unwrap_rejection
from .computation import Completed, Failed, ResumableComputation, Suspended, as_computation
from .future import Future, is_future

logger = logging.getLogger(__name__)


class Driver:
    """
    Step/resume loop for one computation.

    Owns the computation and the outer future for its whole lifetime. At
    most one suspension is being waited on at a time; the next one is only
    subscribed after the computation has been resumed past the previous one.
    """

    def __init__(self, computation: ResumableComputation):
        self.computation = computation
        self.future: Future = Future()
        self._expecting_step = False
        self._steps = 0

    def __repr__(self):
        return f"<Driver {self.computation!r} steps={self._steps}>"

    def start(self) -> Future:
        """
        Advance the computation to its first Step.

        Raises:
            YieldedNonFutureError: If the first suspension is not on a future
        """
        self._handle(self.computation.start(), initial=True)
        return self.future

    def _on_fulfilled(self, value: Any) -> None:
        if self._take_turn():
            self._resume(self.computation.resume_with_value, value)

    def _on_rejected(self, reason: Any) -> None:
        if self._take_turn():
            self._resume(self.computation.resume_with_error, reason)

    def _resume(self, resume: Callable[[Any], Any], argument: Any) -> None:
        # Runs inside a reactor callback; failures settle the outer future.
        try:
            self._handle(resume(argument), initial=False)
        except Exception as e:
            logger.error(f"{self!r} failed while resuming: {e!r}")
            self._release()
            self.future.reject(unwrap_rejection(e))

    def _take_turn(self) -> bool:
        if not self._expecting_step:
            logger.warning(f"{self!r} ignored a repeated settlement of the same suspension")
            return False
        self._expecting_step = False
        return True

    def _handle(self, step, *, initial: bool) -> None:
        self._steps += 1
        logger.debug(f"{self!r} -> {step!r}")

        if isinstance(step, Completed):
            self._release()
            self.future.resolve(step.value)
        elif isinstance(step, Failed):
            self._release()
            self.future.reject(unwrap_rejection(step.error))
        elif isinstance(step, Suspended):
            self._suspend(step.payload, initial=initial)
        else:
            raise TypeError(f"Unknown step {step!r} from {self.computation!r}")

    def _suspend(self, payload: Any, *, initial: bool) -> None:
        if payload is None and get_settings().allow_bare_yield:
            payload = Future.make_ready(None)

        if not is_future(payload):
            self._release()
            error = YieldedNonFutureError(payload)
            if initial:
                raise error
            # Nobody is left on the stack to catch it; fail the run instead.
            logger.error(f"{self!r}: {error}")
            self.future.reject(error)
            return

        self._expecting_step = True
        Future.cast(payload)._subscribe(self._on_fulfilled, self._on_rejected)

    def _release(self) -> None:
        try:
            self.computation.close()
        except RuntimeError as e:
            logger.warning(f"{self!r} did not close cleanly: {e}")


def drive(factory: Callable[[], Any]) -> Future:
    """
    Run the computation produced by ``factory`` and return its result future.

    The computation runs synchronously up to its first suspension, return or
    raise before this call returns. Every yielded value must be a future; its
    value is sent back into the computation, its rejection is raised at the
    ``yield``. The returned future settles with the computation's return
    value (flattened if it is a future) or with whatever it raised.

    Args:
        factory: Zero-argument callable returning a fresh generator or
            ResumableComputation

    Returns:
        Future of the computation's result

    Raises:
        YieldedNonFutureError: If the computation's first suspension is not
            on a future. No other failure is raised from this call.
        InvalidComputationError: If ``factory`` returns something that cannot
            be driven

    Example:
        def add():
            a = yield Future.make_ready(4)
            b = yield Future.make_ready(5)
            return a + b

        drive(add).get()  # 9
    """
    try:
        produced = factory()
    except Exception as e:
        logger.debug(f"Factory {factory!r} raised {e!r}")
        return Future.make_exception(unwrap_rejection(e))

    return Driver(as_computation(produced)).start()


def coroutine(func: Callable[..., Any]) -> Callable[..., Future]:
    """
    Turn a generator function into a function returning a Future.

    Example:
        @coroutine
        def total_experience(user_id):
            user = yield get_user_by_id(user_id)
            return user["experience"]

        total_experience(0)  # Future
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Future:
        return drive(lambda: func(*args, **kwargs))

    return wrapper
