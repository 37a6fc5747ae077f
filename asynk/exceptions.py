"""asynk exception hierarchy."""

from typing import Any


class AsynkError(Exception):
    """Base exception for all asynk operations."""
    pass


class YieldedNonFutureError(AsynkError, TypeError):
    """A computation suspended on something that is not a future."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            f"Computation yielded a non-future value of type "
            f"{type(value).__name__!r}: {value!r}"
        )


class InvalidComputationError(AsynkError, TypeError):
    """Factory did not produce a generator or resumable computation."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            f"Factory returned {type(value).__name__!r}, expected a generator "
            f"or ResumableComputation"
        )


class ResolutionCycleError(AsynkError, TypeError):
    """Future was resolved with itself."""
    pass


class FutureNotReady(AsynkError):
    """Future has not settled and cannot be settled synchronously."""
    pass


class Rejection(AsynkError):
    """Carries a rejection reason that is not itself an exception.

    Python can only raise exceptions, so a future rejected with a plain
    value (a string, a number, ...) surfaces as ``Rejection(reason)``.
    """

    def __init__(self, reason: Any):
        self.reason = reason
        super().__init__(reason)

    def __repr__(self) -> str:
        return f"Rejection({self.reason!r})"


def as_exception(reason: Any) -> BaseException:
    """Return an exception that can be raised for a rejection reason."""
    if isinstance(reason, BaseException):
        return reason
    return Rejection(reason)


def unwrap_rejection(error: BaseException) -> Any:
    """Inverse of :func:`as_exception`."""
    if isinstance(error, Rejection):
        return error.reason
    return error
