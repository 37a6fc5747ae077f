"""
asynk - async/await on generators and futures

Write asynchronous code as plain generator functions: every ``yield`` waits
for a future, and the whole function runs as one Future.

    from asynk import coroutine, Future

    @coroutine
    def add():
        a = yield Future.make_ready(4)
        b = yield Future.make_ready(5)
        return a + b

    add().get()  # 9

Features:
- Generator-driven coroutines (``drive`` / ``@coroutine``)
- Settle-once futures with ``then`` chaining and asyncio interop
- Batch combinators (``when_all``, ``when_any``, ``when_some``, ...)
"""

from .config import Settings, configure, get_settings
from .core import (
    Completed, Driver, Failed, Future, GeneratorComputation, Reactor,
    ResumableComputation, Suspended, coroutine, drive, is_future, when_all,
    when_any,
)
from .core.combinators import filter_async, map_async, reduce_async, when_some
from .exceptions import (
    AsynkError, FutureNotReady, InvalidComputationError, Rejection,
    ResolutionCycleError, YieldedNonFutureError,
)

__version__ = "0.1.0"

__all__ = [
    'drive',
    'coroutine',
    'Driver',
    'Future',
    'is_future',
    'when_all',
    'when_any',
    'when_some',
    'map_async',
    'filter_async',
    'reduce_async',
    'Reactor',
    'ResumableComputation',
    'GeneratorComputation',
    'Suspended',
    'Completed',
    'Failed',
    'Settings',
    'configure',
    'get_settings',
    'AsynkError',
    'YieldedNonFutureError',
    'InvalidComputationError',
    'ResolutionCycleError',
    'FutureNotReady',
    'Rejection',
]
