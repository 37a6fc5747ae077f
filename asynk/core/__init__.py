"""
asynk core

Futures, their continuation reactor, and the coroutine driver that runs
generator-based computations on top of them.
"""

from .future import Future, is_future, when_all, when_any
from .reactor import Reactor
from .computation import (
    Completed, Failed, GeneratorComputation, ResumableComputation, Suspended,
)
from .driver import Driver, coroutine, drive

__all__ = [
    'Future',
    'is_future',
    'when_all',
    'when_any',
    'Reactor',
    'ResumableComputation',
    'GeneratorComputation',
    'Suspended',
    'Completed',
    'Failed',
    'Driver',
    'drive',
    'coroutine',
]
