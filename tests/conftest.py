"""pytest configuration and fixtures for asynk tests."""

import asyncio
from typing import Any, Callable

import pytest

from asynk import Future, Reactor, configure, get_settings


USERS = [
    {"name": "David", "age": 43, "experience": 13, "colleagues": [2, 4]},
    {"name": "Ted", "age": 23, "experience": 3, "colleagues": [3]},
    {"name": "Jenn", "age": 29, "experience": 8, "colleagues": [0, 4]},
    {"name": "Miguel", "age": 38, "experience": 19, "colleagues": [1]},
    {"name": "Igor", "age": 32, "experience": 9, "colleagues": [0, 2]},
]


@pytest.fixture(autouse=True)
def clean_runtime():
    """Give every test an empty reactor queue and the settings it started with."""
    saved = get_settings().model_dump()
    Reactor.reset()
    yield
    Reactor.reset()
    configure(**saved)


@pytest.fixture
def timeout() -> Callable[..., Future]:
    """Timer-backed future factory; needs a running event loop.

    ``timeout(x)`` fulfills with ``x`` on a later loop iteration,
    ``timeout(x, resolve=False)`` rejects with ``x``.
    """
    def _timeout(value: Any, resolve: bool = True, delay: float = 0) -> Future:
        loop = asyncio.get_running_loop()
        future: Future = Future()
        loop.call_later(delay, future.resolve if resolve else future.reject, value)
        return future

    return _timeout


@pytest.fixture
def users():
    """User directory used by the lookup scenarios."""
    return USERS


@pytest.fixture
def get_user_by_id(timeout, users) -> Callable[[int], Future]:
    """Look a user up asynchronously; rejects for unknown ids."""
    def _get_user_by_id(user_id: int) -> Future:
        if 0 <= user_id < len(users):
            return timeout(users[user_id])
        return timeout("No user with that ID!", resolve=False)

    return _get_user_by_id
