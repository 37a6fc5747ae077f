"""
Higher-Order Future Patterns

Utilities for composing and combining futures. All of them return a Future,
so their results can be yielded from a driven computation.
"""

from typing import Any, Callable, Iterable, List, TypeVar

from .future import Future, _coerce, when_all, when_any

T = TypeVar('T')
U = TypeVar('U')

__all__ = [
    'when_all',
    'when_any',
    'when_some',
    'map_async',
    'filter_async',
    'reduce_async',
]


def when_some(futures: Iterable[Any], count: int) -> Future[List[Any]]:
    """
    Wait for at least 'count' futures to be fulfilled.

    Args:
        futures: Futures to wait for
        count: Minimum number of fulfilled futures

    Returns:
        Future of the first 'count' values, in completion order. Rejects
        once too many inputs have been rejected for 'count' to be reached.
    """
    pending = [_coerce(f) for f in futures]
    if count > len(pending):
        count = len(pending)

    result: Future[List[Any]] = Future()
    if count <= 0:
        result.resolve([])
        return result

    values: List[Any] = []
    failures = [0]

    def _fulfilled(value):
        if result.done():
            return
        values.append(value)
        if len(values) == count:
            result.resolve(list(values))

    def _rejected(reason):
        failures[0] += 1
        if len(pending) - failures[0] < count:
            result.reject(reason)

    for future in pending:
        future._subscribe(_fulfilled, _rejected)

    return result


def map_async(func: Callable[[T], U], futures: Iterable[Any]) -> Future[List[U]]:
    """
    Map a function over futures.

    Args:
        func: Function to apply to each result
        futures: Futures to wait for

    Returns:
        Future of the mapped results

    Example:
        experience = yield map_async(
            lambda user: user["experience"],
            [get_user_by_id(i) for i in ids]
        )
    """
    return when_all(futures).then(lambda results: [func(r) for r in results])


def filter_async(predicate: Callable[[T], bool], futures: Iterable[Any]) -> Future[List[T]]:
    """
    Filter future results by predicate.

    Args:
        predicate: Filter function
        futures: Futures to wait for

    Returns:
        Future of the results for which ``predicate`` holds
    """
    return when_all(futures).then(lambda results: [r for r in results if predicate(r)])


def reduce_async(func: Callable[[U, T], U], futures: Iterable[Any], initial: U) -> Future[U]:
    """
    Reduce future results.

    Args:
        func: Reduction function
        futures: Futures to wait for
        initial: Initial accumulator value

    Returns:
        Future of the reduced value
    """
    def _reduce(results):
        accumulator = initial
        for result in results:
            accumulator = func(accumulator, result)
        return accumulator

    return when_all(futures).then(_reduce)
