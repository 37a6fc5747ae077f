"""
Resumable Computations

A resumable computation runs until it suspends, completes or fails, and can
then be resumed with a value or an error. Each advance returns a Step.
"""

import abc
import inspect
from dataclasses import dataclass
from typing import Any, Generator

from ..exceptions import InvalidComputationError, as_exception


@dataclass
class Suspended:
    """The computation paused, handing ``payload`` to its driver."""
    payload: Any


@dataclass
class Completed:
    """The computation returned ``value``."""
    value: Any = None


@dataclass
class Failed:
    """The computation raised ``error``."""
    error: BaseException


class ResumableComputation(abc.ABC):
    """Base class for computations a Driver can advance."""

    @abc.abstractmethod
    def start(self):
        """Run from the entry point to the first Step."""

    @abc.abstractmethod
    def resume_with_value(self, value: Any):
        """Continue past the last suspension point, which evaluates to ``value``."""

    @abc.abstractmethod
    def resume_with_error(self, reason: Any):
        """Continue past the last suspension point by raising ``reason`` there."""

    def close(self) -> None:
        """Release the computation; no further Steps will be requested."""


class GeneratorComputation(ResumableComputation):
    """
    Resumable computation backed by a Python generator.

    ``yield`` is the suspension point, ``return`` completes and any
    exception escaping the generator fails it. Reasons that are not
    exceptions are raised into the generator as ``Rejection(reason)``.
    """

    def __init__(self, generator: Generator[Any, Any, Any]):
        self.generator = generator

    def _advance(self, method, *args):
        try:
            payload = method(*args)
        except StopIteration as stop:
            return Completed(stop.value)
        except (KeyboardInterrupt, SystemExit, GeneratorExit):
            raise
        except BaseException as e:
            # CancelledError is a BaseException but still a failed run.
            return Failed(e)
        return Suspended(payload)

    def start(self):
        return self._advance(self.generator.send, None)

    def resume_with_value(self, value: Any):
        return self._advance(self.generator.send, value)

    def resume_with_error(self, reason: Any):
        return self._advance(self.generator.throw, as_exception(reason))

    def close(self) -> None:
        self.generator.close()


def as_computation(value: Any) -> ResumableComputation:
    """
    Wrap what a factory returned as a ResumableComputation.

    Raises:
        InvalidComputationError: If ``value`` is neither a generator nor a
            ResumableComputation
    """
    if isinstance(value, ResumableComputation):
        return value
    if inspect.isgenerator(value):
        return GeneratorComputation(value)
    raise InvalidComputationError(value)
