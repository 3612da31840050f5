"""
Test Configuration and Utilities

Common base classes and helper functions for ditory tests
"""

import functools
import unittest
from typing import Any, Callable

from ditory import async_scope
from ditory.async_scope import ContextVarContinuationStore


class DitoryTestCase(unittest.TestCase):
    """
    Base test case class for ditory tests.

    Installs a fresh process-wide continuation provider before each test
    and leaves its continuation context afterwards.
    """

    def setUp(self):
        """Install a fresh continuation provider before each test"""
        async_scope.init(ContextVarContinuationStore())

    def tearDown(self):
        """Leave the continuation context after each test"""
        async_scope.exit()


class DitoryAsyncTestCase(unittest.IsolatedAsyncioTestCase):
    """
    Base test case class for tests running coroutines.

    Same provider handling as DitoryTestCase.
    """

    def setUp(self):
        async_scope.init(ContextVarContinuationStore())

    def tearDown(self):
        async_scope.exit()


def counted(func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Wrap a resolver and count its calls in ``call_count``.

    ``functools.wraps`` keeps the wrapped signature visible to
    ``inspect.signature``, so the engine passes the same arguments
    it would pass to ``func``.

    Example:
        >>> b = counted(lambda: 1)
        >>> main = Module().public(b=b).create()
        >>> main.b
        1
        >>> b.call_count
        1
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        wrapper.call_count += 1
        return func(*args, **kwargs)

    wrapper.call_count = 0
    return wrapper


def incrementing() -> Callable[[], int]:
    """Return a resolver producing 1, 2, 3, ... on successive calls."""
    state = {"value": 0}

    def next_value() -> int:
        state["value"] += 1
        return state["value"]

    return next_value
