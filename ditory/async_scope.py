"""
Async Scope

Continuation-scoped stores for ``async``-scoped items.

A continuation context is one logical unit of asynchronous work, such as one
request, including every coroutine it awaits and every task it spawns.
Within it, an ``async``-scoped item resolves to one instance; two separate
contexts get two instances.

The store is supplied by a pluggable provider implementing
``ContinuationStore``. Two providers ship with ditory:

- ``ContextVarContinuationStore`` (default): tracks contexts with
  ``contextvars``, so it follows asyncio tasks and threads
- ``SharedContinuationStore``: a single shared store, for environments where
  continuation tracking is not wanted; ``async`` scope then behaves like
  ``module`` scope

Example::

    from ditory import Module, Scope, async_scope

    main = (
        Module()
        .private(request_id=lambda: uuid4().hex, scope=Scope.ASYNC)
        .public(current_request_id=lambda m: m.request_id)
        .create()
    )

    async def handle():
        return main.current_request_id

    first = await async_scope.run(handle)
    second = await async_scope.run(handle)
    assert first != second
"""

import inspect
from abc import ABC, abstractmethod
from contextvars import ContextVar, copy_context
from typing import Any, Awaitable, Callable, Optional, TypeVar

from .instance_store import ContinuationInstances

R = TypeVar('R')


class ContinuationStore(ABC):
    """Abstract interface for continuation-scoped store providers.

    Implementations decide how the "current" store is tracked across
    asynchronous continuations. ``get_store()`` must always return a store,
    falling back to a shared one outside of any continuation context.
    """

    @abstractmethod
    def enter(self) -> None:
        """Establish a fresh store for the rest of the current execution."""
        pass

    @abstractmethod
    def run(self, fn: Callable[..., R], *args: Any, **kwargs: Any) -> R:
        """Run ``fn`` with a fresh store scoped to its whole continuation.

        Returns:
            Whatever ``fn`` returns. When ``fn`` returns an awaitable, the
            returned awaitable keeps the same store while it runs.
        """
        pass

    @abstractmethod
    def get_store(self) -> ContinuationInstances:
        """Return the current store, or the fallback store if none is active."""
        pass

    @abstractmethod
    def exit(self) -> None:
        """Discard the store association of the current execution."""
        pass


class SharedContinuationStore(ContinuationStore):
    """Provider without continuation tracking.

    Every caller shares one store, so ``async``-scoped items are cached once
    per container, like ``module``-scoped ones.
    """

    def __init__(self):
        self._store = ContinuationInstances()

    def enter(self) -> None:
        pass

    def run(self, fn: Callable[..., R], *args: Any, **kwargs: Any) -> R:
        return fn(*args, **kwargs)

    def get_store(self) -> ContinuationInstances:
        return self._store

    def exit(self) -> None:
        pass


# Store of the continuation context the current code runs in
_continuation_store: ContextVar[Optional[ContinuationInstances]] = ContextVar(
    '_DITORY_CONTINUATION_STORE',
    default=None
)


class ContextVarContinuationStore(ContinuationStore):
    """Provider tracking continuation contexts with ``contextvars``.

    ``run()`` executes the callable in a copy of the current context. If the
    callable returns an awaitable (for instance an ``async def`` function
    was passed), the awaitable is wrapped so its body runs with the same
    store. Tasks spawned inside inherit the store through the usual context
    copy performed by asyncio.

    Example::

        store = ContextVarContinuationStore()

        async def handler():
            ...

        result = await store.run(handler)
    """

    def __init__(self):
        self._fallback = ContinuationInstances()

    def enter(self) -> None:
        _continuation_store.set(ContinuationInstances())

    def run(self, fn: Callable[..., R], *args: Any, **kwargs: Any) -> R:
        store = ContinuationInstances()
        context = copy_context()
        result = context.run(self._call_with_store, store, fn, args, kwargs)
        if inspect.isawaitable(result):
            return self._continue_with_store(store, result)  # type: ignore[return-value]
        return result

    def get_store(self) -> ContinuationInstances:
        store = _continuation_store.get()
        return store if store is not None else self._fallback

    def exit(self) -> None:
        _continuation_store.set(None)

    @staticmethod
    def _call_with_store(
        store: ContinuationInstances,
        fn: Callable[..., R],
        args: tuple,
        kwargs: dict,
    ) -> R:
        _continuation_store.set(store)
        return fn(*args, **kwargs)

    @staticmethod
    async def _continue_with_store(
        store: ContinuationInstances,
        awaitable: Awaitable[R],
    ) -> R:
        token = _continuation_store.set(store)
        try:
            return await awaitable
        finally:
            _continuation_store.reset(token)


_provider: ContinuationStore = ContextVarContinuationStore()


def init(provider: ContinuationStore) -> None:
    """Install the process-wide provider and enter a first store.

    Containers created without an explicit provider look it up at
    resolution time, so installing a provider affects them too.
    """
    global _provider
    _provider = provider
    _provider.enter()


def get_provider() -> ContinuationStore:
    """Return the process-wide provider."""
    return _provider


def enter() -> None:
    _provider.enter()


def run(fn: Callable[..., R], *args: Any, **kwargs: Any) -> R:
    """Run ``fn`` in a fresh continuation context of the process-wide provider."""
    return _provider.run(fn, *args, **kwargs)


def get_store() -> ContinuationInstances:
    return _provider.get_store()


def exit() -> None:
    _provider.exit()
