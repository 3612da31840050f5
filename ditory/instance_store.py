"""
InstanceStore

Caches of resolved values keyed by resolver identity.

Four stores coexist while a container resolves items:

- the container's own store (``module`` scope)
- the process-wide ``SINGLETON_INSTANCES`` store (``singleton`` scope)
- one store per root resolution call (``transient`` scope)
- one store per continuation context and container (``async`` scope),
  handed out by the continuation-store provider
"""

import weakref
from typing import Any, Dict, MutableMapping, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .resolver import Resolver


class InstanceStore:
    """Mapping from resolver to its computed value.

    ``None`` is a legal value, so membership is checked with ``in`` rather
    than by comparing the cached value.

    Example::

        store = InstanceStore()
        store.set(resolver, 42)
        resolver in store   # True
        store.get(resolver) # 42
    """

    def __init__(self, instances: Optional[MutableMapping['Resolver', Any]] = None):
        self._instances: MutableMapping['Resolver', Any] = (
            instances if instances is not None else {}
        )

    def __contains__(self, resolver: object) -> bool:
        return resolver in self._instances

    def __len__(self) -> int:
        return len(self._instances)

    def get(self, resolver: 'Resolver') -> Any:
        """Return the cached value.

        Raises:
            KeyError: When nothing is cached for the resolver
        """
        return self._instances[resolver]

    def set(self, resolver: 'Resolver', instance: Any) -> None:
        self._instances[resolver] = instance

    def clear(self) -> None:
        """Release every cached value."""
        self._instances.clear()


class SingletonStore(InstanceStore):
    """Process-wide store shared by every container.

    Created at import time and kept for the lifetime of the process; there
    is no teardown. Entries are held by weak reference to their resolver, so
    values of a builder that is no longer referenced anywhere are released
    together with it. Singleton values must not depend on per-container
    construction parameters, since every container built from the same
    declarations receives the same value.
    """

    def __init__(self):
        super().__init__(weakref.WeakKeyDictionary())


SINGLETON_INSTANCES = SingletonStore()


class ContinuationInstances:
    """Store of ``async``-scoped values for one continuation context.

    Partitioned by container, so two containers running in the same
    context never see each other's values.
    """

    def __init__(self):
        self._by_owner: 'weakref.WeakKeyDictionary[Any, InstanceStore]' = (
            weakref.WeakKeyDictionary()
        )

    def for_owner(self, owner: Any) -> InstanceStore:
        """Return the store of a container, creating it on first use."""
        store = self._by_owner.get(owner)
        if store is None:
            store = InstanceStore()
            self._by_owner[owner] = store
        return store

    def owners(self) -> Dict[Any, InstanceStore]:
        return dict(self._by_owner)
