"""
LazyProxy

Indirection object forwarding every operation to a target that is looked
up again on each operation. The proxy itself holds no value; only the
target getter is stored.

Supported operations: attribute read/write/delete, item read/write/delete,
membership test, iteration, length, truthiness, equality, hashing, ``dir()``
and calls (which also covers constructing, when the target is a class).
"""

from typing import Any, Callable, Iterator, List


class LazyProxy:
    """Forward every operation to ``resolve_target()``.

    Example::

        counter = {"value": 0}
        p = LazyProxy(lambda: counter)
        p["value"]  # 0
    """

    __slots__ = ('_ditory_resolve_target',)

    def __init__(self, resolve_target: Callable[[], Any]):
        object.__setattr__(self, '_ditory_resolve_target', resolve_target)

    def _ditory_target(self) -> Any:
        return object.__getattribute__(self, '_ditory_resolve_target')()

    def __getattr__(self, name: str) -> Any:
        if name == '_ditory_resolve_target':
            raise AttributeError(name)
        return getattr(self._ditory_target(), name)

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(self._ditory_target(), name, value)

    def __delattr__(self, name: str) -> None:
        delattr(self._ditory_target(), name)

    def __dir__(self) -> List[str]:
        return dir(self._ditory_target())

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._ditory_target()(*args, **kwargs)

    def __getitem__(self, key: Any) -> Any:
        return self._ditory_target()[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        self._ditory_target()[key] = value

    def __delitem__(self, key: Any) -> None:
        del self._ditory_target()[key]

    def __contains__(self, item: Any) -> bool:
        return item in self._ditory_target()

    def __iter__(self) -> Iterator[Any]:
        return iter(self._ditory_target())

    def __len__(self) -> int:
        return len(self._ditory_target())

    def __bool__(self) -> bool:
        return bool(self._ditory_target())

    def __eq__(self, other: Any) -> bool:
        return self._ditory_target() == other

    def __ne__(self, other: Any) -> bool:
        return self._ditory_target() != other

    def __hash__(self) -> int:
        return hash(self._ditory_target())

    def __str__(self) -> str:
        return str(self._ditory_target())

    def __repr__(self) -> str:
        return f"<LazyProxy of {self._ditory_target()!r}>"


def unwrap(value: Any) -> Any:
    """Return the current target of a LazyProxy, or the value itself."""
    if isinstance(value, LazyProxy):
        return value._ditory_target()
    return value


def proxy(resolver: Callable[[Any], Any]) -> Callable[[Any], LazyProxy]:
    """Build a resolver whose value forwards to ``resolver(view)`` on every use.

    Example::

        main = (
            Module()
            .private(settings=lambda: Settings())
            .public(live_settings=proxy(lambda m: m.settings))
            .create()
        )
    """
    def resolve_proxy(view: Any) -> LazyProxy:
        return LazyProxy(lambda: resolver(view))

    resolve_proxy.__name__ = f"proxy({getattr(resolver, '__name__', 'resolver')})"
    return resolve_proxy
