"""
Ref

Back-references for items that point at each other.

Two items in an object cycle (a parent node and its child, say) cannot both
receive the other as a constructor argument. Build them independently and
hand one of them a ``Ref`` whose ``current`` re-reads the other item on
every access, so it always sees the final value instead of a snapshot.

Example::

    main = (
        Module()
        .public(parent=lambda: Node(1))
        .public(child=lambda m: Node(2, parent=ref(lambda v: v.parent)(m)))
        .init(parent=lambda parent, m: setattr(parent, "child", m.child))
        .create()
    )

    main.child.parent.current is main.parent  # True
"""

from typing import Any, Callable, Generic, TypeVar

T = TypeVar('T')


class Ref(Generic[T]):
    """Read-only accessor re-evaluating its resolver on each read."""

    __slots__ = ('_resolve',)

    def __init__(self, resolve: Callable[[], T]):
        self._resolve = resolve

    @property
    def current(self) -> T:
        return self._resolve()

    def __call__(self) -> T:
        return self._resolve()

    def __repr__(self) -> str:
        # Not evaluated: the target usually points back at the holder of this ref
        return f"<Ref {self._resolve!r}>"


def ref(resolver: Callable[[Any], T]) -> Callable[[Any], Ref[T]]:
    """Turn a resolver over a context into a factory of back-references."""
    def bind(context: Any) -> Ref[T]:
        return Ref(lambda: resolver(context))

    return bind
