"""
ResolutionStack

Ordered, duplicate-rejecting sequence of the item names currently being
resolved. Pushing a name that is already on the stack means the dependency
graph has a cycle.
"""

from typing import Generic, Hashable, Iterator, List, Optional, Set, TypeVar

from .exceptions import StackError, StackErrorType

T = TypeVar('T', bound=Hashable)


class ResolutionStack(Generic[T]):
    """Stack with set semantics used for circular dependency detection.

    Example::

        stack = ResolutionStack()
        stack.push('a')
        stack.push('b')
        stack.peek()      # 'b'
        stack.push('a')   # StackError(EXISTS)
    """

    def __init__(self):
        self._items: List[T] = []
        self._members: Set[T] = set()

    def push(self, item: T) -> None:
        """Push an item on top of the stack.

        Raises:
            StackError: When the item is already on the stack
        """
        if item in self._members:
            raise StackError(StackErrorType.EXISTS)
        self._items.append(item)
        self._members.add(item)

    def pop(self) -> T:
        """Remove and return the top item.

        Raises:
            StackError: When the stack is empty
        """
        if not self._items:
            raise StackError(StackErrorType.EMPTY)
        item = self._items.pop()
        self._members.discard(item)
        return item

    def peek(self) -> Optional[T]:
        """Return the top item without removing it, or None if empty."""
        return self._items[-1] if self._items else None

    @property
    def items(self) -> List[T]:
        """Snapshot of the stack, bottom first."""
        return list(self._items)

    def to_string_list(self) -> List[str]:
        return [str(item) for item in self._items]

    def __contains__(self, item: object) -> bool:
        return item in self._members

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"ResolutionStack({self._items!r})"
