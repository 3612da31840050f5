"""
ResolutionContext

This module provides the context management for dependency resolution.
The ResolutionContext tracks, for one container and one root call:

- Currently resolving items (for circular dependency detection)
- Transient-scoped values computed during this root call
- The context of the enclosing resolution, if any

The context is stored in a ContextVar so that threads and asyncio tasks
never share a resolution stack, and is automatically managed by
ModuleContainer.
"""

from contextvars import ContextVar
from typing import Any, Optional

from .instance_store import InstanceStore
from .stack import ResolutionStack


class ResolutionContext:
    """State of one in-flight resolution of one container.

    A new context is created when a container is asked for an item while
    none of its own resolutions is in progress in the current execution
    context. Resolving an item of another container from inside a resolver
    creates a context for that container, linked to the enclosing one
    through ``parent``.

    Attributes:
        owner: The container performing the resolution
        stack: Item names currently being resolved, outermost first
        transient_instances: Transient-scoped values of the current root call
        parent: The enclosing context, possibly of another container

    Note:
        This class is used internally by ModuleContainer.
        Users should not need to interact with it directly.
    """

    def __init__(self, owner: Any, parent: Optional['ResolutionContext'] = None):
        self.owner = owner
        self.stack: ResolutionStack = ResolutionStack()
        self.transient_instances = InstanceStore()
        self.parent = parent

    @property
    def is_root(self) -> bool:
        """True when no item is being resolved, i.e. the next call is a root call."""
        return len(self.stack) == 0

    def start_root_call(self) -> None:
        """Forget transient values computed by the previous root call."""
        self.transient_instances = InstanceStore()


def find_context(owner: Any) -> Optional[ResolutionContext]:
    """Return the innermost active context of ``owner``, if any."""
    ctx = _resolution_context.get()
    while ctx is not None:
        if ctx.owner is owner:
            return ctx
        ctx = ctx.parent
    return None


# Innermost active resolution context of the current execution context
_resolution_context: ContextVar[Optional[ResolutionContext]] = ContextVar(
    '_DITORY_RESOLUTION_CONTEXT',
    default=None
)
