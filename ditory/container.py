"""
ModuleContainer

This module provides the resolution engine and the constructed module
object. It is the heart of ditory, responsible for:

- Resolving an item and its transitive dependencies on first access
- Caching values in the store selected by each item's effective scope
- Propagating scopes from dependencies to their dependents
- Detecting circular dependencies
- Running post-construction initializers of root items
- Reporting failures with the chain of names that led to them

The container is typically not instantiated directly. Use ``Module()`` to
declare items and ``create()`` to build a container.
"""

import logging
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Set

from . import async_scope
from .async_scope import ContinuationStore
from .exceptions import (
    DependencyResolutionError,
    DependencyResolutionErrorCode,
    StackError,
)
from .instance_store import SINGLETON_INSTANCES, InstanceStore
from .resolution_context import ResolutionContext, _resolution_context, find_context
from .resolver import Resolver, call_initializer
from .scope import Scope, ScopeTag, merge_scope, normalize_scope

logger = logging.getLogger(__name__)

ErrorCode = DependencyResolutionErrorCode


def _is_special(name: str) -> bool:
    # '_engine' only reaches __getattr__ on a half-constructed instance
    return name == '_engine' or (name.startswith('__') and name.endswith('__'))


class ResolutionEngine:
    """Resolves items of one container instance.

    For every item the engine decides when to invoke its resolver, where to
    cache the value, and how the item's scope affects the items depending
    on it:

    - ``module``: cached once per container
    - ``singleton``: cached once per process, shared by every container
      created from the same declarations
    - ``transient``: computed again on each root call, but only once within
      a root call
    - ``async``: cached once per continuation context and container

    Attributes:
        _resolvers: Merged private and public resolvers by item name
        _public_names: Names readable from the module surface
        _scopes: Effective scope of each item, widened as items resolve
        _dependents: For each item, the items that were resolving above it
    """

    def __init__(
        self,
        resolvers: Mapping[Any, Resolver],
        public_names: FrozenSet[str],
        initializers: Mapping[str, Callable[..., Any]],
        params: Any,
        continuation: Optional[ContinuationStore] = None,
    ):
        self._resolvers: Dict[Any, Resolver] = dict(resolvers)
        self._public_names = public_names
        self._initializers = dict(initializers)
        self._params = params
        self._continuation = continuation
        self._scopes: Dict[Any, Optional[ScopeTag]] = {
            item: resolver.scope for item, resolver in self._resolvers.items()
        }
        self._dependents: Dict[Any, Set[Any]] = {}
        self._module_instances = InstanceStore()
        self.view = InjectedView(self)

    @property
    def params(self) -> Any:
        return self._params

    @property
    def public_names(self) -> FrozenSet[str]:
        return self._public_names

    def is_public(self, item: Any) -> bool:
        return item in self._public_names

    def scope_of(self, item: Any) -> Optional[ScopeTag]:
        """Return the effective scope currently recorded for an item."""
        return self._scopes.get(item)

    def dependents_of(self, item: Any) -> Set[Any]:
        """Return the items that depended on ``item`` when it was resolved."""
        return set(self._dependents.get(item, ()))

    def resolve(self, item: Any) -> Any:
        """Resolve an item, starting a resolution context if needed.

        Raises:
            DependencyResolutionError: When the item or one of its
                dependencies cannot be resolved
        """
        ctx = find_context(self)
        if ctx is not None:
            return self._resolve(ctx, item)

        ctx = ResolutionContext(self, _resolution_context.get())
        token = _resolution_context.set(ctx)
        try:
            return self._resolve(ctx, item)
        finally:
            _resolution_context.reset(token)

    def _resolve(self, ctx: ResolutionContext, item: Any) -> Any:
        """Internal resolution implementation.

        1. Start a root call if nothing is being resolved
        2. Record the items currently resolving as dependents
        3. Look up the resolver
        4. Return the cached value of the effective scope, if any
        5. Push the item, failing on a cycle
        6. Invoke the resolver, wrapping foreign exceptions
        7. Pop the item and widen the parent's scope
        8. Cache the value and run the initializer of a root item
        """
        if ctx.is_root:
            ctx.start_root_call()

        self._register_dependents(ctx, item)

        resolver = self._resolvers.get(item)
        if resolver is None:
            raise self._error(
                ErrorCode.RESOLVER_IS_NOT_DEFINED, ctx.stack.to_string_list(), item
            )

        instances = self._instances_for(ctx, item)
        if resolver in instances:
            return instances.get(resolver)

        current_stack = ctx.stack.to_string_list()
        try:
            ctx.stack.push(item)
        except StackError:
            raise self._error(
                ErrorCode.CIRCULAR_DEPENDENCY_FAILURE, ctx.stack.to_string_list(), item
            ) from None

        logger.debug("Invoking resolver %s for <%s>", resolver.name, item)
        try:
            instance = resolver(self.view, self._params)
        except DependencyResolutionError:
            raise
        except Exception as e:
            raise self._error(
                ErrorCode.INSTANTIATION_FAILURE, current_stack, item, e
            ) from e
        finally:
            ctx.stack.pop()

        self._update_parent_scope(ctx, item)

        # The scope may have been widened by a dependency while resolving
        self._instances_for(ctx, item).set(resolver, instance)

        if ctx.is_root:
            self._run_initializer(item, instance)

        return instance

    def _register_dependents(self, ctx: ResolutionContext, item: Any) -> None:
        self._dependents.setdefault(item, set()).update(ctx.stack)

    def _instances_for(self, ctx: ResolutionContext, item: Any) -> InstanceStore:
        scope = normalize_scope(self._scopes.get(item))
        if scope is Scope.ASYNC:
            return self._continuation_store().get_store().for_owner(self)
        if scope is Scope.SINGLETON:
            return SINGLETON_INSTANCES
        if scope is Scope.TRANSIENT:
            return ctx.transient_instances
        return self._module_instances

    def _continuation_store(self) -> ContinuationStore:
        if self._continuation is not None:
            return self._continuation
        return async_scope.get_provider()

    def _update_parent_scope(self, ctx: ResolutionContext, item: Any) -> None:
        parent = ctx.stack.peek()
        if parent is None:
            return
        current = self._scopes.get(parent)
        merged = merge_scope(current, self._scopes.get(item))
        if merged is not None and merged != current:
            logger.debug(
                "Scope of <%s> widened from %s to %s by <%s>",
                parent, current, merged, item,
            )
            self._scopes[parent] = merged

    def _run_initializer(self, item: Any, instance: Any) -> None:
        initializer = self._initializers.get(item)
        if initializer is None:
            return
        logger.debug("Running initializer of <%s>", item)
        try:
            call_initializer(initializer, instance, self.view, self._params)
        except DependencyResolutionError:
            raise
        except Exception as e:
            raise self._error(ErrorCode.INSTANTIATION_FAILURE, [], item, e) from e

    @staticmethod
    def _error(
        code: DependencyResolutionErrorCode,
        stack: List[str],
        item: Any,
        cause: Optional[BaseException] = None,
    ) -> DependencyResolutionError:
        error = DependencyResolutionError(code, stack, str(item), cause)
        logger.debug("%s", error)
        return error


class InjectedView:
    """Lazily dereferencing view handed to resolvers and initializers.

    Reading an attribute (``view.db``) or an item (``view["db"]``) resolves
    that item through the engine. Private items are visible here.
    """

    __slots__ = ('_engine',)

    def __init__(self, engine: ResolutionEngine):
        object.__setattr__(self, '_engine', engine)

    def __getattr__(self, name: str) -> Any:
        """Resolve ``name``.

        Failures raise DependencyResolutionError, which is not an
        AttributeError: ``hasattr(view, name)`` and ``getattr(view, name,
        default)`` propagate it instead of returning False or the default.
        Only dunder names raise AttributeError.
        """
        if _is_special(name):
            raise AttributeError(name)
        return self._engine.resolve(name)

    def __getitem__(self, item: Any) -> Any:
        return self._engine.resolve(item)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Cannot assign '{name}': module view is read-only")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Cannot delete '{name}': module view is read-only")

    def __repr__(self) -> str:
        return f"<InjectedView of {len(self._engine._resolvers)} items>"


class ModuleContainer:
    """Constructed module exposing only its public items.

    Items are resolved on first attribute access and cached according to
    their scope. Reading a name that is not public raises a
    ``PrivateMemberAccessFailure``.

    Example::

        main = (
            Module()
            .private(b=lambda: 1)
            .private(a=lambda m: m.b + 1)
            .public(c=lambda m: m.a + 1)
            .create()
        )

        main.c        # 3
        main["c"]     # 3
        main.a        # DependencyResolutionError: PrivateMemberAccessFailure
    """

    __slots__ = ('_engine',)

    def __init__(
        self,
        private_resolvers: Mapping[Any, Resolver],
        public_resolvers: Mapping[str, Resolver],
        initializers: Optional[Mapping[str, Callable[..., Any]]] = None,
        params: Any = None,
        continuation: Optional[ContinuationStore] = None,
    ):
        resolvers: Dict[Any, Resolver] = dict(private_resolvers)
        resolvers.update(public_resolvers)
        engine = ResolutionEngine(
            resolvers,
            frozenset(public_resolvers),
            initializers or {},
            {} if params is None else params,
            continuation,
        )
        object.__setattr__(self, '_engine', engine)

    def __getattr__(self, name: str) -> Any:
        """Resolve the public item ``name``.

        Undeclared and private names raise DependencyResolutionError
        (PrivateMemberAccessFailure), not AttributeError, so
        ``hasattr(main, name)`` propagates it rather than returning False.
        Use ``name in main`` to test for a public item.
        """
        if _is_special(name):
            raise AttributeError(name)
        return self._resolve_public(name)

    def __getitem__(self, name: str) -> Any:
        return self._resolve_public(name)

    def _resolve_public(self, name: str) -> Any:
        engine = self._engine
        if not engine.is_public(name):
            raise engine._error(ErrorCode.PRIVATE_MEMBER_ACCESS_FAILURE, [], name)
        return engine.resolve(name)

    def __contains__(self, name: object) -> bool:
        return name in self._engine.public_names

    def __dir__(self) -> List[str]:
        return sorted(self._engine.public_names)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Cannot assign '{name}': module is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Cannot delete '{name}': module is immutable")

    def __repr__(self) -> str:
        return f"<ModuleContainer public={sorted(self._engine.public_names)}>"
