"""
ModuleBuilder

This module provides the builder used to declare items.
A ModuleBuilder accumulates resolvers, which are then bound to construction
parameters by ``create()`` to produce a ModuleContainer.

Key features:
- Private and public items sharing one namespace
- Declaration-wide default scope: ``public({...}, scope=Scope.TRANSIENT)``
- Methods seeing the fully resolved module at call time (``*_impl``)
- Post-construction initializers that seal the builder
- Context manager support for cleaner definition blocks

Example::

    module = Module()
    with module:
        module.private(db=lambda: Database())
        module.private(repository=lambda m: UserRepository(m.db))
        module.public_impl(sign_in=lambda m, login: m.repository.find(login))

    main = module.create()
    main.sign_in("alice")
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Set

from .async_scope import ContinuationStore
from .container import ModuleContainer
from .exceptions import (
    DefinitionNotFoundError,
    DuplicateDefinitionError,
    InvalidResolverError,
    ModuleSealedError,
)
from .resolver import Resolver, expand_resolvers, iter_declarations, method_resolver
from .scope import Scope, ScopeLike, to_scope_tag

logger = logging.getLogger(__name__)


class ModuleBuilder:
    """Builder for declaring the items of a module.

    Each declaration method returns the builder itself, so declarations can
    be chained. Once ``init()`` or ``create()`` has been called the builder
    is sealed and further declarations raise ModuleSealedError.

    Attributes:
        _private_resolvers: Items only visible to other resolvers
        _public_resolvers: Items readable from the created module
        _initializers: Post-construction hooks by item name
        _sealed: Whether further declarations are rejected

    Example::

        main = (
            Module()
            .private(b=lambda: 1)
            .private(a=lambda m: m.b + 1)
            .public(c=lambda m: m.a + 1)
            .create()
        )
        main.c  # 3
    """

    def __init__(self, continuation: Optional[ContinuationStore] = None):
        """Initialize an empty builder.

        Args:
            continuation: Provider of continuation-scoped stores for the
                containers created by this builder. Defaults to the
                process-wide provider of ``ditory.async_scope``.
        """
        self._private_resolvers: Dict[Any, Resolver] = {}
        self._public_resolvers: Dict[str, Resolver] = {}
        self._initializers: Dict[str, Callable[..., Any]] = {}
        self._continuation = continuation
        self._sealed = False

    def __enter__(self) -> 'ModuleBuilder':
        """Enter context manager for cleaner definition blocks.

        Returns:
            The builder itself
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Exit context manager.

        Returns:
            False (exceptions are not suppressed)
        """
        return False

    @property
    def is_sealed(self) -> bool:
        return self._sealed

    @property
    def names(self) -> Dict[str, bool]:
        """Declared item names mapped to whether they are public."""
        names = {
            name: False for name in self._private_resolvers if isinstance(name, str)
        }
        names.update((name, True) for name in self._public_resolvers)
        return names

    def private(
        self,
        resolvers: Optional[Mapping[str, Any]] = None,
        scope: Optional[ScopeLike] = None,
        **named: Any,
    ) -> 'ModuleBuilder':
        """Declare items visible only to other resolvers.

        Args:
            resolvers: Mapping of item names to resolvers
            scope: Scope of resolvers that carry none; ``Scope.MODULE``
                when omitted
            **named: Further resolvers given as keyword arguments

        Raises:
            ModuleSealedError: When the builder is sealed
            DuplicateDefinitionError: When a name is already declared
            InvalidResolverError: When a resolver is not callable
        """
        self._declare(self._private_resolvers, resolvers, scope, named)
        return self

    def public(
        self,
        resolvers: Optional[Mapping[str, Any]] = None,
        scope: Optional[ScopeLike] = None,
        **named: Any,
    ) -> 'ModuleBuilder':
        """Declare items readable from the created module.

        Takes the same arguments as ``private()``.
        """
        self._declare(self._public_resolvers, resolvers, scope, named)
        return self

    def private_impl(
        self,
        implementation: Optional[Mapping[str, Callable[..., Any]]] = None,
        **methods: Callable[..., Any],
    ) -> 'ModuleBuilder':
        """Declare private methods ``(view, *args, **kwargs) -> result``.

        Each method becomes an item whose value is a callable bound to the
        module view.

        Example::

            module.private_impl(double_a=lambda m: m.a * 2)
            module.public(b=lambda m: m.double_a() + 1)
        """
        self._declare_methods(self._private_resolvers, implementation, methods)
        return self

    def public_impl(
        self,
        implementation: Optional[Mapping[str, Callable[..., Any]]] = None,
        **methods: Callable[..., Any],
    ) -> 'ModuleBuilder':
        """Declare public methods ``(view, *args, **kwargs) -> result``.

        Example::

            main = (
                Module()
                .private(b=lambda: 1)
                .public_impl(add_b=lambda m, x: m.b + x)
                .create()
            )
            main.add_b(1)  # 2
        """
        self._declare_methods(self._public_resolvers, implementation, methods)
        return self

    def init(
        self,
        initializers: Optional[Mapping[str, Callable[..., Any]]] = None,
        **named: Callable[..., Any],
    ) -> 'ModuleBuilder':
        """Attach post-construction initializers and seal the builder.

        An initializer is called as ``initializer(instance, view, params)``
        (trailing arguments may be omitted) right after its item was
        resolved by a root call. It is not called when the item is only
        resolved as another item's dependency.

        Calling ``init()`` again replaces the initializers attached by the
        previous call.

        Raises:
            DefinitionNotFoundError: When an initializer names an unknown item
            InvalidResolverError: When an initializer is not callable
        """
        declared = self.names
        attached: Dict[str, Callable[..., Any]] = {}
        for name, initializer in iter_declarations(initializers, named):
            if name not in declared:
                raise DefinitionNotFoundError(
                    f"Cannot attach initializer: <{name}> is not declared.\n"
                    f"Declared items: {', '.join(declared) or 'None'}"
                )
            if not callable(initializer):
                raise InvalidResolverError(name, initializer)
            attached[name] = initializer
        self._initializers = attached
        self._sealed = True
        return self

    def create(self, params: Any = None) -> ModuleContainer:
        """Seal the builder and create a container.

        Args:
            params: Construction parameters passed to every resolver and
                initializer. Defaults to an empty dict.

        Returns:
            A new ModuleContainer with its own module-scoped instances
        """
        self._sealed = True
        logger.debug(
            "Creating module with %d public and %d private items",
            len(self._public_resolvers), len(self._private_resolvers),
        )
        return ModuleContainer(
            self._private_resolvers,
            self._public_resolvers,
            self._initializers,
            params,
            self._continuation,
        )

    def _ensure_not_sealed(self) -> None:
        if self._sealed:
            raise ModuleSealedError()

    def _ensure_not_declared(self, name: Any, seen: Set[Any]) -> None:
        if (name in seen
                or name in self._private_resolvers
                or name in self._public_resolvers):
            raise DuplicateDefinitionError(f"<{name}> is already declared")

    def _declare(
        self,
        target: Dict[Any, Resolver],
        resolvers: Optional[Mapping[str, Any]],
        scope: Optional[ScopeLike],
        named: Dict[str, Any],
    ) -> None:
        self._ensure_not_sealed()
        default_scope = to_scope_tag(scope) or Scope.MODULE.tag

        # Validate the whole declaration before registering any of it
        entries = []
        seen = set()
        for name, value in iter_declarations(resolvers, named):
            self._ensure_not_declared(name, seen)
            seen.add(name)
            entries.extend(expand_resolvers(name, value, default_scope))

        for key, resolver in entries:
            if isinstance(key, str):
                target[key] = resolver
            else:
                # Hidden items of scope proxies are never public
                self._private_resolvers[key] = resolver

    def _declare_methods(
        self,
        target: Dict[Any, Resolver],
        implementation: Optional[Mapping[str, Callable[..., Any]]],
        methods: Dict[str, Callable[..., Any]],
    ) -> None:
        self._ensure_not_sealed()
        entries = []
        seen = set()
        for name, method in iter_declarations(implementation, methods):
            self._ensure_not_declared(name, seen)
            seen.add(name)
            entries.append((name, method_resolver(name, method)))
        target.update(entries)


def Module(continuation: Optional[ContinuationStore] = None) -> ModuleBuilder:
    """Start declaring a module.

    Args:
        continuation: Optional provider of continuation-scoped stores

    Returns:
        A new, empty ModuleBuilder
    """
    return ModuleBuilder(continuation)
