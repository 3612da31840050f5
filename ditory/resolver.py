"""
Resolver

A resolver is the named factory of one item. It is called with a view of the
module (attribute access resolves other items lazily) and the construction
parameters, and returns the item's value.

Resolvers may take fewer arguments than the engine offers::

    Module().public(
        config=lambda: {"debug": True},               # no arguments
        logger=lambda m: Logger(m.config),            # view only
        client=lambda m, params: Client(params["url"]) # view and params
    )
"""

import functools
import inspect
from typing import Any, Callable, Iterable, List, Optional, Tuple

from .exceptions import InvalidResolverError
from .scope import Scope, ScopeLike, ScopeTag, to_scope_tag

_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def _positional_arity(func: Callable, limit: int = 2) -> int:
    """Number of engine arguments (at most ``limit``) the callable accepts."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        # Builtins without an introspectable signature get every argument
        return limit

    count = 0
    for parameter in signature.parameters.values():
        if parameter.kind == inspect.Parameter.VAR_POSITIONAL:
            return limit
        if parameter.kind in _POSITIONAL_KINDS:
            count += 1
    return min(count, limit)


class Resolver:
    """Callable wrapper holding a factory and its declared scope.

    Instance stores are keyed by Resolver identity, so every declaration
    creates its own Resolver even when the same factory is reused.

    Attributes:
        func: The wrapped factory
        scope: The declared scope tag, or None
        name: Display name, ``<scope>::<factory name>`` once declared
    """

    __slots__ = ('func', 'scope', 'name', '_arity', '__weakref__')

    def __init__(
        self,
        func: Callable[..., Any],
        scope: Optional[ScopeLike] = None,
        name: Optional[str] = None,
    ):
        self.func = func
        self.scope: Optional[ScopeTag] = to_scope_tag(scope)
        self.name = name or getattr(func, '__name__', type(func).__name__)
        self._arity = _positional_arity(func)

    def __call__(self, view: Any, params: Any) -> Any:
        if self._arity == 0:
            return self.func()
        if self._arity == 1:
            return self.func(view)
        return self.func(view, params)

    def __repr__(self) -> str:
        return f"<Resolver {self.name} scope={self.scope}>"


def with_scope(func: Callable[..., Any], scope: ScopeLike) -> Resolver:
    """Attach a scope to a resolver before it is declared.

    The attached scope wins over the scope passed to the declaration call.

    Example::

        Module().public(
            {"request_id": with_scope(new_request_id, "!async")},
        )
    """
    if isinstance(func, Resolver):
        return Resolver(func.func, scope, func.name)
    return Resolver(func, scope)


def expand_resolvers(
    name: str,
    value: Any,
    default_scope: ScopeTag,
) -> List[Tuple[Any, Resolver]]:
    """Turn one declared value into the registry entries it stands for.

    Plain callables yield a single entry. Scope-isolation proxies yield
    their public entry plus the hidden entry holding the real instance.

    Raises:
        InvalidResolverError: When the value is not callable
    """
    expand = getattr(value, 'expand', None)
    if isinstance(value, Resolver) and expand is not None:
        return expand(name)

    if isinstance(value, Resolver):
        scope = value.scope or default_scope
        return [(name, Resolver(value.func, scope, f"{scope}::{value.name}"))]

    if not callable(value):
        raise InvalidResolverError(name, value)

    func_name = getattr(value, '__name__', name)
    return [(name, Resolver(value, default_scope, f"{default_scope}::{func_name}"))]


def method_resolver(name: str, method: Any) -> Resolver:
    """Wrap ``(view, *args, **kwargs) -> result`` into a module-scoped resolver.

    The resolved value is a callable bound to the module view, so the method
    sees fully resolved items at call time rather than at declaration time.

    Raises:
        InvalidResolverError: When the method is not callable
    """
    if not callable(method):
        raise InvalidResolverError(name, method)

    def resolve_method(view):
        @functools.wraps(method)
        def bound(*args, **kwargs):
            return method(view, *args, **kwargs)
        return bound

    return Resolver(resolve_method, Scope.MODULE.forced, f"{Scope.MODULE.forced}::{name}")


def call_initializer(
    initializer: Callable[..., Any],
    instance: Any,
    view: Any,
    params: Any,
) -> None:
    """Call ``initializer(instance, view, params)`` with as many arguments as it takes."""
    args = (instance, view, params)
    initializer(*args[:_positional_arity(initializer, limit=3)])


def iter_declarations(
    mapping: Optional[Any],
    named: dict,
) -> Iterable[Tuple[str, Any]]:
    """Yield (name, value) pairs from a mapping and keyword arguments."""
    if mapping is not None:
        yield from dict(mapping).items()
    yield from named.items()
