"""
ScopeProxy

Scope-isolation proxies: declare an item whose real value lives under a
different scope than the item its dependents see.

The declared item is a module-scoped ``LazyProxy``. Each operation on it
resolves a hidden item holding the real value, so for ``async_scoped`` every
continuation context gets its own value while dependents keep a single,
long-lived reference.

Example::

    main = (
        Module()
        .public(request_id=async_scoped(lambda: RequestId(uuid4().hex)))
        .create()
    )

    await run(handle)  # main.request_id.value differs from one run to the next
"""

from typing import Any, Callable, List, Tuple

from .proxy import proxy
from .resolver import Resolver
from .scope import Scope, ScopeTag


class HiddenKey:
    """Registry key of the item holding a proxied value.

    Only reachable through the proxy, never by attribute access.
    """

    __slots__ = ('scope', 'name')

    def __init__(self, scope: ScopeTag, name: str):
        self.scope = scope
        self.name = name

    def __str__(self) -> str:
        return f"{self.scope}::{self.name}"

    def __repr__(self) -> str:
        return f"HiddenKey({self})"


class ScopeProxyResolver(Resolver):
    """Resolver declaring a proxy item plus a hidden item under ``isolated_scope``.

    The hidden item carries a suggested-only tag, so it never widens the
    items depending on the proxy.
    """

    __slots__ = ('isolated_scope',)

    def __init__(self, item_resolver: Callable[..., Any], isolated_scope: ScopeTag):
        super().__init__(item_resolver, Scope.MODULE.forced)
        self.isolated_scope = isolated_scope

    def expand(self, name: str) -> List[Tuple[Any, Resolver]]:
        key = HiddenKey(self.isolated_scope, name)
        hidden = Resolver(self.func, self.isolated_scope, f"{self.isolated_scope}::{self.name}")
        public = Resolver(
            proxy(lambda view: view[key]),
            Scope.MODULE.forced,
            f"{Scope.MODULE.forced}::{name}",
        )
        return [(name, public), (key, hidden)]


def async_scoped(item_resolver: Callable[..., Any]) -> ScopeProxyResolver:
    """Keep one value per continuation context behind a module-scoped proxy."""
    return ScopeProxyResolver(item_resolver, Scope.ASYNC.suggested)


def transient_scoped(item_resolver: Callable[..., Any]) -> ScopeProxyResolver:
    """Compute a fresh value for every operation on a module-scoped proxy."""
    return ScopeProxyResolver(item_resolver, Scope.TRANSIENT.suggested)
