"""
Scope

Cache lifetime policies for resolved items and the rule that composes a
dependency's scope with the scope suggested by its dependent.

Scopes form a small lattice::

    module --> async --> transient
    singleton (terminal)

A dependent is widened towards ``transient`` when one of its dependencies
lives shorter than it does, so a value is never cached longer than the
values it was built from.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class Scope(Enum):
    """Cache lifetime of a resolved item"""
    MODULE = "module"
    SINGLETON = "singleton"
    TRANSIENT = "transient"
    ASYNC = "async"

    @property
    def tag(self) -> 'ScopeTag':
        return ScopeTag(self)

    @property
    def forced(self) -> 'ScopeTag':
        """Tag that a dependent can never widen, e.g. ``Scope.ASYNC.forced``."""
        return ScopeTag(self, ScopeMarker.FORCED)

    @property
    def suggested(self) -> 'ScopeTag':
        """Tag that never widens anything, it only fills an absent scope."""
        return ScopeTag(self, ScopeMarker.SUGGESTED)


class ScopeMarker(Enum):
    """Prefix marker of a scope tag"""
    NONE = ""
    FORCED = "!"
    SUGGESTED = "?"


@dataclass(frozen=True)
class ScopeTag:
    """A scope together with its forced/suggested marker.

    Attributes:
        scope: The cache lifetime
        marker: Whether the tag is forced, suggested, or plain
    """
    scope: Scope
    marker: ScopeMarker = ScopeMarker.NONE

    @classmethod
    def parse(cls, value: str) -> 'ScopeTag':
        """Parse the string form of a tag.

        Example::

            ScopeTag.parse("!async")     # ScopeTag(Scope.ASYNC, ScopeMarker.FORCED)
            ScopeTag.parse("transient")  # ScopeTag(Scope.TRANSIENT)

        Raises:
            ValueError: When the string does not name a scope
        """
        marker = ScopeMarker.NONE
        if value[:1] in ("!", "?"):
            marker = ScopeMarker(value[0])
            value = value[1:]
        try:
            scope = Scope(value)
        except ValueError:
            names = ", ".join(s.value for s in Scope)
            raise ValueError(
                f"Unknown scope '{value}'. Expected one of: {names}"
            ) from None
        return cls(scope, marker)

    @property
    def is_forced(self) -> bool:
        return self.marker is ScopeMarker.FORCED

    @property
    def is_suggested(self) -> bool:
        return self.marker is ScopeMarker.SUGGESTED

    def normalized(self) -> 'ScopeTag':
        """Return the same scope without its marker."""
        if self.marker is ScopeMarker.NONE:
            return self
        return ScopeTag(self.scope)

    def __str__(self) -> str:
        return f"{self.marker.value}{self.scope.value}"


ScopeLike = Union[Scope, ScopeTag, str]


def to_scope_tag(value: Optional[ScopeLike]) -> Optional[ScopeTag]:
    """Coerce a Scope, a ScopeTag or a string form into a ScopeTag.

    Raises:
        TypeError: When the value is none of the accepted forms
    """
    if value is None or isinstance(value, ScopeTag):
        return value
    if isinstance(value, Scope):
        return value.tag
    if isinstance(value, str):
        return ScopeTag.parse(value)
    raise TypeError(
        f"Expected a Scope, ScopeTag or str, but got {type(value).__name__}"
    )


def normalize_scope(tag: Optional[ScopeTag]) -> Optional[Scope]:
    """Strip the marker of a tag, keeping only its scope."""
    return tag.scope if tag is not None else None


def merge_scope(
    own: Optional[ScopeTag],
    suggested: Optional[ScopeTag],
) -> Optional[ScopeTag]:
    """Compose an item's own scope with the scope suggested for it.

    Rules, in order of precedence:

    - no suggestion keeps ``own`` unchanged
    - no own scope adopts the suggestion, without its marker
    - a forced or suggested-only ``own`` is never overridden
    - a suggested-only suggestion never overrides anything
    - ``singleton`` and ``transient`` are terminal
    - ``module`` widens to ``async`` or ``transient``
    - ``async`` widens to ``transient``

    Args:
        own: The scope currently recorded for the item
        suggested: The scope of one of its dependencies

    Returns:
        The effective scope for the item
    """
    if suggested is None:
        return own

    if own is None:
        return suggested.normalized()

    if own.is_forced or own.is_suggested or suggested.is_suggested:
        return own

    if own.scope is Scope.MODULE:
        if suggested.scope in (Scope.ASYNC, Scope.TRANSIENT):
            return suggested.normalized()
        return own

    if own.scope is Scope.ASYNC:
        if suggested.scope is Scope.TRANSIENT:
            return suggested.normalized()
        return own

    # singleton and transient
    return own
