import logging

# Public API
from . import async_scope
from . import scope_proxy as ScopeProxy
from .async_scope import (
    ContextVarContinuationStore,
    ContinuationStore,
    SharedContinuationStore,
    run,
)
from .container import InjectedView, ModuleContainer
from .exceptions import (
    DefinitionNotFoundError,
    DependencyResolutionError,
    DependencyResolutionErrorCode,
    DitoryError,
    DuplicateDefinitionError,
    InvalidResolverError,
    ModuleSealedError,
    StackError,
    StackErrorType,
)
from .module import Module, ModuleBuilder
from .proxy import LazyProxy, proxy, unwrap
from .ref import Ref, ref
from .resolver import Resolver, with_scope
from .scope import Scope, ScopeMarker, ScopeTag, merge_scope, normalize_scope
from .scope_proxy import async_scoped, transient_scoped
from .stack import ResolutionStack

__all__ = [
    "Module",
    "ModuleBuilder",
    "ModuleContainer",
    "InjectedView",
    "Resolver",
    "with_scope",
    # Scopes
    "Scope",
    "ScopeMarker",
    "ScopeTag",
    "merge_scope",
    "normalize_scope",
    "ScopeProxy",
    "async_scoped",
    "transient_scoped",
    # Continuation stores
    "async_scope",
    "run",
    "ContinuationStore",
    "ContextVarContinuationStore",
    "SharedContinuationStore",
    # Indirection
    "LazyProxy",
    "proxy",
    "unwrap",
    "Ref",
    "ref",
    "ResolutionStack",
    # Exceptions
    "DitoryError",
    "DependencyResolutionError",
    "DependencyResolutionErrorCode",
    "StackError",
    "StackErrorType",
    "ModuleSealedError",
    "DuplicateDefinitionError",
    "DefinitionNotFoundError",
    "InvalidResolverError",
]

__version__ = '0.1.0'

logging.getLogger(__name__).addHandler(logging.NullHandler())
