"""
Ditory Exceptions

Custom exception hierarchy for the ditory resolution engine
"""

from enum import Enum
from typing import List, Optional, Sequence


class DitoryError(Exception):
    """
    Base exception for all ditory errors.

    All ditory-specific exceptions inherit from this class.
    You can catch this to handle any ditory error generically.

    Example:
        >>> try:
        ...     service = main.service
        ... except DitoryError as e:
        ...     print(f"DI error: {e}")
    """

    pass


class DependencyResolutionErrorCode(Enum):
    """Machine-checkable kind of a resolution failure"""
    PRIVATE_MEMBER_ACCESS_FAILURE = "PrivateMemberAccessFailure"
    CIRCULAR_DEPENDENCY_FAILURE = "CircularDependencyFailure"
    RESOLVER_IS_NOT_DEFINED = "ResolverIsNotDefined"
    INSTANTIATION_FAILURE = "InstantiationFailure"


class DependencyResolutionError(DitoryError):
    """
    Raised when an item cannot be resolved.

    Every failure inside the resolution engine is reported with this single
    type. The ``code`` tells which kind of failure happened:

    - ``RESOLVER_IS_NOT_DEFINED``: a resolver asked for a name that was
      never declared
    - ``CIRCULAR_DEPENDENCY_FAILURE``: an item (directly or indirectly)
      depends on itself
    - ``INSTANTIATION_FAILURE``: a resolver body raised; the original
      exception is kept as ``cause``
    - ``PRIVATE_MEMBER_ACCESS_FAILURE``: a consumer read a name that is not
      part of the public surface

    Attributes:
        code: The failure kind
        resolution_stack: Names of the items that were being resolved, the
            outermost first
        item: The item whose resolution failed
        cause: The exception raised by the resolver body, if any

    Example::

        try:
            main.a
        except DependencyResolutionError as e:
            e.code              # DependencyResolutionErrorCode.CIRCULAR_DEPENDENCY_FAILURE
            e.resolution_stack  # ['a', 'b']
            e.item              # 'a'
    """

    def __init__(
        self,
        code: DependencyResolutionErrorCode,
        resolution_stack: Sequence[str],
        item: str,
        cause: Optional[BaseException] = None,
    ):
        self.code = code
        self.resolution_stack: List[str] = list(resolution_stack)
        self.item = item
        self.cause = cause
        super().__init__(self.format_message(code, self.resolution_stack, item))
        if cause is not None:
            self.__cause__ = cause

    @staticmethod
    def format_message(
        code: DependencyResolutionErrorCode,
        resolution_stack: Sequence[str],
        item: str,
    ) -> str:
        """Build the deterministic error message.

        Example::

            >>> DependencyResolutionError.format_message(
            ...     DependencyResolutionErrorCode.CIRCULAR_DEPENDENCY_FAILURE,
            ...     ['a', 'b'],
            ...     'a',
            ... )
            'CircularDependencyFailure in attempting to resolve <a> with stack <a> <- <b>'
        """
        stack_message = ""
        if resolution_stack:
            stack_message = " with stack " + " <- ".join(
                f"<{parent}>" for parent in resolution_stack
            )
        return f"{code.value} in attempting to resolve <{item}>{stack_message}"

    def __reduce__(self):
        return (
            self.__class__,
            (self.code, self.resolution_stack, self.item, self.cause),
        )


class StackErrorType(Enum):
    """Kind of resolution stack misuse"""
    EMPTY = "Stack is empty"
    EXISTS = "Item already exists in stack"


class StackError(DitoryError):
    """
    Raised when the resolution stack is misused.

    ``EXISTS`` is raised by ``push()`` for an item already on the stack; the
    engine turns it into a ``CircularDependencyFailure``. ``EMPTY`` is raised
    by ``pop()`` on an empty stack and signals a programming error.
    """

    def __init__(self, error_type: StackErrorType):
        self.error_type = error_type
        super().__init__(error_type.value)


class ModuleSealedError(DitoryError):
    """
    Raised when declaring items on a sealed module builder.

    A builder is sealed once initializers were attached with ``init()`` or a
    container was produced with ``create()``.

    Solution:
        Declare every item before calling ``init()``::

            main = (
                Module()
                .public(a=lambda: 1)
                .public(b=lambda m: m.a + 1)  # declare first
                .init(a=lambda a, m, params: None)
                .create()
            )
    """

    def __init__(self, message: str = "Cannot extend initialized module"):
        super().__init__(message)


class DuplicateDefinitionError(DitoryError):
    """
    Raised when the same name is declared twice.

    Private and public items share one namespace, so a private item
    cannot be shadowed by a public one either.

    Common causes:
        - Declaring the same name in two ``public()`` calls
        - Declaring a method with ``public_impl()`` that clashes with an item
    """

    pass


class DefinitionNotFoundError(DitoryError):
    """
    Raised when an initializer names an item that was never declared.
    """

    pass


class InvalidResolverError(DitoryError, TypeError):
    """
    Raised when a declared resolver is not callable.

    Example::

        Module().public(a=1)
        # InvalidResolverError: Expected a to be a function, but got int
    """

    def __init__(self, name: str, value: object):
        self.name = name
        self.value = value
        super().__init__(
            f"Expected {name} to be a function, but got {type(value).__name__}"
        )
