"""
Error Messages Tests

Tests for error attribution and exception hierarchy.
Verifies that every failure reports its code, the chain of names that
led to it, and the offending item.
"""

import sys
import os
import unittest

# Add tests directory to path for local imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from ditory import (
    DependencyResolutionError,
    DependencyResolutionErrorCode,
    DitoryError,
    Module,
)

from conftest import DitoryTestCase

Code = DependencyResolutionErrorCode


class TestErrorMessageFormat(unittest.TestCase):
    """Tests for the deterministic message format"""

    def test_message_without_stack(self):
        error = DependencyResolutionError(Code.PRIVATE_MEMBER_ACCESS_FAILURE, [], 'b')
        self.assertEqual(
            str(error),
            "PrivateMemberAccessFailure in attempting to resolve <b>",
        )

    def test_message_with_stack(self):
        error = DependencyResolutionError(Code.CIRCULAR_DEPENDENCY_FAILURE, ['a', 'b'], 'a')
        self.assertEqual(
            str(error),
            "CircularDependencyFailure in attempting to resolve <a> with stack <a> <- <b>",
        )

    def test_cause_is_chained(self):
        cause = ValueError("boom")
        error = DependencyResolutionError(Code.INSTANTIATION_FAILURE, [], 'a', cause)
        self.assertIs(error.cause, cause)
        self.assertIs(error.__cause__, cause)

    def test_is_ditory_error(self):
        error = DependencyResolutionError(Code.RESOLVER_IS_NOT_DEFINED, [], 'a')
        self.assertIsInstance(error, DitoryError)


class TestResolutionFailures(DitoryTestCase):
    """Tests for failures raised by the resolution engine"""

    def test_missing_resolver(self):
        """A dependency that was never declared is reported with its dependent"""
        main = Module().public(a=lambda m: m.b + 1).create()

        with self.assertRaises(DependencyResolutionError) as ctx:
            main.a

        error = ctx.exception
        self.assertEqual(error.code, Code.RESOLVER_IS_NOT_DEFINED)
        self.assertEqual(error.resolution_stack, ['a'])
        self.assertEqual(error.item, 'b')
        self.assertEqual(
            str(error),
            "ResolverIsNotDefined in attempting to resolve <b> with stack <a>",
        )

    def test_private_member_access(self):
        """Private items cannot be read from the module"""
        main = (
            Module()
            .private(b=lambda: 1)
            .public(a=lambda m: m.b + 1)
            .create()
        )

        with self.assertRaises(DependencyResolutionError) as ctx:
            main.b

        self.assertEqual(ctx.exception.code, Code.PRIVATE_MEMBER_ACCESS_FAILURE)
        self.assertEqual(ctx.exception.resolution_stack, [])
        self.assertEqual(ctx.exception.item, 'b')

    def test_undeclared_name_is_private_member_access(self):
        """Names not declared at all are not part of the public surface either"""
        main = Module().public(a=lambda: 1).create()

        with self.assertRaises(DependencyResolutionError) as ctx:
            main["missing"]

        self.assertEqual(ctx.exception.code, Code.PRIVATE_MEMBER_ACCESS_FAILURE)

    def test_resolver_exception_is_wrapped(self):
        """A raising resolver surfaces as InstantiationFailure with its cause"""
        boom = ValueError("boom")

        def a():
            raise boom

        main = Module().public(a=a).create()

        with self.assertRaises(DependencyResolutionError) as ctx:
            main.a

        error = ctx.exception
        self.assertEqual(error.code, Code.INSTANTIATION_FAILURE)
        self.assertEqual(error.resolution_stack, [])
        self.assertEqual(error.item, 'a')
        self.assertIs(error.cause, boom)
        self.assertIs(error.__cause__, boom)

    def test_innermost_failure_is_not_rewrapped(self):
        """Failures deep in the graph keep their own stack, item and cause"""
        boom = RuntimeError("boom")

        def b():
            raise boom

        main = (
            Module()
            .private(b=b)
            .private(a=lambda m: m.b + 1)
            .public(c=lambda m: m.a + 1)
            .create()
        )

        with self.assertRaises(DependencyResolutionError) as ctx:
            main.c

        error = ctx.exception
        self.assertEqual(error.code, Code.INSTANTIATION_FAILURE)
        self.assertEqual(error.resolution_stack, ['c', 'a'])
        self.assertEqual(error.item, 'b')
        self.assertIs(error.cause, boom)

    def test_circular_dependency(self):
        """a -> b -> a is reported with stack [a, b] and item a"""
        main = (
            Module()
            .public(a=lambda m: m.b + 1)
            .public(b=lambda m: m.a + 1)
            .create()
        )

        with self.assertRaises(DependencyResolutionError) as ctx:
            main.a

        error = ctx.exception
        self.assertEqual(error.code, Code.CIRCULAR_DEPENDENCY_FAILURE)
        self.assertEqual(error.resolution_stack, ['a', 'b'])
        self.assertEqual(error.item, 'a')
        self.assertIsNone(error.cause)

    def test_self_dependency(self):
        """An item reading itself is a cycle of length one"""
        main = Module().public(a=lambda m: m.a).create()

        with self.assertRaises(DependencyResolutionError) as ctx:
            main.a

        self.assertEqual(ctx.exception.code, Code.CIRCULAR_DEPENDENCY_FAILURE)
        self.assertEqual(ctx.exception.resolution_stack, ['a'])

    def test_failed_resolution_does_not_poison_the_stack(self):
        """Retrying after a failure resolves normally instead of reporting a cycle"""
        attempts = []

        def flaky():
            attempts.append(1)
            if len(attempts) == 1:
                raise ConnectionError("first attempt fails")
            return "connected"

        main = (
            Module()
            .private(connection=flaky)
            .public(client=lambda m: f"client({m.connection})")
            .create()
        )

        with self.assertRaises(DependencyResolutionError) as ctx:
            main.client
        self.assertEqual(ctx.exception.code, Code.INSTANTIATION_FAILURE)

        self.assertEqual(main.client, "client(connected)")
        self.assertEqual(len(attempts), 2)

    def test_initializer_exception_is_wrapped(self):
        """Initializer failures are attributed to the initialized item"""
        boom = KeyError("missing")

        def fail(instance):
            raise boom

        main = Module().public(a=lambda: 1).init(a=fail).create()

        with self.assertRaises(DependencyResolutionError) as ctx:
            main.a

        self.assertEqual(ctx.exception.code, Code.INSTANTIATION_FAILURE)
        self.assertEqual(ctx.exception.item, 'a')
        self.assertIs(ctx.exception.cause, boom)


if __name__ == '__main__':
    unittest.main()
