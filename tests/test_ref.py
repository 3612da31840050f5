"""
Ref Tests

Tests for back-references between items of an object cycle
"""

import sys
import os
import unittest

# Add tests directory to path for local imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from ditory import (
    DependencyResolutionError,
    DependencyResolutionErrorCode,
    Module,
    Ref,
    ref,
)

from conftest import DitoryTestCase
from fixtures import Node


class TestRef(unittest.TestCase):
    """Tests for the Ref accessor"""

    def test_current_is_evaluated_on_each_read(self):
        values = iter([1, 2])
        r = Ref(lambda: next(values))

        self.assertEqual(r.current, 1)
        self.assertEqual(r(), 2)

    def test_repr_does_not_evaluate(self):
        def fail():
            raise AssertionError("evaluated")

        self.assertIn("Ref", repr(Ref(fail)))

    def test_ref_binds_a_context(self):
        bind = ref(lambda context: context["value"])
        context = {"value": 1}
        r = bind(context)

        context["value"] = 2
        self.assertEqual(r.current, 2)


class TestCyclicGraph(DitoryTestCase):
    """Tests for a parent and child pointing at each other"""

    def build(self):
        return (
            Module()
            .public(parent=lambda: Node("parent"))
            .public(child=lambda m: Node("child", parent=ref(lambda v: v.parent)(m)))
            .init(parent=lambda parent, m: setattr(parent, "child", m.child))
            .create()
        )

    def test_parent_is_linked_to_child(self):
        main = self.build()

        self.assertIs(main.parent.child, main.child)

    def test_child_refers_back_to_parent(self):
        main = self.build()

        self.assertIsInstance(main.child.parent, Ref)
        self.assertIs(main.child.parent.current, main.parent)

    def test_child_first(self):
        """Reading the child first still links both sides"""
        main = self.build()
        child = main.child

        self.assertIs(child.parent.current.child, child)

    def test_direct_reference_would_be_a_cycle(self):
        main = (
            Module()
            .public(parent=lambda m: Node("parent", child=m.child))
            .public(child=lambda m: Node("child", parent=m.parent))
            .create()
        )

        with self.assertRaises(DependencyResolutionError) as ctx:
            main.parent

        self.assertEqual(
            ctx.exception.code,
            DependencyResolutionErrorCode.CIRCULAR_DEPENDENCY_FAILURE,
        )


if __name__ == '__main__':
    unittest.main()
