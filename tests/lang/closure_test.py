import unittest

from minilisp.lang.closure import ClosurePreserver, body, formals
from minilisp.lang.error import LispSyntaxError
from minilisp.lang.prelude import BUILTINS
from minilisp.lang.scope import ScopeStack
from minilisp.pure.node import LAMBDA_PARAM, Node, NodeKind
from minilisp.pure.parser import build_syntax_tree


def identifiers(node):
    """All identifier nodes of node's tree, in right-then-left order."""
    result = []
    while node is not None:
        if node.kind is NodeKind.IDENTIFIER:
            result.append(node)
        result.extend(identifiers(node.right))
        node = node.left
    return result


class FormalsTestCase(unittest.TestCase):

    def test_formals(self):
        lmda = build_syntax_tree("(lambda (x y z) (+ x y))")
        self.assertEqual(["x", "y", "z"], [param.name for param in formals(lmda)])
        self.assertEqual("+", body(lmda).right.name)

        self.assertEqual([], formals(build_syntax_tree("(lambda () 5)")))

    def test_malformed(self):
        should_raise = ["(lambda (x))", "(lambda x x)", "(lambda (x 1) x)", "(lambda ((x)) x)"]
        for case in should_raise:
            self.assertRaises(LispSyntaxError, formals, build_syntax_tree(case))


class ClosurePreserverTestCase(unittest.TestCase):

    def setUp(self):
        self.scope = ScopeStack()
        self.preserver = ClosurePreserver(self.scope)

    def test_close_caches_free_identifiers(self):
        self.scope.define("k", Node(NodeKind.NUMBER, "10", 10))
        lmda = build_syntax_tree("(lambda (x) (+ x k))")

        closure = self.preserver.close(lmda)
        plus, x, k = identifiers(body(closure))
        self.assertIs(BUILTINS["+"], plus.resolved_target)
        self.assertIsNone(x.resolved_target)  # formal stays unresolved
        self.assertEqual(10, k.resolved_target.payload)
        self.assertEqual(ScopeStack.BASE_DEPTH, self.scope.depth)

    def test_close_leaves_parsed_lambda_untouched(self):
        lmda = build_syntax_tree("(lambda (x) (+ x 1))")
        closure = self.preserver.close(lmda)
        self.assertIsNot(lmda, closure)
        self.assertTrue(all(node.resolved_target is None for node in identifiers(lmda)))

    def test_undefined_identifiers_stay_unresolved(self):
        closure = self.preserver.close(build_syntax_tree("(lambda (x) (f x))"))
        self.assertTrue(all(node.resolved_target is None for node in identifiers(body(closure))))

    def test_nested_lambda(self):
        with self.scope.frame():
            self.scope.bind("a", Node(NodeKind.NUMBER, "1", 1))
            closure = self.preserver.close(build_syntax_tree("(lambda (x) (lambda (y a) (+ x (+ y a))))"))

        targets = {node.name: node.resolved_target for node in identifiers(body(closure))}
        self.assertIsNone(targets["x"])  # outer formal
        self.assertIsNone(targets["y"])  # inner formal
        self.assertIsNone(targets["a"])  # inner formal shadows the bound a
        self.assertIs(BUILTINS["+"], targets["+"])

    def test_resolution_set_once(self):
        first = Node(NodeKind.NUMBER, "1", 1)
        lmda = build_syntax_tree("(lambda (x) k)")
        self.scope.define("k", first)
        closure = self.preserver.close(lmda)

        with self.scope.frame():
            self.scope.bind("k", Node(NodeKind.NUMBER, "2", 2))
            self.preserver.preserve(closure)
        self.assertIs(first, body(closure).resolved_target)

    def test_sentinel_is_never_cached(self):
        with self.scope.frame():
            self.scope.bind("z", LAMBDA_PARAM)
            closure = self.preserver.close(build_syntax_tree("(lambda (x) z)"))
        self.assertIsNone(body(closure).resolved_target)


if __name__ == '__main__':
    unittest.main()
