"""Tree-walking evaluator. Reduces a Node to a value Node: NUMBER, BOOLEAN, a LAMBDA closure, or any other node that
evaluates to itself (built-ins, empty lists).

Dispatch is on the node kind:
    - identifiers resolve through their cached closure target, then through the scope
    - define binds a new name in the top-level frame
    - lists apply their head to the remaining items (built-in operators or lambdas)
    - a lambda outside of a call position becomes a closure value
    - eq? compares two numbers or two booleans
    - cond returns the expression of the first clause whose condition is True

Every frame pushed here is popped when its evaluation ends, whether it returns or raises.
"""

from minilisp.lang.closure import ClosurePreserver, body, formals
from minilisp.lang.error import (ArityError, DivisionByZero, DuplicateDefinition, LispSyntaxError, NoMatchingClause,
                                 TooFewArguments, TypeMismatch, UnboundParameter, UndefinedIdentifier)
from minilisp.lang.scope import ScopeStack
from minilisp.pure.node import LAMBDA_PARAM, Node, NodeKind


def number_node(number):
    return Node(NodeKind.NUMBER, str(number), number)


def boolean_node(value):
    return Node(NodeKind.BOOLEAN, "True" if value else "False", value)


class Evaluator:
    """Evaluates syntax trees against a ScopeStack."""

    def __init__(self, scope=None):
        self.scope = scope if scope is not None else ScopeStack()
        self.preserver = ClosurePreserver(self.scope)

    def evaluate(self, root):
        """Evaluates a whole line. The scope is back at its starting depth afterwards, even if an error is raised."""
        depth = self.scope.depth
        try:
            return self.eval(root)
        finally:
            self.scope.unwind(depth)

    def eval(self, node):
        if node.right is None:
            if node.kind is NodeKind.IDENTIFIER:
                return self._resolve(node)
            return node

        if node.kind is NodeKind.DEFINE:
            return self._define(node)
        if node.kind is NodeKind.LIST:
            return self._apply(node)
        if node.kind is NodeKind.LAMBDA:
            return self._lambda(node)
        if node.kind is NodeKind.EQ:
            return self._eq(node)
        if node.kind is NodeKind.COND:
            return self._cond(node)
        raise TypeError(f"cannot evaluate {node!r}")

    def _resolve(self, identifier):
        value = identifier.resolved_target
        if value is None:
            value = self.scope.lookup(identifier.name)

        if value is None:
            raise UndefinedIdentifier(identifier.name, identifier.span)
        if value is LAMBDA_PARAM:
            raise UnboundParameter(identifier.name, identifier.span)
        if value.kind is NodeKind.IDENTIFIER:
            return self._resolve(value)
        return value

    def _define(self, node):
        identifier = node.right
        if identifier.kind is not NodeKind.IDENTIFIER or identifier.left is None:
            raise LispSyntaxError("'{}' expects a name and a value", "define", span=node.span)

        value = self.eval(identifier.left)
        if identifier.name in self.scope:
            raise DuplicateDefinition(identifier.name, identifier.span)
        self.scope.define(identifier.name, value)
        return node

    def _apply(self, node):
        head = node.right
        callee = head
        if head.kind not in (NodeKind.BUILTIN_OP, NodeKind.LAMBDA):
            callee = self.eval(head)

        if callee.kind is NodeKind.BUILTIN_OP:
            return self._apply_builtin(callee, head)
        if callee.kind is NodeKind.LAMBDA:
            return self._apply_lambda(callee, head)
        if head.left is None:
            return callee  # (x) is x
        raise TypeMismatch("'{}' is not callable", callee.render(), span=head.span)

    def _operand(self, op, node):
        value = self.eval(node)
        if value.kind is not NodeKind.NUMBER:
            raise TypeMismatch("'{}' expects numbers, got '{}'", [op.name, value.render()], span=node.span)
        return value.payload

    def _apply_builtin(self, op, head):
        first = head.left
        second = first.left if first is not None else None
        if second is None:
            raise ArityError(op.name, head.span)

        x = self._operand(op, first)
        y = self._operand(op, second)
        try:
            return number_node(op.payload(x, y))
        except DivisionByZero as error:
            error.span = second.span
            raise

    def _apply_lambda(self, lmda, head):
        params = formals(lmda)
        actual = head.left
        if actual is None and params:
            return self.preserver.close(lmda)  # nothing supplied: the lambda itself is the value

        values = []
        for __ in params:
            if actual is None:
                raise TooFewArguments(head.name, head.span)
            values.append(self.eval(actual))
            actual = actual.left

        with self.scope.frame():
            for param, value in zip(params, values):
                self.scope.bind(param.name, value)
            return self.eval(body(lmda))

    def _lambda(self, lmda):
        params = formals(lmda)
        bound = [self.scope.lookup(param.name) for param in params]
        if lmda.left is None or not params or any(value is None or value is LAMBDA_PARAM for value in bound):
            return self.preserver.close(lmda)

        # re-entry: an enclosing activation already bound every formal
        with self.scope.frame():
            for param, value in zip(params, bound):
                self.scope.bind(param.name, value)
            return self.eval(body(lmda))

    def _eq(self, node):
        first = node.right
        second = first.left
        if second is None:
            raise LispSyntaxError("'{}' expects two operands", "eq?", span=node.span)

        x = self.eval(first)
        y = self.eval(second)
        if x.kind is not y.kind or x.kind not in (NodeKind.NUMBER, NodeKind.BOOLEAN):
            raise TypeMismatch("'{}' cannot compare '{}' and '{}'", ["eq?", x.render(), y.render()], span=node.span)
        return boolean_node(x.payload == y.payload)

    def _cond(self, node):
        for clause in node.items():
            condition = clause.right
            if clause.kind is not NodeKind.LIST or condition is None or condition.left is None:
                raise LispSyntaxError("'{}' clauses must be (condition expression)", "cond", span=clause.span)

            test = self.eval(condition)
            if test.kind is not NodeKind.BOOLEAN:
                raise TypeMismatch("'{}' expects a boolean condition, got '{}'", ["cond", test.render()],
                                   span=condition.span)
            if test.payload:
                return self.eval(condition.left)

        raise NoMatchingClause(node.span)
