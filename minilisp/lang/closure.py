"""Closure preservation: approximates lexical capture on top of the stack-disciplined ScopeStack.

When a lambda becomes a value (returned, bound by define, passed as an argument), the frames that bind its free
identifiers may be popped before it is called. The pass walks the lambda body once while those frames are still
live. Each identifier the scope resolves to a real value has that value cached on `resolved_target`. Formals of the
lambda, and of lambdas nested in it, are bound to the LAMBDA_PARAM sentinel during the walk so that they stay
unresolved and are looked up when the lambda is finally applied.
"""

from minilisp.lang.error import LispSyntaxError
from minilisp.pure.node import LAMBDA_PARAM, NodeKind


def formals(lmda):
    """Returns the list of formal parameter nodes of lmda."""
    params = lmda.right
    if params is None or params.left is None:
        raise LispSyntaxError("'{}' expects a parameter list and a body", "lambda", span=lmda.span)
    if params.kind is not NodeKind.LIST:
        raise LispSyntaxError("'{}' parameters must be a list", "lambda", span=params.span)

    result = list(params.items())
    for param in result:
        if param.kind is not NodeKind.IDENTIFIER:
            raise LispSyntaxError("parameter '{}' is not an identifier", param.render(), span=param.span)
    return result


def body(lmda):
    return lmda.right.left


class ClosurePreserver:
    """Annotates identifiers of lambda bodies with their current resolution in scope."""

    def __init__(self, scope):
        self.scope = scope

    def close(self, lmda):
        """Returns a copy of lmda (without its siblings) whose free identifiers are resolved against the scope."""
        params = formals(lmda)
        closure = lmda.clone()
        with self.scope.frame():
            for param in params:
                self.scope.bind(param.name, LAMBDA_PARAM)
            self.preserve(closure)
        return closure

    def preserve(self, lmda):
        """Walks lmda's body, then the nodes following lmda in its list."""
        self._walk(body(lmda))
        self._walk(lmda.left)

    def _preserve_identifier(self, node):
        if node.kind is not NodeKind.IDENTIFIER or node.resolved_target is not None:
            return
        value = self.scope.lookup(node.name)
        if value is not None and value is not LAMBDA_PARAM:
            node.resolved_target = value

    def _walk(self, node):
        while node is not None:
            if node.kind is NodeKind.LAMBDA:
                # nested lambda: its own formals stay unresolved, and so do its siblings
                with self.scope.frame():
                    for param in formals(node):
                        self.scope.bind(param.name, LAMBDA_PARAM)
                    self.preserve(node)
                return

            self._preserve_identifier(node)
            self._walk(node.right)
            node = node.left
