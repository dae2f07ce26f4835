"""Binary syntax tree shared by the parser and the evaluator: the same Node is both AST and runtime value.

Lists are encoded with right-then-left chaining. For `(f a b)`:

```
list
  right -> f
             left -> a
                       left -> b
```

A list-like node's `right` is its first element, and every element's `left` is the next element of the same list.
Special forms (`define`, `lambda`, `eq?`, `cond`) are lists whose kind was retagged by the parser, so the keyword
itself never occupies a slot.
"""

from enum import Enum


class NodeKind(Enum):
    DEFINE = "define"
    LAMBDA = "lambda"
    IDENTIFIER = "identifier"
    BUILTIN_OP = "builtin"
    EQ = "eq?"
    COND = "cond"
    LIST = "list"
    NUMBER = "number"
    BOOLEAN = "boolean"
    LAMBDA_PARAM = "lambda-param"


# kinds that the parser creates from "("
LIST_KINDS = (NodeKind.LIST, NodeKind.DEFINE, NodeKind.LAMBDA, NodeKind.EQ, NodeKind.COND)


class Node:
    """Tagged tree node. See module docstring for the shape of lists."""

    def __init__(self, kind=None, name="", payload=None, span=None):
        self.kind = kind
        self.name = name
        self.payload = payload
        self.span = span

        self.left = None
        self.right = None
        self.parent = None           # weakref to parent, only set while parsing
        self.resolved_target = None  # set by the closure preservation pass

    @property
    def is_leaf(self):
        return self.left is None and self.right is None

    def items(self):
        """Yields the elements of a list-like node: self.right, then its left chain."""
        item = self.right
        while item is not None:
            yield item
            item = item.left

    def siblings(self):
        """Yields the nodes following self in its list (its left chain)."""
        item = self.left
        while item is not None:
            yield item
            item = item.left

    def clone(self, siblings=False):
        """Copies self and its right subtree. If siblings, the left chain is copied too."""
        node = Node(self.kind, self.name, self.payload, self.span)
        node.resolved_target = self.resolved_target
        if self.right is not None:
            node.right = self.right.clone(siblings=True)
        if siblings and self.left is not None:
            node.left = self.left.clone(siblings=True)
        return node

    def render(self):
        """Output text of a value: decimal for numbers, True/False for booleans, otherwise the node's name."""
        if self.kind is NodeKind.NUMBER:
            return str(self.payload)
        if self.kind is NodeKind.BOOLEAN:
            return "True" if self.payload else "False"
        return self.name

    def tokens(self):
        """Re-serializes the tree by walking right-then-left. Only meaningful for parsed trees."""
        result = []

        def _tokens(node):
            while node is not None:
                if node.kind in LIST_KINDS:
                    result.append("(")
                    if node.kind is not NodeKind.LIST:
                        result.append(node.name)
                    _tokens(node.right)
                    result.append(")")
                else:
                    result.append(node.name)
                node = node.left

        _tokens(self)
        return result

    def unparse(self):
        """Source text of the tree, with single spaces between tokens and none inside brackets."""
        source = " ".join(self.tokens())
        return source.replace("( ", "(").replace(" )", ")")

    def qtree(self):
        """Recursively displays tree in LaTeX tikz-qtree format.

        Format:
        \\Tree [.<name> <left> <right> ]   ; missing children are displayed as {}
        """

        def _qtree(node):
            if node.is_leaf:
                return node.name
            left = _qtree(node.left) if node.left is not None else "{}"
            right = _qtree(node.right) if node.right is not None else "{}"
            return f"[.{node.name} {left} {right} ]"

        return "\\Tree " + _qtree(self)

    def __repr__(self):
        kind = self.kind.name if self.kind else None
        return f"Node({kind}, '{self.name}')"


# sentinel bound to formals of a lambda that is a value rather than being applied
LAMBDA_PARAM = Node(NodeKind.LAMBDA_PARAM, "lambda-param")
