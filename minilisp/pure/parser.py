"""Builds the binary syntax tree of a single line.

Grammar (one expression per line):

```
<list>  ::= "(" <items> ")"
<items> ::= <item> | <item> <whitespace> <items>
<item>  ::= <identifier> | <number> | <list>
```

The parser keeps a cursor on the next unfilled slot of the tree and a stack of open lists. Opening a list descends
into its right slot, every other item descends into the left slot of what was just filled, and closing a list
discards the unfilled slot and resumes after the list.
"""

import weakref

from minilisp.lang.error import LispSyntaxError
from minilisp.lang.prelude import INT_MAX
from minilisp.pure.node import LIST_KINDS, Node, NodeKind
from minilisp.pure.tokens import TokenKind, tokenize


KEYWORDS = {
    "define": NodeKind.DEFINE,
    "lambda": NodeKind.LAMBDA,
    "eq?": NodeKind.EQ,
    "cond": NodeKind.COND,
}


def _add_left(cur):
    cur.left = Node()
    cur.left.parent = weakref.ref(cur)
    return cur.left


def _add_right(cur):
    cur.right = Node()
    cur.right.parent = weakref.ref(cur)
    return cur.right


def _detach(cur):
    """Removes the unfilled slot cur from its parent."""
    parent = cur.parent()
    if parent.left is cur:
        parent.left = None
    else:
        parent.right = None


def _release(node):
    """Drops parent references once the tree is complete."""
    while node is not None:
        node.parent = None
        _release(node.right)
        node = node.left


def _is_operator_slot(cur, open_lists):
    """Whether or not cur is the first slot of the innermost open list."""
    if not open_lists or cur.parent is None:
        return False
    return cur.parent() is open_lists[-1] and open_lists[-1].right is cur


def build_syntax_tree(line):
    """Returns the root Node of line's syntax tree. Raises LispSyntaxError if line is not a single expression."""
    root = cur = Node()
    open_lists = []

    for token in tokenize(line):
        if token.kind is TokenKind.BRACKET and token.text == "(":
            cur.kind = NodeKind.LIST
            cur.name = "list"
            cur.span = token.span
            open_lists.append(cur)
            cur = _add_right(cur)

        elif token.kind is TokenKind.BRACKET:
            if not open_lists:
                raise LispSyntaxError("unexpected '{}'", ")", span=token.span)
            _detach(cur)  # cur is always unfilled here: either an empty list or the slot after the last item
            cur = open_lists.pop()
            cur.span = (cur.span[0], token.end)
            cur = _add_left(cur)

        elif token.kind is TokenKind.NUMBER:
            number = int(token.text)
            if number > INT_MAX:
                raise LispSyntaxError("integer literal '{}' out of range", token.text, span=token.span)
            cur.kind = NodeKind.NUMBER
            cur.name = token.text
            cur.payload = number
            cur.span = token.span
            cur = _add_left(cur)

        else:
            if token.text in KEYWORDS and _is_operator_slot(cur, open_lists):
                open_lists[-1].kind = KEYWORDS[token.text]
                open_lists[-1].name = token.text
                continue
            cur.kind = NodeKind.IDENTIFIER
            cur.name = token.text
            cur.span = token.span
            cur = _add_left(cur)

    if open_lists:
        raise LispSyntaxError("missing '{}'", ")", span=(open_lists[-1].span[0], len(line)))
    if root.kind is None:
        raise LispSyntaxError("empty expression", diagnosis=False)
    extra = root.left
    if extra.kind is not None:
        text = "(" if extra.kind in LIST_KINDS else extra.name
        raise LispSyntaxError("unexpected '{}' after expression", text, span=extra.span)

    root.left = None
    _release(root)
    return root
