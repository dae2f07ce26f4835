"""Scope stack: frames of name -> Node, searched from the innermost frame outwards.

The outermost frame is the read-only built-in table and the one above it holds top-level definitions. Both are
permanent. Every other frame belongs to one lambda activation (or one closure preservation pass) and must be popped
when it ends, including when an error unwinds the evaluation.
"""

from contextlib import contextmanager

from minilisp.lang.prelude import BUILTINS


class ScopeStack:
    """Identifier map with lexical nesting."""
    BASE_DEPTH = 2  # built-ins + top-level definitions

    def __init__(self, builtins=BUILTINS):
        self._frames = [builtins, {}]

    @property
    def depth(self):
        return len(self._frames)

    @property
    def globals(self):
        """Top-level frame, where define binds names."""
        return self._frames[ScopeStack.BASE_DEPTH - 1]

    def push_frame(self):
        self._frames.append({})

    def pop_frame(self):
        if self.depth <= ScopeStack.BASE_DEPTH:
            raise IndexError("cannot pop a permanent frame")
        self._frames.pop()

    @contextmanager
    def frame(self):
        """Pushes a frame for the duration of the with block."""
        self.push_frame()
        try:
            yield self._frames[-1]
        finally:
            self.pop_frame()

    def unwind(self, depth=BASE_DEPTH):
        """Pops frames until depth frames are left."""
        del self._frames[max(depth, ScopeStack.BASE_DEPTH):]

    def bind(self, name, node):
        """Binds name in the innermost frame. May shadow outer frames."""
        self._frames[-1][name] = node

    def define(self, name, node):
        self.globals[name] = node

    def lookup(self, name):
        """Returns the innermost binding of name, or None."""
        for frame in reversed(self._frames):
            if name in frame:
                return frame[name]
        return None

    def __contains__(self, name):
        return self.lookup(name) is not None

    def __repr__(self):
        return f"ScopeStack(depth={self.depth}, globals={sorted(self.globals)})"
