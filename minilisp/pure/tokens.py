"""Tokenizer for minilisp source lines.

A line is split into three kinds of tokens:

```
<bracket>    ::= "(" | ")"                ; always a single character
<number>     ::= <digit>+                 ; maximal run of decimal digits
<identifier> ::= <char>+                  ; any other run of non-space, non-bracket characters
```

A run that starts with digits but continues with other characters (e.g. `0alpha`) is an identifier. Whitespace only
separates tokens and is never emitted.
"""

from enum import Enum


class TokenKind(Enum):
    IDENTIFIER = "identifier"
    BRACKET = "bracket"
    NUMBER = "number"


class Token:
    """A single token of a line, along with the offset of its first character."""
    BRACKETS = "()"

    def __init__(self, kind, text, start):
        self.kind = kind
        self.text = text
        self.start = start

    @property
    def end(self):
        return self.start + len(self.text)

    @property
    def span(self):
        return self.start, self.end

    @staticmethod
    def move(kind, char):
        """Returns the token kind after char is appended to a token of kind (None for an empty token)."""
        if kind is None:
            if char in Token.BRACKETS:
                return TokenKind.BRACKET
            if char.isdecimal():
                return TokenKind.NUMBER
            return TokenKind.IDENTIFIER
        if kind is TokenKind.NUMBER and not char.isdecimal():
            return TokenKind.IDENTIFIER
        return kind

    @staticmethod
    def is_boundary(char):
        """Whether or not char ends the token before it."""
        return char.isspace() or char in Token.BRACKETS

    def __repr__(self):
        return f"Token({self.kind.name}, '{self.text}', {self.start})"

    def __eq__(self, other):
        return isinstance(other, Token) and (self.kind, self.text, self.start) == (other.kind, other.text, other.start)


def tokenize(line):
    """Lazily yields the Tokens of line."""
    pos = 0
    while pos < len(line):
        if line[pos].isspace():
            pos += 1
            continue

        start = pos
        kind = Token.move(None, line[pos])
        pos += 1
        if kind is not TokenKind.BRACKET:
            while pos < len(line) and not Token.is_boundary(line[pos]):
                kind = Token.move(kind, line[pos])
                pos += 1

        yield Token(kind, line[start:pos], start)
