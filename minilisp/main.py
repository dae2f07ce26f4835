"""minilisp: a minimal interpreter for a Lisp-like expression language. Interprets a file, reads stdin line by line,
or runs in command-line mode. Called from the minilisp console script.

Basic program flow for every line:
    1. Tokenizer: splits the line into brackets, numbers and identifiers (pure/tokens.py)
    2. Parser: builds a binary syntax tree that is also the runtime representation (pure/parser.py)
    3. Evaluator: walks the tree against a scope stack and produces a value node (lang/evaluator.py)
    4. The value (or the error message) is printed, and the next line is read
"""

import argparse
import sys

from minilisp.lang.error import ErrorHandler
from minilisp.lang.session import Session
from minilisp.lang.shell import Shell


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="minilisp", description="Minimal Lisp-like expression interpreter.")
    parser.add_argument("file", help="file to interpret line by line (if empty, reads stdin or goes to command-line "
                                     "mode)", nargs="?")
    parser.add_argument("--tokens", action="store_true", help="print the tokens of every line")
    parser.add_argument("--tree", action="store_true", help="print the syntax tree of every line (tikz-qtree)")
    parser.add_argument("--fatal", action="store_true", help="stop at the first error with exit status 1")
    parser.add_argument("--plain", action="store_true", help="print bare error messages in place of results")
    return parser.parse_args(argv)


def main(argv=None):
    """Runs minilisp interpreter. Called from minilisp executable script."""
    with ErrorHandler(fatal=True):  # errors outside of a line (arguments, unreadable file) are fatal
        args = parse_args(argv)

        interactive = args.file is None and sys.stdin.isatty()
        plain = args.plain or (args.file is None and not interactive)
        error_handler = ErrorHandler(fatal=args.fatal, plain=plain)

        path = args.file if args.file is not None else Session.SH_FILE
        sess = Session(error_handler, path, show_tokens=args.tokens, show_tree=args.tree)

        if args.file is not None:
            sess.interpret_file()
        elif interactive:
            Shell(sess).cmdloop()
        else:
            sess.interpret(sys.stdin)


if __name__ == "__main__":
    main()
