"""Session control for minilisp. Runs lines through tokenizer, parser and evaluator, either from a file, from a
non-interactive stdin, or one at a time from the command-line shell.
"""

from minilisp.lang.error import GenericException
from minilisp.lang.evaluator import Evaluator
from minilisp.lang.scope import ScopeStack
from minilisp.pure.node import NodeKind
from minilisp.pure.parser import KEYWORDS, build_syntax_tree
from minilisp.pure.tokens import tokenize


class Session:
    """Governs a minilisp session: one scope stack shared by every line."""
    SH_FILE = "<stdin>"  # name used in tracebacks for lines that don't come from a file

    def __init__(self, error_handler, path=SH_FILE, show_tokens=False, show_tree=False):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path                # used for error messages
        self.show_tokens = show_tokens  # print tokens of each line before evaluating it
        self.show_tree = show_tree      # print tikz-qtree of each line before evaluating it

        self.scope = ScopeStack()
        self.evaluator = Evaluator(self.scope)

        self.to_exec = {}  # dict of line num: (line, syntax tree) to evaluate
        self.results = []  # rendered results not yet consumed

    @staticmethod
    def preprocess_line(line, tmp_line=""):
        """Joins line to an unfinished tmp_line. Returns updated line and whether or not brackets are still open."""
        line = (tmp_line + " " + line.strip()).strip() if tmp_line else line.strip()
        return line, line.count("(") > line.count(")")

    def add(self, line, line_num):
        """Parses line and queues it for evaluation. Evaluation is delayed until run is called."""
        self.error_handler.register_line(self.path, line, line_num)  # in case error is raised

        if self.show_tokens:
            print("tokens: " + ", ".join(f'"{token.text}"' for token in tokenize(line)))

        root = build_syntax_tree(line)
        if self.show_tree:
            print("syntax tree (latex tikz-qtree):\n" + root.qtree())
        self._check_keywords(root)

        self.to_exec[line_num] = (line, root)
        self.error_handler.remove_line(self.path)  # error was not raised

    def _check_keywords(self, node):
        """Warns about keywords used outside of operator position, which are plain identifiers."""
        while node is not None:
            if node.kind is NodeKind.IDENTIFIER and node.name in KEYWORDS:
                self.error_handler.warn("'{}' is not in operator position and is treated as an identifier",
                                        node.name, span=node.span)
            self._check_keywords(node.right)
            node = node.left

    def run(self):
        """Evaluates queued lines in order and stores their rendered results. Raises the first error encountered;
        the failed line is dropped either way.
        """
        for line_num, (line, root) in sorted(self.to_exec.items()):
            self.error_handler.register_line(self.path, line, line_num)
            try:
                self.results.append(self.evaluator.evaluate(root).render())
            finally:
                del self.to_exec[line_num]
            self.error_handler.remove_line(self.path)

    def pop(self):
        """Returns the oldest result that has not been consumed yet."""
        return self.results.pop(0)

    def execute(self, line, line_num):
        """Parses and evaluates line. Errors are reported by the error handler and do not propagate."""
        with self.error_handler:
            self.add(line, line_num)
            self.run()

    def interpret(self, lines):
        """Executes every non-blank line in lines, printing one output line for each."""
        for line_num, line in enumerate(lines, 1):
            line = line.rstrip("\n")
            if not line.strip():
                continue

            self.execute(line, line_num)
            while self.results:
                print(self.pop())

    def interpret_file(self):
        """Interprets self.path line by line."""
        try:
            with open(self.path, "r") as file:
                self.interpret(file)
        except OSError:
            raise GenericException("'{}' could not be opened", self.path, diagnosis=False)
