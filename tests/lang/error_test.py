import io
import unittest
from contextlib import redirect_stdout

from minilisp.lang.error import (DuplicateDefinition, ErrorHandler, GenericException, LispSyntaxError, NoMatchingClause,
                                 TypeMismatch, UndefinedIdentifier)


class GenericExceptionTestCase(unittest.TestCase):

    def test_messages(self):
        cases = {
            "undefined identifier 'x'": UndefinedIdentifier("x"),
            "identifier 'x' exists": DuplicateDefinition("x"),
            "no True condition in 'cond'": NoMatchingClause(),
            "'+' expects numbers, got 'True'": TypeMismatch("'{}' expects numbers, got '{}'", ["+", "True"]),
            "unexpected ')'": LispSyntaxError("unexpected '{}'", ")"),
        }
        for expected, error in cases.items():
            self.assertEqual(expected, error.msg)
            self.assertEqual(expected, str(error))

    def test_span(self):
        error = UndefinedIdentifier("x", span=(3, 4))
        self.assertEqual((3, 4), error.span)
        self.assertIsNone(GenericException("oops").span)


class ErrorHandlerTestCase(unittest.TestCase):

    def throw_in(self, handler, error):
        output = io.StringIO()
        with redirect_stdout(output):
            with handler:
                raise error
        return output.getvalue()

    def test_plain(self):
        handler = ErrorHandler(plain=True)
        self.assertEqual("undefined identifier 'x'\n", self.throw_in(handler, UndefinedIdentifier("x")))

    def test_rich(self):
        handler = ErrorHandler()
        handler.register_file("test.lisp")
        handler.register_line("test.lisp", "(+ 1 x)", 4)

        output = self.throw_in(handler, UndefinedIdentifier("x", span=(5, 6)))
        self.assertIn("error: ", output)
        self.assertIn("undefined identifier", output)
        self.assertIn("File 'test.lisp', line 4", output)
        self.assertIn("^", output)
        self.assertEqual((None, None), handler.traceback["test.lisp"])  # reset after error

    def test_recursion_error(self):
        output = self.throw_in(ErrorHandler(plain=True), RecursionError())
        self.assertEqual("maximum recursion depth exceeded\n", output)

    def test_fatal(self):
        with self.assertRaises(SystemExit):
            self.throw_in(ErrorHandler(fatal=True, plain=True), NoMatchingClause())

    def test_internal_errors_propagate(self):
        with self.assertRaises(ZeroDivisionError):
            self.throw_in(ErrorHandler(plain=True), ZeroDivisionError("boom"))

    def test_no_error(self):
        output = io.StringIO()
        with redirect_stdout(output):
            with ErrorHandler():
                pass
        self.assertEqual("", output.getvalue())

    def test_diagnose(self):
        diagnosis = ErrorHandler.diagnose("(+ 1 x)", (5, 6))
        line, caret = diagnosis.split("\n")
        self.assertIn("x", line)
        self.assertIn("^", caret)
        self.assertTrue(caret.startswith("  " + " " * 5))

    def test_warn(self):
        handler = ErrorHandler()
        handler.register_file("<stdin>")
        handler.register_line("<stdin>", "(f define)", 1)
        output = io.StringIO()
        with redirect_stdout(output):
            handler.warn("'{}' is treated as an identifier", "define", span=(3, 9))
        self.assertIn("warning: ", output.getvalue())
        self.assertIn("<stdin>:1:3: ", output.getvalue())

        output = io.StringIO()
        with redirect_stdout(output):
            ErrorHandler(plain=True).warn("silent")
        self.assertEqual("", output.getvalue())


if __name__ == '__main__':
    unittest.main()
