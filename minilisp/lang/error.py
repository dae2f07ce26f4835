"""Error handling for minilisp. Only GenericExceptions should be encountered while evaluating a line: if another type
of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Every error aborts the current line only. ErrorHandler reports it and the session moves on to the next line.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a minilisp error/warning."""

    def __init__(self, msg, exprs=None, span=None, diagnosis=True, internal=False):
        """Parses args for GenericException or warning. span is (start, end) in the offending line."""
        if exprs is None:
            exprs = []
        if isinstance(exprs, str):
            exprs = [exprs]

        self.template = msg
        self.exprs = list(exprs)
        self.msg = msg.format(*self.exprs)
        self.span = span

        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.msg)

    def highlighted(self):
        """Returns self.msg with expr snippets bolded."""
        return self.template.format(*(colored(expr, attrs=["bold"]) for expr in self.exprs))


class LispSyntaxError(GenericException):
    """Unbalanced brackets, malformed list shape or malformed special form."""


class UndefinedIdentifier(GenericException):

    def __init__(self, name, span=None):
        super().__init__("undefined identifier '{}'", name, span=span)


class DuplicateDefinition(GenericException):

    def __init__(self, name, span=None):
        super().__init__("identifier '{}' exists", name, span=span)


class TooFewArguments(GenericException):

    def __init__(self, name, span=None):
        super().__init__("too few arguments passed to '{}'", name, span=span)


class ArityError(TooFewArguments):
    """Built-in operator applied to fewer than two operands."""


class TypeMismatch(GenericException):
    """Operator or special form applied to a value of the wrong kind."""


class DivisionByZero(GenericException):

    def __init__(self, span=None):
        super().__init__("division by zero", span=span)


class NoMatchingClause(GenericException):

    def __init__(self, span=None):
        super().__init__("no {} condition in 'cond'", "True", span=span)


class UnboundParameter(GenericException):

    def __init__(self, name, span=None):
        super().__init__("parameter '{}' has no value", name, span=span)


class ErrorHandler:
    """Context manager that reports minilisp errors/warnings instead of letting them propagate."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=False, plain=False):
        self.fatal = fatal
        self.plain = plain    # print bare messages in place of values
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    def _current(self):
        """Returns (file, line, line_num) of the most recently registered line, or Nones."""
        for file, (line, line_num) in reversed(list(self.traceback.items())):
            if line is not None:
                return file, line, line_num
        return None, None, None

    @staticmethod
    def diagnose(line, span, warning=False):
        """Returns line with the span (start, end) highlighted and underlined."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR
        start, end = span
        end = max(end, start + 1)

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], color, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), color, attrs=["bold"])

        return diagnosis

    def warn(self, *args, **kwargs):
        """Generates and prints warning message based on args. Silent in plain mode."""
        if self.plain:
            return
        error = GenericException(*args, **kwargs)
        file, line, line_num = self._current()

        error_msg = ""
        if line is not None:
            col = error.span[0] if error.span else 0
            error_msg += colored(f"{file}:{line_num}:{col}: ", attrs=["bold"])
        error_msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.highlighted()
        print(error_msg)

        if line is not None and error.span and error.diagnosis:
            print(ErrorHandler.diagnose(line, error.span, warning=True))

    def throw(self, error):
        """Prints error using self.traceback, which maps file: (line, line_num) to where the error originated."""
        if self.plain:
            print(error.msg)
        else:
            error_msg = ""
            lines = 0
            for file, (line, line_num) in self.traceback.items():  # dicts are insertion-ordered
                if line:
                    error_msg += f"  File '{file}', line {line_num}:\n"
                    error_msg += f"    {line}\n"
                    lines += 1

            if lines > 1:
                error_msg = "Traceback:\n" + error_msg

            if error.internal:
                error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

            error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.highlighted()
            print(error_msg)

            __, line, __ = self._current()
            if not error.internal and line and error.span and error.diagnosis:
                print(ErrorHandler.diagnose(line, error.span))

        if self.fatal:
            sys.exit(1)
        for file in self.traceback:  # if error occurred, reset traceback (no need if error is fatal)
            self.remove_line(file)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
