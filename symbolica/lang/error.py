"""Error handling for the symbolica language. Each stage of evaluation has its own error: LexError carries the offset
at which no token pattern matched, ParseError the failing token and the token list, and NonConvergenceError the partial
trace of a reduction that outgrew --max-steps. All of them are GenericExceptions, which know the offending source line
and the span of it to underline. Any other exception that reaches ErrorHandler is reported as an internal issue.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a symbolica error/warning. exprs[0] should be
    the offending expr; start and end delimit the part of it that caused the error.
    """

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False):
        """Parses args for GenericException or warning."""
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]

        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = exprs[0]
        self.end = end if end != -1 else len(self.expr)  # needed for error display

        self.start = start
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(msg.format(*exprs))


class LexError(GenericException):
    """Raised when no token pattern matches the remaining input."""

    def __init__(self, source, position):
        self.source = source
        self.position = position
        self.remaining = source[position:]

        super().__init__("unexpected input in '{}', starting here: '{}'", (source, self.remaining),
                         start=position, end=position + 1)


class ParseError(GenericException):
    """Syntax error: raised when an expected token is missing or when tokens remain after a complete statement. Keeps
    the whole token list and the failing position for diagnostics.
    """

    def __init__(self, msg, tokens, position):
        self.tokens = tokens
        self.position = position

        source = "".join(token.image for token in tokens)
        significant = [token for token in tokens if token.significant]
        if position < len(significant):
            start = significant[position].position
            end = start + len(significant[position].image)
        else:
            start, end = len(source.rstrip()), len(source.rstrip()) + 1

        super().__init__(msg, source, start=start, end=end)


class NonConvergenceError(GenericException):
    """Raised by reduce when a step ceiling was requested and the trace outgrew it."""

    def __init__(self, trace, max_steps):
        self.trace = trace
        self.max_steps = max_steps

        super().__init__(f"no normal form reached within {max_steps} steps", diagnosis=False)


class ErrorHandler:
    """Context manager that reports symbolica errors/warnings against the statement being evaluated. Tracks, per source
    file, the line currently being lexed, parsed or reduced, so that a report names the file, line and column.
    """
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True):
        self.fatal = fatal
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

    @staticmethod
    def diagnose(error, warning=False):
        """Returns offending part of error.expr highlighted and bolded."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        diagnosis = "  " + error.expr[:error.start]

        end = max(error.end, error.start + 1)
        diagnosis += colored(error.expr[error.start:end], color, attrs=["bold"])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += colored("^" + "~" * (end - error.start - 1), color, attrs=["bold"])

        return diagnosis

    def warn(self, *args, **kwargs):
        """Generates and prints runtime warning message based on args."""
        error = GenericException(*args, **kwargs)

        error_msg = ""
        for file, (line, line_num) in self.traceback.items():
            if line:
                error_msg += colored(f"{file}:{line_num}: ", attrs=["bold"])
                break
        error_msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.msg

        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error, warning=True))

    def throw(self, error):
        """Reports error against the lines in self.traceback (file: (line, line_num)). Lex and parse errors also name the
        column they start at; a reduction that hit the step limit reports how far it got.
        """
        positioned = error.expr and error.diagnosis and not error.internal

        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
            if line:
                column = f", column {error.start + 1}" if positioned else ""
                error_msg += f"  File '{file}', line {line_num}{column}:\n"
                error_msg += f"    {line}\n"
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error))
        elif isinstance(error, NonConvergenceError):
            print(f"  gave up after {len(error.trace) - 1} rewrites; raise --max-steps to go further")

        if self.fatal:
            sys.exit(1)
        self.traceback = {path: (None, None) for path in self.traceback}  # keep registered files

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded while evaluating", diagnosis=False))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
