"""Session control for symbolica. A Session owns one RuleTable, so bindings made by one statement are visible to every
later statement of the same session, and evaluates statements either from a file or from the command line.
"""

from symbolica.lang.error import GenericException
from symbolica.lang.printer import display
from symbolica.pure.lexical import parse, significant, tokenize
from symbolica.pure.reduction import RuleTable, reduce
from symbolica.pure.value import Application, Symbol


class Session:
    """Governs a symbolica session: one rule table, a queue of parsed statements and the traces they reduced to."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path=SH_FILE, cmd_line=True, max_steps=None):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path            # used for error messages
        self.cmd_line = cmd_line    # whether or not in command-line mode
        self.max_steps = max_steps  # reduction step ceiling, None for unbounded

        self.rules = RuleTable.default()
        self.to_exec = {}   # dict of line num: (line, parsed statement) to execute
        self.results = []   # list of traces, in execution order

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r") as file:
                    lines = file.readlines()
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            for line_num, line in enumerate(lines):
                self.add(Session.preprocess_line(line), line_num + 1)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename", diagnosis=False)

    @staticmethod
    def preprocess_line(line):
        """Removes trailing whitespace, including the newline."""
        return line.rstrip()

    @staticmethod
    def assigns(stmt):
        """Whether or not stmt is an assignment to a symbol."""
        return isinstance(stmt, Application) and stmt.tag == "$let" and isinstance(stmt.args[0], Symbol)

    def add(self, expr, line_num):
        """Parses expr and queues it for run. Blank and comment-only lines are skipped. Returns the parsed statement
        (None if skipped).
        """
        self.error_handler.register_line(self.path, expr, line_num)  # in case error is raised

        tokens = tokenize(expr)
        if not significant(tokens):
            self.error_handler.remove_line(self.path)
            return None

        stmt = parse(tokens)
        self.to_exec[line_num] = (expr, stmt)

        self.error_handler.remove_line(self.path)  # error was not raised
        return stmt

    def run(self):
        """Reduces queued statements in order, appending their traces to self.results. In file mode each trace is also
        printed as soon as it is complete. A statement that fails leaves the rule table as it was before it started.
        """
        for line_num, (expr, stmt) in list(self.to_exec.items()):
            self.error_handler.register_line(self.path, expr, line_num)
            del self.to_exec[line_num]

            if Session.assigns(stmt) and self.rules.protected(stmt.args[0].name):
                name = stmt.args[0].name
                start = expr.find(name)
                self.error_handler.warn("'{}' binds nothing: '{}' is a builtin constant", (expr, name),
                                        start=start, end=start + len(name))

            snapshot = self.rules.copy()
            try:
                trace = reduce(stmt, self.rules, self.max_steps)
            except BaseException:
                self.rules.restore(snapshot)
                raise

            self.results.append(trace)
            if not self.cmd_line:
                for value in trace:
                    print(display(value))
            self.error_handler.remove_line(self.path)

    def evaluate(self, expr, line_num=0):
        """Adds and runs a single line. Returns its trace, or None for a blank line."""
        if self.add(expr, line_num) is None:
            return None
        self.run()
        return self.pop()

    def pop(self):
        """Removes and returns the most recent trace."""
        return self.results.pop()

    def lookup(self, name):
        """Value currently bound to name in this session, or None."""
        return self.rules.lookup(name)
