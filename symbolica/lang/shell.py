"""Handles interactive/command-line mode for the symbolica interpreter. Uses cmd as backend."""

import cmd

from symbolica.lang.printer import display


class Shell(cmd.Cmd):
    """Symbolica interpreter shell."""
    intro = "Welcome to the Symbolica repl!\nType 'help' for more information."
    prompt = "> "

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self.line_num = 0

    def default(self, line):
        """Evaluates one statement and prints every step of its reduction."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            trace = self.sess.evaluate(self.sess.preprocess_line(line), self.line_num)

            for value in trace or []:
                print(display(value), file=self.stdout)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the Symbolica interpreter!\n\n"
              "Type an arithmetic expression such as '(2 + 3) * x' and every step of its\n"
              "simplification is printed, down to a normal form. Constants are folded and\n"
              "identities like 'x + 0' or 'a - a' are eliminated.\n\n"
              "Bind a variable with 'x = 5'; later statements in the session use the binding.\n"
              "'pi' and 'e' are predefined. Comments start with '--'. Type 'exit' to quit.",
              file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
