"""Runs the symbolica interpreter on a file, or in command-line mode. Also uses error handling context manager. Called
from the symbolica executable script.
"""

import argparse
import sys

from symbolica.lang.error import ErrorHandler
from symbolica.lang.session import Session
from symbolica.lang.shell import Shell


def positive(arg):
    """argparse type for --max-steps."""
    num = int(arg)
    if num <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive number of steps, got {arg}")
    return num


def main(argv=None):
    """Runs symbolica interpreter. Called from symbolica executable script."""
    parser = argparse.ArgumentParser(prog="symbolica", description="symbolic arithmetic by term rewriting")
    parser.add_argument("file", help="file to evaluate, one statement per line (if empty, goes to command-line mode)",
                        nargs="?")
    parser.add_argument("--max-steps", type=positive, default=None,
                        help="give up on a statement after this many rewrites (default: no limit)")
    args = parser.parse_args(argv)

    with ErrorHandler() as error_handler:
        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, max_steps=args.max_steps)
            sess.run()
        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, max_steps=args.max_steps)).cmdloop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
