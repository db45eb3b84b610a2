"""Symbolic arithmetic interpreter.

Basic program flow:
    1. Lexer: splits a line into tokens (see symbolica/pure/lexical.py)
    2. Parser: recursive descent over the tokens produces a tree of values (see symbolica/pure/value.py)
    3. Reduction: an ordered table of rewrite rules is applied until the tree stops changing, and every intermediate
       tree is kept as the trace (see symbolica/pure/reduction.py)

The `lang` directory wraps this core with a session (persistent bindings), a printer, a shell and error reporting.
"""
