"""Tokenizer and recursive-descent parser for symbolica's infix surface syntax.

One input is exactly one statement. Formally, with all binary operators associating by left:

```
<statement>  ::= <symbol> "=" <expression>               ; assignment, recognized by two-token lookahead
               | <expression>
<expression> ::= <term> (("+" | "-") <term>)*
<term>       ::= <factor> (("*" | "/" | "%") <factor>)*
<factor>     ::= "-" <factor>                            ; unary minus, binds tighter than any binary operator
               | "(" <expression> ")"
               | "[" <expression> ("," <expression>)* "]"  ; vector
               | <constant>
               | <symbol> ["(" <expression> ("," <expression>)* ")"]  ; variable or function call

<comment>    ::= "--" <char>*                            ; to end of line, discarded by the parser
```

Token patterns are tried in a fixed order (comment, whitespace, constant, operator, symbol) and the first match wins,
not the longest.
"""

import re
from enum import Enum

from symbolica.lang.error import LexError, ParseError
from symbolica.lang.numerical import number
from symbolica.pure.value import Application, Constant, Symbol


class TokenType(Enum):
    CONSTANT = "constant"
    SYMBOL = "symbol"
    OPERATOR = "operator"
    WHITESPACE = "whitespace"
    COMMENT = "comment"


class Token:
    """A lexeme: its type, the matched text (image) and its starting offset in the source."""

    def __init__(self, type, image, position):
        self.type = type
        self.image = image
        self.position = position

    @property
    def significant(self):
        """Whether or not the parser gets to see this token."""
        return self.type not in (TokenType.WHITESPACE, TokenType.COMMENT)

    def __repr__(self):
        return f"Token({self.type.name}, {self.image!r}, {self.position})"

    def __eq__(self, other):
        return (isinstance(other, Token) and self.type is other.type and self.image == other.image
                and self.position == other.position)


NUMBER = r"Infinity|(?:\d*\.\d+|\d+)(?:[Ee][+-]?\d+)?"

PATTERNS = [
    (TokenType.COMMENT, re.compile(r"--.*")),
    (TokenType.WHITESPACE, re.compile(r"\s+")),
    (TokenType.CONSTANT, re.compile(rf"NaN|-?(?:{NUMBER})")),
    (TokenType.OPERATOR, re.compile(r"->|=|\+|-|\*|/|\(|\)|\[|\]|\^|%|,")),
    (TokenType.SYMBOL, re.compile(r"[A-Za-z_$][$\w]*", re.ASCII)),
]

UNSIGNED = re.compile(rf"NaN|{NUMBER}")

CLOSERS = (")", "]")  # operators that end an operand


def _expects_operand(previous):
    """Whether or not a constant may carry its own sign after previous, the last significant token (or None)."""
    return previous is None or (previous.type is TokenType.OPERATOR and previous.image not in CLOSERS)


def tokenize(source):
    """Returns the list of all tokens in source, whitespace and comments included. Raises LexError if some part of
    source matches no pattern.

    A "-" directly followed by a number is part of the constant only where an operand is expected (at the start, or
    after an operator that does not close a group): "-5" is one constant, but "1-2" is 1, "-", 2.
    """
    tokens = []
    previous = None
    position = 0

    while position < len(source):
        for type, pattern in PATTERNS:
            if type is TokenType.CONSTANT and not _expects_operand(previous):
                pattern = UNSIGNED

            result = pattern.match(source, position)
            if result:
                token = Token(type, result.group(0), position)
                tokens.append(token)
                if token.significant:
                    previous = token
                position = result.end()
                break
        else:
            raise LexError(source, position)

    return tokens


def significant(tokens):
    """Drops whitespace and comments."""
    return [token for token in tokens if token.significant]


class Parser:
    """Recursive-descent parser over a list of tokens. Each parse_* method consumes tokens starting at self.position
    and returns the Value it recognized.
    """
    OPERATORS = {
        "=": "$let",
        "+": "$add",
        "-": "$sub",
        "*": "$mul",
        "/": "$div",
        "%": "$mod",
        "[": "$vec",
    }
    NEGATE = "$neg"

    def __init__(self, tokens):
        self.all_tokens = list(tokens)
        self.tokens = significant(self.all_tokens)
        self.position = 0

    def error(self, msg="syntax error in '{}'"):
        return ParseError(msg, self.all_tokens, self.position)

    def match(self, image=None, type=None, offset=0):
        """Whether or not the token offset places ahead has the given image and type."""
        at = self.position + offset
        if at >= len(self.tokens):
            return False
        token = self.tokens[at]
        if type is not None and token.type is not type:
            return False
        if image is not None and token.image != image:
            return False
        return True

    def advance(self):
        token = self.tokens[self.position]
        self.position += 1
        return token

    def expect(self, image):
        if not self.match(image):
            raise self.error(f"expected '{image}' in '{{}}'")
        return self.advance()

    def binary(self, operator, left, right):
        return Application(Symbol(Parser.OPERATORS[operator]), [left, right])

    def parse(self):
        """Parses exactly one statement. Raises ParseError if tokens remain afterwards."""
        statement = self.parse_statement()
        if self.position < len(self.tokens):
            raise self.error("unexpected trailing input in '{}'")
        return statement

    def parse_statement(self):
        if self.match("=", offset=1):
            name = self.parse_symbol()
            operator = self.advance().image
            return self.binary(operator, name, self.parse_expression())
        return self.parse_expression()

    def parse_expression(self):
        term = self.parse_term()
        while self.match("+") or self.match("-"):
            operator = self.advance().image
            term = self.binary(operator, term, self.parse_term())
        return term

    def parse_term(self):
        factor = self.parse_factor()
        while self.match("*") or self.match("/") or self.match("%"):
            operator = self.advance().image
            factor = self.binary(operator, factor, self.parse_factor())
        return factor

    def parse_factor(self):
        if self.match("-"):
            self.advance()
            return Application(Symbol(Parser.NEGATE), [self.parse_factor()])

        if self.match("("):
            self.advance()
            expression = self.parse_expression()
            self.expect(")")
            return expression

        if self.match("["):
            operator = self.advance().image
            args = self.parse_arguments("]")
            return Application(Symbol(Parser.OPERATORS[operator]), args)

        if self.match(type=TokenType.CONSTANT):
            return Constant(number(self.advance().image))

        if self.match(type=TokenType.SYMBOL):
            symbol = self.parse_symbol()
            if self.match("("):
                self.advance()
                return Application(symbol, self.parse_arguments(")"))
            return symbol

        if self.position >= len(self.tokens):
            raise self.error("unexpected end of input in '{}'")
        raise self.error()

    def parse_arguments(self, closer):
        """Comma-separated expressions up to and including closer."""
        args = [self.parse_expression()]
        while self.match(","):
            self.advance()
            args.append(self.parse_expression())
        self.expect(closer)
        return args

    def parse_symbol(self):
        if not self.match(type=TokenType.SYMBOL):
            raise self.error("expected a symbol in '{}'")
        return Symbol(self.advance().image)


def parse(tokens):
    """Parses a token list (whitespace and comments are skipped) into a single Value."""
    return Parser(tokens).parse()


def read(source):
    """Tokenizes and parses source."""
    return parse(tokenize(source))
