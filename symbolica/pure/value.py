"""Values are the syntax tree and the runtime representation of symbolica at the same time. Formally,

```
<value> ::= <constant>                          ; 64-bit float, may be NaN or +-Infinity
          | <symbol>                            ; identifier, compared by name
          | <value> "(" <value> ("," <value>)* ")"  ; "application": operator position + non-empty argument list
          | "(" <symbol>* ")" "->" <value>      ; "abstraction": reserved, never built or reduced by any rule
```

Operators are applications whose operator position is a symbol tag such as `$add`. Values are immutable: rewriting a
tree always builds new nodes.
"""

import math
from abc import ABC, abstractmethod


class Value(ABC):
    """Superclass of the four value variants. Equality is structural equivalence (see equivalent)."""

    @abstractmethod
    def _key(self):
        """Hashable structural key, consistent with equivalent."""

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return equivalent(self, other)

    def __hash__(self):
        return hash(self._key())


class Constant(Value):
    """64-bit floating point number."""
    __slots__ = ("value",)

    def __init__(self, value):
        self.value = float(value)

    @property
    def is_nan(self):
        return math.isnan(self.value)

    def _key(self):
        return Constant, "nan" if self.is_nan else self.value

    def __repr__(self):
        return f"Constant({self.value!r})"


class Symbol(Value):
    """Named symbol: a variable, a function name or an operator tag."""
    __slots__ = ("name",)

    def __init__(self, name):
        if not isinstance(name, str) or not name:
            raise ValueError(f"symbol name must be a non-empty str, got {name!r}")
        self.name = name

    def _key(self):
        return Symbol, self.name

    def __repr__(self):
        return f"Symbol({self.name!r})"


class Application(Value):
    """Operator (or function) position applied to an ordered, non-empty argument list."""
    __slots__ = ("abstraction", "args")

    def __init__(self, abstraction, args):
        args = tuple(args)
        if not args:
            raise ValueError("an application needs at least one argument")
        self.abstraction = abstraction
        self.args = args

    @property
    def tag(self):
        """Name of the operator position if it is a Symbol, else None."""
        return self.abstraction.name if isinstance(self.abstraction, Symbol) else None

    def _key(self):
        return Application, self.abstraction._key(), tuple(arg._key() for arg in self.args)

    def __repr__(self):
        return f"Application({self.abstraction!r}, {list(self.args)!r})"


class Abstraction(Value):
    """Parameter list plus body. Reserved: nothing constructs, matches or reduces abstractions yet."""
    __slots__ = ("parameters", "body")

    def __init__(self, parameters, body):
        self.parameters = tuple(parameters)
        self.body = body

    def _key(self):
        return Abstraction, tuple(param._key() for param in self.parameters), self.body._key()

    def __repr__(self):
        return f"Abstraction({list(self.parameters)!r}, {self.body!r})"


def equivalent(x, y):
    """Whether or not x and y are structurally equivalent. Constants compare by value, except that NaN is equivalent
    to NaN: otherwise a NaN would never reach a normal form, since every pass over it would look like a rewrite.
    """
    if x is y:
        return True
    if isinstance(x, Constant) and isinstance(y, Constant):
        return x.value == y.value or (x.is_nan and y.is_nan)
    if isinstance(x, Symbol) and isinstance(y, Symbol):
        return x.name == y.name
    if isinstance(x, Application) and isinstance(y, Application):
        return (len(x.args) == len(y.args)
                and equivalent(x.abstraction, y.abstraction)
                and all(equivalent(a, b) for a, b in zip(x.args, y.args)))
    if isinstance(x, Abstraction) and isinstance(y, Abstraction):
        # TODO two abstractions should also be equivalent up to renaming of their parameters (alpha equivalence)
        return (len(x.parameters) == len(y.parameters)
                and all(equivalent(a, b) for a, b in zip(x.parameters, y.parameters))
                and equivalent(x.body, y.body))
    return False


def apply(abstraction, *args):
    """Builds an Application. A str abstraction is taken to be a Symbol name."""
    if isinstance(abstraction, str):
        abstraction = Symbol(abstraction)
    return Application(abstraction, args)


def is_constant(value, num=None):
    """Whether or not value is a Constant (equal to num, if given)."""
    return isinstance(value, Constant) and (num is None or value.value == num)
