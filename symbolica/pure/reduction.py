"""Term rewriting for symbolica. A RuleTable is an ordered list of rules; reduce rewrites a value with the first rule
that changes it, restarting from the top of the table every time, until no rule changes it any more (normal form).

Two kinds of rule exist:
    1. SubstitutionRule: replaces every occurrence of a symbol by a fixed value (constants, `x = ...` bindings)
    2. OperationRule: rewrites applications of an operator tag (`$add`, ...) once their operands have been rewritten

Rule order is significant: an earlier rule shadows later ones, and a binding keeps the slot of its first definition.
"""

import math
from abc import ABC, abstractmethod

from symbolica.lang.error import NonConvergenceError
from symbolica.pure.value import Application, Constant, Symbol, apply, equivalent, is_constant


class Rule(ABC):
    """Superclass of both rule kinds. apply returns a rewritten value, or value itself when nothing matches."""
    kind = None

    @abstractmethod
    def apply(self, value, table):
        pass


class SubstitutionRule(Rule):
    """Binds name to replacement."""
    kind = "substitution"

    def __init__(self, name, replacement):
        self.name = name
        self.replacement = replacement

    def apply(self, value, table=None):
        if isinstance(value, Symbol) and value.name == self.name:
            return self.replacement
        # abstraction bodies are not substituted into: parameters would need capture-avoiding renaming first
        if isinstance(value, Application):
            abstraction = self.apply(value.abstraction)
            args = [self.apply(arg) for arg in value.args]
            return Application(abstraction, args)
        return value

    def __repr__(self):
        return f"SubstitutionRule({self.name!r}, {self.replacement!r})"


class OperationRule(Rule):
    """Runs handler(application, table) on applications of tag with arity arguments (any number if arity is None).
    Operands are rewritten by this same rule first.
    """
    kind = "operation"

    def __init__(self, tag, handler, arity=None):
        self.tag = tag
        self.handler = handler
        self.arity = arity

    def apply(self, value, table):
        if not isinstance(value, Application):
            return value

        abstraction = self.apply(value.abstraction, table)
        args = [self.apply(arg, table) for arg in value.args]
        value = Application(abstraction, args)

        if value.tag == self.tag and (self.arity is None or len(args) == self.arity):
            return self.handler(value, table)
        return value

    def __repr__(self):
        return f"OperationRule({self.tag!r}, {self.handler.__name__})"


class RuleTable:
    """Ordered, mutable sequence of rules: the evaluation environment of one session."""

    def __init__(self, rules=None):
        self.rules = list(rules) if rules else []

    @classmethod
    def default(cls):
        """New table seeded with the builtin constants and operations."""
        return cls(builtin_rules())

    def first_rule(self, value):
        """Returns the first rule that changes value, or None."""
        for rule in self.rules:
            if not equivalent(value, rule.apply(value, self)):
                return rule
        return None

    def bind(self, name, value):
        """Binds name to value. A name that is already bound is rebound in place, so it keeps its priority."""
        rule = SubstitutionRule(name, value)
        previous = self.first_rule(Symbol(name))
        if previous is None:
            self.rules.append(rule)
        else:
            self.rules[self.rules.index(previous)] = rule

    def protected(self, name):
        """Whether or not a rule ahead of $let rewrites name, in which case assignments to name can never bind."""
        symbol = Symbol(name)
        for rule in self.rules:
            if rule.kind == "operation" and rule.tag == "$let":
                return False
            if not equivalent(symbol, rule.apply(symbol, self)):
                return True
        return False

    def lookup(self, name):
        """Returns the value bound to name by the first substitution rule for it, or None."""
        for rule in self.rules:
            if rule.kind == "substitution" and rule.name == name:
                return rule.replacement
        return None

    def copy(self):
        return RuleTable(self.rules)

    def restore(self, snapshot):
        """Reverts this table to the rules of snapshot (a copy taken earlier)."""
        self.rules[:] = snapshot.rules

    def __iter__(self):
        return iter(self.rules)  # live: rules bound by $let during a scan are visited by that same scan

    def __len__(self):
        return len(self.rules)

    def __getitem__(self, idx):
        return self.rules[idx]

    def __repr__(self):
        return f"RuleTable({self.rules!r})"


def reduce(value, rules=None, max_steps=None):
    """Rewrites value until no rule in rules changes it and returns every value visited, value first and normal form
    last. Without max_steps this does not return if the rules rewrite in a cycle; with it, NonConvergenceError is
    raised once more than max_steps rewrites have happened.
    """
    if rules is None:
        rules = RuleTable.default()

    trace = [value]
    changed = True
    while changed:
        changed = False
        for rule in rules:
            reduced = rule.apply(value, rules)
            if not equivalent(value, reduced):
                if max_steps is not None and len(trace) > max_steps:
                    raise NonConvergenceError(trace, max_steps)
                value = reduced
                trace.append(value)
                changed = True
                break  # restart from the first rule

    return trace


# builtin operations: each gets the application with rewritten operands and returns it unchanged if nothing applies

def let(value, table):
    name, definition = value.args
    if isinstance(name, Symbol):
        table.bind(name.name, definition)
    return value


def neg(value, table):
    first, = value.args
    if isinstance(first, Constant):
        return Constant(-first.value)
    if isinstance(first, Application) and first.tag == "$neg":
        return first.args[0]
    return value


def add(value, table):
    left, right = value.args
    if is_constant(left) and is_constant(right):
        return Constant(left.value + right.value)
    if is_constant(left, 0):
        return right
    if is_constant(right, 0):
        return left
    return value


def sub(value, table):
    left, right = value.args
    if is_constant(left) and is_constant(right):
        return Constant(left.value - right.value)
    if is_constant(left, 0):
        return apply("$neg", right)
    if is_constant(right, 0):
        return left
    if equivalent(left, right):
        return Constant(0)
    return value


def mul(value, table):
    left, right = value.args
    if is_constant(left) and is_constant(right):
        return Constant(left.value * right.value)
    if is_constant(left, 0) or is_constant(right, 0):
        return Constant(0)
    if is_constant(left, 1):
        return right
    if is_constant(right, 1):
        return left
    if is_constant(left, -1):
        return apply("$neg", right)
    if is_constant(right, -1):
        return apply("$neg", left)
    return value


def divide(left, right):
    """IEEE 754 division: dividing by zero gives a signed infinity or NaN instead of raising."""
    if right != 0:
        return left / right
    if left == 0 or math.isnan(left):
        return math.nan
    return math.copysign(math.inf, left) * math.copysign(1, right)


def div(value, table):
    left, right = value.args
    if is_constant(left) and is_constant(right):
        return Constant(divide(left.value, right.value))
    if is_constant(left, 0):
        return Constant(0)
    if is_constant(right, 1):
        return left
    if is_constant(right, -1):
        return apply("$neg", left)
    return value


def builtin_rules():
    """Builtin rules, in priority order. A function so that every table gets its own list."""
    return [
        SubstitutionRule("pi", Constant(math.pi)),
        SubstitutionRule("e", Constant(math.e)),
        OperationRule("$let", let, 2),
        OperationRule("$neg", neg, 1),
        OperationRule("$add", add, 2),
        OperationRule("$sub", sub, 2),
        OperationRule("$mul", mul, 2),
        OperationRule("$div", div, 2),
    ]
