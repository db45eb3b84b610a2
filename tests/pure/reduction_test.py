import math
import unittest

from symbolica.lang.error import NonConvergenceError
from symbolica.pure.lexical import read
from symbolica.pure.reduction import OperationRule, Rule, RuleTable, SubstitutionRule, reduce
from symbolica.pure.value import Abstraction, Constant, Symbol, apply


def normal_form(source, rules=None):
    return reduce(read(source), rules)[-1]


class ReduceTestCase(unittest.TestCase):

    def test_constants_are_normal(self):
        should_pass = ["0", "42", "3.25", "1e3", "-5", "-.5", "Infinity", "-Infinity"]
        for case in should_pass:
            trace = reduce(read(case))
            self.assertEqual([Constant(float(case))], trace, case)

        trace = reduce(read("NaN"))
        self.assertEqual(1, len(trace))
        self.assertTrue(trace[0].is_nan)

    def test_constant_folding(self):
        cases = {
            "2+3": 5,
            "2*3+4": 10,
            "(2+3)*4": 20,
            "1-2-3": -4,
            "8/2/2": 2,
            "- 5": -5,
        }
        for case, expected in cases.items():
            self.assertEqual(Constant(expected), normal_form(case), case)

    def test_trace(self):
        self.assertEqual([read("2+3"), Constant(5)], reduce(read("2+3")))
        self.assertEqual([read("2*3+4"), read("6+4"), Constant(10)], reduce(read("2*3+4")))
        self.assertEqual([read("- 5"), Constant(-5)], reduce(read("- 5")))
        self.assertEqual([read("1-2-3"), Constant(-4)], reduce(read("1-2-3")))

    def test_builtin_constants(self):
        self.assertEqual(Constant(math.pi), normal_form("pi"))
        self.assertEqual(Constant(math.e), normal_form("e"))
        self.assertEqual(Constant(2 * math.pi), normal_form("2 * pi"))

    def test_identities(self):
        x = Symbol("x")
        cases = {
            "x + 0": x,
            "0 + x": x,
            "x - 0": x,
            "0 - x": apply("$neg", x),
            "x - x": Constant(0),
            "(x + y) - (x + y)": Constant(0),
            "x * 0": Constant(0),
            "0 * x": Constant(0),
            "1 * x": x,
            "x * 1": x,
            "-1 * x": apply("$neg", x),
            "x * -1": apply("$neg", x),
            "0 / x": Constant(0),
            "x / 1": x,
            "x / -1": apply("$neg", x),
            "- -x": x,
            "-(-(x))": x,
            "x * (3 - 2)": x,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, normal_form(case), case)

    def test_no_cancellation(self):
        should_stay = ["a / a", "a * a", "x + y", "x % 2", "7 % 2", "f(x)", "-x"]
        for case in should_stay:
            self.assertEqual([read(case)], reduce(read(case)), case)

    def test_ieee_division(self):
        self.assertEqual(Constant(math.inf), normal_form("1 / 0"))
        self.assertEqual(Constant(-math.inf), normal_form("-1 / 0"))
        self.assertTrue(normal_form("0 / 0").is_nan)
        self.assertTrue(normal_form("Infinity - Infinity").is_nan)

    def test_reduces_inside_other_applications(self):
        self.assertEqual(apply("$vec", Constant(2), Constant(6)), normal_form("[1 + 1, 2 * 3]"))
        self.assertEqual(apply("f", Constant(5), Symbol("y")), normal_form("f(2 + 3, y * 1)"))

    def test_arity_mismatch_is_left_alone(self):
        for case in ["$neg(1, 2)", "$add(1)", "$div(1, 2, 3)"]:
            self.assertEqual([read(case)], reduce(read(case)), case)

    def test_max_steps(self):
        self.assertEqual(Constant(5), reduce(read("2+3"), max_steps=1)[-1])

        with self.assertRaises(NonConvergenceError) as context:
            reduce(read("2*3+4"), max_steps=1)
        self.assertEqual([read("2*3+4"), read("6+4")], context.exception.trace)

    def test_self_reference_does_not_converge(self):
        rules = RuleTable.default()
        with self.assertRaises(NonConvergenceError) as context:
            reduce(read("x = x + 1"), rules, max_steps=20)
        self.assertEqual(21, len(context.exception.trace))


class BindingTestCase(unittest.TestCase):

    def setUp(self):
        self.rules = RuleTable.default()
        self.builtins = len(self.rules)

    def test_binding_persists(self):
        reduce(read("x = 5"), self.rules)
        self.assertEqual(Constant(6), normal_form("x + 1", self.rules))
        self.assertEqual(self.builtins + 1, len(self.rules))

    def test_assignment_trace(self):
        trace = reduce(read("x = 5"), self.rules)
        self.assertEqual([read("x = 5"), apply("$let", Constant(5), Constant(5))], trace)

    def test_assignment_binds_normal_form(self):
        trace = reduce(read("x = 2 * 3"), self.rules)
        self.assertEqual(apply("$let", Constant(6), Constant(6)), trace[-1])
        self.assertEqual(Constant(6), self.rules.lookup("x"))
        self.assertEqual(self.builtins + 1, len(self.rules))
        self.assertEqual(Constant(7), normal_form("x + 1", self.rules))

    def test_rebinding_keeps_priority(self):
        reduce(read("x = 5"), self.rules)
        reduce(read("y = 2"), self.rules)
        y_rule = self.rules[self.builtins + 1]

        reduce(read("x = 7"), self.rules)

        self.assertEqual(self.builtins + 2, len(self.rules))
        self.assertEqual("x", self.rules[self.builtins].name)
        self.assertEqual(Constant(7), self.rules[self.builtins].replacement)
        self.assertIs(y_rule, self.rules[self.builtins + 1])

        self.assertEqual(Constant(7), normal_form("x", self.rules))
        self.assertEqual(Constant(2), normal_form("y", self.rules))
        self.assertEqual(Constant(9), normal_form("x + y", self.rules))

    def test_binding_is_by_value(self):
        reduce(read("x = 5"), self.rules)
        reduce(read("y = x"), self.rules)
        reduce(read("x = 7"), self.rules)
        self.assertEqual(Constant(5), normal_form("y", self.rules))

    def test_builtin_constants_shadow_assignment(self):
        trace = reduce(read("pi = 3"), self.rules)
        self.assertEqual(apply("$let", Constant(math.pi), Constant(3)), trace[-1])
        self.assertEqual(self.builtins, len(self.rules))
        self.assertEqual(Constant(math.pi), normal_form("pi", self.rules))

    def test_tables_are_isolated(self):
        reduce(read("x = 5"), self.rules)
        self.assertEqual(Symbol("x"), normal_form("x", RuleTable.default()))
        self.assertEqual(Symbol("x"), normal_form("x"))

    def test_first_rule(self):
        self.assertIs(self.rules[0], self.rules.first_rule(Symbol("pi")))
        self.assertIs(self.rules[4], self.rules.first_rule(read("1 + 1")))
        self.assertIsNone(self.rules.first_rule(Symbol("x")))

    def test_protected(self):
        self.assertTrue(self.rules.protected("pi"))
        self.assertTrue(self.rules.protected("e"))
        reduce(read("x = 5"), self.rules)
        self.assertFalse(self.rules.protected("x"))
        self.assertFalse(self.rules.protected("y"))

    def test_copy_and_restore(self):
        snapshot = self.rules.copy()
        reduce(read("x = 5"), self.rules)
        self.rules.restore(snapshot)
        self.assertEqual(self.builtins, len(self.rules))
        self.assertIsNone(self.rules.lookup("x"))


class RuleTestCase(unittest.TestCase):

    def test_rule_is_abstract(self):
        self.assertRaises(TypeError, Rule)

        class Incomplete(Rule):
            kind = "operation"

        self.assertRaises(TypeError, Incomplete)

    def test_substitution(self):
        rule = SubstitutionRule("x", Constant(1))
        self.assertEqual(Constant(1), rule.apply(Symbol("x")))
        self.assertEqual(Symbol("y"), rule.apply(Symbol("y")))
        self.assertEqual(apply("f", Constant(1), apply("g", Constant(1))), rule.apply(read("f(x, g(x))")))
        self.assertEqual(apply(Constant(1), Symbol("y")), rule.apply(apply("x", Symbol("y"))))

    def test_substitution_skips_abstractions(self):
        x = Symbol("x")
        abstraction = Abstraction([x], apply("$add", x, Constant(1)))
        self.assertIs(abstraction, SubstitutionRule("x", Constant(1)).apply(abstraction))

    def test_operation_rewrites_operands_first(self):
        seen = []

        def handler(value, table):
            seen.append(value)
            return value

        rule = OperationRule("$add", handler, 2)
        rule.apply(read("(1 + 2) + (3 + 4)"), RuleTable())
        self.assertEqual([read("1 + 2"), read("3 + 4"), read("(1 + 2) + (3 + 4)")], seen)

    def test_custom_operation(self):
        def mod(value, table):
            left, right = value.args
            if isinstance(left, Constant) and isinstance(right, Constant):
                return Constant(math.fmod(left.value, right.value))
            return value

        rules = RuleTable.default()
        rules.rules.append(OperationRule("$mod", mod, 2))
        self.assertEqual(Constant(1), normal_form("7 % (1 + 2)", rules))


if __name__ == '__main__':
    unittest.main()
