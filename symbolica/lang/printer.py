"""Renders values back to symbolica surface syntax. Builtin operators print infix with explicit parentheses, every
other application prints as a function call.
"""

from symbolica.lang.error import GenericException
from symbolica.lang.numerical import display_number
from symbolica.pure.value import Abstraction, Application, Constant, Symbol

INFIX = {
    "$add": "+",
    "$sub": "-",
    "$mul": "*",
    "$div": "/",
    "$mod": "%",
}


def display(value):
    """Returns value as a str."""
    if isinstance(value, Constant):
        return display_number(value.value)

    if isinstance(value, Symbol):
        return value.name

    if isinstance(value, Application):
        tag, args = value.tag, value.args

        if tag == "$let" and len(args) == 2:
            return f"{display(args[0])} = {display(args[1])}"
        if tag == "$neg" and len(args) == 1:
            return f"-{display(args[0])}"
        if tag in INFIX and len(args) == 2:
            return f"({display(args[0])} {INFIX[tag]} {display(args[1])})"

        return f"{display(value.abstraction)}({', '.join(display(arg) for arg in args)})"

    if isinstance(value, Abstraction):
        params = ", ".join(display(param) for param in value.parameters)
        return f"({params}) -> {display(value.body)}"

    raise GenericException("cannot display '{}'", repr(value), internal=True)
