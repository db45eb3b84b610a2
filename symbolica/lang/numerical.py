"""Numbers in symbolica are native 64-bit floats. Literals follow JavaScript's numeric syntax (NaN, signed Infinity,
decimals with an optional exponent) and are displayed the way JavaScript prints numbers, so that integral results
read as integers.
"""

import math
from decimal import Decimal

from symbolica.lang.error import GenericException


def number(image):
    """Returns the float denoted by constant token image."""
    try:
        return float(image)
    except ValueError:
        raise GenericException("'{}' is not a valid constant", image, internal=True)


def display_number(num):
    """Returns str of num formatted like JavaScript's Number.prototype.toString: the shortest digits that round-trip,
    positional from 1e-6 up to 1e21, exponential (with an unpadded, signed exponent) outside that range.
    """
    if math.isnan(num):
        return "NaN"
    if math.isinf(num):
        return "Infinity" if num > 0 else "-Infinity"
    if num.is_integer() and abs(num) < 1e21:
        return str(int(num))  # also turns -0.0 into "0"

    _, digits, exponent = Decimal(repr(abs(num))).normalize().as_tuple()
    digits = "".join(str(digit) for digit in digits)
    point = len(digits) + exponent  # position of the decimal point relative to the first digit

    if len(digits) <= point <= 21:
        text = digits + "0" * (point - len(digits))
    elif 0 < point <= 21:
        text = digits[:point] + "." + digits[point:]
    elif -6 < point <= 0:
        text = "0." + "0" * -point + digits
    else:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        text = f"{mantissa}e{'+' if point > 0 else '-'}{abs(point - 1)}"

    return "-" + text if num < 0 else text
