"""IEEE-754 arithmetic helpers.

Python raises on float division by zero and on some ``math.pow`` domains,
where chart consumers expect Infinity/NaN to flow through unchanged. These
helpers return what IEEE-754 (and JavaScript's ``Math.pow``) would, so
degenerate inputs surface as non-finite values instead of exceptions.
"""

import math


def ieee_divide(numerator: float, denominator: float) -> float:
    """Divide with IEEE-754 semantics: x/0 is +-inf, 0/0 and nan/0 are nan."""
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def _is_odd_integer(value: float) -> bool:
    return math.isfinite(value) and float(value).is_integer() and int(value) % 2 == 1


def ieee_pow(base: float, exponent: float) -> float:
    """Raise ``base`` to ``exponent`` following JavaScript ``Math.pow``.

    Differs from ``math.pow`` in that it never raises, and 1 ** +-inf is nan.
    """
    if math.isnan(exponent):
        return math.nan
    if math.isinf(exponent) and abs(base) == 1:
        return math.nan
    if base == 0 and exponent < 0:
        if _is_odd_integer(exponent):
            return math.copysign(math.inf, base)
        return math.inf
    try:
        return math.pow(base, exponent)
    except ValueError:
        # Negative base with a non-integer exponent
        return math.nan
    except OverflowError:
        if base < 0 and _is_odd_integer(exponent):
            return -math.inf
        return math.inf
