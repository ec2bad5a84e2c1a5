"""
Expression evaluation backed by SymPy.

Parsing and arithmetic are delegated to ``sympy.parsing.sympy_parser``;
this module only restricts the namespace and renders results the way the
calculator UI displays numbers (``4`` not ``4.0``, ``Infinity``, ``2i``).
"""

import logging
import math
import re
from decimal import Decimal

from sympy import (
    Abs, E, Expr, Float, Function, I, Integer, Lambda, Rational, S, Symbol,
    acos, asin, atan, ceiling, cos, exp, factorial, floor, log, pi, sign, sin,
    sqrt, sympify, tan,
)
from sympy.core.function import AppliedUndef
from sympy.logic.boolalg import BooleanAtom
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication,
    parse_expr,
    standard_transformations,
)

logger = logging.getLogger(__name__)

TRANSFORMATIONS = standard_transformations + (convert_xor, implicit_multiplication)


def _log(x, base=None):
    """Natural log, or log to ``base``. The log of zero is negative infinity."""
    if sympify(x, strict=True).is_zero:
        return S.NegativeInfinity
    return log(x) if base is None else log(x, base)


def _round(x, digits=0):
    """Round half away from zero to ``digits`` decimal places."""
    scale = Integer(10) ** digits
    return sign(x) * floor(Abs(x) * scale + S.Half) / scale


NAMESPACE = {
    "pi": pi,
    "e": E,
    "i": I,
    "sqrt": sqrt,
    "abs": Abs,
    "sin": sin,
    "cos": cos,
    "tan": tan,
    "asin": asin,
    "acos": acos,
    "atan": atan,
    "log": _log,
    "ln": _log,
    "log10": lambda x: _log(x, 10),
    "log2": lambda x: _log(x, 2),
    "exp": exp,
    "floor": floor,
    "ceil": ceiling,
    "round": _round,
    "factorial": factorial,
}

# Only the constructors the parser transformations emit. An empty
# __builtins__ keeps eval from falling back to Python's builtins.
GLOBALS = {
    "__builtins__": {},
    "Integer": Integer,
    "Float": Float,
    "Rational": Rational,
    "Symbol": Symbol,
    "Function": Function,
    "Lambda": Lambda,
    "I": I,
    "factorial": factorial,
}

# Expressions are numbers, operators and names: no string literals or escapes.
_STRING_CHARS = re.compile(r"[\"'\\]")

# Dunder names and attribute access have no meaning in an arithmetic expression.
_FORBIDDEN = re.compile(r"__|[A-Za-z_)\]]\s*\.\s*[A-Za-z_]")

# Above this magnitude JavaScript switches integral numbers to exponent form.
_MAX_PLAIN_INTEGER = 1e21


class ExpressionError(ValueError):
    """The expression could not be parsed or evaluated."""


def evaluate(expression: str) -> str:
    """Evaluate an arithmetic/trigonometric expression and render the result."""
    if _STRING_CHARS.search(expression) or _FORBIDDEN.search(expression):
        raise ExpressionError(f"Unsupported syntax in expression: {expression}")

    try:
        value = parse_expr(
            expression,
            local_dict=dict(NAMESPACE),
            global_dict=dict(GLOBALS),
            transformations=TRANSFORMATIONS,
            evaluate=True,
        )
    except Exception as e:
        raise ExpressionError(_describe(e)) from e

    if isinstance(value, BooleanAtom):
        return "true" if bool(value) else "false"
    if not isinstance(value, Expr):
        raise ExpressionError(f"Unexpected type of result: {type(value).__name__}")
    if value.free_symbols:
        name = sorted(str(s) for s in value.free_symbols)[0]
        raise ExpressionError(f"Undefined symbol {name}")
    undefined = value.atoms(AppliedUndef)
    if undefined:
        name = sorted(type(f).__name__ for f in undefined)[0]
        raise ExpressionError(f"Undefined function {name}")

    try:
        return format_number(value)
    except Exception as e:
        raise ExpressionError(_describe(e)) from e


def format_number(value: Expr) -> str:
    """Render a numeric SymPy expression using JavaScript number conventions."""
    if value is S.NaN:
        return "NaN"
    if value is S.Infinity or value is S.ComplexInfinity:
        return "Infinity"
    if value is S.NegativeInfinity:
        return "-Infinity"
    if value.is_Integer:
        return str(int(value))

    number = complex(value)
    if number.imag == 0:
        return format_real(number.real)

    imag = _format_imaginary(number.imag)
    if number.real == 0:
        return imag
    sign = "-" if number.imag < 0 else "+"
    return f"{format_real(number.real)} {sign} {imag.lstrip('-')}"


def format_real(number: float) -> str:
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number.is_integer() and abs(number) < _MAX_PLAIN_INTEGER:
        return str(int(number))

    text = repr(number)
    if "e" not in text:
        return text
    mantissa, exponent = text.split("e")
    power = int(exponent)
    if -7 < power < 0:
        return format(Decimal(text), "f")
    return f"{mantissa}e{'+' if power > 0 else '-'}{abs(power)}"


def _format_imaginary(imag: float) -> str:
    if imag == 1:
        return "i"
    if imag == -1:
        return "-i"
    return f"{format_real(imag)}i"


def _describe(error: Exception) -> str:
    message = str(error).strip()
    if not message:
        return f"{type(error).__name__} while evaluating expression"
    return message.splitlines()[0] if isinstance(error, SyntaxError) else message
