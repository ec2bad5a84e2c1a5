"""
Tests for evaluator/engine.py — SymPy-backed evaluation and result rendering.
"""

import math
import os

import pytest
from sympy import I, Integer, Rational, S, sqrt

from calculator_backend.evaluator import ExpressionError, evaluate
from calculator_backend.evaluator.engine import format_number, format_real


class TestArithmetic:
    def test_addition(self):
        assert evaluate("2 + 2") == "4"

    def test_parentheses(self):
        assert evaluate("(2 + 3) * 4") == "20"

    def test_exact_division_is_integer(self):
        assert evaluate("10/2") == "5"

    def test_repeating_fraction(self):
        assert evaluate("1/3") == "0.3333333333333333"

    def test_decimal_arithmetic(self):
        assert evaluate("0.5 * 3") == "1.5"

    def test_caret_is_power(self):
        assert evaluate("2^10") == "1024"

    def test_double_star_power(self):
        assert evaluate("2**3") == "8"

    def test_factorial_notation(self):
        assert evaluate("5!") == "120"

    def test_negative_result(self):
        assert evaluate("3 - 10") == "-7"


class TestFunctionsAndConstants:
    def test_sqrt(self):
        assert evaluate("sqrt(16)") == "4"

    def test_sqrt_irrational(self):
        assert evaluate("sqrt(2)") == "1.4142135623730951"

    def test_sin_is_radians(self):
        assert evaluate("sin(pi / 2)") == "1"

    def test_cos_pi(self):
        assert evaluate("cos(pi)") == "-1"

    def test_pi(self):
        assert evaluate("pi") == str(math.pi)

    def test_e(self):
        assert evaluate("e") == str(math.e)

    def test_log10(self):
        assert evaluate("log10(1000)") == "3"

    def test_natural_log(self):
        assert evaluate("ln(e)") == "1"

    def test_abs(self):
        assert evaluate("abs(-5)") == "5"

    def test_round_half_away_from_zero(self):
        assert evaluate("round(2.5)") == "3"
        assert evaluate("round(-2.5)") == "-3"

    def test_round_to_digits(self):
        assert evaluate("round(pi, 2)") == "3.14"

    def test_imaginary_sqrt(self):
        assert evaluate("sqrt(-4)") == "2i"

    def test_comparison(self):
        assert evaluate("3 > 2") == "true"


class TestSpecialValues:
    def test_division_by_zero_is_infinity(self):
        assert evaluate("1/0") == "Infinity"

    def test_log_zero(self):
        assert evaluate("log(0)") == "-Infinity"

    def test_ln_and_log10_zero(self):
        assert evaluate("ln(0)") == "-Infinity"
        assert evaluate("log10(0)") == "-Infinity"


class TestErrors:
    def test_incomplete_expression(self):
        with pytest.raises(ExpressionError) as exc:
            evaluate("2 + ")
        assert str(exc.value)

    def test_unbalanced_parentheses(self):
        with pytest.raises(ExpressionError):
            evaluate("(2 + 3")

    def test_undefined_symbol(self):
        with pytest.raises(ExpressionError, match="Undefined symbol x"):
            evaluate("x + 1")

    def test_dunder_rejected(self):
        with pytest.raises(ExpressionError):
            evaluate("__import__('os')")

    def test_attribute_access_rejected(self):
        with pytest.raises(ExpressionError):
            evaluate("pi.evalf()")

    def test_open_is_not_callable(self, tmp_dir):
        target = os.path.join(tmp_dir, "created")
        with pytest.raises(ExpressionError):
            evaluate(f"open(\"{target}\", \"w\")")
        assert not os.path.exists(target)

    def test_exec_is_not_callable(self):
        with pytest.raises(ExpressionError):
            evaluate("exec(\"1 + 1\")")

    def test_escaped_dunder_in_string_rejected(self, tmp_dir):
        target = os.path.join(tmp_dir, "created")
        payload = (
            r'exec("\x5f\x5fimport\x5f\x5f(\"pathlib\")\x2ePath(\"'
            + target
            + r'\")\x2etouch()")'
        )
        with pytest.raises(ExpressionError, match="Unsupported syntax"):
            evaluate(payload)
        assert not os.path.exists(target)

    def test_builtin_names_are_undefined_functions(self):
        with pytest.raises(ExpressionError, match="Undefined function open"):
            evaluate("open(1)")
        with pytest.raises(ExpressionError, match="Undefined function exec"):
            evaluate("exec(1)")

    def test_error_is_value_error(self):
        assert issubclass(ExpressionError, ValueError)


class TestFormatting:
    def test_integer(self):
        assert format_number(Integer(42)) == "42"

    def test_rational(self):
        assert format_number(Rational(1, 4)) == "0.25"

    def test_nan(self):
        assert format_number(S.NaN) == "NaN"

    def test_negative_infinity(self):
        assert format_number(S.NegativeInfinity) == "-Infinity"

    def test_complex_with_real_part(self):
        assert format_number(1 + 2 * I) == "1 + 2i"

    def test_complex_negative_imaginary(self):
        assert format_number(1 - 2 * I) == "1 - 2i"

    def test_unit_imaginary(self):
        assert format_number(I) == "i"

    def test_irrational(self):
        assert format_number(sqrt(3)) == repr(math.sqrt(3))

    def test_integral_float_collapses(self):
        assert format_real(5.0) == "5"

    def test_small_number_stays_decimal(self):
        assert format_real(0.00001) == "0.00001"

    def test_tiny_number_uses_exponent(self):
        assert format_real(1.5e-7) == "1.5e-7"

    def test_huge_number_uses_signed_exponent(self):
        assert format_real(1.5e25) == "1.5e+25"

    def test_real_infinity(self):
        assert format_real(float("inf")) == "Infinity"
