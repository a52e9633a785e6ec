"""Rewriting and evaluation helpers for ``${{ ... }}`` expressions."""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Callable

LOGGER = logging.getLogger("actrun")

Evaluate = Callable[[str, bool], Any]

_STRING_PATTERN = re.compile(r"(?:''|[^'])*'")
_INSERT_DIRECTIVE = re.compile(r"\$\{\{\s*insert\s*\}\}")


class ExpressionSyntaxError(ValueError):
    """Raised when an expression has an unclosed string or expression."""


def _has_expression(text: str) -> bool:
    return "${{" in text and "}}" in text


def escape_format_string(text: str) -> str:
    """Escape braces so that *text* is literal inside a ``format()`` string."""
    return text.replace("{", "{{").replace("}", "}}")


def rewrite_sub_expression(text: str, force_format: bool = False) -> str:
    """Turn a string with embedded expressions into a single ``format()`` call.

    A string that is exactly one expression is returned unchanged unless
    *force_format* is set.
    """
    if not _has_expression(text):
        return text

    pos = 0
    expr_start = -1
    str_start = -1
    results: list[str] = []
    format_out: list[str] = []

    while pos < len(text):
        if str_start > -1:
            match = _STRING_PATTERN.search(text, pos)
            if match is None:
                raise ExpressionSyntaxError("unclosed string.")
            str_start = -1
            pos = match.end()
        elif expr_start > -1:
            expr_end = text.find("}}", pos)
            str_start = text.find("'", pos)
            if expr_end > -1 and str_start > -1:
                if expr_end < str_start:
                    str_start = -1
                else:
                    expr_end = -1

            if expr_end > -1:
                format_out.append(f"{{{len(results)}}}")
                results.append(text[expr_start:expr_end].strip())
                pos = expr_end + 2
                expr_start = -1
            elif str_start > -1:
                pos = str_start + 1
            else:
                raise ExpressionSyntaxError("unclosed expression.")
        else:
            found = text.find("${{", pos)
            if found != -1:
                format_out.append(escape_format_string(text[pos:found]))
                expr_start = found + 3
                pos = expr_start
            else:
                format_out.append(escape_format_string(text[pos:]))
                pos = len(text)

    joined = "".join(format_out)
    if len(results) == 1 and joined == "{0}" and not force_format:
        return text

    escaped = joined.replace("'", "''")
    return f"format('{escaped}', {', '.join(results)})"


def interpolate(evaluate: Evaluate, text: str) -> str:
    """Replace every expression in *text* with its evaluated string value.

    Evaluation errors are logged and yield an empty string; a result that
    is not a string raises TypeError.
    """
    if not _has_expression(text):
        return text

    expr = rewrite_sub_expression(text, True)
    if expr != text:
        LOGGER.debug("expression '%s' rewritten to '%s'", text, expr)

    try:
        evaluated = evaluate(expr, False)
    except Exception as err:  # the evaluator reports any failure this way
        LOGGER.error("Unable to interpolate expression '%s': %s", expr, err)
        return ""

    LOGGER.debug("expression '%s' evaluated to '%s'", expr, evaluated)
    if not isinstance(evaluated, str):
        raise TypeError(f"Expression {expr} did not evaluate to a string")
    return evaluated


def _evaluate_scalar(evaluate: Evaluate, value: Any) -> Any:
    if not isinstance(value, str) or not _has_expression(value):
        return value
    expr = rewrite_sub_expression(value, False)
    if expr != value:
        LOGGER.debug("expression '%s' rewritten to '%s'", value, expr)
    return evaluate(expr, False)


def _evaluate_mapping(evaluate: Evaluate, mapping: dict) -> dict:
    result: dict = {}
    for key, value in mapping.items():
        evaluated = evaluate_structure(evaluate, value)
        if isinstance(key, str) and _INSERT_DIRECTIVE.search(key):
            # Undocumented insert directive: merge the nested map in place.
            if isinstance(evaluated, dict):
                result.update(evaluated)
            continue
        result[evaluate_structure(evaluate, key)] = evaluated
    return result


def _evaluate_sequence(evaluate: Evaluate, sequence: list) -> list:
    result: list = []
    for item in sequence:
        was_sequence = isinstance(item, list)
        evaluated = evaluate_structure(evaluate, item)
        # An expression that yields a sequence is merged into the parent.
        if isinstance(evaluated, list) and not was_sequence:
            result.extend(evaluated)
        else:
            result.append(evaluated)
    return result


def evaluate_structure(evaluate: Evaluate, value: Any) -> Any:
    """Evaluate expressions throughout loaded YAML data and return the result."""
    if isinstance(value, dict):
        return _evaluate_mapping(evaluate, value)
    if isinstance(value, list):
        return _evaluate_sequence(evaluate, value)
    return _evaluate_scalar(evaluate, value)


def to_bool(value: Any, expression: str) -> bool:
    """Map an evaluated value to a boolean the way ``if:`` conditions do."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value != ""
    if isinstance(value, int):
        return value != 0
    if isinstance(value, float):
        return not math.isnan(value) and value != 0
    raise TypeError(f"Unable to map return type to boolean for '{expression}'")


def eval_bool(evaluate: Evaluate, expression: str) -> bool:
    """Evaluate an ``if:`` condition and return its truth value."""
    next_expr = rewrite_sub_expression(expression, False)
    if next_expr != expression:
        LOGGER.debug("expression '%s' rewritten to '%s'", expression, next_expr)
    result = to_bool(evaluate(next_expr, True), expression)
    LOGGER.debug("expression '%s' evaluated to '%s'", next_expr, result)
    return result