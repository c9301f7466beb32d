"""Sandboxed evaluation of scoring formulas over a, b, ka and kb."""
import ast
import math
import operator
import re
from functools import lru_cache

from rscan.errors import FormulaError

DEFAULT_FORMULA = "1 - (ka*0.5)*(1-a) - (kb*0.1)*b"
VARIABLES = frozenset({"a", "b", "ka", "kb"})

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Pow: operator.pow,
}
_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

# "@ka" is how coefficients were spelled in older formula strings
_AT_COEFFICIENT = re.compile(r"@(?=k[ab]\b)")


def display_formula(expression: str) -> str:
    """Return the formula without the legacy '@' coefficient prefix."""
    return _AT_COEFFICIENT.sub("", expression)


@lru_cache(maxsize=64)
def _parse(expression: str) -> ast.expr:
    source = display_formula(expression).strip()
    if not source:
        raise FormulaError("empty formula")
    try:
        tree = ast.parse(source, mode="eval")
    except SyntaxError as e:
        raise FormulaError(f"malformed formula {expression!r}: {e.msg}") from e
    for node in ast.walk(tree.body):
        _check_node(node, expression)
    return tree.body


def _check_node(node: ast.AST, expression: str) -> None:
    if isinstance(node, ast.Name):
        if node.id not in VARIABLES:
            raise FormulaError(f"undefined variable {node.id!r} in {expression!r}")
    elif isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise FormulaError(f"unsupported literal {node.value!r} in {expression!r}")
    elif isinstance(node, ast.BinOp):
        if type(node.op) not in _BINARY_OPS:
            raise FormulaError(f"unsupported operator in {expression!r}")
    elif isinstance(node, ast.UnaryOp):
        if type(node.op) not in _UNARY_OPS:
            raise FormulaError(f"unsupported operator in {expression!r}")
    elif not isinstance(node, (ast.operator, ast.unaryop, ast.Load)):
        raise FormulaError(
            f"unsupported syntax {type(node).__name__} in {expression!r}"
        )


def _eval(node: ast.expr, bindings: dict) -> float:
    if isinstance(node, ast.Constant):
        return float(node.value)
    if isinstance(node, ast.Name):
        try:
            return bindings[node.id]
        except KeyError:
            raise FormulaError(f"variable {node.id!r} is not bound") from None
    if isinstance(node, ast.UnaryOp):
        return _UNARY_OPS[type(node.op)](_eval(node.operand, bindings))
    return _BINARY_OPS[type(node.op)](
        _eval(node.left, bindings), _eval(node.right, bindings)
    )


def evaluate(expression: str, bindings: dict) -> float:
    """
    Evaluate a scoring formula with the given variable bindings.

    Only numbers, the variables a, b, ka and kb, the operators + - * / **
    and parentheses are accepted. Any other construct, an arithmetic fault
    or a non-finite result raises FormulaError.
    """
    tree = _parse(expression)
    try:
        value = _eval(tree, bindings)
    except ZeroDivisionError as e:
        raise FormulaError(f"division by zero in {expression!r}") from e
    except (OverflowError, TypeError) as e:
        raise FormulaError(f"cannot evaluate {expression!r}: {e}") from e
    if isinstance(value, complex) or not math.isfinite(value):
        raise FormulaError(f"{expression!r} gave a non-finite result")
    return float(value)


def check_formula(expression: str) -> None:
    """Raise FormulaError unless the formula parses and uses only known names."""
    _parse(expression)
