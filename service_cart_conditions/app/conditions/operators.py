"""
Comparison operators for condition thresholds.
"""

import operator as _op
from typing import Any, Callable, Dict, Union

from shared.errors import UnsupportedOperator
from .models import ComparisonOperator


OperatorTag = Union[ComparisonOperator, str]

_COMPARATORS: Dict[ComparisonOperator, Callable[[Any, Any], bool]] = {
    ComparisonOperator.EQUAL: _op.eq,
    ComparisonOperator.NOT_EQUAL: _op.ne,
    ComparisonOperator.GREATER_THAN: _op.gt,
    ComparisonOperator.GREATER_THAN_OR_EQUAL: _op.ge,
    ComparisonOperator.LESS_THAN: _op.lt,
    ComparisonOperator.LESS_THAN_OR_EQUAL: _op.le,
}

_SYMBOLS: Dict[str, ComparisonOperator] = {
    "=": ComparisonOperator.EQUAL,
    "==": ComparisonOperator.EQUAL,
    "!=": ComparisonOperator.NOT_EQUAL,
    "<>": ComparisonOperator.NOT_EQUAL,
    ">": ComparisonOperator.GREATER_THAN,
    ">=": ComparisonOperator.GREATER_THAN_OR_EQUAL,
    "=>": ComparisonOperator.GREATER_THAN_OR_EQUAL,
    "<": ComparisonOperator.LESS_THAN,
    "<=": ComparisonOperator.LESS_THAN_OR_EQUAL,
    "=<": ComparisonOperator.LESS_THAN_OR_EQUAL,
}

_CANONICAL_SYMBOLS: Dict[ComparisonOperator, str] = {
    ComparisonOperator.EQUAL: "=",
    ComparisonOperator.NOT_EQUAL: "!=",
    ComparisonOperator.GREATER_THAN: ">",
    ComparisonOperator.GREATER_THAN_OR_EQUAL: ">=",
    ComparisonOperator.LESS_THAN: "<",
    ComparisonOperator.LESS_THAN_OR_EQUAL: "<=",
}


def parse_operator(tag: Any) -> ComparisonOperator:
    """Resolve an operator tag to a ComparisonOperator.

    Accepts enum members, enum values ("greater_than"), member names in any
    case ("GREATER_THAN") and symbols (">=", "=>", "<>").
    """
    if isinstance(tag, ComparisonOperator):
        return tag

    if not isinstance(tag, str):
        raise UnsupportedOperator(tag)

    text = tag.strip()
    if text in _SYMBOLS:
        return _SYMBOLS[text]

    try:
        return ComparisonOperator(text.lower())
    except ValueError:
        raise UnsupportedOperator(tag) from None


def compare(operator: OperatorTag, metric: Any, threshold: Any) -> bool:
    """Compare metric to threshold with the given operator."""
    return _COMPARATORS[parse_operator(operator)](metric, threshold)


def operator_symbol(operator: OperatorTag) -> str:
    """Canonical symbol for an operator, used in condition text."""
    return _CANONICAL_SYMBOLS[parse_operator(operator)]
