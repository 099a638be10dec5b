"""
Permit Policy Engine: Rule Operators
=======================================
Comparison operators available to rule conditions.

Each operator has an optional fact-value validator. When the
validator rejects the fact value, the operator evaluates to False
instead of raising; a rule never fails because an applicant left
a field blank or typed text into a number field.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from dateutil import parser as date_parser


@dataclass(frozen=True)
class Operator:
    name: str
    evaluate: Callable[[Any, Any], bool]
    validator: Optional[Callable[[Any], bool]] = None

    def __call__(self, fact_value, compare_value) -> bool:
        if self.validator is not None and not self.validator(fact_value):
            return False
        return bool(self.evaluate(fact_value, compare_value))


# ══════════════════════════════════════════════════════════════
# VALIDATORS & COERCION
# ══════════════════════════════════════════════════════════════

def _is_string(value) -> bool:
    return isinstance(value, str)


def _is_list(value) -> bool:
    return isinstance(value, (list, tuple))


def _to_number(value) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _is_number(value) -> bool:
    return _to_number(value) is not None


def parse_date(value):
    """Calendar date from an ISO 8601 string, or None."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date_parser.isoparse(value.strip()).date()
    except ValueError:
        return None


def _is_date_string(value) -> bool:
    return parse_date(value) is not None


def _numeric(compare: Callable[[float, float], bool]):
    def evaluate(a, b):
        right = _to_number(b)
        if right is None:
            return False
        return compare(_to_number(a), right)
    return evaluate


def _contains(a, b) -> bool:
    return b in a


def _in(a, b) -> bool:
    return _is_list(b) and a in b


def _string_minimum_length(a, b) -> bool:
    if not a:
        return False
    return len(a.strip()) >= b


def _date_less_than(a, b) -> bool:
    right = parse_date(b)
    if right is None:
        return False
    return parse_date(a) < right


# ══════════════════════════════════════════════════════════════
# REGISTRY
# ══════════════════════════════════════════════════════════════

_OPERATORS = (
    Operator("equal", lambda a, b: a == b),
    Operator("notEqual", lambda a, b: a != b),
    Operator("in", _in),
    Operator("notIn", lambda a, b: not _in(a, b)),
    Operator("contains", _contains, _is_list),
    Operator("doesNotContain", lambda a, b: not _contains(a, b), _is_list),
    Operator("lessThan", _numeric(lambda a, b: a < b), _is_number),
    Operator("lessThanInclusive", _numeric(lambda a, b: a <= b), _is_number),
    Operator("greaterThan", _numeric(lambda a, b: a > b), _is_number),
    Operator("greaterThanInclusive", _numeric(lambda a, b: a >= b), _is_number),
    # Custom operators
    Operator("stringMinimumLength", _string_minimum_length, _is_string),
    Operator("dateLessThan", _date_less_than, _is_date_string),
    Operator("regex", lambda a, b: re.search(b, a) is not None, _is_string),
    Operator("isEmptyArray", lambda a, b: len(a) == 0, _is_list),
)

OPERATORS: Dict[str, Operator] = {op.name: op for op in _OPERATORS}


def get_operator(name: str) -> Optional[Operator]:
    return OPERATORS.get(name)
