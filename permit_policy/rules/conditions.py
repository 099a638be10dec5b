"""
Permit Policy Engine: Rule Conditions
========================================
Compiles a rule's condition document into an immutable tree and
evaluates it against an Almanac.

Condition document:
    {"all": [...]}  → every child holds
    {"any": [...]}  → at least one child holds
    {"not": {...}}  → the child does not hold
    {"fact": "permitData", "path": "$.a.b", "operator": "equal",
     "value": <literal or {"fact": ..., "path": ..., "params": ...}>,
     "params": {...}}

Compilation rejects unknown operators and malformed nodes, so a bad
policy document fails when the Policy is built, not mid-validation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple, Union

from permit_policy.exceptions import PolicyConfigurationError
from permit_policy.rules.operators import Operator, get_operator

_PATH_TOKEN = re.compile(r"\.([^.\[\]]+)|\[(\d+)\]|\[['\"]([^'\"]+)['\"]\]")


# ══════════════════════════════════════════════════════════════
# JSON PATH
# ══════════════════════════════════════════════════════════════

def resolve_path(value: Any, path: Optional[str]) -> Any:
    """
    Value at a simple JSON path ($.a.b[0].c), or None when any
    step is missing.
    """
    if not path:
        return value
    if not path.startswith("$"):
        path = "$." + path

    position = 1
    current = value
    while position < len(path):
        match = _PATH_TOKEN.match(path, position)
        if match is None:
            return None
        key, index, quoted = match.groups()
        position = match.end()

        if index is not None:
            if not isinstance(current, (list, tuple)):
                return None
            i = int(index)
            if i >= len(current):
                return None
            current = current[i]
        else:
            name = key if key is not None else quoted
            if not isinstance(current, Mapping) or name not in current:
                return None
            current = current[name]
    return current


# ══════════════════════════════════════════════════════════════
# COMPILED TREE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FactReference:
    """A fact lookup used as the right-hand side of a comparison."""

    fact: str
    path: Optional[str] = None
    params: Mapping[str, Any] = field(default_factory=dict)

    def resolve(self, almanac) -> Any:
        return almanac.fact_value(self.fact, self.params, self.path)


@dataclass(frozen=True)
class FactCondition:
    fact: str
    operator: Operator
    value: Any
    path: Optional[str] = None
    params: Mapping[str, Any] = field(default_factory=dict)

    def evaluate(self, almanac) -> bool:
        fact_value = almanac.fact_value(self.fact, self.params, self.path)
        compare_value = self.value
        if isinstance(compare_value, FactReference):
            compare_value = compare_value.resolve(almanac)
        return self.operator(fact_value, compare_value)


@dataclass(frozen=True)
class AllCondition:
    children: Tuple["Condition", ...]

    def evaluate(self, almanac) -> bool:
        return all(child.evaluate(almanac) for child in self.children)


@dataclass(frozen=True)
class AnyCondition:
    children: Tuple["Condition", ...]

    def evaluate(self, almanac) -> bool:
        return any(child.evaluate(almanac) for child in self.children)


@dataclass(frozen=True)
class NotCondition:
    child: "Condition"

    def evaluate(self, almanac) -> bool:
        return not self.child.evaluate(almanac)


Condition = Union[FactCondition, AllCondition, AnyCondition, NotCondition]


def _compile_value(value: Any) -> Any:
    if isinstance(value, Mapping) and "fact" in value:
        return FactReference(
            fact=value["fact"],
            path=value.get("path"),
            params=dict(value.get("params") or {}),
        )
    return value


def _compile_children(children, kind: str) -> Tuple[Condition, ...]:
    if not isinstance(children, (list, tuple)):
        raise PolicyConfigurationError(f"'{kind}' condition must be a list")
    return tuple(compile_conditions(child) for child in children)


def compile_conditions(document: Mapping[str, Any]) -> Condition:
    """
    Compile a condition document.

    Raises PolicyConfigurationError for malformed nodes or unknown
    operators.
    """
    if not isinstance(document, Mapping):
        raise PolicyConfigurationError(
            f"Condition must be a mapping, got {type(document).__name__}"
        )

    if "all" in document:
        return AllCondition(_compile_children(document["all"], "all"))
    if "any" in document:
        return AnyCondition(_compile_children(document["any"], "any"))
    if "not" in document:
        return NotCondition(compile_conditions(document["not"]))

    fact = document.get("fact")
    operator_name = document.get("operator")
    if not fact or not operator_name:
        raise PolicyConfigurationError(
            f"Condition requires 'fact' and 'operator': {dict(document)}"
        )

    operator = get_operator(operator_name)
    if operator is None:
        raise PolicyConfigurationError(f"Unknown operator: '{operator_name}'")

    return FactCondition(
        fact=fact,
        operator=operator,
        value=_compile_value(document.get("value")),
        path=document.get("path"),
        params=dict(document.get("params") or {}),
    )
