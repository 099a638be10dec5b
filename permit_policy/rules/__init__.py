"""
Permit Policy Engine: Rules
==============================
Condition trees, operators, the per-call Almanac, runtime and cost
facts, and the fail-safe rule engine.
"""

from permit_policy.rules.conditions import compile_conditions, resolve_path
from permit_policy.rules.costs import build_cost_facts
from permit_policy.rules.engine import (
    CompiledRule,
    CompiledRuleSet,
    RuleEngine,
    compile_rule_set,
    compile_rule_sets,
)
from permit_policy.rules.facts import (
    Almanac,
    FactContext,
    UndefinedFactError,
    build_runtime_facts,
    simplified_vehicle_configuration,
)
from permit_policy.rules.operators import OPERATORS, get_operator

__all__ = [
    "compile_conditions",
    "resolve_path",
    "build_cost_facts",
    "CompiledRule",
    "CompiledRuleSet",
    "RuleEngine",
    "compile_rule_set",
    "compile_rule_sets",
    "Almanac",
    "FactContext",
    "UndefinedFactError",
    "build_runtime_facts",
    "simplified_vehicle_configuration",
    "OPERATORS",
    "get_operator",
]
