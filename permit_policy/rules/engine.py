"""
Permit Policy Engine: Rule Engine
====================================
Compiles each permit type's rules once, then evaluates them
against a call-scoped Almanac.

A compiled rule set is immutable and shared across validate()
calls:
    rules       → permit type rules + commonRules, ordered by
                  descending priority then document order
    cost_rules  → permit type costRules, document order

The RuleEngine does NOT:
- Read the system clock (the almanac carries validationDate)
- Mutate the compiled rule set
- Raise during evaluation

A rule fires when its condition tree holds. Rules are written as
the condition under which the finding applies, e.g. a violation
rule's conditions describe the non-compliant application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from permit_policy.exceptions import PolicyConfigurationError
from permit_policy.models import CostRule, PermitType
from permit_policy.results import (
    DEFAULT_MESSAGE,
    ValidationResult,
    ValidationResultCode,
    ValidationResultType,
    ValidationResults,
)
from permit_policy.rules.conditions import Condition, compile_conditions
from permit_policy.rules.facts import Almanac

logger = logging.getLogger("permit_policy.rules")

DEFAULT_PRIORITY = 1
COST_MESSAGE = "Calculated permit cost"


# ══════════════════════════════════════════════════════════════
# COMPILED RULES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CompiledRule:
    """
    A rule ready for evaluation.

    Fields:
        name:       rule name, or a positional name when unnamed
        priority:   higher runs first
        conditions: compiled condition tree
        event_type: violation | warning | requirement | information | cost
        params:     event params (message, code, fieldReference)
    """

    name: str
    priority: int
    conditions: Condition
    event_type: str
    params: Mapping[str, Any] = field(default_factory=dict)

    def to_result(self) -> ValidationResult:
        return ValidationResult(
            type=self.event_type,
            code=self.params.get("code") or ValidationResultCode.GENERAL_RESULT,
            message=self.params.get("message") or DEFAULT_MESSAGE,
            field_reference=self.params.get("fieldReference"),
        )


@dataclass(frozen=True)
class CompiledRuleSet:
    permit_type_id: str
    rules: Tuple[CompiledRule, ...] = ()
    cost_rules: Tuple[CostRule, ...] = ()


def compile_rule(document: Mapping[str, Any], position: int) -> CompiledRule:
    """
    Compile one rule document.

    Raises PolicyConfigurationError for a rule without conditions or
    with a malformed condition tree.
    """
    name = document.get("name") or f"rule-{position}"
    if "conditions" not in document:
        raise PolicyConfigurationError(f"Rule '{name}' has no conditions")

    event = document.get("event") or {}
    priority = document.get("priority")
    return CompiledRule(
        name=name,
        priority=priority if isinstance(priority, (int, float)) else DEFAULT_PRIORITY,
        conditions=compile_conditions(document["conditions"]),
        event_type=ValidationResultType.normalize(event.get("type")),
        params=dict(event.get("params") or {}),
    )


def compile_rule_set(
    permit_type: PermitType, common_rules: Iterable[Mapping[str, Any]] = ()
) -> CompiledRuleSet:
    documents = list(permit_type.rules) + list(common_rules)
    compiled = [compile_rule(doc, i) for i, doc in enumerate(documents)]
    # sorted() is stable, so equal priorities keep document order.
    compiled = sorted(compiled, key=lambda r: -r.priority)
    return CompiledRuleSet(
        permit_type_id=permit_type.id,
        rules=tuple(compiled),
        cost_rules=tuple(permit_type.cost_rules),
    )


def compile_rule_sets(
    permit_types: Iterable[PermitType], common_rules: Iterable[Mapping[str, Any]] = ()
) -> Dict[str, CompiledRuleSet]:
    common = tuple(common_rules)
    rule_sets: Dict[str, CompiledRuleSet] = {}
    for permit_type in permit_types:
        rule_sets.setdefault(permit_type.id, compile_rule_set(permit_type, common))
    return rule_sets


# ══════════════════════════════════════════════════════════════
# ENGINE
# ══════════════════════════════════════════════════════════════

class RuleEngine:
    """
    Evaluates a compiled rule set against an almanac.

    GUARANTEE: run() NEVER raises. A rule or cost fact that errors
    becomes a violation finding naming the rule.

    Usage:
        engine = RuleEngine()
        results = engine.run(rule_sets["TROS"], almanac)
    """

    def run(self, rule_set: CompiledRuleSet, almanac: Almanac) -> ValidationResults:
        results = ValidationResults()

        # ── Step 1: Validation rules, priority order ──────────
        for rule in rule_set.rules:
            result = self._execute_rule_safe(rule, almanac)
            if result is not None:
                results.add(result)

        # ── Step 2: Cost rules, document order ────────────────
        for cost_rule in rule_set.cost_rules:
            results.add(self._execute_cost_rule_safe(cost_rule, almanac))

        return results

    @staticmethod
    def _execute_rule_safe(rule: CompiledRule, almanac: Almanac) -> Optional[ValidationResult]:
        """The rule's finding when it fires, None when it does not."""
        try:
            if not rule.conditions.evaluate(almanac):
                return None
            return rule.to_result()
        except Exception as exc:
            logger.warning(
                f"Rule '{rule.name}' failed: {type(exc).__name__}: {exc}"
            )
            return ValidationResult(
                type=ValidationResultType.VIOLATION,
                code=ValidationResultCode.GENERAL_RESULT,
                message=f"Rule '{rule.name}' could not be evaluated: {type(exc).__name__}",
            )

    @staticmethod
    def _execute_cost_rule_safe(cost_rule: CostRule, almanac: Almanac) -> ValidationResult:
        try:
            cost = almanac.fact_value(cost_rule.fact, cost_rule.params)
            return ValidationResult(
                type=ValidationResultType.COST,
                code=ValidationResultCode.COST_VALUE,
                message=COST_MESSAGE,
                cost=cost,
            )
        except Exception as exc:
            logger.warning(
                f"Cost rule '{cost_rule.fact}' failed: {type(exc).__name__}: {exc}"
            )
            return ValidationResult(
                type=ValidationResultType.VIOLATION,
                code=ValidationResultCode.GENERAL_RESULT,
                message=f"Cost rule '{cost_rule.fact}' could not be evaluated: {type(exc).__name__}",
            )
