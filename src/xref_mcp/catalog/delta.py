"""Derive variant logic tables from a base table.

A delta lists rules to remove, partial overrides, and rules to add. Processing
order is REMOVE, then OVERRIDE, then ADD. Unknown attribute ids in remove or
override are skipped. The base table is never mutated.
"""

import copy
from dataclasses import dataclass, field
from typing import Any

from ..models import IdentityUpgradeRule, LogicTable, MatchingRule, ThresholdRule, retype_rule, rule_from_dict


@dataclass
class RuleOverride:
    """Fields to change on an inherited rule. None means keep the base value."""
    attribute_id: str
    weight: int | None = None
    logic_type: str | None = None
    threshold_direction: str | None = None
    upgrade_hierarchy: list[str] | None = None
    engineering_reason: str | None = None
    attribute_name: str | None = None


@dataclass
class LogicTableDelta:
    base_family_id: str
    family_id: str
    family_name: str
    category: str
    description: str
    add: list[MatchingRule] = field(default_factory=list)
    override: list[RuleOverride] = field(default_factory=list)
    remove: list[str] = field(default_factory=list)


def _apply_override(rule: MatchingRule, ov: RuleOverride) -> MatchingRule:
    if ov.logic_type is not None:
        rule = retype_rule(rule, ov.logic_type)
    if ov.weight is not None:
        rule.weight = ov.weight
    if ov.threshold_direction is not None and isinstance(rule, ThresholdRule):
        rule.threshold_direction = ov.threshold_direction
    if ov.upgrade_hierarchy is not None and isinstance(rule, IdentityUpgradeRule):
        rule.upgrade_hierarchy = list(ov.upgrade_hierarchy)
    if ov.engineering_reason is not None:
        rule.engineering_reason = ov.engineering_reason
    if ov.attribute_name is not None:
        rule.attribute_name = ov.attribute_name
    return rule


def build_derived_logic_table(base: LogicTable, delta: LogicTableDelta) -> LogicTable:
    """Build a new table from ``base`` with ``delta`` applied."""
    rules: list[MatchingRule] = copy.deepcopy(base.rules)

    if delta.remove:
        removed = set(delta.remove)
        rules = [r for r in rules if r.attribute_id not in removed]

    for ov in delta.override:
        for i, rule in enumerate(rules):
            if rule.attribute_id == ov.attribute_id:
                rules[i] = _apply_override(rule, ov)
                break

    if delta.add:
        max_sort = max((r.sort_order for r in rules), default=0)
        for i, added in enumerate(copy.deepcopy(delta.add)):
            if not added.sort_order:
                added.sort_order = max_sort + i + 1
            rules.append(added)

    return LogicTable(
        family_id=delta.family_id,
        family_name=delta.family_name,
        category=delta.category,
        description=delta.description,
        rules=rules,
    )


def delta_from_dict(data: dict[str, Any]) -> LogicTableDelta:
    """Build a LogicTableDelta from catalog data (rules in rule_from_dict form)."""
    return LogicTableDelta(
        base_family_id=str(data["base_family_id"]),
        family_id=str(data["family_id"]),
        family_name=str(data["family_name"]),
        category=str(data.get("category", "")),
        description=str(data.get("description", "")),
        add=[rule_from_dict(r) for r in data.get("add", [])],
        override=[RuleOverride(**ov) for ov in data.get("override", [])],
        remove=list(data.get("remove", [])),
    )
