"""Apply application-context answers to a logic table.

The base table is never mutated: rules are deep-copied first and every effect
is applied to the copies. Questions are processed in config order and effects
in option order, so when two answers touch the same attribute the later one
wins.

Effects:
- escalate_to_mandatory: weight = 10
- escalate_to_primary: weight = max(weight, 9)
- not_applicable: weight = 0
- add_review_flag: rule becomes application_review
- set_threshold: annotation only (reason text); bounds come from attribute overrides
Every effect replaces engineering_reason when it carries a note and sets
block_on_missing when the effect asks for it (never clears it).
"""

import copy
import logging

from ..config import MANDATORY_WEIGHT, PRIMARY_WEIGHT_FLOOR
from ..models import (
    ApplicationContext,
    AttributeEffect,
    FamilyContextConfig,
    LogicTable,
    MatchingRule,
    retype_rule,
)

logger = logging.getLogger(__name__)


def _apply_effect(rule: MatchingRule, effect: AttributeEffect) -> MatchingRule:
    """Apply one effect to a (cloned) rule. Returns the rule to keep in the table."""
    if effect.effect == "escalate_to_mandatory":
        rule.weight = MANDATORY_WEIGHT
    elif effect.effect == "escalate_to_primary":
        rule.weight = max(rule.weight, PRIMARY_WEIGHT_FLOOR)
    elif effect.effect == "not_applicable":
        rule.weight = 0
    elif effect.effect == "add_review_flag":
        rule = retype_rule(rule, "application_review")
    elif effect.effect == "set_threshold":
        pass

    if effect.note:
        rule.engineering_reason = effect.note
    if effect.block_on_missing:
        rule.block_on_missing = True
    return rule


def apply_context_to_logic_table(
    logic_table: LogicTable, context: ApplicationContext, family_config: FamilyContextConfig
) -> LogicTable:
    """Return a copy of the table with the answered questions' effects applied.

    Unanswered questions and answers matching no predefined option (free text)
    have no effect. Effects naming an attribute the table does not have are
    skipped.
    """
    rules: list[MatchingRule] = copy.deepcopy(logic_table.rules)
    index_by_attribute = {rule.attribute_id: i for i, rule in reversed(list(enumerate(rules)))}

    for question in family_config.questions:
        answer = context.answers.get(question.question_id)
        if not answer:
            continue

        option = next((o for o in question.options if o.value == answer), None)
        if option is None:
            logger.debug(f"No option matches answer {answer!r} for question {question.question_id}")
            continue

        for effect in option.attribute_effects:
            idx = index_by_attribute.get(effect.attribute_id)
            if idx is None:
                logger.debug(
                    f"Context effect {effect.effect} targets '{effect.attribute_id}', "
                    f"not in family {logic_table.family_id}"
                )
                continue
            rules[idx] = _apply_effect(rules[idx], effect)

    return LogicTable(
        family_id=logic_table.family_id,
        family_name=logic_table.family_name,
        category=logic_table.category,
        description=logic_table.description,
        rules=rules,
    )
