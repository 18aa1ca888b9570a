"""Per-rule comparison strategies.

One evaluator per logic type. Each takes the rule plus the source and
candidate attribute (either may be missing) and returns a
RuleEvaluationResult. None of them raise: unparseable values degrade to
``review`` or to a string-equality comparison.
"""

from typing import Callable

from ..models import (
    IdentityUpgradeRule,
    MatchingRule,
    MatchStatus,
    ParametricAttribute,
    RuleEvaluationResult,
    RuleResult,
    ThresholdRule,
)
from ..parsers import get_numeric, normalize, parse_boolean, parse_msl, parse_temp_range, parse_tolerance


MISSING_VALUE = "N/A"
MISSING_FLAG_VALUE = "No"
MISSING_NOTE = "Missing attribute data"

RuleEvaluator = Callable[
    [MatchingRule, ParametricAttribute | None, ParametricAttribute | None], RuleEvaluationResult
]


def _result(
    rule: MatchingRule,
    source_value: str,
    candidate_value: str,
    result: RuleResult,
    match_status: MatchStatus,
    note: str | None = None,
) -> RuleEvaluationResult:
    return RuleEvaluationResult(
        attribute_id=rule.attribute_id,
        attribute_name=rule.attribute_name,
        source_value=source_value,
        candidate_value=candidate_value,
        logic_type=rule.logic_type,
        result=result,
        match_status=match_status,
        note=note,
    )


def _values(
    source: ParametricAttribute | None, candidate: ParametricAttribute | None, missing: str = MISSING_VALUE
) -> tuple[str, str]:
    return (
        source.value if source is not None else missing,
        candidate.value if candidate is not None else missing,
    )


def _missing_note(candidate: ParametricAttribute | None) -> str | None:
    return MISSING_NOTE if candidate is None else None


# =============================================================================
# IDENTITY
# =============================================================================


def evaluate_identity(
    rule: MatchingRule,
    source: ParametricAttribute | None,
    candidate: ParametricAttribute | None,
) -> RuleEvaluationResult:
    """Exact match. Numeric equality when both parse, else normalized strings."""
    source_value, candidate_value = _values(source, candidate)

    if source is None:
        # Original has no value for this attribute: nothing to match against
        return _result(rule, source_value, candidate_value, "pass", "exact", _missing_note(candidate))
    if candidate is None:
        return _result(rule, source_value, candidate_value, "fail", "different", MISSING_NOTE)

    src_num = get_numeric(source)
    cand_num = get_numeric(candidate)
    if src_num is not None and cand_num is not None:
        match = src_num == cand_num
    else:
        match = normalize(source_value) == normalize(candidate_value)

    if match:
        return _result(rule, source_value, candidate_value, "pass", "exact")
    return _result(rule, source_value, candidate_value, "fail", "different")


def hierarchy_index(value: str, hierarchy: list[str]) -> int:
    """Position of a value in an upgrade hierarchy, or -1.

    The first entry, in hierarchy order, whose upper-cased text appears in
    the normalized value. "C0G (NP0)" resolves to "C0G"; with "Shielded"
    listed ahead of "Semi-Shielded", "Semi-Shielded" also resolves to
    "Shielded".
    """
    norm = normalize(value)
    return next((idx for idx, h in enumerate(hierarchy) if h.upper() in norm), -1)


def evaluate_identity_upgrade(
    rule: MatchingRule,
    source: ParametricAttribute | None,
    candidate: ParametricAttribute | None,
) -> RuleEvaluationResult:
    """Match or strictly better tier. Lower hierarchy index is better; downgrades fail."""
    source_value, candidate_value = _values(source, candidate)
    hierarchy = rule.upgrade_hierarchy if isinstance(rule, IdentityUpgradeRule) else []

    if source is None:
        return _result(rule, source_value, candidate_value, "pass", "exact")
    if candidate is None:
        return _result(rule, source_value, candidate_value, "fail", "different")

    src_idx = hierarchy_index(source_value, hierarchy)
    cand_idx = hierarchy_index(candidate_value, hierarchy)

    # Neither value is a known tier: plain exact match
    if src_idx == -1 and cand_idx == -1:
        if normalize(source_value) == normalize(candidate_value):
            return _result(rule, source_value, candidate_value, "pass", "exact")
        return _result(rule, source_value, candidate_value, "fail", "different")

    # Only one side is a known tier: ambiguous, treated as a failure
    if src_idx == -1 or cand_idx == -1:
        return _result(
            rule, source_value, candidate_value, "fail", "different",
            "Cannot determine hierarchy position",
        )

    if cand_idx == src_idx:
        return _result(rule, source_value, candidate_value, "pass", "exact")

    if cand_idx < src_idx:
        return _result(
            rule, source_value, candidate_value, "upgrade", "better",
            f"Upgraded from {source_value} to {candidate_value}",
        )

    return _result(
        rule, source_value, candidate_value, "fail", "worse",
        f"Downgrade from {source_value} to {candidate_value} not allowed",
    )


def evaluate_identity_flag(
    rule: MatchingRule,
    source: ParametricAttribute | None,
    candidate: ParametricAttribute | None,
) -> RuleEvaluationResult:
    """One-directional capability flag: a candidate may add it but never drop it."""
    source_value, candidate_value = _values(source, candidate, MISSING_FLAG_VALUE)

    source_required = parse_boolean(source_value)
    candidate_has = parse_boolean(candidate_value)

    if source_required and not candidate_has:
        return _result(
            rule, source_value, candidate_value, "fail", "worse",
            f"Original requires {rule.attribute_name}, replacement does not have it",
        )
    if not source_required and candidate_has:
        return _result(
            rule, source_value, candidate_value, "pass", "better",
            f"Replacement has {rule.attribute_name} (not required by original)",
        )
    return _result(rule, source_value, candidate_value, "pass", "exact")


# =============================================================================
# THRESHOLD / FIT
# =============================================================================


def _ordinal_lower_is_better(
    rule: MatchingRule,
    source_value: str,
    candidate_value: str,
    src: float | None,
    cand: float | None,
    unparseable_note: str | None,
) -> RuleEvaluationResult:
    if src is None or cand is None:
        return _result(rule, source_value, candidate_value, "review", "compatible", unparseable_note)
    if cand == src:
        return _result(rule, source_value, candidate_value, "pass", "exact")
    if cand < src:
        return _result(rule, source_value, candidate_value, "pass", "better")
    return _result(rule, source_value, candidate_value, "fail", "worse")


def _evaluate_threshold(
    rule: MatchingRule,
    source: ParametricAttribute | None,
    candidate: ParametricAttribute | None,
    direction: str,
) -> RuleEvaluationResult:
    source_value, candidate_value = _values(source, candidate)

    if source is None:
        return _result(rule, source_value, candidate_value, "pass", "exact", _missing_note(candidate))
    if candidate is None:
        # Missing data is not proof of incompatibility
        return _result(rule, source_value, candidate_value, "review", "different", MISSING_NOTE)

    # Candidate range must contain the original range (temperature ranges)
    if direction == "range_superset":
        src_range = parse_temp_range(source_value)
        cand_range = parse_temp_range(candidate_value)
        if src_range is None or cand_range is None:
            return _result(
                rule, source_value, candidate_value, "review", "compatible",
                "Could not parse temperature range for comparison",
            )
        src_min, src_max = src_range
        cand_min, cand_max = cand_range
        is_superset = cand_min <= src_min and cand_max >= src_max
        if cand_range == src_range:
            return _result(rule, source_value, candidate_value, "pass", "exact")
        if is_superset:
            return _result(rule, source_value, candidate_value, "pass", "better")
        return _result(rule, source_value, candidate_value, "fail", "worse")

    # Tolerance: tighter (lower percentage) is better
    if rule.attribute_id == "tolerance":
        return _ordinal_lower_is_better(
            rule, source_value, candidate_value,
            parse_tolerance(source_value), parse_tolerance(candidate_value),
            "Could not parse tolerance values",
        )

    # MSL: lower level means longer floor life
    if rule.attribute_id == "msl":
        src_msl = parse_msl(source_value)
        cand_msl = parse_msl(candidate_value)
        return _ordinal_lower_is_better(
            rule, source_value, candidate_value,
            float(src_msl) if src_msl is not None else None,
            float(cand_msl) if cand_msl is not None else None,
            None,
        )

    src_num = get_numeric(source)
    cand_num = get_numeric(candidate)

    if src_num is None or cand_num is None:
        if normalize(source_value) == normalize(candidate_value):
            return _result(rule, source_value, candidate_value, "pass", "exact")
        return _result(
            rule, source_value, candidate_value, "review", "compatible",
            "Could not parse numeric values for threshold comparison",
        )

    if src_num == cand_num:
        return _result(rule, source_value, candidate_value, "pass", "exact")

    if direction == "lte":
        passes = cand_num <= src_num
        is_better = cand_num < src_num
    else:
        passes = cand_num >= src_num
        is_better = cand_num > src_num

    if not passes:
        return _result(rule, source_value, candidate_value, "fail", "worse")
    return _result(rule, source_value, candidate_value, "pass", "better" if is_better else "exact")


def evaluate_threshold(
    rule: MatchingRule,
    source: ParametricAttribute | None,
    candidate: ParametricAttribute | None,
) -> RuleEvaluationResult:
    """Numeric comparison in the rule's direction (default gte)."""
    direction = rule.threshold_direction if isinstance(rule, ThresholdRule) else "gte"
    return _evaluate_threshold(rule, source, candidate, direction)


def evaluate_fit(
    rule: MatchingRule,
    source: ParametricAttribute | None,
    candidate: ParametricAttribute | None,
) -> RuleEvaluationResult:
    """Dimensional fit: threshold with the direction forced to lte."""
    return _evaluate_threshold(rule, source, candidate, "lte")


# =============================================================================
# REVIEW / OPERATIONAL
# =============================================================================


def evaluate_application_review(
    rule: MatchingRule,
    source: ParametricAttribute | None,
    candidate: ParametricAttribute | None,
) -> RuleEvaluationResult:
    """Never computable: always flagged for an engineer, with the rule's reason as note."""
    source_value, candidate_value = _values(source, candidate)
    return _result(
        rule, source_value, candidate_value, "review", "compatible",
        rule.engineering_reason or None,
    )


def evaluate_operational(
    rule: MatchingRule,
    source: ParametricAttribute | None,
    candidate: ParametricAttribute | None,
) -> RuleEvaluationResult:
    """Informational only (packaging, supply chain). Never blocks."""
    source_value, candidate_value = _values(source, candidate)
    if normalize(source_value) == normalize(candidate_value):
        return _result(rule, source_value, candidate_value, "info", "exact")
    return _result(
        rule, source_value, candidate_value, "info", "compatible",
        "Verify packaging compatibility with production line",
    )


# =============================================================================
# DISPATCH
# =============================================================================

EVALUATORS: dict[str, RuleEvaluator] = {
    "identity": evaluate_identity,
    "identity_upgrade": evaluate_identity_upgrade,
    "identity_flag": evaluate_identity_flag,
    "threshold": evaluate_threshold,
    "fit": evaluate_fit,
    "application_review": evaluate_application_review,
    "operational": evaluate_operational,
}


def evaluate_rule(
    rule: MatchingRule,
    source: ParametricAttribute | None,
    candidate: ParametricAttribute | None,
) -> RuleEvaluationResult:
    """Evaluate one rule with the strategy registered for its logic type."""
    evaluator = EVALUATORS.get(rule.logic_type)
    if evaluator is None:
        raise TypeError(f"No evaluator for logic type {rule.logic_type!r} ({type(rule).__name__})")
    return evaluator(rule, source, candidate)
