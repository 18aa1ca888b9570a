"""Candidate scoring, replacement ranking and missing-attribute detection."""

import logging
import math

from ..config import MAX_ADVISORY_NOTES, OPERATIONAL_MISMATCH_CREDIT, REVIEW_CREDIT
from ..models import (
    CandidateEvaluation,
    LogicTable,
    MatchDetail,
    MissingAttributeInfo,
    PartAttributes,
    Recommendation,
    RuleEvaluationResult,
)
from .rules import evaluate_rule

logger = logging.getLogger(__name__)

# Rule kinds that never gate pass/fail and are not "matchable" data
NON_BLOCKING_LOGIC_TYPES = ("application_review", "operational")


# =============================================================================
# CANDIDATE EVALUATION
# =============================================================================


def _earned_weight(logic_type: str, weight: int, result: RuleEvaluationResult) -> float:
    if logic_type == "application_review":
        return weight * REVIEW_CREDIT
    if logic_type == "operational":
        return weight if result.match_status == "exact" else weight * OPERATIONAL_MISMATCH_CREDIT
    if result.result in ("pass", "upgrade"):
        return weight
    if result.result == "review":
        return weight * REVIEW_CREDIT
    return 0


def evaluate_candidate(
    logic_table: LogicTable, source: PartAttributes, candidate: PartAttributes
) -> CandidateEvaluation:
    """Evaluate every rule for one candidate and fold the results.

    ``passed`` is a gate: any hard failure on a matchable rule fails the
    candidate whatever its match percentage. ``match_percentage`` is the
    weighted share of earned credit and is only a ranking signal.
    """
    source_map = source.attribute_map()
    candidate_map = candidate.attribute_map()

    results: list[RuleEvaluationResult] = []
    review_flags: list[str] = []
    notes: list[str] = []

    total_weight = 0
    earned_weight = 0.0
    has_hard_failure = False

    for rule in logic_table.rules:
        result = evaluate_rule(
            rule,
            source_map.get(rule.attribute_id),
            candidate_map.get(rule.attribute_id),
        )
        results.append(result)

        total_weight += rule.weight
        earned_weight += _earned_weight(rule.logic_type, rule.weight, result)

        if rule.logic_type not in NON_BLOCKING_LOGIC_TYPES and result.result == "fail":
            has_hard_failure = True
        if result.result == "review":
            review_flags.append(rule.attribute_name)
        if result.note:
            notes.append(result.note)

    match_percentage = 0
    if total_weight > 0:
        # Round half up; earned never exceeds total
        match_percentage = math.floor(earned_weight / total_weight * 100 + 0.5)

    return CandidateEvaluation(
        candidate=candidate,
        match_percentage=match_percentage,
        passed=not has_hard_failure,
        results=results,
        review_flags=review_flags,
        notes=notes,
    )


# =============================================================================
# RANKING
# =============================================================================


def _advisory_notes(evaluation: CandidateEvaluation) -> str | None:
    parts: list[str] = []
    if not evaluation.passed:
        parts.append("Has failing attributes")
    if evaluation.review_flags:
        parts.append(f"Needs review: {', '.join(evaluation.review_flags)}")
    unique_notes = list(dict.fromkeys(evaluation.notes))
    parts.extend(unique_notes[:MAX_ADVISORY_NOTES])
    return " | ".join(parts) if parts else None


def to_recommendation(evaluation: CandidateEvaluation) -> Recommendation:
    """Convert an evaluation into the ranked-list record."""
    details = [
        MatchDetail(
            parameter_id=r.attribute_id,
            parameter_name=r.attribute_name,
            source_value=r.source_value,
            replacement_value=r.candidate_value,
            match_status=r.match_status,
            rule_result=r.result,
            note=r.note,
        )
        for r in evaluation.results
    ]
    return Recommendation(
        part=evaluation.candidate.part,
        match_percentage=evaluation.match_percentage,
        passed=evaluation.passed,
        match_details=details,
        notes=_advisory_notes(evaluation),
    )


def find_replacements(
    logic_table: LogicTable, source: PartAttributes, candidates: list[PartAttributes]
) -> list[Recommendation]:
    """Evaluate candidates and rank them: passed first, then by match percentage.

    The source part itself is dropped from the candidates. Ties keep input order.
    """
    evaluations = []
    for candidate in candidates:
        if candidate.part.mpn == source.part.mpn:
            logger.debug(f"Skipping source part {source.part.mpn} in candidate list")
            continue
        evaluations.append(evaluate_candidate(logic_table, source, candidate))

    # sorted() is stable, so equal keys keep input order
    ranked = sorted(evaluations, key=lambda e: (not e.passed, -e.match_percentage))
    return [to_recommendation(e) for e in ranked]


# =============================================================================
# MISSING ATTRIBUTE DETECTION
# =============================================================================


def detect_missing_attributes(
    attributes: PartAttributes, logic_table: LogicTable
) -> list[MissingAttributeInfo]:
    """Matchable rules whose attribute the part has no value for, heaviest first."""
    param_ids = {p.parameter_id for p in attributes.parameters}
    missing = [
        rule
        for rule in logic_table.rules
        if rule.logic_type not in NON_BLOCKING_LOGIC_TYPES and rule.attribute_id not in param_ids
    ]
    missing.sort(key=lambda r: r.weight, reverse=True)
    return [
        MissingAttributeInfo(
            attribute_id=rule.attribute_id,
            attribute_name=rule.attribute_name,
            logic_type=rule.logic_type,
            weight=rule.weight,
        )
        for rule in missing
    ]
