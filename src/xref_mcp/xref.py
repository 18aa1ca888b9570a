"""Replacement request orchestration.

Resolves the logic table for a source part, applies application context,
ranks the candidates and shapes the JSON response. Errors the caller can fix
come back as ``{"error": ..., "hint": ...}`` dicts rather than exceptions.
"""

import logging
from typing import Any

from .catalog import (
    SUBCATEGORY_TO_FAMILY,
    classify_family,
    get_context_questions_for_family,
    get_logic_table,
)
from .config import MAX_CANDIDATES
from .matching import apply_context_to_logic_table, detect_missing_attributes, find_replacements
from .models import ApplicationContext, LogicTable, PartAttributes
from .recorder import NullRecorder, RecommendationRecorder, safe_record

logger = logging.getLogger(__name__)


def resolve_family_id(source: PartAttributes, family_id: str | None = None) -> str | None:
    """Family for a source part: explicit id first, else subcategory plus classifier."""
    if family_id:
        return family_id
    base_family_id = SUBCATEGORY_TO_FAMILY.get(source.part.subcategory)
    if base_family_id is None:
        return None
    return classify_family(base_family_id, source)


def _unsupported_family_error(source: PartAttributes, resolved_id: str | None, explicit: bool) -> dict[str, Any]:
    subcategory = source.part.subcategory or "(none)"
    if resolved_id is None:
        return {
            "error": f"Subcategory not supported: '{subcategory}'",
            "hint": "Pass family_id explicitly, or use list_families() to see supported families",
        }
    error = f"No logic table for family '{resolved_id}'"
    if not explicit:
        error += f" (resolved from subcategory '{subcategory}')"
    return {"error": error, "hint": "Use list_families() to see supported family ids"}


def _changed_attributes(before: LogicTable, after: LogicTable) -> list[str]:
    """Attribute ids whose rule differs between two tables of the same family."""
    before_rules = {r.attribute_id: r.to_dict() for r in before.rules}
    return [
        r.attribute_id
        for r in after.rules
        if before_rules.get(r.attribute_id) != r.to_dict()
    ]


def _summary_message(found: int, passed: int) -> str:
    if found == 0:
        return "No candidates to evaluate"
    if passed == 0:
        return f"Evaluated {found} candidates, none passed all hard rules"
    return f"Evaluated {found} candidates, {passed} passed all hard rules"


def build_replacement_response(
    source: PartAttributes,
    candidates: list[PartAttributes],
    family_id: str | None = None,
    answers: dict[str, str] | None = None,
    recorder: RecommendationRecorder | None = None,
) -> dict[str, Any]:
    """Rank ``candidates`` as replacements for ``source``.

    Args:
        source: Part being replaced
        candidates: Parts to evaluate (the source itself is skipped)
        family_id: Logic table to use. Resolved from the source's subcategory when omitted
        answers: Application-context answers (question_id -> option value)
        recorder: Receives one snapshot of the response. Defaults to no recording

    Returns:
        Response dict, or an error dict with a hint.
    """
    if len(candidates) > MAX_CANDIDATES:
        return {
            "error": f"Too many candidates ({len(candidates)}, max {MAX_CANDIDATES})",
            "hint": "Pre-filter candidates by package or value before ranking",
        }

    resolved_id = resolve_family_id(source, family_id)
    logic_table = get_logic_table(resolved_id) if resolved_id else None
    if logic_table is None:
        logger.debug(f"No logic table for {source.part.mpn} (family {resolved_id!r})")
        return _unsupported_family_error(source, resolved_id, explicit=bool(family_id))

    context_applied: dict[str, Any] | None = None
    if answers:
        config = get_context_questions_for_family(logic_table.family_id)
        if config is not None:
            context = ApplicationContext(family_id=logic_table.family_id, answers=answers)
            contextual = apply_context_to_logic_table(logic_table, context, config)
            context_applied = {
                "answers": dict(answers),
                "changed_attributes": _changed_attributes(logic_table, contextual),
            }
            logic_table = contextual
        else:
            logger.debug(f"Family {logic_table.family_id} has no context questions, ignoring answers")

    recommendations = find_replacements(logic_table, source, candidates)
    missing = detect_missing_attributes(source, logic_table)
    passed = sum(1 for r in recommendations if r.passed)

    response = {
        "source": source.part.to_dict(),
        "family": {
            "family_id": logic_table.family_id,
            "family_name": logic_table.family_name,
            "category": logic_table.category,
        },
        "recommendations": [r.to_dict() for r in recommendations],
        "summary": {
            "found": len(recommendations),
            "passed": passed,
            "message": _summary_message(len(recommendations), passed),
        },
        "missing_attributes": [m.to_dict() for m in missing],
        "context_applied": context_applied,
    }

    safe_record(
        recorder or NullRecorder(),
        {
            "source": response["source"],
            "family_id": logic_table.family_id,
            "context": context_applied,
            "recommendations": response["recommendations"],
        },
    )
    return response
