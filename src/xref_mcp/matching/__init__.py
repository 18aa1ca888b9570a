"""Matching package: rule evaluation, candidate scoring and context reweighting.

Everything here is pure and synchronous. Inputs are treated as immutable;
the context modifier returns a new table rather than editing the one passed in.
"""

from .context import apply_context_to_logic_table
from .engine import detect_missing_attributes, evaluate_candidate, find_replacements, to_recommendation
from .rules import EVALUATORS, evaluate_rule, hierarchy_index

__all__ = [
    # Engine
    "evaluate_candidate",
    "find_replacements",
    "to_recommendation",
    "detect_missing_attributes",
    # Rules
    "evaluate_rule",
    "hierarchy_index",
    "EVALUATORS",
    # Context
    "apply_context_to_logic_table",
]
