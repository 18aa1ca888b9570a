"""Built-in family catalog: logic tables, context questions and lookups."""

from ..models import FamilyContextConfig, LogicTable, PartAttributes
from .classifier import CLASSIFIER_RULES, classify_family
from .context_questions import CONTEXT_CONFIGS
from .delta import LogicTableDelta, RuleOverride, build_derived_logic_table, delta_from_dict
from .logic_tables import LOGIC_TABLES, SUBCATEGORY_TO_FAMILY


def get_logic_table(family_id: str) -> LogicTable | None:
    return LOGIC_TABLES.get(family_id)


def get_logic_table_for_subcategory(
    subcategory: str, attrs: PartAttributes | None = None
) -> LogicTable | None:
    """Logic table for a supplier subcategory.

    When attributes are given, the classifier may pick a variant family
    (e.g. current sense resistors within chip resistors). Returns None when the
    subcategory is unknown or the resolved family has no table.
    """
    base_family_id = SUBCATEGORY_TO_FAMILY.get(subcategory)
    if base_family_id is None:
        return None
    if attrs is not None:
        return get_logic_table(classify_family(base_family_id, attrs))
    return get_logic_table(base_family_id)


def get_context_questions_for_family(family_id: str) -> FamilyContextConfig | None:
    for config in CONTEXT_CONFIGS:
        if family_id in config.family_ids:
            return config
    return None


def get_all_logic_tables() -> list[LogicTable]:
    return list(LOGIC_TABLES.values())


def is_family_supported(subcategory: str) -> bool:
    """Whether a supplier subcategory maps to a catalog family."""
    return subcategory in SUBCATEGORY_TO_FAMILY


def get_supported_family_names() -> list[str]:
    """Human-readable family names, deduplicated, in registry order."""
    return list(dict.fromkeys(t.family_name for t in LOGIC_TABLES.values()))


__all__ = [
    # Registry
    "get_logic_table",
    "get_logic_table_for_subcategory",
    "get_context_questions_for_family",
    "get_all_logic_tables",
    "is_family_supported",
    "get_supported_family_names",
    "LOGIC_TABLES",
    "SUBCATEGORY_TO_FAMILY",
    "CONTEXT_CONFIGS",
    # Classifier
    "classify_family",
    "CLASSIFIER_RULES",
    # Delta builder
    "build_derived_logic_table",
    "delta_from_dict",
    "LogicTableDelta",
    "RuleOverride",
]
