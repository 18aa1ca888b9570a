"""Variant family detection from part attributes.

A supplier subcategory only identifies a base family (e.g. chip resistors).
Some parts in it belong to a variant with its own logic table: current sense
resistors, chassis mount resistors or through-hole resistors.
Classifier rules are ordered most-specific-first within each base family and
only fire for their own base, so one family's heuristics never leak into
another's.
"""

import re
from dataclasses import dataclass
from typing import Callable

from ..models import PartAttributes
from ..parsers import get_numeric

_POWER_PACKAGE_PATTERN = re.compile(r"TO-220|TO-247|TO-263|D.?PAK", re.IGNORECASE)
_SMD_CHIP_SIZE_PATTERN = re.compile(r"^(0[1-9]\d{2}|1[0-9]\d{2}|2[0-5]\d{2})$")


@dataclass
class ClassifierRule:
    variant_family_id: str
    base_family_id: str
    matches: Callable[[PartAttributes], bool]


def _numeric(attrs: PartAttributes, parameter_id: str) -> float | None:
    return get_numeric(attrs.find(parameter_id))


def _text(attrs: PartAttributes, parameter_id: str) -> str:
    param = attrs.find(parameter_id)
    return param.value if param is not None else ""


def _is_current_sense(attrs: PartAttributes) -> bool:
    """Very low resistance plus an explicit sensing indicator."""
    resistance = _numeric(attrs, "resistance")
    desc = attrs.part.description.lower()
    is_low_value = resistance is not None and resistance <= 1
    is_sensing = "current sense" in desc or "4-terminal" in desc or "kelvin" in desc
    return is_low_value and is_sensing


def _is_chassis_mount(attrs: PartAttributes) -> bool:
    """Power package, chassis keyword, or high power in a non-chip package."""
    power = _numeric(attrs, "power_rating")
    pkg = _text(attrs, "package_case").upper()
    desc = attrs.part.description.lower()
    is_power_package = bool(_POWER_PACKAGE_PATTERN.search(pkg))
    is_smd_chip = bool(_SMD_CHIP_SIZE_PATTERN.match(re.sub(r"\s", "", pkg)))
    is_high_power = power is not None and power >= 5
    is_chassis_keyword = "chassis mount" in desc or "chassis-mount" in desc
    return is_power_package or is_chassis_keyword or (is_high_power and not is_smd_chip)


def _is_through_hole(attrs: PartAttributes) -> bool:
    desc = attrs.part.description.lower()
    mount = _text(attrs, "mounting_type").lower()
    return (
        "through hole" in mount or "axial" in mount
        or "through hole" in desc or "axial" in desc
    )


CLASSIFIER_RULES: list[ClassifierRule] = [
    # Resistor variants (base 52). Ferrite beads (70) have none.
    ClassifierRule("54", "52", _is_current_sense),
    ClassifierRule("55", "52", _is_chassis_mount),
    ClassifierRule("53", "52", _is_through_hole),
]


def classify_family(base_family_id: str, attrs: PartAttributes) -> str:
    """Most specific family id for a part, or the base id when no variant matches."""
    for rule in CLASSIFIER_RULES:
        if rule.base_family_id == base_family_id and rule.matches(attrs):
            return rule.variant_family_id
    return base_family_id
