"""Value parsers for normalized component attribute strings.

Every parser here is total: unparseable or empty input yields None (or False
for booleans), never an exception. Callers treat None as "could not compare"
and fall back to the conservative outcome for the rule being evaluated.
"""

import re

from .models import ParametricAttribute


# =============================================================================
# PRE-COMPILED REGEX PATTERNS
# =============================================================================

_NUMBER_PATTERN = re.compile(r"([-+]?\d*\.?\d+)")
_TOLERANCE_PATTERN = re.compile(r"±?\s*(\d+\.?\d*)\s*%")
_TEMP_RANGE_PATTERN = re.compile(
    r"([-+]?\d+(?:\.\d+)?)\s*[°℃]?\s*C?\s*(?:~|to)\s*([-+]?\d+(?:\.\d+)?)\s*[°℃]?\s*C?",
    re.IGNORECASE,
)
_MSL_PATTERN = re.compile(r"(\d)")
_WHITESPACE_PATTERN = re.compile(r"\s+")

_TRUTHY_VALUES = {"yes", "true", "1", "required"}


# =============================================================================
# PARSERS
# =============================================================================


def get_numeric(param: ParametricAttribute | None) -> float | None:
    """Numeric value of an attribute: precomputed numeric_value, else first number in value."""
    if param is None:
        return None
    if param.numeric_value is not None:
        return param.numeric_value
    if not param.value:
        return None
    match = _NUMBER_PATTERN.search(param.value)
    return float(match.group(1)) if match else None


def parse_tolerance(s: str) -> float | None:
    """Parse tolerance: '±10%' -> 10, '±0.5%' -> 0.5, '5%' -> 5"""
    if not s:
        return None
    match = _TOLERANCE_PATTERN.search(s)
    return float(match.group(1)) if match else None


def parse_temp_range(s: str) -> tuple[float, float] | None:
    """Parse temperature range: '-55°C ~ 125°C' -> (-55, 125), '-40C to 85C' -> (-40, 85)"""
    if not s:
        return None
    match = _TEMP_RANGE_PATTERN.search(s)
    if not match:
        return None
    return float(match.group(1)), float(match.group(2))


def parse_msl(s: str) -> int | None:
    """Parse moisture sensitivity level: 'MSL 1' -> 1, '3 (168 Hours)' -> 3"""
    if not s:
        return None
    match = _MSL_PATTERN.search(s)
    return int(match.group(1)) if match else None


def parse_boolean(s: str) -> bool:
    """Parse yes/no style flags. Only yes/true/1/required count as set."""
    if not s:
        return False
    return s.strip().lower() in _TRUTHY_VALUES


def normalize(s: str) -> str:
    """Normalize for string equality: trim, collapse whitespace, upper-case."""
    if not s:
        return ""
    return _WHITESPACE_PATTERN.sub(" ", s.strip()).upper()
