"""Tests for per-rule comparison strategies."""

import pytest

from xref_mcp.matching.rules import EVALUATORS, evaluate_rule, hierarchy_index
from xref_mcp.models import (
    LOGIC_TYPES,
    ApplicationReviewRule,
    FitRule,
    IdentityFlagRule,
    IdentityRule,
    IdentityUpgradeRule,
    MatchingRule,
    OperationalRule,
    ParametricAttribute,
    ThresholdRule,
)


def _param(value: str, parameter_id: str = "x", numeric_value: float | None = None) -> ParametricAttribute:
    return ParametricAttribute(parameter_id, parameter_id, value, numeric_value=numeric_value)


RECOVERY = ["Ultrafast", "Fast", "Standard"]


class TestDispatch:
    """Every logic type has exactly one evaluator."""

    def test_all_logic_types_registered(self):
        assert set(EVALUATORS) == set(LOGIC_TYPES)

    def test_untagged_rule_raises(self):
        with pytest.raises(TypeError):
            evaluate_rule(MatchingRule("x", "X", 5), _param("1"), _param("1"))

    def test_result_carries_rule_identity(self):
        rule = ThresholdRule("power_rating", "Power Rating", 9)
        result = evaluate_rule(rule, _param("0.1W"), _param("0.125W"))
        assert result.attribute_id == "power_rating"
        assert result.attribute_name == "Power Rating"
        assert result.logic_type == "threshold"


class TestIdentity:
    """Tests for identity rules."""

    RULE = IdentityRule("package_case", "Package", 10)

    @pytest.mark.parametrize("rule", [
        IdentityRule("x", "X", 10),
        IdentityUpgradeRule("x", "X", 10, upgrade_hierarchy=RECOVERY),
        IdentityFlagRule("x", "X", 10),
    ])
    @pytest.mark.parametrize("candidate", [None, "Fast", "Yes", "0402"])
    def test_source_absent_always_passes(self, rule, candidate):
        cand = _param(candidate) if candidate is not None else None
        assert evaluate_rule(rule, None, cand).result == "pass"

    def test_candidate_absent_fails(self):
        result = evaluate_rule(self.RULE, _param("0402"), None)
        assert result.result == "fail"
        assert result.match_status == "different"
        assert result.candidate_value == "N/A"
        assert result.note == "Missing attribute data"

    def test_both_absent_passes_with_missing_note(self):
        result = evaluate_rule(self.RULE, None, None)
        assert (result.result, result.match_status) == ("pass", "exact")
        assert result.note == "Missing attribute data"

    def test_source_absent_candidate_present_has_no_note(self):
        assert evaluate_rule(self.RULE, None, _param("0402")).note is None

    def test_normalized_string_match(self):
        result = evaluate_rule(self.RULE, _param("sot-23 "), _param("SOT-23"))
        assert (result.result, result.match_status) == ("pass", "exact")

    def test_numeric_match_ignores_formatting(self):
        result = evaluate_rule(self.RULE, _param("10k", numeric_value=10000), _param("10.0kΩ", numeric_value=10000))
        assert result.result == "pass"

    def test_numeric_mismatch(self):
        result = evaluate_rule(self.RULE, _param("10kΩ", numeric_value=10000), _param("4.7kΩ", numeric_value=4700))
        assert (result.result, result.match_status) == ("fail", "different")

    def test_string_mismatch(self):
        result = evaluate_rule(self.RULE, _param("SOT-23"), _param("SOT-223"))
        assert result.result == "fail"


class TestIdentityUpgrade:
    """Tests for identity_upgrade rules."""

    RULE = IdentityUpgradeRule("recovery", "Recovery", 5, upgrade_hierarchy=RECOVERY)

    @pytest.mark.parametrize("candidate,result,status", [
        ("Fast", "upgrade", "better"),
        ("Standard", "pass", "exact"),
        ("Ultrafast", "upgrade", "better"),
    ])
    def test_from_standard(self, candidate: str, result: str, status: str):
        r = evaluate_rule(self.RULE, _param("Standard"), _param(candidate))
        assert (r.result, r.match_status) == (result, status)

    @pytest.mark.parametrize("source", ["Fast", "Ultrafast"])
    def test_swapped_roles_is_downgrade(self, source: str):
        r = evaluate_rule(self.RULE, _param(source), _param("Standard"))
        assert (r.result, r.match_status) == ("fail", "worse")
        assert r.note == f"Downgrade from {source} to Standard not allowed"

    def test_upgrade_note(self):
        r = evaluate_rule(self.RULE, _param("Standard"), _param("Fast"))
        assert r.note == "Upgraded from Standard to Fast"

    def test_neither_in_hierarchy_exact_match(self):
        r = evaluate_rule(self.RULE, _param("Schottky"), _param("schottky"))
        assert (r.result, r.match_status) == ("pass", "exact")

    def test_neither_in_hierarchy_mismatch(self):
        r = evaluate_rule(self.RULE, _param("Schottky"), _param("Zener"))
        assert (r.result, r.match_status) == ("fail", "different")

    def test_one_side_unknown_fails(self):
        r = evaluate_rule(self.RULE, _param("Standard"), _param("Schottky"))
        assert (r.result, r.match_status) == ("fail", "different")
        assert r.note == "Cannot determine hierarchy position"

    def test_candidate_absent_fails_without_note(self):
        r = evaluate_rule(self.RULE, _param("Standard"), None)
        assert (r.result, r.match_status) == ("fail", "different")
        assert r.note is None

    def test_first_listed_tier_wins_on_overlap(self):
        rule = IdentityUpgradeRule("shielding", "Shielding", 5, upgrade_hierarchy=["Shielded", "Semi-Shielded", "Unshielded"])
        r = evaluate_rule(rule, _param("Shielded"), _param("Semi-Shielded"))
        assert (r.result, r.match_status) == ("pass", "exact")


class TestHierarchyIndex:
    """Tests for hierarchy_index lookup."""

    @pytest.mark.parametrize("value,expected", [
        ("Fast", 1),
        ("  ultrafast ", 0),
        ("Fast Recovery", 1),
        ("Schottky", -1),
        ("", -1),
    ])
    def test_lookup(self, value: str, expected: int):
        assert hierarchy_index(value, RECOVERY) == expected

    def test_first_contained_entry_wins(self):
        assert hierarchy_index("Semi-Shielded", ["Shielded", "Semi-Shielded"]) == 0
        assert hierarchy_index("Semi-Shielded", ["Semi-Shielded", "Shielded"]) == 0
        assert hierarchy_index("Shielded", ["Semi-Shielded", "Shielded"]) == 1

    def test_substring_match(self):
        assert hierarchy_index("C0G (NP0)", ["C0G", "X7R", "X5R"]) == 0


class TestIdentityFlag:
    """Tests for identity_flag rules."""

    RULE = IdentityFlagRule("aec_q200", "AEC-Q200", 8)

    def test_required_but_missing(self):
        r = evaluate_rule(self.RULE, _param("Yes"), _param("No"))
        assert (r.result, r.match_status) == ("fail", "worse")
        assert r.note == "Original requires AEC-Q200, replacement does not have it"

    def test_required_and_absent_candidate(self):
        r = evaluate_rule(self.RULE, _param("Yes"), None)
        assert r.result == "fail"
        assert r.candidate_value == "No"

    def test_not_required_candidate_has_it(self):
        r = evaluate_rule(self.RULE, _param("No"), _param("Yes"))
        assert (r.result, r.match_status) == ("pass", "better")
        assert r.note == "Replacement has AEC-Q200 (not required by original)"

    @pytest.mark.parametrize("source,candidate", [("Yes", "true"), ("No", "No"), ("No", "")])
    def test_same_flag(self, source: str, candidate: str):
        r = evaluate_rule(self.RULE, _param(source), _param(candidate))
        assert (r.result, r.match_status) == ("pass", "exact")


class TestThreshold:
    """Tests for threshold rules."""

    GTE = ThresholdRule("power_rating", "Power", 9, threshold_direction="gte")
    LTE = ThresholdRule("dcr", "DCR", 7, threshold_direction="lte")
    RANGE = ThresholdRule("operating_temp", "Temp", 7, threshold_direction="range_superset")

    @pytest.mark.parametrize("candidate,result,status", [
        ("0.1W", "pass", "exact"),
        ("0.25W", "pass", "better"),
        ("0.063W", "fail", "worse"),
    ])
    def test_gte(self, candidate: str, result: str, status: str):
        r = evaluate_rule(self.GTE, _param("0.1W"), _param(candidate))
        assert (r.result, r.match_status) == (result, status)

    @pytest.mark.parametrize("candidate,result,status", [
        ("150mΩ", "pass", "exact"),
        ("90mΩ", "pass", "better"),
        ("300mΩ", "fail", "worse"),
    ])
    def test_lte(self, candidate: str, result: str, status: str):
        r = evaluate_rule(self.LTE, _param("150mΩ"), _param(candidate))
        assert (r.result, r.match_status) == (result, status)

    def test_default_direction_is_gte(self):
        rule = ThresholdRule("voltage_rated", "Voltage", 8)
        assert evaluate_rule(rule, _param("50V"), _param("25V")).result == "fail"

    def test_candidate_absent_is_review(self):
        r = evaluate_rule(self.GTE, _param("0.1W"), None)
        assert (r.result, r.match_status) == ("review", "different")
        assert r.note == "Missing attribute data"

    def test_source_absent_passes(self):
        assert evaluate_rule(self.GTE, None, _param("0.1W")).result == "pass"

    def test_both_absent_passes_with_missing_note(self):
        r = evaluate_rule(self.GTE, None, None)
        assert (r.result, r.match_status) == ("pass", "exact")
        assert r.note == "Missing attribute data"

    def test_unparseable_equal_strings_pass(self):
        r = evaluate_rule(self.GTE, _param("High"), _param("high"))
        assert (r.result, r.match_status) == ("pass", "exact")

    def test_unparseable_different_strings_review(self):
        r = evaluate_rule(self.GTE, _param("High"), _param("0.5W"))
        assert (r.result, r.match_status) == ("review", "compatible")
        assert r.note == "Could not parse numeric values for threshold comparison"

    @pytest.mark.parametrize("candidate,result,status", [
        ("-55°C ~ 125°C", "pass", "exact"),
        ("-55°C ~ 155°C", "pass", "better"),
        ("-40°C ~ 125°C", "fail", "worse"),
        ("-65°C to 150°C", "pass", "better"),
    ])
    def test_range_superset(self, candidate: str, result: str, status: str):
        r = evaluate_rule(self.RANGE, _param("-55°C ~ 125°C"), _param(candidate))
        assert (r.result, r.match_status) == (result, status)

    def test_range_unparseable(self):
        r = evaluate_rule(self.RANGE, _param("-55°C ~ 125°C"), _param("Industrial"))
        assert r.result == "review"
        assert r.note == "Could not parse temperature range for comparison"

    @pytest.mark.parametrize("candidate,result,status", [
        ("±1%", "pass", "exact"),
        ("±0.5%", "pass", "better"),
        ("±5%", "fail", "worse"),
    ])
    def test_tolerance_lower_is_better(self, candidate: str, result: str, status: str):
        # Direction on the rule is ignored for tolerance
        rule = ThresholdRule("tolerance", "Tolerance", 7, threshold_direction="gte")
        r = evaluate_rule(rule, _param("±1%"), _param(candidate))
        assert (r.result, r.match_status) == (result, status)

    def test_tolerance_unparseable(self):
        rule = ThresholdRule("tolerance", "Tolerance", 7, threshold_direction="lte")
        r = evaluate_rule(rule, _param("±1%"), _param("tight"))
        assert (r.result, r.match_status) == ("review", "compatible")
        assert r.note == "Could not parse tolerance values"

    @pytest.mark.parametrize("candidate,result,status", [
        ("MSL 3", "pass", "exact"),
        ("1 (Unlimited)", "pass", "better"),
        ("MSL 5", "fail", "worse"),
    ])
    def test_msl_lower_is_better(self, candidate: str, result: str, status: str):
        rule = ThresholdRule("msl", "MSL", 3, threshold_direction="lte")
        r = evaluate_rule(rule, _param("MSL 3"), _param(candidate))
        assert (r.result, r.match_status) == (result, status)

    def test_msl_unparseable(self):
        rule = ThresholdRule("msl", "MSL", 3, threshold_direction="lte")
        r = evaluate_rule(rule, _param("MSL 3"), _param("Not Applicable"))
        assert (r.result, r.match_status) == ("review", "compatible")


class TestFit:
    """Fit rules always compare candidate <= original."""

    RULE = FitRule("height", "Height", 5)

    @pytest.mark.parametrize("candidate,result,status", [
        ("0.55mm", "pass", "exact"),
        ("0.35mm", "pass", "better"),
        ("0.8mm", "fail", "worse"),
    ])
    def test_fit(self, candidate: str, result: str, status: str):
        r = evaluate_rule(self.RULE, _param("0.55mm"), _param(candidate))
        assert (r.result, r.match_status) == (result, status)


class TestReviewAndOperational:
    """Tests for application_review and operational rules."""

    def test_application_review_always_review(self):
        rule = ApplicationReviewRule("impedance_curve", "Curve", 8, engineering_reason="Compare datasheets.")
        r = evaluate_rule(rule, _param("a"), _param("a"))
        assert (r.result, r.match_status) == ("review", "compatible")
        assert r.note == "Compare datasheets."

    def test_application_review_without_reason(self):
        rule = ApplicationReviewRule("impedance_curve", "Curve", 8)
        r = evaluate_rule(rule, None, None)
        assert r.note is None
        assert (r.source_value, r.candidate_value) == ("N/A", "N/A")

    def test_operational_same(self):
        rule = OperationalRule("packaging", "Packaging", 2)
        r = evaluate_rule(rule, _param("Tape & Reel"), _param("tape &  reel"))
        assert (r.result, r.match_status) == ("info", "exact")
        assert r.note is None

    def test_operational_different(self):
        rule = OperationalRule("packaging", "Packaging", 2)
        r = evaluate_rule(rule, _param("Tape & Reel"), _param("Bulk"))
        assert (r.result, r.match_status) == ("info", "compatible")
        assert r.note == "Verify packaging compatibility with production line"
