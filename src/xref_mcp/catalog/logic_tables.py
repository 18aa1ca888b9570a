"""Built-in logic tables, keyed by family id.

Base tables are written out in full. Variant families are deltas applied to
their base table with build_derived_logic_table().

Family ids follow the supplier's family numbering (52 = chip resistors,
70 = ferrite beads, ...).
"""

from typing import Any

from ..models import LogicTable
from .delta import build_derived_logic_table, delta_from_dict


# =============================================================================
# BASE TABLES
# =============================================================================

CHIP_RESISTORS: dict[str, Any] = {
    "family_id": "52",
    "family_name": "Chip Resistors (Surface Mount)",
    "category": "Passives",
    "description": "Hard logic filters for chip resistor replacement part validation",
    "rules": [
        {
            "attribute_id": "resistance",
            "attribute_name": "Resistance",
            "logic_type": "identity",
            "weight": 10,
            "engineering_reason": "Resistance must match exactly. Normalize E-series values before comparison.",
            "sort_order": 1,
        },
        {
            "attribute_id": "package_case",
            "attribute_name": "Package / Case",
            "logic_type": "identity",
            "weight": 10,
            "engineering_reason": "Footprint must match. 0402, 0603 and 0805 pads are not interchangeable without a board change.",
            "sort_order": 2,
        },
        {
            "attribute_id": "tolerance",
            "attribute_name": "Tolerance",
            "logic_type": "threshold",
            "threshold_direction": "lte",
            "weight": 7,
            "engineering_reason": "Tighter tolerance is always acceptable: ±1% can replace ±5%, not the reverse.",
            "sort_order": 3,
        },
        {
            "attribute_id": "power_rating",
            "attribute_name": "Power Rating",
            "logic_type": "threshold",
            "threshold_direction": "gte",
            "weight": 9,
            "engineering_reason": "Replacement must dissipate at least the original's power. Derating curves differ between vendors.",
            "sort_order": 4,
        },
        {
            "attribute_id": "voltage_rated",
            "attribute_name": "Voltage Rating",
            "logic_type": "threshold",
            "threshold_direction": "gte",
            "weight": 8,
            "engineering_reason": "Replacement must handle at least the original working voltage.",
            "sort_order": 5,
        },
        {
            "attribute_id": "tcr",
            "attribute_name": "Temperature Coefficient (TCR)",
            "logic_type": "threshold",
            "threshold_direction": "lte",
            "weight": 6,
            "engineering_reason": "Lower TCR is more stable over temperature. Critical in precision analog circuits.",
            "sort_order": 6,
        },
        {
            "attribute_id": "composition",
            "attribute_name": "Composition / Technology",
            "logic_type": "identity_upgrade",
            "upgrade_hierarchy": ["Thin Film", "Thick Film"],
            "weight": 5,
            "engineering_reason": "Thin film has better precision, lower noise and tighter TCR than thick film.",
            "sort_order": 7,
        },
        {
            "attribute_id": "operating_temp",
            "attribute_name": "Operating Temp Range",
            "logic_type": "threshold",
            "threshold_direction": "range_superset",
            "weight": 7,
            "engineering_reason": "Replacement must cover the full operating temperature range of the original.",
            "sort_order": 8,
        },
        {
            "attribute_id": "height",
            "attribute_name": "Height (Seated Max)",
            "logic_type": "fit",
            "weight": 5,
            "engineering_reason": "A taller part may not fit tight enclosures or stacked boards.",
            "sort_order": 9,
        },
        {
            "attribute_id": "msl",
            "attribute_name": "Moisture Sensitivity Level",
            "logic_type": "threshold",
            "threshold_direction": "lte",
            "weight": 3,
            "engineering_reason": "MSL 1 (unlimited floor life) is best. A lower level is always acceptable.",
            "sort_order": 10,
        },
        {
            "attribute_id": "aec_q200",
            "attribute_name": "AEC-Q200 Qualification",
            "logic_type": "identity_flag",
            "weight": 8,
            "engineering_reason": "Required for automotive. A non-qualified part cannot replace a qualified one.",
            "sort_order": 11,
        },
        {
            "attribute_id": "anti_sulfur",
            "attribute_name": "Anti-Sulfur",
            "logic_type": "identity_flag",
            "weight": 7,
            "engineering_reason": "Sulfur-resistant terminations are needed in harsh environments. If the original has it, so must the replacement.",
            "sort_order": 12,
        },
        {
            "attribute_id": "packaging",
            "attribute_name": "Packaging",
            "logic_type": "operational",
            "weight": 2,
            "engineering_reason": "Tape and reel required for pick-and-place. Reel width and pitch must match feeders.",
            "sort_order": 13,
        },
    ],
}

FERRITE_BEADS: dict[str, Any] = {
    "family_id": "70",
    "family_name": "Ferrite Beads (Surface Mount)",
    "category": "Passives",
    "description": "Hard logic filters for ferrite bead replacement part validation",
    "rules": [
        {
            "attribute_id": "impedance_100mhz",
            "attribute_name": "Impedance @ 100MHz",
            "logic_type": "identity",
            "weight": 10,
            "engineering_reason": "Primary bead specification. Rated impedance at 100MHz sets high-frequency attenuation.",
            "sort_order": 1,
        },
        {
            "attribute_id": "impedance_curve",
            "attribute_name": "Impedance vs Frequency Curve",
            "logic_type": "application_review",
            "weight": 8,
            "engineering_reason": "Beads with equal 100MHz impedance can have very different curves. Compare datasheets.",
            "sort_order": 2,
        },
        {
            "attribute_id": "package_case",
            "attribute_name": "Package / Case",
            "logic_type": "identity",
            "weight": 10,
            "engineering_reason": "Footprint must match. 0201, 0402, 0603 and 0805 are not interchangeable.",
            "sort_order": 3,
        },
        {
            "attribute_id": "rated_current",
            "attribute_name": "Rated Current",
            "logic_type": "threshold",
            "threshold_direction": "gte",
            "weight": 9,
            "engineering_reason": "Exceeding rated current overheats the bead and collapses its impedance.",
            "sort_order": 4,
        },
        {
            "attribute_id": "dcr",
            "attribute_name": "DC Resistance (DCR)",
            "logic_type": "threshold",
            "threshold_direction": "lte",
            "weight": 7,
            "engineering_reason": "Lower DCR means less voltage drop on supply rails.",
            "sort_order": 5,
        },
        {
            "attribute_id": "number_of_lines",
            "attribute_name": "Number of Lines",
            "logic_type": "identity",
            "weight": 6,
            "engineering_reason": "Single-line and array beads have different pinouts.",
            "sort_order": 6,
        },
        {
            "attribute_id": "resistance_type",
            "attribute_name": "Resistance Type",
            "logic_type": "identity",
            "weight": 4,
            "engineering_reason": "Resistive and inductive impedance types filter differently.",
            "sort_order": 7,
        },
        {
            "attribute_id": "tolerance",
            "attribute_name": "Tolerance",
            "logic_type": "threshold",
            "threshold_direction": "lte",
            "weight": 5,
            "engineering_reason": "Tighter impedance tolerance is always acceptable (typical ±25%).",
            "sort_order": 8,
        },
        {
            "attribute_id": "operating_temp",
            "attribute_name": "Operating Temp Range",
            "logic_type": "threshold",
            "threshold_direction": "range_superset",
            "weight": 6,
            "engineering_reason": "Replacement must cover the full operating temperature range of the original.",
            "sort_order": 9,
        },
        {
            "attribute_id": "height",
            "attribute_name": "Height (Seated Max)",
            "logic_type": "fit",
            "weight": 5,
            "engineering_reason": "Must fit the available vertical clearance.",
            "sort_order": 10,
        },
        {
            "attribute_id": "voltage_rated",
            "attribute_name": "Voltage Rating",
            "logic_type": "threshold",
            "threshold_direction": "gte",
            "weight": 5,
            "engineering_reason": "Replacement must handle at least the original voltage.",
            "sort_order": 11,
        },
        {
            "attribute_id": "signal_integrity",
            "attribute_name": "Signal Integrity (S-Parameters)",
            "logic_type": "application_review",
            "weight": 7,
            "engineering_reason": "On high-speed lines verify insertion loss, return loss and eye diagram against S-parameter data.",
            "sort_order": 12,
        },
        {
            "attribute_id": "aec_q200",
            "attribute_name": "AEC-Q200 Qualification",
            "logic_type": "identity_flag",
            "weight": 8,
            "engineering_reason": "Required for automotive. A non-qualified part cannot replace a qualified one.",
            "sort_order": 13,
        },
        {
            "attribute_id": "packaging",
            "attribute_name": "Packaging",
            "logic_type": "operational",
            "weight": 2,
            "engineering_reason": "Tape and reel required for pick-and-place. Reel width and pitch must match feeders.",
            "sort_order": 14,
        },
    ],
}


# =============================================================================
# VARIANT DELTAS
# =============================================================================

THROUGH_HOLE_RESISTORS_DELTA: dict[str, Any] = {
    "base_family_id": "52",
    "family_id": "53",
    "family_name": "Through-Hole Resistors",
    "category": "Passives",
    "description": "Derived from chip resistors with through-hole mounting additions",
    "add": [
        {
            "attribute_id": "lead_spacing",
            "attribute_name": "Lead Spacing / Pitch",
            "logic_type": "identity",
            "weight": 7,
            "engineering_reason": "PCB hole pattern must match (7.5mm, 10mm, 12.5mm, 15mm).",
            "sort_order": 14,
        },
        {
            "attribute_id": "mounting_style",
            "attribute_name": "Mounting Style",
            "logic_type": "identity",
            "weight": 9,
            "engineering_reason": "Axial through-hole cannot be swapped for SMD without a PCB redesign.",
            "sort_order": 15,
        },
        {
            "attribute_id": "body_dimensions",
            "attribute_name": "Body Length x Diameter",
            "logic_type": "fit",
            "weight": 5,
            "engineering_reason": "Replacement body must fit the available board space.",
            "sort_order": 16,
        },
    ],
}

CURRENT_SENSE_RESISTORS_DELTA: dict[str, Any] = {
    "base_family_id": "52",
    "family_id": "54",
    "family_name": "Current Sense Resistors",
    "category": "Passives",
    "description": "Derived from chip resistors with tightened precision and current-sensing additions",
    "override": [
        {
            "attribute_id": "tolerance",
            "weight": 9,
            "engineering_reason": "Current sensing needs ≤1% tolerance. Tighter is always acceptable.",
        },
        {
            "attribute_id": "tcr",
            "weight": 8,
            "engineering_reason": "TCR must be ≤50 ppm/°C for stable measurement. Metal element types preferred.",
        },
    ],
    "add": [
        {
            "attribute_id": "kelvin_sensing",
            "attribute_name": "Kelvin (4-Terminal) Sensing",
            "logic_type": "identity_flag",
            "weight": 8,
            "engineering_reason": "Separate force/sense pads remove lead resistance error. A 4-terminal original needs a 4-terminal replacement.",
            "sort_order": 14,
        },
        {
            "attribute_id": "power_rating_pulse",
            "attribute_name": "Power Rating (Pulse)",
            "logic_type": "threshold",
            "threshold_direction": "gte",
            "weight": 7,
            "engineering_reason": "Short-duration surge handling. Higher pulse rating is always acceptable.",
            "sort_order": 15,
        },
        {
            "attribute_id": "parasitic_inductance",
            "attribute_name": "Inductance (Parasitic)",
            "logic_type": "application_review",
            "weight": 5,
            "engineering_reason": "Verify for sensing above 100 kHz. Metal strip and reverse-geometry parts have lower inductance.",
            "sort_order": 16,
        },
    ],
}


CHASSIS_MOUNT_RESISTORS_DELTA: dict[str, Any] = {
    "base_family_id": "52",
    "family_id": "55",
    "family_name": "Chassis Mount / High Power Resistors",
    "category": "Passives",
    "description": "Derived from chip resistors with high-power mounting and thermal additions",
    "override": [
        {
            "attribute_id": "power_rating",
            "weight": 10,
            "engineering_reason": "Must be ≥ original, derated at the mounting surface temperature (e.g. 50W at 25°C case).",
        },
    ],
    "add": [
        {
            "attribute_id": "mounting_style",
            "attribute_name": "Mounting Style",
            "logic_type": "identity",
            "weight": 9,
            "engineering_reason": "TO-220, TO-247, TO-263, bolt-down or clip mount. Must match for mechanical and thermal fit.",
            "sort_order": 14,
        },
        {
            "attribute_id": "thermal_resistance",
            "attribute_name": "Thermal Resistance (°C/W)",
            "logic_type": "threshold",
            "threshold_direction": "lte",
            "weight": 7,
            "engineering_reason": "Lower is better. Sets the maximum continuous power into the heatsink or chassis.",
            "sort_order": 15,
        },
        {
            "attribute_id": "heatsink_dimensions",
            "attribute_name": "Heatsink Interface Dimensions",
            "logic_type": "fit",
            "weight": 8,
            "engineering_reason": "Bolt hole spacing and tab size must suit the existing heatsink hardware.",
            "sort_order": 16,
        },
    ],
}


def _build_registry() -> dict[str, LogicTable]:
    chip_resistors = LogicTable.from_dict(CHIP_RESISTORS)
    registry = {
        chip_resistors.family_id: chip_resistors,
        FERRITE_BEADS["family_id"]: LogicTable.from_dict(FERRITE_BEADS),
    }
    for delta_data in (
        THROUGH_HOLE_RESISTORS_DELTA,
        CURRENT_SENSE_RESISTORS_DELTA,
        CHASSIS_MOUNT_RESISTORS_DELTA,
    ):
        delta = delta_from_dict(delta_data)
        registry[delta.family_id] = build_derived_logic_table(registry[delta.base_family_id], delta)
    return registry


LOGIC_TABLES: dict[str, LogicTable] = _build_registry()

# Supplier subcategory names -> base family id (variants resolved by classify_family)
SUBCATEGORY_TO_FAMILY: dict[str, str] = {
    # Chip Resistors (52), also the base for 53, 54, 55
    "Chip Resistor": "52",
    "Chip Resistor - Surface Mount": "52",
    "Thick Film": "52",
    "Thin Film": "52",
    "Resistor": "52",
    # Through-Hole Resistors (53)
    "Through Hole Resistor": "53",
    "Axial Resistor": "53",
    # Current Sense Resistors (54)
    "Current Sense Resistor": "54",
    "Current Sense": "54",
    # Chassis Mount Resistors (55)
    "Chassis Mount Resistor": "55",
    "Power Resistor": "55",
    # Ferrite Beads (70)
    "Ferrite Bead": "70",
    "Ferrite": "70",
    "Ferrite Bead and Chip": "70",
}
