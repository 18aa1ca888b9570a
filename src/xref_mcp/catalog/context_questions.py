"""Application-context questions per family.

Each config lists questions in display order. An option's attribute_effects
are applied to the family's logic table when the user picks that option.
Effects may name attributes the table does not carry; those are skipped at
apply time.
"""

from typing import Any

from ..models import FamilyContextConfig


# =============================================================================
# RESISTORS
# =============================================================================

CHIP_RESISTOR_CONTEXT: dict[str, Any] = {
    "family_ids": ["52"],
    "context_sensitivity": "low",
    "questions": [
        {
            "question_id": "precision",
            "question_text": "Is this a precision application (instrumentation, feedback divider, sensing)?",
            "priority": 1,
            "options": [
                {
                    "value": "yes",
                    "label": "Yes, precision circuit",
                    "description": "Feedback divider, instrumentation front end, current sense",
                    "attribute_effects": [
                        {
                            "attribute_id": "tolerance",
                            "effect": "escalate_to_primary",
                            "note": "Precision circuit: tolerance directly sets accuracy",
                        },
                        {
                            "attribute_id": "tcr",
                            "effect": "escalate_to_primary",
                            "note": "Precision circuit: TCR drift shows up as measurement error",
                        },
                        {
                            "attribute_id": "composition",
                            "effect": "escalate_to_primary",
                            "note": "Precision circuit: thin film preferred for noise and stability",
                        },
                    ],
                },
                {
                    "value": "no",
                    "label": "No, general purpose",
                    "description": "Pull-ups, current limiting, biasing",
                    "attribute_effects": [],
                },
            ],
        },
        {
            "question_id": "environment",
            "question_text": "What is the operating environment?",
            "priority": 2,
            "options": [
                {
                    "value": "automotive",
                    "label": "Automotive",
                    "attribute_effects": [
                        {
                            "attribute_id": "aec_q200",
                            "effect": "escalate_to_mandatory",
                            "note": "Automotive application: AEC-Q200 qualification is required",
                            "block_on_missing": True,
                        },
                    ],
                },
                {
                    "value": "industrial_sulfur",
                    "label": "Industrial / sulfur-rich atmosphere",
                    "attribute_effects": [
                        {
                            "attribute_id": "anti_sulfur",
                            "effect": "escalate_to_mandatory",
                            "note": "Sulfur exposure: silver terminations corrode, anti-sulfur construction required",
                        },
                    ],
                },
                {
                    "value": "standard",
                    "label": "Standard / consumer",
                    "attribute_effects": [],
                },
            ],
        },
    ],
}

THROUGH_HOLE_RESISTOR_CONTEXT: dict[str, Any] = {
    "family_ids": ["53"],
    "context_sensitivity": "low",
    "questions": [
        {
            "question_id": "environment",
            "question_text": "What is the operating environment?",
            "priority": 1,
            "options": [
                {
                    "value": "automotive",
                    "label": "Automotive",
                    "attribute_effects": [
                        {
                            "attribute_id": "aec_q200",
                            "effect": "escalate_to_mandatory",
                            "note": "Automotive application: AEC-Q200 qualification is required",
                            "block_on_missing": True,
                        },
                    ],
                },
                {
                    "value": "standard",
                    "label": "Standard / consumer",
                    "attribute_effects": [],
                },
            ],
        },
        {
            "question_id": "board_space",
            "question_text": "Is board space around the part constrained?",
            "priority": 2,
            "options": [
                {
                    "value": "tight",
                    "label": "Yes, tight layout",
                    "attribute_effects": [
                        {
                            "attribute_id": "body_dimensions",
                            "effect": "escalate_to_primary",
                            "note": "Tight layout: replacement body must not exceed the original",
                        },
                    ],
                },
                {
                    "value": "open",
                    "label": "No, plenty of room",
                    "attribute_effects": [
                        {"attribute_id": "body_dimensions", "effect": "not_applicable"},
                    ],
                },
            ],
        },
    ],
}

CURRENT_SENSE_CONTEXT: dict[str, Any] = {
    "family_ids": ["54"],
    "context_sensitivity": "high",
    "questions": [
        {
            "question_id": "kelvin_required",
            "question_text": "Does the layout use 4-terminal (Kelvin) sensing?",
            "priority": 1,
            "options": [
                {
                    "value": "yes",
                    "label": "Yes, 4-terminal footprint",
                    "attribute_effects": [
                        {
                            "attribute_id": "kelvin_sensing",
                            "effect": "escalate_to_mandatory",
                            "note": "Kelvin layout: replacement must have separate force and sense terminals",
                            "block_on_missing": True,
                        },
                        {
                            "attribute_id": "package",
                            "effect": "escalate_to_mandatory",
                            "note": "Kelvin footprint: pad geometry must match exactly",
                        },
                    ],
                },
                {
                    "value": "no",
                    "label": "No, 2-terminal",
                    "attribute_effects": [],
                },
            ],
        },
        {
            "question_id": "measurement_precision",
            "question_text": "How precise does the current measurement need to be?",
            "priority": 2,
            "options": [
                {
                    "value": "high",
                    "label": "High (better than 1%)",
                    "attribute_effects": [
                        {
                            "attribute_id": "tolerance",
                            "effect": "escalate_to_mandatory",
                            "note": "High-precision sensing: tolerance is a direct error term",
                        },
                        {
                            "attribute_id": "tcr",
                            "effect": "escalate_to_mandatory",
                            "note": "High-precision sensing: TCR drift under self-heating is a direct error term",
                        },
                        {
                            "attribute_id": "parasitic_inductance",
                            "effect": "escalate_to_primary",
                        },
                        {
                            "attribute_id": "long_term_stability",
                            "effect": "escalate_to_primary",
                        },
                    ],
                },
                {
                    "value": "standard",
                    "label": "Standard (overcurrent detection)",
                    "attribute_effects": [],
                },
            ],
        },
        {
            "question_id": "sensing_frequency",
            "question_text": "What is the sensing bandwidth?",
            "priority": 3,
            "options": [
                {
                    "value": "dc",
                    "label": "DC / low frequency",
                    "attribute_effects": [],
                },
                {
                    "value": "high_frequency",
                    "label": "Above 100 kHz (switching converter)",
                    "attribute_effects": [
                        {
                            "attribute_id": "parasitic_inductance",
                            "effect": "escalate_to_mandatory",
                            "note": "High-frequency sensing: parasitic inductance distorts the sensed waveform",
                        },
                    ],
                },
                {
                    "value": "unknown",
                    "label": "Not sure",
                    "attribute_effects": [
                        {
                            "attribute_id": "parasitic_inductance",
                            "effect": "add_review_flag",
                            "note": "Sensing bandwidth unknown: check parasitic inductance against the datasheet",
                        },
                    ],
                },
            ],
        },
    ],
}

CHASSIS_MOUNT_RESISTOR_CONTEXT: dict[str, Any] = {
    "family_ids": ["55"],
    "context_sensitivity": "moderate",
    "questions": [
        {
            "question_id": "thermal_management",
            "question_text": "How is the resistor thermally managed?",
            "priority": 1,
            "options": [
                {
                    "value": "dedicated_heatsink",
                    "label": "Dedicated heatsink with known thermal resistance",
                    "attribute_effects": [
                        {
                            "attribute_id": "thermal_resistance",
                            "effect": "escalate_to_mandatory",
                            "note": "Dedicated heatsink: thermal resistance sets the maximum operating power",
                        },
                        {
                            "attribute_id": "heatsink_dimensions",
                            "effect": "escalate_to_mandatory",
                            "note": "Heatsink interface: bolt pattern and tab must match existing hardware",
                        },
                    ],
                },
                {
                    "value": "chassis_mounted",
                    "label": "Chassis-mounted (enclosure wall, metal frame)",
                    "attribute_effects": [
                        {
                            "attribute_id": "thermal_resistance",
                            "effect": "escalate_to_primary",
                            "note": "Chassis thermal path is less controlled than a heatsink. Verify derating.",
                        },
                        {
                            "attribute_id": "heatsink_dimensions",
                            "effect": "escalate_to_mandatory",
                            "note": "Chassis mounting: bolt pattern and footprint must match existing mounting points",
                        },
                    ],
                },
                {
                    "value": "free_standing",
                    "label": "No heatsink / free-standing",
                    "attribute_effects": [
                        {
                            "attribute_id": "power_rating",
                            "effect": "escalate_to_mandatory",
                            "note": "Free-standing: power rating is heavily derated from the mounted figure",
                        },
                    ],
                },
            ],
        },
        {
            "question_id": "forced_airflow",
            "question_text": "Is forced airflow present?",
            "priority": 2,
            "options": [
                {
                    "value": "yes",
                    "label": "Yes, fan-cooled",
                    "attribute_effects": [
                        {
                            "attribute_id": "power_rating",
                            "effect": "escalate_to_primary",
                            "note": "Fan-cooled: use the forced-convection derating curve",
                        },
                    ],
                },
                {
                    "value": "no",
                    "label": "No, natural convection",
                    "attribute_effects": [
                        {
                            "attribute_id": "power_rating",
                            "effect": "escalate_to_mandatory",
                            "note": "Natural convection: verify thermal margin against the derating curve",
                        },
                    ],
                },
            ],
        },
        {
            "question_id": "environment",
            "question_text": "What is the operating environment?",
            "priority": 3,
            "options": [
                {
                    "value": "automotive",
                    "label": "Automotive",
                    "attribute_effects": [
                        {
                            "attribute_id": "aec_q200",
                            "effect": "escalate_to_mandatory",
                            "note": "Automotive application: AEC-Q200 qualification is required",
                        },
                    ],
                },
                {
                    "value": "standard",
                    "label": "Standard / industrial",
                    "attribute_effects": [],
                },
            ],
        },
    ],
}


# =============================================================================
# FERRITE BEADS
# =============================================================================

FERRITE_BEAD_CONTEXT: dict[str, Any] = {
    "family_ids": ["70"],
    "context_sensitivity": "moderate",
    "questions": [
        {
            "question_id": "signal_or_power",
            "question_text": "Is the bead on a signal line or a power rail?",
            "priority": 1,
            "options": [
                {
                    "value": "power",
                    "label": "Power rail",
                    "attribute_effects": [
                        {
                            "attribute_id": "rated_current",
                            "effect": "escalate_to_primary",
                            "note": "Power rail: impedance drops sharply as DC bias approaches rated current",
                        },
                        {
                            "attribute_id": "dcr",
                            "effect": "escalate_to_primary",
                            "note": "Power rail: DCR causes voltage drop and heating",
                        },
                        {"attribute_id": "signal_integrity", "effect": "not_applicable"},
                    ],
                },
                {
                    "value": "signal",
                    "label": "Signal line",
                    "attribute_effects": [
                        {
                            "attribute_id": "signal_integrity",
                            "effect": "escalate_to_primary",
                            "note": "Signal line: verify insertion loss at the signal's fundamental frequency",
                        },
                        {"attribute_id": "dcr", "effect": "not_applicable"},
                    ],
                },
            ],
        },
        {
            "question_id": "operating_current",
            "question_text": "What DC current flows through the bead?",
            "priority": 2,
            "allow_free_text": True,
            "options": [
                {
                    "value": "unknown",
                    "label": "Not sure",
                    "attribute_effects": [
                        {
                            "attribute_id": "impedance_100mhz",
                            "effect": "add_review_flag",
                            "note": "Operating current unknown: check impedance under DC bias",
                        },
                    ],
                },
            ],
        },
        {
            "question_id": "signal_frequency",
            "question_text": "What frequency range must the bead suppress?",
            "priority": 3,
            "condition": {"question_id": "signal_or_power", "values": ["signal"]},
            "options": [
                {
                    "value": "narrowband",
                    "label": "A known narrow band",
                    "attribute_effects": [],
                },
                {
                    "value": "broadband",
                    "label": "Broadband noise",
                    "attribute_effects": [
                        {
                            "attribute_id": "impedance_curve",
                            "effect": "add_review_flag",
                            "note": "Broadband suppression: compare full impedance curves, not just the 100MHz point",
                        },
                    ],
                },
            ],
        },
    ],
}


CONTEXT_CONFIGS: list[FamilyContextConfig] = [
    FamilyContextConfig.from_dict(data)
    for data in (
        CHIP_RESISTOR_CONTEXT,
        THROUGH_HOLE_RESISTOR_CONTEXT,
        CURRENT_SENSE_CONTEXT,
        CHASSIS_MOUNT_RESISTOR_CONTEXT,
        FERRITE_BEAD_CONTEXT,
    )
]
