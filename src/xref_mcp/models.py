"""Data model for parts, logic tables, evaluation results and application context.

Matching rules are a tagged union: one dataclass per logic type, each carrying
only the fields its comparison needs (a hierarchy for identity_upgrade, a
direction for threshold). The class-level ``logic_type`` tag is what the rule
evaluator dispatches on.

All ``from_dict`` constructors raise ValueError on malformed input; they are
the boundary between caller-supplied JSON and the engine.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, ClassVar, Literal, get_args


LogicType = Literal[
    "identity",  # Exact match required
    "identity_upgrade",  # Match or strictly superior variant (has hierarchy)
    "identity_flag",  # Boolean: if original requires it, replacement must too
    "threshold",  # Numeric comparison against the original's value
    "fit",  # Physical/dimensional constraint (candidate <= original)
    "application_review",  # Cannot be automated, requires manual review
    "operational",  # Non-electrical (manufacturing/supply chain)
]
ThresholdDirection = Literal["gte", "lte", "range_superset"]
RuleResult = Literal["pass", "fail", "upgrade", "review", "info"]
MatchStatus = Literal["exact", "better", "worse", "different", "compatible"]
ContextEffectType = Literal[
    "escalate_to_mandatory",
    "escalate_to_primary",
    "not_applicable",
    "add_review_flag",
    "set_threshold",
]

LOGIC_TYPES: tuple[str, ...] = get_args(LogicType)
THRESHOLD_DIRECTIONS: tuple[str, ...] = get_args(ThresholdDirection)
CONTEXT_EFFECTS: tuple[str, ...] = get_args(ContextEffectType)


def _require(data: dict[str, Any], key: str, what: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be an object, got {type(data).__name__}")
    if key not in data or data[key] is None:
        raise ValueError(f"{what} is missing required field '{key}'")
    return data[key]


def _as_list(value: Any, what: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{what} must be a list, got {type(value).__name__}")
    return value


# =============================================================================
# PARTS
# =============================================================================


@dataclass
class Part:
    """Identity and catalog description of a component."""
    mpn: str
    manufacturer: str = ""
    description: str = ""
    category: str = ""
    subcategory: str = ""
    status: str = "Active"  # Active, Obsolete, Discontinued, NRND, LastTimeBuy
    datasheet_url: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Part":
        mpn = _require(data, "mpn", "part")
        return cls(
            mpn=str(mpn),
            manufacturer=str(data.get("manufacturer") or ""),
            description=str(data.get("description") or ""),
            category=str(data.get("category") or ""),
            subcategory=str(data.get("subcategory") or ""),
            status=str(data.get("status") or "Active"),
            datasheet_url=data.get("datasheet_url"),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ParametricAttribute:
    """A single parametric attribute of a component."""
    parameter_id: str
    parameter_name: str
    value: str  # Display value, e.g. "±1%", "-55°C ~ 125°C"
    numeric_value: float | None = None  # Pre-parsed base-unit value when known
    unit: str | None = None
    sort_order: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ParametricAttribute":
        parameter_id = str(_require(data, "parameter_id", "parameter"))
        value = _require(data, "value", f"parameter '{parameter_id}'")
        numeric_value = data.get("numeric_value")
        if numeric_value is not None:
            try:
                numeric_value = float(numeric_value)
            except (TypeError, ValueError):
                raise ValueError(
                    f"parameter '{parameter_id}' has non-numeric numeric_value: {numeric_value!r}"
                ) from None
        return cls(
            parameter_id=parameter_id,
            parameter_name=str(data.get("parameter_name") or parameter_id),
            value=str(value),
            numeric_value=numeric_value,
            unit=data.get("unit"),
            sort_order=int(data.get("sort_order") or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class PartAttributes:
    """Full parametric profile of a part."""
    part: Part
    parameters: list[ParametricAttribute] = field(default_factory=list)

    def attribute_map(self) -> dict[str, ParametricAttribute]:
        """Lookup by parameter_id."""
        return {p.parameter_id: p for p in self.parameters}

    def find(self, parameter_id: str) -> ParametricAttribute | None:
        for param in self.parameters:
            if param.parameter_id == parameter_id:
                return param
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PartAttributes":
        part = Part.from_dict(_require(data, "part", "part attributes"))
        params = [
            ParametricAttribute.from_dict(p)
            for p in _as_list(data.get("parameters"), f"parameters of {part.mpn}")
        ]
        seen: set[str] = set()
        for param in params:
            if param.parameter_id in seen:
                raise ValueError(f"duplicate parameter_id '{param.parameter_id}' on {part.mpn}")
            seen.add(param.parameter_id)
        return cls(part=part, parameters=params)

    def to_dict(self) -> dict[str, Any]:
        return {
            "part": self.part.to_dict(),
            "parameters": [p.to_dict() for p in self.parameters],
        }


# =============================================================================
# MATCHING RULES (tagged union on logic_type)
# =============================================================================


@dataclass
class MatchingRule:
    """Fields shared by every rule kind. Use one of the subclasses."""
    attribute_id: str
    attribute_name: str
    weight: int  # 0-10 importance in the aggregate score
    engineering_reason: str = ""
    sort_order: int = 0
    block_on_missing: bool = False  # Missing candidate data should block upstream

    logic_type: ClassVar[str] = ""

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["logic_type"] = self.logic_type
        return data


@dataclass
class IdentityRule(MatchingRule):
    logic_type: ClassVar[str] = "identity"


@dataclass
class IdentityUpgradeRule(MatchingRule):
    upgrade_hierarchy: list[str] = field(default_factory=list)  # Index 0 = best

    logic_type: ClassVar[str] = "identity_upgrade"


@dataclass
class IdentityFlagRule(MatchingRule):
    logic_type: ClassVar[str] = "identity_flag"


@dataclass
class ThresholdRule(MatchingRule):
    threshold_direction: ThresholdDirection = "gte"

    logic_type: ClassVar[str] = "threshold"


@dataclass
class FitRule(MatchingRule):
    """Dimensional constraint: always compared with candidate <= original."""
    logic_type: ClassVar[str] = "fit"


@dataclass
class ApplicationReviewRule(MatchingRule):
    logic_type: ClassVar[str] = "application_review"


@dataclass
class OperationalRule(MatchingRule):
    logic_type: ClassVar[str] = "operational"


RULE_TYPES: dict[str, type[MatchingRule]] = {
    cls.logic_type: cls
    for cls in (
        IdentityRule,
        IdentityUpgradeRule,
        IdentityFlagRule,
        ThresholdRule,
        FitRule,
        ApplicationReviewRule,
        OperationalRule,
    )
}

_COMMON_RULE_FIELDS = tuple(f.name for f in fields(MatchingRule))


def common_rule_fields(rule: MatchingRule) -> dict[str, Any]:
    """The fields every rule kind shares, as constructor kwargs."""
    return {name: getattr(rule, name) for name in _COMMON_RULE_FIELDS}


def retype_rule(rule: MatchingRule, logic_type: str) -> MatchingRule:
    """Return a new rule of another kind carrying the same common fields.

    Kind-specific fields (hierarchy, direction) are dropped unless the new kind
    is the same as the old one.
    """
    rule_cls = RULE_TYPES.get(logic_type)
    if rule_cls is None:
        raise ValueError(f"Unknown logic_type: {logic_type!r}")
    if isinstance(rule, rule_cls):
        return rule
    return rule_cls(**common_rule_fields(rule))


def _parse_weight(value: Any, attribute_id: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value != int(value):
        raise ValueError(f"rule '{attribute_id}' weight must be an integer, got {value!r}")
    weight = int(value)
    if not 0 <= weight <= 10:
        raise ValueError(f"rule '{attribute_id}' weight must be 0-10, got {weight}")
    return weight


def rule_from_dict(data: dict[str, Any]) -> MatchingRule:
    """Build the matching rule variant named by data['logic_type']."""
    attribute_id = str(_require(data, "attribute_id", "rule"))
    logic_type = _require(data, "logic_type", f"rule '{attribute_id}'")
    rule_cls = RULE_TYPES.get(logic_type)
    if rule_cls is None:
        raise ValueError(
            f"rule '{attribute_id}' has unknown logic_type {logic_type!r}. "
            f"Valid: {', '.join(LOGIC_TYPES)}"
        )

    kwargs: dict[str, Any] = {
        "attribute_id": attribute_id,
        "attribute_name": str(data.get("attribute_name") or attribute_id),
        "weight": _parse_weight(_require(data, "weight", f"rule '{attribute_id}'"), attribute_id),
        "engineering_reason": str(data.get("engineering_reason") or ""),
        "sort_order": int(data.get("sort_order") or 0),
        "block_on_missing": bool(data.get("block_on_missing", False)),
    }

    if rule_cls is IdentityUpgradeRule:
        hierarchy = _as_list(data.get("upgrade_hierarchy"), f"rule '{attribute_id}' upgrade_hierarchy")
        kwargs["upgrade_hierarchy"] = [str(h) for h in hierarchy]
    elif rule_cls is ThresholdRule:
        direction = data.get("threshold_direction") or "gte"
        if direction not in THRESHOLD_DIRECTIONS:
            raise ValueError(
                f"rule '{attribute_id}' has unknown threshold_direction {direction!r}. "
                f"Valid: {', '.join(THRESHOLD_DIRECTIONS)}"
            )
        kwargs["threshold_direction"] = direction

    return rule_cls(**kwargs)


@dataclass
class LogicTable:
    """Ordered comparison rules for one component family."""
    family_id: str
    family_name: str
    category: str
    description: str
    rules: list[MatchingRule] = field(default_factory=list)

    def find_rule(self, attribute_id: str) -> MatchingRule | None:
        for rule in self.rules:
            if rule.attribute_id == attribute_id:
                return rule
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LogicTable":
        family_id = str(_require(data, "family_id", "logic table"))
        return cls(
            family_id=family_id,
            family_name=str(data.get("family_name") or family_id),
            category=str(data.get("category") or ""),
            description=str(data.get("description") or ""),
            rules=[
                rule_from_dict(r)
                for r in _as_list(data.get("rules"), f"rules of family {family_id}")
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "family_id": self.family_id,
            "family_name": self.family_name,
            "category": self.category,
            "description": self.description,
            "rules": [r.to_dict() for r in self.rules],
        }


# =============================================================================
# EVALUATION RESULTS
# =============================================================================


@dataclass
class RuleEvaluationResult:
    """Outcome of comparing one attribute between source and candidate."""
    attribute_id: str
    attribute_name: str
    source_value: str
    candidate_value: str
    logic_type: str
    result: RuleResult
    match_status: MatchStatus
    note: str | None = None


@dataclass
class CandidateEvaluation:
    """All rule outcomes for one candidate, folded into a score and verdict."""
    candidate: PartAttributes
    match_percentage: int
    passed: bool
    results: list[RuleEvaluationResult] = field(default_factory=list)
    review_flags: list[str] = field(default_factory=list)  # Attributes needing human review
    notes: list[str] = field(default_factory=list)


@dataclass
class MatchDetail:
    """Per-attribute comparison row of a recommendation."""
    parameter_id: str
    parameter_name: str
    source_value: str
    replacement_value: str
    match_status: MatchStatus
    rule_result: RuleResult
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Recommendation:
    """A ranked replacement candidate."""
    part: Part
    match_percentage: int
    passed: bool
    match_details: list[MatchDetail] = field(default_factory=list)
    notes: str | None = None  # Advisory summary, segments joined with " | "

    def to_dict(self) -> dict[str, Any]:
        return {
            "part": self.part.to_dict(),
            "match_percentage": self.match_percentage,
            "passed": self.passed,
            "match_details": [d.to_dict() for d in self.match_details],
            "notes": self.notes,
        }


@dataclass
class MissingAttributeInfo:
    """A matchable rule the source part has no data for."""
    attribute_id: str
    attribute_name: str
    logic_type: str
    weight: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# APPLICATION CONTEXT
# =============================================================================


@dataclass
class ApplicationContext:
    """User answers to a family's qualification questions."""
    family_id: str
    answers: dict[str, str] = field(default_factory=dict)  # question_id -> answer

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ApplicationContext":
        family_id = str(_require(data, "family_id", "application context"))
        answers = data.get("answers") or {}
        if not isinstance(answers, dict):
            raise ValueError("application context answers must be an object")
        return cls(family_id=family_id, answers={str(k): str(v) for k, v in answers.items()})


@dataclass
class AttributeEffect:
    """How one answer option changes one rule."""
    attribute_id: str
    effect: ContextEffectType
    note: str | None = None
    block_on_missing: bool | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AttributeEffect":
        attribute_id = str(_require(data, "attribute_id", "attribute effect"))
        effect = _require(data, "effect", f"effect on '{attribute_id}'")
        if effect not in CONTEXT_EFFECTS:
            raise ValueError(
                f"effect on '{attribute_id}' is unknown: {effect!r}. Valid: {', '.join(CONTEXT_EFFECTS)}"
            )
        return cls(
            attribute_id=attribute_id,
            effect=effect,
            note=data.get("note"),
            block_on_missing=data.get("block_on_missing"),
        )


@dataclass
class ContextOption:
    value: str
    label: str = ""
    description: str = ""
    attribute_effects: list[AttributeEffect] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContextOption":
        value = str(_require(data, "value", "context option"))
        return cls(
            value=value,
            label=str(data.get("label") or value),
            description=str(data.get("description") or ""),
            attribute_effects=[
                AttributeEffect.from_dict(e)
                for e in _as_list(data.get("attribute_effects"), f"effects of option '{value}'")
            ],
        )


@dataclass
class ContextQuestion:
    question_id: str
    question_text: str
    options: list[ContextOption] = field(default_factory=list)
    priority: int = 0
    allow_free_text: bool = False
    condition: dict[str, Any] | None = None  # {"question_id": ..., "values": [...]} shown-when hint

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContextQuestion":
        question_id = str(_require(data, "question_id", "context question"))
        return cls(
            question_id=question_id,
            question_text=str(data.get("question_text") or ""),
            options=[
                ContextOption.from_dict(o)
                for o in _as_list(data.get("options"), f"options of question '{question_id}'")
            ],
            priority=int(data.get("priority") or 0),
            allow_free_text=bool(data.get("allow_free_text", False)),
            condition=data.get("condition"),
        )


@dataclass
class FamilyContextConfig:
    """Ordered qualification questions for one or more families."""
    family_ids: list[str]
    questions: list[ContextQuestion] = field(default_factory=list)
    context_sensitivity: str = "low"  # low, moderate, high

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FamilyContextConfig":
        family_ids = [str(f) for f in _as_list(data.get("family_ids"), "context config family_ids")]
        return cls(
            family_ids=family_ids,
            questions=[
                ContextQuestion.from_dict(q)
                for q in _as_list(data.get("questions"), "context config questions")
            ],
            context_sensitivity=str(data.get("context_sensitivity") or "low"),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
