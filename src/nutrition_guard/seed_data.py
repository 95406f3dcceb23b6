"""Reference clinical records used to seed a condition store."""

from nutrition_guard.domain.conditions import (
    Condition,
    ExclusionSeverity,
    IngredientExclusion,
    LimitType,
    NutrientLimitRecord,
)

_SODIUM_ADDITIVES = (
    "monosodium glutamate|sodium benzoate|sodium nitrate|sodium nitrite"
    "|sodium bicarbonate|disodium guanylate"
)
_HIDDEN_SUGARS = "high fructose corn syrup|cane sugar|corn syrup|rice syrup"
_TABLE_SOURCE = "Table 1: Additive Exclusion Logic"

CONDITIONS: tuple[Condition, ...] = (
    Condition(
        id="t2d",
        slug="t2d",
        label="Type 2 Diabetes",
        description=(
            "Metabolic disorder characterized by high blood sugar, insulin "
            "resistance, and relative lack of insulin."
        ),
        nutritional_focus={
            "riskFactors": ("Insulin Resistance",),
            "goals": ("Stable Blood Sugar",),
        },
    ),
    Condition(
        id="htn",
        slug="htn",
        label="Hypertension",
        description=(
            "High blood pressure condition requiring sodium and fluid management."
        ),
        nutritional_focus={
            "riskFactors": ("High Blood Pressure",),
            "goals": ("Lower Sodium",),
        },
    ),
    Condition(
        id="ckd-3b-5",
        slug="ckd-3b-5",
        label="CKD (Stage 3b-5)",
        description=(
            "Chronic Kidney Disease requiring strict management of Potassium, "
            "Phosphorus, Sodium, and Protein."
        ),
        nutritional_focus={
            "riskFactors": ("Hyperkalemia", "Hyperphosphatemia"),
            "goals": ("Preserve Kidney Function",),
        },
    ),
    Condition(
        id="pcos",
        slug="pcos",
        label="PCOS",
        description=(
            "Polycystic Ovary Syndrome associated with insulin resistance and "
            "inflammation."
        ),
        nutritional_focus={
            "riskFactors": ("Insulin Resistance", "Inflammation"),
            "goals": ("Hormonal Balance",),
        },
    ),
    Condition(
        id="hyperlipidemia",
        slug="hyperlipidemia",
        label="Hyperlipidemia",
        description="High levels of lipids/cholesterol in the blood.",
        nutritional_focus={
            "riskFactors": ("High Cholesterol",),
            "goals": ("Lower LDL", "Raise HDL"),
        },
    ),
)

EXCLUSIONS: tuple[IngredientExclusion, ...] = (
    IngredientExclusion(
        condition_slug="ckd-3b-5",
        additive_category="Phosphate Additives",
        ingredient_regex=(
            "phosphoric acid|sodium phosphate|potassium phosphate|calcium phosphate"
            "|polyphosphate|dicalcium phosphate|hexametaphosphate"
        ),
        risk_category="High Inorganic Phosphate Load",
        severity=ExclusionSeverity.CRITICAL_AVOID,
        source=_TABLE_SOURCE,
    ),
    IngredientExclusion(
        condition_slug="ckd-3b-5",
        additive_category="Potassium Additives",
        ingredient_regex=(
            "potassium chloride|potassium lactate|potassium sorbate|potassium citrate"
        ),
        risk_category="Rapid K+ absorption; arrhythmia risk",
        severity=ExclusionSeverity.CRITICAL_AVOID,
        source=_TABLE_SOURCE,
    ),
    IngredientExclusion(
        condition_slug="ckd-3b-5",
        additive_category="Sodium Additives",
        ingredient_regex=_SODIUM_ADDITIVES,
        risk_category="Fluid retention, Hypertension",
        severity=ExclusionSeverity.LIMIT,
        source=_TABLE_SOURCE,
    ),
    IngredientExclusion(
        condition_slug="htn",
        additive_category="Sodium Additives",
        ingredient_regex=_SODIUM_ADDITIVES,
        risk_category="Hypertension",
        severity=ExclusionSeverity.LIMIT,
        source=_TABLE_SOURCE,
    ),
    IngredientExclusion(
        condition_slug="t2d",
        additive_category="Hidden Sugars",
        ingredient_regex=_HIDDEN_SUGARS,
        risk_category="Glycemic Spike",
        severity=ExclusionSeverity.LIMIT,
        source=_TABLE_SOURCE,
    ),
    IngredientExclusion(
        condition_slug="pcos",
        additive_category="Hidden Sugars",
        ingredient_regex=_HIDDEN_SUGARS,
        risk_category="Insulin Resistance",
        severity=ExclusionSeverity.LIMIT,
        source=_TABLE_SOURCE,
    ),
    IngredientExclusion(
        condition_slug=None,
        additive_category="Trans Fats",
        ingredient_regex="partially hydrogenated|shortening",
        risk_category="Systemic inflammation; lowers HDL; raises LDL",
        severity=ExclusionSeverity.CRITICAL_AVOID,
        source="Global Exclusion",
    ),
)


def _limit(
    slug: str, nutrient: str, value: str, limit_type: LimitType, unit: str | None
) -> NutrientLimitRecord:
    return NutrientLimitRecord(
        condition_slug=slug,
        nutrient=nutrient,
        limit_type=limit_type,
        limit_value=value,
        unit=unit,
    )


NUTRIENT_LIMITS: tuple[NutrientLimitRecord, ...] = (
    _limit("t2d", "Sodium", "<2300", LimitType.MAX, "mg"),
    _limit("t2d", "Potassium", ">4700", LimitType.MIN, "mg"),
    _limit("t2d", "Phosphorus", "Normal", LimitType.TEXT, None),
    _limit("t2d", "Added Sugar", "<25-36", LimitType.MAX, "g"),
    _limit("t2d", "Sat. Fat", "<10%", LimitType.MAX, "Cal"),
    _limit("htn", "Sodium", "<1500", LimitType.MAX, "mg"),
    _limit("htn", "Potassium", "3500-5000", LimitType.RANGE, "mg"),
    _limit("htn", "Added Sugar", "<25-36", LimitType.MAX, "g"),
    _limit("htn", "Sat. Fat", "<6%", LimitType.MAX, "Cal"),
    _limit("ckd-3b-5", "Sodium", "<2000", LimitType.MAX, "mg"),
    _limit(
        "ckd-3b-5", "Potassium", "Limit if High (<2000-3000)", LimitType.TEXT, "mg"
    ),
    _limit("ckd-3b-5", "Phosphorus", "800-1000", LimitType.RANGE, "mg"),
    _limit("ckd-3b-5", "Protein", "0.6-0.8", LimitType.RANGE, "g/kg"),
    _limit("ckd-3b-5", "Added Sugar", "<25-36", LimitType.MAX, "g"),
    _limit("pcos", "Sodium", "<2300", LimitType.MAX, "mg"),
    _limit("pcos", "Added Sugar", "Minimize", LimitType.TEXT, None),
    _limit("pcos", "Sat. Fat", "<10%", LimitType.MAX, "Cal"),
    _limit("hyperlipidemia", "Sodium", "<2000", LimitType.MAX, "mg"),
    _limit("hyperlipidemia", "Sat. Fat", "<5-6%", LimitType.MAX, "Cal"),
)
