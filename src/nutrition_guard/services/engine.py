"""Conflict engine: evaluate a food against a user's conditions.

Each rule is a plain function of an :class:`EvaluationContext` returning a
:class:`RuleOutcome`. ``evaluate`` folds the outcomes in ``RULES`` order: the
status only ever escalates, reasons and modifications accumulate, and a
terminal outcome ends the evaluation early.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace

from nutrition_guard.domain.analysis import AnalysisResult, SafetyStatus
from nutrition_guard.domain.conditions import (
    ConditionKind,
    ExclusionSeverity,
    MaxLimit,
    RangeLimit,
    milligrams_per_unit,
)
from nutrition_guard.domain.foods import DietaryGoal, FoodItem, Gender, UserProfile
from nutrition_guard.domain.limits import ComputedLimits
from nutrition_guard.domain.policy import DEFAULT_POLICY, EnginePolicy
from nutrition_guard.domain.restrictions import LimitResolution, RestrictionProfile
from nutrition_guard.services.bioavailability import contraindicated_terms, grain_notes
from nutrition_guard.services.limit_overlay import check_computed_limits
from nutrition_guard.services.patterns import (
    NITRATE_PATTERNS,
    AdditiveCategory,
    found_patterns,
    match_categories,
)

DEFAULT_REASON = "Green light! Fits your profile."

_KIDNEY = ConditionKind.KIDNEY_DISEASE
_HYPERTENSION = ConditionKind.HYPERTENSION
_DIABETES = ConditionKind.DIABETES
_PCOS = ConditionKind.PCOS
_HIGH_CHOLESTEROL = ConditionKind.HIGH_CHOLESTEROL


@dataclass(frozen=True)
class RuleOutcome:
    """What a single rule contributes to the verdict."""

    status: SafetyStatus = SafetyStatus.SAFE
    reasons: tuple[str, ...] = ()
    modifications: tuple[str, ...] = ()
    terminal: bool = False


NO_CHANGE = RuleOutcome()


@dataclass(frozen=True)
class EvaluationContext:
    """Inputs shared by every rule, plus the status reached so far."""

    food: FoodItem
    profile: UserProfile
    kinds: frozenset[ConditionKind]
    categories: frozenset[AdditiveCategory]
    policy: EnginePolicy = DEFAULT_POLICY
    status: SafetyStatus = SafetyStatus.SAFE
    restrictions: RestrictionProfile | None = None
    computed_limits: ComputedLimits | None = None

    def has(self, *kinds: ConditionKind) -> bool:
        return all(kind in self.kinds for kind in kinds)


Rule = Callable[[EvaluationContext], RuleOutcome]


def phosphate_additive_rule(context: EvaluationContext) -> RuleOutcome:
    """Inorganic phosphate additives are off-limits for kidney disease."""
    if context.has(_KIDNEY) and AdditiveCategory.PHOSPHATE in context.categories:
        return RuleOutcome(
            status=SafetyStatus.AVOID,
            reasons=(
                "Contains inorganic phosphate additive (near-complete absorption).",
            ),
            modifications=("Strictly avoid.",),
            terminal=True,
        )
    return NO_CHANGE


def potassium_additive_rule(context: EvaluationContext) -> RuleOutcome:
    """Potassium salts and preservatives are off-limits for kidney disease."""
    if context.has(_KIDNEY) and AdditiveCategory.POTASSIUM in context.categories:
        return RuleOutcome(
            status=SafetyStatus.AVOID,
            reasons=("Contains hidden potassium additives (preservatives/salts).",),
            modifications=("Strictly avoid.",),
            terminal=True,
        )
    return NO_CHANGE


def contraindication_rule(context: EvaluationContext) -> RuleOutcome:
    food = context.food
    terms = contraindicated_terms(f"{food.name} {food.ingredients}", context.kinds)
    if not terms:
        return NO_CHANGE
    return RuleOutcome(
        status=SafetyStatus.AVOID,
        reasons=(
            f"Contains {', '.join(terms)}, which is toxic for your condition.",
        ),
        modifications=("Strictly avoid.",),
        terminal=True,
    )


def trans_fat_rule(context: EvaluationContext) -> RuleOutcome:
    """Trans fats are flagged for every user."""
    if AdditiveCategory.TRANS_FAT in context.categories:
        return RuleOutcome(
            status=SafetyStatus.AVOID,
            reasons=("Contains heart-damaging trans fat.",),
            modifications=("Select a different product.",),
        )
    return NO_CHANGE


def hidden_sugar_rule(context: EvaluationContext) -> RuleOutcome:
    sugar_sensitive = context.has(_DIABETES) or context.has(_PCOS)
    if sugar_sensitive and AdditiveCategory.HIDDEN_SUGAR in context.categories:
        return RuleOutcome(
            status=SafetyStatus.CAUTION,
            reasons=("Contains high-GI hidden sugars.",),
        )
    return NO_CHANGE


def exclusion_rule(context: EvaluationContext) -> RuleOutcome:
    """Apply the consolidated exclusion rules of the user's conditions."""
    if context.restrictions is None:
        return NO_CHANGE
    status = SafetyStatus.SAFE
    reasons: list[str] = []
    for exclusion in context.restrictions.exclusions:
        terms = exclusion.found_terms(context.food.ingredients)
        if not terms:
            continue
        if exclusion.severity is ExclusionSeverity.CRITICAL_AVOID:
            status = status.escalate(SafetyStatus.AVOID)
        else:
            status = status.escalate(SafetyStatus.CAUTION)
        reasons.append(
            f"{exclusion.category} ({', '.join(terms)}): {exclusion.risk_category}."
        )
    if not reasons:
        return NO_CHANGE
    return RuleOutcome(status=status, reasons=tuple(reasons))


def sodium_rule(context: EvaluationContext) -> RuleOutcome:
    ceiling = meal_sodium_ceiling(context)
    sodium = context.food.sodium
    if sodium <= ceiling:
        return NO_CHANGE
    return RuleOutcome(
        status=SafetyStatus.AVOID,
        reasons=(
            f"Sodium ({round(sodium)}mg) exceeds meal limit of {round(ceiling)}mg.",
        ),
        modifications=("Avoid adding salt.", "Drink water."),
    )


def carbohydrate_rule(context: EvaluationContext) -> RuleOutcome:
    """Per-meal carbohydrate ceiling for diabetes, softened by high fiber."""
    if not context.has(_DIABETES):
        return NO_CHANGE
    policy = context.policy
    food = context.food
    ceiling = meal_carb_ceiling(context.profile, policy)
    if food.carbs > ceiling:
        if food.fiber > policy.fiber_buffer_g:
            return RuleOutcome(
                status=SafetyStatus.CAUTION,
                reasons=("High carbs buffered by fiber (nuanced compromise).",),
            )
        return RuleOutcome(
            status=SafetyStatus.AVOID,
            reasons=(
                f"Carbs ({round(food.carbs)}g) exceed metabolic target "
                f"of {ceiling:g}g.",
            ),
            modifications=("Eat half portion.", "Walk after eating."),
        )
    if food.carbs > policy.moderate_carbs_g and food.fiber < policy.low_fiber_g:
        return RuleOutcome(
            status=SafetyStatus.CAUTION,
            reasons=("Moderate carbs with little fiber.",),
        )
    return NO_CHANGE


def potassium_rule(context: EvaluationContext) -> RuleOutcome:
    """Kidney potassium load; for hypertension alone potassium is a plus."""
    policy = context.policy
    food = context.food
    if context.has(_KIDNEY):
        if food.potassium <= policy.kidney_potassium_caution_mg:
            return NO_CHANGE
        reasons = ["Kidney potassium load - kidneys may struggle to filter it."]
        status = SafetyStatus.CAUTION
        if food.potassium > policy.kidney_potassium_avoid_mg:
            status = SafetyStatus.AVOID
            reasons.append("Very high potassium load.")
        return RuleOutcome(
            status=status,
            reasons=tuple(reasons),
            modifications=("Limit portion.", "Leach vegetables if possible."),
        )
    if (
        context.has(_HYPERTENSION)
        and context.status is SafetyStatus.SAFE
        and food.potassium > policy.dash_potassium_mg
        and food.sodium < policy.dash_sodium_mg
    ):
        return RuleOutcome(
            reasons=(
                "Good potassium source (DASH) that supports blood pressure "
                "management.",
            ),
        )
    return NO_CHANGE


def pcos_rule(context: EvaluationContext) -> RuleOutcome:
    if not context.has(_PCOS):
        return NO_CHANGE
    policy = context.policy
    food = context.food
    high_added_sugar = food.added_sugar > policy.pcos_added_sugar_g
    reasons: list[str] = []
    modifications: list[str] = []
    if high_added_sugar or found_patterns(food.ingredients, NITRATE_PATTERNS):
        reasons.append(
            "Inflammatory trigger (sugar/additives) - drives PCOS pathology."
        )
        modifications.append("Swap for an unsweetened version.")
    low_fat = food.fat < policy.low_fat_g
    if context.has(_HIGH_CHOLESTEROL) and low_fat and high_added_sugar:
        reasons.append("Low fat content does not excuse a high sugar load.")
    if not reasons:
        return NO_CHANGE
    return RuleOutcome(
        status=SafetyStatus.AVOID,
        reasons=tuple(reasons),
        modifications=tuple(modifications),
    )


def diabetes_kidney_rule(context: EvaluationContext) -> RuleOutcome:
    """Fiber helps diabetes while the phosphorus riding with it strains kidneys."""
    policy = context.policy
    food = context.food
    if (
        context.has(_DIABETES, _KIDNEY)
        and food.fiber > policy.dual_fiber_g
        and food.phosphorus > policy.dual_phosphorus_mg
    ):
        return RuleOutcome(
            status=SafetyStatus.CAUTION,
            reasons=(
                "High fiber is good for blood sugar, but phosphorus is high "
                "for your kidneys.",
            ),
            modifications=(
                "Eat a smaller portion to manage phosphorus load while getting "
                "fiber benefits.",
            ),
        )
    return NO_CHANGE


def computed_limits_rule(context: EvaluationContext) -> RuleOutcome:
    if context.computed_limits is None:
        return NO_CHANGE
    check = check_computed_limits(context.food, context.computed_limits)
    if check.status is SafetyStatus.SAFE:
        return NO_CHANGE
    return RuleOutcome(status=check.status, reasons=tuple(check.reasons))


RULES: tuple[Rule, ...] = (
    phosphate_additive_rule,
    potassium_additive_rule,
    trans_fat_rule,
    hidden_sugar_rule,
    contraindication_rule,
    exclusion_rule,
    sodium_rule,
    carbohydrate_rule,
    potassium_rule,
    pcos_rule,
    diabetes_kidney_rule,
    computed_limits_rule,
)


def evaluate(
    food: FoodItem,
    profile: UserProfile,
    *,
    restrictions: RestrictionProfile | None = None,
    computed_limits: ComputedLimits | None = None,
    policy: EnginePolicy = DEFAULT_POLICY,
    rules: Iterable[Rule] = RULES,
) -> AnalysisResult:
    """Return the Safe/Caution/Avoid verdict for a food and a user profile."""
    kinds = profile.kinds
    context = EvaluationContext(
        food=food,
        profile=profile,
        kinds=kinds,
        categories=match_categories(food.ingredients),
        policy=policy,
        restrictions=restrictions,
        computed_limits=computed_limits,
    )
    reasons: list[str] = []
    modifications: list[str] = []
    for rule in rules:
        outcome = rule(context)
        context = replace(context, status=context.status.escalate(outcome.status))
        _extend_unique(reasons, outcome.reasons)
        _extend_unique(modifications, outcome.modifications)
        if outcome.terminal:
            break

    if context.status is SafetyStatus.SAFE and not reasons:
        reasons.append(DEFAULT_REASON)

    return AnalysisResult(
        status=context.status,
        reasons=reasons,
        modifications=modifications,
        nutrition=food,
        grain_notes=grain_notes(food.ingredients) if _KIDNEY in kinds else [],
    )


def meal_sodium_ceiling(context: EvaluationContext) -> float:
    """Per-meal sodium ceiling (mg).

    Hypertension uses fixed ceilings over the default daily budget, lowest when
    kidney disease is also active; otherwise the user's daily limit is split
    across meals.
    """
    policy = context.policy
    if context.has(_HYPERTENSION):
        ceiling = min(
            policy.default_daily_sodium_mg / policy.meals_per_day,
            policy.hypertension_sodium_ceiling_mg,
        )
        if context.has(_KIDNEY):
            ceiling = min(ceiling, policy.hypertension_kidney_sodium_ceiling_mg)
        return ceiling
    return _daily_sodium_mg(context) / policy.meals_per_day


def meal_carb_ceiling(profile: UserProfile, policy: EnginePolicy) -> float:
    """Per-meal carbohydrate ceiling (g) for the user's gender and goal."""
    ceilings = policy.carb_ceilings
    weight_loss = profile.goal is DietaryGoal.WEIGHT_LOSS
    gender = profile.effective_gender
    if gender is Gender.MALE:
        return ceilings.male_weight_loss if weight_loss else ceilings.male_maintenance
    if gender is Gender.FEMALE:
        return (
            ceilings.female_weight_loss if weight_loss else ceilings.female_maintenance
        )
    return ceilings.default


def _daily_sodium_mg(context: EvaluationContext) -> float:
    if context.restrictions is not None:
        restricted = _restricted_daily_sodium_mg(context.restrictions)
        if restricted is not None:
            return restricted
    if context.computed_limits is not None:
        computed = context.computed_limits.max_for("NA")
        if computed is not None:
            return computed
    return context.policy.default_daily_sodium_mg


def _restricted_daily_sodium_mg(restrictions: RestrictionProfile) -> float | None:
    resolved = restrictions.limit_for("Sodium")
    if resolved is None or resolved.resolution is not LimitResolution.RESOLVED:
        return None
    factor = 1.0 if resolved.unit is None else milligrams_per_unit(resolved.unit)
    if factor is None:
        return None
    if isinstance(resolved.bound, MaxLimit) and resolved.bound.value > 0:
        return resolved.bound.value * factor
    if isinstance(resolved.bound, RangeLimit) and resolved.bound.high > 0:
        return resolved.bound.high * factor
    return None


def _extend_unique(target: list[str], items: Iterable[str]) -> None:
    for item in items:
        if item not in target:
            target.append(item)
