"""Score a food against personalized daily limits from the limit generator."""

from dataclasses import dataclass

from nutrition_guard.domain.analysis import SafetyStatus
from nutrition_guard.domain.foods import FoodItem
from nutrition_guard.domain.limits import ComputedLimits

_AVOID_SCORE = 50
_CAUTION_SCORE = 85


@dataclass(frozen=True)
class LimitCheck:
    """Score (0-100), verdict and reasons from a daily-limit comparison."""

    score: int
    status: SafetyStatus
    reasons: list[str]


def check_computed_limits(food: FoodItem, limits: ComputedLimits) -> LimitCheck:
    """Compare one serving against daily maxima as a share of the day's budget.

    A serving that uses more than 75% of a daily maximum is heavily penalized;
    smaller shares only trigger a caution for sodium and sugar.
    """
    haystack = f"{food.name} {food.ingredients}".lower()
    for ingredient in limits.avoid_ingredients:
        if ingredient.lower() in haystack:
            return LimitCheck(
                score=0,
                status=SafetyStatus.AVOID,
                reasons=[f"Contains avoided ingredient: {ingredient}"],
            )

    score = 100
    reasons: list[str] = []

    max_sodium = limits.max_for("NA")
    if max_sodium and food.sodium > 0:
        pct = food.sodium / max_sodium * 100
        if pct > 75:
            score -= 50
            reasons.append(
                f"Very high sodium ({round(food.sodium)}mg) - "
                f"{round(pct)}% of daily limit"
            )
        elif pct > 30:
            score -= 20
            reasons.append(f"High sodium ({round(food.sodium)}mg)")

    max_sugar = limits.max_for("SUGAR")
    if max_sugar and food.sugar > 0:
        pct = food.sugar / max_sugar * 100
        if pct > 75:
            score -= 40
            reasons.append(f"Very high sugar ({round(food.sugar)}g)")
        elif pct > 40:
            score -= 15
            reasons.append(f"High sugar ({round(food.sugar)}g)")

    max_potassium = limits.max_for("K")
    if max_potassium and food.potassium / max_potassium * 100 > 75:
        score -= 30
        reasons.append("High potassium")

    max_phosphorus = limits.max_for("P")
    if max_phosphorus and food.phosphorus / max_phosphorus * 100 > 75:
        score -= 30
        reasons.append("High phosphorus")

    if score <= _AVOID_SCORE:
        status = SafetyStatus.AVOID
    elif score < _CAUTION_SCORE:
        status = SafetyStatus.CAUTION
    else:
        status = SafetyStatus.SAFE
    return LimitCheck(
        score=max(0, score),
        status=status,
        reasons=reasons or ["Fits within your nutrition limits."],
    )
