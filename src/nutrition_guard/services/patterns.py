"""Ingredient-text pattern matching for risky additive categories."""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from nutrition_guard.domain.conditions import ConditionKind, condition_kinds


class AdditiveCategory(Enum):
    """Additive families detected in ingredient lists."""

    PHOSPHATE = "phosphate_additives"
    POTASSIUM = "potassium_additives"
    SODIUM = "sodium_additives"
    HIDDEN_SUGAR = "hidden_sugars"
    TRANS_FAT = "trans_fats"


def _compile(*sources: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(source, re.IGNORECASE) for source in sources)


CATEGORY_PATTERNS: MappingProxyType[AdditiveCategory, tuple[re.Pattern[str], ...]] = (
    MappingProxyType(
        {
            # Inorganic phosphates are 90-100% absorbed.
            AdditiveCategory.PHOSPHATE: _compile(
                r"phosphoric",
                r"phosphate",
                r"sodium\s?prep",
                r"calcium\s?diphosphate",
                r"hexametaphosphate",
                r"tripolyphosphate",
                r"monocalcium\s?phosphate",
                r"dicalcium\s?phosphate",
                r"sodium\s?polyphosphate",
            ),
            AdditiveCategory.POTASSIUM: _compile(
                r"potassium\s?chloride",
                r"potassium\s?lactate",
                r"potassium\s?sorbate",
                r"potassium\s?citrate",
                r"potassium\s?benzoate",
                r"acesulfame\s?potassium",
            ),
            AdditiveCategory.SODIUM: _compile(
                r"monosodium\s?glutamate",
                r"sodium\s?benzoate",
                r"sodium\s?nitrite",
                r"sodium\s?bi\s?carbonate",
                r"disodium\s?guanylate",
            ),
            AdditiveCategory.HIDDEN_SUGAR: _compile(
                r"cane\s?juice",
                r"cane\s?sugar",
                r"maltodextrin",
                r"rice\s?syrup",
                r"corn\s?syrup",
                r"high\s?fructose\s?corn\s?syrup",
                r"dextrose",
                r"fructose",
            ),
            AdditiveCategory.TRANS_FAT: _compile(
                r"partially\s?hydrogenated",
                r"shortening",
            ),
        }
    )
)

NITRATE_PATTERNS: tuple[re.Pattern[str], ...] = _compile(r"nitrates?", r"nitrites?")


def match_categories(ingredient_text: str | None) -> frozenset[AdditiveCategory]:
    """Return every additive category with at least one hit in the text."""
    if not ingredient_text:
        return frozenset()
    return frozenset(
        category
        for category, patterns in CATEGORY_PATTERNS.items()
        if any(pattern.search(ingredient_text) for pattern in patterns)
    )


def found_patterns(
    ingredient_text: str | None, patterns: Iterable[re.Pattern[str]]
) -> list[str]:
    """Return the sources of the patterns that hit, in table order, de-duplicated."""
    if not ingredient_text:
        return []
    found: list[str] = []
    for pattern in patterns:
        if pattern.search(ingredient_text) and pattern.pattern not in found:
            found.append(pattern.pattern)
    return found


@dataclass(frozen=True)
class AdditiveScan:
    """Condition-aware summary of additives found in an ingredient list."""

    has_additives: bool
    dangerous_ingredients: list[str]
    safety_message: str


_SAFE_MESSAGE = "Safe"


def scan_for_additives(
    ingredient_text: str | None, condition_slugs: Sequence[str] = ()
) -> AdditiveScan:
    """Scan ingredient text and pick the most severe message for the user."""
    if not ingredient_text:
        return AdditiveScan(
            has_additives=False,
            dangerous_ingredients=[],
            safety_message="No ingredients provided",
        )

    kinds = condition_kinds(condition_slugs)
    has_kidney_disease = ConditionKind.KIDNEY_DISEASE in kinds
    sugar_sensitive = bool(kinds & {ConditionKind.DIABETES, ConditionKind.PCOS})
    found: list[str] = []
    message = _SAFE_MESSAGE

    phosphates = found_patterns(
        ingredient_text, CATEGORY_PATTERNS[AdditiveCategory.PHOSPHATE]
    )
    if phosphates:
        found.extend(phosphates)
        if has_kidney_disease:
            message = (
                "CRITICAL ALERT: Phosphate additives detected. "
                "Highly dangerous for CKD."
            )
        else:
            message = "Warning: Phosphate additives detected."

    potassium = found_patterns(
        ingredient_text, CATEGORY_PATTERNS[AdditiveCategory.POTASSIUM]
    )
    if potassium:
        found.extend(potassium)
        if has_kidney_disease:
            message = (
                "LETHAL RISK: Potassium additives detected. "
                "Strictly prohibited for CKD."
            )
        elif "CRITICAL" not in message:
            message = "Warning: Potassium additives detected."

    sugars = found_patterns(
        ingredient_text, CATEGORY_PATTERNS[AdditiveCategory.HIDDEN_SUGAR]
    )
    if sugars:
        found.extend(sugars)
        if sugar_sensitive:
            if message == _SAFE_MESSAGE:
                message = "Warning: Hidden sugars detected. May spike insulin/glucose."
            elif "CRITICAL" not in message and "LETHAL" not in message:
                message += " Also contains hidden sugars."

    return AdditiveScan(
        has_additives=bool(found),
        dangerous_ingredients=list(dict.fromkeys(found)),
        safety_message=message,
    )
