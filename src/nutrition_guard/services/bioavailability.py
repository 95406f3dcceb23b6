"""Grain phosphorus bioavailability tiers and absolute contraindications."""

from collections.abc import Iterable
from types import MappingProxyType

from nutrition_guard.domain.analysis import BioavailabilityTier, GrainNote
from nutrition_guard.domain.conditions import ConditionKind

_OPTIMAL_TERMS = ("bulgur", "barley", "buckwheat", "couscous", "millet")
_MODERATE_TERMS = ("brown rice", "wild rice", "oat", "quinoa", "amaranth")
_CONDITIONAL_TERMS = ("white rice", "white bread", "refined")
_WHOLE_GRAIN_TERMS = ("whole", "grain")
_GRAIN_KEYWORDS = ("flour", "wheat", "rice", "corn", "pasta", "bread", "cereal", "rye")

ABSOLUTE_CONTRAINDICATIONS: MappingProxyType[ConditionKind, tuple[str, ...]] = (
    MappingProxyType(
        {
            # Caramboxin in starfruit is a neurotoxin kidneys cannot clear.
            ConditionKind.KIDNEY_DISEASE: (
                "starfruit",
                "star fruit",
                "carambola",
                "averrhoa",
            ),
        }
    )
)


def classify_grain(ingredient_name: str | None) -> BioavailabilityTier:
    """Classify a grain or starch by phosphorus absorption burden."""
    lowered = (ingredient_name or "").lower()
    if any(term in lowered for term in _OPTIMAL_TERMS):
        return BioavailabilityTier.OPTIMAL
    if any(term in lowered for term in _MODERATE_TERMS):
        return BioavailabilityTier.MODERATE
    if any(term in lowered for term in _CONDITIONAL_TERMS):
        return BioavailabilityTier.CONDITIONAL
    if any(term in lowered for term in _WHOLE_GRAIN_TERMS):
        return BioavailabilityTier.MODERATE
    return BioavailabilityTier.AVOID


def grain_notes(ingredient_text: str | None) -> list[GrainNote]:
    """Classify the grain ingredients of a comma-separated ingredient list."""
    notes: list[GrainNote] = []
    seen: set[str] = set()
    for raw in (ingredient_text or "").split(","):
        ingredient = " ".join(raw.split()).lower()
        if not ingredient or ingredient in seen:
            continue
        tier = classify_grain(ingredient)
        if tier is BioavailabilityTier.AVOID and not any(
            keyword in ingredient for keyword in _GRAIN_KEYWORDS
        ):
            continue
        seen.add(ingredient)
        notes.append(GrainNote(ingredient=ingredient, tier=tier))
    return notes


def contraindicated_terms(
    text: str | None, kinds: Iterable[ConditionKind]
) -> list[str]:
    """Return contraindicated food terms present in the text for these conditions."""
    lowered = (text or "").lower()
    if not lowered:
        return []
    found: list[str] = []
    for kind in sorted(kinds, key=lambda item: item.value):
        for term in ABSOLUTE_CONTRAINDICATIONS.get(kind, ()):
            if term in lowered and term not in found:
                found.append(term)
    return found


def is_contraindicated(ingredient_name: str, kind: ConditionKind) -> bool:
    """Check one ingredient against one condition's contraindication list."""
    return bool(contraindicated_terms(ingredient_name, [kind]))
