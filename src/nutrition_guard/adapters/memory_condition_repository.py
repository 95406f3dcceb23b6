"""In-memory condition store, seeded with the reference clinical records."""

from dataclasses import dataclass, field

from nutrition_guard.domain.conditions import (
    Condition,
    IngredientExclusion,
    NutrientLimitRecord,
)
from nutrition_guard.seed_data import CONDITIONS, EXCLUSIONS, NUTRIENT_LIMITS
from nutrition_guard.services.restrictions import ConditionRepository


@dataclass
class InMemoryConditionRepository(ConditionRepository):
    """Condition repository holding records in process memory."""

    conditions: list[Condition] = field(default_factory=lambda: list(CONDITIONS))
    limits: list[NutrientLimitRecord] = field(
        default_factory=lambda: list(NUTRIENT_LIMITS)
    )
    exclusions: list[IngredientExclusion] = field(
        default_factory=lambda: list(EXCLUSIONS)
    )

    def list_conditions(self) -> list[Condition]:
        """Return every stored condition."""
        return list(self.conditions)

    def list_nutrient_limits(
        self, condition_slugs: list[str]
    ) -> list[NutrientLimitRecord]:
        """Return limits owned by any of the given conditions."""
        wanted = set(condition_slugs)
        return [limit for limit in self.limits if limit.condition_slug in wanted]

    def list_exclusions(self, condition_slugs: list[str]) -> list[IngredientExclusion]:
        """Return exclusions for the given conditions plus global ones."""
        wanted = set(condition_slugs)
        return [
            exclusion
            for exclusion in self.exclusions
            if exclusion.condition_slug is None or exclusion.condition_slug in wanted
        ]
