"""Thresholds used by the conflict engine.

The cut-offs below come from dietitian guidance rather than validated clinical
studies, so they are data: override them through ``Settings.engine_policy`` or
pass a custom policy to ``evaluate``.
"""

from pydantic import BaseModel, ConfigDict, Field


class CarbCeilings(BaseModel):
    """Per-meal carbohydrate ceilings (g) by gender and goal."""

    model_config = ConfigDict(frozen=True)

    male_weight_loss: float = 60.0
    male_maintenance: float = 75.0
    female_weight_loss: float = 45.0
    female_maintenance: float = 60.0
    default: float = 60.0


class EnginePolicy(BaseModel):
    """Swappable numeric policy for the conflict engine."""

    model_config = ConfigDict(frozen=True)

    default_daily_sodium_mg: float = 2300.0
    meals_per_day: int = Field(default=3, ge=1)
    hypertension_sodium_ceiling_mg: float = 750.0
    hypertension_kidney_sodium_ceiling_mg: float = 500.0

    carb_ceilings: CarbCeilings = CarbCeilings()
    fiber_buffer_g: float = 10.0
    moderate_carbs_g: float = 40.0
    low_fiber_g: float = 3.0

    kidney_potassium_caution_mg: float = 200.0
    kidney_potassium_avoid_mg: float = 350.0
    dash_potassium_mg: float = 300.0
    dash_sodium_mg: float = 400.0

    pcos_added_sugar_g: float = 10.0
    low_fat_g: float = 5.0

    dual_fiber_g: float = 5.0
    dual_phosphorus_mg: float = 200.0


DEFAULT_POLICY = EnginePolicy()
