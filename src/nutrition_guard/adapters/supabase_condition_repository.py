"""Supabase-backed condition, limit and exclusion store."""

import json
import logging
from dataclasses import dataclass

from supabase import Client

from nutrition_guard.domain.conditions import (
    Condition,
    ExclusionSeverity,
    IngredientExclusion,
    LimitType,
    NutrientLimitRecord,
)
from nutrition_guard.services.restrictions import ConditionRepository

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseConditionRepository(ConditionRepository):
    """Reads condition records; limits and exclusions reference conditions by id."""

    client: Client

    def list_conditions(self) -> list[Condition]:
        """Return every stored condition."""
        response = (
            self.client.table("conditions")
            .select("id, slug, label, description, nutritional_focus")
            .execute()
        )
        return [_parse_condition(row) for row in response.data or []]

    def list_nutrient_limits(
        self, condition_slugs: list[str]
    ) -> list[NutrientLimitRecord]:
        """Return limit rows for the given condition slugs."""
        slugs_by_id = self._slugs_by_id(condition_slugs)
        if not slugs_by_id:
            return []
        response = (
            self.client.table("nutrient_limits")
            .select("condition_id, nutrient, limit_type, limit_value, unit")
            .in_("condition_id", list(slugs_by_id))
            .execute()
        )
        records: list[NutrientLimitRecord] = []
        for row in response.data or []:
            slug = slugs_by_id.get(str(row.get("condition_id")))
            limit_type = _parse_limit_type(row.get("limit_type"))
            if slug is None or limit_type is None:
                _logger.warning(
                    "Skipping nutrient limit row: condition_id=%s limit_type=%s",
                    row.get("condition_id"),
                    row.get("limit_type"),
                )
                continue
            records.append(
                NutrientLimitRecord(
                    condition_slug=slug,
                    nutrient=str(row.get("nutrient") or ""),
                    limit_type=limit_type,
                    limit_value=str(row.get("limit_value") or ""),
                    unit=row.get("unit"),
                )
            )
        return records

    def list_exclusions(self, condition_slugs: list[str]) -> list[IngredientExclusion]:
        """Return exclusion rows for the given slugs plus global rows."""
        columns = (
            "condition_id, additive_category, ingredient_regex, "
            "risk_category, severity, source"
        )
        slugs_by_id = self._slugs_by_id(condition_slugs)
        rows: list[dict[str, object]] = []
        if slugs_by_id:
            scoped = (
                self.client.table("ingredient_exclusions")
                .select(columns)
                .in_("condition_id", list(slugs_by_id))
                .execute()
            )
            rows.extend(scoped.data or [])
        global_rows = (
            self.client.table("ingredient_exclusions")
            .select(columns)
            .is_("condition_id", "null")
            .execute()
        )
        rows.extend(global_rows.data or [])

        exclusions: list[IngredientExclusion] = []
        for row in rows:
            condition_id = row.get("condition_id")
            slug = None if condition_id is None else slugs_by_id.get(str(condition_id))
            severity = _parse_severity(row.get("severity"))
            if (condition_id is not None and slug is None) or severity is None:
                _logger.warning(
                    "Skipping exclusion row: condition_id=%s severity=%s",
                    condition_id,
                    row.get("severity"),
                )
                continue
            exclusions.append(
                IngredientExclusion(
                    condition_slug=slug,
                    additive_category=str(row.get("additive_category") or ""),
                    ingredient_regex=str(row.get("ingredient_regex") or ""),
                    risk_category=str(row.get("risk_category") or ""),
                    severity=severity,
                    source=row.get("source"),  # type: ignore[arg-type]
                )
            )
        return exclusions

    def _slugs_by_id(self, condition_slugs: list[str]) -> dict[str, str]:
        if not condition_slugs:
            return {}
        response = (
            self.client.table("conditions")
            .select("id, slug")
            .in_("slug", list(condition_slugs))
            .execute()
        )
        return {str(row["id"]): str(row["slug"]) for row in response.data or []}


def _parse_condition(row: dict[str, object]) -> Condition:
    focus_raw = row.get("nutritional_focus")
    if isinstance(focus_raw, str):
        try:
            focus_raw = json.loads(focus_raw)
        except json.JSONDecodeError:
            focus_raw = None
    focus: dict[str, tuple[str, ...]] = {}
    if isinstance(focus_raw, dict):
        for key, values in focus_raw.items():
            if isinstance(values, list):
                focus[str(key)] = tuple(str(value) for value in values)
    return Condition(
        id=str(row["id"]),
        slug=str(row["slug"]),
        label=str(row.get("label") or row["slug"]),
        description=str(row.get("description") or ""),
        nutritional_focus=focus,
    )


def _parse_limit_type(value: object) -> LimitType | None:
    if not isinstance(value, str):
        return None
    try:
        return LimitType(value.strip().upper())
    except ValueError:
        return None


def _parse_severity(value: object) -> ExclusionSeverity | None:
    if not isinstance(value, str):
        return None
    try:
        return ExclusionSeverity(value.strip().upper())
    except ValueError:
        return None
