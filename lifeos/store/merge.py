"""
Merge-on-load for locally stored documents.

Documents written by older versions lack newer fields. The stored document
is overlaid on the default document key by key, and a few nested fields
are backfilled so old records still validate:

- investments: monthlySIPAmount defaults to 0
- goals: isFinancial false, currentCost 0, yearsAway 1, inflationRate 6,
  futureValue 0, requiredSIP 0, tier Freedom
- singleton objects (savingsConfig, incomeTarget, growthStrategy,
  taxProfile) are merged key by key onto their defaults

Collections are never merged element-wise: a stored list replaces the
default list.
"""

from typing import Any

from lifeos.models.app_data import AppData


SINGLETON_KEYS = ("savingsConfig", "incomeTarget", "growthStrategy", "taxProfile")

# (key, fallback) applied with `or`, so null, missing and zero all fall back
GOAL_BACKFILLS = (
    ("currentCost", 0),
    ("yearsAway", 1),
    ("inflationRate", 6),
    ("futureValue", 0),
    ("requiredSIP", 0),
    ("tier", "Freedom"),
)


def _backfill_investment(investment: Any) -> Any:
    if not isinstance(investment, dict):
        return investment
    return {**investment, "monthlySIPAmount": investment.get("monthlySIPAmount") or 0}


def _backfill_goal(goal: Any) -> Any:
    if not isinstance(goal, dict):
        return goal
    merged = {**goal, "isFinancial": goal.get("isFinancial", False)}
    for key, fallback in GOAL_BACKFILLS:
        merged[key] = goal.get(key) or fallback
    return merged


def merge_document(document: dict[str, Any], defaults: dict[str, Any]) -> dict[str, Any]:
    """Overlay a stored camelCase document onto the default document."""
    merged = {**defaults, **document}

    for key in SINGLETON_KEYS:
        stored = document.get(key)
        if isinstance(stored, dict):
            merged[key] = {**defaults.get(key, {}), **stored}
        elif stored is None:
            merged[key] = defaults.get(key)

    if isinstance(merged.get("investments"), list):
        merged["investments"] = [_backfill_investment(i) for i in merged["investments"]]
    if isinstance(merged.get("goals"), list):
        merged["goals"] = [_backfill_goal(g) for g in merged["goals"]]

    return merged


def merge_with_defaults(document: dict[str, Any], defaults: AppData) -> AppData:
    """
    Build a root from a stored document.

    Raises:
        pydantic.ValidationError: If the merged document is still malformed
    """
    return AppData.model_validate(merge_document(document, defaults.to_document()))
