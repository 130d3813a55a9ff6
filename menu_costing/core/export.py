"""Round-trip export: the costing state as row-shaped records per sheet.

Column labels are the first accepted label of each import schema, so an
unmodified export normalizes back into the same state. Derived columns are
included for the reader and ignored again on import.
"""

from typing import Optional

from menu_costing.core.normalizer import DISH_SCHEMA, INVENTORY_SCHEMA, MAPPING_SCHEMA, RECIPE_SCHEMA
from menu_costing.db.models import CostingState


def _label(schema, field: str) -> str:
    return schema.columns[field][0]


def _cell(value) -> object:
    """Absent values export as empty cells; enums as their value."""
    if value is None:
        return ""
    return getattr(value, "value", value)


def _flags(flags: Optional[set]) -> str:
    return ", ".join(sorted(f.value for f in flags or ()))


def inventory_rows(state: CostingState) -> list[dict]:
    s = INVENTORY_SCHEMA
    return [{
        _label(s, "name"): i.name,
        _label(s, "group"): _cell(i.group),
        _label(s, "purchase_price"): _cell(i.purchase_price),
        _label(s, "purchase_unit"): _cell(i.purchase_unit),
        _label(s, "package_content_raw"): _cell(i.package_content_raw),
        _label(s, "target_unit"): _cell(i.target_unit),
        _label(s, "package_content_target"): _cell(i.package_content_target),
        "Zieleinheit (abgeleitet)": _cell(i.effective_target_unit),
        "EK pro Basiseinheit": _cell(i.price_per_base_unit),
        "STATUS": _flags(i.status_flags),
    } for i in state.inventory]


def mapping_rows(state: CostingState) -> list[dict]:
    s = MAPPING_SCHEMA
    return [{
        _label(s, "recipe_name"): m.recipe_name,
        _label(s, "suggestion"): _cell(m.suggestion),
        _label(s, "correction"): _cell(m.correction),
        "Status": _cell(m.status),
    } for m in state.mapping]


def recipe_rows(state: CostingState) -> list[dict]:
    s = RECIPE_SCHEMA
    return [{
        _label(s, "dish"): r.dish,
        _label(s, "ingredient_name"): r.ingredient_name,
        _label(s, "quantity"): _cell(r.quantity),
        _label(s, "unit"): _cell(r.unit),
        _label(s, "inventory_selection"): _cell(r.inventory_selection),
        "Inventur-Zutat (gemappt)": _cell(r.resolved_inventory_name),
        "EK aus Inventur (Base)": _cell(r.unit_cost),
        "Kosten": _cell(r.line_cost),
        "STATUS": _cell(r.diagnostic_code),
    } for r in state.recipes]


def dish_rows(state: CostingState) -> list[dict]:
    s = DISH_SCHEMA
    return [{
        _label(s, "dish"): d.dish,
        _label(s, "price_master"): _cell(d.price_master),
        _label(s, "price_menu"): _cell(d.price_menu),
        _label(s, "price_test"): _cell(d.price_test),
        "Preis (effektiv)": _cell(d.effective_price),
        "Wareneinsatz (aus Rezept)": _cell(d.cost_of_goods),
        "DB €": _cell(d.margin),
        "DB %": _cell(d.margin_pct),
        "STATUS": _cell(d.diagnostic_code),
    } for d in state.dishes]


def export_tables(state: CostingState) -> dict[str, list[dict]]:
    """Return {sheet name: rows} using the import sheet names."""
    return {
        INVENTORY_SCHEMA.sheet_names[0]: inventory_rows(state),
        MAPPING_SCHEMA.sheet_names[0]: mapping_rows(state),
        RECIPE_SCHEMA.sheet_names[0]: recipe_rows(state),
        DISH_SCHEMA.sheet_names[0]: dish_rows(state),
    }
