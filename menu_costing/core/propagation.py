"""Cost propagation: inventory price -> recipe line cost -> dish cost of goods and margin.

recompute() is the single entry point every import, edit and restore goes
through. It runs four steps in order over a deep copy of the input:

1. inventory: effective target unit and price per base unit
2. mapping: one MappingRow per recipe ingredient name (idempotent bootstrap)
3. recipe lines: resolved inventory article, unit cost and line cost
4. dishes: cost of goods, effective price, margin

Missing data never raises. Every derived field falls back to None and a
Diagnostic is recorded; diagnostics are ordered by step, then by the order
of the collection being processed.
"""

import copy
import logging
from collections import defaultdict
from typing import Optional

from menu_costing.core import matcher, units
from menu_costing.db.models import (
    CostingState,
    Diagnostic,
    DiagnosticCode,
    DishRow,
    EntityKind,
    InventoryItem,
    MappingRow,
    MappingStatus,
    RecipeLine,
)

logger = logging.getLogger(__name__)

# Effective dish price: first present value wins, in this order
PRICE_PRIORITY = (
    ("price_test", lambda d: d.price_test),
    ("price_menu", lambda d: d.price_menu),
    ("price_master", lambda d: d.price_master),
)


def effective_price(dish: DishRow) -> Optional[float]:
    for _, accessor in PRICE_PRIORITY:
        value = accessor(dish)
        if value is not None:
            return value
    return None


def package_content(item: InventoryItem, target) -> Optional[float]:
    """Explicit target content, else the legacy raw content, else the content implied by the purchase unit."""
    if item.package_content_target is not None:
        return item.package_content_target
    if item.package_content_raw is not None:
        return item.package_content_raw
    return units.implied_package_content(item.purchase_unit, target)


def resolve_inventory_name(line: RecipeLine, mapping_by_name: dict[str, MappingRow]) -> Optional[str]:
    """Per-line selection > mapping correction > mapping suggestion."""
    if line.inventory_selection:
        return line.inventory_selection
    row = mapping_by_name.get(line.ingredient_name)
    if row is None:
        return None
    return row.correction or row.suggestion or None


# ---------------------------------------------------------------------------
# Step 1: inventory
# ---------------------------------------------------------------------------

def compute_inventory(inventory: list[InventoryItem]) -> list[Diagnostic]:
    diagnostics = []
    for item in inventory:
        target = item.target_unit or units.to_base_unit(item.purchase_unit)
        content = package_content(item, target) if target else None
        item.effective_target_unit = target
        item.price_per_base_unit = units.price_per_base(item.purchase_price, content, target)

        missing = []
        if item.purchase_price is None:
            missing.append((DiagnosticCode.MISSING_PURCHASE_PRICE, "purchase_price"))
        if target is None:
            missing.append((DiagnosticCode.MISSING_UNIT, "purchase_unit"))
        elif not content:
            missing.append((DiagnosticCode.MISSING_PACKAGE_CONTENT, "package_content_target"))

        item.status_flags = {code for code, _ in missing} or {DiagnosticCode.OK}
        for code, field in missing:
            diagnostics.append(Diagnostic(code, EntityKind.INVENTORY, ingredient=item.name, missing_field=field))
    return diagnostics


# ---------------------------------------------------------------------------
# Step 2: mapping bootstrap
# ---------------------------------------------------------------------------

def ensure_mappings(recipes: list[RecipeLine], mapping: list[MappingRow],
                    inventory_names: list[str]) -> list[MappingRow]:
    """
    Return the mapping table with one row for every recipe ingredient name.
    New rows get a fuzzy suggestion and NEEDS_REVIEW status. Existing rows keep
    their correction; an absent suggestion is filled in and the status is
    derived from the correction. Running this twice changes nothing.
    """
    rows = list(mapping)
    by_name = {m.recipe_name: m for m in rows}
    for line in recipes:
        if line.ingredient_name not in by_name:
            row = MappingRow(recipe_name=line.ingredient_name)
            rows.append(row)
            by_name[row.recipe_name] = row

    known = set(inventory_names)
    for row in rows:
        # refill absent suggestions and ones naming a removed article
        if row.suggestion is None or row.suggestion not in known:
            row.suggestion = matcher.suggest(row.recipe_name, inventory_names)
        row.status = MappingStatus.RESOLVED if row.correction else MappingStatus.NEEDS_REVIEW
    return rows


# ---------------------------------------------------------------------------
# Step 3: recipe lines
# ---------------------------------------------------------------------------

_UNPRICED_FIELDS = (
    (DiagnosticCode.MISSING_PURCHASE_PRICE, "purchase_price"),
    (DiagnosticCode.MISSING_UNIT, "purchase_unit"),
    (DiagnosticCode.MISSING_PACKAGE_CONTENT, "package_content_target"),
)


def _unpriced_field(item: InventoryItem) -> str:
    """The inventory field that keeps an article from having a price per base unit."""
    for code, field in _UNPRICED_FIELDS:
        if code in item.status_flags:
            return field
    return "purchase_price"


def _line_failure(line: RecipeLine, mapped: Optional[str], item: Optional[InventoryItem]):
    """Return (code, missing field, referenced name) for the first failed check, or None."""
    if line.quantity is None or line.quantity <= 0:
        return DiagnosticCode.MISSING_QUANTITY, "quantity", line.ingredient_name
    if not mapped:
        return DiagnosticCode.MISSING_MAPPING, "mapping", line.ingredient_name
    if item is None:
        return DiagnosticCode.UNKNOWN_INVENTORY, "inventory", mapped
    if item.price_per_base_unit is None:
        return DiagnosticCode.MISSING_PURCHASE_PRICE, _unpriced_field(item), mapped
    expected = units.target_to_recipe_unit(item.effective_target_unit)
    if line.unit != expected:
        return DiagnosticCode.UNIT_MISMATCH, "unit", line.ingredient_name
    return None


def compute_recipe_lines(recipes: list[RecipeLine], mapping: list[MappingRow],
                         inventory: list[InventoryItem]) -> list[Diagnostic]:
    diagnostics = []
    mapping_by_name = {m.recipe_name: m for m in mapping}
    inventory_by_name = {}
    for item in inventory:
        inventory_by_name.setdefault(item.name, item)

    for line in recipes:
        mapped = resolve_inventory_name(line, mapping_by_name)
        item = inventory_by_name.get(mapped) if mapped else None
        line.resolved_inventory_name = mapped

        failure = _line_failure(line, mapped, item)
        if failure:
            code, field, ref = failure
            line.unit_cost = None
            line.line_cost = None
            line.diagnostic_code = code
            diagnostics.append(Diagnostic(code, EntityKind.RECIPE, dish=line.dish, ingredient=ref, missing_field=field))
            continue

        line.unit_cost = item.price_per_base_unit
        line.line_cost = line.quantity * line.unit_cost
        line.diagnostic_code = DiagnosticCode.OK
    return diagnostics


# ---------------------------------------------------------------------------
# Step 4: dishes
# ---------------------------------------------------------------------------

def compute_dishes(dishes: list[DishRow], recipes: list[RecipeLine]) -> list[Diagnostic]:
    diagnostics = []
    lines_by_dish = defaultdict(list)
    for line in recipes:
        lines_by_dish[line.dish].append(line)

    for dish in dishes:
        costs = [l.line_cost for l in lines_by_dish.get(dish.dish, []) if l.line_cost is not None]
        dish.cost_of_goods = sum(costs) if costs else None
        dish.effective_price = effective_price(dish)

        if dish.effective_price is not None and dish.cost_of_goods is not None:
            dish.margin = dish.effective_price - dish.cost_of_goods
            dish.margin_pct = dish.margin / dish.effective_price if dish.effective_price > 0 else None
        else:
            dish.margin = None
            dish.margin_pct = None

        codes = []
        if dish.effective_price is None:
            codes.append((DiagnosticCode.MISSING_PRICE, "price"))
        if dish.cost_of_goods is None:
            codes.append((DiagnosticCode.MISSING_RECIPE, "recipe"))
        dish.diagnostic_code = codes[0][0] if codes else DiagnosticCode.OK
        for code, field in codes:
            diagnostics.append(Diagnostic(code, EntityKind.DISH, dish=dish.dish, missing_field=field))
    return diagnostics


def recompute(state: CostingState) -> tuple[CostingState, list[Diagnostic]]:
    """Recompute every derived field. The input state is not modified."""
    out = copy.deepcopy(state)
    diagnostics = compute_inventory(out.inventory)
    out.mapping = ensure_mappings(out.recipes, out.mapping, [i.name for i in out.inventory])
    diagnostics += compute_recipe_lines(out.recipes, out.mapping, out.inventory)
    diagnostics += compute_dishes(out.dishes, out.recipes)
    logger.debug("Recomputed %d dishes with %d diagnostics", len(out.dishes), len(diagnostics))
    return out, diagnostics
