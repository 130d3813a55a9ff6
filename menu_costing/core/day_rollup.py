"""Day rollup: aggregate sold dishes into revenue, cost, net margin and consumption.

rollup() runs downstream of a recomputed state: it relies on each dish's
effective_price and cost_of_goods and on each article's price_per_base_unit.
A dish sold without any price adds nothing to revenue and is listed as
unpriced rather than counted as zero revenue.
"""

import math
from typing import Optional

from menu_costing.core.propagation import resolve_inventory_name
from menu_costing.db.models import (
    ConsumptionLine,
    CostingState,
    DaySale,
    DayState,
    DaySummary,
    DaySummaryLine,
    DishRow,
    InventoryItem,
    MappingRow,
    RecipeLine,
)


def clamp_pct(value: Optional[float]) -> float:
    """Clamp a percentage to [0, 100]; None and non-finite values become 0."""
    if value is None or not math.isfinite(value):
        return 0.0
    return min(max(float(value), 0.0), 100.0)


def sold_quantity(value: Optional[float]) -> int:
    """Sold quantities are non-negative whole numbers."""
    if value is None or not math.isfinite(value):
        return 0
    return max(0, math.floor(value))


def set_sale(day: DayState, dish: str, quantity: Optional[float] = None,
             price_override: Optional[float] = None, clear_override: bool = False) -> DayState:
    """Return a copy of day with the sale for dish updated."""
    sales = dict(day.sales)
    current = sales.get(dish, DaySale())
    sales[dish] = DaySale(
        quantity=sold_quantity(quantity) if quantity is not None else current.quantity,
        price_override=None if clear_override else (
            price_override if price_override is not None else current.price_override
        ),
    )
    return DayState(sales=sales, surcharge_pct=day.surcharge_pct, franchise_fee_pct=day.franchise_fee_pct)


def set_rates(day: DayState, surcharge_pct: Optional[float] = None,
              franchise_fee_pct: Optional[float] = None) -> DayState:
    """Return a copy of day with clamped surcharge and/or franchise fee."""
    return DayState(
        sales=dict(day.sales),
        surcharge_pct=clamp_pct(surcharge_pct) if surcharge_pct is not None else day.surcharge_pct,
        franchise_fee_pct=clamp_pct(franchise_fee_pct) if franchise_fee_pct is not None else day.franchise_fee_pct,
    )


def rollup(dishes: list[DishRow], recipe_lines: list[RecipeLine], inventory: list[InventoryItem],
           mapping: list[MappingRow], day_sales: dict[str, DaySale],
           surcharge_pct: float = 0.0, franchise_fee_pct: float = 0.0) -> DaySummary:
    """
    Aggregate a trading day.

    revenue_adjusted = revenue * (1 + surcharge/100)
    franchise_fee    = revenue_adjusted * fee/100
    net_margin       = revenue_adjusted - franchise_fee - total_cost
    """
    surcharge = clamp_pct(surcharge_pct) / 100
    fee_rate = clamp_pct(franchise_fee_pct) / 100

    mapping_by_name = {m.recipe_name: m for m in mapping}
    price_by_article = {}
    for item in inventory:
        price_by_article.setdefault(item.name, item.price_per_base_unit)

    lines_by_dish: dict[str, list[RecipeLine]] = {}
    for line in recipe_lines:
        lines_by_dish.setdefault(line.dish, []).append(line)

    summary = DaySummary()
    # key: (article name, unit) -> consumption
    consumption: dict[tuple, ConsumptionLine] = {}

    for dish in dishes:
        sale = day_sales.get(dish.dish)
        sold = sold_quantity(sale.quantity) if sale else 0
        if sold <= 0:
            continue

        price = sale.price_override if sale.price_override is not None else dish.effective_price
        revenue = price * sold if price is not None else None
        cost = dish.cost_of_goods * sold if dish.cost_of_goods is not None else None

        if revenue is not None:
            summary.revenue += revenue
        else:
            summary.unpriced_dishes.append(dish.dish)
        if cost is not None:
            summary.total_cost += cost
        else:
            summary.uncosted_dishes.append(dish.dish)
        summary.lines.append(DaySummaryLine(dish.dish, sold, price, revenue, cost))

        for line in lines_by_dish.get(dish.dish, []):
            if not line.quantity or not line.unit:
                continue
            article = resolve_inventory_name(line, mapping_by_name)
            if not article:
                continue
            used = line.quantity * sold
            entry = consumption.setdefault((article, line.unit), ConsumptionLine(article, line.unit))
            entry.quantity += used
            base_price = price_by_article.get(article)
            if base_price is not None:
                entry.cost += used * base_price

    summary.revenue_adjusted = summary.revenue * (1 + surcharge)
    summary.franchise_fee = summary.revenue_adjusted * fee_rate
    summary.net_margin = summary.revenue_adjusted - summary.franchise_fee - summary.total_cost
    summary.net_margin_pct = (
        summary.net_margin / summary.revenue_adjusted if summary.revenue_adjusted > 0 else None
    )
    summary.consumption = sorted(consumption.values(), key=lambda c: (c.name, c.unit.value))
    return summary


def rollup_day(state: CostingState, day: DayState) -> DaySummary:
    """Roll up a recomputed state with the stored day input."""
    return rollup(
        state.dishes, state.recipes, state.inventory, state.mapping,
        day.sales, day.surcharge_pct, day.franchise_fee_pct,
    )
