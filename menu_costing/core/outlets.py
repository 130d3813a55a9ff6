"""Outlets: several locations sharing recipes and master prices.

Each outlet may override inventory purchase prices and dish menu/test
prices. The master price is the shared reference and is never overridden.
apply_outlet() produces the state the engine computes for one outlet.
"""

import copy
import uuid
from dataclasses import dataclass, field
from typing import Optional

from menu_costing.core.errors import InvalidFieldError, UnknownEntityError
from menu_costing.db.models import CostingState

OVERRIDABLE_PRICE_FIELDS = ("price_menu", "price_test")


@dataclass
class Outlet:
    id: str
    name: str


@dataclass
class OutletOverrides:
    """inventory: article name -> purchase price; prices: dish -> {field: price}."""
    inventory: dict[str, float] = field(default_factory=dict)
    prices: dict[str, dict[str, Optional[float]]] = field(default_factory=dict)


@dataclass
class OutletState:
    outlets: list[Outlet] = field(default_factory=list)
    selected_outlet_id: Optional[str] = None
    overrides_by_outlet_id: dict[str, OutletOverrides] = field(default_factory=dict)

    def selected_overrides(self) -> OutletOverrides:
        return self.overrides_by_outlet_id.get(self.selected_outlet_id) or OutletOverrides()


def make_id() -> str:
    return uuid.uuid4().hex[:12]


def initial_outlet_state(name: str = "Main") -> OutletState:
    outlet = Outlet(id=make_id(), name=name)
    return OutletState(
        outlets=[outlet],
        selected_outlet_id=outlet.id,
        overrides_by_outlet_id={outlet.id: OutletOverrides()},
    )


def add_outlet(state: OutletState, name: str) -> OutletState:
    """Add an outlet with no overrides and select it."""
    name = (name or "").strip()
    if not name:
        raise InvalidFieldError("Outlet needs a name")
    out = copy.deepcopy(state)
    outlet = Outlet(id=make_id(), name=name)
    out.outlets.append(outlet)
    out.overrides_by_outlet_id[outlet.id] = OutletOverrides()
    out.selected_outlet_id = outlet.id
    return out


def select_outlet(state: OutletState, outlet_id: str) -> OutletState:
    if not any(o.id == outlet_id for o in state.outlets):
        raise UnknownEntityError(f"Outlet not found: {outlet_id}")
    out = copy.deepcopy(state)
    out.selected_outlet_id = outlet_id
    return out


def _selected(state: OutletState) -> OutletOverrides:
    if state.selected_outlet_id is None:
        raise UnknownEntityError("No outlet selected")
    return state.overrides_by_outlet_id.setdefault(state.selected_outlet_id, OutletOverrides())


def set_inventory_override(state: OutletState, name: str, price: Optional[float]) -> OutletState:
    """Override an article's purchase price for the selected outlet; None removes the override."""
    out = copy.deepcopy(state)
    overrides = _selected(out)
    if price is None:
        overrides.inventory.pop(name, None)
    else:
        overrides.inventory[name] = price
    return out


def set_price_override(state: OutletState, dish: str, field_name: str, price: Optional[float]) -> OutletState:
    """Override a dish's menu or test price for the selected outlet; None removes the override."""
    if field_name not in OVERRIDABLE_PRICE_FIELDS:
        raise InvalidFieldError(f"Not an outlet price field: {field_name}")
    out = copy.deepcopy(state)
    overrides = _selected(out)
    if price is None:
        dish_prices = overrides.prices.get(dish, {})
        dish_prices.pop(field_name, None)
        if not dish_prices:
            overrides.prices.pop(dish, None)
    else:
        overrides.prices.setdefault(dish, {})[field_name] = price
    return out


def apply_outlet(state: CostingState, overrides: OutletOverrides) -> CostingState:
    """Return a copy of state with the outlet's overrides applied."""
    out = copy.deepcopy(state)
    for item in out.inventory:
        if item.name in overrides.inventory:
            item.purchase_price = overrides.inventory[item.name]
    for dish in out.dishes:
        for field_name, price in overrides.prices.get(dish.dish, {}).items():
            if field_name in OVERRIDABLE_PRICE_FIELDS and price is not None:
                setattr(dish, field_name, price)
    return out
