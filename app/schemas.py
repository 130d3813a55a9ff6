from dataclasses import asdict
from typing import Any, Literal, Optional

from pydantic import BaseModel

from menu_costing.core.day_rollup import clamp_pct
from menu_costing.core.outlets import OutletState
from menu_costing.core.snapshot import day_to_dict, outlets_to_dict, state_to_dict
from menu_costing.db.models import CostingState, DayState, DaySummary, Diagnostic


class ImportRequest(BaseModel):
    tables: dict[str, list[dict[str, Any]]]
    mode: Literal["replace", "update"] = "replace"


class DishPriceEdit(BaseModel):
    field: Literal["price_master", "price_menu", "price_test"]
    value: Optional[float] = None


class InventoryPriceEdit(BaseModel):
    price: Optional[float] = None


class InventoryUnitEdit(BaseModel):
    purchase_unit: Optional[str] = None
    target_unit: Optional[str] = None  # kg / L / stk / mass / volume / count
    package_content: Optional[float] = None


class MappingEdit(BaseModel):
    inventory_name: Optional[str] = None


class LineQuantityEdit(BaseModel):
    dish: str
    ingredient: str
    quantity: Optional[float] = None


class LineSelectionEdit(BaseModel):
    dish: str
    ingredient: str
    inventory_name: Optional[str] = None


class RecipeUnitFix(BaseModel):
    ingredient: str
    unit: str  # g / ml / piece


class NewInventoryItem(BaseModel):
    name: str
    group: Optional[str] = None
    purchase_price: Optional[float] = None
    purchase_unit: Optional[str] = None
    target_unit: Optional[str] = None
    package_content: Optional[float] = None


class NewDish(BaseModel):
    dish: str
    price_master: Optional[float] = None
    price_menu: Optional[float] = None
    price_test: Optional[float] = None


class NewRecipeLine(BaseModel):
    dish: str
    ingredient: str
    quantity: Optional[float] = None
    unit: Optional[str] = None
    inventory_name: Optional[str] = None


class DaySaleInput(BaseModel):
    dish: str
    quantity: Optional[float] = None
    price_override: Optional[float] = None
    clear_override: bool = False


class DaySettingsInput(BaseModel):
    surcharge_pct: Optional[float] = None
    franchise_fee_pct: Optional[float] = None


class OutletCreate(BaseModel):
    name: str


class InventoryOverride(BaseModel):
    name: str
    price: Optional[float] = None


class PriceOverride(BaseModel):
    dish: str
    field: Literal["price_menu", "price_test"]
    price: Optional[float] = None


def state_response(result: tuple[CostingState, list[Diagnostic]]) -> dict:
    state, diagnostics = result
    return {
        "data": state_to_dict(state),
        "diagnostics": [d.to_dict() for d in diagnostics],
    }


def day_response(day: DayState) -> dict:
    data = day_to_dict(day)
    data["surcharge_pct"] = clamp_pct(day.surcharge_pct)
    data["franchise_fee_pct"] = clamp_pct(day.franchise_fee_pct)
    return data


def summary_response(summary: DaySummary) -> dict:
    data = asdict(summary)
    for line in data["consumption"]:
        line["unit"] = line["unit"].value
    return data


def outlets_response(outlets: OutletState) -> dict:
    return outlets_to_dict(outlets)
