"""Flat JSON snapshots of the costing state, day input and outlets.

Snapshots include every derived field so an export is self-describing, but
restore() always recomputes: derived values read back from text are never
trusted.
"""

import json
from dataclasses import asdict
from enum import Enum
from typing import Optional

from menu_costing.core.outlets import Outlet, OutletOverrides, OutletState
from menu_costing.core.propagation import recompute
from menu_costing.db.models import (
    CostingState,
    DaySale,
    DayState,
    Diagnostic,
    DiagnosticCode,
    DishRow,
    InventoryItem,
    MappingRow,
    MappingStatus,
    RecipeLine,
    RecipeUnit,
    TargetUnit,
)


def _jsonable(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(_jsonable(v) for v in value)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def _enum(enum_cls, value):
    return enum_cls(value) if value not in (None, "") else None


def state_to_dict(state: CostingState) -> dict:
    return _jsonable(asdict(state))


def state_from_dict(data: dict) -> CostingState:
    """Rebuild a CostingState from state_to_dict() output. Unknown keys are ignored."""
    data = data or {}
    inventory = [
        InventoryItem(
            name=i["name"],
            group=i.get("group"),
            purchase_price=i.get("purchase_price"),
            purchase_unit=i.get("purchase_unit"),
            package_content_raw=i.get("package_content_raw"),
            target_unit=_enum(TargetUnit, i.get("target_unit")),
            package_content_target=i.get("package_content_target"),
            effective_target_unit=_enum(TargetUnit, i.get("effective_target_unit")),
            price_per_base_unit=i.get("price_per_base_unit"),
            status_flags={DiagnosticCode(f) for f in i.get("status_flags") or []},
        )
        for i in data.get("inventory", [])
    ]
    mapping = [
        MappingRow(
            recipe_name=m["recipe_name"],
            suggestion=m.get("suggestion"),
            correction=m.get("correction"),
            status=_enum(MappingStatus, m.get("status")) or MappingStatus.NEEDS_REVIEW,
        )
        for m in data.get("mapping", [])
    ]
    recipes = [
        RecipeLine(
            dish=r["dish"],
            ingredient_name=r["ingredient_name"],
            quantity=r.get("quantity"),
            unit=_enum(RecipeUnit, r.get("unit")),
            inventory_selection=r.get("inventory_selection"),
            resolved_inventory_name=r.get("resolved_inventory_name"),
            unit_cost=r.get("unit_cost"),
            line_cost=r.get("line_cost"),
            diagnostic_code=_enum(DiagnosticCode, r.get("diagnostic_code")),
        )
        for r in data.get("recipes", [])
    ]
    dishes = [
        DishRow(
            dish=d["dish"],
            price_master=d.get("price_master"),
            price_menu=d.get("price_menu"),
            price_test=d.get("price_test"),
            effective_price=d.get("effective_price"),
            cost_of_goods=d.get("cost_of_goods"),
            margin=d.get("margin"),
            margin_pct=d.get("margin_pct"),
            diagnostic_code=_enum(DiagnosticCode, d.get("diagnostic_code")),
        )
        for d in data.get("dishes", [])
    ]
    return CostingState(inventory=inventory, mapping=mapping, recipes=recipes, dishes=dishes)


def day_to_dict(day: DayState) -> dict:
    return _jsonable(asdict(day))


def day_from_dict(data: Optional[dict]) -> DayState:
    data = data or {}
    sales = {
        dish: DaySale(quantity=int(s.get("quantity") or 0), price_override=s.get("price_override"))
        for dish, s in (data.get("sales") or {}).items()
    }
    return DayState(
        sales=sales,
        surcharge_pct=float(data.get("surcharge_pct") or 0),
        franchise_fee_pct=float(data.get("franchise_fee_pct") or 0),
    )


def outlets_to_dict(outlets: OutletState) -> dict:
    return _jsonable(asdict(outlets))


def outlets_from_dict(data: Optional[dict]) -> Optional[OutletState]:
    if not data:
        return None
    return OutletState(
        outlets=[Outlet(id=o["id"], name=o["name"]) for o in data.get("outlets", [])],
        selected_outlet_id=data.get("selected_outlet_id"),
        overrides_by_outlet_id={
            outlet_id: OutletOverrides(
                inventory=dict(o.get("inventory") or {}),
                prices={dish: dict(p) for dish, p in (o.get("prices") or {}).items()},
            )
            for outlet_id, o in (data.get("overrides_by_outlet_id") or {}).items()
        },
    )


def dumps(state: CostingState, day: DayState = None, outlets: OutletState = None) -> str:
    payload = {"data": state_to_dict(state)}
    if day is not None:
        payload["day"] = day_to_dict(day)
    if outlets is not None:
        payload["outlets"] = outlets_to_dict(outlets)
    return json.dumps(payload, ensure_ascii=False)


def loads(text: str) -> tuple[CostingState, Optional[DayState], Optional[OutletState]]:
    """Parse a snapshot without recomputing. Raises ValueError on malformed text."""
    try:
        payload = json.loads(text)
        state = state_from_dict(payload["data"])
        day = day_from_dict(payload["day"]) if payload.get("day") is not None else None
        outlets = outlets_from_dict(payload.get("outlets"))
    except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed snapshot: {e}") from e
    return state, day, outlets


def restore(text: str) -> tuple[CostingState, list[Diagnostic]]:
    """Parse a snapshot and recompute it."""
    state, _, _ = loads(text)
    return recompute(state)
