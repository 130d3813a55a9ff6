from fastapi import APIRouter

from menu_costing.core import edits, store, units
from menu_costing.core.errors import InvalidFieldError
from menu_costing.db.models import DishRow, InventoryItem, RecipeLine
from app.schemas import (
    DishPriceEdit,
    InventoryPriceEdit,
    InventoryUnitEdit,
    LineQuantityEdit,
    LineSelectionEdit,
    MappingEdit,
    NewDish,
    NewInventoryItem,
    NewRecipeLine,
    RecipeUnitFix,
    state_response,
)

router = APIRouter(prefix="/edits", tags=["edits"])


def _target_unit(raw):
    if not raw:
        return None
    target = units.parse_target_unit(raw)
    if target is None:
        raise InvalidFieldError(f"Unknown target unit: {raw}")
    return target


def _recipe_unit(raw):
    if not raw:
        return None
    unit = units.parse_recipe_unit(raw)
    if unit is None:
        raise InvalidFieldError(f"Unknown recipe unit: {raw}")
    return unit


@router.post("/dishes/{dish}/price")
def dish_price(dish: str, body: DishPriceEdit):
    return state_response(store.update(lambda s: edits.set_dish_price(s, dish, body.field, body.value)))


@router.post("/inventory/{name}/price")
def inventory_price(name: str, body: InventoryPriceEdit):
    return state_response(store.update(lambda s: edits.set_inventory_price(s, name, body.price)))


@router.post("/inventory/{name}/unit")
def inventory_unit(name: str, body: InventoryUnitEdit):
    target = _target_unit(body.target_unit)
    return state_response(store.update(
        lambda s: edits.set_inventory_unit(s, name, body.purchase_unit, target, body.package_content)
    ))


@router.post("/mapping/{recipe_name}")
def mapping(recipe_name: str, body: MappingEdit):
    return state_response(store.update(lambda s: edits.apply_mapping(s, recipe_name, body.inventory_name)))


@router.post("/recipes/quantity")
def line_quantity(body: LineQuantityEdit):
    return state_response(store.update(
        lambda s: edits.set_line_quantity(s, body.dish, body.ingredient, body.quantity)
    ))


@router.post("/recipes/selection")
def line_selection(body: LineSelectionEdit):
    return state_response(store.update(
        lambda s: edits.select_line_inventory(s, body.dish, body.ingredient, body.inventory_name)
    ))


@router.post("/recipes/unit")
def recipe_unit(body: RecipeUnitFix):
    unit = _recipe_unit(body.unit)
    if unit is None:
        raise InvalidFieldError("Recipe unit is required")
    return state_response(store.update(lambda s: edits.fix_recipe_unit(s, body.ingredient, unit)))


@router.post("/inventory")
def add_inventory(body: NewInventoryItem):
    item = InventoryItem(
        name=body.name,
        group=body.group,
        purchase_price=body.purchase_price,
        purchase_unit=body.purchase_unit,
        target_unit=_target_unit(body.target_unit),
        package_content_target=body.package_content,
    )
    return state_response(store.update(lambda s: edits.add_inventory_item(s, item)))


@router.post("/dishes")
def add_dish(body: NewDish):
    dish = DishRow(
        dish=body.dish,
        price_master=body.price_master,
        price_menu=body.price_menu,
        price_test=body.price_test,
    )
    return state_response(store.update(lambda s: edits.add_dish(s, dish)))


@router.post("/recipes")
def add_recipe_line(body: NewRecipeLine):
    line = RecipeLine(
        dish=body.dish,
        ingredient_name=body.ingredient,
        quantity=body.quantity,
        unit=_recipe_unit(body.unit),
        inventory_selection=body.inventory_name or None,
    )
    return state_response(store.update(lambda s: edits.add_recipe_line(s, line)))


@router.delete("/inventory/{name}")
def remove_inventory(name: str):
    return state_response(store.update(lambda s: edits.remove_inventory_item(s, name)))


@router.delete("/dishes/{dish}")
def remove_dish(dish: str):
    return state_response(store.update(lambda s: edits.remove_dish(s, dish)))


@router.delete("/recipes/{dish}/{ingredient}")
def remove_recipe_line(dish: str, ingredient: str):
    return state_response(store.update(lambda s: edits.remove_recipe_line(s, dish, ingredient)))
