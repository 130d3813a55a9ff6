"""Copy-on-write edit operations on the costing state.

Every function takes a state, returns a new state and leaves the input
untouched. None of them recompute; callers pass the result to
propagation.recompute() (the store does this in update()).

Lookups by (dish, ingredient) address the first matching recipe line.
"""

import copy
from typing import Optional

from menu_costing.core import units
from menu_costing.core.errors import DuplicateEntityError, InvalidFieldError, UnknownEntityError
from menu_costing.db.models import (
    CostingState,
    DishRow,
    InventoryItem,
    MappingRow,
    RecipeLine,
    RecipeUnit,
    TargetUnit,
)

PRICE_FIELDS = ("price_master", "price_menu", "price_test")


def _find_inventory(state: CostingState, name: str) -> InventoryItem:
    for item in state.inventory:
        if item.name == name:
            return item
    raise UnknownEntityError(f"Inventory item not found: {name}")


def _find_dish(state: CostingState, dish: str) -> DishRow:
    for row in state.dishes:
        if row.dish == dish:
            return row
    raise UnknownEntityError(f"Dish not found: {dish}")


def _find_line(state: CostingState, dish: str, ingredient: str) -> RecipeLine:
    for line in state.recipes:
        if line.dish == dish and line.ingredient_name == ingredient:
            return line
    raise UnknownEntityError(f"Recipe line not found: {dish} / {ingredient}")


def set_dish_price(state: CostingState, dish: str, field: str, value: Optional[float]) -> CostingState:
    if field not in PRICE_FIELDS:
        raise InvalidFieldError(f"Not a price field: {field}")
    out = copy.deepcopy(state)
    setattr(_find_dish(out, dish), field, value)
    return out


def set_inventory_price(state: CostingState, name: str, price: Optional[float]) -> CostingState:
    out = copy.deepcopy(state)
    _find_inventory(out, name).purchase_price = price
    return out


def set_inventory_unit(state: CostingState, name: str, purchase_unit: Optional[str],
                       target_unit: Optional[TargetUnit] = None,
                       package_content: Optional[float] = None) -> CostingState:
    """Change how an article is bought. target_unit None means infer from purchase_unit."""
    out = copy.deepcopy(state)
    item = _find_inventory(out, name)
    item.purchase_unit = purchase_unit
    item.target_unit = target_unit
    item.package_content_target = package_content
    return out


def apply_mapping(state: CostingState, recipe_name: str, inventory_name: Optional[str]) -> CostingState:
    """Set (or clear, with None) the user correction for a recipe ingredient."""
    out = copy.deepcopy(state)
    for row in out.mapping:
        if row.recipe_name == recipe_name:
            row.correction = inventory_name or None
            return out
    if not any(line.ingredient_name == recipe_name for line in out.recipes):
        raise UnknownEntityError(f"Recipe ingredient not found: {recipe_name}")
    out.mapping.append(MappingRow(recipe_name=recipe_name, correction=inventory_name or None))
    return out


def set_line_quantity(state: CostingState, dish: str, ingredient: str, quantity: Optional[float]) -> CostingState:
    out = copy.deepcopy(state)
    _find_line(out, dish, ingredient).quantity = quantity
    return out


def select_line_inventory(state: CostingState, dish: str, ingredient: str,
                          inventory_name: Optional[str]) -> CostingState:
    """Pin one recipe line to an article, overriding the mapping table."""
    out = copy.deepcopy(state)
    _find_line(out, dish, ingredient).inventory_selection = inventory_name or None
    return out


def suggest_recipe_unit(item: InventoryItem) -> Optional[RecipeUnit]:
    """The recipe unit that matches an article's (effective) target unit."""
    target = item.effective_target_unit or item.target_unit or units.to_base_unit(item.purchase_unit)
    return units.target_to_recipe_unit(target) if target else None


def fix_recipe_unit(state: CostingState, ingredient: str, unit: RecipeUnit) -> CostingState:
    """Set the unit on every recipe line using this ingredient name."""
    out = copy.deepcopy(state)
    found = False
    for line in out.recipes:
        if line.ingredient_name == ingredient:
            line.unit = unit
            found = True
    if not found:
        raise UnknownEntityError(f"Recipe ingredient not found: {ingredient}")
    return out


def add_inventory_item(state: CostingState, item: InventoryItem) -> CostingState:
    name = (item.name or "").strip()
    if not name:
        raise InvalidFieldError("Inventory item needs a name")
    if any(i.name == name for i in state.inventory):
        raise DuplicateEntityError(f"Inventory item already exists: {name}")
    out = copy.deepcopy(state)
    new_item = copy.deepcopy(item)
    new_item.name = name
    out.inventory.append(new_item)
    return out


def add_dish(state: CostingState, dish: DishRow) -> CostingState:
    name = (dish.dish or "").strip()
    if not name:
        raise InvalidFieldError("Dish needs a name")
    if any(d.dish.lower() == name.lower() for d in state.dishes):
        raise DuplicateEntityError(f"Dish already exists: {name}")
    out = copy.deepcopy(state)
    new_dish = copy.deepcopy(dish)
    new_dish.dish = name
    out.dishes.append(new_dish)
    return out


def add_recipe_line(state: CostingState, line: RecipeLine) -> CostingState:
    """
    Append a recipe line. Creates the dish (without prices) and the mapping
    row when they do not exist yet; a per-line selection seeds the new
    mapping row's correction.
    """
    dish = (line.dish or "").strip()
    ingredient = (line.ingredient_name or "").strip()
    if not dish or not ingredient:
        raise InvalidFieldError("Recipe line needs a dish and an ingredient")

    out = copy.deepcopy(state)
    new_line = copy.deepcopy(line)
    new_line.dish = dish
    new_line.ingredient_name = ingredient
    out.recipes.append(new_line)

    if not any(d.dish == dish for d in out.dishes):
        out.dishes.append(DishRow(dish=dish))
    if not any(m.recipe_name == ingredient for m in out.mapping):
        out.mapping.append(MappingRow(recipe_name=ingredient, correction=new_line.inventory_selection))
    return out


def remove_inventory_item(state: CostingState, name: str) -> CostingState:
    """Remove an article. Lines and mappings pointing at it degrade to diagnostics."""
    _find_inventory(state, name)
    out = copy.deepcopy(state)
    out.inventory = [i for i in out.inventory if i.name != name]
    return out


def remove_dish(state: CostingState, dish: str) -> CostingState:
    """Remove a dish and its recipe lines."""
    _find_dish(state, dish)
    out = copy.deepcopy(state)
    out.dishes = [d for d in out.dishes if d.dish != dish]
    out.recipes = [r for r in out.recipes if r.dish != dish]
    return out


def remove_recipe_line(state: CostingState, dish: str, ingredient: str) -> CostingState:
    """Remove the first line matching (dish, ingredient)."""
    out = copy.deepcopy(state)
    target = _find_line(out, dish, ingredient)
    out.recipes.remove(target)
    return out
