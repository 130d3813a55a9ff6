from menu_costing.core import reconcile
from menu_costing.db.models import (
    CostingState,
    DishRow,
    InventoryItem,
    MappingRow,
    RecipeLine,
    RecipeUnit,
)


def test_user_correction_survives_update():
    previous = CostingState(mapping=[MappingRow(recipe_name="Pommes", correction="Pommes frites TK")])
    fresh = CostingState(mapping=[MappingRow(recipe_name="Pommes", suggestion="Pommes Wedges")])
    merged = reconcile.merge(previous, fresh)
    assert len(merged.mapping) == 1
    assert merged.mapping[0].correction == "Pommes frites TK"
    assert merged.mapping[0].suggestion == "Pommes Wedges"


def test_fresh_values_win_for_non_editable_fields():
    previous = CostingState(inventory=[InventoryItem(name="Ketchup", purchase_price=4.0, purchase_unit="l")])
    fresh = CostingState(inventory=[InventoryItem(name="Ketchup", purchase_price=4.5, purchase_unit="l")])
    merged = reconcile.merge(previous, fresh)
    assert merged.inventory[0].purchase_price == 4.5


def test_dish_prices_are_not_carried():
    previous = CostingState(dishes=[DishRow(dish="Burger", price_master=9.90, price_test=10.50)])
    fresh = CostingState(dishes=[DishRow(dish="Burger", price_master=10.90)])
    merged = reconcile.merge(previous, fresh)
    assert merged.dishes == [DishRow(dish="Burger", price_master=10.90)]


def test_recipe_edits_carried_only_when_set():
    previous = CostingState(recipes=[
        RecipeLine(dish="Burger", ingredient_name="Patty", quantity=200, inventory_selection="Rinderpatty 180g"),
    ])
    fresh = CostingState(recipes=[
        RecipeLine(dish="Burger", ingredient_name="Patty", quantity=180, unit=RecipeUnit.PIECE),
    ])
    merged = reconcile.merge(previous, fresh)
    line = merged.recipes[0]
    assert line.quantity == 200
    assert line.unit == RecipeUnit.PIECE
    assert line.inventory_selection == "Rinderpatty 180g"


def test_previous_only_entities_are_appended():
    previous = CostingState(
        inventory=[InventoryItem(name="Ketchup"), InventoryItem(name="Hausgemachte Sauce")],
        dishes=[DishRow(dish="Burger"), DishRow(dish="Special")],
    )
    fresh = CostingState(inventory=[InventoryItem(name="Ketchup"), InventoryItem(name="Senf")],
                         dishes=[DishRow(dish="Burger")])
    merged = reconcile.merge(previous, fresh)
    assert [i.name for i in merged.inventory] == ["Ketchup", "Senf", "Hausgemachte Sauce"]
    assert [d.dish for d in merged.dishes] == ["Burger", "Special"]


def test_merge_with_itself_is_identity(burger_state):
    assert reconcile.merge(burger_state, burger_state) == burger_state


def test_duplicate_keys_pair_by_occurrence():
    previous = CostingState(recipes=[
        RecipeLine(dish="Bowl", ingredient_name="Reis", quantity=100),
        RecipeLine(dish="Bowl", ingredient_name="Reis", quantity=50),
    ])
    fresh = CostingState(recipes=[
        RecipeLine(dish="Bowl", ingredient_name="Reis"),
        RecipeLine(dish="Bowl", ingredient_name="Reis"),
    ])
    merged = reconcile.merge(previous, fresh)
    assert [l.quantity for l in merged.recipes] == [100, 50]


def test_merge_does_not_modify_inputs():
    previous = CostingState(mapping=[MappingRow(recipe_name="Pommes", correction="Pommes frites TK")])
    fresh = CostingState(mapping=[MappingRow(recipe_name="Pommes")])
    reconcile.merge(previous, fresh)
    assert fresh.mapping[0].correction is None
