"""Update-import merge: fold a freshly imported state into the edited state.

Entities are matched by natural key:

    inventory  name
    mapping    recipe_name
    recipes    (dish, ingredient_name)
    dishes     dish

For entities in both states the fresh import wins, except for the fields a
user edits by hand, which are carried over from the previous state when set
there. Entities only in the previous state (manual additions, or rows removed
from the new source) are appended unchanged. Dish prices are never carried
over; a new price list is the point of an update import.

Duplicate keys are paired by occurrence: the n-th fresh row with a key takes
its edits from the n-th previous row with that key. This keeps merge(s, s)
equal to s.
"""

import copy
import logging
from collections import defaultdict
from typing import Callable

from menu_costing.db.models import CostingState

logger = logging.getLogger(__name__)

MAPPING_EDITABLE = ("correction",)
RECIPE_EDITABLE = ("quantity", "unit", "inventory_selection")


def _carry(fields: tuple[str, ...]) -> Callable:
    def apply(previous, fresh) -> None:
        for name in fields:
            value = getattr(previous, name)
            if value is not None:
                setattr(fresh, name, value)
    return apply


def _merge_collection(previous: list, fresh: list, key: Callable, carry: Callable = None) -> list:
    previous_by_key = defaultdict(list)
    for item in previous:
        previous_by_key[key(item)].append(item)

    merged = []
    used = defaultdict(int)
    for item in fresh:
        item = copy.deepcopy(item)
        k = key(item)
        n = used[k]
        used[k] += 1
        if carry is not None and n < len(previous_by_key[k]):
            carry(previous_by_key[k][n], item)
        merged.append(item)

    seen = defaultdict(int)
    for item in previous:
        k = key(item)
        seen[k] += 1
        if seen[k] > used[k]:
            merged.append(copy.deepcopy(item))
    return merged


def merge(previous: CostingState, fresh: CostingState) -> CostingState:
    """Merge fresh over previous, keeping user edits and manual additions."""
    merged = CostingState(
        inventory=_merge_collection(previous.inventory, fresh.inventory, key=lambda i: i.name),
        mapping=_merge_collection(
            previous.mapping, fresh.mapping,
            key=lambda m: m.recipe_name, carry=_carry(MAPPING_EDITABLE),
        ),
        recipes=_merge_collection(
            previous.recipes, fresh.recipes,
            key=lambda r: (r.dish, r.ingredient_name), carry=_carry(RECIPE_EDITABLE),
        ),
        dishes=_merge_collection(previous.dishes, fresh.dishes, key=lambda d: d.dish),
    )
    logger.info(
        "Merged update import: %d inventory, %d mapping, %d recipe, %d dish rows",
        len(merged.inventory), len(merged.mapping), len(merged.recipes), len(merged.dishes),
    )
    return merged
