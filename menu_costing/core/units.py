"""Unit classification and price-per-base-unit conversion.

Inventory articles are bought in coarse units (kg, l, piece) and recipes use
fine base units (g, ml, piece). Prices are converted once per article into a
price per base unit so recipe line cost is a single multiplication.
"""

import re
from typing import Optional

from menu_costing.db.models import RecipeUnit, TargetUnit

# Free-text purchase unit (lowercase, umlauts folded) -> (dimension, size in target unit)
PURCHASE_UNITS = {
    # Mass: target = kg
    "kg": (TargetUnit.MASS, 1.0),
    "kilo": (TargetUnit.MASS, 1.0),
    "kilos": (TargetUnit.MASS, 1.0),
    "kilogramm": (TargetUnit.MASS, 1.0),
    "kilogram": (TargetUnit.MASS, 1.0),
    "kilograms": (TargetUnit.MASS, 1.0),
    "g": (TargetUnit.MASS, 0.001),
    "gr": (TargetUnit.MASS, 0.001),
    "gramm": (TargetUnit.MASS, 0.001),
    "gram": (TargetUnit.MASS, 0.001),
    "grams": (TargetUnit.MASS, 0.001),
    # Volume: target = l
    "l": (TargetUnit.VOLUME, 1.0),
    "ltr": (TargetUnit.VOLUME, 1.0),
    "liter": (TargetUnit.VOLUME, 1.0),
    "litre": (TargetUnit.VOLUME, 1.0),
    "liters": (TargetUnit.VOLUME, 1.0),
    "cl": (TargetUnit.VOLUME, 0.01),
    "ml": (TargetUnit.VOLUME, 0.001),
    "milliliter": (TargetUnit.VOLUME, 0.001),
    "millilitre": (TargetUnit.VOLUME, 0.001),
    # Count: target = piece
    "stk": (TargetUnit.COUNT, 1.0),
    "stck": (TargetUnit.COUNT, 1.0),
    "st": (TargetUnit.COUNT, 1.0),
    "stueck": (TargetUnit.COUNT, 1.0),
    "piece": (TargetUnit.COUNT, 1.0),
    "pieces": (TargetUnit.COUNT, 1.0),
    "pc": (TargetUnit.COUNT, 1.0),
    "pcs": (TargetUnit.COUNT, 1.0),
    "ea": (TargetUnit.COUNT, 1.0),
    "each": (TargetUnit.COUNT, 1.0),
}

# Explicit target-unit column values
TARGET_UNIT_ALIASES = {
    "mass": TargetUnit.MASS,
    "kg": TargetUnit.MASS,
    "volume": TargetUnit.VOLUME,
    "l": TargetUnit.VOLUME,
    "liter": TargetUnit.VOLUME,
    "count": TargetUnit.COUNT,
    "stk": TargetUnit.COUNT,
    "stueck": TargetUnit.COUNT,
    "piece": TargetUnit.COUNT,
}

RECIPE_UNIT_ALIASES = {
    "g": RecipeUnit.G,
    "gr": RecipeUnit.G,
    "gramm": RecipeUnit.G,
    "gram": RecipeUnit.G,
    "grams": RecipeUnit.G,
    "ml": RecipeUnit.ML,
    "milliliter": RecipeUnit.ML,
    "millilitre": RecipeUnit.ML,
    "piece": RecipeUnit.PIECE,
    "pieces": RecipeUnit.PIECE,
    "stk": RecipeUnit.PIECE,
    "stck": RecipeUnit.PIECE,
    "stueck": RecipeUnit.PIECE,
    "pc": RecipeUnit.PIECE,
    "pcs": RecipeUnit.PIECE,
    "ea": RecipeUnit.PIECE,
}

TARGET_TO_RECIPE_UNIT = {
    TargetUnit.MASS: RecipeUnit.G,
    TargetUnit.VOLUME: RecipeUnit.ML,
    TargetUnit.COUNT: RecipeUnit.PIECE,
}

# Target units are kg / l / piece, recipe units g / ml / piece
BASE_UNITS_PER_TARGET = {
    TargetUnit.MASS: 1000,
    TargetUnit.VOLUME: 1000,
    TargetUnit.COUNT: 1,
}


def _unit_key(raw: Optional[str]) -> str:
    """Lowercase, fold umlauts and drop dots/whitespace ('Stück.' -> 'stueck')."""
    if raw is None:
        return ""
    key = str(raw).strip().lower()
    key = key.replace("ü", "ue").replace("ä", "ae").replace("ö", "oe")
    return re.sub(r"[\s.]+", "", key)


def to_base_unit(purchase_unit: Optional[str]) -> Optional[TargetUnit]:
    """Classify a free-text purchase unit as mass, volume or count. None if unrecognised."""
    entry = PURCHASE_UNITS.get(_unit_key(purchase_unit))
    return entry[0] if entry else None


def implied_package_content(purchase_unit: Optional[str], target: Optional[TargetUnit]) -> Optional[float]:
    """Package content implied by a price quoted per purchase_unit.

    A price per 'g' is a package of 0.001 kg; a price per 'kg' is a package of
    1 kg. Returns None when the unit is unknown or of a different dimension.
    """
    entry = PURCHASE_UNITS.get(_unit_key(purchase_unit))
    if entry is None or target is None or entry[0] != target:
        return None
    return entry[1]


def parse_target_unit(raw) -> Optional[TargetUnit]:
    """Read an explicit target-unit cell ('kg', 'L', 'stk', 'mass', ...)."""
    if isinstance(raw, TargetUnit):
        return raw
    return TARGET_UNIT_ALIASES.get(_unit_key(raw))


def parse_recipe_unit(raw) -> Optional[RecipeUnit]:
    """Read a recipe unit cell ('g', 'ml', 'stk', ...). None if absent or unknown."""
    if isinstance(raw, RecipeUnit):
        return raw
    return RECIPE_UNIT_ALIASES.get(_unit_key(raw))


def target_to_recipe_unit(target: TargetUnit) -> RecipeUnit:
    return TARGET_TO_RECIPE_UNIT[target]


def price_per_base(purchase_price: Optional[float], package_content: Optional[float],
                   target: Optional[TargetUnit]) -> Optional[float]:
    """Price per gram, millilitre or piece.

    purchase_price / package_content gives the price per kg, l or piece; mass
    and volume are then scaled down to g and ml. Absent inputs or a zero
    package content return None.
    """
    if purchase_price is None or target is None or not package_content:
        return None
    return purchase_price / package_content / BASE_UNITS_PER_TARGET[target]
