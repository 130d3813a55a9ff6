"""Dataclass models for the costing state and its derived outputs.

The four entity collections (inventory, mapping, recipe lines, dishes) map
1:1 to the four sheets of an imported workbook. Fields use Optional types for
absent values; fields marked "derived" are overwritten by every recompute and
never trusted from input.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class TargetUnit(str, Enum):
    """Dimension an inventory article is bought and package-sized in."""
    MASS = "mass"
    VOLUME = "volume"
    COUNT = "count"


class RecipeUnit(str, Enum):
    """Base unit a recipe line quantity is expressed in."""
    G = "g"
    ML = "ml"
    PIECE = "piece"


class MappingStatus(str, Enum):
    RESOLVED = "resolved"
    NEEDS_REVIEW = "needs_review"


class EntityKind(str, Enum):
    INVENTORY = "inventory"
    MAPPING = "mapping"
    RECIPE = "recipe"
    DISH = "dish"


class DiagnosticCode(str, Enum):
    """Closed set of reasons a derived value is absent or suspect."""
    OK = "ok"
    MISSING_PURCHASE_PRICE = "missing_purchase_price"
    MISSING_UNIT = "missing_unit"
    MISSING_PACKAGE_CONTENT = "missing_package_content"
    MISSING_QUANTITY = "missing_quantity"
    MISSING_MAPPING = "missing_mapping"
    UNKNOWN_INVENTORY = "unknown_inventory"
    UNIT_MISMATCH = "unit_mismatch"
    MISSING_RECIPE = "missing_recipe"
    MISSING_PRICE = "missing_price"


@dataclass
class InventoryItem:
    """A purchasable article as listed on the inventory sheet.

    purchase_price is the invoiced price for one package of purchase_unit.
    target_unit and package_content_target are explicit user/sheet values;
    the engine falls back to inference when they are absent.
    """

    name: str
    group: Optional[str] = None
    purchase_price: Optional[float] = None
    purchase_unit: Optional[str] = None
    package_content_raw: Optional[float] = None
    target_unit: Optional[TargetUnit] = None
    package_content_target: Optional[float] = None
    # derived
    effective_target_unit: Optional[TargetUnit] = None
    price_per_base_unit: Optional[float] = None
    status_flags: set = field(default_factory=set)


@dataclass
class MappingRow:
    """Resolution of a recipe ingredient name to an inventory article."""

    recipe_name: str
    suggestion: Optional[str] = None
    correction: Optional[str] = None
    status: MappingStatus = MappingStatus.NEEDS_REVIEW


@dataclass
class RecipeLine:
    """One ingredient usage within one dish (e.g. '120 g Pommes')."""

    dish: str
    ingredient_name: str
    quantity: Optional[float] = None
    unit: Optional[RecipeUnit] = None
    inventory_selection: Optional[str] = None
    # derived
    resolved_inventory_name: Optional[str] = None
    unit_cost: Optional[float] = None
    line_cost: Optional[float] = None
    diagnostic_code: Optional[DiagnosticCode] = None


@dataclass
class DishRow:
    """A sellable menu item with up to three independent prices."""

    dish: str
    price_master: Optional[float] = None
    price_menu: Optional[float] = None
    price_test: Optional[float] = None
    # derived
    effective_price: Optional[float] = None
    cost_of_goods: Optional[float] = None
    margin: Optional[float] = None
    margin_pct: Optional[float] = None
    diagnostic_code: Optional[DiagnosticCode] = None


@dataclass
class CostingState:
    """One generation of the full working state."""

    inventory: list[InventoryItem] = field(default_factory=list)
    mapping: list[MappingRow] = field(default_factory=list)
    recipes: list[RecipeLine] = field(default_factory=list)
    dishes: list[DishRow] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.inventory or self.mapping or self.recipes or self.dishes)


_MESSAGES = {
    DiagnosticCode.MISSING_PURCHASE_PRICE: "Purchase price missing: {ref}",
    DiagnosticCode.MISSING_UNIT: "Purchase unit missing or not recognised: {ref}",
    DiagnosticCode.MISSING_PACKAGE_CONTENT: "Package content missing: {ref}",
    DiagnosticCode.MISSING_QUANTITY: "Quantity missing: {ref}",
    DiagnosticCode.MISSING_MAPPING: "No inventory article assigned: {ref}",
    DiagnosticCode.UNKNOWN_INVENTORY: "Assigned inventory article does not exist: {ref}",
    DiagnosticCode.UNIT_MISMATCH: "Recipe unit does not match inventory unit: {ref}",
    DiagnosticCode.MISSING_RECIPE: "Cost of goods missing (recipe incomplete): {ref}",
    DiagnosticCode.MISSING_PRICE: "Price missing: {ref}",
}

_HINTS = {
    DiagnosticCode.MISSING_PURCHASE_PRICE: "Enter the purchase price on the Inventory screen.",
    DiagnosticCode.MISSING_UNIT: "Set the purchase unit (kg, l, piece) on the Inventory screen.",
    DiagnosticCode.MISSING_PACKAGE_CONTENT: "Enter the package content on the Inventory screen.",
    DiagnosticCode.MISSING_QUANTITY: "Enter the quantity in the dish recipe on the Recipes screen.",
    DiagnosticCode.MISSING_MAPPING: "Assign the recipe ingredient on the Mapping screen.",
    DiagnosticCode.UNKNOWN_INVENTORY: "Pick an existing article on the Mapping screen or add it on the Inventory screen.",
    DiagnosticCode.UNIT_MISMATCH: "Align the recipe unit (g/ml/piece) with the article on the Recipes screen.",
    DiagnosticCode.MISSING_RECIPE: "Complete missing quantities or mappings on the Recipes screen.",
    DiagnosticCode.MISSING_PRICE: "Enter a menu or test price on the Dishes screen.",
}


# A recipe line without a usable article price points at the inventory field to fix
_FIELD_CODES = {
    "purchase_unit": DiagnosticCode.MISSING_UNIT,
    "package_content_target": DiagnosticCode.MISSING_PACKAGE_CONTENT,
}


@dataclass
class Diagnostic:
    """A structured, non-fatal record of why a derived value is absent.

    message and action_hint are generated from the code and context; they are
    display text only and never compared against.
    """

    code: DiagnosticCode
    entity: EntityKind
    dish: Optional[str] = None
    ingredient: Optional[str] = None
    missing_field: Optional[str] = None

    def _display_code(self) -> DiagnosticCode:
        if self.code == DiagnosticCode.MISSING_PURCHASE_PRICE:
            return _FIELD_CODES.get(self.missing_field, self.code)
        return self.code

    @property
    def message(self) -> str:
        template = _MESSAGES.get(self._display_code(), "{ref}")
        return template.format(ref=self.ingredient or self.dish or "")

    @property
    def action_hint(self) -> str:
        return _HINTS.get(self._display_code(), "")

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "entity": self.entity.value,
            "dish": self.dish,
            "ingredient": self.ingredient,
            "missing_field": self.missing_field,
            "message": self.message,
            "action_hint": self.action_hint,
        }


@dataclass
class DaySale:
    """Sold quantity and optional price override for one dish on one day."""
    quantity: int = 0
    price_override: Optional[float] = None


@dataclass
class DayState:
    """Per-day input: sales by dish plus the global surcharge and fee."""
    sales: dict[str, DaySale] = field(default_factory=dict)
    surcharge_pct: float = 0.0
    franchise_fee_pct: float = 0.0


@dataclass
class ConsumptionLine:
    """Aggregated consumption of one inventory article in one unit."""
    name: str
    unit: RecipeUnit
    quantity: float = 0.0
    cost: float = 0.0


@dataclass
class DaySummaryLine:
    dish: str
    quantity: int
    unit_price: Optional[float] = None
    revenue: Optional[float] = None
    cost: Optional[float] = None


@dataclass
class DaySummary:
    """Result of a day rollup.

    Revenue sums only known contributions; dishes sold without any price are
    listed in unpriced_dishes, dishes sold without cost of goods in
    uncosted_dishes.
    """

    revenue: float = 0.0
    revenue_adjusted: float = 0.0
    franchise_fee: float = 0.0
    total_cost: float = 0.0
    net_margin: float = 0.0
    net_margin_pct: Optional[float] = None
    consumption: list[ConsumptionLine] = field(default_factory=list)
    lines: list[DaySummaryLine] = field(default_factory=list)
    unpriced_dishes: list[str] = field(default_factory=list)
    uncosted_dishes: list[str] = field(default_factory=list)
