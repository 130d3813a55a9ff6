"""Normalization of raw spreadsheet rows into typed entity collections.

The caller parses the workbook and hands over one list of rows per sheet,
each row a mapping of column label -> raw cell value. Column synonyms are
resolved per sheet through an ordered tuple of accepted labels (first label
present in the row wins). Empty cells become None, never zero.

Rows without their identity key (blank article, ingredient or dish name) are
dropped with a logged warning; the rest of the import proceeds.
"""

import logging
import math
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from menu_costing.core.units import parse_recipe_unit, parse_target_unit
from menu_costing.db.models import CostingState, DishRow, InventoryItem, MappingRow, RecipeLine

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


@dataclass(frozen=True)
class RowSchema:
    """Accepted sheet names and column labels for one entity collection."""

    sheet_names: tuple[str, ...]
    columns: dict[str, tuple[str, ...]]

    def cell(self, row: dict, field: str) -> Any:
        """Return the cell for a logical field, trying labels in priority order."""
        labels = _label_index(row)
        for label in self.columns[field]:
            key = labels.get(label.strip().lower())
            if key is not None:
                return row[key]
        return None


INVENTORY_SCHEMA = RowSchema(
    sheet_names=("INVENTUR_INPUT", "inventory"),
    columns={
        "name": ("Zutat", "Artikel", "Name"),
        "group": ("Gruppe", "Warengruppe", "Group"),
        "purchase_price": ("EK (wie Inventur)", "EK", "EK (wie auf Rechnung)", "Purchase price"),
        "purchase_unit": ("Einheit (Inventur)", "Einheit", "Purchase unit"),
        "package_content_raw": ("Packungsinhalt", "Inhalt", "Package content"),
        "target_unit": ("Zieleinheit", "Ziel-Einheit", "Target unit"),
        "package_content_target": ("Inhalt (Zieleinheit)", "Packungsinhalt (Ziel)", "Package content (target)"),
    },
)

MAPPING_SCHEMA = RowSchema(
    sheet_names=("MAP_ZUTATEN", "mapping"),
    columns={
        "recipe_name": ("Zutat im Rezept", "Zutat (Rezept)", "Zutat", "Recipe ingredient"),
        "suggestion": ("Vorschlag Inventur-Zutat", "Vorschlag", "Suggestion"),
        "correction": ("Inventur-Zutat (Korrektur)", "Inventur-Zutat (falls korrigieren)", "Correction"),
    },
)

RECIPE_SCHEMA = RowSchema(
    sheet_names=("REZEPTE_BASIS", "recipes"),
    columns={
        "dish": ("Gericht", "Dish"),
        "ingredient_name": ("Zutat (Rezept)", "Zutat", "Ingredient"),
        "quantity": ("Menge", "Quantity"),
        "unit": ("Einheit (g/ml/stk)", "Einheit", "Unit"),
        "inventory_selection": ("Inventur-Zutat (Auswahl)", "Inventory selection"),
    },
)

DISH_SCHEMA = RowSchema(
    sheet_names=("GERICHTE", "dishes"),
    columns={
        "dish": ("Gericht", "Dish"),
        "price_master": ("Preis (Master)", "Master price"),
        "price_menu": ("Preis (Speisekarte)", "Menu price"),
        "price_test": ("Preis (Test)", "Test price"),
    },
)


def _label_index(row: dict) -> dict[str, str]:
    """Map stripped lowercase labels to the row's actual keys (first occurrence wins)."""
    index = {}
    for key in row:
        index.setdefault(str(key).strip().lower(), key)
    return index


def to_number(value: Any) -> Optional[float]:
    """
    Coerce a cell to float. Accepts numbers and strings such as '12,49',
    ' 1.234,56 €' or '3 kg'. Empty or unparseable cells return None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
        return number if math.isfinite(number) else None

    text = re.sub(r"\s", "", str(value))
    if not text:
        return None
    if "," in text and "." in text:
        # Whichever separator comes last is the decimal separator
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    else:
        text = text.replace(",", ".")

    match = _NUMBER_RE.search(text)
    if not match:
        return None
    number = float(match.group(0))
    return number if math.isfinite(number) else None


def to_text(value: Any) -> Optional[str]:
    """Coerce a cell to a stripped string; blank cells return None."""
    if value is None:
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    text = str(value).strip()
    return text or None


def _is_blank_row(row: dict) -> bool:
    return all(to_text(v) is None for v in row.values())


def _rows_with_key(rows: list[dict], schema: RowSchema, sheet: str, *key_fields: str):
    """Yield (row, key values) for rows whose identity fields are all non-blank."""
    for index, row in enumerate(rows, start=2):  # row 1 is the header
        if _is_blank_row(row):
            continue
        keys = tuple(to_text(schema.cell(row, f)) for f in key_fields)
        if not all(keys):
            logger.warning("Dropping %s row %d: missing %s", sheet, index, "/".join(key_fields))
            continue
        yield row, keys


def normalize_inventory(rows: list[dict]) -> list[InventoryItem]:
    s = INVENTORY_SCHEMA
    items = []
    for row, (name,) in _rows_with_key(rows, s, "inventory", "name"):
        items.append(InventoryItem(
            name=name,
            group=to_text(s.cell(row, "group")),
            purchase_price=to_number(s.cell(row, "purchase_price")),
            purchase_unit=to_text(s.cell(row, "purchase_unit")),
            package_content_raw=to_number(s.cell(row, "package_content_raw")),
            target_unit=parse_target_unit(s.cell(row, "target_unit")),
            package_content_target=to_number(s.cell(row, "package_content_target")),
        ))
    return items


def normalize_mapping(rows: list[dict]) -> list[MappingRow]:
    s = MAPPING_SCHEMA
    mapping = []
    seen = set()
    for row, (recipe_name,) in _rows_with_key(rows, s, "mapping", "recipe_name"):
        if recipe_name in seen:
            logger.warning("Dropping duplicate mapping row for %r", recipe_name)
            continue
        seen.add(recipe_name)
        mapping.append(MappingRow(
            recipe_name=recipe_name,
            suggestion=to_text(s.cell(row, "suggestion")),
            correction=to_text(s.cell(row, "correction")),
        ))
    return mapping


def normalize_recipes(rows: list[dict]) -> list[RecipeLine]:
    s = RECIPE_SCHEMA
    lines = []
    for row, (dish, ingredient) in _rows_with_key(rows, s, "recipes", "dish", "ingredient_name"):
        lines.append(RecipeLine(
            dish=dish,
            ingredient_name=ingredient,
            quantity=to_number(s.cell(row, "quantity")),
            unit=parse_recipe_unit(s.cell(row, "unit")),
            inventory_selection=to_text(s.cell(row, "inventory_selection")),
        ))
    return lines


def normalize_dishes(rows: list[dict]) -> list[DishRow]:
    s = DISH_SCHEMA
    dishes = []
    for row, (dish,) in _rows_with_key(rows, s, "dishes", "dish"):
        dishes.append(DishRow(
            dish=dish,
            price_master=to_number(s.cell(row, "price_master")),
            price_menu=to_number(s.cell(row, "price_menu")),
            price_test=to_number(s.cell(row, "price_test")),
        ))
    return dishes


def _sheet(tables: dict[str, list[dict]], schema: RowSchema) -> list[dict]:
    for name in schema.sheet_names:
        if name in tables:
            return tables[name] or []
    return []


def normalize(tables: dict[str, list[dict]]) -> CostingState:
    """
    Build a CostingState from parsed sheets.
    tables maps sheet name ('INVENTUR_INPUT', 'MAP_ZUTATEN', 'REZEPTE_BASIS',
    'GERICHTE', or 'inventory', 'mapping', 'recipes', 'dishes') to rows.
    Missing sheets yield empty collections.
    """
    state = CostingState(
        inventory=normalize_inventory(_sheet(tables, INVENTORY_SCHEMA)),
        mapping=normalize_mapping(_sheet(tables, MAPPING_SCHEMA)),
        recipes=normalize_recipes(_sheet(tables, RECIPE_SCHEMA)),
        dishes=normalize_dishes(_sheet(tables, DISH_SCHEMA)),
    )
    logger.info(
        "Normalized %d inventory, %d mapping, %d recipe, %d dish rows",
        len(state.inventory), len(state.mapping), len(state.recipes), len(state.dishes),
    )
    return state
