import logging

import pytest

from menu_costing.core import normalizer
from menu_costing.db.models import RecipeUnit, TargetUnit


class TestToNumber:
    @pytest.mark.parametrize("raw,expected", [
        ("12,49", 12.49),
        (" 1.234,56 € ", 1234.56),
        ("1,234.56", 1234.56),
        ("3 kg", 3.0),
        (7, 7.0),
        (2.5, 2.5),
    ])
    def test_parses(self, raw, expected):
        assert normalizer.to_number(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", [None, "", "   ", "n/a", True, float("nan")])
    def test_blank_or_unparseable_is_none(self, raw):
        assert normalizer.to_number(raw) is None


def test_to_text_blank_is_none():
    assert normalizer.to_text("  Ketchup ") == "Ketchup"
    assert normalizer.to_text("   ") is None
    assert normalizer.to_text(None) is None


def test_inventory_column_synonyms_and_priority():
    items = normalizer.normalize_inventory([
        {"Zutat": "Ketchup", "EK (wie Inventur)": "4,20", "EK": "9,99", "Einheit": "L"},
        {"Artikel": "Senf", "EK (wie auf Rechnung)": "2,10", "Einheit (Inventur)": "kg",
         "Zieleinheit": "kg", "Inhalt (Zieleinheit)": "0,5"},
    ])
    assert items[0].name == "Ketchup"
    assert items[0].purchase_price == 4.20
    assert items[0].purchase_unit == "L"
    assert items[1].purchase_price == 2.10
    assert items[1].target_unit == TargetUnit.MASS
    assert items[1].package_content_target == 0.5


def test_labels_match_case_and_whitespace_insensitively():
    dishes = normalizer.normalize_dishes([{" gericht ": "Burger", "PREIS (MASTER)": "9,90"}])
    assert dishes[0].dish == "Burger"
    assert dishes[0].price_master == 9.90


def test_empty_cells_stay_none():
    items = normalizer.normalize_inventory([{"Zutat": "Ketchup", "EK": "", "Einheit": None}])
    assert items[0].purchase_price is None
    assert items[0].purchase_unit is None


def test_rows_without_key_are_dropped_with_warning(caplog):
    with caplog.at_level(logging.WARNING):
        lines = normalizer.normalize_recipes([
            {"Gericht": "Burger", "Zutat (Rezept)": "Burger Bun", "Menge": 1, "Einheit (g/ml/stk)": "stk"},
            {"Gericht": "", "Zutat (Rezept)": "Ketchup", "Menge": 20},
            {"Gericht": None, "Zutat (Rezept)": None, "Menge": None},
        ])
    assert len(lines) == 1
    assert lines[0].unit == RecipeUnit.PIECE
    assert "Dropping recipes row 3" in caplog.text
    assert "row 4" not in caplog.text


def test_duplicate_mapping_rows_keep_first():
    mapping = normalizer.normalize_mapping([
        {"Zutat im Rezept": "Pommes", "Inventur-Zutat (Korrektur)": "Pommes frites TK"},
        {"Zutat im Rezept": "Pommes", "Inventur-Zutat (Korrektur)": "Kartoffeln"},
    ])
    assert len(mapping) == 1
    assert mapping[0].correction == "Pommes frites TK"


def test_normalize_accepts_either_sheet_name():
    state = normalizer.normalize({
        "INVENTUR_INPUT": [{"Zutat": "Ketchup", "EK": "4,20", "Einheit": "l"}],
        "recipes": [{"Dish": "Pommes", "Ingredient": "Ketchup", "Quantity": "20", "Unit": "ml"}],
    })
    assert [i.name for i in state.inventory] == ["Ketchup"]
    assert state.recipes[0].quantity == 20
    assert state.recipes[0].unit == RecipeUnit.ML
    assert state.mapping == []
    assert state.dishes == []


def test_unknown_recipe_unit_is_none():
    lines = normalizer.normalize_recipes([{"Gericht": "Burger", "Zutat": "Patty", "Menge": 180, "Einheit": "kg"}])
    assert lines[0].unit is None
