import pytest

from menu_costing.core import units
from menu_costing.db.models import RecipeUnit, TargetUnit


@pytest.mark.parametrize("raw,expected", [
    ("kg", TargetUnit.MASS),
    (" Kilogramm ", TargetUnit.MASS),
    ("g", TargetUnit.MASS),
    ("Liter", TargetUnit.VOLUME),
    ("L", TargetUnit.VOLUME),
    ("ml", TargetUnit.VOLUME),
    ("Stk.", TargetUnit.COUNT),
    ("Stück", TargetUnit.COUNT),
    ("pcs", TargetUnit.COUNT),
])
def test_to_base_unit_classifies_spellings(raw, expected):
    assert units.to_base_unit(raw) == expected


def test_to_base_unit_unknown_returns_none():
    assert units.to_base_unit("Karton") is None
    assert units.to_base_unit("") is None
    assert units.to_base_unit(None) is None


def test_target_to_recipe_unit():
    assert units.target_to_recipe_unit(TargetUnit.MASS) == RecipeUnit.G
    assert units.target_to_recipe_unit(TargetUnit.VOLUME) == RecipeUnit.ML
    assert units.target_to_recipe_unit(TargetUnit.COUNT) == RecipeUnit.PIECE


def test_price_per_base_scales_mass_and_volume():
    assert units.price_per_base(12.0, 1.0, TargetUnit.MASS) == pytest.approx(0.012)
    assert units.price_per_base(5.0, 2.0, TargetUnit.VOLUME) == pytest.approx(0.0025)
    assert units.price_per_base(6.0, 10.0, TargetUnit.COUNT) == pytest.approx(0.6)


def test_price_per_base_zero_or_absent_content_is_none():
    assert units.price_per_base(12.0, 0, TargetUnit.MASS) is None
    assert units.price_per_base(12.0, None, TargetUnit.MASS) is None
    assert units.price_per_base(None, 1.0, TargetUnit.MASS) is None
    assert units.price_per_base(12.0, 1.0, None) is None


@pytest.mark.parametrize("price,content,target", [
    (12.49, 2.5, TargetUnit.MASS),
    (0.99, 0.75, TargetUnit.VOLUME),
    (24.0, 48, TargetUnit.COUNT),
])
def test_price_per_base_reconstructs_purchase_price(price, content, target):
    factor = 1 if target == TargetUnit.COUNT else 1000
    assert units.price_per_base(price, content, target) * content * factor == pytest.approx(price)


def test_implied_package_content():
    assert units.implied_package_content("kg", TargetUnit.MASS) == 1.0
    assert units.implied_package_content("g", TargetUnit.MASS) == 0.001
    assert units.implied_package_content("cl", TargetUnit.VOLUME) == 0.01
    assert units.implied_package_content("kg", TargetUnit.VOLUME) is None
    assert units.implied_package_content("Karton", TargetUnit.COUNT) is None


def test_parse_units():
    assert units.parse_target_unit("L") == TargetUnit.VOLUME
    assert units.parse_target_unit("stk") == TargetUnit.COUNT
    assert units.parse_target_unit("mass") == TargetUnit.MASS
    assert units.parse_recipe_unit("stk") == RecipeUnit.PIECE
    assert units.parse_recipe_unit("ML") == RecipeUnit.ML
    assert units.parse_recipe_unit("kg") is None
