from menu_costing.core import export, normalizer, propagation


def test_export_uses_import_sheet_names(burger_state):
    tables = export.export_tables(burger_state)
    assert list(tables) == ["INVENTUR_INPUT", "MAP_ZUTATEN", "REZEPTE_BASIS", "GERICHTE"]
    assert tables["GERICHTE"][0]["Gericht"] == "Currywurst"
    assert tables["GERICHTE"][1]["Preis (Speisekarte)"] == ""


def test_export_includes_derived_columns(burger_state):
    state, _ = propagation.recompute(burger_state)
    rows = export.dish_rows(state)
    assert rows[0]["STATUS"] == "ok"
    assert rows[0]["Wareneinsatz (aus Rezept)"] == state.dishes[0].cost_of_goods
    assert export.inventory_rows(state)[3]["STATUS"] == "missing_purchase_price"


def test_export_then_import_recomputes_the_same(burger_state):
    state, diagnostics = propagation.recompute(burger_state)
    again, again_diagnostics = propagation.recompute(normalizer.normalize(export.export_tables(state)))
    assert again_diagnostics == diagnostics
    assert [d.cost_of_goods for d in again.dishes] == [d.cost_of_goods for d in state.dishes]
    assert [m.correction for m in again.mapping] == [m.correction for m in state.mapping]
