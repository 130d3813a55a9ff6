import pytest


def _dish(data, name):
    return next(d for d in data["dishes"] if d["dish"] == name)


def test_state_before_import_is_404(authed_client):
    authed_client.delete("/state")
    resp = authed_client.get("/state")
    assert resp.status_code == 404


def test_import_returns_costs_and_diagnostics(imported):
    currywurst = _dish(imported["data"], "Currywurst")
    assert currywurst["cost_of_goods"] == pytest.approx(2.40)
    assert currywurst["diagnostic_code"] == "ok"
    codes = [d["code"] for d in imported["diagnostics"]]
    assert codes == ["missing_mapping"]
    assert imported["diagnostics"][0]["ingredient"] == "Rinderpatty"
    assert imported["diagnostics"][0]["action_hint"]


def test_edit_mapping_via_api(authed_client, imported):
    authed_client.post("/edits/inventory", json={"name": "Rinderpatty 180g", "purchase_price": 1.5,
                                                 "purchase_unit": "Stk"})
    authed_client.post("/edits/recipes/unit", json={"ingredient": "Rinderpatty", "unit": "stk"})
    authed_client.post("/edits/recipes/quantity", json={"dish": "Burger", "ingredient": "Rinderpatty",
                                                        "quantity": 1})
    resp = authed_client.post("/edits/mapping/Rinderpatty", json={"inventory_name": "Rinderpatty 180g"})
    assert resp.status_code == 200
    body = resp.json()
    assert _dish(body["data"], "Burger")["cost_of_goods"] == pytest.approx(1.90)
    assert body["diagnostics"] == []


def test_dish_price_edit_and_reset(authed_client, imported):
    resp = authed_client.post("/edits/dishes/Burger/price", json={"field": "price_test", "value": 10.5})
    assert _dish(resp.json()["data"], "Burger")["effective_price"] == 10.5

    resp = authed_client.post("/reset")
    assert _dish(resp.json()["data"], "Burger")["effective_price"] == 9.90


def test_edit_errors_map_to_status_codes(authed_client, imported):
    resp = authed_client.post("/edits/inventory/Senf/price", json={"price": 1.0})
    assert resp.status_code == 404
    resp = authed_client.post("/edits/dishes", json={"dish": "burger"})
    assert resp.status_code == 409
    resp = authed_client.post("/edits/recipes/unit", json={"ingredient": "Pommes", "unit": "kg"})
    assert resp.status_code == 422


def test_update_import_keeps_correction(authed_client, imported, import_tables):
    authed_client.post("/edits/mapping/Pommes", json={"inventory_name": "Currywurst"})
    tables = dict(import_tables, MAP_ZUTATEN=[])
    resp = authed_client.post("/import", json={"tables": tables, "mode": "update"})
    pommes = next(m for m in resp.json()["data"]["mapping"] if m["recipe_name"] == "Pommes")
    assert pommes["correction"] == "Currywurst"


def test_export_round_trips(authed_client, imported):
    tables = authed_client.get("/export").json()
    resp = authed_client.post("/import", json={"tables": tables})
    assert resp.json()["diagnostics"] == imported["diagnostics"]


def test_backup_and_restore(authed_client, imported):
    backup = authed_client.get("/backup").json()
    authed_client.delete("/state")
    resp = authed_client.post("/restore", json=backup)
    assert resp.status_code == 200
    assert resp.json()["data"] == imported["data"]

    resp = authed_client.post("/restore", json={"nothing": True})
    assert resp.status_code == 422


def test_suggestions(authed_client, imported):
    resp = authed_client.get("/suggestions/Pommes")
    assert resp.json()[0]["name"] == "Pommes frites TK"
