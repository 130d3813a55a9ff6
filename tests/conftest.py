import os
import pytest

from menu_costing.db.models import CostingState, DishRow, InventoryItem, MappingRow, RecipeLine, RecipeUnit


@pytest.fixture(scope="session", autouse=True)
def set_test_env(tmp_path_factory):
    db_file = tmp_path_factory.mktemp("data") / "test.db"
    os.environ["DB_PATH"] = str(db_file)
    os.environ["APP_PASSWORD"] = "testpass"
    os.environ["SECRET_KEY"] = "test-secret-key-for-testing"


@pytest.fixture
def db(set_test_env):
    from menu_costing.db.database import init_db
    from menu_costing.core import store
    init_db()
    store.clear()
    yield
    store.clear()


@pytest.fixture(scope="session")
def client(set_test_env):
    from fastapi.testclient import TestClient
    from app.main import app
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


@pytest.fixture(scope="session")
def authed_client(client):
    client.post("/login", data={"password": "testpass"})
    return client


@pytest.fixture
def burger_state():
    """Two dishes: a fully costed Currywurst and a Burger with one unmapped line."""
    return CostingState(
        inventory=[
            InventoryItem(name="Currywurst", purchase_price=12.0, purchase_unit="kg"),
            InventoryItem(name="Pommes frites TK", purchase_price=3.0, purchase_unit="kg"),
            InventoryItem(name="Burger Bun", purchase_price=0.40, purchase_unit="Stk"),
            InventoryItem(name="Ketchup", purchase_unit="l"),
        ],
        mapping=[
            MappingRow(recipe_name="Pommes", correction="Pommes frites TK"),
        ],
        recipes=[
            RecipeLine(dish="Currywurst", ingredient_name="Currywurst", quantity=150, unit=RecipeUnit.G),
            RecipeLine(dish="Currywurst", ingredient_name="Pommes", quantity=200, unit=RecipeUnit.G),
            RecipeLine(dish="Burger", ingredient_name="Burger Bun", quantity=3, unit=RecipeUnit.PIECE),
            RecipeLine(dish="Burger", ingredient_name="Rinderpatty", quantity=180, unit=RecipeUnit.G),
        ],
        dishes=[
            DishRow(dish="Currywurst", price_master=7.90, price_menu=8.50),
            DishRow(dish="Burger", price_master=9.90),
        ],
    )


IMPORT_TABLES = {
    "INVENTUR_INPUT": [
        {"Zutat": "Currywurst", "EK (wie Inventur)": "12,00", "Einheit (Inventur)": "kg"},
        {"Zutat": "Pommes frites TK", "EK (wie Inventur)": "3,00", "Einheit (Inventur)": "kg"},
        {"Zutat": "Burger Bun", "EK (wie Inventur)": "0,40", "Einheit (Inventur)": "Stk"},
    ],
    "MAP_ZUTATEN": [
        {"Zutat im Rezept": "Pommes", "Inventur-Zutat (Korrektur)": "Pommes frites TK"},
    ],
    "REZEPTE_BASIS": [
        {"Gericht": "Currywurst", "Zutat (Rezept)": "Currywurst", "Menge": 150, "Einheit (g/ml/stk)": "g"},
        {"Gericht": "Currywurst", "Zutat (Rezept)": "Pommes", "Menge": 200, "Einheit (g/ml/stk)": "g"},
        {"Gericht": "Burger", "Zutat (Rezept)": "Burger Bun", "Menge": 1, "Einheit (g/ml/stk)": "stk"},
        {"Gericht": "Burger", "Zutat (Rezept)": "Rinderpatty", "Menge": 180, "Einheit (g/ml/stk)": "g"},
    ],
    "GERICHTE": [
        {"Gericht": "Currywurst", "Preis (Master)": "7,90", "Preis (Speisekarte)": "8,50"},
        {"Gericht": "Burger", "Preis (Master)": "9,90"},
    ],
}


@pytest.fixture
def imported(authed_client):
    """Import IMPORT_TABLES over a cleared store; clears again afterwards."""
    authed_client.delete("/state")
    resp = authed_client.post("/import", json={"tables": IMPORT_TABLES})
    assert resp.status_code == 200
    yield resp.json()
    authed_client.delete("/state")


@pytest.fixture
def import_tables():
    return IMPORT_TABLES
