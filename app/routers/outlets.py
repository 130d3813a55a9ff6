from fastapi import APIRouter

from menu_costing.core import outlets as outlets_core
from menu_costing.core import store
from app.schemas import InventoryOverride, OutletCreate, PriceOverride, outlets_response

router = APIRouter(prefix="/outlets", tags=["outlets"])


@router.get("")
def list_outlets():
    return outlets_response(store.load_outlets())


@router.post("")
def add_outlet(body: OutletCreate):
    return outlets_response(store.update_outlets(lambda o: outlets_core.add_outlet(o, body.name)))


@router.post("/{outlet_id}/select")
def select_outlet(outlet_id: str):
    return outlets_response(store.update_outlets(lambda o: outlets_core.select_outlet(o, outlet_id)))


@router.post("/inventory")
def inventory_override(body: InventoryOverride):
    return outlets_response(store.update_outlets(
        lambda o: outlets_core.set_inventory_override(o, body.name, body.price)
    ))


@router.post("/prices")
def price_override(body: PriceOverride):
    return outlets_response(store.update_outlets(
        lambda o: outlets_core.set_price_override(o, body.dish, body.field, body.price)
    ))
