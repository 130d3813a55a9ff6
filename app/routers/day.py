from fastapi import APIRouter
from fastapi.exceptions import HTTPException

from menu_costing.core import day_rollup, store
from app.schemas import DaySaleInput, DaySettingsInput, day_response, summary_response

router = APIRouter(prefix="/day", tags=["day"])


@router.get("")
def get_day():
    return day_response(store.load_day())


@router.post("/sales")
def set_sale(body: DaySaleInput):
    day = store.update_day(lambda d: day_rollup.set_sale(
        d, body.dish, body.quantity, body.price_override, body.clear_override
    ))
    return day_response(day)


@router.post("/settings")
def set_settings(body: DaySettingsInput):
    day = store.update_day(lambda d: day_rollup.set_rates(d, body.surcharge_pct, body.franchise_fee_pct))
    return day_response(day)


@router.get("/summary")
def summary():
    result = store.day_summary()
    if result is None:
        raise HTTPException(status_code=404, detail="No data imported yet")
    return summary_response(result)


@router.delete("")
def clear_day():
    store.clear_day()
    return day_response(store.load_day())
