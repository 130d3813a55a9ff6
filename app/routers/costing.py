import json
from typing import Any

from fastapi import APIRouter, Body
from fastapi.exceptions import HTTPException

from menu_costing.core import matcher, store
from menu_costing.core.export import export_tables
from menu_costing.core.normalizer import normalize
from app.dependencies import require_computed
from app.schemas import ImportRequest, state_response

router = APIRouter(tags=["costing"])


@router.get("/state")
def get_state():
    return state_response(require_computed())


@router.post("/import")
def import_tables(body: ImportRequest):
    fresh = normalize(body.tables)
    if body.mode == "update":
        return state_response(store.update_import(fresh))
    return state_response(store.replace_import(fresh))


@router.get("/export")
def export():
    state, _ = require_computed()
    return export_tables(state)


@router.post("/reset")
def reset():
    return state_response(store.reset_to_original())


@router.delete("/state")
def clear():
    store.clear()
    return {"ok": True}


@router.get("/backup")
def backup():
    text = store.backup()
    if text is None:
        raise HTTPException(status_code=404, detail="No data imported yet")
    return json.loads(text)


@router.post("/restore")
def restore(payload: dict[str, Any] = Body(...)):
    try:
        result = store.restore(json.dumps(payload))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return state_response(result)


@router.get("/suggestions/{recipe_name}")
def suggestions(recipe_name: str, limit: int = 5):
    state, _ = require_computed()
    names = [i.name for i in state.inventory]
    return [{"name": name, "score": score} for name, score in matcher.rank(recipe_name, names, limit)]
