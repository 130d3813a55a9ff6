"""Current-state store: load, transform and persist the costing state.

The edited state ("base") is stored as a JSON document in the settings table
together with the last raw import, the outlets and the day input. Every
change follows the same copy-on-write cycle: load the base, apply a pure
transformation, recompute, save. computed() never trusts stored derived
values; it applies the selected outlet and recomputes on every call.
"""

import logging
from typing import Callable, Optional

from menu_costing.config import delete_setting, get_setting, set_setting
from menu_costing.core import snapshot
from menu_costing.core.day_rollup import rollup_day
from menu_costing.core.errors import UnknownEntityError
from menu_costing.core.outlets import OutletState, apply_outlet, initial_outlet_state
from menu_costing.core.propagation import recompute
from menu_costing.core.reconcile import merge
from menu_costing.db.models import CostingState, DayState, DaySummary, Diagnostic

logger = logging.getLogger(__name__)

BASE_KEY = "costing_base"
ORIGINAL_KEY = "costing_original"
OUTLETS_KEY = "costing_outlets"
DAY_KEY = "costing_day"


def _load_state(key: str) -> Optional[CostingState]:
    raw = get_setting(key)
    if not raw:
        return None
    try:
        state, _, _ = snapshot.loads(raw)
    except ValueError:
        logger.warning("Discarding unreadable %s document", key)
        return None
    return state


def _save_state(key: str, state: CostingState) -> None:
    set_setting(key, snapshot.dumps(state))


def load_base() -> Optional[CostingState]:
    return _load_state(BASE_KEY)


def _require_base() -> CostingState:
    base = load_base()
    if base is None:
        raise UnknownEntityError("No data imported yet")
    return base


def _save_base(state: CostingState) -> CostingState:
    """Persist the base with its own derived fields filled in."""
    computed_base, _ = recompute(state)
    _save_state(BASE_KEY, computed_base)
    return computed_base


def load_outlets() -> OutletState:
    raw = get_setting(OUTLETS_KEY)
    outlets = None
    if raw:
        try:
            _, _, outlets = snapshot.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable outlet document")
    if outlets is None:
        outlets = initial_outlet_state()
        save_outlets(outlets)
    return outlets


def save_outlets(outlets: OutletState) -> None:
    set_setting(OUTLETS_KEY, snapshot.dumps(CostingState(), outlets=outlets))


def load_day() -> DayState:
    raw = get_setting(DAY_KEY)
    if raw:
        try:
            _, day, _ = snapshot.loads(raw)
            if day is not None:
                return day
        except ValueError:
            logger.warning("Discarding unreadable day document")
    return DayState()


def save_day(day: DayState) -> None:
    set_setting(DAY_KEY, snapshot.dumps(CostingState(), day=day))


def computed() -> Optional[tuple[CostingState, list[Diagnostic]]]:
    """The base with the selected outlet applied, recomputed. None before the first import."""
    base = load_base()
    if base is None:
        return None
    overrides = load_outlets().selected_overrides()
    return recompute(apply_outlet(base, overrides))


def replace_import(fresh: CostingState) -> tuple[CostingState, list[Diagnostic]]:
    """First import or explicit replace: the fresh state replaces everything."""
    _save_state(ORIGINAL_KEY, fresh)
    _save_base(fresh)
    logger.info("Replaced state with import of %d dishes", len(fresh.dishes))
    return computed()


def update_import(fresh: CostingState) -> tuple[CostingState, list[Diagnostic]]:
    """Update import: merge the fresh state into the edited base, keeping user edits."""
    base = load_base()
    if base is None:
        return replace_import(fresh)
    _save_state(ORIGINAL_KEY, fresh)
    _save_base(merge(base, fresh))
    return computed()


def update(edit: Callable[[CostingState], CostingState]) -> tuple[CostingState, list[Diagnostic]]:
    """Apply a copy-on-write edit (see core/edits.py) to the base and recompute."""
    base = _require_base()
    _save_base(edit(base))
    return computed()


def update_outlets(edit: Callable[[OutletState], OutletState]) -> OutletState:
    outlets = edit(load_outlets())
    save_outlets(outlets)
    return outlets


def update_day(edit: Callable[[DayState], DayState]) -> DayState:
    day = edit(load_day())
    save_day(day)
    return day


def day_summary() -> Optional[DaySummary]:
    result = computed()
    if result is None:
        return None
    state, _ = result
    return rollup_day(state, load_day())


def reset_to_original() -> tuple[CostingState, list[Diagnostic]]:
    """Discard all edits and go back to the last raw import."""
    original = _load_state(ORIGINAL_KEY)
    if original is None:
        raise UnknownEntityError("No import to reset to")
    _save_base(original)
    logger.info("Reset state to last import")
    return computed()


def clear_day() -> None:
    delete_setting(DAY_KEY)


def clear() -> None:
    for key in (BASE_KEY, ORIGINAL_KEY, OUTLETS_KEY, DAY_KEY):
        delete_setting(key)
    logger.info("Cleared all costing data")


def backup() -> Optional[str]:
    """JSON backup of the base, day input and outlets."""
    base = load_base()
    if base is None:
        return None
    return snapshot.dumps(base, day=load_day(), outlets=load_outlets())


def restore(text: str) -> tuple[CostingState, list[Diagnostic]]:
    """Restore a backup. Derived values are recomputed. Raises ValueError on bad input."""
    state, day, outlets = snapshot.loads(text)
    _save_base(state)
    if day is not None:
        save_day(day)
    if outlets is not None:
        save_outlets(outlets)
    logger.info("Restored backup with %d dishes", len(state.dishes))
    return computed()
