"""WaterWise — User Preference Routes."""

from fastapi import APIRouter, Depends, HTTPException

from waterwise.api.dependencies import get_preferences_store
from waterwise.core.errors import DataAccessError
from waterwise.models.records import PreferencesUpdate, UserPreferences
from waterwise.repositories.preferences import PreferencesStore
from waterwise.scheduler.jobs import schedule_daily_reminder
from waterwise.core.logging import get_logger

logger = get_logger("api.preferences")

router = APIRouter(prefix="/preferences", tags=["Preferences"])


@router.get("", response_model=UserPreferences)
async def read_preferences(store: PreferencesStore = Depends(get_preferences_store)):
    """Daily goal, alert switches and location."""
    try:
        return store.get()
    except DataAccessError as e:
        raise HTTPException(status_code=503, detail=f"Storage unavailable: {e}")


@router.put("", response_model=UserPreferences)
async def update_preferences(
    payload: PreferencesUpdate,
    store: PreferencesStore = Depends(get_preferences_store),
):
    """Change any subset of the preferences. Omitted fields keep their value."""
    try:
        prefs = store.update(payload)
    except DataAccessError as e:
        raise HTTPException(status_code=503, detail=f"Storage unavailable: {e}")
    if "reminder_time" in payload.model_fields_set:
        schedule_daily_reminder(prefs.reminder_time)
    return prefs
