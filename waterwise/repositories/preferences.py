"""WaterWise — User Preferences.

Daily goal, alert switches and location. Until the user saves anything the
configured defaults are returned without being written.
"""

from sqlmodel import Session

from waterwise.config import settings
from waterwise.models.records import PreferencesUpdate, UserPreferences
from waterwise.repositories.base import store_errors
from waterwise.core.logging import get_logger

logger = get_logger("repositories.preferences")

PREFERENCES_ID = 1


def default_preferences() -> UserPreferences:
    return UserPreferences(
        id=PREFERENCES_ID,
        daily_goal_liters=settings.daily_goal_liters,
        reminder_time=f"{settings.usage_alert_hour:02d}:00",
        latitude=settings.default_latitude,
        longitude=settings.default_longitude,
    )


class PreferencesStore:
    """Single-row store backed by the ``preferences`` table."""

    def __init__(self, session: Session):
        self.session = session

    def get(self) -> UserPreferences:
        with store_errors(self.session, "read preferences"):
            stored = self.session.get(UserPreferences, PREFERENCES_ID)
        return stored if stored is not None else default_preferences()

    def update(self, data: PreferencesUpdate) -> UserPreferences:
        """Apply the fields set on ``data`` and persist the result."""
        with store_errors(self.session, "read preferences"):
            prefs = self.session.get(UserPreferences, PREFERENCES_ID)
        if prefs is None:
            prefs = default_preferences()

        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(prefs, key, value)

        with store_errors(self.session, "save preferences"):
            self.session.add(prefs)
            self.session.commit()
            self.session.refresh(prefs)
        logger.info(
            f"Preferences saved: goal {prefs.daily_goal_liters:g}L, "
            f"alerts {'on' if prefs.notifications_enabled and prefs.usage_alerts else 'off'}, "
            f"location {prefs.latitude},{prefs.longitude}"
        )
        return prefs
