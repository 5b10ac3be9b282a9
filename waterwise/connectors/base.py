"""WaterWise — Abstract Weather Source."""

from abc import ABC, abstractmethod

from waterwise.models.analysis_models import WeatherReading


class WeatherClient(ABC):
    """Source of live weather at a location.

    The recommendation composer only needs current conditions; any provider
    (Open-Meteo, an in-memory fake) can back it.
    """

    @abstractmethod
    async def fetch_current_conditions(
        self, latitude: float, longitude: float
    ) -> WeatherReading:
        """Return current conditions.

        Raises:
            NetworkError: the provider could not be reached.
        """
        ...
