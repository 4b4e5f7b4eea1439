"""Pincode weather lookup.

Geocodes a pincode with Nominatim, then asks Open-Meteo for a forecast at the
resulting coordinates. One pipeline serves both the home-page snapshot and the
multi-day forecast page; ``LookupMode`` selects which shape comes back.
"""
import enum
import logging
from typing import Any, Callable, Dict, List, Optional, Union

import httpx

from core.config import settings
from core.exceptions import InputError, NotFoundError, IncompleteDataError, TransportError
from schemas.weather import Location, WeatherResult, DailyForecast, ForecastResult

logger = logging.getLogger(__name__)

DAILY_FIELDS = "temperature_2m_max,temperature_2m_min,precipitation_sum,weathercode"


class LookupMode(str, enum.Enum):
    SNAPSHOT = "snapshot"
    FULL = "full"


# ----------------------------------------------------------------------------
# Weather codes
# ----------------------------------------------------------------------------

# (low, high, label), inclusive bounds, first match wins
_CONDITION_BUCKETS = (
    (0, 0, "Clear sky"),
    (1, 2, "Partly cloudy"),
    (3, 4, "Overcast"),
    (50, 59, "Drizzle"),
    (60, 69, "Rain"),
    (70, 79, "Snow"),
    (80, 89, "Rain showers"),
)


def weather_condition(code: Optional[int]) -> str:
    """Maps an Open-Meteo weather code to a short human label.

    >>> weather_condition(0)
    'Clear sky'
    >>> weather_condition(49)
    'Unknown'
    """
    if code is None:
        return "Unknown"
    code = int(code)
    for low, high, label in _CONDITION_BUCKETS:
        if low <= code <= high:
            return label
    if code >= 90:
        return "Thunderstorm"
    return "Unknown"


# ----------------------------------------------------------------------------
# Geocoding tie-break
# ----------------------------------------------------------------------------

def first_result(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    return results[0]


TIE_BREAK_STRATEGIES: Dict[str, Callable[[List[Dict[str, Any]]], Dict[str, Any]]] = {
    "first": first_result,
}


# ----------------------------------------------------------------------------
# Pipeline
# ----------------------------------------------------------------------------

class WeatherPipeline:
    """Runs pincode → coordinates → forecast → display model.

    Parameters
    ----------
    client : httpx.AsyncClient
        Shared client; the pipeline never closes it.
    geocoding_url, forecast_url : str
        Endpoints of the two upstream services.
    tie_break : str
        Name of the strategy in ``TIE_BREAK_STRATEGIES`` used to pick one
        geocoding hit.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        geocoding_url: str = settings.geocoding_url,
        forecast_url: str = settings.forecast_url,
        tie_break: str = settings.geocode_tie_break,
    ):
        if tie_break not in TIE_BREAK_STRATEGIES:
            raise ValueError(f"Unknown geocoding tie-break strategy: {tie_break}")
        self.client = client
        self.geocoding_url = geocoding_url
        self.forecast_url = forecast_url
        self.pick = TIE_BREAK_STRATEGIES[tie_break]

    async def lookup(self, pincode: Optional[str], mode: LookupMode = LookupMode.SNAPSHOT) -> Union[WeatherResult, ForecastResult]:
        """Fetches weather for a pincode.

        Raises
        ------
        InputError
            Blank pincode.
        NotFoundError
            Geocoding returned no results; no forecast request is made.
        IncompleteDataError
            The forecast lacks the current reading (snapshot) or any daily rows.
        TransportError
            Either upstream call failed at the network or HTTP level.
        """
        if pincode is None or not pincode.strip():
            raise InputError("Please enter a pincode.")
        pincode = pincode.strip()

        location = await self.geocode(pincode)
        forecast = await self.fetch_forecast(location, current=(mode == LookupMode.SNAPSHOT))

        if mode == LookupMode.SNAPSHOT:
            return build_snapshot(location, forecast)
        return build_forecast(location, forecast)

    async def geocode(self, pincode: str) -> Location:
        results = await self._get_json(
            self.geocoding_url,
            params={"q": pincode, "format": "json"},
        )
        if not isinstance(results, list) or not results:
            raise NotFoundError("No coordinates found for this pincode.")

        hit = self.pick(results)
        try:
            return Location(
                pincode=pincode,
                latitude=float(hit["lat"]),
                longitude=float(hit["lon"]),
                display_name=hit.get("display_name") or pincode,
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Malformed geocoding result for %s: %s", pincode, e)
            raise TransportError("Error fetching weather data. Please try again.")

    async def fetch_forecast(self, location: Location, current: bool = True) -> Dict[str, Any]:
        params = {
            "latitude": location.latitude,
            "longitude": location.longitude,
            "daily": DAILY_FIELDS,
            "timezone": "auto",
        }
        if current:
            params["current_weather"] = "true"
        data = await self._get_json(self.forecast_url, params=params)
        if not isinstance(data, dict):
            raise IncompleteDataError("Could not fetch detailed weather data.")
        return data

    async def _get_json(self, url: str, params: Dict[str, Any]) -> Any:
        try:
            response = await self.client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Error fetching weather data from %s: %s", url, e)
            raise TransportError("Error fetching weather data. Please try again.")


def _first(daily: Dict[str, Any], key: str) -> Any:
    values = daily.get(key) or []
    return values[0] if values else None


def _at(daily: Dict[str, Any], key: str, index: int) -> Any:
    values = daily.get(key) or []
    return values[index] if index < len(values) else None


def build_snapshot(location: Location, data: Dict[str, Any]) -> WeatherResult:
    current = data.get("current_weather")
    daily = data.get("daily") or {}
    if not current or not daily.get("time"):
        raise IncompleteDataError("Could not fetch detailed weather data.")

    return WeatherResult(
        location_name=location.display_name,
        temperature=current.get("temperature"),
        windspeed=current.get("windspeed"),
        condition=weather_condition(current.get("weathercode")),
        temp_max_today=_first(daily, "temperature_2m_max"),
        temp_min_today=_first(daily, "temperature_2m_min"),
        precipitation_today=_first(daily, "precipitation_sum"),
    )


def build_forecast(location: Location, data: Dict[str, Any]) -> ForecastResult:
    daily = data.get("daily") or {}
    dates = daily.get("time") or []
    if not dates:
        raise IncompleteDataError("Could not fetch detailed weather data.")

    days = []
    for i, date in enumerate(dates):
        code = _at(daily, "weathercode", i)
        days.append(DailyForecast(
            date=date,
            temp_max=_at(daily, "temperature_2m_max", i),
            temp_min=_at(daily, "temperature_2m_min", i),
            precipitation_sum=_at(daily, "precipitation_sum", i),
            weather_code=code,
            condition=weather_condition(code),
        ))
    return ForecastResult(location=location, days=days)


def create_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={"User-Agent": settings.http_user_agent},
        timeout=settings.http_timeout,
    )
