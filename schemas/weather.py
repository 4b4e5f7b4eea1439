from pydantic import BaseModel
from typing import Optional, List

HUMIDITY_NOT_AVAILABLE = "N/A"


class Location(BaseModel):
    pincode: str
    latitude: float
    longitude: float
    display_name: str


# Snapshot for the home page: current reading plus today's aggregates
class WeatherResult(BaseModel):
    location_name: str
    temperature: Optional[float] = None
    windspeed: Optional[float] = None
    condition: str
    # Open-Meteo's current_weather block carries no humidity
    humidity: str = HUMIDITY_NOT_AVAILABLE
    temp_max_today: Optional[float] = None
    temp_min_today: Optional[float] = None
    precipitation_today: Optional[float] = None


class DailyForecast(BaseModel):
    date: str
    temp_max: Optional[float] = None
    temp_min: Optional[float] = None
    precipitation_sum: Optional[float] = None
    weather_code: Optional[int] = None
    condition: str


class ForecastResult(BaseModel):
    location: Location
    days: List[DailyForecast]
