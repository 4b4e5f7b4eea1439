from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse

from core.exceptions import FarmPortalError
from db.models import User
from routers.deps import render, get_current_user, get_weather_pipeline
from services.weather import WeatherPipeline, LookupMode

router = APIRouter()


# ----------------------------------------------------------------------------
# Home page snapshot
# ----------------------------------------------------------------------------

@router.get("/", response_class=HTMLResponse)
async def home(request: Request, user: Optional[User] = Depends(get_current_user)):
    return render(request, "home.html", {"user": user, "weather_data": None, "weather_error": None, "pincode": None})


@router.post("/submit-pincode-home", response_class=HTMLResponse)
async def submit_pincode_home(
    request: Request,
    pincode: Optional[str] = Form(None),
    user: Optional[User] = Depends(get_current_user),
    pipeline: WeatherPipeline = Depends(get_weather_pipeline),
):
    """Current weather plus today's min/max for a pincode, shown on the home page."""
    weather_data = None
    weather_error = None
    try:
        weather_data = await pipeline.lookup(pincode, LookupMode.SNAPSHOT)
    except FarmPortalError as e:
        weather_error = e.message

    return render(
        request,
        "home.html",
        {"user": user, "weather_data": weather_data, "weather_error": weather_error, "pincode": pincode},
    )


# ----------------------------------------------------------------------------
# Multi-day forecast page
# ----------------------------------------------------------------------------

@router.get("/weather-forecast", response_class=HTMLResponse)
async def weather_forecast(request: Request, user: Optional[User] = Depends(get_current_user)):
    return render(request, "forecast.html", {"user": user, "result": None, "forecast": None, "error": None})


@router.post("/get-coordinates", response_class=HTMLResponse)
async def get_coordinates(
    request: Request,
    pincode: Optional[str] = Form(None),
    user: Optional[User] = Depends(get_current_user),
    pipeline: WeatherPipeline = Depends(get_weather_pipeline),
):
    try:
        forecast = await pipeline.lookup(pincode, LookupMode.FULL)
    except FarmPortalError as e:
        return render(
            request,
            "forecast.html",
            {"user": user, "result": None, "forecast": None, "error": e.message, "pincode": pincode},
        )

    return render(
        request,
        "forecast.html",
        {"user": user, "result": forecast.location, "forecast": forecast.days, "error": None, "pincode": pincode},
    )
