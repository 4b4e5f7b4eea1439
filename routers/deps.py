"""Dependencies shared by the HTML routers."""
import logging
from typing import Any, Optional
from pathlib import Path

from fastapi import Depends, Request
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from db.database import get_db
from db.models import User
from services import auth as auth_service
from services.weather import WeatherPipeline, weather_condition

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


def create_templates() -> Jinja2Templates:
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.globals["weather_condition"] = weather_condition
    templates.env.globals["app_name"] = settings.app_name
    return templates


def get_templates(request: Request) -> Jinja2Templates:
    """Shared Jinja templates from app state, built on demand if startup skipped it."""
    templates = getattr(request.app.state, "templates", None)
    if isinstance(templates, Jinja2Templates):
        return templates
    logger.warning("Jinja2Templates not found in app.state; creating a new instance")
    templates = create_templates()
    request.app.state.templates = templates
    return templates


def render(request: Request, name: str, context: dict, status_code: int = 200) -> Any:
    return get_templates(request).TemplateResponse(request, name, context, status_code=status_code)


def get_session_token(request: Request) -> Optional[str]:
    return request.cookies.get(settings.session_cookie_name)


async def get_current_user(
    token: Optional[str] = Depends(get_session_token),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """The logged-in account for this client, or None when anonymous."""
    return await auth_service.resolve_current_user(db, token)


def get_weather_pipeline(request: Request) -> WeatherPipeline:
    return request.app.state.weather_pipeline
