import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from core.config import settings
from db.database import init_db
from routers import auth, weather, pages
from routers.deps import create_templates
from services.weather import WeatherPipeline, create_http_client

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("farm_portal")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    client = create_http_client()
    app.state.weather_pipeline = WeatherPipeline(client)
    logger.info("%s started", settings.app_name)
    try:
        yield
    finally:
        await client.aclose()


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.templates = create_templates()

    app.include_router(auth.router, tags=["auth"])
    app.include_router(weather.router, tags=["weather"])
    app.include_router(pages.router, tags=["pages"])

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host=settings.host, port=settings.port)
