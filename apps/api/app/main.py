import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from apps.api.app.config import settings
from apps.api.app.exceptions import register_exception_handlers
from apps.api.app.logging_setup import configure_logging
from apps.api.app.routes.apps import router as apps_router
from apps.api.app.routes.health import router as health_router
from apps.api.app.routes.reviews import router as reviews_router

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Google Play Reviews API",
    description="Normalized Google Play Store reviews, app metadata, search and suggestions.",
    version=settings.app_version,
    docs_url="/swagger",
    openapi_url="/swagger.json",
    redoc_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s -> %d (%.0fms)", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


@app.get("/")
def root():
    return {"name": "Google Play Reviews API", "status": "ok", "docs": "/swagger"}

register_exception_handlers(app)

app.include_router(health_router)
app.include_router(reviews_router)
app.include_router(apps_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("apps.api.app.main:app", host=settings.api_host, port=settings.api_port)
