import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.db import Base, engine
from app.core.errors import ApiError
from app.resources import RESOURCES
from app.routers import health
from app.routers.reference_ranges import router as reference_ranges_router
from app.routers.resources import build_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)
APP_VERSION = "0.1.0"

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Listados, búsqueda y escritura validada de recursos clínicos",
    version=APP_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_app_version_header(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-App-Version"] = APP_VERSION
    return response


@app.exception_handler(ApiError)
def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
def global_exception_handler(request: Request, exc: Exception):
    """Para excepciones no controladas: devuelve 500 con cabeceras CORS para que el frontend no vea CORS bloqueado."""
    logger.exception("Unhandled exception: %s", exc)
    origin = request.headers.get("origin", "")
    cors_headers = {}
    if origin in settings.CORS_ORIGINS:
        cors_headers["Access-Control-Allow-Origin"] = origin
        cors_headers["Access-Control-Allow-Credentials"] = "true"
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
        headers=cors_headers,
    )


app.include_router(health.router, tags=["health"])
app.include_router(reference_ranges_router)
for resource in RESOURCES:
    app.include_router(build_router(resource))


@app.on_event("startup")
def on_startup() -> None:
    Base.metadata.create_all(bind=engine)
    logger.info("App version: %s", APP_VERSION)
