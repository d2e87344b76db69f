# biling/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from biling.database import engine, Base
from biling.apis.v1.api import api_router
from biling.core.config import settings
from biling.core.logging import configure_logging
from biling.errors import BilingError

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create database tables
logger.info("Creating database tables if they don't exist")
Base.metadata.create_all(bind=engine)

fastapi_kwargs = {
    "title": settings.PROJECT_NAME,
    "version": "0.1.0"
}

if settings.ENV == 'prod':
    fastapi_kwargs["docs_url"] = None
    fastapi_kwargs["redoc_url"] = None
    fastapi_kwargs["openapi_url"] = None

app = FastAPI(**fastapi_kwargs)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BilingError)
async def biling_error_handler(request: Request, exc: BilingError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "reason": exc.reason},
        headers=exc.headers,
    )


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Storage is unavailable", "reason": "storage_unavailable"},
    )


# Include API routers
app.include_router(api_router)


@app.get("/", tags=["Root"])
async def read_root():
    return {"message": "Welcome to Biling API!"}
