import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .config import settings
from .database import engine
from .logging_config import audit_middleware, configure_logging
from .models.generated import Base
from .routers import availability, blocks, reservations
from .services.availability.errors import OccupancyDataError, ScheduleDataError

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(title="Barbershop Availability API", lifespan=lifespan)

app.middleware("http")(audit_middleware)

app.include_router(availability.router)
app.include_router(blocks.router)
app.include_router(reservations.router)


@app.exception_handler(ScheduleDataError)
@app.exception_handler(OccupancyDataError)
async def bad_stored_data_handler(request: Request, exc: Exception):
    logger.error(f"Unusable stored data on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Invalid schedule data"})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Database error on {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Database error"})


@app.get("/health")
def health():
    from .redis_client import redis_client

    redis_ok = None
    if redis_client is not None:
        try:
            redis_ok = redis_client.ping()
        except Exception:
            logger.exception("Redis ping failed")
            redis_ok = False
    return {"status": "ok", "redis": redis_ok}
