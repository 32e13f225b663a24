# bodyshop/main.py
#
# Run with: uvicorn bodyshop.main:create_app --factory

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from bodyshop.core.config import Settings, get_settings
from bodyshop.core.errors import AppError, ServerError
from bodyshop.database import create_database
from bodyshop.routes.audit import audit_router
from bodyshop.routes.auth import auth_router
from bodyshop.routes.bookings import booking_router
from bodyshop.routes.reviews import review_router
from bodyshop.routes.services import service_router
from bodyshop.routes.vehicles import vehicle_router
from bodyshop.utils.auth_utils import JWTConfig

logger = logging.getLogger("bodyshop")


def configure_logging(settings: Settings):
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def register_exception_handlers(app: FastAPI, settings: Settings):
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        body = exc.to_dict()
        if isinstance(exc, ServerError):
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
            if not settings.is_production:
                body["error"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = [".".join(str(part) for part in err["loc"] if part != "body") for err in exc.errors()]
        logger.warning("Invalid request to %s: %s", request.url.path, ", ".join(fields))
        return JSONResponse(
            status_code=400,
            content={"message": "Missing or invalid fields", "fields": fields},
        )

    @app.exception_handler(PyMongoError)
    async def database_error_handler(request: Request, exc: PyMongoError):
        logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        body = {"message": "Internal server error"}
        if not settings.is_production:
            body["error"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return JSONResponse(status_code=500, content=body)


def create_app(settings: Settings = None, database=None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(title="Auto Body Shop Booking API")
    app.state.settings = settings
    app.state.jwt_config = JWTConfig.from_settings(settings)
    app.state.db = database if database is not None else create_database(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app, settings)

    app.include_router(auth_router, prefix="/api/auth")
    app.include_router(booking_router, prefix="/api/bookings")
    app.include_router(vehicle_router, prefix="/api/vehicles")
    app.include_router(service_router, prefix="/api/services")
    app.include_router(review_router, prefix="/api/reviews")
    app.include_router(audit_router, prefix="/api/audit-logs")

    @app.get("/")
    async def root():
        return {"message": "Welcome to the Auto Body Shop Booking API"}

    # DB connectivity check
    @app.on_event("startup")
    async def startup_db_check():
        try:
            await app.state.db.command("ping")
            logger.info("MongoDB connected successfully.")
        except PyMongoError as e:
            logger.error("MongoDB connection failed: %s", e)

    return app
