from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from hospital_billing.config import Settings, settings as default_settings
from hospital_billing.data.seed import seed_database
from hospital_billing.database import Database
from hospital_billing.exceptions import BillingError
from hospital_billing.logger import logger, setup_logger
from hospital_billing.routers import audit, auth, dashboard, invoices, patients, services
from hospital_billing.routers import settings as settings_router


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def register_exception_handlers(app: FastAPI) -> None:
    """Every failure leaves the API as {"message": ...} with a conventional status."""

    @app.exception_handler(BillingError)
    async def billing_error_handler(request: Request, exc: BillingError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": _validation_message(exc)},
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"❌ Database error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "A database error occurred"},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Composition root: owns the settings and the one Database handle."""
    app_settings = app_settings or default_settings
    setup_logger(level=app_settings.LOG_LEVEL.upper())
    database = Database(app_settings.DATABASE_URL, echo=app_settings.DATABASE_ECHO)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        logger.info(f"🏥 Starting {app_settings.APP_NAME}...")

        logger.info("📦 Initializing database...")
        database.init_db()
        if app_settings.SEED_DEMO_DATA:
            seed_database(database, app_settings)

        logger.info(f"✅ Ready on http://{app_settings.HOST}:{app_settings.PORT}")

        yield

        logger.info(f"👋 Shutting down {app_settings.APP_NAME}...")
        database.dispose()

    app = FastAPI(
        title=app_settings.APP_NAME,
        description="Patients, services, invoices and hospital settings",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.database = database

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Routers
    app.include_router(auth.router)
    app.include_router(dashboard.router)
    app.include_router(patients.router)
    app.include_router(services.router)
    app.include_router(invoices.router)
    app.include_router(settings_router.router)
    app.include_router(audit.router)

    # Mount static files (pre-built client)
    frontend_dir = Path(app_settings.FRONTEND_DIR)
    if frontend_dir.exists():
        app.mount("/static", StaticFiles(directory=str(frontend_dir)), name="static")

    @app.get("/")
    async def serve_frontend():
        """Serve the client's index page when a build is present."""
        index_path = frontend_dir / "index.html"
        if index_path.exists():
            return FileResponse(str(index_path))
        return {"message": f"{app_settings.APP_NAME} API is running. Frontend not found."}

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        try:
            database_ok = database.ping()
        except SQLAlchemyError as e:
            logger.error(f"❌ Health check could not reach the database: {e}")
            database_ok = False
        return {
            "status": "healthy" if database_ok else "degraded",
            "service": app_settings.APP_NAME,
            "database": database_ok,
        }

    return app


app = create_app()


def run() -> None:
    """Start the API with uvicorn (used by the desktop launcher)."""
    import uvicorn

    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)
