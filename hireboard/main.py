import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException

from .api import applications as applications_api
from .api import auth as auth_api
from .api import candidates as candidates_api
from .api import jobs as jobs_api
from .api import notifications as notifications_api
from .api import recruiters as recruiters_api
from .config import FRONTEND_ORIGINS, LOG_LEVEL, PUBLIC_FILES_URL, UPLOAD_DIR
from .database import init_db
from .services.blob_store import LocalBlobStore
from .services.notifications import NotificationService
from .utils.error_handlers import AppError, app_error_response, create_error_response, get_error_message

logger = logging.getLogger(__name__)

# Framework-raised errors (unknown route, wrong method) share the AppError codes.
HTTP_ERROR_CODES = {
    400: "validation_error",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
}


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return app_error_response(exc)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTPException with user-friendly messages."""
        code = HTTP_ERROR_CODES.get(exc.status_code, "http_error")
        response = create_error_response(exc.status_code, str(exc.detail), code=code)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info("Request validation failed on %s: %s", request.url.path, exc.errors())
        return create_error_response(
            422,
            get_error_message("validation_error"),
            {"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()]},
            code="validation_error",
        )

    @app.exception_handler(OperationalError)
    async def sqlalchemy_operational_error_handler(request: Request, exc: OperationalError):
        """Handle database operational errors."""
        logger.exception("Database OperationalError: %s", exc)
        return create_error_response(503, get_error_message("database_error"), code="store_error")

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
        """Handle general database errors."""
        logger.exception("Database SQLAlchemyError: %s", exc)
        return create_error_response(500, get_error_message("database_error"))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors globally."""
        logger.exception("Unhandled exception: %s", exc)
        return create_error_response(500, get_error_message("server_error"))


def create_app() -> FastAPI:
    app = FastAPI(title="Hireboard")

    # Shared, process-wide services. Request-scoped repositories are built in utils.dependencies.
    app.state.notifications = NotificationService()
    app.state.blobs = LocalBlobStore()
    app.state.principal_listeners = []

    app.include_router(auth_api.router)
    app.include_router(jobs_api.router)
    app.include_router(applications_api.router)
    app.include_router(candidates_api.router)
    app.include_router(recruiters_api.router)
    app.include_router(notifications_api.router)

    _register_exception_handlers(app)

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "Backend running", "service": "Hireboard"}

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://127.0.0.1:5173", *FRONTEND_ORIGINS],
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    Path(UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    app.mount(PUBLIC_FILES_URL, StaticFiles(directory=UPLOAD_DIR, check_dir=False), name="files")

    @app.on_event("startup")
    def on_startup() -> None:
        init_db()
        logger.info("Database ready")

    return app


configure_logging()
app = create_app()
