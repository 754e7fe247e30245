import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.api.router import api_router
from app.core.config import Settings, settings as default_settings
from app.core.errors import CatalogError
from app.core.logging import configure_logging, request_id_ctx_var, ensure_request_id
from app.core.security import CredentialVerifier
from app.db.session import Database
from app.services.asset_store import AssetStore, get_asset_store

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def _error_response(request: Request, status_code: int, message: str, details: object = None) -> JSONResponse:
    content: dict = {"error": message}
    if details is not None and not request.app.state.settings.is_production:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    asset_store: AssetStore | None = None,
    verifier: CredentialVerifier | None = None,
) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level, service=settings.app_name)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.auto_create_schema:
            app.state.database.create_all()
        logger.info("Catalog started", extra={"environment": settings.environment})
        yield
        app.state.database.dispose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database or Database(settings.database_url)
    app.state.asset_store = asset_store or get_asset_store(settings)
    app.state.verifier = verifier or CredentialVerifier.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = ensure_request_id(request.headers.get("X-Request-ID"))
        request_id_ctx_var.set(request_id)
        if request.method == "OPTIONS":
            response = Response(status_code=200, headers=CORS_HEADERS)
        else:
            response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        if exc.status_code >= 500:
            logger.error(exc.message, extra={"error_type": type(exc).__name__, "path": request.url.path})
        return _error_response(request, exc.status_code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _error_response(request, 400, "Invalid request.", jsonable_errors(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(request, exc.status_code, str(exc.detail))

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Unhandled database error", extra={"path": request.url.path})
        return _error_response(request, 500, "Internal Server Error", str(exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return _error_response(request, 500, "Internal Server Error", str(exc))

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(api_router)
    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [{"loc": list(error.get("loc", ())), "msg": error.get("msg", "")} for error in exc.errors()]


app = create_app()
