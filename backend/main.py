# backend/main.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from database import SessionLocal, init_db
from repositories.entity_store import SqlEntityStore
from schemas.common import ErrorResponse
from services.auth_service import AuthService
from utils.exceptions import BusinessRuleError, DomainError, InvalidInputError, NotFoundError
from utils.middleware import setup_middleware

# Routers
from routes.auth import router as auth_router
from routes.ducks import router as ducks_router
from routes.customers import router as customers_router
from routes.sellers import router as sellers_router
from routes.sales import router as sales_router
from routes.reports import router as reports_router
from routes.logs import router as logs_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("%s %s starting", settings.APP_NAME, settings.VERSION)
    init_db()
    db = SessionLocal()
    try:
        AuthService(SqlEntityStore(db)).ensure_admin(
            settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD, settings.ADMIN_NAME
        )
    finally:
        db.close()

    yield

    logger.info("%s shutting down", settings.APP_NAME)


app = FastAPI(title=settings.APP_NAME, version=settings.VERSION, lifespan=lifespan)

setup_middleware(app)

app.include_router(auth_router)
app.include_router(ducks_router)
app.include_router(customers_router)
app.include_router(sellers_router)
app.include_router(sales_router)
app.include_router(reports_router)
app.include_router(logs_router)


# ==================== ERROR HANDLING ====================

_DOMAIN_STATUS = {
    InvalidInputError: 400,
    NotFoundError: 404,
    BusinessRuleError: 409,
}

_HTTP_REASONS = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    500: "Internal Server Error",
}


def error_response(request: Request, status: int, message: str, code: str, details=None, headers=None):
    body = ErrorResponse(
        timestamp=datetime.now(),
        status=status,
        error=_HTTP_REASONS.get(status, "Error"),
        message=message,
        error_code=code,
        path=request.url.path,
        details=details,
    )
    return JSONResponse(status_code=status, content=body.model_dump(mode="json"), headers=headers)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    status = next((s for cls, s in _DOMAIN_STATUS.items() if isinstance(exc, cls)), 400)
    if status == 409:
        logger.warning("Business rule violation [%s]: %s", exc.code, exc.message)
    else:
        logger.info("%s: %s", exc.code, exc.message)
    return error_response(request, status, exc.message, exc.code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = {
        ".".join(str(part) for part in err.get("loc", ()) if part != "body"): err.get("msg", "")
        for err in exc.errors()
    }
    return error_response(request, 400, "Validation failed", "VALIDATION_ERROR", details=errors)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    codes = {401: "UNAUTHORIZED", 403: "FORBIDDEN", 404: "NOT_FOUND"}
    return error_response(
        request, exc.status_code, str(exc.detail), codes.get(exc.status_code, "HTTP_ERROR"),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Store failure on %s %s", request.method, request.url.path)
    return error_response(request, 500, "An internal storage error occurred", "STORE_FAILURE")


# ==================== ROOT ====================

@app.get("/")
def read_root():
    return {"message": f"{settings.APP_NAME} is running", "version": settings.VERSION}


@app.get("/health")
def health_check():
    return {"status": "healthy", "version": settings.VERSION, "app": settings.APP_NAME}
