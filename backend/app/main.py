import json
import logging
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routers.health import router as health_router
from app.api.routers.practice_sessions import router as practice_sessions_router
from app.api.routers.profile import router as profile_router
from app.api.routers.stats import router as stats_router
from app.api.routers.syllabus import router as syllabus_router
from app.core.config import settings
from app.core.errors import (
    ApiError,
    ErrorCode,
    build_error_payload,
    map_status_to_error_code,
)
from app.core.observability import observability_registry, resource_of
from app.services.dates import InvalidPracticeDateError

logger = logging.getLogger("practice.api")
request_logger = logging.getLogger("practice.api.request")

REQUEST_ID_HEADER = "X-Request-ID"


def _request_id_from(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if isinstance(request_id, str) and request_id:
        return request_id
    return str(uuid4())


def _route_template_from(request: Request) -> str:
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    if isinstance(template, str) and template:
        return template
    return request.url.path


def _configure_logging() -> None:
    level = getattr(logging, settings.log_level.strip().upper(), logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
    logger.setLevel(level)
    request_logger.setLevel(level)


def _configure_cors(app: FastAPI) -> None:
    origins = [item.strip() for item in settings.cors_origins.split(",") if item.strip()]
    allow_any = "*" in origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_any else origins,
        allow_origin_regex=None if allow_any else settings.cors_origin_regex,
        allow_credentials=not allow_any,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _error_response(status_code: int, error_code: ErrorCode, message: str, request: Request):
    return JSONResponse(
        status_code=status_code,
        content=build_error_payload(
            error_code=error_code,
            message=message,
            request_id=_request_id_from(request),
        ),
    )


def _record_request(
    *,
    request_id: str,
    method: str,
    path: str,
    route: str,
    status_code: int,
    latency_ms: float,
) -> None:
    is_slow = latency_ms >= settings.slow_request_ms
    observability_registry.observe(
        request_id=request_id,
        method=method,
        path=path,
        route=route,
        status_code=status_code,
        latency_ms=latency_ms,
        is_slow=is_slow,
    )
    request_logger.info(
        json.dumps(
            {
                "request_id": request_id,
                "method": method,
                "path": path,
                "resource": resource_of(route),
                "route": route,
                "status_code": status_code,
                "latency_ms": round(latency_ms, 2),
                "is_slow": is_slow,
            },
            ensure_ascii=False,
            sort_keys=True,
        )
    )


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return _error_response(exc.status_code, exc.error_code, exc.message, request)

    @app.exception_handler(InvalidPracticeDateError)
    async def invalid_practice_date_handler(request: Request, exc: InvalidPracticeDateError):
        return _error_response(400, ErrorCode.VALIDATION_ERROR, str(exc), request)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        message = str(first.get("msg", "request validation failed"))
        return _error_response(400, ErrorCode.VALIDATION_ERROR, message, request)

    # Also catches fastapi.HTTPException, which subclasses the starlette one.
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "request failed"
        return _error_response(
            exc.status_code,
            map_status_to_error_code(exc.status_code),
            message,
            request,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception", extra={"request_id": _request_id_from(request)})
        return _error_response(
            500,
            ErrorCode.INTERNAL_ERROR,
            "internal server error",
            request,
        )


def create_app() -> FastAPI:
    _configure_logging()
    observability_registry.configure(
        max_recent_errors=settings.observability_recent_error_limit
    )
    observability_registry.reset()
    app = FastAPI(
        title="Piano Practice Tracker API",
        version="0.1.0",
        description="Practice log, syllabus tracking and practice statistics",
    )
    _configure_cors(app)

    @app.middleware("http")
    async def track_request(request: Request, call_next):
        request_id = request.headers.get("x-request-id", "").strip() or str(uuid4())
        request.state.request_id = request_id
        started_at = perf_counter()
        response = None
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            route = _route_template_from(request)
            _record_request(
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                route=route,
                status_code=status_code,
                latency_ms=(perf_counter() - started_at) * 1000,
            )
            if response is not None:
                response.headers[REQUEST_ID_HEADER] = request_id

    _register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(profile_router)
    app.include_router(practice_sessions_router)
    app.include_router(syllabus_router)
    app.include_router(stats_router)

    return app


app = create_app()
