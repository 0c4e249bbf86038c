"""FastAPI application entrypoint.

Responsibilities kept minimal:
  * App / lifespan initialization
  * Router registration (events, calendar views)
  * Cross-cutting concerns: logging, metrics middleware & exception handlers
"""

from contextlib import asynccontextmanager
import logging
import os
from fastapi import FastAPI, Request, Response
try:  # Optional OpenTelemetry
    from opentelemetry import trace
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    _otel_available = True
except ImportError:  # pragma: no cover
    _otel_available = False
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

from .api.events import router as events_router
from .api.calendar import router as calendar_router
from .db.session import engine, Base
from .errors import BaseAppException, InternalServerError

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - simple startup path
    """Initialize database schema (idempotent for tests)."""
    Base.metadata.create_all(bind=engine)
    logger.info("Calendar engine API started")
    yield


# --- Optional .env loading (opt-in via APP_LOAD_DOTENV) ---
if os.getenv("APP_LOAD_DOTENV") in {"1", "true", "TRUE", "yes", "on"}:  # pragma: no cover
    try:
        from dotenv import load_dotenv  # type: ignore
        # Respect existing env (override=False). Default search walks up from CWD.
        load_dotenv(override=False)
    except ImportError:
        logger.warning("APP_LOAD_DOTENV is set but python-dotenv is not installed")

app = FastAPI(title="Calendar Engine API", version="0.1.0", lifespan=lifespan)

# --- OpenTelemetry Tracing (optional) ---
if _otel_available and os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT"):
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    resource = Resource.create({"service.name": "calendar-engine-backend"})
    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(endpoint=endpoint)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    tracer = trace.get_tracer(__name__)
else:  # pragma: no cover
    tracer = None

# --- Metrics setup ---
REQUEST_COUNT = Counter(
    "calendar_engine_requests_total", "Total HTTP requests", ["method", "path", "status"]
)
REQUEST_LATENCY = Histogram(
    "calendar_engine_request_latency_seconds", "Latency of HTTP requests", ["method", "path"]
)

# --- CORS (for local frontend dev) ---
cors_origins_env = os.getenv("CORS_ALLOW_ORIGINS")
if cors_origins_env:
    allow_origins = [o.strip() for o in cors_origins_env.split(",") if o.strip()]
else:
    allow_origins = ["http://localhost:3000", "http://localhost:5173"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(events_router)
app.include_router(calendar_router)


def _path_label(path: str) -> str:
    # collapse ids so metrics cardinality stays bounded
    parts = path.split("/")
    if len(parts) >= 3 and parts[1] == "events" and parts[2]:
        parts[2] = ":id"
    return "/".join(parts)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    method = request.method
    path_label = _path_label(request.url.path)
    with REQUEST_LATENCY.labels(method=method, path=path_label).time():
        if tracer:
            with tracer.start_as_current_span(f"HTTP {method} {path_label}"):
                response: Response = await call_next(request)
        else:
            response: Response = await call_next(request)
    REQUEST_COUNT.labels(method=method, path=path_label, status=str(response.status_code)).inc()
    return response


@app.get("/metrics")
def metrics():  # pragma: no cover - external scrape
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.exception_handler(BaseAppException)
async def app_exception_handler(request: Request, exc: BaseAppException):
    if exc.http_status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status, content=exc.to_detail())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):  # pragma: no cover
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    error = InternalServerError("unexpected error")
    return JSONResponse(status_code=error.http_status, content=error.to_detail())


@app.get("/healthz")
async def health():
    health = {"status": "ok"}
    try:
        with engine.connect() as conn:
            conn.exec_driver_sql("SELECT 1")
        health["database"] = "up"
    except Exception:  # pragma: no cover
        health["database"] = "error"
    # Tracing status
    health["tracing"] = "enabled" if tracer else "disabled"
    return health
