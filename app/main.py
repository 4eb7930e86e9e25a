# app/main.py
"""
FastAPI application entry point.
Includes security middleware, global error handlers, all routers, and the
scan log sink / recorder lifecycle.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from app.routers import rfid, scans, health
from app.database import create_tables, SessionLocal
from app.config import settings
from app.services.log_sink import create_log_sink
from app.services.scan_recorder import ScanRecorder
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Vehicle Pass RFID Checkpoint API",
    description="Validates RFID tag scans against vehicle pass applications and logs every attempt.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional API key auth for the scan history endpoints.
    Scanners and the health check never send keys.
    Set API_KEY in .env. Leave empty to disable auth (checked per request).
    """
    OPEN_PATHS = {"/api/rfid/scanId", "/api/health", "/docs", "/redoc", "/openapi.json"}

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.OPEN_PATHS or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(rfid.router,   prefix="/api", tags=["RFID Scanner"])
app.include_router(scans.router,  prefix="/api", tags=["Scan History"])
app.include_router(health.router, prefix="/api", tags=["Health"])


# ── Startup / Shutdown ────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 RFID checkpoint starting up...")
    create_tables()
    logger.info("✅ Database tables ready")

    sink = create_log_sink(settings, session_factory=SessionLocal)
    await sink.open()
    recorder = ScanRecorder(
        sink,
        mode=settings.SCAN_LOG_MODE,
        queue_size=settings.SCAN_LOG_QUEUE_SIZE,
        drain_timeout=settings.SCAN_LOG_DRAIN_TIMEOUT,
    )
    await recorder.start()
    app.state.scan_log_sink = sink
    app.state.scan_recorder = recorder
    logger.info(f"📝 Scan log sink={sink.name} mode={recorder.mode}")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 RFID checkpoint shutting down...")
    recorder = getattr(app.state, "scan_recorder", None)
    if recorder is not None:
        await recorder.stop()
    sink = getattr(app.state, "scan_log_sink", None)
    if sink is not None:
        await sink.close()
