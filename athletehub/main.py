import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from athletehub import db
from athletehub.db import relational
from athletehub.db_init import ensure_indexes
from athletehub.middleware.audit_middleware import AuditMiddleware
from athletehub.middleware.security_headers import SecurityHeadersMiddleware
from athletehub.routes import athletes, auth, career, financial, injury, performance
from athletehub.settings import CORS_ORIGINS, ENVIRONMENT, UPLOAD_FOLDER
from athletehub.utils.logger import configure_logging
from athletehub.utils.responses import failure_status

logger = logging.getLogger(__name__)

app = FastAPI(title="AthleteHub API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(AuditMiddleware)

# Routers
app.include_router(auth.router)
app.include_router(athletes.router)
app.include_router(performance.router)
app.include_router(career.router)
app.include_router(injury.router)
app.include_router(financial.router)

os.makedirs(UPLOAD_FOLDER, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=UPLOAD_FOLDER), name="uploads")


@app.on_event("startup")
def _startup():
    configure_logging()
    try:
        ensure_indexes()
    except PyMongoError:
        logger.exception("index creation skipped, MongoDB unavailable")
    logger.info("AthleteHub API started (%s)", ENVIRONMENT)


# ---------- Error envelope ----------
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        {"status": failure_status(exc.status_code), "message": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path", "form"))
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", message)
    return JSONResponse({"status": "fail", "message": message}, status_code=400)


@app.exception_handler(PyMongoError)
async def database_exception_handler(request: Request, exc: PyMongoError):
    logger.exception("database error on %s %s", request.method, request.url.path)
    return JSONResponse({"status": "error", "message": "Database error"}, status_code=500)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"status": "error", "message": "Something went wrong"}, status_code=500)


@app.get("/health")
def health():
    return {
        "status": "ok",
        "mongodb": "connected" if db.ping() else "disconnected",
        "postgresql": relational.status(),
    }
