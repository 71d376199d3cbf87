# grnd/main.py
import time
import logging
import uuid
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from grnd.routers.auth import router as auth_router
from grnd.routers.session import router as session_router
from grnd.routers.workouts import router as workouts_router
from grnd.routers.templates import router as templates_router
from grnd.routers.folders import router as folders_router
from grnd.routers.catalog import router as catalog_router
from grnd.routers.analytics import router as analytics_router
from grnd.db import SessionLocal  # for healthz DB check
from grnd.settings import get_settings

log = logging.getLogger("uvicorn")
settings = get_settings()

app = FastAPI(
    title="GRND API",
    openapi_tags=[
        {"name": "auth", "description": "Registration & login"},
        {"name": "session", "description": "The active workout being logged"},
        {"name": "workouts", "description": "Stored workouts"},
        {"name": "templates", "description": "Reusable workout templates"},
        {"name": "folders", "description": "Template folders"},
        {"name": "catalog", "description": "Muscle groups and suggested exercises"},
        {"name": "analytics", "description": "Progress over stored workouts"},
    ],
)

# CORS (relax for local dev; tighten origins in prod via env)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS.split(","),
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def add_request_id_and_log(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = req_id
    log.info("rid=%s %s %s -> %s in %.1fms",
             req_id, request.method, request.url.path, response.status_code, duration_ms)
    return response

@app.get("/")
def root():
    return {"ok": True, "name": "GRND API"}

@app.get("/ping")
def ping():
    return {"pong": True}

@app.get("/healthz")
def healthz():
    # Quick DB sanity check
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        return {"status": "ok"}
    except SQLAlchemyError as e:
        log.warning("healthz: database unreachable: %s", e)
        return {"status": "degraded", "error": str(e)}

@app.get("/version")
def version():
    return {"version": settings.API_VERSION}

# Routers
app.include_router(auth_router)
app.include_router(session_router)
app.include_router(workouts_router)
app.include_router(templates_router)
app.include_router(folders_router)
app.include_router(catalog_router)
app.include_router(analytics_router)
