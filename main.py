import logging
import time
from datetime import datetime, timezone

from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import lendflow.models  # ensure models are registered
from lendflow.core.config import API_PREFIX, APP_VERSION, CORS_ORIGINS, LOG_FORMAT, LOG_LEVEL, SEED_ON_STARTUP
from lendflow.core.exceptions import ConflictError
from lendflow.core.logging import setup_logging
from lendflow.utils.database import engine, Base, SessionLocal, get_db, check_connection, dispose_engine
from lendflow.initial_data import init_seed

from lendflow.routers import (
    customers_router,
    loans_router,
    dashboard_router,
    db_maintenance_router,
)

setup_logging(LOG_LEVEL, LOG_FORMAT)
logger = logging.getLogger("lendflow")

app = FastAPI(title="LendFlow Loan Management API", version=APP_VERSION)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


# Routers
app.include_router(customers_router.router, prefix=API_PREFIX)
app.include_router(loans_router.router, prefix=API_PREFIX)
app.include_router(dashboard_router.router, prefix=API_PREFIX)
app.include_router(db_maintenance_router.router, prefix=API_PREFIX)


@app.on_event("startup")
def on_startup():
    # no store, no service: StoreUnavailableError aborts the server start
    check_connection()
    Base.metadata.create_all(bind=engine)
    logger.info("Connected to database, schema ready")

    if SEED_ON_STARTUP:
        db = SessionLocal()
        try:
            init_seed(db)
        except ConflictError:
            logger.info("Sample data already present, seeding skipped")
        finally:
            db.close()


@app.on_event("shutdown")
def on_shutdown():
    dispose_engine()


@app.get("/")
def root():
    return {"message": "LendFlow backend is running!!"}


@app.get("/health")
def health(db: Session = Depends(get_db)):
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Health check failed: %s", e)
        return JSONResponse(
            status_code=503,
            content={"status": "ERROR", "timestamp": timestamp, "database": "disconnected"},
        )
    return {"status": "OK", "timestamp": timestamp, "database": "connected"}
