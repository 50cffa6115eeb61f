"""RANKLENS — FastAPI Application Entry Point.

Monthly organic-search reporting across Google Search Console and Bing
Webmaster Tools.
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.database import init_db, check_connection, mask_url, db_url
from app.scheduler.jobs import start_scheduler, stop_scheduler
from app.api.site_routes import router as site_router
from app.api.report_routes import router as report_router
from app.api.ai_routes import router as ai_router
from app.core.logging import get_logger

logger = get_logger("main")

IS_SERVERLESS = bool(
    os.environ.get("VERCEL") or os.environ.get("AWS_LAMBDA_FUNCTION_NAME")
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info("RANKLENS starting up...")
    logger.info(f"Environment: {'SERVERLESS' if IS_SERVERLESS else 'LOCAL'}")
    if check_connection():
        try:
            init_db()
        except Exception as e:
            logger.error(f"Table creation failed: {e}")
    else:
        logger.error("Database NOT connected — report history will fail")
    if not IS_SERVERLESS:
        start_scheduler()
    yield
    if not IS_SERVERLESS:
        stop_scheduler()
    logger.info("RANKLENS shut down")


app = FastAPI(
    title="RANKLENS",
    description="Reconcile Google Search Console and Bing Webmaster data, compute MoM / YoY deltas, and generate narrative SEO reports.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Flatten error details so every error body carries an "error" reason."""
    detail = exc.detail if isinstance(exc.detail, dict) else {"error": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=detail, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "error": "validation_failed",
            "details": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc!r}")
    return JSONResponse(status_code=500, content={"error": "internal_error"})


# Routers
app.include_router(site_router)
app.include_router(report_router)
app.include_router(ai_router)


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "ranklens",
        "version": "1.0.0",
    }


@app.get("/debug/db", tags=["System"])
async def debug_db():
    """Debug endpoint — check database connectivity."""
    backend = "postgresql" if db_url.startswith("postgresql") else "sqlite"
    return {
        "connected": check_connection(),
        "backend": backend,
        "url": mask_url(db_url),
        "environment": "serverless" if IS_SERVERLESS else "local",
    }
