"""
ShipGate Backend
FastAPI application entry point

- Rate comparison across EasyPost and Veeqo with normalized carrier/service names
- Label purchase against the provider that quoted the rate
- Order history of rate fetches and purchases
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from shipgate.api.deps import build_canonicalizer, build_history_service, build_rate_service
from shipgate.api.routes import mappings, shipments
from shipgate.core.config import settings
from shipgate.core.database import init_db
from shipgate.core.exceptions import ShipGateError

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})")

    app.state.canonicalizer = build_canonicalizer()
    app.state.rate_service = build_rate_service(app.state.canonicalizer)
    app.state.history_service = build_history_service()

    if settings.HISTORY_ENABLED:
        await init_db()
        logger.info("Order history database initialized")
    else:
        logger.info("Order history persistence is disabled")

    yield

    await app.state.rate_service.close()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ShipGateError)
async def shipgate_error_handler(request: Request, exc: ShipGateError):
    logger.error(f"Unhandled {exc!r} on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": exc.message, "code": exc.code},
    )


app.include_router(shipments.router)
app.include_router(mappings.router)


@app.get("/")
async def root():
    return {
        "message": f"{settings.APP_NAME} API",
        "version": settings.APP_VERSION,
        "status": "operational",
        "endpoints": [
            "GET /health",
            "POST /shipments/rates",
            "POST /shipments/buy",
            "GET /shipments/history",
            "GET /mappings",
            "POST /mappings/carriers",
            "POST /mappings/services",
        ],
    }


@app.get("/health")
async def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


if __name__ == "__main__":
    import os

    import uvicorn
    uvicorn.run(
        "shipgate.main:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", "8000")),
        reload=settings.DEBUG,
    )
