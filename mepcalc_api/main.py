"""MEPCalc API: FastAPI application entry point."""

import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mepcalc import __version__
from mepcalc_api.routes import rf, cable, electrical, history, export
from mepcalc_api.middleware.rate_limit import RateLimitMiddleware

load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    from mepcalc_api.database import init_db
    init_db()
    from mepcalc_api.history import CalculationHistoryStore
    app.state.history_store = CalculationHistoryStore()
    yield


app = FastAPI(
    title="MEPCalc API",
    description="Electrical installation and RF matching calculators",
    version=__version__,
    lifespan=lifespan,
)

# CORS: allow frontend origins
_frontend_url = os.getenv("FRONTEND_URL")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[_frontend_url] if _frontend_url else [],
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    RateLimitMiddleware,
    requests_per_minute=int(os.getenv("MEPCALC_RATE_LIMIT", "120")),
)

# Register route modules
app.include_router(rf.router, prefix="/api", tags=["RF"])
app.include_router(cable.router, prefix="/api", tags=["Cable"])
app.include_router(electrical.router, prefix="/api", tags=["Electrical"])
app.include_router(history.router, prefix="/api", tags=["History"])
app.include_router(export.router, prefix="/api", tags=["Export"])


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "mepcalc-api", "version": __version__}
