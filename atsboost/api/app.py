"""FastAPI application."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded

from atsboost.api.limiter import limiter
from atsboost.config import settings
from atsboost.db.base import init_db

logger = logging.getLogger(__name__)

ALLOWED_ORIGINS = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]

FRONTEND_DIR = Path(__file__).parent.parent.parent / "frontend" / "dist"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and initialize the database on startup."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        init_db()
    except ValueError:
        logger.warning("DATABASE_URL not configured, skipping table creation")
    yield


app = FastAPI(
    title="ATSBoost API",
    description="CV optimisation and job matching for the South African job market",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Return 429 with a clear message when rate limit is exceeded."""
    return JSONResponse(
        status_code=429,
        content={"detail": f"Rate limit exceeded: {exc.detail}"},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


# Import and include routers
from atsboost.api.routes import (  # noqa: E402
    admin,
    auth,
    cv,
    employers,
    jobs,
    notifications,
    payments,
    plans,
    premium,
    profile,
    webhooks,
)

app.include_router(auth.router, prefix="/auth", tags=["Auth"])
app.include_router(cv.router, prefix="/cv", tags=["CV"])
app.include_router(profile.router, prefix="/profile", tags=["Profile"])
app.include_router(employers.router, prefix="/employers", tags=["Employers"])
app.include_router(jobs.router, prefix="/jobs", tags=["Jobs"])
app.include_router(premium.router, prefix="/premium", tags=["Premium"])
app.include_router(payments.router, prefix="/payments", tags=["Payments"])
app.include_router(plans.router, prefix="/plans", tags=["Plans"])
app.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
app.include_router(admin.router, prefix="/admin", tags=["Admin"])
app.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Serve static files from frontend build
if FRONTEND_DIR.exists():
    app.mount("/assets", StaticFiles(directory=FRONTEND_DIR / "assets"), name="assets")

    @app.get("/{full_path:path}")
    async def serve_spa(full_path: str):
        """Serve the SPA for all non-API routes."""
        file_path = FRONTEND_DIR / full_path
        if file_path.exists() and file_path.is_file():
            return FileResponse(file_path)
        return FileResponse(FRONTEND_DIR / "index.html")
