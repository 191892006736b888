import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import FRONTEND_URL, LOG_DIR, LOG_LEVEL, RUN_MIGRATIONS
from app.core.logging_config import setup_logging

# API Routes
from app.api.routes import auth, profile, billing, billing_webhook, interviews, sessions, health

setup_logging(LOG_LEVEL, LOG_DIR)
logger = logging.getLogger(__name__)


def prepare_database():
    """Alembic when RUN_MIGRATIONS=1, otherwise create_all plus the default plans."""
    if RUN_MIGRATIONS:
        from app.db.migrate import run_migrations
        run_migrations()
    else:
        from app.db.init_db import init_db
        init_db()
    logger.info("Database ready")


@asynccontextmanager
async def lifespan(app: FastAPI):
    prepare_database()
    yield


# ============================================
# FASTAPI APP INIT
# ============================================

app = FastAPI(title="MockMate API", lifespan=lifespan)

# CORS: only the configured frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in FRONTEND_URL.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type", "X-Admin-Key"],
)


# ============================================
# REGISTER ALL ROUTERS
# ============================================

app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(billing.router)
app.include_router(billing_webhook.router)
app.include_router(interviews.router)
app.include_router(sessions.router)
app.include_router(health.router)


@app.get("/")
def root():
    return {"status": "MockMate API running"}
