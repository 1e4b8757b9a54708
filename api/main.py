"""FastAPI application for the Golf Tournament scoring API."""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from database.connection import db, dsn_from_env
from database.db_manager import DatabaseManager
from scoring.lifecycle import RoundLifecycle

load_dotenv()

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize DB pool and the scoring engine on startup, close on shutdown."""
    await db.initialize(dsn=dsn_from_env())
    store = DatabaseManager(db.pool)
    app.state.db_manager = store
    app.state.lifecycle = RoundLifecycle(store, publisher=store.feed)
    logger.info("Scoring engine ready")
    yield
    # Let queued achievement posts finish before the pool goes away
    await app.state.lifecycle.drain()
    await db.close()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Golf Tournament Scoring API",
        version="1.0.0",
        lifespan=lifespan,
    )

    origins = os.environ.get("CORS_ORIGINS", "http://localhost:5173")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from api.routers import leaderboard, rounds
    app.include_router(rounds.router, prefix="/api/rounds", tags=["rounds"])
    app.include_router(leaderboard.router, prefix="/api/tournaments", tags=["leaderboard"])

    @app.get("/api/health")
    async def health():
        healthy = await db.health_check()
        return {"status": "ok" if healthy else "degraded", "database": healthy}

    return app


app = create_app()
