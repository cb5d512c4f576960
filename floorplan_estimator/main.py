from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os

from .config import settings
from .database import engine, Base
from .routers import analysis, estimate, floorplans, materials, settings as settings_router

logger = logging.getLogger("floorplan_estimator")

# Create tables (handles new tables but won't add columns to existing ones)
Base.metadata.create_all(bind=engine)

INITIAL_REVISION = "5b2f0c7a91d4"


def _run_migrations():
    """Run pending Alembic migrations on startup.

    Databases created by Base.metadata.create_all() have the tables but no
    alembic_version table; those are stamped with the initial revision first.
    """
    try:
        from alembic.config import Config
        from alembic import command
        from sqlalchemy import inspect

        alembic_ini = os.path.join(os.path.dirname(__file__), "..", "alembic.ini")
        if not os.path.exists(alembic_ini):
            logger.info("alembic.ini not found, skipping migrations")
            return

        alembic_cfg = Config(alembic_ini)
        alembic_cfg.set_main_option("script_location", os.path.join(os.path.dirname(alembic_ini), "alembic"))
        alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

        insp = inspect(engine)
        table_names = insp.get_table_names()
        if "alembic_version" not in table_names and "user_settings" in table_names:
            logger.info("Stamping initial migration %s (tables already exist)", INITIAL_REVISION)
            command.stamp(alembic_cfg, INITIAL_REVISION)

        logger.info("Running pending Alembic migrations...")
        command.upgrade(alembic_cfg, "head")
        logger.info("Migrations complete")

    except Exception as e:
        # Never let migration errors prevent app startup
        logger.warning(f"Alembic migration warning: {e}")


app = FastAPI(
    title=settings.APP_NAME,
    description="Construction cost estimation from architectural floor plans",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(analysis.router, prefix="/api")
app.include_router(estimate.router, prefix="/api")
app.include_router(settings_router.router, prefix="/api")
app.include_router(floorplans.router, prefix="/api")
app.include_router(materials.router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok", "app": "floorplan-estimator"}


@app.on_event("startup")
def auto_migrate():
    """Run pending Alembic migrations on startup."""
    _run_migrations()
