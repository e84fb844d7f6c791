"""
Workforce Hub — FastAPI application entry-point.

Run with:
    uvicorn workforce.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from workforce.config import settings
from workforce.errors import install_exception_handlers
from workforce.services.store import bootstrap

# ── Import routers ──
from workforce.routers import auth, dashboard, employees, pipeline, projects, skills, timesheets, users

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan: create tables and seed categories on startup ──
@asynccontextmanager
async def lifespan(app: FastAPI):
    await bootstrap()
    logger.info("%s ready", settings.APP_NAME)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Workforce management — skills, project staffing, timesheets and the sales pipeline.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=("*",))
install_exception_handlers(app)

# ── Register API routers ──
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(employees.router)
app.include_router(skills.router)
app.include_router(projects.router)
app.include_router(timesheets.router)
app.include_router(pipeline.router)
app.include_router(dashboard.router)
