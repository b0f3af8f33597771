import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from kinship.config import settings
from kinship.database import Base, engine

# Import models so SQLAlchemy registers tables
from kinship.models import (
    person,
    connection,
    family_tree_member,
)

# Routers
from kinship.routers import (
    connection_router,
    family_tree_router,
    graph_router,
)

# -----------------------
# LOGGING
# -----------------------
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# -----------------------
# CREATE APP
# -----------------------
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Relationship and family-graph API for family tree data.",
    version="1.0.0",
)
logger.info("Connection store backend: %s", settings.STORE_BACKEND)

# -----------------------
# CORS
# -----------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------
# DATABASE TABLES
# -----------------------
if settings.STORE_BACKEND == "sqlalchemy":
    Base.metadata.create_all(bind=engine)

# -----------------------
# ROUTERS
# -----------------------
app.include_router(connection_router.router)
app.include_router(family_tree_router.router)
app.include_router(graph_router.router)


@app.get("/")
def root():
    return {"status": "ok", "service": settings.PROJECT_NAME}
