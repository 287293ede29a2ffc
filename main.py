import sys
import os
import logging
from pathlib import Path
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from config.database import SessionLocal
from config.settings import settings
from helpers.logging_helper import setup_logging
from models.index import init_db
from api.tags.tags_service import TagService
from api.tasks.scheduler import start_scheduler, shutdown_scheduler

logger = logging.getLogger(__name__)


def seed_system_tags():
    db = SessionLocal()
    try:
        TagService(db).ensure_system_tags()
        db.commit()
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    init_db()
    seed_system_tags()
    if settings.SCHEDULER_ENABLED:
        start_scheduler()
    logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")
    yield
    shutdown_scheduler()


app = FastAPI(
    title=settings.APP_NAME,
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None,
)

# CORS: use our parsed list
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Authorization", "Content-Type"],
)


#load all routes
def load_routes(directory: Path):
    import importlib.util
    routers = []
    for item in sorted(directory.rglob("*_routes.py")):
        spec = importlib.util.spec_from_file_location(item.stem, str(item))
        module = importlib.util.module_from_spec(spec)
        sys.modules[item.stem] = module
        spec.loader.exec_module(module)
        if hasattr(module, "router"):
            routers.append(module.router)
    return routers


for router in load_routes(Path(__file__).parent / "api"):
    app.include_router(router, prefix="/api")


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/")
def home():
    return {"message": f"Welcome to {settings.APP_NAME}"}


if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=settings.DEBUG)
