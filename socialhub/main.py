import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from socialhub.api import api_router
from socialhub.api.error_handlers import register_error_handlers
from socialhub.core.config import settings
from socialhub.db.init_db import close_db, init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info(f"{settings.PROJECT_NAME} started")
    yield
    await close_db()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="User profiles, follow relationships and posts",
    version="0.1.0",
    lifespan=lifespan,
)

# Set up CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)
app.include_router(api_router)


@app.get("/")
async def root():
    return {
        "message": f"Welcome to the {settings.PROJECT_NAME}",
        "docs": "/docs",
    }


if __name__ == "__main__":
    uvicorn.run("socialhub.main:app", host="0.0.0.0", port=settings.PORT, reload=True)
