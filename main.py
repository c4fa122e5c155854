import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from playforfun import __version__
from playforfun.config import FRONTEND_URL, LOG_LEVEL
from playforfun.database import create_db_and_tables
from playforfun.exceptions import PlayForFunError

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: Create database tables
    create_db_and_tables()
    logger.info("PlayForFun API %s started", __version__)
    yield


# Initialize FastAPI app
app = FastAPI(
    title="PlayForFun",
    description="Private match-prediction contests for groups of friends",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PlayForFunError)
async def playforfun_error_handler(request: Request, exc: PlayForFunError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Include routers
from playforfun.routers import spaces, matches, predictions, leaderboards, admin

app.include_router(spaces.router)
app.include_router(matches.router)
app.include_router(predictions.router)
app.include_router(leaderboards.router)
app.include_router(admin.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
