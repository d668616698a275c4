import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from database import create_tables
from errors import MatchCoreError, MatchNotFound
from roundrobin.router import router as schedule_router
from bracket.router import router as bracket_router

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    yield


app = FastAPI(title="Club Match Scheduler", lifespan=lifespan)
app.include_router(schedule_router)
app.include_router(bracket_router)


@app.exception_handler(MatchCoreError)
async def match_core_error_handler(request: Request, exc: MatchCoreError):
    status_code = 404 if isinstance(exc, MatchNotFound) else 400
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.get("/")
async def index():
    return {
        "schedule": "/schedule/create",
        "bracket": "/bracket/create",
    }
