"""FastAPI application: REST routes, error mapping, DB startup."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .actions import ActionError, NotFoundError
from .api import router
from .database import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield


app = FastAPI(title="FlowList", lifespan=lifespan)
app.include_router(router)


@app.exception_handler(ActionError)
async def action_error_handler(request: Request, exc: ActionError):
    status_code = 404 if isinstance(exc, NotFoundError) else 400
    logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.get("/health")
async def health():
    return {"ok": True}
