"""Program Engine API.

`create_app` wires the quiz, program, meals and workouts routers and the
sleep and supplement trackers together with CORS, the error envelope
handlers and request logging. Run with ``uvicorn main:app``.
"""

import os
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.meals import router as meals_router
from api.program import router as program_router
from api.quiz import router as quiz_router
from api.sleep import router as sleep_router
from api.supplements import router as supplements_router
from api.workouts import router as workouts_router
from core.error_handlers import REQUEST_ID_HEADER, register_exception_handlers
from core.exceptions import DatabaseError
from core.logger import get_logger
from database import init_db
from database.deps import get_db_read

logger = get_logger("main")

API_VERSION = "0.1.0"
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ROUTERS = (quiz_router, program_router, meals_router, workouts_router, sleep_router, supplements_router)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


async def log_requests(request: Request, call_next):
    """Log each request with its status and duration; echo the request id."""
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("%s %s raised", request.method, request.url.path)
        raise
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
    request_id = request.headers.get(REQUEST_ID_HEADER)
    if request_id:
        response.headers["X-Request-ID"] = request_id
    return response


def health(db: Session = Depends(get_db_read)):
    """Report whether the record store answers.

    Raises:
        DatabaseError: If the read database cannot run a trivial query.
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check failed")
        raise DatabaseError("Database health check failed", operation="health_check")
    return {"status": "healthy", "database": "connected", "version": API_VERSION}


def create_app() -> FastAPI:
    app = FastAPI(title="Program Engine API", version=API_VERSION, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=CORS_ORIGINS != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.middleware("http")(log_requests)
    app.add_api_route("/health", health, methods=["GET"], tags=["health"])
    for router in ROUTERS:
        app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
