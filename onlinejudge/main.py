import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from onlinejudge.api.deps import get_backend
from onlinejudge.api.v1.api import api_router as api_v1_router
from onlinejudge.core.config import settings
from onlinejudge.core.logging_config import setup_log_queue_handler, teardown_log_queue_handler
from onlinejudge.db.session import SessionLocal, init_db
from onlinejudge.sandbox.backends.base import ExecutionBackend
from onlinejudge.sandbox.factory import get_execution_backend
from onlinejudge.services import seed_service

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup sequence initiated...")

    queue_handler, listener = setup_log_queue_handler()
    listener.start()

    try:
        init_db()
        logger.info("Database tables ensured.")
    except Exception as e:
        logger.error(f"Database initialisation failed: {type(e).__name__}: {e}", exc_info=True)

    if settings.SEED_SAMPLE_DATA:
        db = SessionLocal()
        try:
            seed_service.seed_sample_problems(db)
        except Exception as e:
            logger.error(f"Seeding sample problems failed: {e}", exc_info=True)
        finally:
            db.close()

    backend = get_execution_backend()
    if await backend.is_available():
        logger.info(f"Execution backend {backend.name} is available.")
    else:
        logger.warning(f"Execution backend {backend.name} is NOT available; submissions will fail with INTERNAL_ERROR.")

    logger.info("Application startup complete. Ready to accept requests.")
    yield

    logger.info("Application shutdown sequence initiated...")
    teardown_log_queue_handler(queue_handler, listener)
    logger.info("Application shutdown complete.")


app = FastAPI(
    title="Online Judge",
    lifespan=lifespan
)

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
app.include_router(api_v1_router, prefix="/api/v1", tags=["API"])


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(f"HTTP Exception: {exc.status_code} for {request.url} - Detail: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled Internal Server Error for {request.url}:", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An internal server error occurred. Please try again later."}
    )


@app.get("/health")
async def health(backend: ExecutionBackend = Depends(get_backend)):
    available = await backend.is_available()
    return {
        "status": "ok" if available else "degraded",
        "executor": backend.name,
        "executor_available": available,
    }
