import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api import analyze
from app.config import settings
from app.logging_config import configure_logging, new_request_id

logger = logging.getLogger(__name__)


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    docs_url="/docs" if settings.DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(analyze.router, prefix="/v1/analyze", tags=["analyze"])


@app.middleware("http")
async def assign_request_id(request: Request, call_next):
    rid = new_request_id()
    response = await call_next(request)
    response.headers["X-Request-ID"] = rid
    return response


@app.get("/health")
async def health():
    return {"status": "healthy"}


@app.on_event("startup")
def setup_logging() -> None:
    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    if not settings.vision_configured:
        logger.warning("OPENAI_API_KEY is not set; /v1/analyze will answer 500 until it is")
