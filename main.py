"""Main FastAPI application"""
import os
import logging
import logging.config
from datetime import date
from functools import partial
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def build_logging_config(level: str) -> dict:
    """Routes uvicorn's loggers and every application logger through one RichHandler."""
    server_logger = {"handlers": ["rich"], "level": "INFO", "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": "%(name)s - %(message)s"},
        },
        "handlers": {
            "rich": {
                "class": "rich.logging.RichHandler",
                "formatter": "plain",
                "rich_tracebacks": True,
                "show_path": False,
                "log_time_format": "%Y-%m-%d %H:%M:%S",
                "markup": False,
            },
        },
        "loggers": {
            **{name: dict(server_logger) for name in ("uvicorn", "uvicorn.error", "uvicorn.access")},
            "": {"handlers": ["rich"], "level": level, "propagate": False},
        },
    }


logging.config.dictConfig(build_logging_config(LOG_LEVEL))
logger = logging.getLogger(__name__)

# Imported after logging is configured so module loggers pick up the handler
from routes import router as api_router
from services.ai_fallback import build_classifier, build_summarizer
from services.assistant_service import build_chat_call
from services.mock_data import generate_snapshot
from services.store import FinanceStore
from utils.openai_agent import is_ai_configured
from utils.rate_limit import limiter

MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", str(1024 * 1024)))
UPLOAD_ENDPOINT_PATH = "/api/transactions/import"
MOCK_DATA_SEED = os.getenv("MOCK_DATA_SEED")

# Store and AI collaborators shared by every request
app_state = {}


def init_app_state(store=None, classifier=None, summarizer=None, chat_call=None, use_remote=None):
    """Fills app_state; anything not passed in is built from the environment."""
    if use_remote is None:
        use_remote = is_ai_configured()
    seed = int(MOCK_DATA_SEED) if MOCK_DATA_SEED else None
    app_state["store"] = store or FinanceStore(factory=partial(generate_snapshot, seed=seed))
    app_state["classifier"] = classifier or build_classifier(use_remote)
    app_state["summarizer"] = summarizer or build_summarizer(use_remote)
    app_state["chat_call"] = chat_call if chat_call is not None else build_chat_call(use_remote)
    app_state["ai_enabled"] = use_remote
    return app_state


class CsvUploadLimitMiddleware(BaseHTTPMiddleware):
    """Rejects CSV imports whose declared Content-Length is above MAX_UPLOAD_SIZE."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path != UPLOAD_ENDPOINT_PATH:
            return await call_next(request)

        declared = request.headers.get("content-length")
        if declared is None:
            return await call_next(request)
        if not declared.isdigit():
            logger.warning(f"CSV import rejected: malformed Content-Length {declared!r}.")
            return Response("Invalid Content-Length header.", status_code=400)
        if int(declared) > MAX_UPLOAD_SIZE:
            logger.warning(f"CSV import rejected: {declared} bytes is over the {MAX_UPLOAD_SIZE} byte limit.")
            limit_mb = MAX_UPLOAD_SIZE / (1024 * 1024)
            return Response(f"CSV files are limited to {limit_mb:.1f} MB.", status_code=413)
        return await call_next(request)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if "store" not in app_state:
        init_app_state()
    store = app_state["store"]
    logger.info(f"Store seeded with {len(store.transactions)} transactions (as of {date.today().isoformat()}).")
    logger.info(f"AI services enabled: {app_state['ai_enabled']}")

    yield

    logger.info("Shutting down; in-memory data is discarded.")
    app_state.clear()


app = FastAPI(
    title="Finance Dashboard API",
    description="API for tracking transactions, budgets and savings goals with AI-assisted categorization and insights.",
    version="0.1.0",
    lifespan=lifespan
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CsvUploadLimitMiddleware)

app.include_router(api_router, prefix="/api", tags=["finance"])


@app.middleware("http")
async def attach_app_state(request: Request, call_next):
    """Exposes the store and AI collaborators on request.state for the route dependencies."""
    request.state.store = app_state.get("store")
    request.state.classifier = app_state.get("classifier")
    request.state.summarizer = app_state.get("summarizer")
    request.state.chat_call = app_state.get("chat_call")
    request.state.ai_enabled = app_state.get("ai_enabled", False)
    return await call_next(request)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
