"""
Eliza - AI chat gateway
FastAPI backend with OpenAI completions and Tavily web search
"""

from contextlib import asynccontextmanager
import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import runtime_config
from errors import FatalStartup
from logging_config import setup_logging
from routers import chat
from routers.chat_orchestration import get_orchestrator
from services.credentials import resolve_credentials

setup_logging(runtime_config.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown events"""
    # Startup
    orchestrator = get_orchestrator()
    if not orchestrator.is_ready:
        credentials = resolve_credentials(runtime_config)
        orchestrator.initialize(credentials)

    logger.info(f"Eliza listening on {runtime_config.host}:{runtime_config.port}")
    logger.info(f"Allowed origins: {', '.join(runtime_config.allowed_origins)}")

    yield

    # Shutdown
    logger.info("Eliza signing off")


app = FastAPI(
    title="Eliza",
    description="AI chat assistant with web search",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS - same allow-list as the WebSocket origin check
app.add_middleware(
    CORSMiddleware,
    allow_origins=runtime_config.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Chat router is mounted without a prefix so the WebSocket is at /
app.include_router(chat.router, tags=["chat"])


@app.get("/health")
async def health():
    """Health check - orchestrator state and live WebSocket sessions."""
    orchestrator = get_orchestrator()
    return {
        "status": "ok" if orchestrator.is_ready else "starting",
        "orchestrator": orchestrator.state.value,
        "sessions": chat.active_session_count(),
    }


def run() -> None:
    """Console entry point: bootstrap credentials, then serve."""
    import uvicorn

    try:
        credentials = resolve_credentials(runtime_config)
    except FatalStartup as e:
        logger.error(f"Startup failed: {e}")
        sys.exit(1)

    get_orchestrator().initialize(credentials)

    try:
        uvicorn.run(app, host=runtime_config.host, port=runtime_config.port, log_config=None)
    except OSError as e:
        error = FatalStartup("Could not bind listen socket", details=str(e), port=runtime_config.port)
        logger.error(f"Startup failed: {error}")
        sys.exit(1)


if __name__ == "__main__":
    run()
