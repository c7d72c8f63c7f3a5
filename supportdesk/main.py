"""
FastAPI application — the SupportDesk entry point.
Exposes the streaming relay at POST /api/chat and serves the browser chat
page at / (and /ui).
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, JSONResponse, StreamingResponse

from supportdesk import __version__
from supportdesk.config import get_config, get_system_prompt, setup_logging
from supportdesk.errors import InvalidConversationError, ProviderError
from supportdesk.models import parse_messages
from supportdesk.providers import make_provider
from supportdesk.relay import Relay

logger = logging.getLogger(__name__)

_WEB_DIR = Path(__file__).parent / "web"

# ---------------------------------------------------------------------------
# Globals — initialized at startup
# ---------------------------------------------------------------------------
relay: Relay | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    global relay

    cfg = get_config()
    setup_logging(cfg)

    provider_cfg = cfg.get("provider", {})
    provider = make_provider(provider_cfg)
    relay = Relay(
        provider=provider,
        system_prompt=get_system_prompt(cfg),
        model=provider_cfg.get("model", "gpt-4o-mini"),
    )

    server_cfg = cfg.get("server", {})
    logger.info(
        "SupportDesk started — listening on %s:%s, provider %s (%s)",
        server_cfg.get("host", "0.0.0.0"),
        server_cfg.get("port", 8000),
        provider.url,
        relay.model,
    )

    yield

    logger.info("SupportDesk shutting down")


app = FastAPI(
    title="SupportDesk",
    description="Streaming customer-support chat relay",
    version=__version__,
    lifespan=lifespan,
)


@app.post("/api/chat")
async def chat(request: Request):
    """
    Relay endpoint. Body is the conversation so far as a JSON array of
    {role, content}; the reply streams back as raw UTF-8 text.
    """
    try:
        payload = await request.json()
    except ValueError:
        return JSONResponse({"error": "Request body is not valid JSON"}, status_code=422)

    try:
        history = parse_messages(payload)
    except InvalidConversationError as e:
        return JSONResponse({"error": str(e)}, status_code=422)

    try:
        stream = await relay.open_stream(history)
    except ProviderError as e:
        logger.warning("Provider failed before streaming: %s", e)
        return JSONResponse({"error": str(e)}, status_code=502)

    return StreamingResponse(
        stream,
        media_type="text/plain; charset=utf-8",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )


@app.get("/health")
async def health():
    """Health check. Reports whether the completion provider answers."""
    reachable = await relay.provider.health_check() if relay else False
    return JSONResponse({
        "status": "ok" if reachable else "degraded",
        "provider_reachable": reachable,
        "version": __version__,
        "provider": relay.provider.name if relay else "",
        "model": relay.model if relay else "",
    })


# ---------------------------------------------------------------------------
# Web UI — browser chat page
# ---------------------------------------------------------------------------

@app.get("/")
async def root():
    """Serve the web UI."""
    return FileResponse(_WEB_DIR / "index.html", media_type="text/html")


@app.get("/ui")
async def ui():
    """Alias for root."""
    return FileResponse(_WEB_DIR / "index.html", media_type="text/html")
