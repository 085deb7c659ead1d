"""HTTP adapter for the assistant function.

The deployed artefact is the serverless ``handler`` in ``function.py``.
This FastAPI app wraps the same ``handle`` pipeline so the endpoint can be
run locally or in a container, keeping the exact status codes, headers and
bodies of the function.

Endpoints:
- ``/assistant`` and ``/.netlify/functions/assistant`` (any method):
  ``OPTIONS`` preflight, ``POST`` to ask, everything else is 405.
- GET `/` and `/health`: liveness.
"""

from __future__ import annotations

from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from shared.settings import Settings
from shared.tracing import get_logger, install_fastapi_tracing

from .errors import GENERIC_ERROR_MESSAGE
from .handler import CORS_HEADERS, handle

ASSISTANT_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

app = FastAPI(title="Assistant Proxy", version="0.1.0")
install_fastapi_tracing(app, service_name="assistant")

logger = get_logger("assistant.http")


# ---------- Global safety net: never crash the worker ----------
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for any unhandled exception; return the generic 500 body."""
    logger.error("Unhandled exception on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"error": GENERIC_ERROR_MESSAGE},
        headers=CORS_HEADERS,
    )


# ---------------------------------------------------------------


def get_settings() -> Settings:
    """Read configuration per request, like the function does per invocation."""
    return Settings()


@app.get("/")
def _root():
    return {"status": "ok", "service": "assistant"}


@app.get("/health")
def _health():
    return {"status": "ok"}


@app.api_route("/assistant", methods=ASSISTANT_METHODS)
@app.api_route("/.netlify/functions/assistant", methods=ASSISTANT_METHODS)
async def assistant(request: Request, settings: Settings = Depends(get_settings)):
    raw = await request.body()
    event = {
        "httpMethod": request.method,
        "body": raw.decode("utf-8", errors="replace") if raw else None,
    }
    result = await handle(event, settings)
    return Response(
        content=result.get("body", ""),
        status_code=result["statusCode"],
        headers=result["headers"],
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.assistant.app.main:app",
        host="0.0.0.0",
        port=get_settings().port,
    )
