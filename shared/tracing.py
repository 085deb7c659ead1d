"""Logging and tracing utilities with optional Langfuse integration.

By default spans are no-ops. If `LANGFUSE_ENABLED=true` and the `langfuse`
Python SDK is installed and configured via environment variables, spans
are forwarded to Langfuse. Errors in tracing never affect request
handling; we fail-soft to a no-op.

Operator diagnostics (upstream failures, unexpected exceptions) go through
the standard `logging` module via `get_logger`, which the serverless
platform collects from stderr.
"""

import contextvars
import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from shared.settings import Settings

_settings = Settings()

try:
    from langfuse import Langfuse  # type: ignore
except Exception:  # pragma: no cover - optional dependency
    Langfuse = None  # type: ignore

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a named logger; the root handler is configured once."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=_LOG_FORMAT)
    log = logging.getLogger(name)
    log.setLevel(_settings.log_level.upper())
    return log


def _now_ms() -> int:
    return int(time.time() * 1000)


class _Span:
    """A no-op span used when tracing is disabled."""

    def __init__(self, name: str, **kwargs: Any) -> None:
        self.name = name

    def __enter__(self) -> "_Span":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None


_current_trace = contextvars.ContextVar("assistant.current_trace", default=None)


class Tracer:
    """Tracer facade with pluggable backends (no-op or Langfuse)."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        settings = settings or _settings
        self._backend = settings.tracing_backend.lower()
        self._enabled = bool(settings.langfuse_enabled)
        self._trace_name = settings.trace_name

        self._client = None
        if self._enabled and self._backend == "langfuse" and Langfuse is not None:
            try:
                if settings.langfuse_public_key and settings.langfuse_secret_key:
                    self._client = Langfuse(
                        public_key=settings.langfuse_public_key,
                        secret_key=settings.langfuse_secret_key,
                        host=settings.langfuse_host or None,
                    )
            except Exception:
                self._client = None

    def start_trace(self, name: str, input: Optional[dict] = None):
        if self._client is None:
            return None
        try:
            tr = self._client.trace(name=name, input=input or {})
            _current_trace.set(tr)
            return tr
        except Exception:
            return None

    def end_trace(self, output: Optional[dict] = None):
        tr = _current_trace.get()
        if tr and hasattr(tr, "end"):
            try:
                tr.end(output=output or {})
            except Exception:
                pass
        _current_trace.set(None)

    def start_span(self, name: str, **kwargs: Any) -> _Span:
        if self._client is None:
            return _Span(name, **kwargs)
        tr = _current_trace.get()
        return _LangfuseSpan(
            self._client, name, parent_trace=tr, trace_name=self._trace_name, **kwargs
        )


tracer = Tracer()


def install_fastapi_tracing(app, service_name: str = "assistant") -> None:
    """Install middleware to auto-create a Langfuse trace per HTTP request."""
    from fastapi import Request

    @app.middleware("http")
    async def _trace_middleware(request: Request, call_next: Callable):
        # Method and path only; request bodies carry user text
        tracer.start_trace(
            name=f"{service_name} {request.method} {request.url.path}",
            input={"method": request.method, "path": request.url.path},
        )
        response = None
        try:
            with span("http.request"):
                response = await call_next(request)
            return response
        finally:
            tracer.end_trace(
                output={"status": getattr(response, "status_code", None)}
            )


@contextmanager
def span(name: str, **kwargs: Any) -> Iterator[_Span]:
    """Context manager wrapper around the tracer's start_span method.

    Usage:
        with span("openai.responses", model=model):
            # do work
    """
    s = tracer.start_span(name, **kwargs)
    s.__enter__()
    error = None
    try:
        yield s
    except BaseException as exc:
        error = exc
        raise
    finally:
        s.__exit__(type(error) if error else None, error, None)


class _LangfuseSpan(_Span):  # pragma: no cover - optional dependency
    def __init__(
        self,
        client: Any,
        name: str,
        parent_trace: Any | None = None,
        trace_name: str = "assistant-proxy",
        **kwargs: Any,
    ) -> None:
        super().__init__(name, **kwargs)
        self._client = client
        self._trace = parent_trace
        self._trace_name = trace_name
        self._span = None
        self._start_ms = _now_ms()
        self._kwargs = kwargs

    def __enter__(self) -> "_LangfuseSpan":
        try:
            if self._trace is None and hasattr(self._client, "trace"):
                self._trace = self._client.trace(name=self._trace_name)
            if self._trace is not None and hasattr(self._trace, "span"):
                self._span = self._trace.span(name=self.name, input=self._kwargs)
        except Exception:
            self._trace = None
            self._span = None
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            duration_ms = max(1, _now_ms() - self._start_ms)
            if self._span and hasattr(self._span, "end"):
                self._span.end(
                    output={
                        "error": str(exc) if exc else None,
                        "duration_ms": duration_ms,
                    }
                )
        except Exception:
            pass


def log_event(name: str, payload: Optional[dict] = None) -> None:
    """Emit a short-lived structured event span for observability.

    Args:
        name: Logical event name, e.g. "Upstream", "Response".
        payload: Arbitrary JSON-serializable dict with event data.
    """
    with span(f"event.{name}", **dict(payload or {})):
        pass
