"""Request gateway for the assistant function.

``handle`` takes a serverless proxy event (``httpMethod`` + JSON ``body``)
and returns the response envelope. Per invocation the flow is strictly
linear:

- CORS preflight and method check.
- Body parse and validation (``text`` is required).
- API key check, before any network call.
- Payload construction and the single Responses API call.
- Output extraction and citation cleanup.

Error handling:
- Upstream non-2xx answers are passed through with their status and body.
- Input and configuration problems map to their own status and message.
- Anything else becomes a generic 500; details go to the operator log only.
"""

from __future__ import annotations

import base64
import json
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from shared.models import AssistantRequest, FunctionResponse
from shared.settings import Settings
from shared.tracing import get_logger, log_event

from .citations import sanitize_citations
from .errors import (
    GENERIC_ERROR_MESSAGE,
    AssistantProxyError,
    ClientInputError,
    ServerConfigurationError,
)
from .upstream import build_payload, call_responses_api, decode_output

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

logger = get_logger("assistant.handler")


def _json_response(status_code: int, body: Any) -> Dict[str, Any]:
    return FunctionResponse(
        statusCode=status_code,
        headers={**CORS_HEADERS, "Content-Type": "application/json"},
        body=json.dumps(body, ensure_ascii=False),
    ).to_event()


def _event_method(event: Dict[str, Any]) -> str:
    method = event.get("httpMethod")
    if method is None:
        # API Gateway HTTP API / function URL events
        method = ((event.get("requestContext") or {}).get("http") or {}).get("method")
    return method or ""


def _event_body(event: Dict[str, Any]) -> str:
    body = event.get("body") or ""
    if body and event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    return body


def parse_request(raw_body: str) -> AssistantRequest:
    """Decode the JSON body into an ``AssistantRequest``.

    Raises:
        ValueError: the body is not valid JSON.
        ClientInputError: ``text`` is missing, empty or not a string.
    """
    data = json.loads(raw_body or "{}")
    if not isinstance(data, dict):
        raise ClientInputError()
    try:
        return AssistantRequest.model_validate(data)
    except ValidationError:
        raise ClientInputError() from None


def require_api_key(settings: Settings) -> str:
    if not settings.openai_api_key:
        raise ServerConfigurationError()
    return settings.openai_api_key


async def handle(
    event: Dict[str, Any],
    settings: Settings,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    """Handle one invocation and return the serverless response dict."""
    method = _event_method(event)
    if method == "OPTIONS":
        return FunctionResponse(statusCode=204, headers=dict(CORS_HEADERS)).to_event()
    if method != "POST":
        return FunctionResponse(
            statusCode=405, headers=dict(CORS_HEADERS), body="Method Not Allowed"
        ).to_event()

    try:
        request = parse_request(_event_body(event))
        api_key = require_api_key(settings)
        payload = build_payload(request, settings)

        data = await call_responses_api(
            payload, api_key=api_key, url=settings.openai_url, client=client
        )
        output = decode_output(data)
        text = sanitize_citations(output.text)
        log_event(
            "Response",
            payload={"model": payload.model, "kind": output.kind, "chars": len(text)},
        )
        return _json_response(200, {"text": text})
    except AssistantProxyError as e:
        return _json_response(e.status_code, e.to_body())
    except Exception as e:
        logger.error("Function exception %s", e, exc_info=True)
        return _json_response(500, {"error": GENERIC_ERROR_MESSAGE})
