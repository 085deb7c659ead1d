"""OpenAI Responses API client for the assistant function.

Builds the single-turn payload, performs the one POST per invocation and
decodes whatever comes back into an ``UpstreamOutput``. No retries and no
streaming; a failed call is final for that invocation.
"""

from __future__ import annotations

from typing import Any, Optional, Union

import httpx

from shared.models import (
    AssistantInvocation,
    AssistantRequest,
    EmptyOutput,
    ModelInvocation,
    StructuredOutput,
    TextOutput,
    UpstreamOutput,
    UpstreamPayload,
    UserTurn,
)
from shared.settings import Settings
from shared.tracing import get_logger, span

from .errors import UpstreamError

ASSISTANT_ID_PREFIX = "asst_"

logger = get_logger("assistant.upstream")


def resolve_assistant_id(requested: Any, configured: Any) -> str:
    """Pick the assistant id to send, or "" for a plain model call.

    The caller's value wins when it looks like an assistant id; otherwise the
    configured one is used under the same rule.
    """
    for candidate in (requested, configured):
        if isinstance(candidate, str) and candidate.startswith(ASSISTANT_ID_PREFIX):
            return candidate
    return ""


def resolve_temperature(
    requested: Optional[Union[int, float]], default: float
) -> Union[int, float]:
    return requested if requested is not None else default


def build_payload(request: AssistantRequest, settings: Settings) -> UpstreamPayload:
    """Return the Responses API payload for one user turn."""
    assistant_id = resolve_assistant_id(request.asst, settings.assistant_id)
    common = dict(
        model=settings.resolved_model,
        input=[UserTurn.from_text(request.text)],
        temperature=resolve_temperature(
            request.temperature, settings.default_temperature
        ),
    )
    if assistant_id:
        return AssistantInvocation(assistant_id=assistant_id, **common)
    return ModelInvocation(**common)


def _json_or_empty(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {}


def decode_output(data: Any) -> UpstreamOutput:
    """Classify a decoded upstream body.

    ``output_text`` (a string) takes precedence over ``output`` (a list);
    anything else, including non-object bodies, is ``EmptyOutput``.
    """
    if not isinstance(data, dict):
        return EmptyOutput()
    if isinstance(data.get("output_text"), str):
        return TextOutput(output_text=data["output_text"])
    if isinstance(data.get("output"), list):
        return StructuredOutput(output=data["output"])
    return EmptyOutput()


async def call_responses_api(
    payload: UpstreamPayload,
    *,
    api_key: str,
    url: str,
    client: Optional[httpx.AsyncClient] = None,
) -> Any:
    """POST ``payload`` and return the decoded JSON body.

    Raises:
        UpstreamError: the API answered with a non-2xx status.
        httpx.HTTPError: the request could not be completed.
    """
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    body = payload.model_dump(mode="json")
    with span(
        "openai.responses",
        model=payload.model,
        assistant=isinstance(payload, AssistantInvocation),
    ):
        if client is None:
            # The platform's request timeout bounds the call
            async with httpx.AsyncClient(timeout=None) as owned:
                r = await owned.post(url, json=body, headers=headers)
        else:
            r = await client.post(url, json=body, headers=headers)

    data = _json_or_empty(r)
    if not r.is_success:
        logger.error("OpenAI error %s %s", r.status_code, data)
        raise UpstreamError(r.status_code, data)
    return data
