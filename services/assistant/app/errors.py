"""Error taxonomy for the assistant function.

Every exception here carries the HTTP status and the caller-facing body.
Anything else raised while handling a request is flattened into the generic
500 by the handler, with the detail kept in the operator log only.
"""

from __future__ import annotations

from typing import Any

GENERIC_ERROR_MESSAGE = "Error procesando la solicitud."
MISSING_TEXT_MESSAGE = "Falta 'text' en el body."
MISSING_API_KEY_MESSAGE = "OPENAI_API_KEY no configurada."


class AssistantProxyError(Exception):
    status_code: int = 500
    message: str = GENERIC_ERROR_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_body(self) -> Any:
        return {"error": self.message}


class ClientInputError(AssistantProxyError):
    """The request body lacks a usable ``text``."""

    status_code = 400
    message = MISSING_TEXT_MESSAGE


class ServerConfigurationError(AssistantProxyError):
    """A required credential is not configured."""

    status_code = 500
    message = MISSING_API_KEY_MESSAGE


class UpstreamError(AssistantProxyError):
    """The Responses API answered with a non-success status.

    The upstream status and decoded body are relayed to the caller as-is.
    """

    def __init__(self, status_code: int, body: Any) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"upstream returned {status_code}")

    def to_body(self) -> Any:
        return self.body
