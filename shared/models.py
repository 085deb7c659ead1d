"""Pydantic data models for the assistant proxy.

These models define the shapes that cross the function boundary: the
caller's request body, the two Responses API payload variants, the decoded
upstream output and the serverless response envelope. All of them are
request-scoped values; nothing here is cached or shared between calls.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator


class AssistantRequest(BaseModel):
    """Body accepted by the assistant endpoint.

    Attributes:
        text: The user's message. Must be a non-empty string.
        asst: Optional assistant id requested by the caller. Anything that is
            not a string is ignored rather than rejected.
        temperature: Optional sampling temperature, passed upstream verbatim.
            Non-numeric values (booleans included) are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    text: StrictStr = Field(..., min_length=1)
    asst: Optional[str] = None
    temperature: Optional[Union[int, float]] = None

    @field_validator("asst", mode="before")
    @classmethod
    def _ignore_non_string_asst(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("temperature", mode="before")
    @classmethod
    def _ignore_non_numeric_temperature(cls, value: Any) -> Optional[Union[int, float]]:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return value


class InputText(BaseModel):
    type: Literal["input_text"] = "input_text"
    text: str


class UserTurn(BaseModel):
    """One user turn of the Responses API ``input`` list."""

    role: Literal["user"] = "user"
    content: List[InputText]

    @classmethod
    def from_text(cls, text: str) -> "UserTurn":
        return cls(content=[InputText(text=text)])


class ModelInvocation(BaseModel):
    """Payload for a plain model call (no assistant id resolved)."""

    kind: Literal["model"] = Field(default="model", exclude=True)
    model: str
    input: List[UserTurn]
    temperature: Union[int, float]


class AssistantInvocation(BaseModel):
    """Payload for an assistant-scoped call.

    ``model`` is still sent: the Responses API may require it even when an
    ``assistant_id`` is present.
    """

    kind: Literal["assistant"] = Field(default="assistant", exclude=True)
    model: str
    input: List[UserTurn]
    temperature: Union[int, float]
    assistant_id: str


UpstreamPayload = Annotated[
    Union[ModelInvocation, AssistantInvocation], Field(discriminator="kind")
]


class ContentItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: Optional[str] = None

    @field_validator("text", mode="before")
    @classmethod
    def _only_string_text(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None


class OutputPart(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: Optional[List[ContentItem]] = None

    @field_validator("content", mode="before")
    @classmethod
    def _only_list_content(cls, value: Any) -> Optional[List[Any]]:
        if not isinstance(value, list):
            return None
        return [item if isinstance(item, dict) else {} for item in value]


class TextOutput(BaseModel):
    """Upstream body carrying a top-level ``output_text`` string."""

    kind: Literal["text"] = "text"
    output_text: str

    @property
    def text(self) -> str:
        return self.output_text


class StructuredOutput(BaseModel):
    """Upstream body carrying an ``output`` list of parts with content items."""

    kind: Literal["structured"] = "structured"
    output: List[OutputPart]

    @field_validator("output", mode="before")
    @classmethod
    def _parts_as_objects(cls, value: Any) -> List[Any]:
        return [part if isinstance(part, dict) else {} for part in value or []]

    @property
    def text(self) -> str:
        # Separator only once something has been accumulated
        out = ""
        for part in self.output:
            for item in part.content or []:
                if item.text is not None:
                    out += ("\n" if out else "") + item.text
        return out


class EmptyOutput(BaseModel):
    """Upstream body with no recognisable output (including non-JSON bodies)."""

    kind: Literal["empty"] = "empty"

    @property
    def text(self) -> str:
        return ""


UpstreamOutput = Annotated[
    Union[TextOutput, StructuredOutput, EmptyOutput], Field(discriminator="kind")
]


class FunctionResponse(BaseModel):
    """Serverless response envelope (Netlify / API Gateway proxy shape)."""

    statusCode: int
    headers: Dict[str, str]
    body: Optional[str] = None

    def to_event(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
