"""Chat endpoint models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ChatRequest(BaseModel):
    """Body of ``POST /api/chat``."""

    msg: str = Field(..., min_length=1, description="User message, required and non-empty")
    token: Optional[str] = Field(
        default=None, description="Session token returned by a previous turn"
    )

    model_config = ConfigDict(strict=True)


class ChatAIMetadata(BaseModel):
    """Best-effort usage details reported by the agent."""

    model: Optional[str] = None
    tokens: Optional[int] = Field(default=None, ge=0)
    processing_time: Optional[float] = Field(default=None, ge=0, description="Milliseconds")
    conversation_id: Optional[str] = None

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, protected_namespaces=()
    )


class ChatTurnResult(BaseModel):
    """Outcome of one chat turn."""

    message: str = Field(..., description="Agent reply text")
    token: str = Field(..., min_length=1, description="Session token, possibly newly issued")
    response_id: str = Field(..., min_length=1, description="Continuation handle for this turn")
    is_new_token: bool = Field(..., description="Whether the token was issued by this turn")
    remaining_requests: int = Field(..., ge=0, description="Requests left for the caller's IP today")
    ai_metadata: Optional[ChatAIMetadata] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatResponse(BaseModel):
    """Success envelope returned by ``POST /api/chat``."""

    success: bool = True
    data: ChatTurnResult
