"""Agent boundary models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AgentMetadata(BaseModel):
    """Usage details an agent may report alongside its reply."""

    model: Optional[str] = Field(default=None, description="Model identifier")
    tokens: Optional[int] = Field(default=None, ge=0, description="Total tokens used")
    processing_time: Optional[float] = Field(
        default=None, ge=0, description="Agent call latency in milliseconds"
    )

    model_config = ConfigDict(protected_namespaces=())


class AgentReply(BaseModel):
    """Generated text plus the handle that continues the conversation."""

    response: str = Field(..., min_length=1, description="Generated reply text")
    conversation_id: str = Field(..., min_length=1, description="New continuation handle")
    metadata: Optional[AgentMetadata] = None
