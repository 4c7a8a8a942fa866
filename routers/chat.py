"""Chat router: the only quota-gated endpoint."""

from fastapi import APIRouter, Depends, Request

from models import ChatRequest, ChatResponse
from services import RateLimiter, SessionCoordinator
from utils import UNKNOWN_IP, get_logger
from .deps import get_rate_limiter, get_session_coordinator

router = APIRouter(prefix="/api", tags=["chat"])
logger = get_logger(__name__)


def _client_ip(request: Request) -> str:
    return getattr(request.state, "client_ip", None) or UNKNOWN_IP


async def admit_chat_request(
    request: Request,
    payload: ChatRequest,
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> ChatRequest:
    """Consume one unit of the caller's quota for a well-formed chat request.

    FastAPI validates ``payload`` before calling this, so a malformed body is
    rejected with 400 without touching the counter.
    """
    await limiter.check_and_consume(_client_ip(request))
    return payload


@router.post("/chat", response_model=ChatResponse, response_model_by_alias=True)
async def chat(
    request: Request,
    payload: ChatRequest = Depends(admit_chat_request),
    coordinator: SessionCoordinator = Depends(get_session_coordinator),
) -> ChatResponse:
    """Relay one message to the agent and return its reply."""
    result = await coordinator.process_turn(
        payload.msg,
        payload.token,
        _client_ip(request),
        request_id=getattr(request.state, "correlation_id", None),
    )
    return ChatResponse(data=result)
