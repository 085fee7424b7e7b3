from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from elpris_chat.config.logging import get_logger
from elpris_chat.llm.models import ChatFailure
from elpris_chat.llm.orchestrator import ChatOrchestrator

from .schemas import ChatRequest, ChatResponse, ErrorResponse, HealthResponse

router = APIRouter()

logger = get_logger(__name__)


def get_orchestrator(request: Request) -> ChatOrchestrator:
    return request.app.state.orchestrator


@router.get("/healthz", response_model=HealthResponse)
def healthcheck() -> HealthResponse:
    return HealthResponse()


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={500: {"model": ErrorResponse}, 502: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def chat(
    payload: ChatRequest | None = None,
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
):
    message = (payload.message if payload else None) or ""
    try:
        result = await orchestrator.handle_turn(message)
    except ChatFailure as e:
        logger.warning(f"Chat turn failed with {e.status_code}: {e}")
        return JSONResponse(status_code=e.status_code, content=ErrorResponse(error=str(e)).model_dump())

    return ChatResponse(reply=result.reply)


def _describe(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body") or "body"
    return f"{location}: {error.get('msg', 'invalid')}"


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies in the same ``{error}`` shape as failed turns."""
    problems = "; ".join(_describe(error) for error in exc.errors())
    logger.warning(f"Rejected {request.method} {request.url.path}: {problems}")
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(error=f"Invalid request: {problems}").model_dump(),
    )
