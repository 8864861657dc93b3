import logging

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from openai import OpenAI

from ..core.config import Settings, get_settings
from ..core.errors import ResearchError
from ..schemas.research import ErrorResponse, SearchRequest, SearchResponse
from ..services.llm import get_llm_client
from ..services.pipeline import run_search

router = APIRouter(tags=["search"])

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Failed to process search request"


def get_completion_client(settings: Settings = Depends(get_settings)) -> OpenAI | None:
    """
    Shared completion client, or None when no key is configured so the
    pipeline can reject the request with a configuration error.
    """
    if not settings.llm_configured:
        return None
    return get_llm_client()


def _error_response(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _research_error_response(exc: ResearchError) -> JSONResponse:
    details = exc.message if exc.message != exc.error else None
    return _error_response(exc.status_code, exc.error, details)


@router.get("/health")
def health(settings: Settings = Depends(get_settings)):
    return {
        "status": "ok",
        "service": "research_assistant",
        "llm_configured": settings.llm_configured,
    }


@router.post(
    "/search",
    response_model=SearchResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def search(
    payload: SearchRequest | None = Body(default=None),
    settings: Settings = Depends(get_settings),
    llm_client: OpenAI | None = Depends(get_completion_client),
):
    query = payload.query if payload else None
    try:
        return await run_search(query, settings, llm_client=llm_client)
    except ResearchError as e:
        if e.status_code >= 500:
            logger.error("Search request failed: %s", e.message, extra={"step": "search"})
        return _research_error_response(e)
    except Exception as e:
        logger.exception("Search request failed: %s", e, extra={"step": "search"})
        return _error_response(500, GENERIC_ERROR, str(e))
