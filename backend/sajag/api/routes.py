"""
API Routes — What the browser UI talks to.

ENDPOINTS:
- POST /api/analyze    → Credibility assessment of the given text
- POST /api/summarize  → Short summary of the given text
- POST /api/fact       → A "Did you know?" fact about misinformation
- GET  /api/state      → Current state of all three actions

Every action endpoint returns the action's state after the call:
    {"action": "analyze", "busy": false, "result": {...}, "error": null}

Blank input and failed calls are NOT HTTP errors. They come back as
state with `error` set, exactly what the UI renders. The only HTTP error
is 409, when the same action is already running.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from sajag.models.schemas import (
    AnalysisResult,
    AnalyzeRequest,
    OperationStateResponse,
    StateOverview,
    SummarizeRequest,
)
from sajag.services.coordinator import (
    Coordinators,
    OperationCoordinator,
    OperationInProgressError,
)
from sajag.services.credibility import build_report

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


def get_coordinators(request: Request) -> Coordinators:
    """Dependency that returns the coordinators created at startup."""
    return request.app.state.coordinators


def to_response(coordinator: OperationCoordinator) -> OperationStateResponse:
    state = coordinator.snapshot()
    result = state.result
    if isinstance(result, AnalysisResult):
        result = build_report(result)

    return OperationStateResponse(
        action=coordinator.name,
        busy=state.busy,
        result=result,
        error=state.error,
    )


async def _invoke(coordinator: OperationCoordinator, text: str = "") -> OperationStateResponse:
    try:
        await coordinator.invoke(text)
    except OperationInProgressError:
        raise HTTPException(
            status_code=409,
            detail=f"A {coordinator.name} request is already in progress.",
        )
    return to_response(coordinator)


# =============================================================================
# ACTIONS
# =============================================================================

@router.post("/analyze", response_model=OperationStateResponse)
async def analyze(
    request: AnalyzeRequest,
    coordinators: Coordinators = Depends(get_coordinators),
) -> OperationStateResponse:
    """
    Assess the credibility of a piece of text.

    Example:
        POST /api/analyze
        {"text": "Chocolate extends lifespan by 10 years"}

        Returns {"action": "analyze", "busy": false,
                 "result": {"credibilityScore": 15, "breakdown": "...",
                            "label": "Highly Misleading", "band": "red", "barWidth": 15.0},
                 "error": null}
    """
    logger.info(f"Analyze requested ({len(request.text)} chars)")
    return await _invoke(coordinators.analyze, request.text)


@router.post("/summarize", response_model=OperationStateResponse)
async def summarize(
    request: SummarizeRequest,
    coordinators: Coordinators = Depends(get_coordinators),
) -> OperationStateResponse:
    logger.info(f"Summary requested ({len(request.text)} chars)")
    return await _invoke(coordinators.summarize, request.text)


@router.post("/fact", response_model=OperationStateResponse)
async def fact(
    coordinators: Coordinators = Depends(get_coordinators),
) -> OperationStateResponse:
    """Get a misinformation fact. Takes no input."""
    return await _invoke(coordinators.fact)


# =============================================================================
# STATE
# =============================================================================

@router.get("/state", response_model=StateOverview)
async def state(
    coordinators: Coordinators = Depends(get_coordinators),
) -> StateOverview:
    """
    Current state of every action, useful for polling while one is busy.

    Example:
        GET /api/state
        Returns {"analyze": {...}, "summarize": {...}, "fact": {...}}
    """
    return StateOverview(
        analyze=to_response(coordinators.analyze),
        summarize=to_response(coordinators.summarize),
        fact=to_response(coordinators.fact),
    )
