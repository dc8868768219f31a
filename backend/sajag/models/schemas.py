"""
Pydantic schemas for requests, results and UI state.

These define the shape of data that flows through the orchestration layer
and in and out of the API.

FLOW OVERVIEW:
==============
1. UI sends AnalyzeRequest / SummarizeRequest (or nothing, for a fact)
2. Coordinator builds an OperationRequest for the Gemini endpoint
3. Runner returns an outcome; structured results become AnalysisResult
4. Coordinator keeps a CoordinatorState the UI renders from
5. API returns OperationStateResponse snapshots
"""

import json
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# =============================================================================
# OUTBOUND REQUEST SCHEMAS
# =============================================================================
#
# WHEN USED:
# - ExpectedShape: Tells the interpreter how to read the response text
# - OperationRequest: Built by prompt builders, sent (possibly repeatedly) by the runner
#

class ExpectedShape(str, Enum):
    """What the primary response text is supposed to contain."""
    STRUCTURED_JSON = "structured_json"
    PLAIN_TEXT = "plain_text"


class OperationRequest(BaseModel):
    """
    One request to the language-model endpoint.

    USED BY: GeminiClient.send, RetryingOperationRunner.run
    WHEN: Built once per user action; every retry resends the same instance

    Built with `body=` (a dict). The body is serialized on construction, so
    neither the caller's dict nor anything read back from `.body` can change
    what gets sent.
    """
    model_config = ConfigDict(frozen=True)

    endpoint_path: str = Field(description="Path relative to the API base, e.g. 'models/x:generateContent'")
    body_json: str = Field(description="JSON request body, serialized once")
    expected_shape: ExpectedShape

    @model_validator(mode="before")
    @classmethod
    def _serialize_body(cls, data: Any) -> Any:
        if isinstance(data, dict) and "body" in data:
            data = dict(data)
            data["body_json"] = json.dumps(data.pop("body"))
        return data

    @property
    def body(self) -> dict[str, Any]:
        """A fresh copy of the request body."""
        return json.loads(self.body_json)


# =============================================================================
# RESULT SCHEMAS
# =============================================================================
#
# WHEN USED:
# - AnalysisResult: Parsed from the structured response of the analyze action
# - AnalysisReport: AnalysisResult plus presentation hints, returned by the API
#

class AnalysisResult(BaseModel):
    """
    Credibility assessment returned by the model.

    USED BY: ResponseInterpreter (validation), analyze coordinator (result slot)

    Wire names are camelCase (that's what the responseSchema asks the model for).
    Both fields are required. The 0-100 range of credibilityScore is NOT
    enforced here: out-of-range values pass through as-is and are only
    logged by the interpreter.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    credibility_score: float = Field(
        alias="credibilityScore",
        allow_inf_nan=False,
        description="0 = completely false or misleading, 100 = perfectly credible",
    )
    breakdown: str = Field(
        strict=True,
        min_length=1,
        description="Plain-language explanation of the score",
    )

    @field_validator("credibility_score", mode="before")
    @classmethod
    def _must_be_number(cls, value: Any) -> Any:
        # No coercion: "85" or True are schema violations, not scores
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("credibilityScore must be a number")
        if isinstance(value, int):
            try:
                float(value)
            except OverflowError:
                raise ValueError("credibilityScore is out of float range")
        return value


class AnalysisReport(AnalysisResult):
    """
    AnalysisResult with the presentation hints the UI renders.

    USED BY: POST /api/analyze, GET /api/state
    """
    label: str = Field(description="e.g. 'Highly Credible', 'Potentially Misleading'")
    band: str = Field(description="Colour band for the score bar: green, yellow or red")
    bar_width: float = Field(alias="barWidth", description="Score clamped to 0-100 for the bar")


# =============================================================================
# UI STATE SCHEMAS
# =============================================================================

class CoordinatorState(BaseModel):
    """
    UI-visible state of one action.

    USED BY: OperationCoordinator (owns and mutates it)

    LIFECYCLE:
    Idle (nothing set) → Busy (busy=True, result/error cleared)
    → Idle with result OR Idle with error. Never both.
    """
    busy: bool = False
    result: Optional[Any] = None
    error: Optional[str] = None


# =============================================================================
# API REQUEST / RESPONSE SCHEMAS
# =============================================================================
#
# WHEN USED:
# - AnalyzeRequest: POST /api/analyze
# - SummarizeRequest: POST /api/summarize
# - OperationStateResponse: every action endpoint
# - StateOverview: GET /api/state
#
# Blank text is allowed through validation on purpose: the coordinator
# reports it as UI state, the same way it reports a failed call.
#

class AnalyzeRequest(BaseModel):
    """
    Example:
        POST /api/analyze
        {"text": "A new study reveals that eating chocolate every day can extend your lifespan by 10 years."}
    """
    text: str = Field(default="", description="The text to assess")


class SummarizeRequest(BaseModel):
    text: str = Field(default="", description="The text to summarize")


class OperationStateResponse(BaseModel):
    """Snapshot of one action's state as the UI sees it."""
    action: str
    busy: bool
    result: Optional[AnalysisReport | str] = None
    error: Optional[str] = None


class StateOverview(BaseModel):
    analyze: OperationStateResponse
    summarize: OperationStateResponse
    fact: OperationStateResponse
