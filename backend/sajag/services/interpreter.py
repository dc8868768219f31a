"""
Response Interpreter — Turns a raw Gemini body into an outcome.

WHAT THIS DOES:
Pulls the primary text out of the response and, for structured requests,
parses and validates it as an AnalysisResult.

RESPONSE PATH:
    candidates[0].content.parts[0].text

For plain-text requests that text IS the payload.
For structured requests it's a JSON string that gets parsed a second time.

FAILURES (never retried, the same body would fail the same way):
- MALFORMED_RESPONSE: the text path is missing, or the text is empty
- SCHEMA_MISMATCH: the text isn't JSON, or doesn't fit AnalysisResult

SCORE RANGE:
credibilityScore outside 0-100 is passed through unchanged. We only log it.
Clamping would hide a misbehaving model; rejecting would throw away an
otherwise valid breakdown. The UI clamps the bar width for display.

USAGE:
    interpreter = ResponseInterpreter()
    outcome = interpreter.interpret(ExpectedShape.STRUCTURED_JSON, body)
"""

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from sajag.models.outcomes import Failure, FailureReason, OperationOutcome, Success
from sajag.models.schemas import AnalysisResult, ExpectedShape

logger = logging.getLogger(__name__)

SCORE_MIN = 0
SCORE_MAX = 100


def extract_text(raw_body: Any) -> Optional[str]:
    """
    Walk candidates[0].content.parts[0].text.

    Returns None if any step is missing or has the wrong type,
    or if the text is empty.
    """
    try:
        text = raw_body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None

    if not isinstance(text, str) or not text:
        return None
    return text


class ResponseInterpreter:
    """Classifies a successful HTTP body as a usable payload or a failure."""

    def interpret(self, expected_shape: ExpectedShape, raw_body: Any) -> OperationOutcome:
        text = extract_text(raw_body)
        if text is None:
            logger.error("Response has no text at candidates[0].content.parts[0].text")
            return Failure(FailureReason.MALFORMED_RESPONSE, detail="missing response text")

        if expected_shape is ExpectedShape.PLAIN_TEXT:
            return Success(text)

        return self._parse_analysis(text)

    def _parse_analysis(self, text: str) -> OperationOutcome:
        try:
            data = json.loads(text)
        except ValueError as e:
            # JSONDecodeError, or an integer literal past the digit limit
            logger.error(f"Structured response is not valid JSON: {e}")
            return Failure(FailureReason.SCHEMA_MISMATCH, detail="response text is not JSON")

        try:
            result = AnalysisResult.model_validate(data)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) or "<root>" for err in e.errors())
            logger.error(f"Structured response does not match AnalysisResult: {fields}")
            return Failure(FailureReason.SCHEMA_MISMATCH, detail=f"invalid fields: {fields}")

        if not SCORE_MIN <= result.credibility_score <= SCORE_MAX:
            logger.warning(
                f"credibilityScore {result.credibility_score} outside "
                f"{SCORE_MIN}-{SCORE_MAX}, passing through unchanged"
            )

        return Success(result)
