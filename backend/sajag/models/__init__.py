# Request, result and state models
from sajag.models.outcomes import Failure, FailureReason, OperationOutcome, Success
from sajag.models.schemas import (
    AnalysisReport,
    AnalysisResult,
    CoordinatorState,
    ExpectedShape,
    OperationRequest,
)

__all__ = [
    "Failure",
    "FailureReason",
    "OperationOutcome",
    "Success",
    "AnalysisReport",
    "AnalysisResult",
    "CoordinatorState",
    "ExpectedShape",
    "OperationRequest",
]
