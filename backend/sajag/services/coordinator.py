"""
Operation Coordinator — One per user action, owns what the UI shows.

WHAT THIS DOES:
Each action (analyze, summarize, fact) gets its own coordinator with its own
busy flag, result slot and error slot. The coordinator validates input,
runs the request through the RetryingOperationRunner, and records the outcome.

STATE MACHINE:
    Idle ──invoke──▶ Busy ──success──▶ Idle with result
                          └─failure──▶ Idle with error

Starting a new invocation clears both result and error.
Result and error are never both set.

IN-FLIGHT GUARD:
A second invoke() on a busy coordinator raises OperationInProgressError.
The busy check and the busy=True assignment run with no await in between,
so under asyncio nothing can slip in between them. Different coordinators
share nothing and can run at the same time.

USER-FACING ERRORS:
Only fixed messages are ever stored ("Failed to get a summary. Please try
again."). Status codes and failure reasons go to the log.

USAGE:
    coordinators = build_coordinators(get_settings())
    state = await coordinators.analyze.invoke("Chocolate extends lifespan by 10 years")
    state.result.credibility_score  # e.g. 15
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx

from sajag.config import Settings, get_settings
from sajag.models.outcomes import OperationOutcome, Success
from sajag.models.schemas import CoordinatorState, OperationRequest
from sajag.services import prompts
from sajag.services.backoff import BackoffPolicy
from sajag.services.gemini import GeminiClient
from sajag.services.interpreter import ResponseInterpreter
from sajag.services.runner import RetryingOperationRunner

logger = logging.getLogger(__name__)

SuccessHook = Callable[[Any], None]


class OperationInProgressError(Exception):
    """Raised when a coordinator is invoked while its previous call is still running."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"'{action}' is already in progress")


@dataclass(frozen=True)
class ActionSpec:
    """What makes one action different from another."""

    name: str
    build_request: Callable[[str], OperationRequest]
    failure_message: str

    validation_message: Optional[str] = None
    """Shown for blank input. None means the action takes no input."""

    @property
    def requires_input(self) -> bool:
        return self.validation_message is not None


class OperationCoordinator:
    """
    Owns one action's CoordinatorState.

    The optional on_success hook is fire-and-forget: it runs after
    success_hook_delay seconds on the event loop, and its errors are
    logged rather than raised.
    """

    def __init__(
        self,
        action: ActionSpec,
        runner: RetryingOperationRunner,
        on_success: Optional[SuccessHook] = None,
        success_hook_delay: float = 0.1,
    ):
        self.action = action
        self.runner = runner
        self.on_success = on_success
        self.success_hook_delay = success_hook_delay
        self.state = CoordinatorState()

    @property
    def name(self) -> str:
        return self.action.name

    @property
    def busy(self) -> bool:
        return self.state.busy

    def snapshot(self) -> CoordinatorState:
        """Copy of the current state, safe to hand out."""
        return self.state.model_copy()

    async def invoke(self, input_text: str = "") -> CoordinatorState:
        """
        Run the action once and return the resulting state.

        Args:
            input_text: User text; ignored by actions that take no input

        Returns:
            Snapshot of the state after the call finished

        Raises:
            OperationInProgressError: if this coordinator is already busy
        """
        if self.state.busy:
            raise OperationInProgressError(self.name)

        if self.action.requires_input and not input_text.strip():
            logger.info(f"{self.name}: rejected blank input")
            self.state.result = None
            self.state.error = self.action.validation_message
            return self.snapshot()

        self.state.result = None
        self.state.error = None
        self.state.busy = True

        outcome: Optional[OperationOutcome] = None
        try:
            request = self.action.build_request(input_text)
            outcome = await self.runner.run(request)
        finally:
            # Unexpected exception: still leave the UI in a usable state
            if outcome is None:
                self.state.error = self.action.failure_message
                self.state.busy = False

        if isinstance(outcome, Success):
            self.state.result = outcome.payload
            self.state.error = None
            self.state.busy = False
            logger.info(f"{self.name}: completed")
            self._schedule_success_hook(outcome.payload)
        else:
            self.state.result = None
            self.state.error = self.action.failure_message
            self.state.busy = False
            logger.error(f"{self.name}: failed ({outcome.describe()})")

        return self.snapshot()

    def _schedule_success_hook(self, payload: Any) -> None:
        if self.on_success is None:
            return
        loop = asyncio.get_running_loop()
        loop.call_later(self.success_hook_delay, self._run_success_hook, payload)

    def _run_success_hook(self, payload: Any) -> None:
        try:
            self.on_success(payload)
        except Exception:
            logger.exception(f"{self.name}: success hook raised")


# =============================================================================
# ACTIONS
# =============================================================================

ANALYZE_FAILURE = "Failed to get a response. Please try again."
SUMMARIZE_FAILURE = "Failed to get a summary. Please try again."
FACT_FAILURE = "Failed to get a fact. Please try again."

ANALYZE_VALIDATION = "Please enter some text to analyze."
SUMMARIZE_VALIDATION = "Please enter some text to summarize."


def analyze_action(settings: Settings) -> ActionSpec:
    return ActionSpec(
        name="analyze",
        build_request=lambda text: prompts.build_analysis_request(text, settings),
        failure_message=ANALYZE_FAILURE,
        validation_message=ANALYZE_VALIDATION,
    )


def summarize_action(settings: Settings) -> ActionSpec:
    return ActionSpec(
        name="summarize",
        build_request=lambda text: prompts.build_summary_request(text, settings),
        failure_message=SUMMARIZE_FAILURE,
        validation_message=SUMMARIZE_VALIDATION,
    )


def fact_action(settings: Settings) -> ActionSpec:
    return ActionSpec(
        name="fact",
        build_request=lambda text: prompts.build_fact_request(text, settings),
        failure_message=FACT_FAILURE,
    )


@dataclass
class Coordinators:
    """The three coordinators behind the UI, sharing one client and runner."""

    analyze: OperationCoordinator
    summarize: OperationCoordinator
    fact: OperationCoordinator
    client: GeminiClient

    async def close(self):
        await self.client.close()


def build_coordinators(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    on_analysis_ready: Optional[SuccessHook] = None,
    sleep=None,
) -> Coordinators:
    """
    Wire up all three coordinators.

    One BackoffPolicy (from settings) and one runner serve every action.
    Only analyze gets the post-success hook.

    Args:
        settings: Defaults to get_settings()
        http_client: Injected transport (tests use httpx.MockTransport)
        on_analysis_ready: Called with the AnalysisResult shortly after success
        sleep: Replacement for asyncio.sleep between retries
    """
    settings = settings or get_settings()

    client = GeminiClient(settings, http_client=http_client)
    runner_kwargs = {"sleep": sleep} if sleep is not None else {}
    runner = RetryingOperationRunner(
        client,
        ResponseInterpreter(),
        BackoffPolicy.from_settings(settings),
        **runner_kwargs,
    )

    return Coordinators(
        analyze=OperationCoordinator(
            analyze_action(settings),
            runner,
            on_success=on_analysis_ready,
            success_hook_delay=settings.result_reveal_delay_ms / 1000,
        ),
        summarize=OperationCoordinator(summarize_action(settings), runner),
        fact=OperationCoordinator(fact_action(settings), runner),
        client=client,
    )
