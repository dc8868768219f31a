"""
Retrying Operation Runner — Drives one request to a final outcome.

WHAT THIS DOES:
Sends a request through the GeminiClient, interprets the body, and retries
with exponential backoff when the call itself fails.

HOW IT WORKS:
1. attempt = 0
2. Send. If the call succeeds, interpret the body and return that outcome
   (success OR interpretation failure; a bad body is never retried)
3. If the call fails with TRANSPORT or HTTP_STATUS and the budget allows,
   sleep delay(attempt + 1), bump attempt, go to 2
4. Out of budget → return the last failure

With the default policy that's at most 4 attempts and 2s + 4s + 8s of waiting.

Attempts are strictly sequential. Each retry resends the exact same request,
which is safe: asking the model a question has no side effects.

USAGE:
    runner = RetryingOperationRunner(client, ResponseInterpreter(), policy)
    outcome = await runner.run(request)
    if isinstance(outcome, Success):
        ...
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from sajag.models.outcomes import Failure, OperationOutcome
from sajag.models.schemas import OperationRequest
from sajag.services.backoff import BackoffPolicy
from sajag.services.gemini import GeminiClient, RemoteEndpointError
from sajag.services.interpreter import ResponseInterpreter

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class RetryingOperationRunner:
    """
    Runs requests with bounded retries.

    Stateless between calls. A fresh RetryState is created per run,
    so one runner can serve every coordinator at once.
    """

    def __init__(
        self,
        client: GeminiClient,
        interpreter: Optional[ResponseInterpreter] = None,
        policy: Optional[BackoffPolicy] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.client = client
        self.interpreter = interpreter or ResponseInterpreter()
        self.policy = policy or BackoffPolicy()
        self._sleep = sleep

    async def run(self, request: OperationRequest) -> OperationOutcome:
        """
        Run a request until success or the retry budget is spent.

        Args:
            request: What to send; its expected_shape decides how the body is read

        Returns:
            Success, or the Failure that ended the chain
        """
        state = self.policy.new_state()

        while True:
            try:
                body = await self.client.send(request)
            except RemoteEndpointError as e:
                failure: Failure = e.failure

                if not failure.retryable:
                    logger.error(f"Request failed permanently: {failure.describe()}")
                    return failure

                if state.exhausted:
                    logger.error(
                        f"Request failed after {state.attempt + 1} attempts: {failure.describe()}"
                    )
                    return failure

                delay = state.next_delay_seconds()
                logger.warning(
                    f"Attempt {state.attempt + 1} failed ({failure.describe()}), "
                    f"retrying in {delay:.1f}s"
                )
                await self._sleep(delay)
                state.advance()
                continue

            outcome = self.interpreter.interpret(request.expected_shape, body)
            if isinstance(outcome, Failure):
                logger.error(f"Response rejected, not retrying: {outcome.describe()}")
            else:
                logger.info(f"Request succeeded on attempt {state.attempt + 1}")
            return outcome
