"""
Tests for OperationCoordinator: validation, state transitions,
the in-flight guard and the post-success hook.
"""

import asyncio

import httpx
import pytest

from conftest import analysis_body, gemini_body
from sajag.models.outcomes import Failure, FailureReason, Success
from sajag.models.schemas import AnalysisResult, CoordinatorState
from sajag.services.coordinator import (
    ANALYZE_VALIDATION,
    FACT_FAILURE,
    SUMMARIZE_FAILURE,
    SUMMARIZE_VALIDATION,
    OperationCoordinator,
    OperationInProgressError,
    build_coordinators,
    fact_action,
    summarize_action,
)


class GatedRunner:
    """Runner that holds every call until released."""

    def __init__(self, outcome):
        self.outcome = outcome
        self.gate = asyncio.Event()
        self.requests = []

    async def run(self, request):
        self.requests.append(request)
        await self.gate.wait()
        return self.outcome


class ExplodingRunner:
    async def run(self, request):
        raise RuntimeError("bug in runner")


# =============================================================================
# VALIDATION
# =============================================================================

@pytest.mark.asyncio
@pytest.mark.parametrize(
    "action, message",
    [("analyze", ANALYZE_VALIDATION), ("summarize", SUMMARIZE_VALIDATION)],
)
async def test_blank_input_never_reaches_network(settings, scripted, sleep, action, message):
    endpoint = scripted(httpx.Response(200, json=gemini_body("unused")))
    coordinators = build_coordinators(settings, http_client=endpoint.http_client(), sleep=sleep)

    state = await getattr(coordinators, action).invoke("   ")

    assert state == CoordinatorState(busy=False, result=None, error=message)
    assert endpoint.calls == 0


@pytest.mark.asyncio
async def test_fact_needs_no_input(settings, scripted, sleep):
    endpoint = scripted(httpx.Response(200, json=gemini_body("Did you know?")))
    coordinators = build_coordinators(settings, http_client=endpoint.http_client(), sleep=sleep)

    state = await coordinators.fact.invoke()

    assert state.result == "Did you know?"
    assert endpoint.calls == 1


# =============================================================================
# END TO END (coordinator → runner → client → mock endpoint)
# =============================================================================

@pytest.mark.asyncio
async def test_analyze_success(settings, scripted, sleep):
    endpoint = scripted(httpx.Response(200, json=analysis_body(15, "Extraordinary claim.")))
    coordinators = build_coordinators(settings, http_client=endpoint.http_client(), sleep=sleep)

    state = await coordinators.analyze.invoke("Chocolate extends lifespan by 10 years")

    assert state.busy is False
    assert state.error is None
    assert state.result == AnalysisResult(credibility_score=15, breakdown="Extraordinary claim.")
    assert "Chocolate extends lifespan by 10 years" in endpoint.requests[0].content.decode()


@pytest.mark.asyncio
async def test_fact_fails_after_four_server_errors(settings, scripted, sleep):
    endpoint = scripted(httpx.Response(500))
    coordinators = build_coordinators(settings, http_client=endpoint.http_client(), sleep=sleep)

    state = await coordinators.fact.invoke()

    assert state == CoordinatorState(busy=False, result=None, error="Failed to get a fact. Please try again.")
    assert endpoint.calls == 4


@pytest.mark.asyncio
async def test_corrupt_encoding_becomes_fact_failure(settings, scripted, sleep):
    endpoint = scripted(
        lambda: httpx.Response(
            200,
            headers={"content-encoding": "gzip"},
            stream=httpx.ByteStream(b"not gzip"),
        )
    )
    coordinators = build_coordinators(settings, http_client=endpoint.http_client(), sleep=sleep)

    state = await coordinators.fact.invoke()

    assert state == CoordinatorState(busy=False, result=None, error=FACT_FAILURE)
    assert endpoint.calls == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_new_invocation_clears_previous_result(settings, scripted, sleep):
    endpoint = scripted(
        httpx.Response(200, json=gemini_body("First summary.")),
        httpx.Response(500),
    )
    coordinators = build_coordinators(settings, http_client=endpoint.http_client(), sleep=sleep)

    first = await coordinators.summarize.invoke("Some long article text")
    second = await coordinators.summarize.invoke("Some long article text")

    assert first.result == "First summary."
    assert second.result is None
    assert second.error == SUMMARIZE_FAILURE


@pytest.mark.asyncio
async def test_success_clears_previous_error(settings, scripted, sleep):
    coordinators = build_coordinators(
        settings,
        http_client=scripted(httpx.Response(200, json=gemini_body("ok"))).http_client(),
        sleep=sleep,
    )

    await coordinators.summarize.invoke("")
    state = await coordinators.summarize.invoke("Real text")

    assert state == CoordinatorState(busy=False, result="ok", error=None)


# =============================================================================
# BUSY FLAG AND IN-FLIGHT GUARD
# =============================================================================

@pytest.mark.asyncio
async def test_busy_while_running(settings):
    runner = GatedRunner(Success("summary"))
    coordinator = OperationCoordinator(summarize_action(settings), runner)

    task = asyncio.create_task(coordinator.invoke("text"))
    await asyncio.sleep(0)

    assert coordinator.busy
    assert coordinator.snapshot() == CoordinatorState(busy=True)

    runner.gate.set()
    state = await task
    assert state == CoordinatorState(busy=False, result="summary", error=None)


@pytest.mark.asyncio
async def test_second_invoke_while_busy_is_rejected(settings):
    runner = GatedRunner(Success("summary"))
    coordinator = OperationCoordinator(summarize_action(settings), runner)

    task = asyncio.create_task(coordinator.invoke("text"))
    await asyncio.sleep(0)

    with pytest.raises(OperationInProgressError):
        await coordinator.invoke("other text")

    runner.gate.set()
    state = await task
    assert state.result == "summary"
    assert len(runner.requests) == 1


@pytest.mark.asyncio
async def test_different_coordinators_run_concurrently(settings):
    summary_runner = GatedRunner(Success("summary"))
    fact_runner = GatedRunner(Failure(FailureReason.TRANSPORT))
    summarize = OperationCoordinator(summarize_action(settings), summary_runner)
    fact = OperationCoordinator(fact_action(settings), fact_runner)

    tasks = [
        asyncio.create_task(summarize.invoke("text")),
        asyncio.create_task(fact.invoke()),
    ]
    await asyncio.sleep(0)
    assert summarize.busy and fact.busy

    fact_runner.gate.set()
    summary_runner.gate.set()
    summary_state, fact_state = await asyncio.gather(*tasks)

    assert summary_state.result == "summary"
    assert fact_state.error == FACT_FAILURE


@pytest.mark.asyncio
async def test_unexpected_runner_error_resets_busy(settings):
    coordinator = OperationCoordinator(summarize_action(settings), ExplodingRunner())

    with pytest.raises(RuntimeError):
        await coordinator.invoke("text")

    assert coordinator.snapshot() == CoordinatorState(busy=False, result=None, error=SUMMARIZE_FAILURE)


# =============================================================================
# POST-SUCCESS HOOK
# =============================================================================

@pytest.mark.asyncio
async def test_analysis_hook_fires_after_delay(settings, scripted, sleep):
    seen = []
    endpoint = scripted(httpx.Response(200, json=analysis_body(88)))
    coordinators = build_coordinators(
        settings,
        http_client=endpoint.http_client(),
        on_analysis_ready=seen.append,
        sleep=sleep,
    )

    await coordinators.analyze.invoke("Water is wet")
    assert seen == []  # not yet, the result renders first

    await asyncio.sleep(0.05)
    assert len(seen) == 1
    assert seen[0].credibility_score == 88


@pytest.mark.asyncio
async def test_hook_not_fired_on_failure(settings, scripted, sleep):
    seen = []
    endpoint = scripted(httpx.Response(500))
    coordinators = build_coordinators(
        settings,
        http_client=endpoint.http_client(),
        on_analysis_ready=seen.append,
        sleep=sleep,
    )

    await coordinators.analyze.invoke("Water is wet")
    await asyncio.sleep(0.05)

    assert seen == []


@pytest.mark.asyncio
async def test_hook_errors_do_not_escape(settings, scripted, sleep):
    def broken_hook(result):
        raise ValueError("scroll target missing")

    endpoint = scripted(httpx.Response(200, json=analysis_body(50)))
    coordinators = build_coordinators(
        settings,
        http_client=endpoint.http_client(),
        on_analysis_ready=broken_hook,
        sleep=sleep,
    )

    state = await coordinators.analyze.invoke("Some claim")
    await asyncio.sleep(0.05)

    assert state.result.credibility_score == 50
    assert coordinators.analyze.snapshot().error is None
