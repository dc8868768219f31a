"""
Shared fixtures for the orchestration tests.

Nothing here talks to the real Gemini API. HTTP goes through
httpx.MockTransport, and retry sleeps are recorded instead of awaited.
"""

import asyncio
import json

import httpx
import pytest

from sajag.config import Settings


def gemini_body(text: str) -> dict:
    """A generateContent response carrying the given text."""
    return {
        "candidates": [
            {
                "content": {"parts": [{"text": text}], "role": "model"},
                "finishReason": "STOP",
            }
        ]
    }


def analysis_body(score, breakdown: str = "Classic miracle-food claim with no cited study.") -> dict:
    return gemini_body(json.dumps({"credibilityScore": score, "breakdown": breakdown}))


class ScriptedEndpoint:
    """
    Plays back a list of responses, one per request.

    Each entry is an httpx.Response, an exception instance to raise, or a
    zero-argument callable that builds the response (for streamed bodies).
    The last entry repeats once the script runs out.
    """

    def __init__(self, *script):
        self.script = list(script)
        self.requests: list[httpx.Request] = []
        self.clients: list[httpx.AsyncClient] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests) - 1, len(self.script) - 1)
        step = self.script[index]
        if isinstance(step, Exception):
            raise step
        if not isinstance(step, httpx.Response):
            return step()
        # Fresh response each time, the client binds and closes the one it gets
        return httpx.Response(step.status_code, headers=step.headers, content=step.content)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def http_client(self) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(self))
        self.clients.append(client)
        return client

    async def aclose(self) -> None:
        for client in self.clients:
            await client.aclose()


class RecordingSleep:
    """Stands in for asyncio.sleep and remembers every delay."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        gemini_api_key="",
        gemini_model="test-model",
        gemini_base_url="https://gemini.test/v1beta",
        retry_max_attempts=3,
        retry_base_delay_ms=1000,
        result_reveal_delay_ms=10,
        analyze_with_search=True,
    )


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def scripted():
    """Builds ScriptedEndpoints and closes every client they handed out."""
    endpoints: list[ScriptedEndpoint] = []

    def _make(*script) -> ScriptedEndpoint:
        endpoint = ScriptedEndpoint(*script)
        endpoints.append(endpoint)
        return endpoint

    yield _make

    # Private loop, the test's own loop is already finished here
    loop = asyncio.new_event_loop()
    try:
        for endpoint in endpoints:
            loop.run_until_complete(endpoint.aclose())
    finally:
        loop.close()
