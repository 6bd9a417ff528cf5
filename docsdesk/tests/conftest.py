"""Shared fixtures: mock ServiceNow transport and a recording sleep."""

import json
import random
from typing import Callable, List

import httpx
import pytest

from docsdesk.core.execution import RetryPolicy
from docsdesk.core.retry_config import RetryConfig
from docsdesk.integrations.servicenow import ServiceNowClient, ServiceNowCredentials

INSTANCE = "https://acme.service-now.com"


class RecordingSleep:
    """Stands in for asyncio.sleep; records requested delays in seconds."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class MaxJitterRandom(random.Random):
    """uniform() always returns the upper bound."""

    def uniform(self, a, b):
        return b


def json_response(status: int, body=None, headers=None) -> httpx.Response:
    content = b"" if body is None else json.dumps(body).encode()
    return httpx.Response(status, content=content, headers=headers or {})


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_client(recording_sleep) -> Callable[..., ServiceNowClient]:
    """Factory building a client whose HTTP calls go to ``handler``."""

    def _make(handler, retry_config: RetryConfig = None, rng=None, **kwargs) -> ServiceNowClient:
        policy = RetryPolicy(
            retry_config or RetryConfig(),
            rng=rng or random.Random(7),
            sleep=recording_sleep,
        )
        return ServiceNowClient(
            INSTANCE + "/",
            "basic",
            ServiceNowCredentials(username="u", password="p"),
            retry_policy=policy,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
            **kwargs,
        )

    return _make
