from collections.abc import Callable
from typing import Any

import pytest
from fastapi.testclient import TestClient

from app_settings import GatewaySettings
from gateway import create_app
from integrations.ai import CompletionClient, CompletionConfig
from tests.fakes import FakeProvider, answer


@pytest.fixture
def make_settings() -> Callable[..., GatewaySettings]:
    def _make(**overrides: Any) -> GatewaySettings:
        llm = CompletionConfig(
            api_key="test-key",
            base_url="https://llm.test/v1",
            timeout_seconds=overrides.pop("timeout_seconds", 2.0),
        )
        return GatewaySettings(llm=llm, **overrides)

    return _make


@pytest.fixture
def make_client() -> Callable[..., CompletionClient]:
    def _make(provider: FakeProvider, timeout_seconds: float = 2.0) -> CompletionClient:
        return CompletionClient(
            api_key="test-key",
            base_url="https://llm.test/v1",
            timeout_seconds=timeout_seconds,
            transport=provider.transport(),
        )

    return _make


@pytest.fixture
def make_test_client(make_settings, make_client) -> Callable[..., TestClient]:
    def _make(provider: FakeProvider | None = None, **overrides: Any) -> TestClient:
        settings = make_settings(**overrides)
        provider = provider or FakeProvider(
            answer("Presence is the feeling of really being there.")
        )
        client = make_client(provider, timeout_seconds=settings.llm.timeout_seconds)
        return TestClient(create_app(settings, completion_client=client))

    return _make
