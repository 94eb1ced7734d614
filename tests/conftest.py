"""
Pytest configuration and fixtures for the tutor service tests.

Providers are MockProvider instances so no test touches the network, and
the retry base delay is zero so retried calls do not sleep.
"""

import pytest
from fastapi.testclient import TestClient

from shared.llm_adapter import MockProvider, ModelType, ProviderSettings
from services.tutor_service.ai_service import AIService
from services.tutor_service.config import TutorConfig
from services.tutor_service.main import create_app


@pytest.fixture
def cfg():
    return TutorConfig(
        providers=ProviderSettings(ai_provider="mock"),
        retry_base_delay_ms=0,
    )


@pytest.fixture
def llama():
    return MockProvider(name="llama")


@pytest.fixture
def mistral():
    return MockProvider(name="mistral")


@pytest.fixture
def providers(llama, mistral):
    return {ModelType.LLAMA: llama, ModelType.MISTRAL: mistral}


@pytest.fixture
def service(providers, cfg):
    return AIService(providers, cfg)


@pytest.fixture
def make_client(providers):
    """Start the app (lifespan included) for a given config."""
    opened = []

    def _make(config):
        client = TestClient(create_app(config, providers))
        client.__enter__()
        opened.append(client)
        return client

    yield _make
    for client in opened:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, cfg):
    return make_client(cfg)
