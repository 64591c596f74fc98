"""Pytest fixtures and shared test configuration.

Upstream services are simulated with httpx.MockTransport so every test
can inspect exactly which upstream requests were (or were not) made.

Fixtures:
    - gateway_config: GatewayConfig pointing at fake upstream hosts
    - store_upstream / llm_upstream: Recording fake upstreams
    - gateway: RequestGateway wired to the fake upstreams
    - async_client: HTTPX client for the FastAPI app, gateway overridden
    - api_client: ApiClient talking to the app through async_client
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from docchat.api.app import app
from docchat.client import ApiClient
from docchat.config import ClientConfig, GatewayConfig
from docchat.gateway import RequestGateway, get_gateway
from docchat.upstream import DocumentStoreClient, LanguageModelClient
from tests.fakes import FakeUpstream

STORE_URL = "https://store.test"
LLM_URL = "https://llm.test/v1/chat/completions"


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def gateway_config(upload_dir: Path) -> GatewayConfig:
    """Gateway configuration pointing at the fake upstreams."""
    return GatewayConfig(
        document_store_url=STORE_URL,
        document_store_api_key="test-store-key",
        language_model_url=LLM_URL,
        language_model_name="llama",
        upstream_timeout=5.0,
        upload_dir=upload_dir,
    )


@pytest.fixture
def store_upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def llm_upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
async def gateway(
    gateway_config: GatewayConfig,
    store_upstream: FakeUpstream,
    llm_upstream: FakeUpstream,
) -> AsyncGenerator[RequestGateway]:
    """RequestGateway whose upstream clients use mock transports."""
    store = DocumentStoreClient(
        base_url=gateway_config.document_store_url,
        api_key=gateway_config.document_store_api_key,
        client=httpx.AsyncClient(transport=httpx.MockTransport(store_upstream.handler)),
    )
    llm = LanguageModelClient(
        url=gateway_config.language_model_url,
        model=gateway_config.language_model_name,
        client=httpx.AsyncClient(transport=httpx.MockTransport(llm_upstream.handler)),
    )
    service = RequestGateway(config=gateway_config, document_store=store, language_model=llm)
    yield service
    await service.aclose()


@pytest.fixture
async def async_client(gateway: RequestGateway) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    app.dependency_overrides[get_gateway] = lambda: gateway
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def api_client(async_client: AsyncClient) -> ApiClient:
    """ApiClient sending its requests through the ASGI app."""
    return ApiClient(ClientConfig(api_base_url="http://test/api"), client=async_client)
