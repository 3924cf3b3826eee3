"""Tests for FlowClient."""

import pytest
from aioresponses import aioresponses

from ctaflow.core.errors import BackendError
from ctaflow.core.persistence.client import (
    FlowClient,
    FlowClientConfig,
    normalize_base_url,
)

API = "https://crm.test.com/api"


class TestFlowClientConfig:
    """Tests for FlowClientConfig."""

    def test_default_values(self):
        config = FlowClientConfig()

        assert config.connect_timeout == 10.0
        assert config.read_timeout == 30.0
        assert config.token is None

    @pytest.mark.parametrize(
        "raw",
        [
            "https://crm.test.com",
            "https://crm.test.com/",
            "https://crm.test.com/api",
            " https://crm.test.com/api// ",
        ],
    )
    def test_api_url_normalized(self, raw):
        assert normalize_base_url(raw) == API

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("CTAFLOW_API_BASE_URL", "https://crm.test.com")
        monkeypatch.setenv("CTAFLOW_API_TOKEN", "secret")
        monkeypatch.setenv("CTAFLOW_READ_TIMEOUT", "5")

        config = FlowClientConfig.from_env()

        assert config.api_url == API
        assert config.token == "secret"
        assert config.read_timeout == 5.0

    def test_from_env_defaults(self, monkeypatch):
        monkeypatch.delenv("CTAFLOW_API_BASE_URL", raising=False)
        monkeypatch.delenv("CTAFLOW_API_TOKEN", raising=False)

        config = FlowClientConfig.from_env()

        assert config.api_url == "https://your-api.example.com/api"
        assert config.token is None


class TestFlowClient:
    """Tests for FlowClient requests."""

    @pytest.fixture
    async def client(self):
        client = FlowClient(FlowClientConfig(base_url="https://crm.test.com", token="t0k"))
        await client.connect()
        yield client
        await client.close()

    async def test_fetch_flow(self, client, flow_document):
        with aioresponses() as m:
            m.get(f"{API}/cta-flow/by-id/flow-1", payload=flow_document)

            data = await client.fetch_flow("flow-1")

        assert data["flowName"] == "Diwali offer"

    async def test_sends_bearer_token(self, client):
        assert client._session.headers["Authorization"] == "Bearer t0k"
        assert client._session.headers["Accept"] == "application/json"

    async def test_save_flow_posts_payload(self, client):
        payload = {"FlowName": "x", "IsPublished": False, "Nodes": [], "Edges": []}
        with aioresponses() as m:
            m.post(f"{API}/cta-flow/save-visual", payload={"success": True})

            result = await client.save_flow(payload)

            calls = list(m.requests.values())[0]
        assert result == {"success": True}
        assert calls[0].kwargs["json"] == payload

    async def test_error_status_raises(self, client):
        with aioresponses() as m:
            m.get(f"{API}/cta-flow/by-id/missing", status=404, body="Flow not found")

            with pytest.raises(BackendError) as exc_info:
                await client.fetch_flow("missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.response_body == "Flow not found"

    async def test_list_drafts(self, client):
        with aioresponses() as m:
            m.get(f"{API}/cta-flow/all-draft", payload=[{"id": "a"}, {"id": "b"}])

            flows = await client.list_flows()

        assert [f["id"] for f in flows] == ["a", "b"]

    async def test_list_published_wraps_single_object(self, client):
        with aioresponses() as m:
            m.get(f"{API}/cta-flow/all-published", payload={"id": "only"})

            flows = await client.list_flows(published=True)

        assert flows == [{"id": "only"}]

    async def test_delete_flow(self, client):
        with aioresponses() as m:
            m.delete(f"{API}/cta-flow/delete/flow-1", status=200)

            assert await client.delete_flow("flow-1") is None

    async def test_context_manager_closes_session(self):
        async with FlowClient(FlowClientConfig(base_url="https://crm.test.com")) as client:
            assert client._session is not None

        assert client._session is None
