from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from azure.cosmos.exceptions import CosmosHttpResponseError

from app.core.config import Settings
from app.core.container import CONTAINER_SPEC, ensure_container


def _settings(**overrides) -> Settings:
    values = {
        "COSMOS_DB_ENDPOINT": "https://example.documents.azure.com:443/",
        "COSMOS_DB_KEY": "key",
        "COSMOS_DB_DATABASE": "db",
        "COSMOS_DB_EMPLOYEES_CONTAINER": "employees",
    }
    values.update(overrides)
    return Settings(**values)


def _mock_client():
    database = MagicMock()
    database.create_container_if_not_exists = AsyncMock()
    client = MagicMock()
    client.create_database_if_not_exists = AsyncMock(return_value=database)
    client.close = AsyncMock()
    return client, database


def test_container_spec_declares_unique_email():
    assert CONTAINER_SPEC["partition_key_path"] == "/kind"
    assert CONTAINER_SPEC["unique_key_policy"] == {"uniqueKeys": [{"paths": ["/email"]}]}


@pytest.mark.anyio
async def test_ensure_container_creates_database_and_container():
    client, database = _mock_client()

    with patch("app.core.container.CosmosClient", return_value=client):
        assert await ensure_container(_settings()) is True

    client.create_database_if_not_exists.assert_awaited_once_with(id="db")
    kwargs = database.create_container_if_not_exists.await_args.kwargs
    assert kwargs["id"] == "employees"
    assert kwargs["unique_key_policy"] == CONTAINER_SPEC["unique_key_policy"]
    client.close.assert_awaited_once()


@pytest.mark.anyio
async def test_ensure_container_without_credentials():
    with patch("app.core.container.CosmosClient") as client_cls:
        assert await ensure_container(_settings(COSMOS_DB_KEY="")) is False

    client_cls.assert_not_called()


@pytest.mark.anyio
async def test_ensure_container_failure_returns_false_and_closes():
    client, _ = _mock_client()
    client.create_database_if_not_exists = AsyncMock(
        side_effect=CosmosHttpResponseError(status_code=403, message="Forbidden")
    )

    with patch("app.core.container.CosmosClient", return_value=client):
        assert await ensure_container(_settings()) is False

    client.close.assert_awaited_once()
