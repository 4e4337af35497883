from __future__ import annotations

import logging
from typing import Any

from azure.cosmos import PartitionKey
from azure.cosmos.aio import CosmosClient
from azure.cosmos.exceptions import CosmosHttpResponseError

from app.core.config import Settings
from app.models.employee import UNIQUE_FIELDS

logger = logging.getLogger(__name__)


CONTAINER_SPEC: dict[str, Any] = {
    "partition_key_path": "/kind",
    "unique_key_policy": {
        "uniqueKeys": [{"paths": [f"/{name}"]} for name in UNIQUE_FIELDS],
    },
    "indexing_policy": {
        "indexingMode": "consistent",
        "automatic": True,
        "includedPaths": [{"path": "/*"}],
        "excludedPaths": [{"path": '/"_etag"/?'}],
    },
}


async def ensure_container(settings: Settings) -> bool:
    """Create the employee database and container if they do not exist yet.

    The unique key policy can only be set at creation time; an existing
    container keeps whatever policy it was created with.
    """
    endpoint = settings.COSMOS_DB_ENDPOINT
    key = settings.COSMOS_DB_KEY

    if not endpoint or not key:
        logger.warning("Cosmos DB credentials missing; container not created")
        return False

    client = CosmosClient(endpoint, key)
    try:
        database = await client.create_database_if_not_exists(id=settings.COSMOS_DB_DATABASE)
        await database.create_container_if_not_exists(
            id=settings.COSMOS_DB_EMPLOYEES_CONTAINER,
            partition_key=PartitionKey(path=CONTAINER_SPEC["partition_key_path"]),
            unique_key_policy=CONTAINER_SPEC["unique_key_policy"],
            indexing_policy=CONTAINER_SPEC["indexing_policy"],
        )
        logger.info(
            "Container ready: %s/%s",
            settings.COSMOS_DB_DATABASE,
            settings.COSMOS_DB_EMPLOYEES_CONTAINER,
        )
        return True
    except CosmosHttpResponseError:
        logger.exception("Container creation failed")
        return False
    finally:
        await client.close()
