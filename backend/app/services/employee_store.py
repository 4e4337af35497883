"""Cosmos DB employee store: runs validation and lifecycle hooks around persistence."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from typing import Any

from azure.cosmos.aio import CosmosClient
from azure.cosmos.exceptions import CosmosResourceExistsError, CosmosResourceNotFoundError
from pydantic import ValidationError

from app.core.config import Settings
from app.models.employee import EMPLOYEE_KIND, FIELD_MESSAGES, EmployeeRecord, document_field_name
from app.services.employee_query import build_query, by_first_name, by_kind
from app.services.employee_validator import (
    EmployeeValidationError,
    EmployeeValidator,
    FieldViolation,
    violations_from,
)

logger = logging.getLogger(__name__)

# Dropped from an update patch before it is validated or merged.
_IMMUTABLE_FIELDS = frozenset({"id", "kind", "createdOn"})


class EmployeeStoreError(Exception):
    pass


def _duplicate_email() -> EmployeeValidationError:
    return EmployeeValidationError([FieldViolation(field="email", message=FIELD_MESSAGES["email"]["unique"])])


class EmployeeStore:
    def __init__(self, validator: EmployeeValidator | None = None) -> None:
        self.validator = validator or EmployeeValidator()
        self.client: CosmosClient | None = None
        self.container: Any = None
        self.initialized: bool = False

    async def initialize(self, settings: Settings) -> None:
        if self.initialized:
            return

        endpoint = settings.COSMOS_DB_ENDPOINT
        key = settings.COSMOS_DB_KEY
        database_name = settings.COSMOS_DB_DATABASE
        container_name = settings.COSMOS_DB_EMPLOYEES_CONTAINER

        if not endpoint or not key:
            logger.warning("Cosmos DB credentials missing; store not initialized")
            return

        self.client = CosmosClient(endpoint, key)
        db = self.client.get_database_client(database_name)
        self.container = db.get_container_client(container_name)
        self.initialized = True
        logger.info("EmployeeStore initialized (container=%s)", container_name)

    async def close(self) -> None:
        if self.client:
            await self.client.close()
            self.client = None
            self.container = None
            self.initialized = False

    def _require_container(self) -> Any:
        if not self.container:
            raise EmployeeStoreError("EmployeeStore not initialized")
        return self.container

    def _load(self, doc: dict[str, Any]) -> EmployeeRecord:
        try:
            record = EmployeeRecord.from_document(doc)
        except ValidationError as err:
            logger.warning("Stored employee %s could not be loaded", doc.get("id"))
            raise EmployeeValidationError(violations_from(err)) from err
        logger.debug("Employee %s has been initialized from the db", record.id)
        return record

    async def create(self, data: EmployeeRecord | Mapping[str, Any]) -> EmployeeRecord:
        container = self._require_container()

        record = self.validator.ensure_valid(data)
        logger.debug("Employee %s has been validated (but not saved yet)", record.id)
        self.validator.before_create(record)

        try:
            saved = await container.create_item(body=record.to_document())
        except CosmosResourceExistsError as err:
            logger.info("Rejected employee %s: email %s already exists", record.id, record.email)
            raise _duplicate_email() from err

        logger.info("Employee %s has been saved", record.id)
        return self._load(saved)

    async def get(self, employee_id: str) -> EmployeeRecord | None:
        container = self._require_container()
        try:
            doc = await container.read_item(item=employee_id, partition_key=EMPLOYEE_KIND)
        except CosmosResourceNotFoundError:
            return None
        return self._load(doc)

    async def update(self, employee_id: str, patch: Mapping[str, Any]) -> EmployeeRecord | None:
        container = self._require_container()

        changes: dict[str, Any] = {}
        for key, value in patch.items():
            if document_field_name(key) in _IMMUTABLE_FIELDS:
                logger.debug("Ignoring %s in update of employee %s", key, employee_id)
                continue
            changes[key] = value
        self.validator.before_update(changes)

        violations = self.validator.validate_patch(changes)
        if violations:
            raise EmployeeValidationError(violations)

        current = await self.get(employee_id)
        if current is None:
            return None

        document = current.model_dump(by_alias=True)
        for key, value in changes.items():
            document[document_field_name(key)] = value

        record = self.validator.ensure_valid(document)
        logger.debug("Employee %s has been validated (but not saved yet)", record.id)

        try:
            saved = await container.replace_item(item=employee_id, body=record.to_document())
        except CosmosResourceExistsError as err:
            logger.info("Rejected update of employee %s: email %s already exists", employee_id, record.email)
            raise _duplicate_email() from err

        logger.info("Employee %s has been saved", record.id)
        return self._load(saved)

    async def find_by_first_name(self, pattern: str) -> AsyncIterator[EmployeeRecord]:
        """Yield employees whose first name matches ``pattern``, case-insensitively.

        Every iteration issues a fresh query, so it always reflects the
        container's current contents.
        """
        container = self._require_container()
        query, parameters = build_query(by_kind(), by_first_name(pattern))

        async for item in container.query_items(
            query=query,
            parameters=parameters,
            partition_key=EMPLOYEE_KIND,
        ):
            yield self._load(item)

    async def check_connection(self) -> bool:
        if not self.container:
            return False
        try:
            query = "SELECT VALUE COUNT(1) FROM c"
            async for _ in self.container.query_items(query=query, partition_key=EMPLOYEE_KIND):
                return True
            return True
        except Exception:
            logger.exception("Cosmos DB connection check failed")
            return False
