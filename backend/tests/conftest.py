from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.services.employee_store import EmployeeStore
from app.services.employee_validator import EmployeeValidator

FIXED_NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

SAMPLE_EMPLOYEE: dict = {
    "firstName": "Jo",
    "lastName": "Lee",
    "email": "jo.lee@example.com",
    "gender": "female",
    "city": "Ottawa",
    "designation": "Engineer",
    "salary": 50000,
}


class FakeClock:
    """Returns FIXED_NOW, then moves forward one minute per call."""

    def __init__(self, start: datetime = FIXED_NOW) -> None:
        self.current = start
        self.calls = 0

    def __call__(self) -> datetime:
        value = self.current
        self.calls += 1
        self.current = self.current + timedelta(minutes=1)
        return value


@pytest.fixture
def employee_data() -> dict:
    return dict(SAMPLE_EMPLOYEE)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def validator(clock) -> EmployeeValidator:
    return EmployeeValidator(clock=clock)


@pytest.fixture
def mock_container():
    container = MagicMock()
    container.create_item = AsyncMock(side_effect=lambda body: dict(body))
    container.replace_item = AsyncMock(side_effect=lambda item, body: dict(body))
    container.read_item = AsyncMock()
    return container


@pytest.fixture
def store(validator, mock_container) -> EmployeeStore:
    employee_store = EmployeeStore(validator=validator)
    employee_store.container = mock_container
    employee_store.initialized = True
    return employee_store
