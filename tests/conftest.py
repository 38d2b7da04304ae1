import pytest

from script_dispatch.core.config import Settings
from script_dispatch.core.crypto import hash_password

from .factories import OPERATOR_NAME, OPERATOR_PASSWORD


@pytest.fixture(scope="session")
def operator_hash() -> str:
    return hash_password(OPERATOR_PASSWORD)


@pytest.fixture
def test_settings(operator_hash) -> Settings:
    return Settings(
        environment="test",
        database={"url": "sqlite+aiosqlite:///:memory:"},
        adminservice={"base_url": "https://cm.test/AdminService"},
        security={"secret_key": "test-secret-key", "operators": {OPERATOR_NAME: operator_hash}},
        execution={"max_concurrent_status_fetches": 2},
    )
