from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from digital_tick.config import Settings
from digital_tick.exceptions import CollaboratorError

TEST_ADMIN_KEY = "test-admin-key-for-testing-only"


class StubCompletionClient:
    """Completion client that records calls instead of hitting a provider."""

    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[dict] = []
        self.error = error

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def complete(self, messages, *, max_tokens, temperature) -> str:
        self.calls.append(
            {"messages": messages, "max_tokens": max_tokens, "temperature": temperature}
        )
        if self.error is not None:
            raise self.error
        return f"reply {len(self.calls)}"


class FakeClock:
    """Settable clock returning timezone-aware UTC datetimes."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from the environment, writing under tmp_path."""
    return Settings(
        _env_file=None,
        app_env="test",
        data_dir=tmp_path / "data",
        model="gpt-4o-mini",
        openai_api_key="sk-test",
        admin_key=TEST_ADMIN_KEY,
        retention_interval_seconds=3600.0,
    )


@pytest.fixture
def stub_completion() -> StubCompletionClient:
    return StubCompletionClient()


@pytest.fixture
def failing_completion() -> StubCompletionClient:
    return StubCompletionClient(error=CollaboratorError("upstream timed out", "openai"))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client(settings: Settings, stub_completion: StubCompletionClient) -> TestClient:
    """
    Create a FastAPI test client backed by a stub completion client.

    Snapshots are written under tmp_path; leaving the context drains them.
    """
    from digital_tick.main import create_app

    app = create_app(settings=settings, completion_client=stub_completion)

    with TestClient(app) as client:
        yield client
