import pytest

from src.core.config import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(gemini_api_key="test-key", fetch_max_attempts=1, _env_file=None)
