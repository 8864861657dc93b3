import pytest

from research_assistant.core.config import Settings

from tests.fixtures.factories import make_settings
from tests.fixtures.upstream_payloads import FakeUpstream


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()
