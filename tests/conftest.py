import pytest

from agentlab.core.settings import Settings


@pytest.fixture(autouse=True)
def reset_settings():
    Settings.reset()
    yield
    Settings.reset()
