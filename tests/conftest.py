import pytest

from smartfile.config.environment import Environment


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep the user's settings.yaml and smartfile env vars out of tests."""
    for key in ("SMARTFILE_ENCODING", "SMARTFILE_DEFAULT_MODE", "ENV"):
        monkeypatch.delenv(key, raising=False)
    Environment.settings = {}
    yield
    Environment.clear_settings()
