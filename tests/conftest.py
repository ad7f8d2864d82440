"""
Shared fixtures for the server loop tests.
"""

import pytest
from prometheus_client import REGISTRY

from api_server.config import ENV_CONFIG_PATH, ENV_OVERRIDES


class RecordingWait:
    """Stand-in for the timed wait: records intervals, never sleeps"""

    def __init__(self, stop_after=None):
        self.calls = []
        self.stop_after = stop_after

    def __call__(self, interval):
        self.calls.append(interval)
        return self.stop_after is not None and len(self.calls) >= self.stop_after


@pytest.fixture
def recording_wait():
    return RecordingWait()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep API_SERVER_* variables from the outer environment out of tests"""
    for var in list(ENV_OVERRIDES) + [ENV_CONFIG_PATH]:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def metric():
    def _read(name):
        return REGISTRY.get_sample_value(name) or 0.0
    return _read


@pytest.fixture
def fast_config_file(tmp_path):
    """YAML config with a zero-second interval so loops finish instantly"""
    path = tmp_path / "server.yaml"
    path.write_text("interval_min_seconds: 0\ninterval_max_seconds: 0\n")
    return str(path)
