import os

import pytest

from commitgate.observability.metrics import reset as reset_metrics


def pytest_configure(config):
    os.environ.setdefault("COMMITGATE_ITS_NAME", "its")
    os.environ.setdefault("COMMITGATE_ITS_TIMEOUT_SECONDS", "5")


@pytest.fixture(autouse=True)
def _reset_metrics():
    reset_metrics()
    yield
    reset_metrics()
