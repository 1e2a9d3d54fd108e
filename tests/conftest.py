"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from umonitor.app.config import MonitorConfig
from umonitor.app.fetcher import FetchError
from umonitor.app.models import TargetRecord, TransitionInfo


def make_record(name, state="Online", time=0, src="Offline", dst="Online", message=None):
    return TargetRecord(
        name=name,
        state=state,
        transition=TransitionInfo(src=src, dst=dst, message=message),
        time=time,
    )


class FakeFetcher:
    """Returns queued results in order; an exception in the queue is raised."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    async def fetch(self):
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


class RecordingAdapter:
    def __init__(self):
        self.signals = []

    def apply(self, signal):
        self.signals.append(signal)


@pytest.fixture
def config():
    return MonitorConfig(status_url="http://monitor.test/api/status")


@pytest.fixture
def records():
    return [
        make_record("db1", "Online", time=100, message="ok"),
        make_record("db2", "Offline", time=300, src="Online", dst="Offline", message="timeout"),
        make_record("web1", "Online", time=200, message="recovered"),
    ]


@pytest.fixture
def fetch_error():
    return FetchError("ConnectError: connection refused")
