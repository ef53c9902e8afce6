import random

import pytest

from distirc.config import CoreConfig
from distirc.logs.status_sink import _uninstall_status_sink
from distirc.model import BufferRegistry
from distirc.session import ReconnectBackoff, SessionWorker
from tests.fixtures.mock_core import MockCore, Script


@pytest.fixture
def mock_core():
    cores: list[MockCore] = []

    def _factory(*scripts: Script) -> MockCore:
        core = MockCore(*scripts)
        cores.append(core)
        return core

    yield _factory
    for core in cores:
        core.close()


@pytest.fixture
def registry() -> BufferRegistry:
    return BufferRegistry()


@pytest.fixture
def make_worker(registry):
    workers: list[SessionWorker] = []

    def _factory(port: int, **overrides) -> SessionWorker:
        overrides.setdefault(
            "backoff", ReconnectBackoff(base=0.2, maximum=1.0, rng=random.Random(7))
        )
        overrides.setdefault("connect_timeout", 2.0)
        overrides.setdefault("auth_timeout", 2.0)
        overrides.setdefault("keepalive_interval", 30.0)
        config = CoreConfig(host="127.0.0.1", port=port, user="alice", password="hunter2")
        worker = SessionWorker(config, registry, **overrides)
        workers.append(worker)
        return worker

    yield _factory
    for worker in workers:
        worker.stop(timeout=5.0)


@pytest.fixture
def status_sink_cleanup():
    yield
    _uninstall_status_sink()


