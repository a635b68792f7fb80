"""Shared pytest fixtures for the amexecutor test suite.

Every test that needs a handlers configuration writes its own YAML file to
a temporary directory, so tests are isolated and repeatable.
"""

import pytest
import yaml
from fastapi.testclient import TestClient

from amexecutor.config import Settings
from amexecutor.main import create_app


@pytest.fixture()
def write_config(tmp_path):
    """Return a function writing a handlers mapping to a YAML file.

    The function returns the path of the written file.
    """

    def _write(handlers: dict) -> str:
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"handlers": handlers}), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture()
def make_client(write_config):
    """Return a factory for a :class:`TestClient` bound to given handlers.

    Keyword arguments are passed to :class:`Settings`; ``debug`` defaults to
    on so no command runs unless a test asks for it.  Clients are closed
    when the test finishes.
    """
    clients = []

    def _make(handlers: dict, **settings) -> TestClient:
        settings.setdefault("debug", True)
        app = create_app(Settings(handlers_config=write_config(handlers), **settings))
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)
