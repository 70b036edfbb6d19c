import pytest
from fastapi.testclient import TestClient

from adapters.local.memory_credential_store import InMemoryCredentialStore
from api import create_app
from config import get_config
from domain.models import Credential
from tests.fakes import FakeUsageFetcher, RecordingBalanceSink


@pytest.fixture
def credentials():
    return [
        Credential(id="a", secret="fk-alpha-0000001"),
        Credential(id="b", secret="fk-bravo-0000002"),
    ]


@pytest.fixture
def store(credentials):
    return InMemoryCredentialStore(credentials)


@pytest.fixture
def sink():
    return RecordingBalanceSink()


@pytest.fixture
def fetcher():
    # a: 60 left, b: over-used by 10
    return FakeUsageFetcher({"a": (100, 40), "b": (50, 60)})


@pytest.fixture
def client(store, sink, fetcher):
    app = create_app(
        cfg=get_config(),
        adapters={"credential_store": store, "balance_sink": sink},
        fetcher=fetcher,
    )
    with TestClient(app) as test_client:
        yield test_client
