"""Pytest fixtures: in-memory ObjectStorage, fake Remuxer, app with mocked proxy, moto S3."""

import os

import pytest
from fastapi.testclient import TestClient

from remux_proxy import RemuxCoordinator, RemuxProxy
from remux_proxy.main import app
from tests.helpers import SOURCE_BYTES, SOURCE_KEY, FakeRemuxer, InMemoryObjectStorage


@pytest.fixture
def storage() -> InMemoryObjectStorage:
    s = InMemoryObjectStorage()
    s.put(SOURCE_KEY, SOURCE_BYTES)
    return s


@pytest.fixture
def remuxer() -> FakeRemuxer:
    return FakeRemuxer()


@pytest.fixture
def coordinator(storage: InMemoryObjectStorage, remuxer: FakeRemuxer, tmp_path) -> RemuxCoordinator:
    return RemuxCoordinator(storage, remuxer, scratch_dir=str(tmp_path))


@pytest.fixture
def proxy(storage: InMemoryObjectStorage, coordinator: RemuxCoordinator) -> RemuxProxy:
    return RemuxProxy(storage, coordinator)


@pytest.fixture
def client(proxy: RemuxProxy):
    """TestClient for the app with app.state.proxy set to the in-memory proxy."""
    app.state.proxy = proxy
    yield TestClient(app)
    del app.state.proxy


@pytest.fixture(scope="function")
def aws_credentials():
    """Set fake AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def s3_bucket(aws_credentials):
    """Create a media bucket under moto and return its name."""
    import boto3
    from moto import mock_aws

    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket="test-mediawiki")
        yield "test-mediawiki"
