import logging

import pytest

from azorch.client import InMemoryAzkabanClient
from azorch.config import AzorchConfig
from azorch.producer import AzkabanSpecProducer
from azorch.schemas import JobSpec

SERVER_URL = "https://azkaban.example.com/"
USERNAME = "gaas"
PASSWORD = "s3cret"


@pytest.fixture(autouse=True)
def isolated_home(monkeypatch, tmp_path):
    # Never read the developer's real config or password
    monkeypatch.setenv("AZORCH_HOME", str(tmp_path / "azorch_home"))
    monkeypatch.delenv("AZKABAN_PASSWORD", raising=False)


@pytest.fixture(autouse=True)
def reset_azorch_logger():
    yield
    logger = logging.getLogger("azorch")
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def test_config():
    return AzorchConfig(
        username=USERNAME,
        password=PASSWORD,
        server_url=SERVER_URL,
        name_prefix="",
    )


@pytest.fixture
def azkaban():
    return InMemoryAzkabanClient(users={USERNAME: PASSWORD})


@pytest.fixture
def producer(test_config, azkaban):
    with AzkabanSpecProducer(test_config, client=azkaban) as p:
        yield p


@pytest.fixture
def make_spec():
    def _make_spec(uri="etl-job-1", overwrite=None, **config):
        bag = {"command": "echo hello", **config}
        if overwrite is not None:
            bag["azkaban.project.overwrite_if_exists"] = overwrite
        return JobSpec(uri=uri, version="1", description="ETL job", config=bag)
    return _make_spec
