import asyncio
import copy
from typing import Any, Dict, List, Optional

import pytest
from azure.cosmos import exceptions

from teambot_store.database import BotDataProvider

STORE_CONFIG = {
    "CosmosDBEndpointUrl": "https://fake-account.documents.azure.com:443/",
    "CosmosDBDatabaseName": "botdb",
    "CosmosCollectionTeams": "teams",
    "CosmosCollectionUsers": "users",
}


def shared_offer_disabled_error() -> exceptions.CosmosHttpResponseError:
    return exceptions.CosmosHttpResponseError(
        status_code=400,
        message="Message: {\"Errors\":[\"SharedOffer is Disabled for your account.\"]}",
    )


def not_found_error() -> exceptions.CosmosResourceNotFoundError:
    return exceptions.CosmosResourceNotFoundError(
        status_code=404, message="Entity with the specified id does not exist in the system."
    )


class RecordingTelemetry:
    def __init__(self):
        self.traces: List[tuple] = []
        self.exceptions: List[BaseException] = []

    def track_trace(self, message, severity=None):
        self.traces.append((message, severity))

    def track_exception(self, error):
        self.exceptions.append(error)

    @property
    def messages(self) -> List[str]:
        return [message for message, _ in self.traces]


class DictConfig:
    def __init__(self, values: Dict[str, Optional[str]]):
        self.values = values

    def get_config(self, name):
        return self.values.get(name)


class DictSecrets:
    def __init__(self, values: Dict[str, Optional[str]]):
        self.values = values

    def get_secret(self, name):
        return self.values.get(name)


class FakeContainer:
    """In-memory container that pages query results like the SDK does."""

    def __init__(self, id: str, page_size: int = 2):
        self.id = id
        self.page_size = page_size
        self.items: Dict[str, Dict[str, Any]] = {}
        self.error: Optional[Exception] = None
        self.fail_after_pages: Optional[int] = None
        self.queries: List[tuple] = []

    def _raise_if_failing(self):
        if self.error is not None:
            raise self.error

    async def upsert_item(self, body, **kwargs):
        await asyncio.sleep(0)
        self._raise_if_failing()
        self.items[body["id"]] = copy.deepcopy(body)
        return copy.deepcopy(body)

    async def delete_item(self, item, partition_key, **kwargs):
        await asyncio.sleep(0)
        self._raise_if_failing()
        assert item == partition_key
        if item not in self.items:
            raise not_found_error()
        del self.items[item]

    async def read_item(self, item, partition_key, **kwargs):
        await asyncio.sleep(0)
        self._raise_if_failing()
        assert item == partition_key
        if item not in self.items:
            raise not_found_error()
        stored = copy.deepcopy(self.items[item])
        stored.update({"_rid": "abc==", "_etag": '"0000"', "_ts": 1700000000})
        return stored

    def query_items(self, query, max_item_count=None, **kwargs):
        self.queries.append((query, max_item_count))
        if "c.optedIn" in query:
            rows = [{"id": doc["id"], "optedIn": doc.get("optedIn")} for doc in self.items.values()]
        else:
            rows = [copy.deepcopy(doc) for doc in self.items.values()]
        return FakeItemPaged(self, rows)


class FakeItemPaged:
    def __init__(self, container: FakeContainer, rows: List[Dict[str, Any]]):
        self.container = container
        self.rows = rows

    def by_page(self, continuation_token=None):
        return self._pages()

    async def _pages(self):
        container = self.container
        container._raise_if_failing()
        size = container.page_size
        for number, start in enumerate(range(0, len(self.rows), size)):
            if container.fail_after_pages is not None and number >= container.fail_after_pages:
                raise exceptions.CosmosHttpResponseError(status_code=503, message="Service is unavailable.")
            await asyncio.sleep(0)
            yield _page(self.rows[start:start + size])


async def _page(rows):
    for row in rows:
        yield row


class FakeDatabase:
    def __init__(self, id: str):
        self.id = id
        self.containers: Dict[str, FakeContainer] = {}
        self.container_calls: List[tuple] = []

    async def create_container_if_not_exists(self, id, partition_key, offer_throughput=None, **kwargs):
        await asyncio.sleep(0)
        self.container_calls.append((id, partition_key.path, offer_throughput))
        return self.containers.setdefault(id, FakeContainer(id))


class FakeCosmosClient:
    def __init__(self):
        self.endpoint = None
        self.credential = None
        self.databases: Dict[str, FakeDatabase] = {}
        self.database_calls: List[tuple] = []
        self.database_errors: List[Exception] = []
        self.closed = False

    async def create_database_if_not_exists(self, id, offer_throughput=None, **kwargs):
        self.database_calls.append((id, offer_throughput))
        await asyncio.sleep(0)
        if self.database_errors:
            raise self.database_errors.pop(0)
        return self.databases.setdefault(id, FakeDatabase(id))

    async def close(self):
        self.closed = True

    def container(self, name: str) -> FakeContainer:
        return self.databases[STORE_CONFIG["CosmosDBDatabaseName"]].containers[name]


class FakeClientFactory:
    """Stands in for the CosmosClient constructor and counts connections."""

    def __init__(self, client: Optional[FakeCosmosClient] = None):
        self.client = client or FakeCosmosClient()
        self.calls = 0

    def __call__(self, endpoint, credential=None, **kwargs):
        self.calls += 1
        self.client.endpoint = endpoint
        self.client.credential = credential
        return self.client


@pytest.fixture
def telemetry():
    return RecordingTelemetry()


@pytest.fixture
def client_factory():
    return FakeClientFactory()


@pytest.fixture
def fake_client(client_factory):
    return client_factory.client


@pytest.fixture
def make_provider(telemetry, client_factory):
    def _make(config=None, secrets=None):
        return BotDataProvider(
            telemetry=telemetry,
            secrets=DictSecrets(secrets if secrets is not None else {"CosmosDBKey": "secret-key"}),
            config=DictConfig(config if config is not None else dict(STORE_CONFIG)),
            client_factory=client_factory,
        )

    return _make


@pytest.fixture
def provider(make_provider):
    return make_provider()
