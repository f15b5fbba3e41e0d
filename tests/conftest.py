"""Shared fixtures: memory and SQL stores, fake payment network, app client."""
from decimal import Decimal

import pytest
import pytest_asyncio
from dependency_injector import providers
from fastapi.testclient import TestClient

from community_stream.config import Settings
from community_stream.container import init_container
from community_stream.core.exceptions import PaymentError
from community_stream.db.sessions import create_db_engine, init_db
from community_stream.main import create_app
from community_stream.providers.payments import (PaymentGatewayABC,
                                                 PaymentResult, PaymentStatus)
from community_stream.providers.signatures import TrustingSignatureVerifier
from community_stream.realtime import SessionRegistry
from community_stream.services import (AccessEvaluator, CommunityStatsService,
                                       MessageBroadcaster, StreamService,
                                       UserService)
from community_stream.store import EntityStore, MemoryStore, SqlStore

COMMUNITY_WALLET = "0x742d35cc6634c0532925a3b844bc9e7595f6e456"
ALICE = "0xAbCdEf0123456789aBcDeF0123456789AbCdEf01"
BOB = "0x1111111111111111111111111111111111111111"
CAROL = "0x2222222222222222222222222222222222222222"


class FakePaymentGateway(PaymentGatewayABC):
    """Records payments instead of calling the network."""

    def __init__(self) -> None:
        self.payments: list[tuple[Decimal, str]] = []
        self.statuses: dict[str, PaymentStatus] = {}
        self.fail_next = False

    async def initiate_payment(self, amount: Decimal, destination: str) -> PaymentResult:
        if self.fail_next:
            self.fail_next = False
            raise PaymentError("Insufficient balance")
        self.payments.append((amount, destination))
        payment_id = f"pay-{len(self.payments)}"
        self.statuses[payment_id] = PaymentStatus.PENDING
        return PaymentResult(
            payment_id=payment_id,
            status=PaymentStatus.PENDING,
            transaction_hash=f"0xhash{len(self.payments)}",
        )

    async def check_status(self, payment_id: str) -> PaymentStatus:
        return self.statuses.get(payment_id, PaymentStatus.FAILED)


@pytest.fixture
def settings() -> Settings:
    return Settings(community_address=COMMUNITY_WALLET)


@pytest.fixture(params=["memory", "sql"])
def store(request) -> EntityStore:
    """Every store-backed test runs against both backends."""
    if request.param == "memory":
        yield MemoryStore()
        return
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield SqlStore(engine)
    engine.dispose()


@pytest.fixture
def payments() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def stats(store) -> CommunityStatsService:
    return CommunityStatsService(store)


@pytest.fixture
def access(store) -> AccessEvaluator:
    return AccessEvaluator(store)


@pytest.fixture
def users(store, stats) -> UserService:
    return UserService(store, stats, TrustingSignatureVerifier())


@pytest.fixture
def streams(store, stats, payments) -> StreamService:
    return StreamService(store, stats, payments, community_address=COMMUNITY_WALLET)


@pytest.fixture
def broadcaster(store, registry, access) -> MessageBroadcaster:
    return MessageBroadcaster(store, registry, access)


@pytest_asyncio.fixture
async def alice(users):
    return await users.connect(ALICE, "sig", "Join the community")


@pytest_asyncio.fixture
async def streaming_alice(alice, streams):
    """Alice with one active stream, so she may chat."""
    await streams.create_stream(alice.id, "0.0001", "100")
    return alice


@pytest.fixture
def container(settings, store, payments):
    container = init_container(settings)
    container.store.override(providers.Object(store))
    container.payments.override(providers.Object(payments))
    yield container
    container.reset_override()


@pytest.fixture
def client(container):
    """TestClient running the app lifespan; one event loop for all requests."""
    with TestClient(create_app(container)) as test_client:
        yield test_client


def connect(client: TestClient, address: str) -> dict:
    response = client.post(
        "/api/auth/connect",
        json={"address": address, "signature": "sig", "message": "Join the community"},
    )
    assert response.status_code == 200, response.text
    return response.json()["user"]


def open_stream(client: TestClient, user_id: str, rate: str = "0.0001", total: str = "100") -> dict:
    response = client.post(
        "/api/streams",
        json={"userId": user_id, "ratePerSecond": rate, "totalAmount": total},
    )
    assert response.status_code == 200, response.text
    return response.json()["stream"]
