"""Pytest fixtures for testing"""

import asyncio
from typing import Any, Dict, List, Tuple

import pytest
from fastapi.testclient import TestClient

from credit_relay.api.dependencies import get_blob_store, get_chain_gateway
from credit_relay.api.main import create_app
from credit_relay.config import Settings
from credit_relay.domain.exceptions import NotFound
from credit_relay.infrastructure.clients.abis import ContractName
from credit_relay.infrastructure.clients.chain import ChainGateway
from credit_relay.services.relay import RelayService

SIGNER = "0x" + "11" * 20
BORROWER = "0x" + "22" * 20
INVESTOR = "0x" + "33" * 20

CREDIT_POOL = "0x" + "aa" * 20
TRANCHE_MANAGER = "0x" + "bb" * 20
ACCESS_CONTROLLER = "0x" + "cc" * 20
USDC = "0x" + "dd" * 20
SENIOR_LP_TOKEN = "0x" + "ee" * 20
JUNIOR_LP_TOKEN = "0x" + "ff" * 20


class StubTransport:
    """Records every contract call; answers reads from a canned table"""

    def __init__(self, responses: Dict[Tuple[ContractName, str], Any] | None = None):
        self.responses = dict(responses or {})
        self.calls: List[Tuple[ContractName, str, tuple]] = []
        self.sent: List[Tuple[ContractName, str, tuple]] = []
        self.receipt_status = 1
        self.never_confirm = False
        self.failure: Exception | None = None

    async def signer_address(self) -> str:
        return SIGNER

    async def call(self, name: ContractName, address: str, function: str, *args: Any) -> Any:
        self.calls.append((name, function, args))
        if self.failure is not None:
            raise self.failure
        value = self.responses[(name, function)]
        return value(*args) if callable(value) else value

    async def send(self, name: ContractName, address: str, function: str, *args: Any) -> str:
        self.sent.append((name, function, args))
        if self.failure is not None:
            raise self.failure
        return "0x" + f"{len(self.sent):064x}"

    async def wait_for_receipt(self, tx_hash: str) -> Dict[str, Any]:
        if self.never_confirm:
            await asyncio.Event().wait()
        return {"transactionHash": tx_hash, "status": self.receipt_status}


class FakeBlobStore:
    """In-memory stand-in for the pinning service"""

    def __init__(self):
        self.blobs: Dict[str, Any] = {}
        self.kinds: List[str] = []
        self.failure: Exception | None = None

    async def put(self, blob: Dict[str, Any], kind: str = "loan_application") -> str:
        if self.failure is not None:
            raise self.failure
        reference = f"Qm{len(self.blobs):044d}"
        self.blobs[reference] = blob
        self.kinds.append(kind)
        return reference

    async def get(self, reference: str) -> Any:
        if reference not in self.blobs:
            raise NotFound(f"No content for reference {reference}")
        return self.blobs[reference]


@pytest.fixture
def test_settings() -> Settings:
    """Fully configured settings with a short confirmation bound"""
    return Settings(
        _env_file=None,
        rpc_url="http://localhost:8545",
        private_key="0x" + "0" * 63 + "1",
        credit_pool_address=CREDIT_POOL,
        tranche_manager_address=TRANCHE_MANAGER,
        access_controller_address=ACCESS_CONTROLLER,
        usdc_address=USDC,
        senior_lp_token_address=SENIOR_LP_TOKEN,
        junior_lp_token_address=JUNIOR_LP_TOKEN,
        pinata_api_key="key",
        pinata_secret_api_key="secret",
        chain_confirmation_timeout_seconds=0.05,
    )


@pytest.fixture
def transport() -> StubTransport:
    return StubTransport()


@pytest.fixture
def gateway(transport: StubTransport, test_settings: Settings) -> ChainGateway:
    return ChainGateway(transport, test_settings)


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def relay(gateway: ChainGateway, blob_store: FakeBlobStore) -> RelayService:
    return RelayService(gateway, blob_store, request_id="test")


@pytest.fixture
def client(gateway: ChainGateway, blob_store: FakeBlobStore) -> TestClient:
    """Create FastAPI test client backed by the stub transport and fake store"""
    app = create_app()
    app.dependency_overrides[get_chain_gateway] = lambda: gateway
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    return TestClient(app)
