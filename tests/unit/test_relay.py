"""Unit tests for relay operations"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from eth_utils import to_checksum_address

from credit_relay.domain.exceptions import NotFound, Unauthorized, ValidationError
from credit_relay.domain.models import Role, SpenderContract, TrancheKind
from credit_relay.infrastructure.clients.abis import ContractName
from credit_relay.infrastructure.clients.chain import ChainGateway
from credit_relay.services.relay import RelayService
from tests.conftest import BORROWER, CREDIT_POOL, INVESTOR, FakeBlobStore, StubTransport


@pytest.fixture
def invoice() -> dict:
    return {
        "invoiceNumber": "INV-2024-001",
        "amount": 1200.5,
        "dueDate": "2025-06-30",
        "description": "Consulting services",
        "counterparty": "Acme Corp",
    }


@pytest.fixture
def approval() -> dict:
    return {
        "borrower_address": BORROWER,
        "valuation": 1000,
        "principal": 800,
        "interest_rate": 12,
        "duration_seconds": 2_592_000,
        "metadata_uri": "QmInvoice",
    }


async def test_submit_loan_application_pins_invoice_fields_at_top_level(relay: RelayService, blob_store: FakeBlobStore, invoice):
    receipt = await relay.submit_loan_application(BORROWER, invoice, {"email": "ops@acme.test"})

    assert receipt.application_id.isdigit()
    pinned = blob_store.blobs[receipt.metadata_uri]
    assert pinned == invoice
    # contact details are not published
    assert "contactInfo" not in pinned
    assert "email" not in pinned
    assert blob_store.kinds == ["loan_application"]


async def test_submit_loan_application_requires_borrower(relay: RelayService, blob_store: FakeBlobStore, invoice):
    with pytest.raises(ValidationError, match="borrower_address"):
        await relay.submit_loan_application(None, invoice)

    assert blob_store.blobs == {}


async def test_submit_loan_application_rejects_malformed_invoice(relay: RelayService, blob_store: FakeBlobStore):
    with pytest.raises(ValidationError, match="invoiceData"):
        await relay.submit_loan_application(BORROWER, {"invoiceNumber": "INV-1"})

    assert blob_store.blobs == {}


async def test_approve_missing_duration_never_calls_gateway(blob_store: FakeBlobStore, approval):
    gateway = AsyncMock(spec=ChainGateway)
    relay = RelayService(gateway, blob_store)
    approval["duration_seconds"] = None

    with pytest.raises(ValidationError, match="duration_seconds"):
        await relay.approve_loan_application(**approval)

    assert gateway.issue_loan.await_count == 0
    assert gateway.method_calls == []


async def test_approve_delegates_to_issue_loan(blob_store: FakeBlobStore, approval):
    gateway = AsyncMock(spec=ChainGateway)
    gateway.issue_loan.return_value = "0xabc"
    relay = RelayService(gateway, blob_store)

    tx_hash = await relay.approve_loan_application(**approval, notes="verified invoice")

    assert tx_hash == "0xabc"
    gateway.issue_loan.assert_awaited_once_with(BORROWER, 1000, 800, 12, 2_592_000, "QmInvoice")


async def test_approve_propagates_unauthorized(relay: RelayService, transport: StubTransport, approval):
    """Gateway failures reach the caller unchanged"""
    transport.responses[(ContractName.ACCESS_CONTROLLER, "isUnderwriter")] = False

    with pytest.raises(Unauthorized):
        await relay.approve_loan_application(**approval)

    assert transport.sent == []


async def test_fetch_loan_returns_decimals(relay: RelayService, transport: StubTransport):
    transport.responses[(ContractName.CREDIT_POOL, "getLoan")] = (
        "0xABC",
        800_000_000,
        1_000_000_000,
        12,
        1_750_000_000,
        False,
        "QmInvoice",
    )

    loan = await relay.fetch_loan(1)

    assert float(loan.principal) == 800.0
    assert float(loan.valuation) == 1000.0


async def test_authorize_then_settle_repayment(relay: RelayService, transport: StubTransport):
    """Approve-then-act: the allowance for the exact repayment is granted before repayLoan"""
    transport.responses[(ContractName.CREDIT_POOL, "calculateRepaymentAmount")] = 1_120_000_000

    await relay.authorize_repayment(7)
    await relay.settle_loan(7)

    assert transport.sent == [
        (ContractName.USDC, "approve", (to_checksum_address(CREDIT_POOL), 1_120_000_000)),
        (ContractName.CREDIT_POOL, "repayLoan", (7,)),
    ]


async def test_settle_loan_does_not_approve(relay: RelayService, transport: StubTransport):
    await relay.settle_loan(7)

    assert [function for _, function, _ in transport.sent] == ["repayLoan"]


@pytest.mark.parametrize("loan_id", [-1, "7", True, None])
async def test_invalid_loan_id(relay: RelayService, transport: StubTransport, loan_id):
    with pytest.raises(ValidationError):
        await relay.settle_loan(loan_id)

    assert transport.sent == []


async def test_authorize_deposit_then_deposit(relay: RelayService, transport: StubTransport):
    await relay.authorize_deposit(100, INVESTOR)
    await relay.deposit_to_tranche(100, TrancheKind.SENIOR, INVESTOR)

    assert [function for _, function, _ in transport.sent] == ["approve", "depositToSenior"]
    assert transport.sent[1][2] == (100_000_000,)


async def test_deposit_requires_investor(relay: RelayService, transport: StubTransport):
    with pytest.raises(ValidationError, match="investor_address"):
        await relay.deposit_to_tranche(100, TrancheKind.JUNIOR, None)

    assert transport.sent == []


async def test_withdraw_accepts_kind_value(relay: RelayService, transport: StubTransport):
    await relay.withdraw_from_tranche(Decimal("2"), "junior", INVESTOR)

    assert transport.sent == [(ContractName.TRANCHE_MANAGER, "withdrawFromJunior", (2 * 10**18,))]


async def test_unknown_tranche_kind(relay: RelayService):
    with pytest.raises(ValidationError):
        await relay.fetch_tranche_snapshot("mezzanine")


async def test_check_role(relay: RelayService, transport: StubTransport):
    transport.responses[(ContractName.ACCESS_CONTROLLER, "isUnderwriter")] = True

    assert await relay.check_role(INVESTOR, Role.UNDERWRITER) is True
    assert await relay.check_role(INVESTOR, "underwriter") is True

    with pytest.raises(ValidationError):
        await relay.check_role(INVESTOR, "auditor")


async def test_read_passthroughs(relay: RelayService, transport: StubTransport):
    transport.responses.update(
        {
            (ContractName.CREDIT_POOL, "loanCounter"): 4,
            (ContractName.CREDIT_POOL, "getPoolBalance"): 2_500_000_000,
            (ContractName.TRANCHE_MANAGER, "getTotalValueLocked"): 9_000_000_000,
            (ContractName.USDC, "balanceOf"): 1_500_000,
            (ContractName.USDC, "allowance"): 0,
        }
    )

    assert await relay.fetch_loan_count() == 4
    assert await relay.fetch_pool_balance() == Decimal("2500")
    assert await relay.fetch_total_value_locked() == Decimal("9000")
    assert await relay.fetch_stable_balance(INVESTOR) == Decimal("1.5")
    assert await relay.fetch_allowance(INVESTOR, SpenderContract.TRANCHE) == Decimal("0")


async def test_fetch_blob(relay: RelayService, blob_store: FakeBlobStore, invoice):
    receipt = await relay.submit_loan_application(BORROWER, invoice)

    blob = await relay.fetch_blob(receipt.metadata_uri)
    assert blob["counterparty"] == "Acme Corp"

    with pytest.raises(NotFound):
        await relay.fetch_blob("QmMissing")
