"""Relay operations: validate a request, call the metadata store and/or the chain, shape the result"""

import functools
import time
from decimal import Decimal
from typing import Any, Optional

import pydantic

from credit_relay.domain.exceptions import ValidationError
from credit_relay.domain.models import (
    ApplicationReceipt,
    ContactInfo,
    InvoiceData,
    LoanRecord,
    Role,
    SpenderContract,
    TrancheKind,
    TrancheSnapshot,
)
from credit_relay.infrastructure.clients.blob_store import BlobStoreClient
from credit_relay.infrastructure.clients.chain import ChainGateway
from credit_relay.infrastructure.observability.logging import log_relay_operation
from credit_relay.infrastructure.observability.metrics import record_relay_operation
from credit_relay.utils.time_utils import epoch_millis


def _require(**fields: Any) -> None:
    missing = [name for name, value in fields.items() if value is None or value == ""]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def _loan_id(loan_id: Any) -> int:
    if isinstance(loan_id, bool) or not isinstance(loan_id, int) or loan_id < 0:
        raise ValidationError(f"Loan id must be a non-negative integer, got {loan_id!r}")
    return loan_id


def _tranche_kind(kind: Any) -> TrancheKind:
    try:
        return TrancheKind(kind)
    except ValueError as e:
        raise ValidationError(f"Unknown tranche {kind!r}") from e


def _role(role_name: Any) -> Role:
    try:
        return Role(role_name)
    except ValueError as e:
        raise ValidationError(f"Unknown role {role_name!r}") from e


def _spender(for_contract: Any) -> SpenderContract:
    try:
        return SpenderContract(for_contract)
    except ValueError as e:
        raise ValidationError(f"Unknown spender contract {for_contract!r}") from e


def _parse(model: type, data: Any, field: str):
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Malformed {field}: {e.error_count()} invalid value(s)") from e


def relay_operation(func):
    """Count and log each call; failures propagate unchanged"""

    @functools.wraps(func)
    async def wrapper(self: "RelayService", *args: Any, **kwargs: Any):
        start_time = time.time()
        try:
            result = await func(self, *args, **kwargs)
        except Exception as e:
            record_relay_operation(func.__name__, e)
            log_relay_operation(
                self.request_id, func.__name__, type(e).__name__, (time.time() - start_time) * 1000
            )
            raise
        record_relay_operation(func.__name__)
        log_relay_operation(self.request_id, func.__name__, "success", (time.time() - start_time) * 1000)
        return result

    return wrapper


class RelayService:
    """
    One method per supported action.

    Validation here is shallow (presence and type). Business rules such as
    principal <= valuation belong to the contracts. Gateway and metadata store
    errors are not caught.

    Two actions are approve-then-act: `authorize_repayment` must succeed before
    `settle_loan` for the same loan, and `authorize_deposit` must cover the
    amount before `deposit_to_tranche`. The relay does not track this; callers
    sequence the calls and the contracts reject out-of-order ones.
    """

    def __init__(self, gateway: ChainGateway, blob_store: BlobStoreClient, request_id: str = "unknown"):
        self.gateway = gateway
        self.blob_store = blob_store
        self.request_id = request_id

    # Loans

    @relay_operation
    async def submit_loan_application(
        self,
        borrower_address: Optional[str],
        invoice_data: Any,
        contact_info: Any = None,
    ) -> ApplicationReceipt:
        """
        Pin invoice metadata for a new application.

        The invoice is pinned as-is, so loan views can read its fields from
        the top level of the blob. Contact details are validated but never
        pinned, since pinned content is public. The returned application id
        is a millisecond timestamp: there is no application store behind it.
        """
        _require(borrower_address=borrower_address, invoice_data=invoice_data)
        invoice = _parse(InvoiceData, invoice_data, "invoiceData")
        if contact_info is not None:
            _parse(ContactInfo, contact_info, "contactInfo")

        blob = invoice.model_dump(mode="json", by_alias=True, exclude_none=True)
        metadata_uri = await self.blob_store.put(blob, kind="loan_application")
        return ApplicationReceipt(application_id=str(epoch_millis()), metadata_uri=metadata_uri)

    @relay_operation
    async def approve_loan_application(
        self,
        borrower_address: Optional[str],
        valuation: Any,
        principal: Any,
        interest_rate: Optional[int],
        duration_seconds: Optional[int],
        metadata_uri: Optional[str],
        notes: Optional[str] = None,
    ) -> str:
        """Issue the loan on-chain; signer must be an underwriter. Notes have no on-chain field and are dropped."""
        _require(
            borrower_address=borrower_address,
            valuation=valuation,
            principal=principal,
            interest_rate=interest_rate,
            duration_seconds=duration_seconds,
            metadata_uri=metadata_uri,
        )
        return await self.gateway.issue_loan(
            borrower_address, valuation, principal, interest_rate, duration_seconds, metadata_uri
        )

    @relay_operation
    async def settle_loan(self, loan_id: int) -> str:
        """Repay a loan. Requires a prior successful `authorize_repayment`."""
        return await self.gateway.repay_loan(_loan_id(loan_id))

    @relay_operation
    async def authorize_repayment(self, loan_id: int) -> str:
        """Approve the ledger to pull exactly the current repayment amount"""
        amount = await self.gateway.get_repayment_amount(_loan_id(loan_id))
        return await self.gateway.approve_spender(SpenderContract.LEDGER, amount)

    @relay_operation
    async def fetch_loan(self, loan_id: int) -> LoanRecord:
        return await self.gateway.get_loan(_loan_id(loan_id))

    @relay_operation
    async def fetch_loan_count(self) -> int:
        return await self.gateway.get_loan_count()

    @relay_operation
    async def fetch_repayment_amount(self, loan_id: int) -> Decimal:
        return await self.gateway.get_repayment_amount(_loan_id(loan_id))

    @relay_operation
    async def fetch_pool_balance(self) -> Decimal:
        return await self.gateway.get_pool_balance()

    # Tranches

    @relay_operation
    async def deposit_to_tranche(self, amount: Any, kind: Any, investor_address: Optional[str]) -> str:
        """Deposit from the relay's signer. Requires a covering `authorize_deposit`."""
        _require(amount=amount, kind=kind, investor_address=investor_address)
        return await self.gateway.deposit_to_tranche(_tranche_kind(kind), amount)

    @relay_operation
    async def withdraw_from_tranche(self, shares: Any, kind: Any, investor_address: Optional[str]) -> str:
        _require(shares=shares, kind=kind, investor_address=investor_address)
        return await self.gateway.withdraw_from_tranche(_tranche_kind(kind), shares)

    @relay_operation
    async def authorize_deposit(self, amount: Any, investor_address: Optional[str]) -> str:
        """Approve the tranche manager to pull `amount` of stable token"""
        _require(amount=amount, investor_address=investor_address)
        return await self.gateway.approve_spender(SpenderContract.TRANCHE, amount)

    @relay_operation
    async def fetch_tranche_snapshot(self, kind: Any) -> TrancheSnapshot:
        return await self.gateway.get_tranche_snapshot(_tranche_kind(kind))

    @relay_operation
    async def fetch_total_value_locked(self) -> Decimal:
        return await self.gateway.get_total_value_locked()

    @relay_operation
    async def fetch_share_balance(self, address: str, kind: Any) -> Decimal:
        _require(address=address)
        return await self.gateway.get_share_balance(address, _tranche_kind(kind))

    @relay_operation
    async def estimate_shares(self, amount: Any, kind: Any) -> Decimal:
        _require(amount=amount)
        return await self.gateway.get_share_estimate(_tranche_kind(kind), amount)

    # Accounts

    @relay_operation
    async def fetch_allowance(self, address: str, for_contract: SpenderContract) -> Decimal:
        _require(address=address)
        return await self.gateway.get_allowance(address, _spender(for_contract))

    @relay_operation
    async def fetch_stable_balance(self, address: str) -> Decimal:
        _require(address=address)
        return await self.gateway.get_balance(address)

    @relay_operation
    async def check_role(self, address: str, role_name: Any) -> bool:
        _require(address=address)
        return await self.gateway.has_role(address, _role(role_name))

    # Metadata

    @relay_operation
    async def fetch_blob(self, reference: str) -> Any:
        _require(reference=reference)
        return await self.blob_store.get(reference)
