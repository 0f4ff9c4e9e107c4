"""Typed gateway over the loan ledger, tranche, access control and stable token contracts"""

import asyncio
import time
from decimal import Decimal
from typing import Any, Dict, Protocol

from eth_utils import is_address, to_checksum_address

from credit_relay.config import Settings, settings as default_settings
from credit_relay.domain.exceptions import ChainTimeout, TransactionReverted, Unauthorized, ValidationError
from credit_relay.domain.models import LoanRecord, Role, SpenderContract, TrancheKind, TrancheSnapshot
from credit_relay.domain.units import SHARE_DECIMALS, STABLE_TOKEN_DECIMALS, Amount, to_chain_units, to_decimal
from credit_relay.infrastructure.clients.abis import ContractName
from credit_relay.infrastructure.observability.metrics import chain_confirmation_histogram, chain_timeout_counter


class ContractTransport(Protocol):
    """What the gateway needs from an RPC connection"""

    async def signer_address(self) -> str: ...

    async def call(self, name: ContractName, address: str, function: str, *args: Any) -> Any: ...

    async def send(self, name: ContractName, address: str, function: str, *args: Any) -> str: ...

    async def wait_for_receipt(self, tx_hash: str) -> Dict[str, Any]: ...


_ROLE_FUNCTIONS = {
    Role.UNDERWRITER: "isUnderwriter",
    Role.ADMIN: "isAdmin",
}

_SPENDER_CONTRACTS = {
    SpenderContract.LEDGER: ContractName.CREDIT_POOL,
    SpenderContract.TRANCHE: ContractName.TRANCHE_MANAGER,
}

_SHARE_TOKENS = {
    TrancheKind.SENIOR: ContractName.SENIOR_LP_TOKEN,
    TrancheKind.JUNIOR: ContractName.JUNIOR_LP_TOKEN,
}


def checksum(address: str) -> str:
    """Validate a hex address and return its checksummed form"""
    if not isinstance(address, str) or not is_address(address):
        raise ValidationError(f"Invalid address: {address!r}")
    return to_checksum_address(address)


class ChainGateway:
    """
    The only component that talks to the contracts.

    Every amount crossing this class is a Decimal on the caller's side and a
    scaled integer on the chain's side. Contract addresses are resolved per
    call, so an operation only needs the settings it actually touches.
    """

    def __init__(self, transport: ContractTransport, settings: Settings | None = None):
        self.transport = transport
        self.settings = settings or default_settings

    def _address(self, name: ContractName) -> str:
        (address,) = self.settings.require(name.address_setting)
        return address

    async def _call(self, name: ContractName, function: str, *args: Any) -> Any:
        return await self.transport.call(name, self._address(name), function, *args)

    async def _transact(self, name: ContractName, function: str, *args: Any) -> str:
        """Submit a write call and block until it is mined or the bound expires"""
        tx_hash = await self.transport.send(name, self._address(name), function, *args)

        timeout = self.settings.chain_confirmation_timeout_seconds
        start_time = time.time()
        try:
            receipt = await asyncio.wait_for(self.transport.wait_for_receipt(tx_hash), timeout=timeout)
        except asyncio.TimeoutError as e:
            chain_timeout_counter.labels(function=function).inc()
            raise ChainTimeout(tx_hash, timeout) from e
        chain_confirmation_histogram.labels(function=function).observe(time.time() - start_time)

        if receipt.get("status", 1) == 0:
            raise TransactionReverted(tx_hash)
        return tx_hash

    # Write calls

    async def issue_loan(
        self,
        borrower: str,
        valuation: Amount,
        principal: Amount,
        interest_rate: int,
        duration_seconds: int,
        metadata_uri: str,
    ) -> str:
        """
        Issue a loan on the ledger.

        The signer's underwriter role is checked first; the ledger would
        reject the call anyway, but only after the fee is spent.

        Raises:
            Unauthorized: Signer is not an underwriter (nothing submitted)
        """
        borrower = checksum(borrower)
        valuation_units = to_chain_units(valuation, STABLE_TOKEN_DECIMALS)
        principal_units = to_chain_units(principal, STABLE_TOKEN_DECIMALS)

        signer = await self.transport.signer_address()
        if not await self.has_role(signer, Role.UNDERWRITER):
            raise Unauthorized(f"Signer {signer} does not hold the underwriter role")

        return await self._transact(
            ContractName.CREDIT_POOL,
            "issueLoan",
            borrower,
            valuation_units,
            principal_units,
            int(interest_rate),
            int(duration_seconds),
            metadata_uri,
        )

    async def repay_loan(self, loan_id: int) -> str:
        return await self._transact(ContractName.CREDIT_POOL, "repayLoan", int(loan_id))

    async def deposit_to_tranche(self, kind: TrancheKind, amount: Amount) -> str:
        units = to_chain_units(amount, STABLE_TOKEN_DECIMALS)
        return await self._transact(ContractName.TRANCHE_MANAGER, f"depositTo{kind.label}", units)

    async def withdraw_from_tranche(self, kind: TrancheKind, shares: Amount) -> str:
        units = to_chain_units(shares, SHARE_DECIMALS)
        return await self._transact(ContractName.TRANCHE_MANAGER, f"withdrawFrom{kind.label}", units)

    async def approve_spender(self, spender: SpenderContract, amount: Amount) -> str:
        """Grant `spender` a stable token allowance from the signer's balance"""
        spender_address = checksum(self._address(_SPENDER_CONTRACTS[spender]))
        units = to_chain_units(amount, STABLE_TOKEN_DECIMALS)
        return await self._transact(ContractName.USDC, "approve", spender_address, units)

    # Read calls

    async def get_loan(self, loan_id: int) -> LoanRecord:
        borrower, principal, valuation, interest, due_date, repaid, metadata_uri = await self._call(
            ContractName.CREDIT_POOL, "getLoan", int(loan_id)
        )
        return LoanRecord(
            id=int(loan_id),
            borrower=borrower,
            principal=to_decimal(principal, STABLE_TOKEN_DECIMALS),
            valuation=to_decimal(valuation, STABLE_TOKEN_DECIMALS),
            interest_rate=int(interest),
            due_date=int(due_date),
            repaid=bool(repaid),
            metadata_uri=metadata_uri,
        )

    async def get_pool_balance(self) -> Decimal:
        balance = await self._call(ContractName.CREDIT_POOL, "getPoolBalance")
        return to_decimal(balance, STABLE_TOKEN_DECIMALS)

    async def get_loan_count(self) -> int:
        return int(await self._call(ContractName.CREDIT_POOL, "loanCounter"))

    async def get_repayment_amount(self, loan_id: int) -> Decimal:
        """Principal plus accrued interest, as computed by the ledger"""
        amount = await self._call(ContractName.CREDIT_POOL, "calculateRepaymentAmount", int(loan_id))
        return to_decimal(amount, STABLE_TOKEN_DECIMALS)

    async def get_tranche_snapshot(self, kind: TrancheKind) -> TrancheSnapshot:
        total_invested, total_shares, yield_rate = await self._call(
            ContractName.TRANCHE_MANAGER, f"get{kind.label}TrancheInfo"
        )
        return TrancheSnapshot(
            kind=kind,
            total_invested=to_decimal(total_invested, STABLE_TOKEN_DECIMALS),
            total_shares=to_decimal(total_shares, SHARE_DECIMALS),
            yield_rate=int(yield_rate),
        )

    async def get_total_value_locked(self) -> Decimal:
        tvl = await self._call(ContractName.TRANCHE_MANAGER, "getTotalValueLocked")
        return to_decimal(tvl, STABLE_TOKEN_DECIMALS)

    async def get_share_estimate(self, kind: TrancheKind, amount: Amount) -> Decimal:
        units = to_chain_units(amount, STABLE_TOKEN_DECIMALS)
        shares = await self._call(ContractName.TRANCHE_MANAGER, f"calculate{kind.label}Shares", units)
        return to_decimal(shares, SHARE_DECIMALS)

    async def get_share_balance(self, address: str, kind: TrancheKind) -> Decimal:
        balance = await self._call(_SHARE_TOKENS[kind], "balanceOf", checksum(address))
        return to_decimal(balance, SHARE_DECIMALS)

    async def get_balance(self, address: str) -> Decimal:
        balance = await self._call(ContractName.USDC, "balanceOf", checksum(address))
        return to_decimal(balance, STABLE_TOKEN_DECIMALS)

    async def get_allowance(self, owner: str, spender: SpenderContract) -> Decimal:
        spender_address = checksum(self._address(_SPENDER_CONTRACTS[spender]))
        allowance = await self._call(ContractName.USDC, "allowance", checksum(owner), spender_address)
        return to_decimal(allowance, STABLE_TOKEN_DECIMALS)

    async def has_role(self, address: str, role: Role) -> bool:
        return bool(await self._call(ContractName.ACCESS_CONTROLLER, _ROLE_FUNCTIONS[role], checksum(address)))
