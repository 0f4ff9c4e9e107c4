"""Tranche endpoints: deposits, withdrawals, allowances and pool reads"""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query

from credit_relay.api.dependencies import get_relay_service
from credit_relay.api.v1.schemas import (
    AllowanceResponse,
    BalanceResponse,
    DepositApprovalRequest,
    SharesResponse,
    TrancheDepositRequest,
    TrancheResponse,
    TrancheWithdrawRequest,
    TransactionResponse,
    TvlResponse,
)
from credit_relay.domain.models import SpenderContract, TrancheKind
from credit_relay.services.relay import RelayService

router = APIRouter()


@router.post("/tranche/deposit", response_model=TransactionResponse)
async def deposit(
    request_body: TrancheDepositRequest,
    relay: RelayService = Depends(get_relay_service),
):
    """Deposit stable token into a tranche. Call /tranche/approve first."""
    kind = TrancheKind.from_is_senior(request_body.is_senior)
    tx_hash = await relay.deposit_to_tranche(request_body.amount, kind, request_body.user_address)
    return TransactionResponse(message=f"Deposit to {kind.value} tranche successful", tx_hash=tx_hash)


@router.post("/tranche/withdraw", response_model=TransactionResponse)
async def withdraw(
    request_body: TrancheWithdrawRequest,
    relay: RelayService = Depends(get_relay_service),
):
    kind = TrancheKind.from_is_senior(request_body.is_senior)
    tx_hash = await relay.withdraw_from_tranche(request_body.shares, kind, request_body.user_address)
    return TransactionResponse(message=f"Withdrawal from {kind.value} tranche successful", tx_hash=tx_hash)


@router.post("/tranche/approve", response_model=TransactionResponse)
async def approve_deposit(
    request_body: DepositApprovalRequest,
    relay: RelayService = Depends(get_relay_service),
):
    tx_hash = await relay.authorize_deposit(request_body.amount, request_body.user_address)
    return TransactionResponse(message="USDC approved for deposit", tx_hash=tx_hash)


# Static paths must be registered before /tranche/{kind}


@router.get("/tranche/tvl", response_model=TvlResponse)
async def get_total_value_locked(relay: RelayService = Depends(get_relay_service)):
    tvl = await relay.fetch_total_value_locked()
    return TvlResponse(tvl=float(tvl))


@router.get("/tranche/calculate-shares", response_model=SharesResponse)
async def calculate_shares(
    amount: Decimal = Query(..., gt=0, description="Deposit amount in USDC"),
    is_senior: bool = Query(..., alias="isSenior"),
    relay: RelayService = Depends(get_relay_service),
):
    shares = await relay.estimate_shares(amount, TrancheKind.from_is_senior(is_senior))
    return SharesResponse(shares=float(shares))


@router.get("/tranche/allowance/{address}", response_model=AllowanceResponse)
async def get_tranche_allowance(address: str, relay: RelayService = Depends(get_relay_service)):
    allowance = await relay.fetch_allowance(address, SpenderContract.TRANCHE)
    return AllowanceResponse(allowance=float(allowance))


@router.get("/tranche/balance/{kind}/{address}", response_model=BalanceResponse)
async def get_share_balance(kind: TrancheKind, address: str, relay: RelayService = Depends(get_relay_service)):
    balance = await relay.fetch_share_balance(address, kind)
    return BalanceResponse(balance=float(balance))


@router.get("/tranche/{kind}", response_model=TrancheResponse)
async def get_tranche(kind: TrancheKind, relay: RelayService = Depends(get_relay_service)):
    snapshot = await relay.fetch_tranche_snapshot(kind)
    return TrancheResponse(
        total_invested=float(snapshot.total_invested),
        total_shares=float(snapshot.total_shares),
        yield_rate=snapshot.yield_rate,
        apy=float(snapshot.apy),
    )
