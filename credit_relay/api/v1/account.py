"""Account reads: stable token balances, allowances, roles, and pinned metadata"""

from typing import Any

from fastapi import APIRouter, Depends

from credit_relay.api.dependencies import get_relay_service
from credit_relay.api.v1.schemas import AdminResponse, AllowanceResponse, BalanceResponse, UnderwriterResponse
from credit_relay.domain.models import Role, SpenderContract
from credit_relay.services.relay import RelayService

router = APIRouter()


@router.get("/usdc/balance/{address}", response_model=BalanceResponse)
async def get_usdc_balance(address: str, relay: RelayService = Depends(get_relay_service)):
    balance = await relay.fetch_stable_balance(address)
    return BalanceResponse(balance=float(balance))


@router.get("/usdc/allowance/{address}", response_model=AllowanceResponse)
async def get_usdc_allowance(address: str, relay: RelayService = Depends(get_relay_service)):
    """Allowance granted to the loan ledger (used for repayments)"""
    allowance = await relay.fetch_allowance(address, SpenderContract.LEDGER)
    return AllowanceResponse(allowance=float(allowance))


@router.get("/access/underwriter/{address}", response_model=UnderwriterResponse)
async def is_underwriter(address: str, relay: RelayService = Depends(get_relay_service)):
    return UnderwriterResponse(is_underwriter=await relay.check_role(address, Role.UNDERWRITER))


@router.get("/access/admin/{address}", response_model=AdminResponse)
async def is_admin(address: str, relay: RelayService = Depends(get_relay_service)):
    return AdminResponse(is_admin=await relay.check_role(address, Role.ADMIN))


@router.get("/ipfs/{reference}")
async def get_metadata(reference: str, relay: RelayService = Depends(get_relay_service)) -> Any:
    """Pinned JSON, returned as stored"""
    return await relay.fetch_blob(reference)
