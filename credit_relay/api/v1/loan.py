"""Loan endpoints: application, underwriting approval, repayment and ledger reads"""

from fastapi import APIRouter, Depends

from credit_relay.api.dependencies import get_relay_service
from credit_relay.api.v1.schemas import (
    AmountResponse,
    ApplicationResponse,
    BalanceResponse,
    CountResponse,
    LoanApplicationRequest,
    LoanApprovalRequest,
    LoanResponse,
    TransactionResponse,
)
from credit_relay.services.relay import RelayService

router = APIRouter()


@router.post("/loan/apply", response_model=ApplicationResponse, status_code=201)
async def apply_for_loan(
    request_body: LoanApplicationRequest,
    relay: RelayService = Depends(get_relay_service),
):
    """
    Submit a loan application.

    The invoice is pinned to IPFS; the returned application id is a
    timestamp and is not stored anywhere.
    """
    receipt = await relay.submit_loan_application(
        request_body.borrower_address,
        request_body.invoice_data,
        request_body.contact_info,
    )
    return ApplicationResponse(
        message="Loan application submitted successfully",
        application_id=receipt.application_id,
        metadata_uri=receipt.metadata_uri,
    )


@router.post("/loan/approve", response_model=TransactionResponse)
async def approve_loan(
    request_body: LoanApprovalRequest,
    relay: RelayService = Depends(get_relay_service),
):
    """Issue an approved loan on-chain (relay signer must be an underwriter)"""
    tx_hash = await relay.approve_loan_application(
        request_body.borrower_address,
        request_body.valuation,
        request_body.principal,
        request_body.interest,
        request_body.duration,
        request_body.metadata_uri,
        notes=request_body.underwriter_notes,
    )
    return TransactionResponse(message="Loan approved and issued successfully", tx_hash=tx_hash)


@router.post("/loan/repay/{loan_id}", response_model=TransactionResponse)
async def repay_loan(loan_id: int, relay: RelayService = Depends(get_relay_service)):
    """Repay a loan. Call /loan/approve-repayment/{loan_id} first."""
    tx_hash = await relay.settle_loan(loan_id)
    return TransactionResponse(message="Loan repaid successfully", tx_hash=tx_hash)


@router.post("/loan/approve-repayment/{loan_id}", response_model=TransactionResponse)
async def approve_repayment(loan_id: int, relay: RelayService = Depends(get_relay_service)):
    tx_hash = await relay.authorize_repayment(loan_id)
    return TransactionResponse(message="USDC approved for repayment", tx_hash=tx_hash)


# Static paths must be registered before /loan/{loan_id}


@router.get("/loan/count", response_model=CountResponse)
async def get_loan_count(relay: RelayService = Depends(get_relay_service)):
    return CountResponse(count=await relay.fetch_loan_count())


@router.get("/loan/repayment/{loan_id}", response_model=AmountResponse)
async def get_repayment_amount(loan_id: int, relay: RelayService = Depends(get_relay_service)):
    amount = await relay.fetch_repayment_amount(loan_id)
    return AmountResponse(amount=float(amount))


@router.get("/loan/{loan_id}", response_model=LoanResponse)
async def get_loan(loan_id: int, relay: RelayService = Depends(get_relay_service)):
    loan = await relay.fetch_loan(loan_id)
    return LoanResponse(
        id=loan.id,
        borrower=loan.borrower,
        principal=float(loan.principal),
        valuation=float(loan.valuation),
        interest=loan.interest_rate,
        due_date=loan.due_date,
        repaid=loan.repaid,
        metadata_uri=loan.metadata_uri,
    )


@router.get("/pool/balance", response_model=BalanceResponse)
async def get_pool_balance(relay: RelayService = Depends(get_relay_service)):
    balance = await relay.fetch_pool_balance()
    return BalanceResponse(balance=float(balance))
