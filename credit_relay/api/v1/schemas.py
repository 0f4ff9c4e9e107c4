"""Pydantic schemas for API request/response validation"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from credit_relay.domain.models import ContactInfo, InvoiceData


class CamelModel(BaseModel):
    """
    JSON keys are camelCase to match the frontend; Python names stay snake_case.

    Request amounts are Decimal so a client can send them as strings and keep
    every digit; JSON numbers are only as exact as a double. Response amounts
    stay JSON numbers for the frontend.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Requests


class LoanApplicationRequest(CamelModel):
    """Request body for POST /api/loan/apply"""

    borrower_address: str = Field(..., min_length=1)
    invoice_data: InvoiceData
    contact_info: Optional[ContactInfo] = None


class LoanApprovalRequest(CamelModel):
    """Request body for POST /api/loan/approve"""

    borrower_address: str = Field(..., min_length=1)
    valuation: Decimal = Field(..., gt=0)
    principal: Decimal = Field(..., gt=0)
    interest: int = Field(..., gt=0, description="Interest rate in percentage points")
    duration: int = Field(..., gt=0, description="Loan duration in seconds")
    metadata_uri: str = Field(..., min_length=1, alias="metadataURI")
    underwriter_notes: Optional[str] = None


class TrancheDepositRequest(CamelModel):
    """Request body for POST /api/tranche/deposit"""

    amount: Decimal = Field(..., gt=0)
    is_senior: bool
    user_address: str = Field(..., min_length=1)


class TrancheWithdrawRequest(CamelModel):
    """Request body for POST /api/tranche/withdraw"""

    shares: Decimal = Field(..., gt=0)
    is_senior: bool
    user_address: str = Field(..., min_length=1)


class DepositApprovalRequest(CamelModel):
    """Request body for POST /api/tranche/approve"""

    amount: Decimal = Field(..., gt=0)
    user_address: str = Field(..., min_length=1)


# Responses


class TransactionResponse(CamelModel):
    message: str
    tx_hash: str


class ApplicationResponse(CamelModel):
    message: str
    application_id: str
    metadata_uri: str = Field(..., alias="metadataURI")


class LoanResponse(CamelModel):
    """Response for GET /api/loan/{loan_id}"""

    id: int
    borrower: str
    principal: float
    valuation: float
    interest: int
    due_date: int
    repaid: bool
    metadata_uri: str = Field(..., alias="metadataURI")


class TrancheResponse(CamelModel):
    """Response for GET /api/tranche/{type}"""

    total_invested: float
    total_shares: float
    yield_rate: int
    apy: float


class CountResponse(CamelModel):
    count: int


class AmountResponse(CamelModel):
    amount: float


class BalanceResponse(CamelModel):
    balance: float


class AllowanceResponse(CamelModel):
    allowance: float


class TvlResponse(CamelModel):
    tvl: float


class SharesResponse(CamelModel):
    shares: float


class UnderwriterResponse(CamelModel):
    is_underwriter: bool


class AdminResponse(CamelModel):
    is_admin: bool
