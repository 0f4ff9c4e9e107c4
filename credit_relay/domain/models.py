"""Domain models - projections of on-chain state and transient request payloads"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class TrancheKind(str, Enum):
    """Risk tier of a funding pool. Closed set; adding one needs a contract upgrade."""

    SENIOR = "senior"
    JUNIOR = "junior"

    @classmethod
    def from_is_senior(cls, is_senior: bool) -> "TrancheKind":
        return cls.SENIOR if is_senior else cls.JUNIOR

    @property
    def label(self) -> str:
        return self.value.capitalize()


class Role(str, Enum):
    """Roles managed by the access control contract"""

    UNDERWRITER = "underwriter"
    ADMIN = "admin"


class SpenderContract(str, Enum):
    """Contracts that may be granted a stable token allowance"""

    LEDGER = "ledger"
    TRANCHE = "tranche"


@dataclass
class LoanRecord:
    """Loan as stored by the ledger contract"""

    id: int
    borrower: str
    principal: Decimal
    valuation: Decimal
    interest_rate: int  # percentage points, e.g. 12 for 12%
    due_date: int  # seconds since epoch
    repaid: bool
    metadata_uri: str


@dataclass
class TrancheSnapshot:
    """Read-only view of one tranche's accounting"""

    kind: TrancheKind
    total_invested: Decimal
    total_shares: Decimal
    yield_rate: int  # basis points

    @property
    def apy(self) -> Decimal:
        """Yield rate as a percentage (display only)"""
        return Decimal(self.yield_rate) / 100


@dataclass
class ApplicationReceipt:
    """Result of a loan application. The id is a timestamp, not a durable key."""

    application_id: str
    metadata_uri: str


class InvoiceData(BaseModel):
    """Invoice metadata pinned alongside a loan application"""

    model_config = ConfigDict(populate_by_name=True)

    invoice_number: str = Field(..., min_length=1, alias="invoiceNumber")
    amount: float = Field(..., gt=0)
    due_date: str = Field(..., min_length=1, alias="dueDate")
    description: str
    counterparty: str = Field(..., min_length=1)
    additional_info: Optional[Dict[str, Any]] = Field(None, alias="additionalInfo")


class ContactInfo(BaseModel):
    """Optional borrower contact details"""

    email: str
    phone: Optional[str] = None
