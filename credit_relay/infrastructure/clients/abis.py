"""ABI fragments for the contracts the relay calls"""

from enum import Enum
from typing import Any, Dict, List


class ContractName(str, Enum):
    """Deployed contracts, each bound to one address setting"""

    CREDIT_POOL = "credit_pool"
    TRANCHE_MANAGER = "tranche_manager"
    ACCESS_CONTROLLER = "access_controller"
    USDC = "usdc"
    SENIOR_LP_TOKEN = "senior_lp_token"
    JUNIOR_LP_TOKEN = "junior_lp_token"

    @property
    def address_setting(self) -> str:
        return f"{self.value}_address"


def _fn(name: str, inputs: List[tuple], outputs: List[tuple], view: bool = False) -> Dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t} for n, t in outputs],
        "stateMutability": "view" if view else "nonpayable",
    }


_LOAN_TUPLE = {
    "name": "",
    "type": "tuple",
    "components": [
        {"name": "borrower", "type": "address"},
        {"name": "principal", "type": "uint256"},
        {"name": "valuation", "type": "uint256"},
        {"name": "interest", "type": "uint256"},
        {"name": "dueDate", "type": "uint256"},
        {"name": "repaid", "type": "bool"},
        {"name": "metadataURI", "type": "string"},
    ],
}

CREDIT_POOL_ABI = [
    _fn(
        "issueLoan",
        [
            ("borrower", "address"),
            ("valuation", "uint256"),
            ("principal", "uint256"),
            ("interest", "uint256"),
            ("duration", "uint256"),
            ("metadataURI", "string"),
        ],
        [],
    ),
    _fn("repayLoan", [("id", "uint256")], []),
    {
        "type": "function",
        "name": "getLoan",
        "inputs": [{"name": "id", "type": "uint256"}],
        "outputs": [_LOAN_TUPLE],
        "stateMutability": "view",
    },
    _fn("getPoolBalance", [], [("", "uint256")], view=True),
    _fn("calculateRepaymentAmount", [("id", "uint256")], [("", "uint256")], view=True),
    _fn("loanCounter", [], [("", "uint256")], view=True),
]

_TRANCHE_INFO = [("totalInvested", "uint256"), ("totalShares", "uint256"), ("yieldRate", "uint256")]

TRANCHE_MANAGER_ABI = [
    _fn("depositToSenior", [("amount", "uint256")], []),
    _fn("depositToJunior", [("amount", "uint256")], []),
    _fn("withdrawFromSenior", [("shares", "uint256")], []),
    _fn("withdrawFromJunior", [("shares", "uint256")], []),
    _fn("getSeniorTrancheInfo", [], _TRANCHE_INFO, view=True),
    _fn("getJuniorTrancheInfo", [], _TRANCHE_INFO, view=True),
    _fn("getTotalValueLocked", [], [("", "uint256")], view=True),
    _fn("calculateSeniorShares", [("amount", "uint256")], [("", "uint256")], view=True),
    _fn("calculateJuniorShares", [("amount", "uint256")], [("", "uint256")], view=True),
]

ACCESS_CONTROLLER_ABI = [
    _fn("isUnderwriter", [("account", "address")], [("", "bool")], view=True),
    _fn("isAdmin", [("account", "address")], [("", "bool")], view=True),
]

ERC20_ABI = [
    _fn("approve", [("spender", "address"), ("amount", "uint256")], [("", "bool")]),
    _fn("allowance", [("owner", "address"), ("spender", "address")], [("", "uint256")], view=True),
    _fn("balanceOf", [("account", "address")], [("", "uint256")], view=True),
]

ABIS: Dict[ContractName, List[Dict[str, Any]]] = {
    ContractName.CREDIT_POOL: CREDIT_POOL_ABI,
    ContractName.TRANCHE_MANAGER: TRANCHE_MANAGER_ABI,
    ContractName.ACCESS_CONTROLLER: ACCESS_CONTROLLER_ABI,
    ContractName.USDC: ERC20_ABI,
    ContractName.SENIOR_LP_TOKEN: ERC20_ABI,
    ContractName.JUNIOR_LP_TOKEN: ERC20_ABI,
}
