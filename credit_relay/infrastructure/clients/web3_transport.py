"""JSON-RPC transport to the deployed contracts, backed by web3.py"""

import asyncio
import logging
from typing import Any, Dict, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import TransactionNotFound, Web3Exception

from credit_relay.config import Settings, settings as default_settings
from credit_relay.domain.exceptions import ChainCallError, ConfigurationError
from credit_relay.infrastructure.clients.abis import ABIS, ContractName

RPC_ERRORS = (Web3Exception, OSError, ValueError)


class Web3Transport:
    """
    Raw contract access: read calls, signed submissions and receipt polling.

    The provider and signing account are built on first use so that missing
    RPC_URL / PRIVATE_KEY only fail the requests that need them.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or default_settings
        self._web3: Optional[AsyncWeb3] = None
        self._account: Optional[LocalAccount] = None

    def _w3(self) -> AsyncWeb3:
        if self._web3 is None:
            (rpc_url,) = self.settings.require("rpc_url")
            self._web3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        return self._web3

    def _signer(self) -> LocalAccount:
        if self._account is None:
            (private_key,) = self.settings.require("private_key")
            try:
                self._account = Account.from_key(private_key)
            except (ValueError, TypeError) as e:
                # never echo the key itself
                raise ConfigurationError("PRIVATE_KEY is not a valid signing key") from e
        return self._account

    def _contract(self, name: ContractName, address: str):
        return self._w3().eth.contract(address=Web3.to_checksum_address(address), abi=ABIS[name])

    async def signer_address(self) -> str:
        return self._signer().address

    async def call(self, name: ContractName, address: str, function: str, *args: Any) -> Any:
        """Execute a view function and return its decoded output"""
        contract = self._contract(name, address)
        try:
            return await getattr(contract.functions, function)(*args).call()
        except RPC_ERRORS as e:
            raise ChainCallError(f"{name.value}.{function} call failed: {e}") from e

    async def send(self, name: ContractName, address: str, function: str, *args: Any) -> str:
        """
        Sign and broadcast a state-changing call.

        Returns the transaction hash as soon as the node accepts it; the
        caller decides how long to wait for a receipt.
        """
        w3 = self._w3()
        account = self._signer()
        contract = self._contract(name, address)
        try:
            nonce = await w3.eth.get_transaction_count(account.address, "pending")
            tx = await getattr(contract.functions, function)(*args).build_transaction(
                {"from": account.address, "nonce": nonce}
            )
            signed = account.sign_transaction(tx)
            tx_hash = await w3.eth.send_raw_transaction(signed.raw_transaction)
        except RPC_ERRORS as e:
            raise ChainCallError(f"{name.value}.{function} submission failed: {e}") from e

        logging.info(
            "Transaction submitted",
            extra={"contract": name.value, "function": function, "tx_hash": Web3.to_hex(tx_hash)},
        )
        return Web3.to_hex(tx_hash)

    async def wait_for_receipt(self, tx_hash: str) -> Dict[str, Any]:
        """Poll until the transaction is mined. Unbounded; callers apply the deadline."""
        w3 = self._w3()
        while True:
            try:
                receipt = await w3.eth.get_transaction_receipt(tx_hash)
                return dict(receipt)
            except TransactionNotFound:
                await asyncio.sleep(self.settings.chain_poll_interval_seconds)
            except RPC_ERRORS as e:
                raise ChainCallError(f"Receipt lookup for {tx_hash} failed: {e}") from e
