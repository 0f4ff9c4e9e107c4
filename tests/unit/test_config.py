"""Unit tests for settings and lazy connection setup"""

import pytest

from credit_relay.api.dependencies import get_web3_transport
from credit_relay.config import Settings
from credit_relay.domain.exceptions import ConfigurationError
from credit_relay.infrastructure.clients.abis import ContractName
from credit_relay.infrastructure.clients.web3_transport import Web3Transport


def test_require_returns_values_in_order(test_settings: Settings):
    assert test_settings.require("usdc_address", "rpc_url") == (test_settings.usdc_address, test_settings.rpc_url)


def test_require_names_every_missing_setting():
    settings = Settings(_env_file=None, rpc_url="http://localhost:8545")

    with pytest.raises(ConfigurationError) as exc_info:
        settings.require("rpc_url", "private_key", "usdc_address")

    assert str(exc_info.value) == "Missing configuration: PRIVATE_KEY, USDC_ADDRESS"


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("CREDIT_POOL_ADDRESS", "0x" + "aa" * 20)
    monkeypatch.setenv("CHAIN_CONFIRMATION_TIMEOUT_SECONDS", "30")

    settings = Settings(_env_file=None)

    assert settings.credit_pool_address == "0x" + "aa" * 20
    assert settings.chain_confirmation_timeout_seconds == 30.0


async def test_transport_needs_rpc_url_on_first_call():
    transport = Web3Transport(Settings(_env_file=None))

    with pytest.raises(ConfigurationError, match="RPC_URL"):
        await transport.call(ContractName.CREDIT_POOL, "0x" + "aa" * 20, "loanCounter")


async def test_transport_needs_private_key_for_signer():
    transport = Web3Transport(Settings(_env_file=None, rpc_url="http://localhost:8545"))

    with pytest.raises(ConfigurationError, match="PRIVATE_KEY"):
        await transport.signer_address()


async def test_transport_rejects_malformed_key():
    transport = Web3Transport(Settings(_env_file=None, private_key="not-a-key"))

    with pytest.raises(ConfigurationError) as exc_info:
        await transport.signer_address()

    assert "not-a-key" not in str(exc_info.value)


async def test_transport_derives_signer_address():
    transport = Web3Transport(Settings(_env_file=None, private_key="0x" + "0" * 63 + "1"))

    assert await transport.signer_address() == "0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf"


def test_web3_transport_follows_injected_settings(test_settings: Settings):
    transport = get_web3_transport(test_settings)

    assert transport.settings is test_settings
    assert get_web3_transport(test_settings) is transport

    other = Settings(_env_file=None)
    assert get_web3_transport(other).settings is other
