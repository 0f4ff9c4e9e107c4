"""Dependency injection for FastAPI endpoints"""

from typing import Optional

from fastapi import Depends, Request

from credit_relay.config import Settings, settings
from credit_relay.infrastructure.clients.blob_store import BlobStoreClient
from credit_relay.infrastructure.clients.chain import ChainGateway
from credit_relay.infrastructure.clients.web3_transport import Web3Transport
from credit_relay.services.relay import RelayService

_web3_transport: Optional[Web3Transport] = None


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_settings() -> Settings:
    return settings


def get_web3_transport(settings: Settings = Depends(get_settings)) -> Web3Transport:
    """
    Shared transport for the active settings.

    The provider and signer inside are built once and reused across requests;
    a different settings object (e.g. an overridden `get_settings`) gets a
    fresh transport so the gateway and the transport never disagree.
    """
    global _web3_transport
    if _web3_transport is None or _web3_transport.settings is not settings:
        _web3_transport = Web3Transport(settings)
    return _web3_transport


def get_chain_gateway(
    settings: Settings = Depends(get_settings),
    transport: Web3Transport = Depends(get_web3_transport),
) -> ChainGateway:
    """Provide contract gateway instance"""
    return ChainGateway(transport, settings)


def get_blob_store(settings: Settings = Depends(get_settings)) -> BlobStoreClient:
    """Provide metadata store client instance"""
    return BlobStoreClient(settings)


def get_relay_service(
    request: Request,
    gateway: ChainGateway = Depends(get_chain_gateway),
    blob_store: BlobStoreClient = Depends(get_blob_store),
) -> RelayService:
    return RelayService(gateway, blob_store, request_id=get_request_id(request))
