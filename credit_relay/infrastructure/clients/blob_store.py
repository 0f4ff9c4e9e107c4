"""Pinata/IPFS HTTP client for invoice metadata"""

from typing import Any, Dict

import httpx

from credit_relay.config import Settings, settings as default_settings
from credit_relay.domain.exceptions import NotFound, StoreUnavailable
from credit_relay.infrastructure.observability.metrics import blob_store_failures_counter
from credit_relay.utils.time_utils import epoch_millis


class BlobStoreClient:
    """Append-only client: pin JSON, fetch it back by content id"""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or default_settings
        self.timeout = self.settings.http_timeout_seconds
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def put(self, blob: Dict[str, Any], kind: str = "loan_application") -> str:
        """
        Pin a JSON document and return its content identifier.

        Raises:
            ConfigurationError: If Pinata credentials are not set
            StoreUnavailable: On timeout, HTTP errors, rejected credentials or invalid response
        """
        api_key, secret = self.settings.require("pinata_api_key", "pinata_secret_api_key")
        timestamp = str(epoch_millis())
        payload = {
            "pinataContent": blob,
            "pinataMetadata": {
                "name": f"{kind} - {timestamp}",
                "keyvalues": {"timestamp": timestamp, "type": kind},
            },
        }

        async with self._client() as client:
            try:
                response = await client.post(
                    f"{self.settings.pinata_api_base}/pinning/pinJSONToIPFS",
                    json=payload,
                    headers={"pinata_api_key": api_key, "pinata_secret_api_key": secret},
                )
                response.raise_for_status()
                return response.json()["IpfsHash"]

            except httpx.TimeoutException as e:
                blob_store_failures_counter.labels(operation="put").inc()
                raise StoreUnavailable(f"Pinning service timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                blob_store_failures_counter.labels(operation="put").inc()
                raise StoreUnavailable(f"Pinning service error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                blob_store_failures_counter.labels(operation="put").inc()
                raise StoreUnavailable(f"Pinning service unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                blob_store_failures_counter.labels(operation="put").inc()
                raise StoreUnavailable(f"Invalid response from pinning service: {e}") from e

    async def get(self, reference: str) -> Any:
        """
        Fetch pinned JSON through the IPFS gateway.

        Raises:
            NotFound: Gateway cannot resolve the reference
            StoreUnavailable: On timeout, other HTTP errors or a non-JSON body
        """
        async with self._client() as client:
            try:
                response = await client.get(f"{self.settings.ipfs_gateway_url}/ipfs/{reference}")
                if response.status_code in (400, 404):
                    raise NotFound(f"No content for reference {reference}")
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                blob_store_failures_counter.labels(operation="get").inc()
                raise StoreUnavailable(f"IPFS gateway timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                blob_store_failures_counter.labels(operation="get").inc()
                raise StoreUnavailable(f"IPFS gateway error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                blob_store_failures_counter.labels(operation="get").inc()
                raise StoreUnavailable(f"IPFS gateway unreachable: {e}") from e
            except ValueError as e:
                blob_store_failures_counter.labels(operation="get").inc()
                raise StoreUnavailable(f"Content for {reference} is not JSON: {e}") from e
