"""
Upload of registration evidence to a Walrus publisher.
"""
import logging
from typing import Optional

import requests

from .exceptions import StorageError

logger = logging.getLogger(__name__)

DEFAULT_PUBLISHER_URL = "https://publisher.walrus-testnet.walrus.space"
DEFAULT_AGGREGATOR_URL = "https://aggregator.walrus-testnet.walrus.space"


class WalrusClient:
    """Stores blobs through a Walrus publisher and builds aggregator links."""

    def __init__(
        self,
        publisher_url: str = DEFAULT_PUBLISHER_URL,
        aggregator_url: str = DEFAULT_AGGREGATOR_URL,
        timeout: int = 60,
        session: Optional[requests.Session] = None
    ):
        self.publisher_url = publisher_url.rstrip("/")
        self.aggregator_url = aggregator_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def upload(self, data: bytes) -> str:
        """
        Store a blob and return its id.

        The publisher answers either ``newlyCreated.blobObject.blobId`` for a
        new blob or ``alreadyCertified.blobId`` for a known one.

        Raises:
            StorageError: If the upload fails or no blob id is returned
        """
        logger.info(f"Uploading {len(data)} bytes to Walrus")
        try:
            response = self.session.put(f"{self.publisher_url}/v1/blobs", data=data, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
        except ValueError as e:
            raise StorageError(f"Invalid JSON from Walrus publisher: {e}") from e
        except requests.RequestException as e:
            raise StorageError(f"Walrus upload failed: {e}") from e

        blob_id = (
            ((result.get("newlyCreated") or {}).get("blobObject") or {}).get("blobId")
            or (result.get("alreadyCertified") or {}).get("blobId")
        )
        if not blob_id:
            raise StorageError(f"Missing blob id in Walrus response: {result}")
        logger.info(f"Walrus upload complete: {blob_id}")
        return blob_id

    def blob_url(self, blob_id: str) -> str:
        return f"{self.aggregator_url}/v1/blobs/{blob_id}"
