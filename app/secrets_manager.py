import json
import os
import time
from typing import Any, Dict, Optional, Tuple
import logging

import boto3

logger = logging.getLogger(__name__)

class SecretsManager:
    """
    Reads credentials from AWS Secrets Manager and keeps them in a short-lived
    in-process cache so rotated values are picked up without a restart.
    """

    def __init__(self, region_name: Optional[str] = None, cache_ttl: float = 300):
        """
        Args:
            region_name: AWS region name, defaults to the AWS_REGION env variable
            cache_ttl: Seconds a fetched secret stays valid in the cache
        """
        self.region_name = region_name or os.environ.get("AWS_REGION", "us-east-1")
        self._client = None
        self._cache: Dict[str, Tuple[float, Any]] = {}
        self._cache_ttl = cache_ttl

    @property
    def client(self):
        """Lazy-loaded Secrets Manager client"""
        if self._client is None:
            session = boto3.session.Session()
            self._client = session.client(
                service_name="secretsmanager",
                region_name=self.region_name
            )
        return self._client

    def clear_cache(self):
        logger.info("Clearing secrets cache")
        self._cache.clear()

    def get_secret(self, secret_id: str) -> str:
        """
        Get a secret value, served from the cache while it is fresh.

        A failed refresh falls back to the stale cached value when there is one.
        """
        now = time.monotonic()
        cached = self._cache.get(secret_id)
        if cached and now - cached[0] < self._cache_ttl:
            logger.debug(f"Returning cached secret for {secret_id}")
            return cached[1]

        logger.info(f"Fetching fresh secret for {secret_id}")
        try:
            response = self.client.get_secret_value(SecretId=secret_id)
        except Exception as e:
            if cached:
                logger.warning(f"Fresh secret fetch failed for {secret_id}, using stale cache: {e}")
                return cached[1]
            logger.error(f"Failed to get secret {secret_id}: {e}")
            raise

        value = response["SecretBinary"] if "SecretBinary" in response else response["SecretString"]
        self._cache[secret_id] = (now, value)
        return value

    def get_json_secret(self, secret_id: str) -> Dict[str, Any]:
        return json.loads(self.get_secret(secret_id))

    def get_db_credentials(self) -> Dict[str, str]:
        """RDS-managed secret holding at least username and password."""
        return self.get_json_secret(os.environ.get("DATABASE_SECRETS_NAME", "chat-backend/db"))

    def get_stream_credentials(self) -> Dict[str, str]:
        """Stream Chat credentials, a JSON secret with api_key and api_secret."""
        return self.get_json_secret(os.environ.get("STREAM_SECRETS_NAME", "stream-chat-credentials"))

    def get_api_key(self, service_name: str) -> str:
        """Get API key for a specific service"""
        return self.get_secret(f"{service_name}-api-key")
