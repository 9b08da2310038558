"""
Bearer-credential lookup against the hosted auth service.
"""

import asyncio
from typing import Optional
import logging

import aiohttp

from community_search.common.outcome import Outcome
from community_search.config.search_config import (
    AUTH_URL,
    CONCURRENCY_CONFIG,
    SERVICE_ROLE_KEY
)

logger = logging.getLogger("api")


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Token from an ``Authorization: Bearer <token>`` header, or None."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class IdentityClient:
    """Resolves a bearer credential to a user id via GET {auth_url}/auth/v1/user."""

    def __init__(
        self,
        auth_url: str = None,
        api_key: str = None,
        timeout: float = None
    ):
        """
        Initialize identity client.

        Args:
            auth_url: Auth service base URL (empty disables lookups)
            api_key: Service API key sent as the ``apikey`` header
            timeout: Request timeout in seconds
        """
        self.auth_url = (auth_url if auth_url is not None else AUTH_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else SERVICE_ROLE_KEY
        self.timeout = timeout or CONCURRENCY_CONFIG['identity_timeout_seconds']

    @property
    def enabled(self) -> bool:
        return bool(self.auth_url)

    async def resolve(self, authorization: Optional[str]) -> Outcome:
        """
        Resolve the caller's user id.

        Args:
            authorization: Raw Authorization header value

        Returns:
            Outcome carrying the user id; degraded with None when the lookup
            is disabled, the header is absent, or the auth service fails
        """
        token = extract_bearer_token(authorization)
        if token is None:
            return Outcome.ok(None, "identity")
        if not self.enabled:
            return Outcome.degraded(None, "identity lookup not configured", "identity")

        headers = {
            'Authorization': f'Bearer {token}',
            'apikey': self.api_key,
        }

        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(f"{self.auth_url}/auth/v1/user", headers=headers) as response:
                    if response.status != 200:
                        logger.info(f"Could not get user from token: HTTP {response.status}")
                        return Outcome.degraded(None, f"HTTP {response.status}", "identity")

                    user_data = await response.json()
                    user_id = user_data.get('id') if isinstance(user_data, dict) else None
                    return Outcome.ok(user_id, "identity")

        except asyncio.TimeoutError:
            logger.warning(f"Identity lookup timed out after {self.timeout}s")
            return Outcome.degraded(None, "identity lookup timed out", "identity")
        except aiohttp.ClientError as e:
            logger.warning(f"Identity lookup failed: {e}")
            return Outcome.degraded(None, str(e), "identity")
        except ValueError as e:
            logger.warning(f"Identity response was not JSON: {e}")
            return Outcome.degraded(None, str(e), "identity")
