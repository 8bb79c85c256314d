"""JWT authentication provider implementation.

Accepts two kinds of bearer token:

- asymmetric tokens (ES256/RS256) issued by an external identity provider,
  verified against its JWKS endpoint (``JWKS_URL``);
- HS256 tokens signed with ``JWT_SECRET_KEY`` (local development and tests).

Expected payload:
    {
        "sub": "user-uuid",
        "email": "user@example.com",
        "name": "Ada",                       # optional
        "user_metadata": {"display_name": ...},  # optional
        "exp": 1234567890
    }
"""

from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

import httpx
import structlog
from jose import JWTError, jwk, jwt

from core.config import settings
from infrastructure.auth.provider import TokenUser

logger = structlog.get_logger()

_ASYMMETRIC_ALGORITHMS = frozenset({"ES256", "RS256"})

# Module-level JWKS cache (kid -> key data), fetched lazily
_jwks_cache: dict[str, Any] | None = None


def clear_jwks_cache() -> None:
    """Forget cached signing keys (used on key rotation and in tests)."""
    global _jwks_cache
    _jwks_cache = None


async def _get_jwks_keys() -> dict[str, Any]:
    """Fetch and cache the identity provider's signing keys."""
    global _jwks_cache
    if _jwks_cache is not None:
        return _jwks_cache

    jwks_url = settings.jwks_url
    if not jwks_url:
        return {}

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(jwks_url, timeout=10.0)
            response.raise_for_status()
            jwks_data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("jwks_fetch_failed", url=jwks_url, error=str(exc))
        return {}

    _jwks_cache = {k["kid"]: k for k in jwks_data.get("keys", []) if k.get("kid")}
    logger.info("jwks_fetched", key_count=len(_jwks_cache))
    return _jwks_cache


class JWTAuthProvider:
    """JWT-based authentication provider."""

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Validate a JWT and extract the principal.

        Args:
            token: The JWT to validate

        Returns:
            TokenUser if valid, None if invalid, expired or missing claims
        """
        try:
            header = jwt.get_unverified_header(token)
            alg = header.get("alg", self._algorithm)

            if alg in _ASYMMETRIC_ALGORITHMS:
                payload = await self._validate_with_jwks(token, header, alg)
            else:
                payload = jwt.decode(
                    token,
                    self._secret_key,
                    algorithms=[self._algorithm],
                    options={"verify_aud": False},
                )
        except JWTError:
            return None

        if payload is None:
            return None

        user_id = payload.get("sub")
        email = payload.get("email")
        if not user_id or not email:
            return None

        try:
            uid = UUID(user_id)
        except ValueError:
            return None

        user_metadata = payload.get("user_metadata") or {}
        display_name = (
            user_metadata.get("display_name")
            or user_metadata.get("full_name")
            or payload.get("name")
        )

        return TokenUser(
            id=uid,
            email=email,
            display_name=display_name,
            role=payload.get("role"),
        )

    async def _validate_with_jwks(
        self, token: str, header: dict, alg: str
    ) -> Optional[dict]:
        """Verify an asymmetric JWT against the JWKS key named by ``kid``."""
        kid = header.get("kid")
        if not kid:
            return None

        key_data = (await _get_jwks_keys()).get(kid)
        if not key_data:
            # Unknown kid: refetch once in case keys were rotated
            clear_jwks_cache()
            key_data = (await _get_jwks_keys()).get(kid)
            if not key_data:
                logger.warning("jwks_key_not_found", kid=kid)
                return None

        key = jwk.construct(key_data, algorithm=alg)
        return jwt.decode(  # type: ignore[no-any-return]
            token,
            key,
            algorithms=[alg],
            options={"verify_aud": False},
        )

    def create_token(self, user: TokenUser) -> str:
        """
        Create an HS256 JWT for a user (local development and tests).

        Args:
            user: The user to create a token for

        Returns:
            The generated JWT string
        """
        expire = datetime.utcnow() + timedelta(minutes=self._expire_minutes)

        payload: dict = {
            "sub": str(user.id),
            "email": user.email,
            "exp": expire,
            "user_metadata": {"display_name": user.display_name},
        }
        if user.role:
            payload["role"] = user.role

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
