"""Bearer token validation against an OIDC provider.

Tokens are RS256 JWTs signed by the identity provider. Signing keys are
discovered through the provider's ``.well-known/openid-configuration``
document and kept for a configurable time-to-live.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

import httpx
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError

if TYPE_CHECKING:
    from shared_kernel.auth.observability import JWTValidatorProbe

DISCOVERY_PATH = "/.well-known/openid-configuration"

_VERIFY_ALL = {
    "verify_signature": True,
    "verify_aud": True,
    "verify_iss": True,
    "verify_exp": True,
    "verify_iat": True,
}


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a validated token.

    Attributes:
        sub: Stable subject identifier of the caller.
        username: Display name, when the provider sends one.
        role: Raw role claim, when present. Mapping it onto an
            application role is left to the caller.
    """

    sub: str
    username: str | None = None
    role: str | None = None


class InvalidTokenError(Exception):
    """Raised when a bearer token cannot be accepted."""


class SigningKeyCache:
    """Signing keys fetched from the provider, kept for ``ttl``.

    Concurrent callers that find the cache stale wait on one fetch.
    """

    def __init__(
        self,
        issuer_url: str,
        probe: JWTValidatorProbe,
        ttl: timedelta = timedelta(hours=24),
    ):
        self._issuer_url = issuer_url
        self._probe = probe
        self._ttl = ttl
        self._keys: dict[str, Any] | None = None
        self._expires_at: datetime | None = None
        self._lock = asyncio.Lock()

    def _fresh(self) -> bool:
        return (
            self._keys is not None
            and self._expires_at is not None
            and datetime.now(tz=timezone.utc) < self._expires_at
        )

    async def get(self) -> dict[str, Any]:
        if not self._fresh():
            async with self._lock:
                if not self._fresh():
                    self._keys = await self._fetch()
                    self._expires_at = datetime.now(tz=timezone.utc) + self._ttl
                    return self._keys
        self._probe.signing_keys_cache_hit()
        return self._keys  # type: ignore[return-value]

    def invalidate(self) -> None:
        """Force the next lookup to go back to the provider."""
        self._expires_at = None

    async def _fetch(self) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient() as client:
                discovery = await client.get(f"{self._issuer_url}{DISCOVERY_PATH}")
                discovery.raise_for_status()
                jwks_uri = discovery.json().get("jwks_uri")
                if not jwks_uri:
                    raise InvalidTokenError(
                        "Identity provider did not advertise a jwks_uri"
                    )
                response = await client.get(jwks_uri)
                response.raise_for_status()
                keys = response.json()
        except InvalidTokenError as e:
            self._probe.signing_keys_fetch_failed(error=str(e))
            raise
        except (httpx.HTTPError, ValueError) as e:
            self._probe.signing_keys_fetch_failed(error=str(e))
            raise InvalidTokenError(
                f"Could not load signing keys from identity provider: {e}"
            ) from e

        self._probe.signing_keys_fetched(key_count=len(keys.get("keys", [])))
        return keys


class JWTValidator:
    """Checks signature, expiry, issuer and audience of bearer tokens."""

    def __init__(
        self,
        issuer_url: str,
        audience: str,
        probe: JWTValidatorProbe,
        user_id_claim: str = "sub",
        username_claim: str = "preferred_username",
        role_claim: str = "role",
        jwks_cache_ttl: timedelta = timedelta(hours=24),
    ):
        """
        Args:
            issuer_url: OIDC issuer URL, also the expected ``iss`` claim.
            audience: Expected ``aud`` claim.
            probe: Receives validation and key-fetch events.
            user_id_claim: Claim holding the subject identifier.
            username_claim: Claim holding the display name.
            role_claim: Claim holding the role. Dotted paths reach into
                nested claims, e.g. ``realm_access.roles``.
            jwks_cache_ttl: How long fetched signing keys are reused.
        """
        self._issuer_url = issuer_url.rstrip("/")
        self._audience = audience
        self._probe = probe
        self._user_id_claim = user_id_claim
        self._username_claim = username_claim
        self._role_claim = role_claim
        self._keys = SigningKeyCache(self._issuer_url, probe, jwks_cache_ttl)

    async def validate_token(self, token: str) -> TokenClaims:
        """Validate ``token`` and return the caller's identity.

        Raises:
            InvalidTokenError: If the token is malformed, expired, signed by
                an unknown key, or issued for another audience or issuer.
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise self._reject("Malformed token", e) from e
        if not header:
            raise self._reject("Malformed token")

        keys = await self._keys.get()
        try:
            claims = jwt.decode(
                token,
                keys,
                algorithms=["RS256"],
                audience=self._audience,
                issuer=self._issuer_url,
                options=_VERIFY_ALL,
            )
        except ExpiredSignatureError as e:
            raise self._reject("Token has expired", e) from e
        except JWTClaimsError as e:
            raise self._reject(_claims_reason(e), e) from e
        except JWTError as e:
            reason = "Invalid signature" if "signature" in str(e).lower() else None
            raise self._reject(reason or "Invalid token", e) from e

        subject = claims.get(self._user_id_claim)
        if subject is None:
            raise self._reject(f"Missing required claim: {self._user_id_claim}")

        username = claims.get(self._username_claim)
        self._probe.token_validated(user_id=str(subject))
        return TokenClaims(
            sub=str(subject),
            username=str(username) if username is not None else None,
            role=claim_at_path(claims, self._role_claim),
        )

    def _reject(
        self, reason: str, cause: Exception | None = None
    ) -> InvalidTokenError:
        self._probe.token_validation_failed(reason=reason)
        message = f"{reason}: {cause}" if cause is not None else reason
        return InvalidTokenError(message)


def _claims_reason(error: JWTClaimsError) -> str:
    text = str(error).lower()
    if "audience" in text:
        return "Invalid audience"
    if "issuer" in text:
        return "Invalid issuer"
    return "Invalid claims"


def claim_at_path(claims: dict[str, Any], path: str) -> str | None:
    """Read a claim by dotted path. A list-valued claim yields its first entry."""
    value: Any = claims
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    if isinstance(value, list):
        value = value[0] if value else None
    return str(value) if value is not None else None
