"""Probe for bearer token validation.

Events cover accepted and rejected tokens and the signing key cache.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class JWTValidatorProbe(Protocol):
    """Events raised while validating bearer tokens."""

    def token_validated(self, user_id: str) -> None: ...

    def token_validation_failed(self, reason: str) -> None: ...

    def signing_keys_fetched(self, key_count: int) -> None: ...

    def signing_keys_cache_hit(self) -> None: ...

    def signing_keys_fetch_failed(self, error: str) -> None: ...

    def with_context(self, context: ObservationContext) -> JWTValidatorProbe: ...


class DefaultJWTValidatorProbe:
    """structlog-backed JWTValidatorProbe."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _bound(self) -> dict[str, Any]:
        return self._context.as_dict() if self._context else {}

    def with_context(self, context: ObservationContext) -> DefaultJWTValidatorProbe:
        return DefaultJWTValidatorProbe(logger=self._logger, context=context)

    def token_validated(self, user_id: str) -> None:
        self._logger.debug("bearer_token_accepted", user_id=user_id, **self._bound())

    def token_validation_failed(self, reason: str) -> None:
        self._logger.warning("bearer_token_rejected", reason=reason, **self._bound())

    def signing_keys_fetched(self, key_count: int) -> None:
        self._logger.info(
            "signing_keys_fetched", key_count=key_count, **self._bound()
        )

    def signing_keys_cache_hit(self) -> None:
        self._logger.debug("signing_keys_cache_hit", **self._bound())

    def signing_keys_fetch_failed(self, error: str) -> None:
        self._logger.error("signing_keys_fetch_failed", error=error, **self._bound())
