"""Bearer token authentication shared by the API contexts."""

from shared_kernel.auth.jwt_validator import (
    InvalidTokenError,
    JWTValidator,
    SigningKeyCache,
    TokenClaims,
)
from shared_kernel.auth.observability import (
    DefaultJWTValidatorProbe,
    JWTValidatorProbe,
)

__all__ = [
    "DefaultJWTValidatorProbe",
    "InvalidTokenError",
    "JWTValidator",
    "JWTValidatorProbe",
    "SigningKeyCache",
    "TokenClaims",
]
