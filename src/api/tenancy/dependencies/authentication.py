"""Authentication dependencies for the tenancy API.

Callers present an OIDC bearer token. The token is validated against the
provider's JWKS and mapped to a CurrentUser carrying the caller's role.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2AuthorizationCodeBearer
from ulid import ULID

from infrastructure.settings import get_oidc_settings
from shared_kernel.auth import InvalidTokenError, JWTValidator
from shared_kernel.auth.observability import DefaultJWTValidatorProbe
from shared_kernel.observability_context import ObservationContext
from tenancy.application.observability import (
    AuthenticationProbe,
    DefaultAuthenticationProbe,
)
from tenancy.application.value_objects import CurrentUser
from tenancy.domain.value_objects import Role, UserId

REQUEST_ID_HEADER = "X-Request-ID"


def _create_oauth2_scheme() -> OAuth2AuthorizationCodeBearer:
    """Create OAuth2 security scheme for Swagger UI integration.

    Uses the OIDC issuer URL to configure authorization code flow endpoints.
    """
    issuer = get_oidc_settings().issuer_url

    return OAuth2AuthorizationCodeBearer(
        authorizationUrl=f"{issuer}/protocol/openid-connect/auth",
        tokenUrl=f"{issuer}/protocol/openid-connect/token",
        refreshUrl=f"{issuer}/protocol/openid-connect/token",
        scopes={
            "openid": "OpenID Connect",
            "profile": "User profile",
        },
        auto_error=False,
    )


oauth2_scheme = _create_oauth2_scheme()


@lru_cache
def get_jwt_validator() -> JWTValidator:
    """Get cached JWT validator.

    A single instance is reused across requests so its JWKS cache is shared.
    """
    settings = get_oidc_settings()
    return JWTValidator(
        issuer_url=settings.issuer_url,
        audience=settings.effective_audience,
        probe=DefaultJWTValidatorProbe(),
        user_id_claim=settings.user_id_claim,
        username_claim=settings.username_claim,
        role_claim=settings.role_claim,
    )


def get_authentication_probe() -> AuthenticationProbe:
    """Get AuthenticationProbe instance."""
    return DefaultAuthenticationProbe()


def resolve_role(claimed: str | None, default_role: str) -> Role:
    """Map a role claim onto a Role, falling back to the configured default."""
    if claimed is not None:
        try:
            return Role(claimed.strip().lower())
        except ValueError:
            pass
    return Role(default_role)


async def get_current_user(
    validator: Annotated[JWTValidator, Depends(get_jwt_validator)],
    probe: Annotated[AuthenticationProbe, Depends(get_authentication_probe)],
    token: Annotated[str | None, Depends(oauth2_scheme)] = None,
) -> CurrentUser:
    """Authenticate the caller from the Authorization: Bearer header.

    Raises:
        HTTPException 401: If the token is missing or invalid
    """
    if token is None:
        probe.authentication_failed(reason="Missing authorization")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        claims = await validator.validate_token(token)
    except InvalidTokenError as e:
        probe.authentication_failed(reason=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    settings = get_oidc_settings()
    role = resolve_role(claims.role, settings.default_role)
    if claims.role is None or role.value != claims.role.strip().lower():
        probe.role_defaulted(user_id=claims.sub, claimed=claims.role, role=role.value)

    username = claims.username or claims.sub
    probe.user_authenticated(user_id=claims.sub, username=username, role=role.value)
    return CurrentUser(user_id=UserId(value=claims.sub), username=username, role=role)


def get_observation_context(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ObservationContext:
    """Request-scoped metadata bound to every probe used by the request."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(ULID())
    return ObservationContext(
        request_id=request_id,
        user_id=current_user.user_id.value,
        role=current_user.role.value,
    )
