"""Identity provider token verification.

Credentials are checked by the identity provider (Clerk). This module only
verifies the signed session token it issues and reads the caller's subject,
name and email from it.
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import jwt
from fastapi import Header

from motelmap.config import settings
from motelmap.ids import UserSubject
from motelmap.utils.exceptions import authentication_error, AuthenticationError
from motelmap.utils.logger import logger


@dataclass(frozen=True)
class Identity:
    """An authenticated caller as reported by the identity provider."""
    subject: UserSubject
    name: str
    email: str


class IdentityProvider:
    """Verifies identity provider session tokens."""

    def __init__(
        self,
        jwks_url: Optional[str] = None,
        issuer: Optional[str] = None,
        secret: Optional[str] = None,
    ):
        if not jwks_url and not secret:
            raise ValueError(
                "Identity provider must be configured. "
                "Set CLERK_JWKS_URL or IDP_JWT_SECRET environment variables."
            )
        self.issuer = issuer
        self.secret = secret
        self._jwks_client = jwt.PyJWKClient(jwks_url) if jwks_url else None

    def _decode(self, token: str) -> dict:
        options = {"verify_aud": False, "require": ["sub"]}
        if self._jwks_client is not None:
            signing_key = self._jwks_client.get_signing_key_from_jwt(token)
            return jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256"],
                issuer=self.issuer,
                options=options,
            )
        return jwt.decode(
            token,
            self.secret,
            algorithms=["HS256"],
            issuer=self.issuer,
            options=options,
        )

    def resolve(self, token: str) -> Identity:
        """
        Resolve a session token to an identity.

        Args:
            token: Bearer token from the Authorization header

        Returns:
            Identity for the token's subject

        Raises:
            AuthenticationError: If the token is invalid or expired
        """
        try:
            claims = self._decode(token)
        except jwt.PyJWTError as e:
            logger.warning(f"[AUTH] Rejected session token: {e}")
            raise AuthenticationError("Invalid session token")

        return Identity(
            subject=UserSubject(str(claims["sub"])),
            name=claims.get("name") or "Unknown",
            email=claims.get("email") or "",
        )


@lru_cache
def get_identity_provider() -> IdentityProvider:
    return IdentityProvider(
        jwks_url=settings.clerk_jwks_url,
        issuer=settings.clerk_issuer,
        secret=settings.idp_jwt_secret,
    )


def get_optional_identity(
    authorization: Optional[str] = Header(None, description="Bearer session token"),
) -> Optional[Identity]:
    """
    Resolve the caller's identity, or None for anonymous callers.

    Raises HTTPException if a token is present but invalid.
    """
    if not authorization:
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise authentication_error("Invalid authorization header")

    try:
        return get_identity_provider().resolve(token.strip())
    except AuthenticationError as e:
        raise authentication_error(str(e))
